import pytest

from quantsketch.bin import MAX_BIN_WIDTH, Bin, format_bins, n_sum
from quantsketch.config import Config, default
from quantsketch.key import KeyCount
from quantsketch.store import SparseStore, buf_count_leading_equal, trim_left


def _parse_n(tok: str) -> int:
    if not tok.startswith("max"):
        return int(tok)
    n = MAX_BIN_WIDTH
    if tok == "max":
        return n
    op, modifier = tok[3], int(tok[4:])
    if op == "-":
        return n - modifier
    if op == "*":
        return n * modifier
    if op == "/":
        return n // modifier
    raise ValueError(tok)


def build_store(dsl: str) -> SparseStore:
    store = SparseStore()
    if not dsl:
        return store
    for tok in dsl.split(" "):
        k, _, n = tok.partition(":")
        count = _parse_n(n)
        assert count <= MAX_BIN_WIDTH
        store.count += count
        store.bins.append(Bin(int(k), count))
    return store


@pytest.mark.parametrize(
    "s, o, exp, bin_limit",
    [
        ("1:1", "", "1:1", 0),
        ("", "1:1", "1:1", 0),
        ("1:3", "1:2", "1:5", 0),
        ("1:max-1", "1:max-2", "1:max-3 1:max", 0),
        ("1:1 2:1 3:1", "5:1 6:1 10:1", "1:1 2:1 3:1 5:1 6:1 10:1", 0),
        (
            "0:1 1:1 2:1 3:1 4:1 5:1 6:1 7:1 8:1 9:1 10:1",
            "0:1 1:1 2:1 3:1 4:1 5:1 6:1 7:1 8:1 9:1",
            "8:18 9:2 10:1",
            3,
        ),
    ],
)
def test_merge(s, o, exp, bin_limit):
    config = Config(bin_limit=bin_limit) if bin_limit else default()
    store, other, expected = build_store(s), build_store(o), build_store(exp)

    store.merge(config, other)

    assert store.count == expected.count
    assert n_sum(store.bins) == expected.count
    assert str(store) == str(expected)
    assert store == expected


def test_merge_does_not_mutate_other():
    store = build_store("1:max-1 2:1")
    other = build_store("1:max-2 2:3")
    snapshot = build_store("1:max-2 2:3")
    store.merge(default(), other)
    assert other == snapshot
    assert store.count == snapshot.count + MAX_BIN_WIDTH - 1 + 1


@pytest.mark.parametrize(
    "s, e, b",
    [
        ("", "", 0),
        ("1:1", "1:1", 0),
        ("1:1", "1:1", 1),
        ("1:max 2:max 3:max", "2:max 2:max 3:max", 2),
        (
            "1:max 1:max 1:1 2:max 3:1 4:1",
            "1:65535 1:65535 2:1 2:65535 3:1 4:1",
            3,
        ),
        ("1:max-1 2:max-1 3:1", "1:max-1 2:max-1 3:1", 3),
    ],
)
def test_trim_left(s, e, b):
    store, expected = build_store(s), build_store(e)
    store.bins = trim_left(store.bins, b)

    assert store.count == expected.count
    assert n_sum(store.bins) == expected.count
    assert format_bins(store.bins) == format_bins(expected.bins)
    assert store == expected


def test_trim_left_leaves_input_untouched():
    bins = build_store("1:max 2:max 3:max").bins
    trim_left(bins, 2)
    assert bins == build_store("1:max 2:max 3:max").bins


@pytest.mark.parametrize(
    "start, expected, keys",
    [
        ("", "0:3 1:1 2:1 5:1 9:1", [0, 0, 0, 1, 2, 5, 9]),
        ("0:2", "-3:1 -2:1 -1:1 0:2", [-1, -2, -3]),
        ("0:2", "0:4", [0, 0]),
        ("0:max", "0:1 0:max", [0]),
        ("0:max 0:max", "0:1 0:max 0:max", [0]),
        ("0:1 0:max 0:max", "0:3 0:max 0:max", [0, 0]),
        ("1:1 3:1 4:1 5:1 6:1 7:1", "1:1 2:1 3:2 4:1 5:1 6:1 7:1", [2, 3]),
        ("1:1 3:1", "1:1 2:3 3:1", [2, 2, 2]),
        ("0:max-3", "0:2 0:max", [0] * 5),
    ],
)
def test_insert(start, expected, keys):
    store = build_store(start)
    store.insert(default(), keys)

    exp = build_store(expected)
    assert store.count == exp.count
    assert n_sum(store.bins) == exp.count
    assert str(store) == str(exp)
    assert store.bins == exp.bins


def test_insert_counts_matches_insert():
    keys = [9, 0, 5, 0, 2, 1, 0]
    by_keys = SparseStore()
    by_keys.insert(default(), keys)

    by_counts = SparseStore()
    by_counts.insert_counts(
        default(),
        [KeyCount(5, 1), KeyCount(0, 3), KeyCount(1, 1), KeyCount(9, 1), KeyCount(2, 1)],
    )
    assert by_counts == by_keys


def test_insert_counts_splits_overflow():
    store = build_store("3:1")
    store.insert_counts(default(), [KeyCount(1, MAX_BIN_WIDTH + 5)])
    assert store.bins == [Bin(1, 5), Bin(1, MAX_BIN_WIDTH), Bin(3, 1)]
    assert store.count == n_sum(store.bins)


def test_insert_counts_merges_with_existing_bin():
    store = build_store("1:max-1")
    store.insert_counts(default(), [KeyCount(1, 3)])
    assert store.bins == [Bin(1, 2), Bin(1, MAX_BIN_WIDTH)]
    assert store.count == MAX_BIN_WIDTH + 2


def test_insert_respects_bin_limit():
    store = SparseStore()
    store.insert(Config(bin_limit=3), list(range(10)))
    assert len(store.bins) == 3
    assert n_sum(store.bins) == store.count == 10


@pytest.mark.parametrize(
    "dsl, keys, counts",
    [
        ("", [], []),
        (
            "0:1 1:1 2:2 3:1 4:1 5:1 8:1 9:1 10:max",
            [0, 1, 2, 3, 4, 5, 8, 9, 10],
            [1, 1, 2, 1, 1, 1, 1, 1, 0xFFFF],
        ),
        ("0:1 0:max", [0, 0], [1, 0xFFFF]),
    ],
)
def test_cols(dsl, keys, counts):
    assert build_store(dsl).cols() == (keys, counts)


def test_buf_count_leading_equal():
    keys = [4, 5, 6, 8, 8, 8, 9]
    assert buf_count_leading_equal(keys, 3) == 3
    assert buf_count_leading_equal(keys, 4) == 2
    assert buf_count_leading_equal(keys, 6) == 1
    assert buf_count_leading_equal(keys, 0) == 1


def test_mem_size_grows_with_bins():
    small = build_store("1:1")
    large = build_store("1:1 2:1 3:1")
    small_used, small_alloc = small.mem_size()
    large_used, large_alloc = large.mem_size()
    assert large_used > small_used
    assert small_used <= small_alloc
    assert large_used <= large_alloc