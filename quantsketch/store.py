"""Sparse bin storage: sorted bins with saturating 16-bit counts."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from .bin import MAX_BIN_WIDTH, Bin, append_safe, format_bins
from .config import Config
from .key import KeyCount

# nominal sizes in bytes, used for memory accounting
_BIN_SIZE = 4
_STORE_SIZE = 32


@dataclass
class SparseStore:
    """Bins sorted by key, together with the total count they hold."""

    bins: list[Bin] = field(default_factory=list)
    count: int = 0

    def cols(self) -> tuple[list[int], list[int]]:
        """Return the keys and the counts of the bins as two lists."""
        return [b.k for b in self.bins], [b.n for b in self.bins]

    def mem_size(self) -> tuple[int, int]:
        """Return the (used, allocated) memory estimate in bytes."""
        used = _STORE_SIZE + len(self.bins) * _BIN_SIZE
        return used, used

    def merge(self, config: Config, other: SparseStore) -> None:
        """Merge ``other`` into this store without modifying ``other``."""
        self.count += other.count
        tmp: list[Bin] = []
        bins = self.bins
        s_idx = 0

        for ob in other.bins:
            while s_idx < len(bins) and bins[s_idx].k < ob.k:
                tmp.append(bins[s_idx])
                s_idx += 1

            if s_idx >= len(bins) or bins[s_idx].k > ob.k:
                tmp.append(Bin(ob.k, ob.n))
            else:
                append_safe(tmp, ob.k, ob.n + bins[s_idx].n)
                s_idx += 1

        tmp.extend(bins[s_idx:])
        self.bins = trim_left(tmp, config.bin_limit)

    def insert_counts(self, config: Config, key_counts: Iterable[KeyCount]) -> None:
        """Add each key with its count, keeping the bins sorted."""
        kcs = sorted(key_counts, key=lambda kc: kc.k)
        tmp: list[Bin] = []
        bins = self.bins
        s_idx = key_idx = 0

        while s_idx < len(bins) and key_idx < len(kcs):
            b = bins[s_idx]
            vk, kn = kcs[key_idx].k, kcs[key_idx].n
            if b.k < vk:
                tmp.append(b)
                s_idx += 1
            elif b.k > vk:
                append_safe(tmp, vk, kn)
                self.count += kn
                key_idx += 1
            else:
                append_safe(tmp, b.k, b.n + kn)
                self.count += kn
                s_idx += 1
                key_idx += 1

        tmp.extend(bins[s_idx:])

        for kc in kcs[key_idx:]:
            append_safe(tmp, kc.k, kc.n)
            self.count += kc.n

        self.bins = trim_left(tmp, config.bin_limit)

    def insert(self, config: Config, keys: Iterable[int]) -> None:
        """Add one count for each key, keeping the bins sorted."""
        keys = sorted(keys)
        self.count += len(keys)
        tmp: list[Bin] = []
        bins = self.bins
        s_idx = key_idx = 0

        while s_idx < len(bins) and key_idx < len(keys):
            b = bins[s_idx]
            vk = keys[key_idx]
            if b.k < vk:
                tmp.append(b)
                s_idx += 1
            elif b.k > vk:
                kn = buf_count_leading_equal(keys, key_idx)
                append_safe(tmp, vk, kn)
                key_idx += kn
            else:
                kn = buf_count_leading_equal(keys, key_idx)
                append_safe(tmp, b.k, b.n + kn)
                s_idx += 1
                key_idx += kn

        tmp.extend(bins[s_idx:])

        while key_idx < len(keys):
            kn = buf_count_leading_equal(keys, key_idx)
            append_safe(tmp, keys[key_idx], kn)
            key_idx += kn

        self.bins = trim_left(tmp, config.bin_limit)

    def __str__(self) -> str:
        return format_bins(self.bins)


def trim_left(bins: Sequence[Bin], max_bucket_cap: int) -> list[Bin]:
    """Fold the lowest bins into the next one so at most ``max_bucket_cap`` remain.

    Counts that do not fit in a single bin are kept in extra full bins placed
    before the remaining ones. A cap of zero disables trimming. The input bins
    are left unmodified.
    """
    if max_bucket_cap == 0 or len(bins) <= max_bucket_cap:
        return list(bins)

    n_remove = len(bins) - max_bucket_cap
    missing = 0
    overflow: list[Bin] = []

    for b in bins[:n_remove]:
        missing += b.n
        if missing > MAX_BIN_WIDTH:
            overflow.append(Bin(b.k, MAX_BIN_WIDTH))
            missing -= MAX_BIN_WIDTH

    pivot = Bin(bins[n_remove].k, bins[n_remove].n)
    missing = pivot.incr_safe(missing)
    if missing > 0:
        append_safe(overflow, pivot.k, missing)

    return overflow + [pivot] + list(bins[n_remove + 1:])


def buf_count_leading_equal(keys: Sequence[int], start: int) -> int:
    """Number of consecutive keys from ``start`` that equal ``keys[start]``."""
    if start == len(keys) - 1:
        return 1

    first = keys[start]
    i = start
    while i < len(keys) and keys[i] == first:
        i += 1
    return i - start