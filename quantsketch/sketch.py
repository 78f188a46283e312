"""Quantile sketch: sparse logarithmic bins plus summary statistics."""

from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from .bin import Bin, format_bins
from .config import Config, default
from .store import SparseStore
from .summary import Summary

# nominal size in bytes of a summary: four floats and one counter
_SUMMARY_SIZE = 40

_BYTE_SIZES = ("B", "kB", "MB", "GB", "TB", "PB", "EB")

_STAT_PERCENTILES = (1.0, 50.0, 75.0, 90.0, 95.0, 99.0)


@dataclass(eq=False)
class Sketch:
    """A sketch for tracking quantiles of a stream of values."""

    store: SparseStore = field(default_factory=SparseStore)
    basic: Summary = field(default_factory=Summary)

    def __str__(self) -> str:
        return format_sketch(self, default())

    def mem_size(self) -> tuple[int, int]:
        """Return the (used, allocated) memory estimate in bytes."""
        used, allocated = self.store.mem_size()
        return used + _SUMMARY_SIZE, allocated + _SUMMARY_SIZE

    def insert_many(self, config: Config, values: Iterable[float]) -> None:
        """Insert all ``values`` into the sketch."""
        keys: list[int] = []
        for v in values:
            self.basic.insert(v)
            keys.append(config.key(v))
        self.store.insert(config, keys)

    def reset(self) -> None:
        """Return the sketch to its empty state."""
        self.basic.reset()
        self.store.count = 0
        self.store.bins = []

    def raw_bins(self) -> tuple[int, str]:
        """Return the total count and the bins rendered on a single line."""
        return self.store.count, format_bins(self.store.bins).replace("\n", "")

    def insert(self, config: Config, *args: float) -> None:
        """Insert one or more values; ``insert_many`` is preferred for batches."""
        self.insert_many(config, args)

    def merge(self, config: Config, other: Sketch) -> None:
        """Merge ``other`` into this sketch without modifying ``other``."""
        self.basic.merge(other.basic)
        self.store.merge(config, other.store)

    def quantile(self, config: Config, q: float) -> float:
        """Return a value v such that about ``count * q`` items are <= v.

        ``q <= 0`` gives the minimum and ``q >= 1`` the maximum; an empty
        sketch gives 0.
        """
        if self.store.count == 0:
            return 0.0
        if q <= 0:
            return self.basic.min
        if q >= 1:
            return self.basic.max

        r_want = rank(self.store.count, q)
        n = 0.0
        for i, b in enumerate(self.store.bins):
            n += b.n
            if n <= r_want:
                continue

            weight = (n - r_want) / b.n
            v_low = config.f64(b.k)
            v_high = v_low * config.gamma_v
            if i == 0:
                v_low = self.basic.min
            return v_low * weight + v_high * (1 - weight)

        # the count can be greater than the sum of the bins
        return self.basic.max

    def copy_to(self, dst: Sketch) -> None:
        """Make ``dst`` a deep copy of this sketch."""
        dst.store.bins = [Bin(b.k, b.n) for b in self.store.bins]
        dst.store.count = self.store.count
        dst.basic = replace(self.basic)

    def copy(self) -> Sketch:
        """Return a deep copy of this sketch."""
        dst = Sketch()
        self.copy_to(dst)
        return dst

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sketch):
            return NotImplemented
        return (
            self.basic == other.basic
            and self.store.count == other.store.count
            and self.store.bins == other.store.bins
        )

    def approx_equals(self, other: Sketch, e: float) -> bool:
        """Like equality, but allowing an absolute error ``e`` on sum and average."""
        if abs(self.basic.sum - other.basic.sum) > e:
            return False
        if abs(self.basic.avg - other.basic.avg) > e:
            return False
        if self.basic.min != other.basic.min:
            return False
        if self.basic.max != other.basic.max:
            return False
        if self.basic.cnt != other.basic.cnt:
            return False
        if self.store.count != other.store.count:
            return False
        return self.store.bins == other.store.bins


def rank(count: int, q: float) -> float:
    """Rank of quantile ``q`` among ``count`` items, rounded half to even."""
    return float(round(q * (count - 1)))


def format_bytes(n: int) -> str:
    """Render a byte count in SI units, such as ``83 MB``."""
    if n < 10:
        return f"{n} B"
    e = math.floor(math.log(n) / math.log(1000))
    suffix = _BYTE_SIZES[e]
    val = math.floor(n / 1000**e * 10 + 0.5) / 10
    if val < 10:
        return f"{val:.1f} {suffix}"
    return f"{val:.0f} {suffix}"


def _indent(text: str, level: int) -> str:
    space = " " * (2 * level)
    return space + text.replace("\n", "\n" + space).strip()


def format_sketch(sketch: Sketch, config: Config) -> str:
    """Render a multi-line description of the sketch: bins, size and stats."""
    lines = ["sketch:", _indent("bins:", 1), _indent(format_bins(sketch.store.bins), 2)]

    used, allocated = sketch.mem_size()
    lines.append(_indent("size:", 1))
    lines.append(
        _indent(
            f"used={format_bytes(used)} allocated={format_bytes(allocated)} "
            f"{used / allocated * 100:3.2f}%",
            2,
        )
    )
    n_bins = len(sketch.store.bins)
    lines.append(_indent(f"len={n_bins} cap={n_bins}", 2))

    lines.append(_indent("stats:", 1))
    stats = " ".join(
        f"{p:02g}={sketch.quantile(config, p / 100):.2f}" for p in _STAT_PERCENTILES
    )
    lines.append("    " + stats)
    lines.append(_indent(str(sketch.basic), 2))
    return "\n".join(lines) + "\n"