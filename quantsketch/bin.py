"""Bins: a key with a 16-bit count, plus helpers for lists of bins."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

MAX_BIN_WIDTH = 0xFFFF

# how many bins are printed per line
DEFAULT_BIN_PER_LINE = 32


@dataclass
class Bin:
    """A key and its count; the count never exceeds MAX_BIN_WIDTH."""

    k: int
    n: int = 0

    def incr_safe(self, by: int) -> int:
        """Add ``by`` to the count, saturating; return what did not fit."""
        nxt = by + self.n
        if nxt > MAX_BIN_WIDTH:
            self.n = MAX_BIN_WIDTH
            return nxt - MAX_BIN_WIDTH
        self.n = nxt
        return 0


def append_safe(bins: list[Bin], k: int, n: int) -> None:
    """Append bins with key ``k`` holding ``n`` in total, splitting on overflow.

    On overflow the partial bin comes first and the full bins follow.
    """
    if n <= MAX_BIN_WIDTH:
        bins.append(Bin(k, n))
        return

    full, remainder = divmod(n, MAX_BIN_WIDTH)
    if remainder:
        bins.append(Bin(k, remainder))
    bins.extend(Bin(k, MAX_BIN_WIDTH) for _ in range(full))


def n_sum(bins: Iterable[Bin]) -> int:
    """Total count over the bins."""
    return sum(b.n for b in bins)


def format_bins(bins: Iterable[Bin], max_per_line: int = DEFAULT_BIN_PER_LINE) -> str:
    """Render bins as ``<k>:<n>`` tokens, wrapping every ``max_per_line`` bins.

    A ``max_per_line`` of zero or less never wraps.
    """
    parts: list[str] = []
    for i, b in enumerate(bins):
        if i:
            wrap = max_per_line > 0 and i % max_per_line == 0
            parts.append("\n" if wrap else " ")
        parts.append(f"{b.k}:{b.n}")
    return "".join(parts)