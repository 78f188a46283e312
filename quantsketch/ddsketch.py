"""Helpers for turning fractional per-key counts into integer key counts."""

from __future__ import annotations

from collections.abc import Iterable

from .key import KeyCount


def convert_float_counts_to_int_counts(
    float_key_counts: Iterable[tuple[int, float]],
) -> list[KeyCount]:
    """Convert ``(key, count)`` pairs with float counts into integer KeyCounts.

    The result is sorted by key. Fractional parts are carried forward to the
    next key so that the total is preserved; a leftover of at least one half
    at the end is rounded up into the last key.
    """
    ordered = sorted(float_key_counts, key=lambda kc: kc[0])

    key_counts: list[KeyCount] = []
    leftover = 0.0
    for key, count in ordered:
        count += leftover
        whole = int(count)
        leftover = count - whole
        key_counts.append(KeyCount(k=key, n=whole))

    if leftover >= 0.5 and key_counts:
        last = key_counts[-1]
        key_counts[-1] = KeyCount(k=last.k, n=last.n + 1)

    return key_counts