"""Quantized keys: a signed 16-bit index into the logarithmic bucket space."""

from __future__ import annotations

from dataclasses import dataclass

UVINF = (1 << 15) - 1
UVNEGINF = -UVINF

# one spot is kept for +/- inf
MAX_KEY = UVINF - 1


@dataclass(frozen=True)
class KeyCount:
    """A key and an associated count."""

    k: int
    n: int


def is_inf(k: int) -> bool:
    """Return True if the key is the +Inf key.

    Negative keys are always resolved through their absolute value before
    this check is applied.
    """
    return k == UVINF


def key_to_str(k: int) -> str:
    """Render a key, spelling out the infinite keys."""
    if k == UVINF:
        return "+Inf"
    if k == UVNEGINF:
        return "-Inf"
    return str(k)


def inf_key(sign: int) -> int:
    """Return the +Inf key if ``sign >= 0``, the -Inf key otherwise."""
    return UVINF if sign >= 0 else UVNEGINF