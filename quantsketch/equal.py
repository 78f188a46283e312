"""Approximate equality checks for summaries, measured in units of least precision."""

from __future__ import annotations

import math
import struct

from .summary import Summary

ULP_LIMIT = 256
MAX_UINT64 = (1 << 64) - 1


class SummaryMismatchError(ValueError):
    """Raised when two summaries differ beyond the allowed tolerance."""


def _float64_bits(x: float) -> int:
    return struct.unpack("<Q", struct.pack("<d", x))[0]


def ulp_distance(a: float, b: float) -> int:
    """Absolute difference between ``a`` and ``b`` in units of least precision.

    NaN and infinities that are not equal give the maximum uint64 value.
    """
    if a == b:
        return 0
    if math.isinf(a) or math.isinf(b):
        return MAX_UINT64
    if math.isnan(a) or math.isnan(b):
        return MAX_UINT64
    if math.copysign(1.0, a) != math.copysign(1.0, b):
        return (_float64_bits(abs(a)) + _float64_bits(abs(b))) & MAX_UINT64

    return abs(_float64_bits(a) - _float64_bits(b))


def check_float64_equal(name: str, a: float, e: float) -> int:
    """Return the ULP distance of ``a`` and ``e``; raise if it exceeds the limit."""
    ulp = ulp_distance(a, e)
    if ulp <= ULP_LIMIT:
        return ulp
    raise SummaryMismatchError(
        f"{name}: (act) {a:g} != {e:g} (exp) ulp={ulp} limit={ULP_LIMIT}"
    )


def check_int_equal(name: str, a: int, e: int) -> None:
    """Raise if the two integers differ."""
    if a != e:
        raise SummaryMismatchError(f"{name}: (act) {a} != {e} (exp)")


def check_equal(a: Summary, e: Summary) -> None:
    """Raise SummaryMismatchError if the summaries are not equal."""
    check_int_equal("Count", int(a.cnt), int(e.cnt))
    check_float64_equal("Min", a.min, e.min)
    check_float64_equal("Max", a.max, e.max)
    check_float64_equal("Sum", a.sum, e.sum)
    check_float64_equal("Avg", a.avg, e.avg)