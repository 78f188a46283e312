"""Sketch parameters: relative accuracy, minimum value and bin limit."""

from __future__ import annotations

import math

from .key import MAX_KEY, inf_key, is_inf

DEFAULT_BIN_LIMIT = 4096
DEFAULT_EPS = 1.0 / 128.0
DEFAULT_MIN = 1e-9

_MAX_UINT16 = 0xFFFF


class Config:
    """Read-only parameters shared by many sketches.

    Keys satisfy ``gamma**k <= v < gamma**(k+1)``; values with absolute value
    below ``norm_min`` map to key 0 and values above ``norm_max`` to +/-Inf.
    """

    def __init__(self, eps: float = 0.0, min_value: float = 0.0, bin_limit: int = 0):
        if bin_limit == 0:
            bin_limit = DEFAULT_BIN_LIMIT
        elif bin_limit < 0:
            raise ValueError(f"binLimit can't be negative: {bin_limit}")
        self.bin_limit = bin_limit

        if eps == 0:
            eps = DEFAULT_EPS
        elif eps > 1 or eps < 0:
            raise ValueError(f"{eps:g}: eps must be between 0 and 1")

        eps *= 2
        self.gamma_v = 1 + eps
        self.gamma_ln = math.log1p(eps)

        if min_value == 0:
            min_value = DEFAULT_MIN
        elif min_value < 0:
            raise ValueError(f"{min_value:g}: min must be > 0")

        # pick the next smaller power of gamma for min; it gets key 1
        emin = math.floor(self.log_gamma(min_value))
        self.norm_bias = -emin + 1
        self.norm_emin = emin
        self.norm_min = self.f64(1)
        self.norm_max = self.f64(MAX_KEY)

        if self.norm_min > min_value:
            raise ValueError(f"{self.norm_min:g} > {min_value:g}")

    def __repr__(self) -> str:
        return (
            f"Config(bin_limit={self.bin_limit}, gamma={self.gamma_v!r}, "
            f"bias={self.norm_bias}, min={self.norm_min!r}, max={self.norm_max!r})"
        )

    def max_count(self) -> int:
        """The maximum number of values that can be inserted."""
        return self.bin_limit * _MAX_UINT16

    def f64(self, k: int) -> float:
        """The lower bound of the bucket for key ``k``: gamma**k."""
        if k < 0:
            return -self.f64(-k)
        if is_inf(k):
            return math.inf
        if k == 0:
            return 0.0
        return self.pow_gamma(float(k - self.norm_bias))

    def bin_low(self, k: int) -> float:
        """The lower bound of the bin holding key ``k``."""
        return self.f64(k)

    def key(self, v: float) -> int:
        """Return the key ``k`` such that gamma**k <= v < gamma**(k+1)."""
        if v < 0:
            return -self.key(-v)
        if v == 0 or v < self.norm_min:
            return 0
        if math.isnan(v):
            return 1
        if math.isinf(v):
            return inf_key(1)

        # round half to even so that key(f64(k)) == k
        i = round(self.log_gamma(v)) + self.norm_bias
        if i > MAX_KEY:
            return inf_key(1)
        if i < 1:
            return 1
        return i

    def log_gamma(self, v: float) -> float:
        """Logarithm of ``v`` in base gamma."""
        return math.log(v) / self.gamma_ln

    def pow_gamma(self, y: float) -> float:
        """gamma raised to the power ``y``."""
        try:
            return math.pow(self.gamma_v, y)
        except OverflowError:
            return math.inf


def default() -> Config:
    """Return a config with the default parameters."""
    return Config()