"""An insert-optimised sketch that buffers keys before flushing them."""

from __future__ import annotations

from dataclasses import dataclass, field

from .config import default
from .key import KeyCount
from .sketch import Sketch

AGENT_BUF_CAP = 512

_agent_config = default()


@dataclass
class Agent:
    """A sketch that buffers inserted keys and flushes them in batches."""

    sketch: Sketch = field(default_factory=Sketch)
    buf: list[int] = field(default_factory=list)
    count_buf: list[KeyCount] = field(default_factory=list)

    def is_empty(self) -> bool:
        """Return True if nothing has been inserted."""
        return self.sketch.basic.cnt == 0 and not self.buf

    def finish(self) -> Sketch | None:
        """Flush pending inserts and return a deep copy, or None if empty."""
        self._flush()
        if self.is_empty():
            return None
        return self.sketch.copy()

    def _flush(self) -> None:
        if self.buf:
            self.sketch.store.insert(_agent_config, self.buf)
            self.buf = []
        if self.count_buf:
            self.sketch.store.insert_counts(_agent_config, self.count_buf)
            self.count_buf = []

    def reset(self) -> None:
        """Return the agent sketch to its empty state."""
        self.sketch.reset()
        self.buf = []

    def insert(self, v: float, sample_rate: float = 1.0) -> None:
        """Insert ``v``, weighted by the inverse of ``sample_rate``.

        Sample rates outside (0, 1] are treated as 1.
        """
        k = _agent_config.key(v)
        if sample_rate <= 0 or sample_rate > 1:
            sample_rate = 1.0

        if sample_rate == 1:
            self.sketch.basic.insert(v)
            self.buf.append(k)
            if len(self.buf) < AGENT_BUF_CAP:
                return
        else:
            # truncated 1 / sample_rate as count, to match histograms
            n = 1 / sample_rate
            self.sketch.basic.insert_n(v, n)
            self.count_buf.append(KeyCount(k=k, n=int(n)))
        self._flush()

    def insert_interpolate(self, lower: float, upper: float, count: int) -> None:
        """Spread ``count`` linearly over the bins between ``lower`` and ``upper``."""
        cfg = _agent_config
        keys = list(range(cfg.key(lower), cfg.key(upper) + 1))
        if not keys:
            raise ValueError(f"lower bound {lower:g} is above upper bound {upper:g}")

        whats_left = int(count)
        distance = upper - lower
        start_idx = 0
        lower_b = cfg.bin_low(keys[start_idx])
        remainder = 0.0

        for end_idx in range(1, len(keys)):
            if whats_left <= 0:
                break
            upper_b = cfg.bin_low(keys[end_idx])
            # share of the total distance covered by this bucket
            fkn = ((upper_b - lower_b) / distance) * count
            # only track the remainder when fkn > 1, to avoid many empty buckets
            if fkn > 1:
                remainder += fkn - int(fkn)
            kn = int(fkn)
            if remainder > 1:
                kn += 1
                remainder -= 1
            if kn > 0:
                kn = min(kn, whats_left)
                self.sketch.basic.insert_n(lower_b, float(kn))
                self.count_buf.append(KeyCount(k=keys[start_idx], n=kn))
                whats_left -= kn
                start_idx = end_idx
                lower_b = upper_b

        if whats_left > 0:
            self.sketch.basic.insert_n(cfg.bin_low(keys[start_idx]), float(whats_left))
            self.count_buf.append(KeyCount(k=keys[start_idx], n=whats_left))
        self._flush()