"""Incremental summary statistics: min, max, sum, average and count."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Summary:
    """Basic incremental stats over a stream of values."""

    min: float = 0.0
    max: float = 0.0
    sum: float = 0.0
    avg: float = 0.0
    cnt: int = 0

    def reset(self) -> None:
        """Return the summary to its empty state."""
        self.min = 0.0
        self.max = 0.0
        self.sum = 0.0
        self.avg = 0.0
        self.cnt = 0

    def insert(self, v: float) -> None:
        """Add a single value to the summary."""
        if v > self.max or self.cnt == 0:
            self.max = v
        if v < self.min or self.cnt == 0:
            self.min = v

        self.cnt += 1
        self.sum += v
        # incremental average reduces precision errors
        self.avg += (v - self.avg) / self.cnt

    def insert_n(self, v: float, n: float) -> None:
        """Equivalent to inserting ``v`` ``n`` times, but faster."""
        self.merge(Summary(min=v, max=v, sum=n * v, avg=v, cnt=int(n)))

    def merge(self, other: Summary) -> None:
        """Merge another summary into this one without modifying it."""
        if self.cnt == 0:
            self.min = other.min
            self.max = other.max
            self.sum = other.sum
            self.avg = other.avg
            self.cnt = other.cnt
            return
        if other.cnt == 0:
            return

        if other.max > self.max:
            self.max = other.max
        if other.min < self.min:
            self.min = other.min

        self.cnt += other.cnt
        self.sum += other.sum
        self.avg = self.avg + (other.avg - self.avg) * other.cnt / self.cnt

    def __str__(self) -> str:
        return (
            f"min={self.min:.4f} max={self.max:.4f} avg={self.avg:.4f} "
            f"sum={self.sum:.4f} cnt={self.cnt}"
        )