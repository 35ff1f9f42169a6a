"""Wall-clock and tick-counter access with a test offset."""

from __future__ import annotations

import time

SECOND = 1_000_000_000
MILLISECOND = 1_000_000

# Ticks come from a monotonic microsecond counter.
TICKS_PER_SECOND = MILLISECOND


def _scale(value: int, numerator: int, denominator: int) -> int:
    """Return ``value * numerator / denominator`` rounded half away from zero."""
    product = value * numerator
    sign = -1 if product < 0 else 1
    quotient = (abs(product) * 2 + denominator) // (2 * denominator)
    return sign * quotient


class Clock:
    """A clock giving epoch nanoseconds and high-resolution ticks."""

    SECOND = SECOND
    MILLISECOND = MILLISECOND

    def __init__(self, ticks_per_second: int = TICKS_PER_SECOND) -> None:
        if ticks_per_second <= 0:
            raise ValueError("ticks_per_second must be positive")
        self.ticks_per_second = ticks_per_second
        self._offset = 0

    @property
    def offset(self) -> int:
        """The offset in nanoseconds added to every reading."""
        return self._offset

    def _cycles(self) -> int:
        return _scale(time.monotonic_ns(), self.ticks_per_second, SECOND)

    def instant(self) -> int:
        """Return the current tick count, offset included."""
        return self._cycles() + self.to_ticks(self._offset)

    def now(self) -> int:
        """Return the current epoch time in nanoseconds, offset included."""
        return time.time_ns() + self._offset

    def to_nanos(self, ticks: int) -> int:
        """Convert ticks to nanoseconds."""
        return _scale(ticks, SECOND, self.ticks_per_second)

    def to_ticks(self, nanos: int) -> int:
        """Convert nanoseconds to ticks."""
        return _scale(nanos, self.ticks_per_second, SECOND)

    def reset_offset(self) -> None:
        self._offset = 0

    def offset_by(self, offset: int) -> None:
        """Move the clock forward by ``offset`` nanoseconds."""
        self._offset += offset


_CLOCK = Clock()


def get_clock() -> Clock:
    """Return the process-wide clock."""
    return _CLOCK