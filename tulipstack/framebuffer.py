"""A bounded FIFO of timestamped frames."""

from __future__ import annotations

import mmap
from collections import deque
from dataclasses import dataclass

# Per-frame bookkeeping: an 8-byte timestamp and a 4-byte length.
FRAME_OVERHEAD = 12


def fit_capacity(size: int) -> int:
    """Round ``size`` up to whole pages, then to the next power of two."""
    if size < 1:
        raise ValueError(f"capacity must be positive, got {size}")
    page = mmap.PAGESIZE
    result = -(-size // page) * page
    return 1 if result == 1 else 1 << (result - 1).bit_length()


@dataclass(frozen=True)
class Frame:
    """A buffered frame with its timestamp."""

    timestamp: int
    data: bytes

    @property
    def length(self) -> int:
        return len(self.data)


class FrameBuffer:
    """Frames kept in arrival order within a fixed byte capacity."""

    def __init__(self, capacity: int) -> None:
        self.capacity = fit_capacity(capacity)
        self._frames: deque[Frame] = deque()
        self._used = 0

    def push(self, data: bytes, ts: int) -> bool:
        """Append a frame; return False if it does not fit."""
        needed = len(data) + FRAME_OVERHEAD
        if self._used + needed > self.capacity:
            return False
        self._frames.append(Frame(ts, bytes(data)))
        self._used += needed
        return True

    def pop(self) -> None:
        """Drop the oldest frame, if any."""
        if not self._frames:
            return
        frame = self._frames.popleft()
        self._used -= frame.length + FRAME_OVERHEAD

    def peek(self) -> Frame:
        """Return the oldest frame."""
        if not self._frames:
            raise IndexError("frame buffer is empty")
        return self._frames[0]

    def empty(self) -> bool:
        return not self._frames

    def clear(self) -> None:
        self._frames.clear()
        self._used = 0

    def __len__(self) -> int:
        """Bytes in use, frame overhead included."""
        return self._used