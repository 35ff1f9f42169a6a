"""A fixed-capacity append buffer."""

from __future__ import annotations

from .netutils import cap


class Buffer:
    """Bytes appended up to a fixed size."""

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"buffer size must not be negative, got {size}")
        self.size = size
        self._data = bytearray()

    @property
    def data(self) -> bytes:
        return bytes(self._data)

    def append(self, data: bytes) -> bool:
        """Append ``data``; return False and change nothing if it does not fit."""
        if len(self._data) + len(data) > self.size:
            return False
        self._data += data
        return True

    def reset(self) -> None:
        self._data.clear()

    def available(self) -> int:
        return self.size - len(self._data)

    def fill(self) -> int:
        return len(self._data)

    def window(self) -> int:
        """Free space, clamped to 16 bits."""
        return cap(self.available())

    def empty(self) -> bool:
        return not self._data