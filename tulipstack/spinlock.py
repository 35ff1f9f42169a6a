"""A busy-waiting lock."""

from __future__ import annotations

import threading
import time


class SpinLock:
    """A lock that spins until it can take its flag."""

    def __init__(self) -> None:
        self._flag = threading.Lock()

    @property
    def locked(self) -> bool:
        return self._flag.locked()

    def lock(self) -> None:
        while not self._flag.acquire(blocking=False):
            time.sleep(0)

    def unlock(self) -> None:
        """Clear the flag; clearing an already clear flag does nothing."""
        if self._flag.locked():
            self._flag.release()

    def __enter__(self) -> SpinLock:
        self.lock()
        return self

    def __exit__(self, *args: object) -> None:
        self.unlock()