"""Stack errors and the producer interface shared by every layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class StackError(Exception):
    """Base class of the errors raised by the stack."""


class ProtocolError(StackError):
    """A packet broke the rules of its protocol."""


class UnsupportedProtocolError(StackError):
    """A packet carries a protocol that is not handled."""


class CorruptedDataError(StackError):
    """A packet failed its checksum."""


class IncompleteDataError(StackError):
    """A packet is too short for what it claims to hold."""


class NoMoreResourcesError(StackError):
    """No buffer or slot is left."""


class HardwareTranslationMissingError(StackError):
    """No hardware address is known for a destination."""


class OperationInProgressError(StackError):
    """The operation cannot proceed until an earlier one completes."""


class Producer(ABC):
    """Something that hands out send buffers and sends them."""

    @abstractmethod
    def mss(self) -> int:
        """Return the segment size."""

    @abstractmethod
    def prepare(self) -> Any:
        """Return a writable buffer at least ``mss()`` bytes long."""

    @abstractmethod
    def commit(self, length: int, buf: Any, mss: int = 0) -> None:
        """Send the first ``length`` bytes of a prepared buffer."""

    @abstractmethod
    def release(self, buf: Any) -> None:
        """Give back a prepared buffer."""