"""ICMPv4 header layout and checksum."""

from __future__ import annotations

import struct
from dataclasses import dataclass

from . import netutils
from .transport import IncompleteDataError

_FORMAT = struct.Struct("!BBHHH")

HEADER_LEN = _FORMAT.size
ECHO_REPLY = 0
ECHO = 8


@dataclass(frozen=True)
class IcmpHeader:
    """An ICMPv4 echo header."""

    type: int
    icode: int = 0
    icmpchksum: int = 0
    id: int = 0
    seqno: int = 0

    @classmethod
    def unpack(cls, data: bytes) -> IcmpHeader:
        if len(data) < HEADER_LEN:
            raise IncompleteDataError("ICMP header needs 8 bytes")
        return cls(*_FORMAT.unpack_from(data))

    def pack(self) -> bytes:
        return _FORMAT.pack(self.type, self.icode, self.icmpchksum, self.id, self.seqno)


@dataclass
class IcmpStatistics:
    """Counts of ICMP packets received and sent."""

    recv: int = 0
    sent: int = 0


def checksum(data: bytes) -> int:
    """Return the sum of an ICMP header; 0xffff means it is valid."""
    if len(data) < HEADER_LEN:
        raise IncompleteDataError("ICMP header needs 8 bytes")
    total = netutils.checksum(0, data[:HEADER_LEN])
    return 0xFFFF if total == 0 else total