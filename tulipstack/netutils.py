"""Checksums, dumps and hashing over raw packets."""

from __future__ import annotations

from collections.abc import Iterator

from .addresses import IPv4Address
from .ethernet import HEADER_LEN as ETHERNET_HEADER_LEN
from .transport import IncompleteDataError

IPV4_HEADER_LEN = 20
_TCP_OFFSET_INDEX = 12
_UINT16_MAX = 0xFFFF


def checksum(seed: int, data: bytes) -> int:
    """Return the 16-bit one's-complement sum of ``data`` starting at ``seed``."""
    total = seed & _UINT16_MAX
    even = len(data) - len(data) % 2
    words = [int.from_bytes(data[i : i + 2], "big") for i in range(0, even, 2)]
    if len(data) % 2:
        words.append(data[-1] << 8)
    for word in words:
        total += word
        if total > _UINT16_MAX:
            total = (total & _UINT16_MAX) + 1
    return total


def hexdump(data: bytes) -> str:
    """Format ``data`` eight bytes per line, each line prefixed by its offset."""
    lines = []
    for start in range(0, len(data), 8):
        chunk = data[start : start + 8]
        body = " ".join(f"0x{byte:02x}" for byte in chunk)
        trailer = "" if len(chunk) == 8 else " "
        lines.append(f"0x{start:03x}: {body}{trailer}\n")
    return "".join(lines)


def header_length(packet: bytes) -> int:
    """Return the combined Ethernet, IPv4 and TCP header length of ``packet``."""
    offset_index = ETHERNET_HEADER_LEN + IPV4_HEADER_LEN + _TCP_OFFSET_INDEX
    if len(packet) <= offset_index:
        raise IncompleteDataError("packet too short to hold a TCP header")
    length = ETHERNET_HEADER_LEN + IPV4_HEADER_LEN + ((packet[offset_index] >> 4) << 2)
    if length > len(packet):
        raise IncompleteDataError("packet shorter than its headers")
    return length


def cap(length: int) -> int:
    """Clamp ``length`` to the 16-bit range."""
    return min(length, _UINT16_MAX)


def _bits(data: bytes) -> Iterator[int]:
    for byte in data:
        for shift in range(7, -1, -1):
            yield (byte >> shift) & 1


def toeplitz(
    saddr: IPv4Address,
    daddr: IPv4Address,
    sport: int,
    dport: int,
    key: bytes,
    init: int = 0,
) -> int:
    """Return the Toeplitz (RSS) hash of a TCP/IPv4 four-tuple."""
    if len(key) < 4:
        raise ValueError("the hash key needs at least 4 bytes")
    nbits = 8 * len(key)
    mask = (1 << nbits) - 1
    window = int.from_bytes(key, "big")
    result = init & 0xFFFFFFFF
    payload = bytes(saddr) + bytes(daddr) + sport.to_bytes(2, "big") + dport.to_bytes(2, "big")
    for bit in _bits(payload):
        if bit:
            result ^= window >> (nbits - 32)
        # The key is shifted in place, so the last byte takes its low bit
        # from the already shifted first byte.
        window = ((window << 1) & mask) | ((window >> (nbits - 2)) & 1)
    return result


def ipv4_checksum(header: bytes) -> int:
    """Return the sum of a 20-byte IPv4 header; 0xffff means it is valid."""
    if len(header) < IPV4_HEADER_LEN:
        raise IncompleteDataError("IPv4 header needs 20 bytes")
    total = checksum(0, header[:IPV4_HEADER_LEN])
    return _UINT16_MAX if total == 0 else total