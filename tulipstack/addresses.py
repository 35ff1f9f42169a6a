"""Ethernet and IPv4 addresses."""

from __future__ import annotations

from typing import ClassVar

from .textutils import split


def _parse(text: str, delimiter: str, base: int, size: int, kind: str) -> bytes:
    parts = split(text, delimiter)
    if len(parts) != size:
        raise ValueError(f"{text!r} is not a valid {kind} address")
    octets = []
    for part in parts:
        try:
            value = int(part, base)
        except ValueError:
            raise ValueError(f"{text!r} is not a valid {kind} address") from None
        if not 0 <= value <= 0xFF:
            raise ValueError(f"{text!r} is not a valid {kind} address")
        octets.append(value)
    return bytes(octets)


def _coerce(value: object, size: int, kind: str) -> bytes:
    if value is None:
        return bytes(size)
    if isinstance(value, int):
        raise TypeError(f"cannot build a {kind} address from an int")
    octets = bytes(value)  # type: ignore[call-overload]
    if len(octets) != size:
        raise ValueError(f"a {kind} address has {size} octets, got {len(octets)}")
    return octets


class EthernetAddress:
    """A 48-bit hardware address."""

    __slots__ = ("_octets",)

    SIZE = 6
    BROADCAST: ClassVar[EthernetAddress]

    def __init__(self, value: object = None) -> None:
        if isinstance(value, str):
            self._octets = _parse(value, ":", 16, self.SIZE, "ethernet")
        else:
            self._octets = _coerce(value, self.SIZE, "ethernet")

    def __str__(self) -> str:
        return ":".join(f"{octet:02x}" for octet in self._octets)

    def __repr__(self) -> str:
        return f"EthernetAddress({str(self)!r})"

    def __bytes__(self) -> bytes:
        return self._octets

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EthernetAddress):
            return NotImplemented
        return self._octets == other._octets

    def __hash__(self) -> int:
        return hash((EthernetAddress, self._octets))

    def is_empty(self) -> bool:
        """True for the all-zero address."""
        return not any(self._octets)


class IPv4Address:
    """A 32-bit IPv4 address."""

    __slots__ = ("_octets",)

    SIZE = 4
    ANY: ClassVar[IPv4Address]
    BROADCAST: ClassVar[IPv4Address]

    def __init__(self, value: object = None) -> None:
        if isinstance(value, str):
            self._octets = _parse(value, ".", 10, self.SIZE, "IPv4")
        else:
            self._octets = _coerce(value, self.SIZE, "IPv4")

    def __str__(self) -> str:
        return ".".join(str(octet) for octet in self._octets)

    def __repr__(self) -> str:
        return f"IPv4Address({str(self)!r})"

    def __bytes__(self) -> bytes:
        return self._octets

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IPv4Address):
            return NotImplemented
        return self._octets == other._octets

    def __hash__(self) -> int:
        return hash((IPv4Address, self._octets))

    def is_empty(self) -> bool:
        """True for 0.0.0.0."""
        return not any(self._octets)


EthernetAddress.BROADCAST = EthernetAddress(b"\xff" * 6)
IPv4Address.ANY = IPv4Address(bytes(4))
IPv4Address.BROADCAST = IPv4Address(b"\xff" * 4)