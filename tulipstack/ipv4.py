"""IPv4 packet production and processing."""

from __future__ import annotations

import enum
import logging
import struct
from dataclasses import dataclass
from typing import Any

from .addresses import IPv4Address
from .ethernet import ETHTYPE_IP, EthernetProducer
from .netutils import IPV4_HEADER_LEN as HEADER_LEN
from .netutils import ipv4_checksum
from .transport import (
    CorruptedDataError,
    IncompleteDataError,
    ProtocolError,
    Producer,
    UnsupportedProtocolError,
)

TTL = 64
VHL = 0x45

# vhl, tos, len, ipid, ipoffset, ttl, proto, ipchksum, srcipaddr, destipaddr
_HEADER = struct.Struct("!BBHHHBBH4s4s")

_log = logging.getLogger(__name__)


class Protocol(enum.IntEnum):
    """IP protocol numbers handled by the stack."""

    ICMP = 1
    TCP = 6
    TEST = 254


@dataclass
class IPv4Statistics:
    """Counters kept by the IPv4 layer."""

    recv: int = 0
    sent: int = 0
    drop: int = 0
    vhlerr: int = 0
    frgerr: int = 0
    chkerr: int = 0


class IPv4Producer(Producer):
    """Writes IPv4 headers into buffers of an Ethernet producer."""

    def __init__(self, ethernet: EthernetProducer, host_address: IPv4Address) -> None:
        self._ethernet = ethernet
        self.host_address = host_address
        self.destination_address = IPv4Address()
        self.default_router_address = IPv4Address()
        self.net_mask = IPv4Address.BROADCAST
        self.protocol = 0
        self.statistics = IPv4Statistics()
        self._ipid = 0
        self._pending: dict[int, tuple[memoryview, memoryview]] = {}

    def mss(self) -> int:
        return self._ethernet.mss() - HEADER_LEN

    def is_local(self, address: IPv4Address) -> bool:
        """True if ``address`` is on the host's network."""
        return all(
            (a ^ h) & m == 0
            for a, h, m in zip(bytes(address), bytes(self.host_address), bytes(self.net_mask))
        )

    def prepare(self) -> memoryview:
        """Return the payload part of a new packet with its header filled in."""
        self._ethernet.type = ETHTYPE_IP
        packet = self._ethernet.prepare()
        self._ipid = (self._ipid + 1) & 0xFFFF
        packet[0:HEADER_LEN] = _HEADER.pack(
            VHL,
            0,
            HEADER_LEN,
            self._ipid,
            0,
            TTL,
            int(self.protocol),
            0,
            bytes(self.host_address),
            bytes(self.destination_address),
        )
        payload = packet[HEADER_LEN:]
        self._pending[id(payload)] = (payload, packet)
        return payload

    def _claim(self, buf: memoryview) -> memoryview:
        try:
            return self._pending.pop(id(buf))[1]
        except KeyError:
            raise ValueError("buffer was not prepared by this producer") from None

    def commit(self, length: int, buf: memoryview, mss: int = 0) -> None:
        packet = self._claim(buf)
        total = length + HEADER_LEN
        packet[2:4] = total.to_bytes(2, "big")
        packet[10:12] = b"\x00\x00"
        summed = ipv4_checksum(bytes(packet[:HEADER_LEN]))
        packet[10:12] = (~summed & 0xFFFF).to_bytes(2, "big")
        self.statistics.sent += 1
        _log.debug("committing packet: %dB", length)
        self._ethernet.commit(total, packet, mss)

    def release(self, buf: memoryview) -> None:
        self._ethernet.release(self._claim(buf))


class IPv4Processor:
    """Validates incoming IPv4 packets and hands their payload on."""

    def __init__(self, host_address: IPv4Address) -> None:
        self.host_address = host_address
        self.source_address = IPv4Address()
        self.destination_address = IPv4Address()
        self.protocol = 0
        self.statistics = IPv4Statistics()
        self.ethernet: Any = None
        self.raw: Any = None
        self.icmp: Any = None
        self.tcp: Any = None

    def _handler(self, proto: int) -> Any:
        if proto == Protocol.TCP:
            return self.tcp
        if proto == Protocol.ICMP:
            return self.icmp
        if proto == Protocol.TEST:
            return self.raw
        return None

    def run(self) -> None:
        for handler in (self.tcp, self.icmp, self.raw):
            if handler is not None:
                handler.run()

    def process(self, data: bytes, ts: int) -> None:
        self.statistics.recv += 1
        if len(data) < HEADER_LEN:
            self.statistics.drop += 1
            raise IncompleteDataError("IPv4 header needs 20 bytes")
        vhl, _, total, _, offset, _, proto, _, src, dst = _HEADER.unpack_from(data)
        if vhl != VHL:
            self.statistics.drop += 1
            self.statistics.vhlerr += 1
            _log.error("invalid protocol type")
            raise ProtocolError("invalid IPv4 version or header length")
        if offset & 0x3FFF:
            self.statistics.drop += 1
            self.statistics.frgerr += 1
            _log.error("IP fragment are not supported")
            raise UnsupportedProtocolError("IP fragments are not supported")
        destination = IPv4Address(dst)
        if destination != self.host_address:
            self.statistics.drop += 1
            _log.debug("%s <> %s (proto: %d)", destination, self.host_address, proto)
            return
        summed = ipv4_checksum(bytes(data[:HEADER_LEN]))
        if summed != 0xFFFF:
            self.statistics.drop += 1
            self.statistics.chkerr += 1
            _log.error("invalid checksum: 0x%x", summed)
            raise CorruptedDataError(f"invalid IPv4 checksum 0x{summed:04x}")
        self.source_address = IPv4Address(src)
        self.destination_address = destination
        self.protocol = proto
        if proto not in Protocol.__members__.values():
            self.statistics.drop += 1
            raise UnsupportedProtocolError(f"unsupported IP protocol {proto}")
        handler = self._handler(proto)
        if handler is None:
            raise UnsupportedProtocolError(f"no handler for IP protocol {proto}")
        handler.process(data[HEADER_LEN:total], ts)

    def sent(self, buf: Any) -> None:
        """Tell the handler of a sent packet's protocol that it left."""
        _, _, total, _, _, _, proto, _, _, _ = _HEADER.unpack_from(buf)
        handler = self._handler(proto)
        if handler is None:
            raise UnsupportedProtocolError(f"no handler for IP protocol {proto}")
        handler.sent(buf[HEADER_LEN:total])