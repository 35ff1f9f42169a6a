"""Address resolution between IPv4 and Ethernet addresses."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from typing import Any

from .addresses import EthernetAddress, IPv4Address
from .clock import SECOND, Clock, get_clock
from .ethernet import ETHTYPE_ARP, ETHTYPE_IP, EthernetProducer
from .ipv4 import IPv4Producer
from .transport import IncompleteDataError

HWTYPE_ETH = 1
MAX_AGE = 120
TABLE_SIZE = 8
TIMER_PERIOD = 10 * SECOND

_REQUEST = 1
_REPLY = 2

# hwtype, protocol, hwlen, protolen, opcode, shwaddr, sipaddr, dhwaddr, dipaddr
_HEADER = struct.Struct("!HHBBH6s4s6s4s")
HEADER_LEN = _HEADER.size

_log = logging.getLogger(__name__)


def lookup(interface: str, address: IPv4Address) -> EthernetAddress | None:
    """Ask the host system for the hardware address of ``address``.

    No system table is consulted, so the answer is always unknown.
    """
    _log.debug("no system ARP table for %s on %s", address, interface)
    return None


@dataclass
class _Entry:
    ipaddr: IPv4Address = field(default_factory=IPv4Address)
    ethaddr: EthernetAddress = field(default_factory=EthernetAddress)
    time: int = 0


class _Timer:
    def __init__(self, clock: Clock, period: int) -> None:
        self._clock = clock
        self._period = period
        self._start = clock.now()

    def expired(self) -> bool:
        return self._clock.now() - self._start >= self._period

    def reset(self) -> int:
        """Restart the timer and return how many periods went by."""
        count = (self._clock.now() - self._start) // self._period
        self._start += count * self._period
        return count


class ArpProcessor:
    """Answers ARP requests and keeps a small IPv4-to-Ethernet table."""

    def __init__(
        self, ethernet: EthernetProducer, ipv4: IPv4Producer, clock: Clock | None = None
    ) -> None:
        self._ethernet = ethernet
        self._ipv4 = ipv4
        self._table = [_Entry() for _ in range(TABLE_SIZE)]
        self._time = 0
        self._timer = _Timer(clock if clock is not None else get_clock(), TIMER_PERIOD)

    def run(self) -> None:
        """Age the table, forgetting entries older than the maximum age."""
        if not self._timer.expired():
            return
        self._time = (self._time + self._timer.reset()) & 0xFF
        for entry in self._table:
            if entry.ipaddr.is_empty():
                continue
            if self._time - entry.time >= MAX_AGE:
                _log.debug("clearing entry for %s", entry.ipaddr)
                entry.ipaddr = IPv4Address()

    def process(self, data: bytes, ts: int) -> None:
        if len(data) < HEADER_LEN:
            raise IncompleteDataError("ARP packet needs 28 bytes")
        _, _, _, _, opcode, shw, sip, _, dip = _HEADER.unpack_from(data)
        sender_hw = EthernetAddress(shw)
        sender_ip = IPv4Address(sip)
        target_ip = IPv4Address(dip)
        host_ip = self._ipv4.host_address
        if opcode == _REQUEST:
            if target_ip != host_ip:
                _log.debug("X %s <> %s", target_ip, host_ip)
                return
            self._ethernet.type = ETHTYPE_ARP
            self._ethernet.destination_address = sender_hw
            out = self._ethernet.prepare()
            self.update(sender_ip, sender_hw)
            out[:HEADER_LEN] = _HEADER.pack(
                HWTYPE_ETH,
                ETHTYPE_IP,
                6,
                4,
                _REPLY,
                bytes(self._ethernet.host_address),
                bytes(host_ip),
                bytes(sender_hw),
                bytes(sender_ip),
            )
            _log.debug("(%s, %s) -> %s", self._ethernet.host_address, host_ip, sender_hw)
            self._ethernet.commit(HEADER_LEN, out)
        elif opcode == _REPLY:
            if target_ip != host_ip:
                return
            _log.debug("+ %s -> %s", sender_ip, sender_hw)
            self.update(sender_ip, sender_hw)

    def sent(self, buf: Any) -> None:
        self._ethernet.release(buf)

    def has(self, address: IPv4Address) -> bool:
        return self.query(address) is not None

    def discover(self, address: IPv4Address) -> None:
        """Broadcast a request for ``address`` unless it is already known."""
        if self.has(address):
            return
        target = self._hop_address(address)
        self._ethernet.type = ETHTYPE_ARP
        self._ethernet.destination_address = EthernetAddress.BROADCAST
        out = self._ethernet.prepare()
        out[:HEADER_LEN] = _HEADER.pack(
            HWTYPE_ETH,
            ETHTYPE_IP,
            6,
            4,
            _REQUEST,
            bytes(self._ethernet.host_address),
            bytes(self._ipv4.host_address),
            bytes(EthernetAddress()),
            bytes(target),
        )
        _log.debug("? %s", target)
        self._ethernet.commit(HEADER_LEN, out)

    def query(self, address: IPv4Address) -> EthernetAddress | None:
        """Return the hardware address to send to for ``address``, if known."""
        if address == IPv4Address.BROADCAST:
            return EthernetAddress.BROADCAST
        target = self._hop_address(address)
        for entry in self._table:
            if entry.ipaddr == target:
                return entry.ethaddr
        return None

    def update(self, ipaddr: IPv4Address, ethaddr: EthernetAddress) -> None:
        """Record a mapping, refreshing, filling a free slot or evicting one."""
        for entry in self._table:
            if entry.ipaddr.is_empty() or entry.ipaddr != ipaddr:
                continue
            entry.ethaddr = ethaddr
            entry.time = self._time
            return
        oldest = 0
        slot = None
        for entry in self._table:
            if entry.ipaddr.is_empty():
                slot = entry
                break
            oldest = entry.time
        if slot is None:
            slot = next(e for e in self._table if e.time == oldest)
        slot.ipaddr = ipaddr
        slot.ethaddr = ethaddr
        slot.time = self._time

    def _hop_address(self, address: IPv4Address) -> IPv4Address:
        if not self._ipv4.is_local(address):
            return self._ipv4.default_router_address
        return address