"""ICMPv4 echo requests and replies."""

from __future__ import annotations

import enum
import logging
from dataclasses import replace
from typing import Any

from .addresses import IPv4Address
from .ethernet import EthernetProducer
from .icmp import ECHO, ECHO_REPLY, HEADER_LEN, IcmpHeader, IcmpStatistics, checksum
from .ipv4 import IPv4Producer, Protocol
from .transport import (
    HardwareTranslationMissingError,
    IncompleteDataError,
    OperationInProgressError,
    ProtocolError,
)

_log = logging.getLogger(__name__)


class RequestState(enum.Enum):
    """Where an echo request stands."""

    IDLE = enum.auto()
    REQUEST = enum.auto()
    RESPONSE = enum.auto()


class IcmpRequest:
    """An echo request towards one destination at a time."""

    def __init__(
        self,
        ethernet: EthernetProducer,
        ipv4: IPv4Producer,
        arp: Any,
        request_id: int,
    ) -> None:
        self._ethernet = ethernet
        self._ipv4 = ipv4
        self._arp = arp
        self.id = request_id
        self.state = RequestState.IDLE
        self.sequence = 1

    def __call__(self, destination: IPv4Address) -> bool:
        """Send an echo request, or collect the answer to the last one.

        Returns True when the previous request has been answered, in which
        case the request goes back to idle, and False when a new request
        was sent.
        """
        if self.state is RequestState.REQUEST:
            raise OperationInProgressError("echo request still in flight")
        if self.state is RequestState.RESPONSE:
            self.state = RequestState.IDLE
            self.sequence = (self.sequence + 1) & 0xFFFF
            return True
        hardware = self._arp.query(destination)
        if hardware is None:
            raise HardwareTranslationMissingError(f"no hardware address for {destination}")
        self._ethernet.destination_address = hardware
        self._ipv4.destination_address = destination
        self._ipv4.protocol = Protocol.ICMP
        buf = self._ipv4.prepare()
        header = IcmpHeader(ECHO, 0, 0, self.id, self.sequence)
        summed = checksum(header.pack())
        buf[:HEADER_LEN] = replace(header, icmpchksum=~summed & 0xFFFF).pack()
        self.state = RequestState.REQUEST
        self._ipv4.commit(HEADER_LEN, buf)
        return False


class IcmpProcessor:
    """Answers echo requests and completes outstanding ones."""

    def __init__(self, ethernet: EthernetProducer, ipv4: IPv4Producer) -> None:
        self._ethernet = ethernet
        self._ipv4 = ipv4
        self.ethernet_processor: Any = None
        self.ipv4_processor: Any = None
        self.arp: Any = None
        self.statistics = IcmpStatistics()
        self._requests: dict[int, IcmpRequest] = {}
        self._ids = 0

    def run(self) -> None:
        """Nothing to do periodically."""

    def attach(self, ethernet: EthernetProducer, ipv4: IPv4Producer) -> IcmpRequest:
        """Create a new echo request bound to this processor."""
        self._ids = (self._ids + 1) & 0xFFFF
        request = IcmpRequest(ethernet, ipv4, self.arp, self._ids)
        self._requests[request.id] = request
        return request

    def detach(self, request: IcmpRequest) -> None:
        self._requests.pop(request.id, None)

    def process(self, data: bytes, ts: int) -> None:
        self.statistics.recv += 1
        if len(data) < HEADER_LEN:
            raise IncompleteDataError("ICMP header needs 8 bytes")
        header = IcmpHeader.unpack(bytes(data))
        if header.type not in (ECHO, ECHO_REPLY):
            raise ProtocolError(f"unsupported ICMP type {header.type}")
        source = self.ipv4_processor.source_address
        if header.type == ECHO_REPLY:
            _log.debug("reply from %s", source)
            request = self._requests.get(header.id)
            if request is None:
                raise ProtocolError(f"unknown ICMP request id {header.id}")
            if request.state is not RequestState.REQUEST:
                raise ProtocolError(f"ICMP request {header.id} is not waiting")
            request.state = RequestState.RESPONSE
            return
        _log.debug("request from %s", source)
        self._ipv4.protocol = Protocol.ICMP
        self._ipv4.destination_address = source
        self._ethernet.destination_address = self.ethernet_processor.source_address
        out = self._ipv4.prepare()
        reply = bytearray(data)
        reply[0] = ECHO_REPLY
        adjust = ECHO << 8
        summed = header.icmpchksum
        if summed >= 0xFFFF - adjust:
            summed = (summed + adjust + 1) & 0xFFFF
        else:
            summed += adjust
        reply[2:4] = summed.to_bytes(2, "big")
        out[: len(reply)] = reply
        self.statistics.sent += 1
        self._ipv4.commit(len(reply), out)

    def sent(self, buf: Any) -> None:
        self._ipv4.release(buf)