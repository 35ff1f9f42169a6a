"""Dispatch of incoming Ethernet frames."""

from __future__ import annotations

import logging
from typing import Any

from .addresses import EthernetAddress
from .ethernet import ETHTYPE_ARP, ETHTYPE_IP, HEADER_LEN
from .transport import IncompleteDataError, UnsupportedProtocolError

# Type values up to this one are 802.3 payload lengths.
_MAX_LENGTH = 1500

_log = logging.getLogger(__name__)


class EthernetProcessor:
    """Reads the Ethernet header and hands the payload to the right layer."""

    def __init__(self, host_address: EthernetAddress) -> None:
        self.host_address = host_address
        self.source_address = EthernetAddress()
        self.destination_address = EthernetAddress()
        self.type = 0
        self.raw: Any = None
        self.arp: Any = None
        self.ipv4: Any = None

    def run(self) -> None:
        """Reset the last frame's state and run the layers above."""
        self.source_address = EthernetAddress()
        self.destination_address = EthernetAddress()
        self.type = 0
        for handler in (self.raw, self.arp, self.ipv4):
            if handler is not None:
                handler.run()

    def process(self, data: bytes, ts: int) -> None:
        _log.debug("processing frame: %dB", len(data))
        if len(data) < HEADER_LEN:
            raise IncompleteDataError("Ethernet header needs 14 bytes")
        self.destination_address = EthernetAddress(bytes(data[0:6]))
        self.source_address = EthernetAddress(bytes(data[6:12]))
        self.type = int.from_bytes(data[12:HEADER_LEN], "big")
        payload = data[HEADER_LEN:]
        if self.type == ETHTYPE_ARP:
            handler = self.arp
        elif self.type == ETHTYPE_IP:
            handler = self.ipv4
        elif self.type <= _MAX_LENGTH:
            handler = self.raw
            payload = data[HEADER_LEN : HEADER_LEN + self.type]
        else:
            raise UnsupportedProtocolError(f"unsupported ethertype 0x{self.type:04x}")
        if handler is None:
            raise UnsupportedProtocolError(f"no handler for ethertype 0x{self.type:04x}")
        handler.process(payload, ts)

    def sent(self, buf: Any) -> None:
        """Tell the layer that produced a sent frame that it left."""
        self.type = int.from_bytes(buf[12:HEADER_LEN], "big")
        if self.type == ETHTYPE_ARP:
            handler = self.arp
        elif self.type == ETHTYPE_IP:
            handler = self.ipv4
        elif self.type <= _MAX_LENGTH:
            handler = self.raw
        else:
            handler = None
        if handler is None:
            raise UnsupportedProtocolError(f"no handler for ethertype 0x{self.type:04x}")
        handler.sent(buf[HEADER_LEN:])