"""Ethernet framing for outgoing buffers."""

from __future__ import annotations

import logging
from typing import Any

from .addresses import EthernetAddress
from .transport import Producer

HEADER_LEN = 14
ETHTYPE_IP = 0x0800
ETHTYPE_ARP = 0x0806

_log = logging.getLogger(__name__)


class EthernetProducer(Producer):
    """Writes the Ethernet header into buffers of an underlying producer."""

    def __init__(self, producer: Producer, host_address: EthernetAddress) -> None:
        self._producer = producer
        self.host_address = host_address
        self.destination_address = EthernetAddress()
        self.type = 0
        self._pending: dict[int, Any] = {}

    def mss(self) -> int:
        return self._producer.mss() - HEADER_LEN

    def prepare(self) -> memoryview:
        """Return the payload part of a new frame with its header filled in."""
        raw = self._producer.prepare()
        frame = memoryview(raw)
        frame[0:6] = bytes(self.destination_address)
        frame[6:12] = bytes(self.host_address)
        frame[12:HEADER_LEN] = self.type.to_bytes(2, "big")
        payload = frame[HEADER_LEN:]
        self._pending[id(payload)] = raw
        return payload

    def _claim(self, buf: memoryview) -> Any:
        try:
            return self._pending.pop(id(buf))
        except KeyError:
            raise ValueError("buffer was not prepared by this producer") from None

    def commit(self, length: int, buf: memoryview, mss: int = 0) -> None:
        raw = self._claim(buf)
        _log.debug("committing frame: %dB", length)
        self._producer.commit(length + HEADER_LEN, raw, mss)

    def release(self, buf: memoryview) -> None:
        self._producer.release(self._claim(buf))