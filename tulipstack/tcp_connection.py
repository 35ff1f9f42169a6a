"""TCP connection state and option parsing."""

from __future__ import annotations

import enum
import logging
from typing import Any

from .addresses import EthernetAddress, IPv4Address
from .framebuffer import FrameBuffer

MAXRTX = 5
MAXSYNRTX = 5
MAX_WINDOW_SCALE = 14

# Delayed ACK timeout, in fast-timer ticks (milliseconds).
ATO = 40

OPTION_END = 0
OPTION_NOOP = 1
OPTION_MSS = 2
OPTION_WSC = 3
MSS_LEN = 4
WSC_LEN = 3
MAX_OPTIONS_LEN = 40

FRAME_BUFFER_SIZE = 1024 * 1024

_log = logging.getLogger(__name__)


class ConnectionState(enum.IntEnum):
    CLOSE = 0x1
    CLOSED = 0x2
    CLOSING = 0x3
    OPEN = 0x4
    ESTABLISHED = 0x5
    FIN_WAIT_1 = 0x6
    FIN_WAIT_2 = 0x7
    LAST_ACK = 0x8
    SYN_RCVD = 0x9
    SYN_SENT = 0xA
    TIME_WAIT = 0xB


class ConnectionOption(enum.IntFlag):
    NO_DELAY = 0x1
    """Disable Nagle's algorithm."""
    DELAYED_ACK = 0x2
    """Send grouped ACKs every 40ms."""
    KEEP_ALIVE = 0x4
    """Probe every second, abort after repeated failures."""


def _u8(value: int) -> int:
    return value & 0xFF


def _i8(value: int) -> int:
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


class Connection:
    """The state of one TCP connection."""

    def __init__(self, connection_id: int) -> None:
        self.id = connection_id
        self.remote_ethernet_address = EthernetAddress()
        self.remote_address = IPv4Address()
        self.local_port = 0
        self.remote_port = 0
        self.rcv_nxt = 0
        self.snd_nxt = 0
        self.state = ConnectionState.CLOSED
        self.ackdata = False
        self.newdata = False
        self.pshdata = False
        self.live = False
        self.wndscl = 0
        self.peer_window = 0
        self.nrtx = 0
        self.slen = 0
        self.initial_mss = 0
        self.mss = 0
        self.sa = 0
        self.sv = 0
        self.rto = 0
        self.rtm = 0
        self.wndlvl = 0
        self.atm = 0
        self.ktm = 0
        self.opts = 0
        self.sdat: Any = None
        self.cookie: Any = None
        self.fbuf = FrameBuffer(FRAME_BUFFER_SIZE)

    def set_options(self, options: int) -> None:
        self.opts |= options & 0xFF

    def clear_options(self, options: int) -> None:
        self.opts &= ~(options & 0xFF) & 0xFFFF

    def is_active(self) -> bool:
        return self.state != ConnectionState.CLOSED

    def has_pending_send_data(self) -> bool:
        return self.slen != 0

    def has_expired(self) -> bool:
        """True once the retransmission limit for the state is reached."""
        if self.state in (ConnectionState.SYN_SENT, ConnectionState.SYN_RCVD):
            return self.nrtx == MAXSYNRTX
        return self.nrtx == MAXRTX

    def matches(
        self, remote_address: IPv4Address, source_port: int, destination_port: int
    ) -> bool:
        """True if an incoming segment's ports and sender belong here."""
        return (
            destination_port == self.local_port
            and source_port == self.remote_port
            and remote_address == self.remote_address
        )

    def window(self, wnd: int | None = None) -> int:
        """Scale ``wnd``, or the peer's window, by the peer's scale factor."""
        base = self.peer_window if wnd is None else wnd
        return base << self.wndscl

    def update_rtt_estimation(self) -> None:
        """Update the smoothed RTT state and the retransmission timeout."""
        m = _i8(self.rto - self.rtm)
        m = _i8(m - (self.sa >> 3))
        self.sa = _u8(self.sa + m)
        m = _i8(-m) if m < 0 else m
        m = _i8(m - (self.sv >> 2))
        self.sv = _u8(self.sv + m)
        self.rto = _u8((self.sa >> 3) + self.sv)

    def reset_send_buffer(self) -> None:
        self.slen = 0
        self.sdat = None

    def arm_ack_timer(self, send_next: int) -> None:
        """Start the delayed ACK timer if new data came in and nothing was sent."""
        if self.newdata and self.atm == 0 and send_next == self.snd_nxt:
            self.atm = ATO

    def __hash__(self) -> int:
        return (self.local_port << 32) | self.remote_port

    def __repr__(self) -> str:
        return f"Connection(id={self.id}, state={self.state.name})"


def parse_options(connection: Connection, options: bytes) -> None:
    """Apply the MSS and window-scale options found in ``options``."""
    length = len(options)
    c = 0
    while c < length:
        opt = options[c]
        if opt == OPTION_END:
            break
        if opt == OPTION_NOOP:
            c += 1
            continue
        if c + 1 >= length:
            break
        size = options[c + 1]
        if opt == OPTION_MSS and size == MSS_LEN:
            if c + MSS_LEN > length:
                break
            offered = int.from_bytes(options[c + 2 : c + 4], "big")
            c += MSS_LEN
            updated = min(offered, connection.initial_mss)
            _log.debug("initial MSS update: %d -> %d", connection.initial_mss, updated)
            connection.initial_mss = updated
        elif opt == OPTION_WSC and size == WSC_LEN:
            if c + WSC_LEN > length:
                break
            scale = options[c + 2]
            c += WSC_LEN
            connection.wndscl = min(scale, MAX_WINDOW_SCALE)
            connection.peer_window >>= connection.wndscl
        else:
            if size == 0:
                break
            c += size
            if c >= MAX_OPTIONS_LEN:
                break