# tulipstack

Building blocks for a user-space network stack written in pure Python, with
no third-party dependencies. It covers Ethernet framing, IPv4, ARP and
ICMPv4 echo, the state of a TCP connection with its option parsing, and a
few system helpers (a clock with a test offset, a frame buffer, a
fixed-size byte buffer, a spin lock).

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Modules

- `tulipstack.addresses`: `EthernetAddress` and `IPv4Address`. Both are built
  from text (`"02:00:00:00:00:01"`, `"10.1.0.1"`), from bytes, or with no
  argument for the all-zero address. They compare by value, convert with
  `str()` and `bytes()`, and have `is_empty()`. Constants:
  `EthernetAddress.BROADCAST`, `IPv4Address.ANY`, `IPv4Address.BROADCAST`.
- `tulipstack.netutils`: the 16-bit one's-complement `checksum(seed, data)`,
  `ipv4_checksum(header)` (0xffff means valid), `toeplitz(saddr, daddr,
  sport, dport, key, init)` RSS hashing, `hexdump(data)`,
  `header_length(packet)` for Ethernet+IPv4+TCP headers, and `cap(length)`
  which clamps to 16 bits.
- `tulipstack.transport`: the abstract `Producer` interface (`mss`,
  `prepare`, `commit`, `release`) and the `StackError` exception family:
  `ProtocolError`, `UnsupportedProtocolError`, `CorruptedDataError`,
  `IncompleteDataError`, `NoMoreResourcesError`,
  `HardwareTranslationMissingError`, `OperationInProgressError`.
- `tulipstack.ethernet`: `EthernetProducer`, which writes the Ethernet header
  into buffers obtained from an underlying `Producer`.
- `tulipstack.ethernet_processor`: `EthernetProcessor`, which reads incoming
  frames and hands the payload to its `arp`, `ipv4` or `raw` handler.
- `tulipstack.ipv4`: `IPv4Producer` (header writing, checksum, `is_local`),
  `IPv4Processor` (version, fragment, destination and checksum checks, then
  dispatch to `tcp`, `icmp` or `raw`), `Protocol` and `IPv4Statistics`.
- `tulipstack.arp`: `ArpProcessor`, which answers requests for the host
  address, sends discoveries (`discover`), answers `query` and `has`, and ages
  its eight-entry table in `run`. `lookup(interface, address)` does not
  consult any system table and always returns `None`.
- `tulipstack.icmp`: `IcmpHeader` (`pack`/`unpack`), `IcmpStatistics` and the
  ICMP header `checksum`.
- `tulipstack.icmpv4`: `IcmpProcessor`, which answers echo requests and
  completes outstanding ones, and `IcmpRequest` with its `RequestState`.
- `tulipstack.tcp_flags`: the `Flag` enum and `format_flags`.
- `tulipstack.tcp_connection`: `Connection` (state, windows, RTT estimation,
  delayed-ACK timer, options), `ConnectionState`, `ConnectionOption` and
  `parse_options`, which applies MSS and window-scale options.
- `tulipstack.clock`: `Clock` and `get_clock()` for the process-wide clock;
  `offset_by` and `reset_offset` move it for tests.
- `tulipstack.framebuffer`: `FrameBuffer` of timestamped `Frame`s within a
  byte capacity rounded by `fit_capacity`.
- `tulipstack.buffer`: `Buffer`, a fixed-capacity append buffer.
- `tulipstack.spinlock`: `SpinLock`, also usable as a context manager.
- `tulipstack.textutils`: `split`, `join` and `log2`.
- `tulipstack.affinity`: `set_current_thread_affinity(cpuid)`.

## Examples

```python
from tulipstack.addresses import EthernetAddress, IPv4Address
from tulipstack.netutils import checksum, toeplitz
from tulipstack.tcp_flags import Flag, format_flags

mac = EthernetAddress("02:00:00:00:00:01")
src = IPv4Address("10.1.0.1")
dst = IPv4Address("10.1.0.2")
print(mac, src, hex(checksum(0, b"\x45\x00\x00\x1c")))
print(toeplitz(src, dst, 1234, 80, bytes(40), 0))
print(format_flags(Flag.SYN | Flag.ACK))  # [.S..A...]
```

```python
from tulipstack.tcp_connection import Connection, parse_options

conn = Connection(0)
conn.initial_mss = 1460
parse_options(conn, bytes([2, 4, 0x02, 0x18]))  # peer offers MSS 536
print(conn.initial_mss)  # 536
```

Errors are reported by raising subclasses of
`tulipstack.transport.StackError`.

## What this package does not do

- It has no network device: nothing here sends or receives frames on a real
  interface. To move packets you supply your own `Producer` at the bottom of
  the `EthernetProducer` and call the processors' `process` with frames.
- It keeps TCP connection state and parses TCP options, but it has no TCP
  segment processor: there is no handshake, retransmission or data transfer
  logic, and `IPv4Processor.tcp` must be set to a handler of your own.
- There is no command-line tool.