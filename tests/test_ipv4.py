import pytest

from tulipstack.addresses import EthernetAddress, IPv4Address
from tulipstack.ethernet import ETHTYPE_IP, EthernetProducer
from tulipstack.ipv4 import IPv4Processor, IPv4Producer, Protocol
from tulipstack.netutils import ipv4_checksum
from tulipstack.transport import (
    CorruptedDataError,
    IncompleteDataError,
    ProtocolError,
    Producer,
    UnsupportedProtocolError,
)

MAC = EthernetAddress("02:00:00:00:00:01")
HOST = IPv4Address("10.1.0.1")
PEER = IPv4Address("10.1.0.2")


class Port(Producer):
    def __init__(self):
        self.outbox = []
        self.released = []

    def mss(self):
        return 1514

    def prepare(self):
        return bytearray(1514)

    def commit(self, length, buf, mss=0):
        self.outbox.append(bytes(buf[:length]))

    def release(self, buf):
        self.released.append(buf)


class Recorder:
    def __init__(self, name="", log=None):
        self.name = name
        self.log = log if log is not None else []
        self.runs = 0
        self.processed = []
        self.sent_bufs = []

    def run(self):
        self.runs += 1
        self.log.append(self.name)

    def process(self, data, ts):
        self.processed.append((bytes(data), ts))

    def sent(self, buf):
        self.sent_bufs.append(bytes(buf))


class Failing(Recorder):
    def run(self):
        super().run()
        raise ProtocolError("failed")


def make_producer(host=PEER):
    port = Port()
    eth = EthernetProducer(port, MAC)
    return port, eth, IPv4Producer(eth, host)


def make_packet(protocol, payload, destination=HOST):
    port, _, prod = make_producer()
    prod.destination_address = destination
    prod.protocol = protocol
    buf = prod.prepare()
    buf[: len(payload)] = payload
    prod.commit(len(payload), buf)
    return bytearray(port.outbox[0][14:])


def test_commit_writes_header():
    port, _, prod = make_producer(HOST)
    prod.destination_address = PEER
    prod.protocol = Protocol.TCP
    buf = prod.prepare()
    buf[:4] = b"abcd"
    prod.commit(4, buf)
    frame = port.outbox[0]
    assert frame[12:14] == ETHTYPE_IP.to_bytes(2, "big")
    packet = frame[14:]
    assert len(packet) == 24
    assert packet[0] == 0x45
    assert packet[8] == 64
    assert packet[9] == Protocol.TCP
    assert int.from_bytes(packet[2:4], "big") == 24
    assert packet[12:16] == bytes(HOST)
    assert packet[16:20] == bytes(PEER)
    assert ipv4_checksum(packet[:20]) == 0xFFFF
    assert packet[20:] == b"abcd"
    assert prod.statistics.sent == 1


def test_ipid_increments():
    port, _, prod = make_producer()
    for _ in range(2):
        buf = prod.prepare()
        prod.commit(0, buf)
    ids = [int.from_bytes(frame[18:20], "big") for frame in port.outbox]
    assert ids == [1, 2]


def test_mss_subtracts_header():
    _, eth, prod = make_producer()
    assert prod.mss() == eth.mss() - 20


def test_is_local():
    _, _, prod = make_producer(HOST)
    prod.net_mask = IPv4Address("255.255.255.0")
    assert prod.is_local(PEER)
    assert not prod.is_local(IPv4Address("10.2.0.1"))


def test_release_goes_down_and_only_once():
    port, _, prod = make_producer()
    buf = prod.prepare()
    prod.release(buf)
    assert len(port.released) == 1
    with pytest.raises(ValueError):
        prod.release(buf)


def test_processor_round_trip():
    packet = make_packet(Protocol.TEST, b"abcd")
    proc = IPv4Processor(HOST)
    raw = Recorder()
    proc.raw = raw
    proc.process(packet, 7)
    assert raw.processed == [(b"abcd", 7)]
    assert proc.source_address == PEER
    assert proc.destination_address == HOST
    assert proc.protocol == Protocol.TEST
    assert proc.statistics.recv == 1


def test_packet_not_for_us_is_dropped():
    packet = make_packet(Protocol.TEST, b"abcd", destination=IPv4Address("10.1.0.9"))
    proc = IPv4Processor(HOST)
    raw = Recorder()
    proc.raw = raw
    proc.process(packet, 0)
    assert raw.processed == []
    assert proc.statistics.drop == 1


def test_bad_version_raises():
    packet = make_packet(Protocol.TEST, b"abcd")
    packet[0] = 0x46
    proc = IPv4Processor(HOST)
    with pytest.raises(ProtocolError):
        proc.process(packet, 0)
    assert proc.statistics.vhlerr == 1


def test_fragment_raises():
    packet = make_packet(Protocol.TEST, b"abcd")
    packet[6] = 0x20
    proc = IPv4Processor(HOST)
    with pytest.raises(UnsupportedProtocolError):
        proc.process(packet, 0)
    assert proc.statistics.frgerr == 1


def test_corrupted_header_raises():
    packet = make_packet(Protocol.TEST, b"abcd")
    packet[8] ^= 0xFF
    proc = IPv4Processor(HOST)
    proc.raw = Recorder()
    with pytest.raises(CorruptedDataError):
        proc.process(packet, 0)
    assert proc.statistics.chkerr == 1


def test_unknown_protocol_raises():
    packet = make_packet(17, b"abcd")
    proc = IPv4Processor(HOST)
    with pytest.raises(UnsupportedProtocolError):
        proc.process(packet, 0)
    assert proc.statistics.drop == 1


def test_missing_handler_raises():
    packet = make_packet(Protocol.TCP, b"abcd")
    proc = IPv4Processor(HOST)
    with pytest.raises(UnsupportedProtocolError):
        proc.process(packet, 0)


def test_short_packet_raises():
    proc = IPv4Processor(HOST)
    with pytest.raises(IncompleteDataError):
        proc.process(b"\x45\x00", 0)


def test_run_calls_every_handler_in_order():
    proc = IPv4Processor(HOST)
    log = []
    proc.tcp = Recorder("tcp", log)
    proc.icmp = Recorder("icmp", log)
    proc.raw = Recorder("raw", log)
    proc.run()
    assert log == ["tcp", "icmp", "raw"]


def test_run_stops_at_first_failure():
    proc = IPv4Processor(HOST)
    log = []
    proc.tcp = Failing("tcp", log)
    proc.icmp = Recorder("icmp", log)
    proc.raw = Recorder("raw", log)
    with pytest.raises(ProtocolError):
        proc.run()
    assert log == ["tcp"]


def test_sent_dispatches_payload():
    packet = make_packet(Protocol.TCP, b"xyz")
    proc = IPv4Processor(HOST)
    tcp = Recorder()
    proc.tcp = tcp
    proc.sent(memoryview(packet))
    assert tcp.sent_bufs == [b"xyz"]