import pytest

from tulipstack.addresses import IPv4Address
from tulipstack.netutils import cap, checksum, header_length, hexdump, ipv4_checksum, toeplitz
from tulipstack.transport import IncompleteDataError

SAMPLE_HEADER = bytes.fromhex("4500007300004000401" "1b861c0a80001c0a800c7")

RSS_KEY = bytes.fromhex(
    "6d5a56da255b0ec24167253d43a38fb0d0ca2bcbae7b30b477cb2da38030f20c6a42b73bbeac01fa"
)


def test_ipv4_checksum_of_valid_header():
    assert ipv4_checksum(SAMPLE_HEADER) == 0xFFFF


def test_ipv4_checksum_recomputes_stored_value():
    zeroed = bytearray(SAMPLE_HEADER)
    zeroed[10:12] = b"\x00\x00"
    assert (~ipv4_checksum(bytes(zeroed))) & 0xFFFF == 0xB861


def test_ipv4_checksum_short_header():
    with pytest.raises(IncompleteDataError):
        ipv4_checksum(SAMPLE_HEADER[:10])


def test_checksum_pads_odd_length():
    assert checksum(0, b"\x01\x02\x03") == checksum(0, b"\x01\x02\x03\x00")


def test_checksum_empty_returns_seed():
    assert checksum(0x1234, b"") == 0x1234


@pytest.mark.parametrize("data", [b"\xff\xff\xff\xff", b"\x12\x34\x56\x78\x9a\xbc", b"\x00\x01"])
def test_checksum_with_complement_is_all_ones(data):
    complement = (~checksum(0, data)) & 0xFFFF
    assert checksum(0, data + complement.to_bytes(2, "big")) == 0xFFFF


def test_cap():
    assert cap(70000) == 0xFFFF
    assert cap(5) == 5


def test_hexdump():
    expected = (
        "0x000: 0x00 0x01 0x02 0x03 0x04 0x05 0x06 0x07\n"
        "0x008: 0x08 0x09 \n"
    )
    assert hexdump(bytes(range(10))) == expected
    assert hexdump(b"") == ""


def test_header_length_without_options():
    packet = bytearray(14 + 20 + 20)
    packet[14 + 20 + 12] = 5 << 4
    assert header_length(bytes(packet)) == len(packet)


def test_header_length_too_short():
    packet = bytearray(14 + 20 + 20)
    packet[14 + 20 + 12] = 8 << 4
    with pytest.raises(IncompleteDataError):
        header_length(bytes(packet))
    with pytest.raises(IncompleteDataError):
        header_length(bytes(20))


def test_toeplitz_reference_vector():
    result = toeplitz(
        IPv4Address("66.9.149.187"), IPv4Address("161.142.100.80"), 2794, 1766, RSS_KEY, 0
    )
    assert result == 0x51CCC178


def test_toeplitz_zero_tuple_returns_init():
    assert toeplitz(IPv4Address(), IPv4Address(), 0, 0, RSS_KEY, 0x1234) == 0x1234


def test_toeplitz_is_linear_in_init():
    args = (IPv4Address("10.1.0.1"), IPv4Address("10.1.0.2"), 10000, 1234, RSS_KEY)
    assert toeplitz(*args, 0xABCD) == toeplitz(*args, 0) ^ 0xABCD


def test_toeplitz_short_key():
    with pytest.raises(ValueError):
        toeplitz(IPv4Address(), IPv4Address(), 0, 0, b"\x01\x02", 0)