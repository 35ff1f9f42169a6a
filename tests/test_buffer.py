import pytest

from tulipstack.buffer import Buffer


def test_new_buffer_is_empty():
    buffer = Buffer(16)
    assert buffer.empty()
    assert buffer.fill() == 0
    assert buffer.available() == 16


def test_append_fits():
    buffer = Buffer(16)
    assert buffer.append(b"hello")
    assert buffer.fill() == 5
    assert buffer.available() == 11
    assert buffer.data == b"hello"
    assert not buffer.empty()


def test_append_exact_fill_then_overflow():
    buffer = Buffer(4)
    assert buffer.append(b"abcd")
    assert not buffer.append(b"e")
    assert buffer.data == b"abcd"
    assert buffer.available() == 0


def test_overflow_leaves_buffer_unchanged():
    buffer = Buffer(4)
    buffer.append(b"ab")
    assert not buffer.append(b"cde")
    assert buffer.data == b"ab"


def test_reset():
    buffer = Buffer(8)
    buffer.append(b"abc")
    buffer.reset()
    assert buffer.empty()
    assert buffer.available() == 8


def test_window_is_capped():
    assert Buffer(70000).window() == 0xFFFF
    assert Buffer(100).window() == 100


def test_negative_size():
    with pytest.raises(ValueError):
        Buffer(-1)