import io

import pytest

from singcommon.buffer import (
    BUFFER_SIZE,
    RESERVED_HEADER,
    UDP_BUFFER_SIZE,
    Buffer,
    ShortBufferError,
    copy_multi,
    encode_hex_string,
    len_multi,
    release_multi,
    to_slice_multi,
)


def test_new_buffer_reserves_header():
    buffer = Buffer.new()
    assert buffer.start == RESERVED_HEADER
    assert len(buffer) == 0
    assert buffer.cap == BUFFER_SIZE
    assert buffer.is_empty()


def test_new_packet_capacity():
    buffer = Buffer.new_packet()
    assert buffer.cap == UDP_BUFFER_SIZE
    assert buffer.free_len == UDP_BUFFER_SIZE - RESERVED_HEADER


def test_new_size_large_is_not_pooled():
    buffer = Buffer.new_size(70000)
    assert buffer.cap == 70000
    buffer.release()
    assert not buffer.closed


def test_release_managed_closes():
    buffer = Buffer.new_size(100)
    buffer.write(b"abc")
    buffer.release()
    assert buffer.closed
    assert len(buffer) == 0


def test_context_manager_releases():
    with Buffer.new() as buffer:
        buffer.write(b"data")
    assert buffer.closed


def test_partial_write_then_full():
    buffer = Buffer.new_size(4)
    assert buffer.write(b"abcdef") == 4
    assert bytes(buffer.bytes()) == b"abcd"
    assert buffer.is_full()
    assert buffer.write(b"") == 0
    with pytest.raises(ShortBufferError):
        buffer.write(b"x")
    with pytest.raises(ShortBufferError):
        buffer.write_byte(1)


def test_read_operations_consume():
    buffer = Buffer.wrap(b"hello world")
    assert buffer.read_byte() == ord("h")
    assert buffer.read_bytes(4) == b"ello"
    assert buffer.read(3) == b" wo"
    assert buffer.read() == b"rld"
    assert buffer.read() == b""
    with pytest.raises(EOFError):
        buffer.read_byte()


def test_read_bytes_too_many():
    with pytest.raises(EOFError):
        Buffer.wrap(b"ab").read_bytes(3)


def test_extend_and_overflow():
    buffer = Buffer.new_size(8)
    tail = buffer.extend(3)
    tail[:] = b"xyz"
    assert bytes(buffer.bytes()) == b"xyz"
    with pytest.raises(OverflowError):
        buffer.extend(buffer.free_len + 1)


def test_extend_header_prepends():
    buffer = Buffer.new()
    buffer.write(b"payload")
    header = buffer.extend_header(2)
    header[:] = b"hi"
    assert bytes(buffer.bytes()) == b"hi" + b"payload"
    assert buffer.start == RESERVED_HEADER - 2


def test_extend_header_without_room():
    with pytest.raises(OverflowError):
        Buffer.new_size(8).extend_header(1)


def test_read_from_stream():
    payload = bytes(range(200))
    buffer = Buffer.new()
    assert buffer.read_from(io.BytesIO(payload)) == len(payload)
    assert bytes(buffer.bytes()) == payload


def test_read_from_fills_up():
    with pytest.raises(ShortBufferError):
        Buffer.new_size(4).read_from(io.BytesIO(b"abcd"))


def test_read_full_from():
    buffer = Buffer.new_size(16)
    assert buffer.read_full_from(io.BytesIO(b"abcdefgh"), 5) == 5
    assert bytes(buffer.bytes()) == b"abcde"
    with pytest.raises(EOFError):
        Buffer.new_size(16).read_full_from(io.BytesIO(b"ab"), 5)
    with pytest.raises(ShortBufferError):
        Buffer.new_size(16).read_full_from(io.BytesIO(b"ab"), 17)


def test_read_at_least_from():
    source = b"abcdefgh"
    buffer = Buffer.new_size(16)
    n = buffer.read_at_least_from(io.BytesIO(source), 3)
    assert n >= 3
    assert bytes(buffer.bytes()) == source[:n]
    with pytest.raises(EOFError):
        Buffer.new_size(16).read_at_least_from(io.BytesIO(b"a"), 4)


def test_read_once_from_another_buffer():
    source = Buffer.wrap(b"data")
    target = Buffer.new_size(16)
    assert target.read_once_from(source) == 4
    assert bytes(target.bytes()) == b"data"
    assert source.is_empty()


def test_write_to_does_not_consume():
    sink = io.BytesIO()
    buffer = Buffer.wrap(b"abc")
    assert buffer.write_to(sink) == 3
    assert sink.getvalue() == b"abc"
    assert len(buffer) == 3


def test_write_string_round_trip():
    text = "héllo"
    buffer = Buffer.new_size(32)
    assert buffer.write_string(text) == len(text.encode())
    assert bytes(buffer.bytes()).decode() == text


def test_write_zero_and_zero_n():
    buffer = Buffer.new_size(8)
    buffer.write(b"\xff" * 8)
    buffer.full_reset()
    buffer.write_zero_n(4)
    assert bytes(buffer.bytes()) == bytes(4)
    buffer.write_zero()
    assert len(buffer) == 5
    with pytest.raises(ShortBufferError):
        buffer.write_zero_n(4)


def test_write_random():
    buffer = Buffer.new_size(64)
    tail = buffer.write_random(16)
    assert len(tail) == 16
    assert len(buffer) == 16
    assert bytes(tail) == bytes(buffer.bytes())


def test_byte_and_set_byte():
    buffer = Buffer.wrap(b"abc")
    buffer.set_byte(1, ord("X"))
    assert buffer.byte(1) == ord("X")
    assert bytes(buffer.bytes()) == b"aXc"


def test_advance_truncate_resize():
    buffer = Buffer.wrap(b"abcdef")
    buffer.advance(2)
    assert bytes(buffer.bytes()) == b"cdef"
    buffer.truncate(2)
    assert bytes(buffer.bytes()) == b"cd"
    buffer.resize(1, 3)
    assert bytes(buffer.bytes()) == b"bcd"


def test_views():
    buffer = Buffer.wrap(b"abcdef")
    assert bytes(buffer.data_from(2)) == b"cdef"
    assert bytes(buffer.data_to(2)) == b"ab"
    assert bytes(buffer.data_range(1, 4)) == b"bcd"
    assert bytes(buffer.slice()) == b"abcdef"
    assert len(buffer.free_bytes()) == 0


def test_reset_restores_header():
    buffer = Buffer.new()
    buffer.write(b"x")
    buffer.reset()
    assert buffer.start == RESERVED_HEADER
    assert buffer.is_empty()


def test_reference_blocks_release():
    buffer = Buffer.new_size(32)
    buffer.inc_ref()
    buffer.release()
    assert not buffer.closed
    buffer.dec_ref()
    buffer.release()
    assert buffer.closed


def test_to_owned_is_independent():
    source = Buffer.new_size(16)
    source.write(b"abcd")
    source.advance(1)
    owned = source.to_owned()
    assert bytes(owned.bytes()) == b"bcd"
    assert owned.start == source.start
    source.set_byte(0, ord("Z"))
    assert bytes(owned.bytes()) == b"bcd"


def test_cut():
    buffer = Buffer.wrap(b"abcdef")
    part = buffer.cut(1, 2)
    assert bytes(part.slice()) == b"bcd"
    assert len(part) == 0
    assert bytes(buffer.bytes()) == b"bcd"


def test_multi_helpers():
    buffers = [Buffer.wrap(b"ab"), Buffer.wrap(b"cde")]
    assert len_multi(buffers) == 5
    assert [bytes(view) for view in to_slice_multi(buffers)] == [b"ab", b"cde"]
    target = bytearray(5)
    assert copy_multi(target, buffers) == 5
    assert bytes(target) == b"ab" + b"cde"
    short = bytearray(3)
    assert copy_multi(short, buffers) == 3
    assert bytes(short) == (b"ab" + b"cde")[:3]


def test_release_multi():
    buffers = [Buffer.new_size(8), Buffer.new_size(8)]
    release_multi(buffers)
    assert all(buffer.closed for buffer in buffers)


def test_encode_hex_string():
    assert encode_hex_string(b"\x01\xab\xff") == "01abff"
    data = bytes(range(256))
    assert bytes.fromhex(encode_hex_string(data)) == data