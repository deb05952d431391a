import struct

import pytest

from hbasekit.protowire import (
    DecodeError,
    Writer,
    decode_varint,
    encode_varint,
    iter_fields,
)


@pytest.mark.parametrize("value", [0, 1, 127, 128, 300, 2**32, 2**63 - 1, 2**64 - 1])
def test_varint_round_trip(value):
    encoded = encode_varint(value)
    assert decode_varint(encoded, 0) == (value, len(encoded))


def test_varint_known_encoding():
    assert encode_varint(300) == b"\xac\x02"


def test_negative_varint_is_twos_complement():
    assert encode_varint(-1) == encode_varint(2**64 - 1)
    assert decode_varint(encode_varint(-7), 0)[0] == (-7) & (2**64 - 1)


def test_varint_out_of_range():
    with pytest.raises(ValueError):
        encode_varint(2**64)
    with pytest.raises(ValueError):
        encode_varint(-(2**63) - 1)


def test_decode_varint_with_offset():
    data = b"xx" + encode_varint(300) + b"yy"
    value, pos = decode_varint(data, 2)
    assert value == 300
    assert data[pos:] == b"yy"


def test_decode_truncated_varint():
    with pytest.raises(DecodeError):
        decode_varint(b"\x80", 0)


def test_decode_too_long_varint():
    with pytest.raises(DecodeError):
        decode_varint(b"\xff" * 11, 0)


def test_writer_known_encoding():
    assert Writer().int32_field(1, 150).getvalue() == b"\x08\x96\x01"


def test_writer_fields_round_trip():
    data = (
        Writer()
        .string_field(1, "abc")
        .bytes_field(2, b"\x00\x01")
        .int32_field(3, 7)
        .bool_field(4, True)
        .int64_field(5, 2**40)
        .enum_field(6, 2)
        .getvalue()
    )
    assert list(iter_fields(data)) == [
        (1, 2, b"abc"),
        (2, 2, b"\x00\x01"),
        (3, 0, 7),
        (4, 0, 1),
        (5, 0, 2**40),
        (6, 0, 2),
    ]


def test_none_fields_are_skipped():
    data = (
        Writer()
        .bytes_field(1, None)
        .string_field(2, None)
        .int32_field(3, None)
        .bool_field(4, None)
        .float_field(5, None)
        .message_field(6, None)
        .getvalue()
    )
    assert data == b""


def test_empty_bytes_field_is_written():
    data = Writer().bytes_field(1, b"").getvalue()
    assert list(iter_fields(data)) == [(1, 2, b"")]


def test_false_bool_is_written():
    data = Writer().bool_field(3, False).getvalue()
    assert list(iter_fields(data)) == [(3, 0, 0)]


def test_float_field_round_trip():
    data = Writer().float_field(2, 1.5).getvalue()
    [(number, wire_type, raw)] = list(iter_fields(data))
    assert (number, wire_type) == (2, 5)
    assert struct.unpack("<f", raw)[0] == 1.5


def test_message_field_nested():
    inner = Writer().string_field(1, "x").getvalue()
    outer = Writer().message_field(4, inner).getvalue()
    [(number, wire_type, payload)] = list(iter_fields(outer))
    assert (number, wire_type) == (4, 2)
    assert list(iter_fields(payload)) == [(1, 2, b"x")]


def test_int32_range_checked():
    with pytest.raises(ValueError):
        Writer().int32_field(1, 2**31)


def test_negative_int32_round_trip():
    data = Writer().int32_field(1, -1).getvalue()
    [(_, _, value)] = list(iter_fields(data))
    assert value == 2**64 - 1


def test_invalid_field_number():
    with pytest.raises(ValueError):
        Writer().string_field(0, "x")


def test_iter_fields_truncated_payload():
    data = Writer().bytes_field(1, b"abcdef").getvalue()[:-2]
    with pytest.raises(DecodeError):
        list(iter_fields(data))


def test_iter_fields_unsupported_wire_type():
    with pytest.raises(DecodeError):
        list(iter_fields(bytes([(1 << 3) | 3])))


def test_iter_fields_field_zero():
    with pytest.raises(DecodeError):
        list(iter_fields(b"\x00\x01"))