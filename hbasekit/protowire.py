"""Minimal protocol-buffer wire format encoding and decoding."""

from __future__ import annotations

import struct
from typing import Iterator, Union

VARINT = 0
FIXED64 = 1
LENGTH_DELIMITED = 2
FIXED32 = 5

_MASK64 = (1 << 64) - 1
_INT32_MIN = -(1 << 31)
_INT32_MAX = (1 << 31) - 1
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_MAX_VARINT_BYTES = 10

FieldValue = Union[int, bytes]


class DecodeError(ValueError):
    """Raised when bytes are not valid protocol-buffer wire data."""


def encode_varint(value: int) -> bytes:
    """Encode ``value`` as a base-128 varint; negatives use 64-bit two's complement."""
    if value < 0:
        if value < _INT64_MIN:
            raise ValueError(f"varint value out of range: {value}")
        value &= _MASK64
    elif value > _MASK64:
        raise ValueError(f"varint value out of range: {value}")
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def decode_varint(data: bytes, pos: int = 0) -> tuple[int, int]:
    """Decode a varint at ``pos``; return the value and the position after it."""
    value = 0
    shift = 0
    for offset in range(_MAX_VARINT_BYTES):
        index = pos + offset
        if index >= len(data):
            raise DecodeError("truncated varint")
        byte = data[index]
        value |= (byte & 0x7F) << shift
        if byte < 0x80:
            if value > _MASK64:
                raise DecodeError("varint overflows 64 bits")
            return value, index + 1
        shift += 7
    raise DecodeError("varint too long")


def _take(data: bytes, pos: int, size: int) -> tuple[bytes, int]:
    end = pos + size
    if end > len(data):
        raise DecodeError("truncated field")
    return bytes(data[pos:end]), end


def iter_fields(data: bytes) -> Iterator[tuple[int, int, FieldValue]]:
    """Yield ``(field number, wire type, value)`` for each field in ``data``.

    Varint values are ints; length-delimited, fixed32 and fixed64 values are
    the raw bytes.
    """
    data = bytes(data)
    pos = 0
    while pos < len(data):
        key, pos = decode_varint(data, pos)
        number, wire_type = key >> 3, key & 7
        if number == 0:
            raise DecodeError("field number 0 is invalid")
        if wire_type == VARINT:
            value, pos = decode_varint(data, pos)
            yield number, wire_type, value
        elif wire_type == LENGTH_DELIMITED:
            size, pos = decode_varint(data, pos)
            chunk, pos = _take(data, pos, size)
            yield number, wire_type, chunk
        elif wire_type == FIXED32:
            chunk, pos = _take(data, pos, 4)
            yield number, wire_type, chunk
        elif wire_type == FIXED64:
            chunk, pos = _take(data, pos, 8)
            yield number, wire_type, chunk
        else:
            raise DecodeError(f"unsupported wire type {wire_type}")


class Writer:
    """Accumulates encoded fields; ``None`` values are treated as unset and skipped."""

    def __init__(self) -> None:
        self._buf = bytearray()

    def _key(self, number: int, wire_type: int) -> None:
        if number < 1:
            raise ValueError(f"invalid field number {number}")
        self._buf += encode_varint((number << 3) | wire_type)

    def _delimited(self, number: int, value: bytes) -> "Writer":
        self._key(number, LENGTH_DELIMITED)
        self._buf += encode_varint(len(value))
        self._buf += value
        return self

    def bytes_field(self, number: int, value: bytes | None) -> "Writer":
        if value is None:
            return self
        return self._delimited(number, bytes(value))

    def string_field(self, number: int, value: str | None) -> "Writer":
        if value is None:
            return self
        return self._delimited(number, value.encode("utf-8"))

    def _ranged_varint(self, number: int, value: int | None,
                       low: int, high: int) -> "Writer":
        if value is None:
            return self
        value = int(value)
        if not low <= value <= high:
            raise ValueError(f"value {value} out of range for field {number}")
        self._key(number, VARINT)
        self._buf += encode_varint(value)
        return self

    def int32_field(self, number: int, value: int | None) -> "Writer":
        return self._ranged_varint(number, value, _INT32_MIN, _INT32_MAX)

    def int64_field(self, number: int, value: int | None) -> "Writer":
        return self._ranged_varint(number, value, _INT64_MIN, _INT64_MAX)

    def bool_field(self, number: int, value: bool | None) -> "Writer":
        if value is None:
            return self
        return self._ranged_varint(number, 1 if value else 0, 0, 1)

    def float_field(self, number: int, value: float | None) -> "Writer":
        if value is None:
            return self
        self._key(number, FIXED32)
        self._buf += struct.pack("<f", value)
        return self

    def enum_field(self, number: int, value: int | None) -> "Writer":
        return self._ranged_varint(number, value, _INT32_MIN, _INT32_MAX)

    def message_field(self, number: int, value: bytes | None) -> "Writer":
        """Write an already-encoded embedded message."""
        if value is None:
            return self
        return self._delimited(number, bytes(value))

    def getvalue(self) -> bytes:
        return bytes(self._buf)