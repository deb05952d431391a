"""Snappy block compression and the cell-block codec built on it."""

from __future__ import annotations

# Hadoop's SnappyCodec buffer length (256 KiB) minus snappy overhead.
SNAPPY_CHUNK_LEN = 256 * 1024 * 5 // 6 - 32

_MIN_MATCH_BLOCK = 17
_MAX_OFFSET = 65535
_MAX_COPY_LEN = 64


class SnappyError(ValueError):
    """Raised when snappy input cannot be decoded."""


def _corrupt() -> SnappyError:
    return SnappyError("snappy: corrupt input")


def _encode_varint(value: int) -> bytes:
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _emit_literal(out: bytearray, chunk: bytes) -> None:
    if not chunk:
        return
    n = len(chunk) - 1
    if n < 60:
        out.append(n << 2)
    elif n < 1 << 8:
        out.append(60 << 2)
        out.append(n)
    elif n < 1 << 16:
        out.append(61 << 2)
        out += n.to_bytes(2, "little")
    elif n < 1 << 24:
        out.append(62 << 2)
        out += n.to_bytes(3, "little")
    else:
        out.append(63 << 2)
        out += n.to_bytes(4, "little")
    out += chunk


def _emit_copy(out: bytearray, offset: int, length: int) -> None:
    while length > 0:
        step = min(length, _MAX_COPY_LEN)
        out.append(((step - 1) << 2) | 2)
        out += offset.to_bytes(2, "little")
        length -= step


def compress(data: bytes) -> bytes:
    """Compress ``data`` into a snappy block."""
    data = bytes(data)
    n = len(data)
    out = bytearray(_encode_varint(n))
    if n < _MIN_MATCH_BLOCK:
        _emit_literal(out, data)
        return bytes(out)

    table: dict[bytes, int] = {}
    i = 0
    lit_start = 0
    while i + 4 <= n:
        window = data[i:i + 4]
        cand = table.get(window)
        table[window] = i
        if cand is not None and i - cand <= _MAX_OFFSET:
            _emit_literal(out, data[lit_start:i])
            length = 4
            while i + length < n and data[cand + length] == data[i + length]:
                length += 1
            _emit_copy(out, i - cand, length)
            i += length
            lit_start = i
        else:
            i += 1
    _emit_literal(out, data[lit_start:])
    return bytes(out)


def _read_varint(data: bytes) -> tuple[int, int]:
    value = 0
    for pos, byte in enumerate(data[:5]):
        value |= (byte & 0x7F) << (7 * pos)
        if byte < 0x80:
            if value > 0xFFFFFFFF:
                raise _corrupt()
            return value, pos + 1
    raise _corrupt()


def decompress(data: bytes) -> bytes:
    """Decode a snappy block, raising :class:`SnappyError` on bad input."""
    data = bytes(data)
    expected, pos = _read_varint(data)
    out = bytearray()
    n = len(data)
    while pos < n:
        tag = data[pos]
        kind = tag & 3
        pos += 1
        if kind == 0:
            length = tag >> 2
            if length >= 60:
                extra = length - 59
                if pos + extra > n:
                    raise _corrupt()
                length = int.from_bytes(data[pos:pos + extra], "little")
                pos += extra
            length += 1
            if pos + length > n:
                raise _corrupt()
            out += data[pos:pos + length]
            pos += length
            continue
        if kind == 1:
            if pos + 1 > n:
                raise _corrupt()
            length = 4 + ((tag >> 2) & 7)
            offset = ((tag & 0xE0) << 3) | data[pos]
            pos += 1
        elif kind == 2:
            if pos + 2 > n:
                raise _corrupt()
            length = 1 + (tag >> 2)
            offset = int.from_bytes(data[pos:pos + 2], "little")
            pos += 2
        else:
            if pos + 4 > n:
                raise _corrupt()
            length = 1 + (tag >> 2)
            offset = int.from_bytes(data[pos:pos + 4], "little")
            pos += 4
        if offset == 0 or offset > len(out) or len(out) + length > expected:
            raise _corrupt()
        start = len(out) - offset
        for j in range(length):
            out.append(out[start + j])
        if len(out) > expected:
            raise _corrupt()
    if len(out) != expected:
        raise _corrupt()
    return bytes(out)


class SnappyCodec:
    """Cell-block codec using snappy compression."""

    def encode(self, src: bytes, dst: bytes = b"") -> tuple[bytes, int]:
        """Compress ``src`` and append it to ``dst``; return the result and chunk size."""
        chunk = compress(src or b"")
        return bytes(dst or b"") + chunk, len(chunk)

    def decode(self, src: bytes, dst: bytes = b"") -> tuple[bytes, int]:
        """Decompress ``src`` and append it to ``dst``; return the result and chunk size."""
        chunk = decompress(src)
        return bytes(dst or b"") + chunk, len(chunk)

    def chunk_len(self) -> int:
        return SNAPPY_CHUNK_LEN

    def cell_block_compressor_class(self) -> str:
        return "org.apache.hadoop.io.compress.SnappyCodec"