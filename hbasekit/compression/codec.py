"""Compression codec interface and factory."""

from __future__ import annotations

from typing import Protocol

from hbasekit.compression.snappy import SnappyCodec


class Codec(Protocol):
    """Encodes and decodes chunks of cell blocks."""

    def encode(self, src: bytes, dst: bytes) -> tuple[bytes, int]:
        ...

    def decode(self, src: bytes, dst: bytes) -> tuple[bytes, int]:
        ...

    def chunk_len(self) -> int:
        ...

    def cell_block_compressor_class(self) -> str:
        ...


class UnknownCodecError(ValueError):
    """Raised for an unsupported codec name."""


def new_codec(name: str) -> Codec:
    """Return the codec called ``name``; only "snappy" is supported."""
    if name == "snappy":
        return SnappyCodec()
    raise UnknownCodecError(f"unknown compression codec: {name!r}")