"""Comparators used by HBase filters, encoded as protocol-buffer messages."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum

from hbasekit.protowire import Writer

COMPARATOR_PATH = "org.apache.hadoop.hbase.filter."


class BitwiseOp(IntEnum):
    """Bitwise operation applied by a :class:`BitComparator`."""

    AND = 1
    OR = 2
    XOR = 3


@dataclass(frozen=True)
class PBComparator:
    """A comparator as sent to the server: Java class name plus serialized body."""

    name: str
    serialized_comparator: bytes | None = None

    def serialize(self) -> bytes:
        return (
            Writer()
            .string_field(1, self.name)
            .bytes_field(2, self.serialized_comparator)
            .getvalue()
        )


class Comparator(ABC):
    """Base class of every comparator."""

    _java_name = ""

    @abstractmethod
    def _payload(self) -> bytes:
        """Return the serialized comparator message."""

    def to_pb(self) -> PBComparator:
        """Build the server-side representation of this comparator."""
        return PBComparator(COMPARATOR_PATH + self._java_name, self._payload())


@dataclass
class ByteArrayComparable:
    """The byte value that several comparators compare against."""

    value: bytes | None = None

    def _encode(self) -> bytes:
        return Writer().bytes_field(1, self.value).getvalue()


def _with_comparable(comparable: ByteArrayComparable | None) -> Writer:
    if comparable is None:
        raise ValueError("required field comparable is not set")
    return Writer().message_field(1, comparable._encode())


@dataclass
class BinaryComparator(Comparator):
    comparable: ByteArrayComparable

    _java_name = "BinaryComparator"

    def _payload(self) -> bytes:
        return _with_comparable(self.comparable).getvalue()


@dataclass
class LongComparator(Comparator):
    comparable: ByteArrayComparable

    _java_name = "LongComparator"

    def _payload(self) -> bytes:
        return _with_comparable(self.comparable).getvalue()


@dataclass
class BinaryPrefixComparator(Comparator):
    comparable: ByteArrayComparable

    _java_name = "BinaryPrefixComparator"

    def _payload(self) -> bytes:
        return _with_comparable(self.comparable).getvalue()


@dataclass
class BitComparator(Comparator):
    bitwise_op: BitwiseOp
    comparable: ByteArrayComparable

    _java_name = "BitComparator"

    def _payload(self) -> bytes:
        return _with_comparable(self.comparable).enum_field(2, self.bitwise_op).getvalue()

    def to_pb(self) -> PBComparator:
        if not BitwiseOp.AND <= int(self.bitwise_op) <= BitwiseOp.XOR:
            raise ValueError("Invalid bitwise operator specified")
        return super().to_pb()


@dataclass
class NullComparator(Comparator):
    _java_name = "NullComparator"

    def _payload(self) -> bytes:
        return b""


@dataclass
class RegexStringComparator(Comparator):
    pattern: str
    pattern_flags: int
    charset: str
    engine: str

    _java_name = "RegexStringComparator"

    def _payload(self) -> bytes:
        return (
            Writer()
            .string_field(1, self.pattern)
            .int32_field(2, self.pattern_flags)
            .string_field(3, self.charset)
            .string_field(4, self.engine)
            .getvalue()
        )


@dataclass
class SubstringComparator(Comparator):
    substr: str

    _java_name = "SubstringComparator"

    def _payload(self) -> bytes:
        return Writer().string_field(1, self.substr).getvalue()