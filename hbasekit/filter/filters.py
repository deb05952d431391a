"""HBase scan and get filters, encoded as protocol-buffer messages."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable

from hbasekit.filter.comparator import Comparator, PBComparator
from hbasekit.protowire import LENGTH_DELIMITED, Writer, encode_varint

FILTER_PATH = "org.apache.hadoop.hbase.filter."

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


class ListOperator(IntEnum):
    """How a :class:`FilterList` combines its filters."""

    MUST_PASS_ALL = 1
    MUST_PASS_ONE = 2


class CompareType(IntEnum):
    """Comparison operation used by compare-based filters."""

    LESS = 0
    LESS_OR_EQUAL = 1
    EQUAL = 2
    NOT_EQUAL = 3
    GREATER_OR_EQUAL = 4
    GREATER = 5
    NO_OP = 6


@dataclass(frozen=True)
class PBFilter:
    """A filter as sent to the server: Java class name plus serialized body."""

    name: str
    serialized_filter: bytes | None = None

    def serialize(self) -> bytes:
        return (
            Writer()
            .string_field(1, self.name)
            .bytes_field(2, self.serialized_filter)
            .getvalue()
        )


def _required(value, name: str):
    if value is None:
        raise ValueError(f"required field {name} is not set")
    return value


class Filter(ABC):
    """Base class of every filter."""

    _java_name = ""

    @abstractmethod
    def _payload(self) -> bytes:
        """Return the serialized filter message."""

    def to_pb(self) -> PBFilter:
        """Build the server-side representation of this filter."""
        return PBFilter(FILTER_PATH + self._java_name, self._payload())


@dataclass
class BytesBytesPair:
    """A pair of byte strings, as used by :class:`FuzzyRowFilter`."""

    first: bytes
    second: bytes

    def _encode(self) -> bytes:
        return (
            Writer()
            .bytes_field(1, _required(self.first, "first"))
            .bytes_field(2, _required(self.second, "second"))
            .getvalue()
        )


class FilterList(Filter):
    """Combines several filters with an operator."""

    _java_name = "FilterList"

    def __init__(self, operator: ListOperator, *filters: Filter) -> None:
        self.operator = operator
        self.filters: list[PBFilter] = []
        self.add_filters(*filters)

    def add_filters(self, *args: Filter) -> None:
        """Convert and append each filter; raises if one cannot be converted."""
        self.filters.extend(f.to_pb() for f in args)

    def _payload(self) -> bytes:
        writer = Writer().enum_field(1, int(self.operator))
        for pb_filter in self.filters:
            writer.message_field(2, pb_filter.serialize())
        return writer.getvalue()

    def to_pb(self) -> PBFilter:
        if int(self.operator) not in (ListOperator.MUST_PASS_ALL, ListOperator.MUST_PASS_ONE):
            raise ValueError("invalid operator specified")
        return super().to_pb()


@dataclass
class ColumnCountGetFilter(Filter):
    limit: int

    _java_name = "ColumnCountGetFilter"

    def _payload(self) -> bytes:
        return Writer().int32_field(1, _required(self.limit, "limit")).getvalue()


@dataclass
class ColumnPaginationFilter(Filter):
    limit: int
    offset: int
    column_offset: bytes | None = None

    _java_name = "ColumnPaginationFilter"

    def _payload(self) -> bytes:
        return (
            Writer()
            .int32_field(1, _required(self.limit, "limit"))
            .int32_field(2, self.offset)
            .bytes_field(3, self.column_offset)
            .getvalue()
        )


@dataclass
class ColumnPrefixFilter(Filter):
    prefix: bytes

    _java_name = "ColumnPrefixFilter"

    def _payload(self) -> bytes:
        return Writer().bytes_field(1, _required(self.prefix, "prefix")).getvalue()


@dataclass
class ColumnRangeFilter(Filter):
    min_column: bytes | None
    max_column: bytes | None
    min_column_inclusive: bool
    max_column_inclusive: bool

    _java_name = "ColumnRangeFilter"

    def _payload(self) -> bytes:
        return (
            Writer()
            .bytes_field(1, self.min_column)
            .bool_field(2, self.min_column_inclusive)
            .bytes_field(3, self.max_column)
            .bool_field(4, self.max_column_inclusive)
            .getvalue()
        )


class CompareFilter(Filter):
    """A comparison operation paired with a comparator."""

    _java_name = "CompareFilter"

    def __init__(self, compare_op: CompareType, comparator: Comparator) -> None:
        self.compare_op = compare_op
        self.comparator: PBComparator = comparator.to_pb()

    def _payload(self) -> bytes:
        return (
            Writer()
            .enum_field(1, int(_required(self.compare_op, "compare_op")))
            .message_field(2, self.comparator.serialize())
            .getvalue()
        )


def _compare_filter_message(compare_filter: CompareFilter | None) -> bytes:
    return Writer().message_field(
        1, _required(compare_filter, "compare_filter")._payload()
    ).getvalue()


@dataclass
class DependentColumnFilter(Filter):
    compare_filter: CompareFilter
    column_family: bytes | None
    column_qualifier: bytes | None
    drop_dependent_column: bool

    _java_name = "DependentColumnFilter"

    def _payload(self) -> bytes:
        writer = Writer().message_field(
            1, _required(self.compare_filter, "compare_filter")._payload()
        )
        return (
            writer.bytes_field(2, self.column_family)
            .bytes_field(3, self.column_qualifier)
            .bool_field(4, self.drop_dependent_column)
            .getvalue()
        )


@dataclass
class FamilyFilter(Filter):
    compare_filter: CompareFilter

    _java_name = "FamilyFilter"

    def _payload(self) -> bytes:
        return _compare_filter_message(self.compare_filter)


@dataclass
class QualifierFilter(Filter):
    compare_filter: CompareFilter

    _java_name = "QualifierFilter"

    def _payload(self) -> bytes:
        return _compare_filter_message(self.compare_filter)


@dataclass
class RowFilter(Filter):
    compare_filter: CompareFilter

    _java_name = "RowFilter"

    def _payload(self) -> bytes:
        return _compare_filter_message(self.compare_filter)


@dataclass
class ValueFilter(Filter):
    compare_filter: CompareFilter

    _java_name = "ValueFilter"

    def _payload(self) -> bytes:
        return _compare_filter_message(self.compare_filter)


class _WrappingFilter(Filter):
    def __init__(self, filter: Filter) -> None:
        self.filter: PBFilter = filter.to_pb()

    def _payload(self) -> bytes:
        return Writer().message_field(1, self.filter.serialize()).getvalue()


class FilterWrapper(_WrappingFilter):
    """Wraps another filter."""

    _java_name = "FilterWrapper"


class SkipFilter(_WrappingFilter):
    """Skips a whole row when the wrapped filter excludes any of its cells."""

    _java_name = "SkipFilter"


class WhileMatchFilter(_WrappingFilter):
    """Stops the scan as soon as the wrapped filter excludes a row."""

    _java_name = "WhileMatchFilter"


@dataclass
class FirstKeyOnlyFilter(Filter):
    _java_name = "FirstKeyOnlyFilter"

    def _payload(self) -> bytes:
        return b""


@dataclass
class AllFilter(Filter):
    _java_name = "FilterAllFilter"

    def _payload(self) -> bytes:
        return b""


def _repeated_bytes(values: Iterable[bytes | None]) -> bytes:
    writer = Writer()
    for value in values:
        writer.bytes_field(1, value if value is not None else b"")
    return writer.getvalue()


@dataclass
class FirstKeyValueMatchingQualifiersFilter(Filter):
    qualifiers: list[bytes] = field(default_factory=list)

    _java_name = "FirstKeyValueMatchingQualifiersFilter"

    def _payload(self) -> bytes:
        return _repeated_bytes(self.qualifiers or [])


@dataclass
class MultipleColumnPrefixFilter(Filter):
    sorted_prefixes: list[bytes] = field(default_factory=list)

    _java_name = "MultipleColumnPrefixFilter"

    def _payload(self) -> bytes:
        return _repeated_bytes(self.sorted_prefixes or [])


@dataclass
class FuzzyRowFilter(Filter):
    pairs: list[BytesBytesPair] = field(default_factory=list)

    _java_name = "FuzzyRowFilter"

    def _payload(self) -> bytes:
        writer = Writer()
        for pair in self.pairs or []:
            writer.message_field(1, pair._encode())
        return writer.getvalue()


@dataclass
class InclusiveStopFilter(Filter):
    stop_row_key: bytes | None

    _java_name = "InclusiveStopFilter"

    def _payload(self) -> bytes:
        return Writer().bytes_field(1, self.stop_row_key).getvalue()


@dataclass
class KeyOnlyFilter(Filter):
    len_as_val: bool

    _java_name = "KeyOnlyFilter"

    def _payload(self) -> bytes:
        return Writer().bool_field(1, _required(self.len_as_val, "len_as_val")).getvalue()


@dataclass
class PageFilter(Filter):
    page_size: int

    _java_name = "PageFilter"

    def _payload(self) -> bytes:
        return Writer().int64_field(1, _required(self.page_size, "page_size")).getvalue()


@dataclass
class PrefixFilter(Filter):
    prefix: bytes | None

    _java_name = "PrefixFilter"

    def _payload(self) -> bytes:
        return Writer().bytes_field(1, self.prefix).getvalue()


@dataclass
class RandomRowFilter(Filter):
    chance: float

    _java_name = "RandomRowFilter"

    def _payload(self) -> bytes:
        return Writer().float_field(1, _required(self.chance, "chance")).getvalue()


class SingleColumnValueFilter(Filter):
    """Filters rows on the value of a single column."""

    _java_name = "SingleColumnValueFilter"

    def __init__(self, column_family: bytes | None, column_qualifier: bytes | None,
                 compare_op: CompareType, comparator: Comparator,
                 filter_if_missing: bool, latest_version_only: bool) -> None:
        self.column_family = column_family
        self.column_qualifier = column_qualifier
        self.compare_op = compare_op
        self.comparator: PBComparator = comparator.to_pb()
        self.filter_if_missing = filter_if_missing
        self.latest_version_only = latest_version_only

    def check(self) -> "SingleColumnValueFilter":
        """Validate the compare operation, returning this filter."""
        if not CompareType.LESS <= int(self.compare_op) <= CompareType.NO_OP:
            raise ValueError("invalid compare operation specified")
        return self

    def _payload(self) -> bytes:
        return (
            Writer()
            .bytes_field(1, self.column_family)
            .bytes_field(2, self.column_qualifier)
            .enum_field(3, int(_required(self.compare_op, "compare_op")))
            .message_field(4, self.comparator.serialize())
            .bool_field(5, self.filter_if_missing)
            .bool_field(6, self.latest_version_only)
            .getvalue()
        )


@dataclass
class SingleColumnValueExcludeFilter(Filter):
    filter: SingleColumnValueFilter

    _java_name = "SingleColumnValueExcludeFilter"

    def _payload(self) -> bytes:
        inner = _required(self.filter, "single_column_value_filter")
        return Writer().message_field(1, inner._payload()).getvalue()


@dataclass
class TimestampsFilter(Filter):
    timestamps: list[int] = field(default_factory=list)

    _java_name = "TimestampsFilter"

    def _payload(self) -> bytes:
        packed = bytearray()
        for ts in self.timestamps or []:
            if not _INT64_MIN <= ts <= _INT64_MAX:
                raise ValueError(f"timestamp {ts} out of range")
            packed += encode_varint(ts)
        if not packed:
            return b""
        return (
            encode_varint((1 << 3) | LENGTH_DELIMITED)
            + encode_varint(len(packed))
            + bytes(packed)
        )


@dataclass
class RowRange(Filter):
    start_row: bytes | None
    stop_row: bytes | None
    start_row_inclusive: bool
    stop_row_inclusive: bool

    _java_name = "RowRange"

    def _payload(self) -> bytes:
        return (
            Writer()
            .bytes_field(1, self.start_row)
            .bool_field(2, self.start_row_inclusive)
            .bytes_field(3, self.stop_row)
            .bool_field(4, self.stop_row_inclusive)
            .getvalue()
        )


@dataclass
class MultiRowRangeFilter(Filter):
    row_ranges: list[RowRange] = field(default_factory=list)

    _java_name = "MultiRowRangeFilter"

    def _payload(self) -> bytes:
        writer = Writer()
        for row_range in self.row_ranges or []:
            writer.message_field(1, row_range._payload())
        return writer.getvalue()