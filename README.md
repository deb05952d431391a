# hbasekit

Building blocks for an HBase client, written in plain Python with no
third-party dependencies.

## Modules

- `hbasekit.caches`: the region caches a client keeps.
  - `RegionInfo` describes one region (id, namespace, table, name, start and
    stop key, the `RegionClient` serving it, availability and dead flags).
  - `RegionClient` stands for a region-server connection identified by its
    address; `close()` only marks it closed.
  - `KeyRegionCache` keeps regions ordered by fully-qualified table and start
    key. `put(region)` inserts a region unless one with the same name, or a
    younger overlapping one, is already cached; older overlapping regions are
    removed and marked dead. It returns `(overlaps, inserted)`.
    `get((table, row))` returns the cached entry at or before that key.
    `get_overlaps`, `delete` and `debug_info` complete it.
  - `ClientRegionCache` maps each `RegionClient` to the regions it serves:
    `put(addr, region, new_client)`, `delete`, `close_all`, `client_down`,
    `debug_info`.
  - `is_region_overlap(reg_a, reg_b)` tells whether two regions of the same
    table have intersecting key ranges.
- `hbasekit.client`: `ClientConfig` (durations in seconds), option functions
  `rpc_queue_size`, `zookeeper_root`, `zookeeper_timeout`,
  `region_lookup_timeout`, `region_read_timeout`, `effective_user`,
  `flush_interval` and `compression_codec`, the `ClientType` enum, and
  `ClientState`, which holds the caches and settings. `ClientState.close()`
  closes every region client once; `ClientState.to_json()` and
  `debug_state(client)` give a JSON dump of the caches and state.
- `hbasekit.compression.snappy`: `compress`, `decompress` (raising
  `SnappyError` on corrupt input) and `SnappyCodec`, the cell-block codec.
- `hbasekit.compression.codec`: the `Codec` protocol and `new_codec(name)`,
  which knows only `"snappy"` and raises `UnknownCodecError` otherwise.
- `hbasekit.filter.comparator`: comparators (`BinaryComparator`,
  `LongComparator`, `BinaryPrefixComparator`, `BitComparator`,
  `NullComparator`, `RegexStringComparator`, `SubstringComparator`) whose
  `to_pb()` returns a `PBComparator`.
- `hbasekit.filter.filters`: filters (`FilterList`, `PrefixFilter`,
  `RowFilter`, `SingleColumnValueFilter`, `PageFilter`, `MultiRowRangeFilter`
  and the rest) whose `to_pb()` returns a `PBFilter`; `serialize()` gives
  the protobuf bytes.
- `hbasekit.protowire`: a small protobuf wire-format `Writer`, plus
  `encode_varint`, `decode_varint` and `iter_fields` for reading.

## Install

```
pip install .
pip install ".[test]"   # with test requirements
```

## Examples

Compress a cell block with snappy:

```python
from hbasekit.compression.codec import new_codec

codec = new_codec("snappy")
out, size = codec.encode(b"test", b"")
assert out == b"\x04\x0ctest" and size == 6
decoded, n = codec.decode(out, b"")
assert decoded == b"test" and n == 4
```

Build a filter for a scan:

```python
from hbasekit.filter.comparator import BinaryComparator, ByteArrayComparable
from hbasekit.filter.filters import (
    CompareFilter, CompareType, FilterList, ListOperator, PrefixFilter, RowFilter,
)

row_filter = RowFilter(
    CompareFilter(CompareType.EQUAL, BinaryComparator(ByteArrayComparable(b"row1")))
)
filters = FilterList(ListOperator.MUST_PASS_ONE, PrefixFilter(b"user_"), row_filter)
pb_filter = filters.to_pb()
assert pb_filter.name == "org.apache.hadoop.hbase.filter.FilterList"
wire = pb_filter.serialize()
```

Cache a region and look it up:

```python
from hbasekit.caches import KeyRegionCache, RegionInfo

cache = KeyRegionCache()
region = RegionInfo(1, b"", b"test", b"test,,1", b"", b"foo")
overlaps, inserted = cache.put(region)
assert inserted and overlaps == []
key, found = cache.get((b"test", b"bar"))
assert found is region
```

Dump a client's state:

```python
from hbasekit.client import ClientState, debug_state, rpc_queue_size

state = ClientState("localhost", rpc_queue_size(5))
print(debug_state(state).decode())
state.close()
```

## What this package does not do

It has no network layer: it does not connect to ZooKeeper or to region
servers, and has no Get, Put, Scan, mutation or admin operations.
`RegionClient` only records an address and whether it was closed, and
`ClientState` only holds configuration and caches.

## Tests

```
pytest
```