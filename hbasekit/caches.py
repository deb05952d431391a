"""Region caches: key -> region and client -> regions."""

from __future__ import annotations

import bisect
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable

log = logging.getLogger(__name__)


def _ref(obj: object) -> str:
    return f"{id(obj):#x}"


@dataclass(eq=False)
class RegionClient:
    """A connection to a region server, identified by its address."""

    addr: str
    closed: bool = False

    def close(self) -> None:
        self.closed = True

    def to_dict(self) -> dict:
        return {"Addr": self.addr, "Closed": self.closed}


@dataclass(eq=False)
class RegionInfo:
    """Describes one region of a table."""

    id: int
    namespace: bytes
    table: bytes
    name: bytes
    start_key: bytes = b""
    stop_key: bytes = b""
    client: RegionClient | None = None
    available: bool = True
    dead: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self) -> None:
        self.namespace = bytes(self.namespace or b"")
        self.table = bytes(self.table or b"")
        self.name = bytes(self.name or b"")
        self.start_key = bytes(self.start_key or b"")
        self.stop_key = bytes(self.stop_key or b"")

    @property
    def fully_qualified_table(self) -> bytes:
        if self.namespace in (b"", b"default"):
            return self.table
        return self.namespace + b":" + self.table

    def mark_unavailable(self) -> None:
        with self._lock:
            self.available = False

    def mark_dead(self) -> None:
        with self._lock:
            self.dead = True

    def to_dict(self) -> dict:
        return {
            "ID": self.id,
            "Namespace": self.namespace.decode("utf-8", "replace"),
            "Table": self.table.decode("utf-8", "replace"),
            "Name": self.name.decode("utf-8", "replace"),
            "StartKey": self.start_key.decode("utf-8", "replace"),
            "StopKey": self.stop_key.decode("utf-8", "replace"),
            "Available": self.available,
        }


def is_region_overlap(reg_a: RegionInfo, reg_b: RegionInfo) -> bool:
    """Whether two regions of the same table cover intersecting key ranges."""
    return (
        reg_a.namespace == reg_b.namespace
        and reg_a.table == reg_b.table
        and (not reg_b.stop_key or reg_a.start_key < reg_b.stop_key)
        and (not reg_a.stop_key or reg_a.stop_key > reg_b.start_key)
    )


class ClientRegionCache:
    """Maps each region client to the regions it serves."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self.regions: dict[RegionClient, set[RegionInfo]] = {}

    def put(self, addr: str, region: RegionInfo,
            new_client: Callable[[], RegionClient]) -> RegionClient:
        """Associate ``region`` with the client at ``addr``, creating it if needed."""
        with self._lock:
            for existing, regions in self.regions.items():
                if existing.addr == addr:
                    regions.add(region)
                    log.debug("region client %s is already in client's cache", existing)
                    return existing
            client = new_client()
            self.regions[client] = {region}
        log.info("added new region client %s", client)
        return client

    def delete(self, region: RegionInfo) -> None:
        with self._lock:
            client = region.client
            if client is not None:
                region.client = None
                self.regions.get(client, set()).discard(region)

    def close_all(self) -> None:
        with self._lock:
            for client, regions in self.regions.items():
                for region in regions:
                    region.mark_unavailable()
                    region.client = None
                client.close()

    def client_down(self, client: RegionClient) -> set[RegionInfo]:
        """Forget ``client`` and return the regions it served."""
        with self._lock:
            down = self.regions.pop(client, None)
        if down is not None:
            log.info("removed region client %s", client)
        return down if down is not None else set()

    def debug_info(self, regions: dict[str, RegionInfo],
                   clients: dict[str, RegionClient]) -> dict[str, list[str]]:
        """Fill ``regions`` and ``clients`` by reference and map clients to region refs."""
        result: dict[str, list[str]] = {}
        with self._lock:
            for client, infos in self.regions.items():
                clients[_ref(client)] = client
                refs = []
                for info in infos:
                    regions[_ref(info)] = info
                    refs.append(_ref(info))
                result[_ref(client)] = refs
        return result


class KeyRegionCache:
    """Regions ordered by table and start key."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._keys: list[tuple] = []
        self._regions: list[RegionInfo] = []
        self._by_name: dict[bytes, tuple] = {}

    def __len__(self) -> int:
        return len(self._keys)

    @staticmethod
    def _sort_key(region: RegionInfo) -> tuple:
        return (region.fully_qualified_table, region.start_key, region.id)

    def get(self, key: tuple[bytes, bytes]) -> tuple[tuple | None, RegionInfo | None]:
        """Return the cached entry at or before ``key`` = (fully-qualified table, row)."""
        table, row = key
        search = (bytes(table), bytes(row), float("inf"))
        with self._lock:
            idx = bisect.bisect_right(self._keys, search)
            if idx == 0:
                return None, None
            return self._keys[idx - 1], self._regions[idx - 1]

    def _overlaps(self, region: RegionInfo) -> list[RegionInfo]:
        if not self._keys:
            return []
        search = (region.fully_qualified_table, region.start_key, float("inf"))
        start = max(bisect.bisect_right(self._keys, search) - 1, 0)
        overlaps = []
        first = self._regions[start]
        if is_region_overlap(first, region):
            overlaps.append(first)
        for candidate in self._regions[start + 1:]:
            if not is_region_overlap(candidate, region):
                break
            overlaps.append(candidate)
        return overlaps

    def get_overlaps(self, region: RegionInfo) -> list[RegionInfo]:
        with self._lock:
            return self._overlaps(region)

    def _remove(self, name: bytes) -> bool:
        sort_key = self._by_name.pop(name, None)
        if sort_key is None:
            return False
        idx = bisect.bisect_left(self._keys, sort_key)
        del self._keys[idx]
        del self._regions[idx]
        return True

    def put(self, region: RegionInfo) -> tuple[list[RegionInfo], bool]:
        """Insert ``region`` unless a same-named or younger overlapping one exists.

        Returns the overlapping regions and whether ``region`` was inserted.
        """
        with self._lock:
            existing_key = self._by_name.get(region.name)
            if existing_key is not None:
                idx = bisect.bisect_left(self._keys, existing_key)
                log.debug("region %s is already in cache", region)
                return [self._regions[idx]], False
            overlaps = self._overlaps(region)
            if any(o.id > region.id for o in overlaps):
                log.debug("younger overlapping region exists for %s", region)
                return overlaps, False
            for o in overlaps:
                self._remove(o.name)
                o.mark_dead()
            sort_key = self._sort_key(region)
            idx = bisect.bisect_left(self._keys, sort_key)
            self._keys.insert(idx, sort_key)
            self._regions.insert(idx, region)
            self._by_name[region.name] = sort_key
        log.info("added new region %s", region.name)
        return overlaps, True

    def delete(self, region: RegionInfo) -> bool:
        with self._lock:
            success = self._remove(region.name)
        region.mark_dead()
        log.debug("removed region %s", region.name)
        return success

    def debug_info(self, regions: dict[str, RegionInfo]) -> dict[str, str]:
        """Fill ``regions`` by reference and map region names to refs."""
        result: dict[str, str] = {}
        with self._lock:
            entries = list(self._regions)
        for region in entries:
            regions[_ref(region)] = region
            result[region.name.decode("utf-8", "replace")] = _ref(region)
        return result