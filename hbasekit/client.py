"""Client configuration, state and debug dump."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable

from hbasekit.caches import ClientRegionCache, KeyRegionCache, RegionInfo
from hbasekit.compression.codec import Codec, new_codec

log = logging.getLogger(__name__)

DEFAULT_RPC_QUEUE_SIZE = 100
DEFAULT_FLUSH_INTERVAL = 0.020
DEFAULT_ZK_ROOT = "/hbase"
DEFAULT_ZK_TIMEOUT = 30.0
DEFAULT_EFFECTIVE_USER = "root"
DEFAULT_LOOKUP_TIMEOUT = 30.0
DEFAULT_READ_TIMEOUT = 30.0


class ClientType(str, Enum):
    REGION = "ClientService"
    MASTER = "MasterService"


@dataclass
class ClientConfig:
    """Tunable settings of a client; durations are in seconds."""

    rpc_queue_size: int = DEFAULT_RPC_QUEUE_SIZE
    flush_interval: float = DEFAULT_FLUSH_INTERVAL
    zk_root: str = DEFAULT_ZK_ROOT
    zk_timeout: float = DEFAULT_ZK_TIMEOUT
    effective_user: str = DEFAULT_EFFECTIVE_USER
    region_lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT
    region_read_timeout: float = DEFAULT_READ_TIMEOUT
    compression_codec: Codec | None = None


Option = Callable[[ClientConfig], None]


def rpc_queue_size(size: int) -> Option:
    def apply(cfg: ClientConfig) -> None:
        cfg.rpc_queue_size = size
    return apply


def zookeeper_root(root: str) -> Option:
    def apply(cfg: ClientConfig) -> None:
        cfg.zk_root = root
    return apply


def zookeeper_timeout(timeout: float) -> Option:
    def apply(cfg: ClientConfig) -> None:
        cfg.zk_timeout = timeout
    return apply


def region_lookup_timeout(timeout: float) -> Option:
    def apply(cfg: ClientConfig) -> None:
        cfg.region_lookup_timeout = timeout
    return apply


def region_read_timeout(timeout: float) -> Option:
    def apply(cfg: ClientConfig) -> None:
        cfg.region_read_timeout = timeout
    return apply


def effective_user(user: str) -> Option:
    def apply(cfg: ClientConfig) -> None:
        cfg.effective_user = user
    return apply


def flush_interval(interval: float) -> Option:
    def apply(cfg: ClientConfig) -> None:
        cfg.flush_interval = interval
    return apply


def compression_codec(codec: str) -> Option:
    """Option selecting the cell-block codec; raises for unknown names."""
    resolved = new_codec(codec)

    def apply(cfg: ClientConfig) -> None:
        cfg.compression_codec = resolved
    return apply


def _nanos(seconds: float) -> int:
    return round(seconds * 1_000_000_000)


class ClientState:
    """The caches and settings behind one HBase client."""

    def __init__(self, zkquorum: str, *options: Option,
                 client_type: ClientType = ClientType.REGION) -> None:
        log.debug("creating new client for %s", zkquorum)
        self.zkquorum = zkquorum
        self.client_type = client_type
        self.config = ClientConfig()
        for option in options:
            option(self.config)
        self.regions = KeyRegionCache()
        self.clients = ClientRegionCache()
        self.meta_region_info = RegionInfo(0, b"hbase", b"meta", b"hbase:meta,,1")
        self.admin_region_info = RegionInfo(0, b"", b"", b"")
        self.closed = False
        self._close_lock = threading.Lock()

    def close(self) -> None:
        """Close every region client once; later calls do nothing."""
        with self._close_lock:
            if self.closed:
                return
            self.closed = True
        if self.client_type is ClientType.MASTER and self.admin_region_info.client:
            self.admin_region_info.client.close()
        self.clients.close_all()

    def to_json(self) -> bytes:
        """Dump the caches and state as JSON bytes."""
        region_map: dict = {}
        client_map: dict = {}
        client_cache = self.clients.debug_info(region_map, client_map)
        key_cache = self.regions.debug_info(region_map)
        state = {
            "ClientType": self.client_type.value,
            "ClientRegionMap": {k: v.to_dict() for k, v in client_map.items()},
            "RegionInfoMap": {k: v.to_dict() for k, v in region_map.items()},
            "KeyRegionCache": key_cache,
            "ClientRegionCache": client_cache,
            "MetaRegionInfo": self.meta_region_info.to_dict(),
            "AdminRegionInfo": self.admin_region_info.to_dict(),
            "Done_Status": "Closed" if self.closed else "Not Closed",
            "RegionLookupTimeout": _nanos(self.config.region_lookup_timeout),
            "RegionReadTimeout": _nanos(self.config.region_read_timeout),
        }
        return json.dumps(state).encode("utf-8")


def debug_state(client: ClientState) -> bytes:
    """Return the JSON debug dump of ``client``."""
    return client.to_json()