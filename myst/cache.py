"""In-memory LRU caches of docstores and dictionaries, sharded by shard id."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from collections.abc import Hashable
from pathlib import Path
from typing import Any, Generic, TypeVar

DOCSTORE_CAPACITY = 200
DICT_CAPACITY = 48
_DAY_SECONDS = 24 * 60 * 60

_V = TypeVar("_V")


class _LruCache(Generic[_V]):
    """A small thread-safe least-recently-used mapping."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self.capacity = capacity
        self._items: OrderedDict[Hashable, _V] = OrderedDict()
        self._lock = threading.Lock()

    def put(self, key: Hashable, value: _V) -> None:
        with self._lock:
            self._items[key] = value
            self._items.move_to_end(key)
            while len(self._items) > self.capacity:
                self._items.popitem(last=False)

    def get(self, key: Hashable) -> _V | None:
        with self._lock:
            if key not in self._items:
                return None
            self._items.move_to_end(key)
            return self._items[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._items


class ShardedCache:
    """Docstores keyed by (epoch, block id) and dictionaries keyed by epoch."""

    def __init__(
        self,
        docstore_capacity: int = DOCSTORE_CAPACITY,
        dict_capacity: int = DICT_CAPACITY,
    ) -> None:
        self.docstore_cache: _LruCache[Any] = _LruCache(docstore_capacity)
        self.dict_cache: _LruCache[dict[int, str]] = _LruCache(dict_capacity)

    def put(self, epoch: int, id: int, docstore: Any) -> None:
        self.docstore_cache.put((epoch, id), docstore)

    def put_dict(self, epoch: int, dictionary: dict[int, str]) -> None:
        self.dict_cache.put(epoch, dictionary)

    def get(self, epoch: int, id: int) -> Any | None:
        """Return the cached docstore, or None when it is not cached."""
        return self.docstore_cache.get((epoch, id))

    def get_dict(self, epoch: int) -> dict[int, str] | None:
        """Return the cached dictionary, or None when it is not cached."""
        return self.dict_cache.get(epoch)


class Cache:
    """Holds one ShardedCache per shard, created on first use."""

    def __init__(self) -> None:
        self._shards: dict[int, ShardedCache] = {}
        self._lock = threading.Lock()

    def insert_sharded_cache(self, shard: int) -> ShardedCache:
        """Install a fresh cache for ``shard``, replacing any existing one."""
        sharded = ShardedCache()
        with self._lock:
            self._shards[shard] = sharded
        return sharded

    def get_sharded_cache(self, shard: int) -> ShardedCache:
        """Return the cache for ``shard``, creating it when absent."""
        with self._lock:
            sharded = self._shards.get(shard)
            if sharded is None:
                sharded = ShardedCache()
                self._shards[shard] = sharded
            return sharded


def recent_segment_files(data_path: str | Path, now: float | None = None) -> list[Path]:
    """List entries of ``data_path`` named by an epoch newer than one day before ``now``.

    Every entry name must be an integer epoch; otherwise ValueError is raised.
    """
    current = int(time.time() if now is None else now)
    cutoff = current - _DAY_SECONDS
    recent = []
    for entry in sorted(Path(data_path).iterdir()):
        if int(entry.name) > cutoff:
            recent.append(entry)
    return recent