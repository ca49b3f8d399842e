"""
Topology Cache

Three independent read-through maps, owned by one tool session:
- fs id        -> partition list
- copyset key  -> copyset descriptor
- partition id -> leader address

Entries are filled on first access and kept for the session's lifetime; there
is no TTL and no eviction. A stale entry after a partition split or leader
change is only cleared by clear() or by starting a new session.

Each key has its own lock, so concurrent misses on one key fetch once while
lookups on different keys never wait for each other.
"""

import logging
import threading
from collections import Counter
from typing import Callable, Dict, Hashable, List, Tuple, TypeVar

from metaclient.models import CopysetInfo, PartitionInfo, copyset_key

logger = logging.getLogger(__name__)

T = TypeVar("T")

PARTITIONS = "partitions"
COPYSETS = "copysets"
LEADERS = "leaders"


class TopologyCache:
    """Session-scoped partition/copyset/leader cache"""

    def __init__(self):
        self._maps: Dict[str, Dict[Hashable, object]] = {
            PARTITIONS: {},
            COPYSETS: {},
            LEADERS: {},
        }
        self._key_locks: Dict[Tuple[str, Hashable], threading.Lock] = {}
        self._table_lock = threading.Lock()
        self._stats_lock = threading.Lock()
        self._hits: Counter = Counter()
        self._misses: Counter = Counter()

    def _lock_for(self, name: str, key: Hashable) -> threading.Lock:
        with self._table_lock:
            lock = self._key_locks.get((name, key))
            if lock is None:
                lock = threading.Lock()
                self._key_locks[(name, key)] = lock
            return lock

    def _count(self, counter: Counter, name: str):
        with self._stats_lock:
            counter[name] += 1

    def _get_or_fetch(self, name: str, key: Hashable, fetch: Callable[[], T]) -> T:
        entries = self._maps[name]
        if key in entries:
            self._count(self._hits, name)
            logger.debug(f"{name} cache hit: {key}")
            return entries[key]

        with self._lock_for(name, key):
            # Another caller may have filled it while we waited
            if key in entries:
                self._count(self._hits, name)
                return entries[key]

            self._count(self._misses, name)
            logger.debug(f"{name} cache miss: {key}, fetching")
            value = fetch()
            entries[key] = value
            return value

    def get_partitions(self, fs_id: int, fetch: Callable[[], List[PartitionInfo]]) -> List[PartitionInfo]:
        return self._get_or_fetch(PARTITIONS, fs_id, fetch)

    def get_copyset(self, pool_id: int, copyset_id: int, fetch: Callable[[], CopysetInfo]) -> CopysetInfo:
        return self._get_or_fetch(COPYSETS, copyset_key(pool_id, copyset_id), fetch)

    def get_leader_addr(self, partition_id: int, fetch: Callable[[], str]) -> str:
        return self._get_or_fetch(LEADERS, partition_id, fetch)

    def stats(self) -> Dict[str, Dict[str, int]]:
        """Hit/miss counters and entry count per map"""
        with self._stats_lock:
            return {
                name: {
                    "entries": len(entries),
                    "hits": self._hits[name],
                    "misses": self._misses[name],
                }
                for name, entries in self._maps.items()
            }

    def clear(self):
        with self._table_lock:
            for entries in self._maps.values():
                entries.clear()
            self._key_locks.clear()
        with self._stats_lock:
            self._hits.clear()
            self._misses.clear()
        logger.debug("Topology cache cleared")
