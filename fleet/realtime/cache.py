"""
Keyed query cache used by realtime consumers.

Keys are tuples such as ``("equipments",)`` or ``("equipments", project_id)``;
``invalidate_queries(prefix)`` matches every key starting with ``prefix``.
"""

import copy
import logging
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

log = logging.getLogger(__name__)

Key = Tuple[Hashable, ...]
Fetcher = Callable[[Key], Any]


def _as_key(key) -> Key:
    return key if isinstance(key, tuple) else (key,)


class QueryCache:
    def __init__(self):
        self._lock = threading.RLock()
        self._data: Dict[Key, Any] = {}
        self._stale: set = set()
        self._fetchers: Dict[Key, Fetcher] = {}
        self.invalidations = []

    def register_fetcher(self, prefix, fetcher: Fetcher) -> None:
        """``fetcher(key)`` reloads any key under ``prefix`` on invalidation."""
        self._fetchers[_as_key(prefix)] = fetcher

    def has(self, key) -> bool:
        with self._lock:
            return _as_key(key) in self._data

    def get_query_data(self, key, default=None):
        with self._lock:
            return self._data.get(_as_key(key), default)

    def set_query_data(self, key, value_or_updater):
        """Store a value, or apply ``updater(old)`` when a callable is given."""
        key = _as_key(key)
        with self._lock:
            if callable(value_or_updater):
                value = value_or_updater(self._data.get(key))
            else:
                value = value_or_updater
            self._data[key] = value
            self._stale.discard(key)
            return value

    def remove_query(self, key) -> None:
        with self._lock:
            self._data.pop(_as_key(key), None)
            self._stale.discard(_as_key(key))

    def is_stale(self, key) -> bool:
        with self._lock:
            return _as_key(key) in self._stale

    def invalidate_queries(self, prefix) -> int:
        """Mark matching keys stale and refetch those with a fetcher."""
        prefix = _as_key(prefix)
        with self._lock:
            self.invalidations.append(prefix)
            keys = [k for k in self._data if k[: len(prefix)] == prefix]
            self._stale.update(keys)

        for key in keys:
            fetcher = self._fetcher_for(key)
            if fetcher is None:
                continue
            try:
                self.set_query_data(key, fetcher(key))
            except Exception:
                log.exception("refetch failed for %r", key)
        return len(keys)

    def _fetcher_for(self, key: Key) -> Optional[Fetcher]:
        best = None
        for prefix, fetcher in self._fetchers.items():
            if key[: len(prefix)] == prefix and (best is None or len(prefix) > len(best[0])):
                best = (prefix, fetcher)
        return best[1] if best else None

    @contextmanager
    def optimistic_update(self, key, updater):
        """
        Apply ``updater`` now; restore the previous value if the body raises.

            with cache.optimistic_update(("equipments",), lambda rows: rows + [row]):
                api.create(row)
        """
        key = _as_key(key)
        with self._lock:
            existed = key in self._data
            previous = copy.deepcopy(self._data.get(key))
        self.set_query_data(key, updater)
        try:
            yield self.get_query_data(key)
        except Exception:
            with self._lock:
                if existed:
                    self._data[key] = previous
                else:
                    self._data.pop(key, None)
            log.info("optimistic update of %r rolled back", key)
            raise
