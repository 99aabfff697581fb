"""
Keep a QueryCache in step with the change feed.

Each bound table is subscribed on the source; incoming events patch the
cached list by id (or invalidate it when that is not possible) and then
invalidate the related aggregate queries. Subscription failures are retried
with capped exponential backoff before giving up.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, List, Optional, Tuple

from .cache import QueryCache
from .events import DELETE, INSERT, UPDATE, ChangeEvent

log = logging.getLogger(__name__)

CLOSED = "CLOSED"
CONNECTING = "CONNECTING"
SUBSCRIBED = "SUBSCRIBED"
DISCONNECTED = "DISCONNECTED"

GAVE_UP_MESSAGE = "Connection failed after multiple attempts"

DEFAULT_RELATED_KEYS = (("dashboard-data",), ("dashboard-stats",))


@dataclass(frozen=True)
class RetryPolicy:
    initial_delay: float = 1.0
    max_delay: float = 30.0
    max_attempts: int = 5

    def delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (0-based)."""
        return min(self.initial_delay * (2 ** attempt), self.max_delay)


@dataclass(frozen=True)
class TableBinding:
    table: str
    list_key: Tuple
    related_keys: Tuple[Tuple, ...] = DEFAULT_RELATED_KEYS

    def detail_key(self, record_id) -> Tuple:
        return self.list_key + (record_id,)


class TimerScheduler:
    def schedule(self, delay: float, fn: Callable[[], None]):
        timer = threading.Timer(delay, fn)
        timer.daemon = True
        timer.start()
        return timer


def dedupe_by_id(rows: Iterable[dict]) -> List[dict]:
    seen = set()
    out = []
    for row in rows:
        rid = row.get("id")
        if rid is not None and rid in seen:
            continue
        seen.add(rid)
        out.append(row)
    return out


def apply_change(rows: List[dict], event: ChangeEvent) -> List[dict]:
    """Return a new list with ``event`` applied."""
    rows = list(rows or [])
    rid = event.record_id

    if event.event_type == INSERT:
        if any(r.get("id") == rid for r in rows):
            return dedupe_by_id(rows)
        return dedupe_by_id([dict(event.new)] + rows)

    if event.event_type == UPDATE:
        return dedupe_by_id([{**r, **event.new} if r.get("id") == rid else r for r in rows])

    if event.event_type == DELETE:
        return [r for r in rows if r.get("id") != rid]

    return rows


def _patch(value: Any, event: ChangeEvent):
    # lists are cached either bare or inside a {"data", "total"} envelope
    if isinstance(value, dict) and isinstance(value.get("data"), list):
        before = len(value["data"])
        data = apply_change(value["data"], event)
        out = dict(value)
        out["data"] = data
        if isinstance(value.get("total"), int):
            out["total"] = max(0, value["total"] + len(data) - before)
        return out
    if isinstance(value, list):
        return apply_change(value, event)
    raise TypeError(f"cannot patch cached value of type {type(value).__name__}")


class RealtimeCacheSync:
    def __init__(
        self,
        source,
        cache: QueryCache,
        bindings: Iterable[TableBinding],
        retry_policy: Optional[RetryPolicy] = None,
        scheduler=None,
    ):
        self.source = source
        self.cache = cache
        self.bindings = list(bindings)
        self.retry_policy = retry_policy or RetryPolicy()
        self.scheduler = scheduler or TimerScheduler()

        self.state = CLOSED
        self.error: Optional[str] = None
        self.attempts = 0
        self._subscriptions = []
        self._pending = None
        self._lock = threading.RLock()
        self._stopped = False

    @property
    def is_connected(self) -> bool:
        return self.state == SUBSCRIBED

    def start(self) -> None:
        """(Re)open the channel; anything held from an earlier start is torn down first."""
        with self._lock:
            self._teardown()
            self._stopped = False
            self.attempts = 0
        self._connect()

    def stop(self) -> None:
        with self._lock:
            self._stopped = True
            self._teardown()
            self.state = CLOSED

    def _teardown(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._unsubscribe_all()

    def _connect(self) -> None:
        with self._lock:
            if self._stopped:
                return
            self._pending = None
            self.state = CONNECTING
            try:
                for binding in self.bindings:
                    sub = self.source.subscribe(binding.table, self._handler(binding))
                    self._subscriptions.append(sub)
            except Exception as e:
                self._unsubscribe_all()
                self._on_failure(e)
                return

            self.state = SUBSCRIBED
            self.error = None
            self.attempts = 0
            log.info("realtime subscribed: %s", ", ".join(b.table for b in self.bindings))

    def _on_failure(self, exc: Exception) -> None:
        self.error = str(exc) or exc.__class__.__name__
        if self.attempts >= self.retry_policy.max_attempts:
            self.state = DISCONNECTED
            self.error = GAVE_UP_MESSAGE
            log.error("realtime: giving up after %d retries (%s)", self.attempts, exc)
            return

        delay = self.retry_policy.delay(self.attempts)
        self.attempts += 1
        log.warning("realtime subscribe failed (%s); retry %d in %.1fs", exc, self.attempts, delay)
        self._pending = self.scheduler.schedule(delay, self._connect)

    def _unsubscribe_all(self) -> None:
        for sub in self._subscriptions:
            try:
                sub.unsubscribe()
            except Exception:
                log.exception("unsubscribe failed")
        self._subscriptions = []

    def _handler(self, binding: TableBinding):
        def handle(event: ChangeEvent):
            self.handle_event(binding, event)
        return handle

    def handle_event(self, binding: TableBinding, event: ChangeEvent) -> None:
        try:
            if self.cache.has(binding.list_key):
                self.cache.set_query_data(binding.list_key, lambda rows: _patch(rows, event))
            else:
                self.cache.invalidate_queries(binding.list_key)
            self._patch_detail(binding, event)
        except Exception:
            log.exception("realtime patch failed for %s; invalidating", binding.table)
            self.cache.invalidate_queries(binding.list_key)

        for key in binding.related_keys:
            self.cache.invalidate_queries(key)

    def _patch_detail(self, binding: TableBinding, event: ChangeEvent) -> None:
        rid = event.record_id
        if rid is None:
            return
        key = binding.detail_key(rid)
        if event.event_type == DELETE:
            self.cache.remove_query(key)
        elif event.event_type == UPDATE and self.cache.has(key):
            self.cache.set_query_data(key, lambda row: {**(row or {}), **event.new})
