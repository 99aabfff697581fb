"""
In-process change feed.

Row changes captured after commit are published here, keyed by table name.
Subscribers are plain callbacks (used by the cache sync client and the
dashboard aggregator); the SSE endpoint uses queue-backed listeners.
"""

import logging
import queue
import threading
from typing import Callable, Iterable, List, Optional

from .events import ALL_EVENTS, ChangeEvent

log = logging.getLogger(__name__)

Callback = Callable[[ChangeEvent], None]


class FeedUnavailable(RuntimeError):
    pass


class Subscription:
    def __init__(self, feed: "ChangeFeed", table: str, event: str, callback: Callback):
        self.feed = feed
        self.table = table
        self.event = event
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.feed._remove(self)
            self.active = False

    def __repr__(self):
        return f"<Subscription {self.table}:{self.event} active={self.active}>"


class Listener:
    """Queue of events for a set of tables. ``tables=None`` means all."""

    def __init__(self, feed: "ChangeFeed", tables: Optional[Iterable[str]], maxsize: int = 100):
        self.feed = feed
        self.tables = set(tables) if tables else None
        self.queue: "queue.Queue[ChangeEvent]" = queue.Queue(maxsize=maxsize)
        self.closed = False

    def wants(self, event: ChangeEvent) -> bool:
        return self.tables is None or event.table in self.tables

    def offer(self, event: ChangeEvent) -> bool:
        try:
            self.queue.put_nowait(event)
            return True
        except queue.Full:
            return False

    def get(self, timeout: Optional[float] = None) -> Optional[ChangeEvent]:
        try:
            return self.queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self) -> None:
        self.feed._drop_listener(self)


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subs: List[Subscription] = []
        self._listeners: List[Listener] = []
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, table: str, callback: Callback, event: str = ALL_EVENTS) -> Subscription:
        with self._lock:
            if self._closed:
                raise FeedUnavailable("change feed is closed")
            sub = Subscription(self, table, event, callback)
            self._subs.append(sub)
        log.debug("subscribed %r", sub)
        return sub

    def listen(self, tables: Optional[Iterable[str]] = None, maxsize: int = 100) -> Listener:
        with self._lock:
            if self._closed:
                raise FeedUnavailable("change feed is closed")
            listener = Listener(self, tables, maxsize=maxsize)
            self._listeners.append(listener)
        return listener

    def publish(self, event: ChangeEvent) -> int:
        """Deliver ``event``; returns the number of callbacks invoked."""
        with self._lock:
            subs = [s for s in self._subs if event.matches(s.table, s.event)]
            listeners = [l for l in self._listeners if l.wants(event)]

        for sub in subs:
            try:
                sub.callback(event)
            except Exception:
                log.exception("change feed subscriber failed for %s %s", event.table, event.event_type)

        dead = [l for l in listeners if not l.offer(event)]
        if dead:
            # slow consumers are disconnected instead of blocking the committer
            log.warning("dropping %d stalled listener(s)", len(dead))
            for l in dead:
                self._drop_listener(l)

        return len(subs)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            for sub in self._subs:
                sub.active = False
            for listener in self._listeners:
                listener.closed = True
            self._subs.clear()
            self._listeners.clear()

    def subscriber_count(self, table: Optional[str] = None) -> int:
        with self._lock:
            return sum(1 for s in self._subs if table is None or s.table == table)

    def _remove(self, sub: Subscription) -> None:
        with self._lock:
            if sub in self._subs:
                self._subs.remove(sub)

    def _drop_listener(self, listener: Listener) -> None:
        with self._lock:
            listener.closed = True
            if listener in self._listeners:
                self._listeners.remove(listener)
