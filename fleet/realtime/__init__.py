"""Row-change feed, cache sync client and dashboard aggregator."""

from .events import ALL_EVENTS, DELETE, INSERT, UPDATE, ChangeEvent
from .feed import ChangeFeed, FeedUnavailable, Listener, Subscription
from .capture import install_change_capture
from .cache import QueryCache
from .sync import (
    CLOSED,
    CONNECTING,
    DISCONNECTED,
    SUBSCRIBED,
    RealtimeCacheSync,
    RetryPolicy,
    TableBinding,
    apply_change,
)
from .dashboard import DashboardStatsAggregator, empty_overview_stats
from .sse import format_sse, stream_events
