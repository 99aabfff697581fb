from flask import current_app

from .feed import ChangeFeed


class RealtimeState:
    def __init__(self, enabled: bool, heartbeat: float):
        self.enabled = enabled
        self.heartbeat = heartbeat
        self.feed = ChangeFeed()


class Realtime:
    """Per-app change feed; ``install_change_capture`` feeds it on commit."""

    def __init__(self, app=None):
        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        state = RealtimeState(
            enabled=app.config.get("REALTIME_ENABLED", True),
            heartbeat=float(app.config.get("REALTIME_HEARTBEAT_SECONDS", 15)),
        )
        app.extensions["realtime"] = state

    @property
    def state(self) -> RealtimeState:
        return current_app.extensions["realtime"]

    @property
    def feed(self) -> ChangeFeed:
        return self.state.feed
