"""
SSE change stream.

    GET /api/realtime/stream?tables=equipment,vehicles

Each committed row change arrives as an ``event: change`` frame carrying
``{table, eventType, new, old, commit_timestamp}``; idle connections get a
``: ping`` comment every REALTIME_HEARTBEAT_SECONDS.
"""

from flask import Response, current_app, request, stream_with_context
from flask_login import login_required

from ..errors import AppError
from ..extensions import realtime
from ..realtime import FeedUnavailable, format_sse, stream_events
from . import api


def _tables(raw):
    tables = {t.strip() for t in (raw or "").split(",") if t.strip()}
    return tables or None


@api.route("/realtime/stream", methods=["GET"])
@login_required
def realtime_stream():
    state = realtime.state
    if not state.enabled:
        raise AppError("Realtime updates are disabled", code="REALTIME_DISABLED", status=503)

    tables = _tables(request.args.get("tables"))
    try:
        listener = state.feed.listen(tables)
    except FeedUnavailable as e:
        raise AppError(str(e), code="REALTIME_UNAVAILABLE", status=503) from e

    current_app.logger.debug("sse listener opened for %s", sorted(tables) if tables else "all tables")
    greeting = format_sse({"tables": sorted(tables) if tables else "*"}, event="connected")

    return Response(
        stream_with_context(stream_events(listener, state.heartbeat, first=greeting)),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
