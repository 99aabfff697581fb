import json


def format_sse(data=None, event=None, comment=None) -> str:
    """One Server-Sent Events frame."""
    lines = []
    if comment is not None:
        lines.append(f": {comment}")
    if event:
        lines.append(f"event: {event}")
    if data is not None:
        payload = data if isinstance(data, str) else json.dumps(data, default=str)
        lines.extend(f"data: {line}" for line in payload.splitlines() or [""])
    return "\n".join(lines) + "\n\n"


def stream_events(listener, heartbeat: float, first=None):
    """
    Generator for the SSE response: an optional greeting frame, then one
    ``change`` frame per event, with a ping comment whenever ``heartbeat``
    seconds pass without one. Ends when the listener is closed.
    """
    try:
        if first is not None:
            yield first
        while not listener.closed:
            ev = listener.get(timeout=heartbeat)
            if ev is None:
                yield format_sse(comment="ping")
                continue
            yield format_sse(ev.to_payload(), event="change")
    finally:
        listener.close()
