import importlib
import json

import pytest

from fleet.extensions import db
from fleet.models import Location
from fleet.realtime import (
    DELETE,
    INSERT,
    UPDATE,
    ChangeEvent,
    ChangeFeed,
    FeedUnavailable,
    format_sse,
    stream_events,
)
from fleet.services import auth_service, hierarchy_service


def test_commit_publishes_row_changes(app, feed):
    events = []
    feed.subscribe("locations", events.append)

    with app.app_context():
        loc_id = hierarchy_service.create_location({"address": "1 Quay St"}).id
        hierarchy_service.update_location(loc_id, {"address": "2 Quay St"})
        hierarchy_service.delete_location(loc_id)

    assert [e.event_type for e in events] == [INSERT, UPDATE, DELETE]
    assert events[0].new["address"] == "1 Quay St"
    assert events[0].record_id == loc_id
    assert events[1].old["address"] == "1 Quay St"
    assert events[1].new["address"] == "2 Quay St"
    assert events[2].old["id"] == loc_id
    assert events[2].new == {}


def test_rollback_publishes_nothing(app, feed):
    events = []
    feed.subscribe("locations", events.append)

    with app.app_context():
        db.session.add(Location(address="never"))
        db.session.flush()
        db.session.rollback()

    assert events == []


def test_events_carry_commit_time_not_flush_time(app, feed, monkeypatch):
    events = []
    feed.subscribe("locations", events.append)

    with app.app_context():
        db.session.add(Location(address="3 Quay St"))
        db.session.flush()
        monkeypatch.setattr(importlib.import_module("fleet.realtime.capture"), "now_iso", lambda: "2025-06-01T12:00:00+00:00")
        db.session.commit()

    [ev] = events
    assert ev.commit_timestamp == "2025-06-01T12:00:00+00:00"


def test_event_filter_and_unsubscribe(app, feed):
    inserts, everything = [], []
    feed.subscribe("locations", inserts.append, event=INSERT)
    sub = feed.subscribe("locations", everything.append)

    with app.app_context():
        loc = hierarchy_service.create_location({"address": "3 Quay St"})
        sub.unsubscribe()
        hierarchy_service.delete_location(loc.id)

    assert [e.event_type for e in inserts] == [INSERT]
    assert [e.event_type for e in everything] == [INSERT]
    assert not sub.active


def test_password_hash_is_not_published(app, feed):
    events = []
    feed.subscribe("users", events.append)
    with app.app_context():
        auth_service.create_user({"username": "carol", "password": "pw"})
    assert events[0].new["username"] == "carol"
    assert "password_hash" not in events[0].new


def test_failing_subscriber_does_not_break_others():
    feed = ChangeFeed()
    seen = []

    def boom(event):
        raise RuntimeError("subscriber bug")

    feed.subscribe("vehicles", boom)
    feed.subscribe("vehicles", seen.append)
    assert feed.publish(ChangeEvent("vehicles", INSERT, new={"id": "v1"})) == 2
    assert len(seen) == 1


def test_closed_feed_refuses_subscribers():
    feed = ChangeFeed()
    listener = feed.listen(["equipment"])
    feed.close()
    assert listener.closed
    with pytest.raises(FeedUnavailable):
        feed.subscribe("equipment", lambda e: None)


def test_stalled_listener_is_dropped():
    feed = ChangeFeed()
    listener = feed.listen(maxsize=1)
    feed.publish(ChangeEvent("clients", INSERT, new={"id": "c1"}))
    feed.publish(ChangeEvent("clients", INSERT, new={"id": "c2"}))
    assert listener.closed
    assert listener.get(timeout=0).record_id == "c1"


def test_unknown_event_type():
    with pytest.raises(ValueError):
        ChangeEvent("clients", "UPSERT")


def test_format_sse():
    assert format_sse(comment="ping") == ": ping\n\n"
    assert format_sse({"a": 1}, event="change") == 'event: change\ndata: {"a": 1}\n\n'
    assert format_sse("line1\nline2") == "data: line1\ndata: line2\n\n"


def test_stream_events_frames_and_heartbeat():
    feed = ChangeFeed()
    listener = feed.listen(["equipment"])
    frames = stream_events(listener, heartbeat=0.01, first="hello\n\n")

    assert next(frames) == "hello\n\n"
    assert next(frames) == ": ping\n\n"

    feed.publish(ChangeEvent("vehicles", INSERT, new={"id": "skip"}))
    feed.publish(ChangeEvent("equipment", UPDATE, new={"id": "e1", "status": "OPERATIONAL"}))
    frame = next(frames)
    assert frame.startswith("event: change\n")
    payload = json.loads(frame.split("data: ", 1)[1])
    assert payload["table"] == "equipment"
    assert payload["eventType"] == "UPDATE"

    frames.close()
    assert listener.closed


def test_stream_endpoint(admin_client, feed):
    resp = admin_client.get("/api/realtime/stream?tables=locations", buffered=False)
    assert resp.status_code == 200
    assert resp.mimetype == "text/event-stream"
    assert resp.headers["X-Accel-Buffering"] == "no"

    chunks = iter(resp.response)
    greeting = next(chunks)
    assert b"event: connected" in greeting

    feed.publish(ChangeEvent("locations", INSERT, new={"id": "l1", "address": "Pier 4"}))
    frame = next(chunks)
    assert b"event: change" in frame
    assert b"Pier 4" in frame
    resp.close()


def test_stream_requires_login(app):
    assert app.test_client().get("/api/realtime/stream").status_code == 401
