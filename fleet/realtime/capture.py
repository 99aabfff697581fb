"""
Turn ORM flushes into change events.

``after_flush`` records INSERT / UPDATE / DELETE snapshots of models marked
``__realtime__ = True``; ``after_commit`` publishes them on the app's feed;
``after_rollback`` drops them. Nothing is published for rolled back work.
"""

import logging
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

from flask import current_app, has_app_context
from sqlalchemy import event, inspect

from .events import DELETE, INSERT, UPDATE, ChangeEvent, now_iso

log = logging.getLogger(__name__)

_PENDING_KEY = "realtime_pending"


def _jsonable(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return float(value)
    return value


def _tracked(obj) -> bool:
    return getattr(obj, "__realtime__", False) and hasattr(obj, "__tablename__")


def snapshot(obj) -> dict:
    """Loaded column values of ``obj`` without triggering lazy loads."""
    state = inspect(obj)
    loaded = state.dict
    skip = set(getattr(obj, "__realtime_exclude__", ()))
    out = {}
    for attr in state.mapper.column_attrs:
        if attr.key in skip or attr.key not in loaded:
            continue
        out[attr.key] = _jsonable(loaded[attr.key])
    return out


def previous_values(obj) -> dict:
    state = inspect(obj)
    skip = set(getattr(obj, "__realtime_exclude__", ()))
    old = {"id": getattr(obj, "id", None)}
    for attr in state.mapper.column_attrs:
        if attr.key in skip:
            continue
        hist = state.attrs[attr.key].history
        if hist.deleted:
            old[attr.key] = _jsonable(hist.deleted[0])
    return old


def _after_flush(session, flush_context):
    pending = session.info.setdefault(_PENDING_KEY, [])

    for obj in session.new:
        if _tracked(obj):
            pending.append(ChangeEvent(obj.__tablename__, INSERT, new=snapshot(obj)))

    for obj in session.dirty:
        if _tracked(obj) and session.is_modified(obj, include_collections=False):
            pending.append(
                ChangeEvent(obj.__tablename__, UPDATE, new=snapshot(obj), old=previous_values(obj))
            )

    for obj in session.deleted:
        if _tracked(obj):
            pending.append(ChangeEvent(obj.__tablename__, DELETE, old=snapshot(obj)))


def _after_commit(session):
    pending = session.info.pop(_PENDING_KEY, [])
    if not pending or not has_app_context():
        return

    ext = current_app.extensions.get("realtime")
    if ext is None or not ext.enabled:
        return

    # flush-time snapshots, stamped with the commit time
    committed_at = now_iso()
    for ev in pending:
        ext.feed.publish(replace(ev, commit_timestamp=committed_at))
    log.debug("published %d change event(s)", len(pending))


def _after_rollback(session):
    session.info.pop(_PENDING_KEY, None)


_HOOKS = (
    ("after_flush", _after_flush),
    ("after_commit", _after_commit),
    ("after_rollback", _after_rollback),
)


def install_change_capture(session) -> None:
    """Attach the hooks to ``session`` (a Session class, sessionmaker or scoped session). Idempotent."""
    for name, fn in _HOOKS:
        if not event.contains(session, name, fn):
            event.listen(session, name, fn)
