import uuid
from datetime import date, datetime, timezone

from ..extensions import db


def new_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class TimestampMixin:
    """UUID primary key + created/updated timestamps, shared by every table."""

    id = db.Column(db.String(36), primary_key=True, default=new_id)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    # published on the change feed after commit
    __realtime__ = True

    def columns_dict(self, exclude=()):
        return {
            c.key: iso(getattr(self, c.key))
            for c in self.__mapper__.column_attrs
            if c.key not in exclude
        }
