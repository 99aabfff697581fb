from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"
ALL_EVENTS = "*"

EVENT_TYPES = (INSERT, UPDATE, DELETE)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ChangeEvent:
    """One row change on ``table``.

    ``new`` is empty for DELETE, ``old`` carries the previous values of the
    changed columns (plus ``id``) for UPDATE and the full row for DELETE.
    """

    table: str
    event_type: str
    new: Dict[str, Any] = field(default_factory=dict)
    old: Dict[str, Any] = field(default_factory=dict)
    commit_timestamp: str = field(default_factory=now_iso)

    def __post_init__(self):
        if self.event_type not in EVENT_TYPES:
            raise ValueError(f"unknown event type: {self.event_type}")

    @property
    def record_id(self) -> Optional[str]:
        return (self.new or {}).get("id") or (self.old or {}).get("id")

    def matches(self, table: str, event: str = ALL_EVENTS) -> bool:
        return self.table == table and event in (ALL_EVENTS, self.event_type)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "table": self.table,
            "eventType": self.event_type,
            "new": self.new,
            "old": self.old,
            "commit_timestamp": self.commit_timestamp,
        }
