# fleet/domain.py
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Optional

DEFAULT_LIMIT = 50
MAX_LIMIT = 500


def to_int(raw, default, minimum=0, maximum=None):
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"invalid integer: {raw}")
    value = max(minimum, value)
    if maximum is not None:
        value = min(maximum, value)
    return value


@dataclass(frozen=True)
class Page:
    """limit/offset window of a list endpoint."""
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    @staticmethod
    def from_args(args) -> "Page":
        return Page(
            limit=to_int(args.get("limit"), DEFAULT_LIMIT, minimum=1, maximum=MAX_LIMIT),
            offset=to_int(args.get("offset"), 0),
        )

    def apply(self, query):
        return query.offset(self.offset).limit(self.limit)


@dataclass
class AssetQuery:
    """
    Filters for the equipment / vehicle lists.
    """
    project_id: Optional[str] = None
    status: Optional[str] = None
    q: str = ""
    page: Page = Page()

    @staticmethod
    def from_args(args) -> "AssetQuery":
        return AssetQuery(
            project_id=args.get("projectId") or args.get("project_id") or None,
            status=args.get("status") or None,
            q=(args.get("q") or "").strip(),
            page=Page.from_args(args),
        )

    def has_text(self) -> bool:
        return bool(self.q)

    def like(self) -> str:
        return f"%{self.q}%"


def to_datetime(raw, field, end_of_day=False) -> Optional[datetime]:
    """``YYYY-MM-DD`` or ISO datetime query arg, as naive UTC."""
    raw = (raw or "").strip()
    if not raw:
        return None
    try:
        if len(raw) == 10:
            day = date.fromisoformat(raw)
            # a bare end date covers the whole day
            return datetime.combine(day, time.max if end_of_day else time.min)
        value = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"{field} must be a valid date")
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


@dataclass
class ReportQuery:
    asset_id: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    # date_reported window, both ends inclusive
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    page: Page = Page()

    @staticmethod
    def from_args(args, asset_param: str) -> "ReportQuery":
        return ReportQuery(
            asset_id=args.get(asset_param) or None,
            status=args.get("status") or None,
            priority=args.get("priority") or None,
            start=to_datetime(args.get("startDate"), "startDate"),
            end=to_datetime(args.get("endDate"), "endDate", end_of_day=True),
            page=Page.from_args(args),
        )
