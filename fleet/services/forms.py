"""Small helpers for reading multipart / JSON form values."""

from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Sequence


def form_value(form, *names, default=None):
    """First of ``names`` present in ``form`` (camelCase / snake_case aliases)."""
    for name in names:
        if name in form:
            return form.get(name)
    return default


def clean_str(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def parse_date(value, field: str) -> Optional[date]:
    """``YYYY-MM-DD`` or an ISO datetime; empty means None."""
    value = clean_str(value)
    if value is None:
        return None
    try:
        if len(value) == 10:
            return date.fromisoformat(value)
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        raise ValueError(f"{field} must be a valid date")


def parse_datetime(value, field: str) -> Optional[datetime]:
    value = clean_str(value)
    if value is None:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f"{field} must be a valid date")
    # stored naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_int(value, field: str) -> Optional[int]:
    value = clean_str(value)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{field} must be an integer")


def missing_fields(form, required: Iterable[Sequence[str]]) -> List[str]:
    """First name of every required field with no value under any of its aliases."""
    return [names[0] for names in required if not clean_str(form_value(form, *names))]


def is_truthy_flag(value) -> bool:
    return str(value).strip().lower() == "true"
