"""
Maintenance reports for equipment and vehicles.

Both report tables share validation and CRUD; ``ReportKind`` carries what
differs (model, asset model, foreign key name).
"""

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlparse

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import (
    PRIORITIES,
    PRIORITY_MEDIUM,
    REPORT_COMPLETED,
    REPORT_REPORTED,
    REPORT_STATUSES,
    Equipment,
    Location,
    MaintenanceEquipmentReport,
    MaintenanceVehicleReport,
    User,
    Vehicle,
)
from ..models.base import iso, utcnow
from .forms import clean_str, parse_datetime

_URL_IN_PART = re.compile(r"^https?://|^www\.|\.com|\.org|\.net|\.gov", re.IGNORECASE)

MAX_PARTS = 50
MAX_ATTACHMENTS = 20

# field -> (max length, message)
_TEXT_LIMITS = {
    "remarks": (500, "Remarks too long"),
    "inspection_details": (1000, "Inspection details too long"),
    "action_taken": (1000, "Action taken description too long"),
    "downtime_hours": (50, "Downtime hours description too long"),
}

# camelCase keys sent by the asset forms' nested report
_CAMEL = {
    "issueDescription": "issue_description",
    "inspectionDetails": "inspection_details",
    "actionTaken": "action_taken",
    "partsReplaced": "parts_replaced",
    "downtimeHours": "downtime_hours",
    "dateReported": "date_reported",
    "dateRepaired": "date_repaired",
    "repairedBy": "repaired_by",
    "reportedBy": "reported_by",
    "attachmentUrls": "attachment_urls",
    "locationId": "location_id",
    "equipmentId": "equipment_id",
    "vehicleId": "vehicle_id",
}


@dataclass(frozen=True)
class ReportKind:
    model: type
    asset_model: type
    asset_fk: str
    asset_label: str
    # list / export query arg naming the asset
    asset_param: str
    export_name: str


EQUIPMENT_REPORTS = ReportKind(
    MaintenanceEquipmentReport, Equipment, "equipment_id", "Equipment",
    "equipmentId", "equipment-maintenance-reports",
)
VEHICLE_REPORTS = ReportKind(
    MaintenanceVehicleReport, Vehicle, "vehicle_id", "Vehicle",
    "vehicleId", "vehicle-maintenance-reports",
)


def normalize_keys(data: dict) -> dict:
    return {_CAMEL.get(k, k): v for k, v in (data or {}).items()}


def _is_url(value: str) -> bool:
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def clean_parts(parts) -> list:
    if parts is None:
        return []
    if not isinstance(parts, list):
        raise ValidationError("parts_replaced must be a list")
    if len(parts) > MAX_PARTS:
        raise ValidationError("Too many parts listed")

    out = []
    for part in parts:
        if not isinstance(part, str):
            raise ValidationError("Part description must be text")
        part = part.strip()
        if not part:
            raise ValidationError("Part description cannot be empty")
        if len(part) > 255:
            raise ValidationError("Part description too long")
        if _URL_IN_PART.search(part):
            raise ValidationError("Part description cannot contain URLs. Use attachment_urls for files.")
        out.append(part)
    return out


def clean_attachment_urls(urls) -> list:
    if urls is None:
        return []
    if not isinstance(urls, list):
        raise ValidationError("attachment_urls must be a list")
    if len(urls) > MAX_ATTACHMENTS:
        raise ValidationError("Too many attachments")
    for url in urls:
        if not isinstance(url, str) or not _is_url(url):
            raise ValidationError("Invalid URL format")
        if len(url) > 500:
            raise ValidationError("URL too long")
    return list(urls)


def _user_ref(value, label) -> Optional[str]:
    value = clean_str(value)
    if value is None:
        return None
    if db.session.get(User, value) is None:
        raise ValidationError(f"Invalid {label} ID")
    return value


def _location_ref(value) -> Optional[str]:
    value = clean_str(value)
    if value is None:
        return None
    if db.session.get(Location, value) is None:
        raise ValidationError("Invalid location ID")
    return value


def validate_report(data: dict, partial: bool = False) -> dict:
    """
    Clean the report fields present in ``data``.

    With ``partial=False`` (create) defaults are filled in and
    ``issue_description`` is required.
    """
    data = normalize_keys(data)
    out = {}

    if "issue_description" in data or not partial:
        issue = clean_str(data.get("issue_description"))
        if not issue:
            raise ValidationError("Issue description is required")
        if len(issue) > 1000:
            raise ValidationError("Issue description too long")
        out["issue_description"] = issue

    for name, (limit, message) in _TEXT_LIMITS.items():
        if name not in data:
            continue
        value = data.get(name)
        value = clean_str(value) if value is not None else None
        if value is not None and len(value) > limit:
            raise ValidationError(message)
        out[name] = value

    if "parts_replaced" in data or not partial:
        out["parts_replaced"] = clean_parts(data.get("parts_replaced"))
    if "attachment_urls" in data or not partial:
        out["attachment_urls"] = clean_attachment_urls(data.get("attachment_urls"))

    if "priority" in data or not partial:
        priority = data.get("priority") or PRIORITY_MEDIUM
        if priority not in PRIORITIES:
            raise ValidationError(f"priority must be one of: {', '.join(PRIORITIES)}")
        out["priority"] = priority

    if "status" in data or not partial:
        status = data.get("status") or REPORT_REPORTED
        if status not in REPORT_STATUSES:
            raise ValidationError(f"status must be one of: {', '.join(REPORT_STATUSES)}")
        out["status"] = status

    if "date_reported" in data and data.get("date_reported"):
        out["date_reported"] = parse_datetime(data["date_reported"], "date_reported")
    if "date_repaired" in data:
        out["date_repaired"] = parse_datetime(data.get("date_repaired"), "date_repaired")

    if "reported_by" in data:
        out["reported_by"] = _user_ref(data.get("reported_by"), "reporter")
    if "repaired_by" in data:
        out["repaired_by"] = _user_ref(data.get("repaired_by"), "repairer")

    return out


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def _asset_location_id(asset) -> Optional[str]:
    project = asset.project
    if project is None or project.client is None:
        return None
    return project.client.location_id


def _get_asset(kind: ReportKind, asset_id):
    asset = db.session.get(kind.asset_model, asset_id) if asset_id else None
    if asset is None:
        raise NotFoundError(f"{kind.asset_label} not found")
    return asset


def new_report(kind: ReportKind, asset, data: dict, user_id: Optional[str]):
    """Build (not commit) a report for ``asset`` from raw ``data``."""
    values = validate_report(data)
    data = normalize_keys(data)

    # repaired_by only sticks once the repair is done
    if values["status"] != REPORT_COMPLETED:
        values["repaired_by"] = None

    if not values.get("reported_by"):
        values["reported_by"] = user_id

    location_id = _location_ref(data.get("location_id")) or _asset_location_id(asset)

    report = kind.model(location_id=location_id, **values)
    setattr(report, kind.asset_fk, asset.id)
    return report


def _filtered(kind: ReportKind, query):
    model = kind.model
    q = model.query
    if query.asset_id:
        q = q.filter(getattr(model, kind.asset_fk) == query.asset_id)
    if query.status:
        q = q.filter(model.status == query.status)
    if query.priority:
        q = q.filter(model.priority == query.priority)
    if query.start:
        q = q.filter(model.date_reported >= query.start)
    if query.end:
        q = q.filter(model.date_reported <= query.end)
    return q.order_by(model.date_reported.desc())


def list_reports(kind: ReportKind, query):
    q = _filtered(kind, query)
    total = q.count()
    return [r.to_dict() for r in query.page.apply(q).all()], total


# ==========================================
# export
# ==========================================
EXPORT_FORMATS = ("json",)


def _export_row(report) -> dict:
    asset = report.asset
    project = asset.project if asset is not None else None
    client = project.client if project is not None else None
    return {
        "id": report.id,
        report.asset_key: f"{asset.brand} {asset.model}" if asset is not None else None,
        "plateNumber": asset.plate_number if asset is not None else None,
        "project": project.name if project is not None else None,
        "client": client.name if client is not None else None,
        "location": report.location.address if report.location is not None else None,
        "issue": report.issue_description,
        "status": report.status,
        "priority": report.priority,
        "partsReplaced": list(report.parts_replaced or []),
        "reportedDate": iso(report.date_reported),
        "repairedDate": iso(report.date_repaired),
        "reportedBy": report.reporter.full_name if report.reporter else "Unknown",
        "repairedBy": report.repairer.full_name if report.repairer else "Not assigned",
    }


def export_reports(kind: ReportKind, query, fmt: str = "json", report_type: str = "summary") -> dict:
    """Every report matching ``query`` (no paging), flattened for download."""
    fmt = (fmt or "json").lower()
    if fmt not in EXPORT_FORMATS:
        raise ValidationError(f"Unsupported export format: {fmt}")

    reports = _filtered(kind, query).all()
    today = utcnow().date().isoformat()
    return {
        "format": fmt,
        "reportType": report_type or "summary",
        "filename": f"{kind.export_name}-{today}.{fmt}",
        "totalRecords": len(reports),
        "filters": {
            kind.asset_param: query.asset_id,
            "status": query.status,
            "priority": query.priority,
            "startDate": iso(query.start),
            "endDate": iso(query.end),
        },
        "reports": [_export_row(r) for r in reports],
    }


def search_parts(kind: ReportKind, term: str, limit: int = 20):
    """Reports with a replaced part whose name contains ``term`` (case-insensitive)."""
    term = clean_str(term)
    if not term:
        raise ValidationError("Search term required")
    needle = term.casefold()
    limit = max(1, min(limit, 100))

    # matched per element: the stored JSON text escapes non-ASCII
    q = (
        kind.model.query
        .filter(kind.model.parts_replaced.isnot(None))
        .order_by(kind.model.date_reported.desc())
    )
    out = []
    for report in q.yield_per(200):
        if any(needle in str(part).casefold() for part in report.parts_replaced or []):
            out.append(report.to_dict())
            if len(out) >= limit:
                break
    return out


def get_report(kind: ReportKind, report_id):
    report = db.session.get(kind.model, report_id) if report_id else None
    if report is None:
        raise NotFoundError("Maintenance report not found")
    return report


def create_report(kind: ReportKind, data: dict, user_id: Optional[str]):
    data = normalize_keys(data)
    asset_id = clean_str(data.get(kind.asset_fk))
    if not asset_id:
        raise ValidationError(f"{kind.asset_label} ID and Issue Description are required")
    asset = _get_asset(kind, asset_id)

    report = new_report(kind, asset, data, user_id)
    db.session.add(report)
    _commit()
    return report


def update_report(kind: ReportKind, report_id, data: dict):
    report = get_report(kind, report_id)
    values = validate_report(data, partial=True)
    data = normalize_keys(data)

    if kind.asset_fk in data:
        asset = _get_asset(kind, clean_str(data.get(kind.asset_fk)))
        setattr(report, kind.asset_fk, asset.id)
    if "location_id" in data:
        report.location_id = _location_ref(data.get("location_id"))

    status = values.get("status", report.status)
    if status != REPORT_COMPLETED:
        values["repaired_by"] = None

    for key, value in values.items():
        if getattr(report, key) != value:
            setattr(report, key, value)

    _commit()
    return report


def delete_report(kind: ReportKind, report_id):
    report = get_report(kind, report_id)
    db.session.delete(report)
    _commit()
