"""``GET /api/dashboard/data``: counts computed from the database."""

from datetime import timedelta

from flask import current_app
from sqlalchemy import func

from ..extensions import db
from ..models import (
    REPORT_IN_PROGRESS,
    REPORT_REPORTED,
    STATUS_NON_OPERATIONAL,
    STATUS_OPERATIONAL,
    Client,
    Equipment,
    Location,
    MaintenanceEquipmentReport,
    MaintenanceVehicleReport,
    Project,
    Vehicle,
)
from ..models.base import iso, utcnow
from ..realtime import empty_overview_stats

RECENT_PER_TABLE = 10
RECENT_ACTIVITY_LIMIT = 20
GROWTH_WINDOW = timedelta(days=7)


def _status_counts(model, column="status"):
    rows = db.session.query(getattr(model, column), func.count()).group_by(getattr(model, column)).all()
    return {status: count for status, count in rows}


def _asset_counts(model):
    counts = _status_counts(model)
    return {
        STATUS_OPERATIONAL: counts.get(STATUS_OPERATIONAL, 0),
        STATUS_NON_OPERATIONAL: counts.get(STATUS_NON_OPERATIONAL, 0),
    }


def _created_since(model, since):
    return model.query.filter(model.created_at >= since).count()


def _recent(model):
    return model.query.order_by(model.created_at.desc()).limit(RECENT_PER_TABLE).all()


def _activity(kind, row, description):
    return {
        "id": row.id,
        "type": kind,
        "action": "insert",
        "description": description,
        "timestamp": iso(row.created_at),
    }


def empty_dashboard():
    return {
        "equipmentCounts": {STATUS_OPERATIONAL: 0, STATUS_NON_OPERATIONAL: 0},
        "vehicleCounts": {STATUS_OPERATIONAL: 0, STATUS_NON_OPERATIONAL: 0},
        "overviewStats": empty_overview_stats(),
        "recentActivity": [],
        "detailedData": {
            "locations": [],
            "clients": [],
            "projects": [],
            "equipment": [],
            "vehicles": [],
            "maintenanceReports": [],
        },
    }


def _build():
    equipment_counts = _asset_counts(Equipment)
    vehicle_counts = _asset_counts(Vehicle)

    report_counts = {}
    for model in (MaintenanceEquipmentReport, MaintenanceVehicleReport):
        for status, count in _status_counts(model).items():
            report_counts[status] = report_counts.get(status, 0) + count

    since = utcnow() - GROWTH_WINDOW

    overview = empty_overview_stats()
    overview["locations"] = Location.query.count()
    overview["clients"] = Client.query.count()
    overview["projects"] = Project.query.count()
    overview["equipment"] = {
        "total": Equipment.query.count(),
        "operational": equipment_counts[STATUS_OPERATIONAL],
        "nonOperational": equipment_counts[STATUS_NON_OPERATIONAL],
    }
    overview["vehicles"] = {
        "total": Vehicle.query.count(),
        "operational": vehicle_counts[STATUS_OPERATIONAL],
        "nonOperational": vehicle_counts[STATUS_NON_OPERATIONAL],
    }
    overview["maintenanceReports"] = {
        "total": sum(report_counts.values()),
        "pending": report_counts.get(REPORT_REPORTED, 0),
        "inProgress": report_counts.get(REPORT_IN_PROGRESS, 0),
    }
    overview["growth"] = {
        "newClientsThisWeek": _created_since(Client, since),
        "newProjectsThisWeek": _created_since(Project, since),
        "newEquipmentThisWeek": _created_since(Equipment, since),
        "newVehiclesThisWeek": _created_since(Vehicle, since),
    }

    locations = _recent(Location)
    clients = _recent(Client)
    projects = _recent(Project)
    equipment = _recent(Equipment)
    vehicles = _recent(Vehicle)
    reports = sorted(
        _recent(MaintenanceEquipmentReport) + _recent(MaintenanceVehicleReport),
        key=lambda r: r.created_at,
        reverse=True,
    )[:RECENT_PER_TABLE]

    activity = (
        [_activity("location", l, l.address) for l in locations]
        + [_activity("client", c, c.name) for c in clients]
        + [_activity("project", p, p.name) for p in projects]
        + [_activity("equipment", e, f"{e.brand} {e.model}") for e in equipment]
        + [_activity("vehicle", v, f"{v.brand} {v.model} ({v.plate_number})") for v in vehicles]
        + [_activity("maintenance_report", r, r.issue_description) for r in reports]
    )
    activity.sort(key=lambda a: a["timestamp"] or "", reverse=True)

    return {
        "equipmentCounts": equipment_counts,
        "vehicleCounts": vehicle_counts,
        "overviewStats": overview,
        "recentActivity": activity[:RECENT_ACTIVITY_LIMIT],
        "detailedData": {
            "locations": [l.to_dict() for l in locations],
            "clients": [c.to_dict() for c in clients],
            "projects": [p.to_dict() for p in projects],
            "equipment": [e.to_dict(with_relations=False) for e in equipment],
            "vehicles": [v.to_dict(with_relations=False) for v in vehicles],
            "maintenanceReports": [r.to_dict(with_asset=False) for r in reports],
        },
    }


def get_dashboard_data():
    """Never fails: a broken query yields the all-zero structure."""
    try:
        return _build()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("dashboard data failed")
        return empty_dashboard()
