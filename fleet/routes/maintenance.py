"""Maintenance reports: /equipments/maintenance-reports and /vehicles/maintenance-reports."""

from flask import request
from flask_login import current_user

from ..domain import ReportQuery, to_int
from ..http import api_list, api_ok
from ..services import maintenance_service as svc
from ..services import permission_required
from ..services.maintenance_service import EQUIPMENT_REPORTS, VEHICLE_REPORTS
from . import api

RESOURCE = "maintenance_reports"

# url segment -> (report kind, list filter param)
KINDS = {
    "equipments": (EQUIPMENT_REPORTS, "equipmentId"),
    "vehicles": (VEHICLE_REPORTS, "vehicleId"),
}


def _kind(asset):
    return KINDS[asset][0]


def _route(suffix, method):
    """Register a view under both /equipments/... and /vehicles/... with static prefixes."""
    def deco(fn):
        for asset in KINDS:
            fn = api.route(f"/{asset}/maintenance-reports{suffix}", methods=[method], defaults={"asset": asset})(fn)
        return fn
    return deco


@_route("", "GET")
@permission_required(RESOURCE, "view")
def reports_list(asset):
    kind, param = KINDS[asset]
    items, total = svc.list_reports(kind, ReportQuery.from_args(request.args, param))
    return api_list(items, total, current_user, RESOURCE)


@_route("/search-parts", "GET")
@permission_required(RESOURCE, "view")
def reports_search_parts(asset):
    limit = to_int(request.args.get("limit"), 20, minimum=1, maximum=100)
    return api_ok({"data": svc.search_parts(_kind(asset), request.args.get("q"), limit)})


@_route("/export", "GET")
@permission_required(RESOURCE, "view")
def reports_export(asset):
    kind, param = KINDS[asset]
    out = svc.export_reports(
        kind,
        ReportQuery.from_args(request.args, param),
        request.args.get("format"),
        request.args.get("reportType"),
    )
    return api_ok(out)


@_route("", "POST")
@permission_required(RESOURCE, "create")
def reports_create(asset):
    report = svc.create_report(_kind(asset), request.get_json(silent=True) or {}, current_user.id)
    return api_ok(report.to_dict(), status=201)


@_route("/<report_id>", "GET")
@permission_required(RESOURCE, "view")
def reports_get(asset, report_id):
    return api_ok(svc.get_report(_kind(asset), report_id).to_dict())


@_route("/<report_id>", "PUT")
@permission_required(RESOURCE, "update")
def reports_update(asset, report_id):
    report = svc.update_report(_kind(asset), report_id, request.get_json(silent=True) or {})
    return api_ok(report.to_dict())


@_route("/<report_id>", "DELETE")
@permission_required(RESOURCE, "delete")
def reports_delete(asset, report_id):
    svc.delete_report(_kind(asset), report_id)
    return api_ok({"message": "Maintenance report deleted successfully"})
