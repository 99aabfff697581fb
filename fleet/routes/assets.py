"""Equipment and vehicle endpoints (multipart create/update)."""

from flask import request
from flask_login import current_user

from ..domain import AssetQuery
from ..http import api_list, api_ok
from ..services import equipment_service, permission_required, vehicle_service
from . import api


# ==========================================
# Equipment
# ==========================================
@api.route("/equipments", methods=["GET"])
@permission_required("equipment", "view")
def equipment_list():
    items, total = equipment_service.list_equipment(AssetQuery.from_args(request.args))
    return api_list(items, total, current_user, "equipment")


@api.route("/equipments", methods=["POST"])
@permission_required("equipment", "create")
def equipment_create():
    equipment = equipment_service.create_equipment(request.form, request.files, current_user.id)
    return api_ok(equipment.to_dict(with_reports=True), status=201)


@api.route("/equipments/parts/move", methods=["POST"])
@permission_required("equipment", "update")
def equipment_part_move():
    return api_ok(equipment_service.move_equipment_part(request.get_json(silent=True) or {}))


@api.route("/equipments/<equipment_id>", methods=["GET"])
@permission_required("equipment", "view")
def equipment_get(equipment_id):
    equipment = equipment_service.get_equipment(equipment_id)
    return api_ok(equipment.to_dict(with_reports=True))


@api.route("/equipments/<equipment_id>", methods=["PUT"])
@permission_required("equipment", "update")
def equipment_update(equipment_id):
    equipment = equipment_service.update_equipment(equipment_id, request.form, request.files)
    return api_ok(equipment.to_dict(with_reports=True))


@api.route("/equipments/<equipment_id>", methods=["DELETE"])
@permission_required("equipment", "delete")
def equipment_delete(equipment_id):
    return api_ok(equipment_service.delete_equipment(equipment_id))


# ==========================================
# Vehicles
# ==========================================
@api.route("/vehicles", methods=["GET"])
@permission_required("vehicles", "view")
def vehicles_list():
    items, total = vehicle_service.list_vehicles(AssetQuery.from_args(request.args))
    return api_list(items, total, current_user, "vehicles")


@api.route("/vehicles", methods=["POST"])
@permission_required("vehicles", "create")
def vehicles_create():
    vehicle = vehicle_service.create_vehicle(request.form, request.files, current_user.id)
    return api_ok(vehicle.to_dict(with_reports=True), status=201)


@api.route("/vehicles/parts/move", methods=["POST"])
@permission_required("vehicles", "update")
def vehicles_part_move():
    return api_ok(vehicle_service.move_vehicle_part(request.get_json(silent=True) or {}))


@api.route("/vehicles/<vehicle_id>", methods=["GET"])
@permission_required("vehicles", "view")
def vehicles_get(vehicle_id):
    return api_ok(vehicle_service.get_vehicle(vehicle_id).to_dict(with_reports=True))


@api.route("/vehicles/<vehicle_id>", methods=["PUT"])
@permission_required("vehicles", "update")
def vehicles_update(vehicle_id):
    vehicle = vehicle_service.update_vehicle(vehicle_id, request.form, request.files)
    return api_ok(vehicle.to_dict(with_reports=True))


@api.route("/vehicles/<vehicle_id>", methods=["DELETE"])
@permission_required("vehicles", "delete")
def vehicles_delete(vehicle_id):
    return api_ok(vehicle_service.delete_vehicle(vehicle_id))
