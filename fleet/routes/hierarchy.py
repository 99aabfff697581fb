from flask import request
from flask_login import current_user

from ..domain import Page
from ..http import api_list, api_ok
from ..services import hierarchy_service as svc
from ..services import permission_required
from . import api


def _json():
    return request.get_json(silent=True) or {}


# ==========================================
# Locations
# ==========================================
@api.route("/locations", methods=["GET"])
@permission_required("locations", "view")
def locations_list():
    items, total = svc.list_locations(Page.from_args(request.args))
    return api_list(items, total, current_user, "locations")


@api.route("/locations", methods=["POST"])
@permission_required("locations", "create")
def locations_create():
    loc = svc.create_location(_json(), current_user.id)
    return api_ok(loc.to_dict(), status=201)


@api.route("/locations/<location_id>", methods=["GET"])
@permission_required("locations", "view")
def locations_get(location_id):
    return api_ok(svc.get_location(location_id).to_dict(with_counts=True))


@api.route("/locations/<location_id>", methods=["PUT"])
@permission_required("locations", "update")
def locations_update(location_id):
    return api_ok(svc.update_location(location_id, _json()).to_dict())


@api.route("/locations/<location_id>", methods=["DELETE"])
@permission_required("locations", "delete")
def locations_delete(location_id):
    svc.delete_location(location_id)
    return api_ok({"message": "Location deleted successfully"})


# ==========================================
# Clients
# ==========================================
@api.route("/clients", methods=["GET"])
@permission_required("clients", "view")
def clients_list():
    location_id = request.args.get("locationId") or request.args.get("location_id")
    items, total = svc.list_clients(Page.from_args(request.args), location_id)
    return api_list(items, total, current_user, "clients")


@api.route("/clients", methods=["POST"])
@permission_required("clients", "create")
def clients_create():
    client = svc.create_client(_json(), current_user.id)
    return api_ok(client.to_dict(), status=201)


@api.route("/clients/<client_id>", methods=["GET"])
@permission_required("clients", "view")
def clients_get(client_id):
    return api_ok(svc.get_client(client_id).to_dict())


@api.route("/clients/<client_id>", methods=["PUT"])
@permission_required("clients", "update")
def clients_update(client_id):
    return api_ok(svc.update_client(client_id, _json()).to_dict())


@api.route("/clients/<client_id>", methods=["DELETE"])
@permission_required("clients", "delete")
def clients_delete(client_id):
    svc.delete_client(client_id)
    return api_ok({"message": "Client deleted successfully"})


# ==========================================
# Projects
# ==========================================
@api.route("/projects", methods=["GET"])
@permission_required("projects", "view")
def projects_list():
    client_id = request.args.get("clientId") or request.args.get("client_id")
    items, total = svc.list_projects(Page.from_args(request.args), client_id)
    return api_list(items, total, current_user, "projects")


@api.route("/projects", methods=["POST"])
@permission_required("projects", "create")
def projects_create():
    project = svc.create_project(_json(), current_user.id)
    return api_ok(project.to_dict(), status=201)


@api.route("/projects/<project_id>", methods=["GET"])
@permission_required("projects", "view")
def projects_get(project_id):
    return api_ok(svc.get_project(project_id).to_dict())


@api.route("/projects/<project_id>", methods=["PUT"])
@permission_required("projects", "update")
def projects_update(project_id):
    return api_ok(svc.update_project(project_id, _json()).to_dict())


@api.route("/projects/<project_id>", methods=["DELETE"])
@permission_required("projects", "delete")
def projects_delete(project_id):
    svc.delete_project(project_id)
    return api_ok({"message": "Project deleted successfully"})
