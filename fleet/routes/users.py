from flask import request
from flask_login import current_user

from ..domain import Page
from ..http import api_list, api_ok
from ..services import auth_service, permission_required
from . import api

RESOURCE = "users"


@api.route("/users", methods=["GET"])
@permission_required(RESOURCE, "view")
def users_list():
    items, total = auth_service.list_users(Page.from_args(request.args))
    return api_list(items, total, current_user, RESOURCE)


@api.route("/users", methods=["POST"])
@permission_required(RESOURCE, "create")
def users_create():
    user = auth_service.create_user(request.get_json(silent=True) or {})
    return api_ok(user.to_dict(), status=201)


@api.route("/users/<user_id>", methods=["GET"])
@permission_required(RESOURCE, "view")
def users_get(user_id):
    return api_ok(auth_service.get_user(user_id).to_dict())


@api.route("/users/<user_id>", methods=["PUT"])
@permission_required(RESOURCE, "update")
def users_update(user_id):
    user = auth_service.update_user(user_id, request.get_json(silent=True) or {}, current_user)
    return api_ok(user.to_dict())


@api.route("/users/<user_id>", methods=["DELETE"])
@permission_required(RESOURCE, "delete")
def users_delete(user_id):
    auth_service.delete_user(user_id, current_user)
    return api_ok({"message": "User deleted successfully"})
