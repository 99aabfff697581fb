from flask import request
from flask_login import current_user, login_required

from ..http import api_ok
from ..services import auth_service
from . import api


@api.route("/profile", methods=["GET"])
@login_required
def profile_get():
    return api_ok(current_user.to_dict())


@api.route("/profile", methods=["PUT"])
@login_required
def profile_update():
    user = auth_service.update_profile(current_user, request.get_json(silent=True) or {})
    return api_ok(user.to_dict())
