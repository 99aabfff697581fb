from flask import request
from flask_login import current_user, login_required

from ..http import api_ok
from ..services import upload_avatar, upload_generic
from . import api


@api.route("/upload", methods=["POST"])
@login_required
def upload_create():
    out = upload_generic(request.files.get("file"), request.form.get("folder"), current_user.id)
    return api_ok(out)


@api.route("/upload/profile-image", methods=["POST"])
@login_required
def upload_profile_image():
    return api_ok(upload_avatar(request.files.get("file"), current_user.id))
