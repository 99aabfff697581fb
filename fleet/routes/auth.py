from flask import current_app, request
from flask_login import current_user, login_required, login_user, logout_user

from ..extensions import db, login_manager
from ..http import api_error, api_ok
from ..models import User
from ..permissions import ASSET_RESOURCES, permissions_for
from ..services import authenticate
from . import api


# ==========================================
# API: always JSON for auth
# ==========================================
@login_manager.unauthorized_handler
def _unauthorized():
    return api_error(401, "UNAUTHORIZED", "Authentication required")


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, user_id)


def _me(user):
    out = user.to_dict()
    out["permissions"] = {r: permissions_for(user.role, r) for r in ASSET_RESOURCES + ("users",)}
    return out


@api.route("/", methods=["GET"])
def api_root():
    return api_ok({"ok": True})


@api.route("/auth/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or request.form
    user = authenticate(data.get("username"), data.get("password"))
    login_user(user, remember=bool(data.get("remember")))
    current_app.logger.info("user %s logged in", user.username)
    return api_ok(_me(user))


@api.route("/auth/logout", methods=["POST"])
@login_required
def logout():
    current_app.logger.info("user %s logged out", current_user.username)
    logout_user()
    return api_ok({"message": "Logged out"})


@api.route("/auth/me", methods=["GET"])
@login_required
def me():
    return api_ok(_me(current_user))
