"""Blueprint registration.

Everything JSON lives on the single ``api`` blueprint (mounted at /api);
``files`` serves objects of the local storage backend.
"""

from flask import Blueprint

api = Blueprint("api", __name__)
files = Blueprint("files", __name__)

# views attach themselves to the blueprints above
from . import auth, users, profile, hierarchy, assets, maintenance, uploads, dashboard, realtime, storage  # noqa: E402,F401


def register_blueprints(app):
    app.register_blueprint(api, url_prefix="/api")
    app.register_blueprint(files)
