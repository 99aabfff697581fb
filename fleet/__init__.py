import os

from flask import Flask

from .config import Config
from .extensions import db, login_manager, realtime, storage


def create_app(config_object=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_object)

    # instance folder
    os.makedirs(app.instance_path, exist_ok=True)

    # ===== database: instance/fleet.db unless DATABASE_URL is set =====
    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        db_path = os.path.join(app.instance_path, "fleet.db")
        app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{db_path}"

    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # init extensions
    db.init_app(app)
    login_manager.init_app(app)
    storage.init_app(app)
    realtime.init_app(app)

    # import models so SQLAlchemy registers tables
    from . import models  # noqa: F401
    from .realtime import install_change_capture
    install_change_capture(db.session)

    # register blueprints
    from .routes import register_blueprints
    register_blueprints(app)

    # register error handlers
    from .errors import register_error_handlers
    register_error_handlers(app)

    # API responses are never cached
    @app.after_request
    def add_header(response):
        response.headers.setdefault("Cache-Control", "no-store, no-cache, must-revalidate, max-age=0")
        response.headers["Pragma"] = "no-cache"
        response.headers["Expires"] = "0"
        return response

    # create tables + seed
    with app.app_context():
        db.create_all()
        _seed_admin(app)

    return app


def _seed_admin(app):
    from .models import User
    from .permissions import ROLE_SUPERADMIN

    username = app.config.get("ADMIN_USERNAME")
    password = app.config.get("ADMIN_PASSWORD")
    if not username or not password:
        return
    if User.query.filter_by(username=username).first():
        return

    user = User(username=username, full_name=app.config.get("ADMIN_FULL_NAME") or username, role=ROLE_SUPERADMIN)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    app.logger.info("seeded superadmin %s", username)
