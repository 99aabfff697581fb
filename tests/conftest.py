import io

import pytest

from fleet import create_app
from fleet.config import TestingConfig
from fleet.extensions import db
from fleet.models import USER_INACTIVE, User
from fleet.permissions import ROLE_ADMIN, ROLE_VIEWER
from fleet.services import hierarchy_service

PASSWORD = "secret123"


@pytest.fixture()
def app():
    app = create_app(TestingConfig)
    with app.app_context():
        for username, role, status in (
            ("admin", ROLE_ADMIN, None),
            ("viewer", ROLE_VIEWER, None),
            ("sleepy", ROLE_VIEWER, USER_INACTIVE),
        ):
            user = User(username=username, full_name=username.title(), role=role)
            if status:
                user.user_status = status
            user.set_password(PASSWORD)
            db.session.add(user)
        db.session.commit()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def store(app):
    return app.extensions["storage"]


@pytest.fixture()
def feed(app):
    return app.extensions["realtime"].feed


def login(client, username, password=PASSWORD):
    resp = client.post("/api/auth/login", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return client


@pytest.fixture()
def super_client(app):
    return login(app.test_client(), "superadmin", "superpass")


@pytest.fixture()
def admin_client(app):
    return login(app.test_client(), "admin")


@pytest.fixture()
def viewer_client(app):
    return login(app.test_client(), "viewer")


@pytest.fixture()
def project(app):
    """location -> client -> project, returns the ids."""
    with app.app_context():
        loc = hierarchy_service.create_location({"address": "12 Harbour Road"})
        client = hierarchy_service.create_client({"name": "Acme", "location_id": loc.id})
        project = hierarchy_service.create_project({"name": "Bridge", "client_id": client.id})
        return {"location_id": loc.id, "client_id": client.id, "project_id": project.id}


def image(name="photo.jpg", size=16, mimetype="image/jpeg"):
    return (io.BytesIO(b"x" * size), name, mimetype)


def pdf(name="doc.pdf", size=16):
    return (io.BytesIO(b"%PDF" + b"x" * size), name, "application/pdf")
