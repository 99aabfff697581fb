"""Locations, clients and projects."""

from sqlalchemy import func

from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import db
from ..models import Client, Equipment, Location, Project, Vehicle
from .forms import clean_str


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def _get(model, obj_id, label):
    obj = db.session.get(model, obj_id) if obj_id else None
    if obj is None:
        raise NotFoundError(f"{label} not found")
    return obj


# ==========================================
# Locations
# ==========================================
def list_locations(page):
    q = Location.query.order_by(Location.address.asc())
    total = q.count()
    return [l.to_dict(with_counts=True) for l in page.apply(q).all()], total


def get_location(location_id):
    return _get(Location, location_id, "Location")


def _location_address(data):
    address = data.get("address")
    if not isinstance(address, str) or not address.strip():
        raise ValidationError("Address is required and must be a non-empty string")
    return address.strip()


def _address_taken(address, exclude_id=None):
    q = Location.query.filter(func.lower(Location.address) == address.lower())
    if exclude_id:
        q = q.filter(Location.id != exclude_id)
    return db.session.query(q.exists()).scalar()


def create_location(data, user_id=None):
    address = _location_address(data)
    if _address_taken(address):
        raise ConflictError("Location with this address already exists")

    loc = Location(address=address, created_by=user_id)
    db.session.add(loc)
    _commit()
    return loc


def update_location(location_id, data):
    loc = get_location(location_id)
    address = _location_address(data)
    if _address_taken(address, exclude_id=loc.id):
        raise ConflictError("Location with this address already exists")
    if address != loc.address:
        loc.address = address
        _commit()
    return loc


def delete_location(location_id):
    loc = get_location(location_id)
    if Client.query.filter_by(location_id=loc.id).count():
        raise ConflictError(
            "Cannot delete location with existing clients. Please move or delete clients first."
        )
    db.session.delete(loc)
    _commit()


# ==========================================
# Clients
# ==========================================
def list_clients(page, location_id=None):
    q = Client.query
    if location_id:
        q = q.filter(Client.location_id == location_id)
    q = q.order_by(Client.name.asc())
    total = q.count()
    return [c.to_dict() for c in page.apply(q).all()], total


def get_client(client_id):
    return _get(Client, client_id, "Client")


def _client_name_taken(name, location_id, exclude_id=None):
    q = Client.query.filter(Client.location_id == location_id, func.lower(Client.name) == name.lower())
    if exclude_id:
        q = q.filter(Client.id != exclude_id)
    return db.session.query(q.exists()).scalar()


def create_client(data, user_id=None):
    name = clean_str(data.get("name"))
    if not name:
        raise ValidationError("Client name is required")
    location_id = clean_str(data.get("location_id") or data.get("locationId"))
    if not location_id:
        raise ValidationError("Location is required")
    if db.session.get(Location, location_id) is None:
        raise ValidationError("Selected location does not exist")
    if _client_name_taken(name, location_id):
        raise ConflictError("Client with this name already exists in this location")

    client = Client(name=name, location_id=location_id, created_by=user_id)
    db.session.add(client)
    _commit()
    return client


def update_client(client_id, data):
    client = get_client(client_id)

    name = clean_str(data.get("name")) if "name" in data else client.name
    if not name:
        raise ValidationError("Client name is required")

    location_id = client.location_id
    if "location_id" in data or "locationId" in data:
        location_id = clean_str(data.get("location_id") or data.get("locationId"))
        if not location_id:
            raise ValidationError("Location is required")
        if db.session.get(Location, location_id) is None:
            raise ValidationError("Selected location does not exist")

    if _client_name_taken(name, location_id, exclude_id=client.id):
        raise ConflictError("Client with this name already exists in this location")

    client.name = name
    client.location_id = location_id
    _commit()
    return client


def delete_client(client_id):
    client = get_client(client_id)
    if Project.query.filter_by(client_id=client.id).count():
        raise ConflictError(
            "Cannot delete client with existing projects. Please move or delete projects first."
        )
    db.session.delete(client)
    _commit()


# ==========================================
# Projects
# ==========================================
def list_projects(page, client_id=None):
    q = Project.query
    if client_id:
        q = q.filter(Project.client_id == client_id)
    q = q.order_by(Project.created_at.desc())
    total = q.count()
    return [p.to_dict() for p in page.apply(q).all()], total


def get_project(project_id):
    return _get(Project, project_id, "Project")


def _project_name_taken(name, client_id, exclude_id=None):
    q = Project.query.filter(Project.client_id == client_id, func.lower(Project.name) == name.lower())
    if exclude_id:
        q = q.filter(Project.id != exclude_id)
    return db.session.query(q.exists()).scalar()


def _project_name(data):
    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name is required and must be a non-empty string")
    return name.strip()


def create_project(data, user_id=None):
    name = _project_name(data)
    client_id = clean_str(data.get("client_id") or data.get("clientId"))
    if not client_id:
        raise ValidationError("Client ID is required")
    get_client(client_id)
    if _project_name_taken(name, client_id):
        raise ConflictError("Project with this name already exists for this client")

    project = Project(name=name, client_id=client_id, created_by=user_id)
    db.session.add(project)
    _commit()
    return project


def update_project(project_id, data):
    project = get_project(project_id)
    name = _project_name(data) if "name" in data else project.name

    client_id = project.client_id
    if "client_id" in data or "clientId" in data:
        client_id = clean_str(data.get("client_id") or data.get("clientId"))
        if not client_id:
            raise ValidationError("Client ID is required")
        get_client(client_id)

    if _project_name_taken(name, client_id, exclude_id=project.id):
        raise ConflictError("Project with this name already exists for this client")

    project.name = name
    project.client_id = client_id
    _commit()
    return project


def delete_project(project_id):
    project = get_project(project_id)
    in_use = (
        Equipment.query.filter_by(project_id=project.id).count()
        + Vehicle.query.filter_by(project_id=project.id).count()
    )
    if in_use:
        raise ConflictError(
            "Cannot delete project with existing equipment or vehicles. Please move or delete them first."
        )
    db.session.delete(project)
    _commit()
