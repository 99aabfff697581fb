from ..extensions import db
from .base import TimestampMixin


# ==========================================
# Location -> Client -> Project
# ==========================================
class Location(TimestampMixin, db.Model):
    __tablename__ = "locations"

    address = db.Column(db.String(255), unique=True, nullable=False)
    created_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)

    clients = db.relationship("Client", backref="location", lazy=True)

    def to_dict(self, with_counts=False):
        out = self.columns_dict()
        if with_counts:
            out["clients_count"] = len(self.clients)
        return out


class Client(TimestampMixin, db.Model):
    __tablename__ = "clients"

    name = db.Column(db.String(120), nullable=False)
    location_id = db.Column(db.String(36), db.ForeignKey("locations.id"), nullable=False)
    created_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)

    projects = db.relationship("Project", backref="client", lazy=True)

    def to_dict(self, with_location=True):
        out = self.columns_dict()
        if with_location and self.location is not None:
            out["location"] = {"id": self.location.id, "address": self.location.address}
        return out


class Project(TimestampMixin, db.Model):
    __tablename__ = "projects"

    name = db.Column(db.String(120), nullable=False)
    client_id = db.Column(db.String(36), db.ForeignKey("clients.id"), nullable=False)
    created_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)

    def to_dict(self, with_client=True):
        out = self.columns_dict()
        if with_client and self.client is not None:
            out["client"] = self.client.to_dict()
        return out

    @property
    def location_id(self):
        return self.client.location_id if self.client is not None else None
