from ..extensions import db
from .equipment import AssetMixin


# ==========================================
# Vehicle
# ==========================================
class Vehicle(AssetMixin, db.Model):
    __tablename__ = "vehicles"
    parts_column = "vehicle_parts"

    expiry_date = db.Column(db.Date, nullable=True)

    front_img_url = db.Column(db.String(500), nullable=True)
    back_img_url = db.Column(db.String(500), nullable=True)
    side1_img_url = db.Column(db.String(500), nullable=True)
    side2_img_url = db.Column(db.String(500), nullable=True)
    original_receipt_url = db.Column(db.String(500), nullable=True)
    car_registration_url = db.Column(db.String(500), nullable=True)

    vehicle_parts = db.Column(db.JSON, nullable=True)

    project_id = db.Column(db.String(36), db.ForeignKey("projects.id"), nullable=False)
    created_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)

    project = db.relationship("Project", backref=db.backref("vehicles", lazy=True))
    maintenance_reports = db.relationship(
        "MaintenanceVehicleReport",
        backref="vehicle",
        lazy=True,
        order_by="MaintenanceVehicleReport.date_reported.desc()",
    )

    def to_dict(self, with_relations=True, with_reports=False):
        out = self._base_dict()
        if with_relations:
            self._with_relations(out, self.maintenance_reports, with_reports)
        return out
