from sqlalchemy.orm import declared_attr

from ..extensions import db
from .base import TimestampMixin, utcnow

PRIORITY_LOW = "LOW"
PRIORITY_MEDIUM = "MEDIUM"
PRIORITY_HIGH = "HIGH"
PRIORITIES = (PRIORITY_LOW, PRIORITY_MEDIUM, PRIORITY_HIGH)

REPORT_REPORTED = "REPORTED"
REPORT_IN_PROGRESS = "IN_PROGRESS"
REPORT_COMPLETED = "COMPLETED"
REPORT_CANCELLED = "CANCELLED"
REPORT_STATUSES = (REPORT_REPORTED, REPORT_IN_PROGRESS, REPORT_COMPLETED, REPORT_CANCELLED)


class MaintenanceReportMixin(TimestampMixin):
    issue_description = db.Column(db.String(1000), nullable=False)
    remarks = db.Column(db.String(500), nullable=True)
    inspection_details = db.Column(db.String(1000), nullable=True)
    action_taken = db.Column(db.String(1000), nullable=True)
    parts_replaced = db.Column(db.JSON, nullable=False, default=list)
    priority = db.Column(db.String(10), nullable=False, default=PRIORITY_MEDIUM)
    status = db.Column(db.String(20), nullable=False, default=REPORT_REPORTED)
    downtime_hours = db.Column(db.String(50), nullable=True)
    date_reported = db.Column(db.DateTime, nullable=False, default=utcnow)
    date_repaired = db.Column(db.DateTime, nullable=True)
    attachment_urls = db.Column(db.JSON, nullable=False, default=list)

    @declared_attr
    def location_id(cls):
        return db.Column(db.String(36), db.ForeignKey("locations.id"), nullable=True)

    @declared_attr
    def reported_by(cls):
        return db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)

    @declared_attr
    def repaired_by(cls):
        return db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)

    @declared_attr
    def reporter(cls):
        return db.relationship("User", foreign_keys=f"{cls.__name__}.reported_by", lazy=True)

    @declared_attr
    def repairer(cls):
        return db.relationship("User", foreign_keys=f"{cls.__name__}.repaired_by", lazy=True)

    @declared_attr
    def location(cls):
        return db.relationship("Location", lazy=True)

    def to_dict(self, with_asset=True):
        out = self.columns_dict()
        out["parts_replaced"] = list(self.parts_replaced or [])
        out["attachment_urls"] = list(self.attachment_urls or [])
        out["reported_user"] = self.reporter.to_summary() if self.reporter else None
        out["repaired_user"] = self.repairer.to_summary() if self.repairer else None
        if self.location is not None:
            out["location"] = {"id": self.location.id, "address": self.location.address}
        if with_asset and self.asset is not None:
            a = self.asset
            out[self.asset_key] = {
                "id": a.id,
                "brand": a.brand,
                "model": a.model,
                "type": a.type,
                "plate_number": a.plate_number,
                "project_id": a.project_id,
            }
        return out


# ==========================================
# Maintenance reports (equipment / vehicle)
# ==========================================
class MaintenanceEquipmentReport(MaintenanceReportMixin, db.Model):
    __tablename__ = "maintenance_equipment_reports"
    asset_key = "equipment"

    equipment_id = db.Column(db.String(36), db.ForeignKey("equipment.id"), nullable=False)

    @property
    def asset(self):
        return self.equipment


class MaintenanceVehicleReport(MaintenanceReportMixin, db.Model):
    __tablename__ = "maintenance_vehicle_reports"
    asset_key = "vehicle"

    vehicle_id = db.Column(db.String(36), db.ForeignKey("vehicles.id"), nullable=False)

    @property
    def asset(self):
        return self.vehicle
