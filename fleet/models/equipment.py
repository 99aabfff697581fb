from ..extensions import db
from ..parts import parse_parts_manifest
from .base import TimestampMixin

STATUS_OPERATIONAL = "OPERATIONAL"
STATUS_NON_OPERATIONAL = "NON_OPERATIONAL"
ASSET_STATUSES = (STATUS_OPERATIONAL, STATUS_NON_OPERATIONAL)


class AssetMixin(TimestampMixin):
    """Columns shared by equipment and vehicles."""

    brand = db.Column(db.String(100), nullable=False)
    model = db.Column(db.String(100), nullable=False)
    type = db.Column(db.String(100), nullable=False)
    owner = db.Column(db.String(120), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_OPERATIONAL)
    remarks = db.Column(db.Text, nullable=True)
    plate_number = db.Column(db.String(50), nullable=True)
    # months before expiry to start warning
    before = db.Column(db.Integer, nullable=True)
    inspection_date = db.Column(db.Date, nullable=True)
    registration_expiry = db.Column(db.Date, nullable=True)

    def _base_dict(self):
        out = self.columns_dict()
        # legacy string / list forms come back as the structured document
        out[self.parts_column] = parse_parts_manifest(getattr(self, self.parts_column)).to_dict()
        return out

    def _with_relations(self, out, reports, with_reports):
        if self.project is not None:
            out["project"] = self.project.to_dict()
        if with_reports:
            out["maintenance_reports"] = [r.to_dict(with_asset=False) for r in reports[:5]]
        return out


# ==========================================
# Equipment
# ==========================================
class Equipment(AssetMixin, db.Model):
    __tablename__ = "equipment"
    parts_column = "equipment_parts"

    insurance_expiration_date = db.Column(db.Date, nullable=True)

    image_url = db.Column(db.String(500), nullable=True)
    original_receipt_url = db.Column(db.String(500), nullable=True)
    equipment_registration_url = db.Column(db.String(500), nullable=True)
    thirdparty_inspection_image = db.Column(db.String(500), nullable=True)
    pgpc_inspection_image = db.Column(db.String(500), nullable=True)

    # {"rootFiles": [...], "folders": [...]}
    equipment_parts = db.Column(db.JSON, nullable=True)

    project_id = db.Column(db.String(36), db.ForeignKey("projects.id"), nullable=False)
    created_by = db.Column(db.String(36), db.ForeignKey("users.id"), nullable=True)

    project = db.relationship("Project", backref=db.backref("equipment", lazy=True))
    maintenance_reports = db.relationship(
        "MaintenanceEquipmentReport",
        backref="equipment",
        lazy=True,
        order_by="MaintenanceEquipmentReport.date_reported.desc()",
    )

    def to_dict(self, with_relations=True, with_reports=False):
        out = self._base_dict()
        if with_relations:
            self._with_relations(out, self.maintenance_reports, with_reports)
        return out
