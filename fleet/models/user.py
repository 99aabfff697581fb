from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from ..extensions import db
from ..permissions import ROLE_VIEWER
from .base import TimestampMixin

USER_ACTIVE = "ACTIVE"
USER_INACTIVE = "INACTIVE"


# ==========================================
# User
# ==========================================
class User(UserMixin, TimestampMixin, db.Model):
    __tablename__ = "users"
    __realtime_exclude__ = ("password_hash",)

    username = db.Column(db.String(50), unique=True, nullable=False)
    full_name = db.Column(db.String(120), nullable=False, default="")
    phone = db.Column(db.String(30), nullable=True)
    # avatar URL
    user_profile = db.Column(db.String(500), nullable=True)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_VIEWER)
    user_status = db.Column(db.String(20), nullable=False, default=USER_ACTIVE)

    def set_password(self, pwd):
        self.password_hash = generate_password_hash(pwd)

    def check_password(self, pwd):
        return check_password_hash(self.password_hash, pwd)

    # inactive accounts are rejected with 403 by permission_required
    def is_enabled(self):
        return self.user_status == USER_ACTIVE

    def to_dict(self):
        return self.columns_dict(exclude=("password_hash",))

    def to_summary(self):
        return {"id": self.id, "username": self.username, "full_name": self.full_name}
