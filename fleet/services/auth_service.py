from functools import wraps

from flask import current_app
from flask_login import current_user

from ..errors import AuthenticationError, ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from ..extensions import db
from ..models import USER_ACTIVE, USER_INACTIVE, User
from ..permissions import ROLE_VIEWER, ROLES, has_permission
from .forms import clean_str


def permission_required(resource, action):
    """permission_required('equipment', 'create')"""
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            if not current_user.is_authenticated:
                return current_app.login_manager.unauthorized()
            if not current_user.is_enabled():
                raise PermissionDeniedError("Account is inactive")
            if not has_permission(current_user.role, resource, action):
                raise PermissionDeniedError(
                    f"Insufficient permissions. {current_user.role} role cannot {action} {resource}"
                )
            return fn(*args, **kwargs)
        return wrapper
    return deco


def authenticate(username: str, password: str) -> User:
    username = (username or "").strip()
    if not username or not password:
        raise ValidationError("username and password are required")

    user = User.query.filter_by(username=username).first()
    if user is None or not user.check_password(password):
        raise AuthenticationError("Invalid username or password")
    if not user.is_enabled():
        raise PermissionDeniedError("Account is inactive")
    return user


def _commit():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise


def list_users(page):
    q = User.query.order_by(User.created_at.desc())
    total = q.count()
    return [u.to_dict() for u in page.apply(q).all()], total


def get_user(user_id: str) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _check_role(role):
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")


def _check_status(status):
    if status not in (USER_ACTIVE, USER_INACTIVE):
        raise ValidationError("user_status must be ACTIVE or INACTIVE")


def create_user(data: dict) -> User:
    username = clean_str(data.get("username"))
    password = data.get("password") or ""
    if not username or not password:
        raise ValidationError("username and password are required")
    if User.query.filter_by(username=username).first():
        raise ConflictError("Username already exists")

    role = data.get("role") or ROLE_VIEWER
    status = data.get("user_status") or USER_ACTIVE
    _check_role(role)
    _check_status(status)

    user = User(
        username=username,
        full_name=clean_str(data.get("full_name")) or username,
        phone=clean_str(data.get("phone")),
        role=role,
        user_status=status,
    )
    user.set_password(password)
    db.session.add(user)
    _commit()
    current_app.logger.info("user %s created with role %s", user.username, user.role)
    return user


def update_user(user_id: str, data: dict, acting_user) -> User:
    user = get_user(user_id)

    if "username" in data:
        username = clean_str(data.get("username"))
        if not username:
            raise ValidationError("username cannot be empty")
        if username != user.username and User.query.filter_by(username=username).first():
            raise ConflictError("Username already exists")
        user.username = username

    if "full_name" in data:
        user.full_name = clean_str(data.get("full_name")) or ""
    if "phone" in data:
        user.phone = clean_str(data.get("phone"))
    if "role" in data:
        _check_role(data["role"])
        if user.id == acting_user.id and data["role"] != user.role:
            raise ValidationError("You cannot change your own role")
        user.role = data["role"]
    if "user_status" in data:
        _check_status(data["user_status"])
        if user.id == acting_user.id and data["user_status"] != USER_ACTIVE:
            raise ValidationError("You cannot deactivate your own account")
        user.user_status = data["user_status"]
    if data.get("password"):
        user.set_password(data["password"])

    _commit()
    return user


def delete_user(user_id: str, acting_user) -> None:
    user = get_user(user_id)
    if user.id == acting_user.id:
        raise ValidationError("You cannot delete your own account")
    db.session.delete(user)
    _commit()


# ==========================================
# self-service profile
# ==========================================
def update_profile(user, data: dict) -> User:
    username = clean_str(data.get("username"))
    full_name = clean_str(data.get("full_name"))
    if not username or not full_name:
        raise ValidationError("Username and full name are required")
    if User.query.filter(User.username == username, User.id != user.id).first():
        raise ConflictError("Username already exists")

    user_profile = clean_str(data.get("user_profile"))
    if user_profile is not None and len(user_profile) > 500:
        raise ValidationError("Profile image URL too long")

    user.username = username
    user.full_name = full_name
    user.phone = clean_str(data.get("phone"))
    user.user_profile = user_profile
    _commit()
    current_app.logger.info("user %s updated their profile", user.username)
    return user
