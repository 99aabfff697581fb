"""Role / resource permission matrix."""

ROLE_SUPERADMIN = "SUPERADMIN"
ROLE_ADMIN = "ADMIN"
ROLE_VIEWER = "VIEWER"

ROLES = (ROLE_SUPERADMIN, ROLE_ADMIN, ROLE_VIEWER)

ROLE_HIERARCHY = {
    ROLE_VIEWER: 1,
    ROLE_ADMIN: 2,
    ROLE_SUPERADMIN: 3,
}

ACTIONS = ("view", "create", "update", "delete")

ASSET_RESOURCES = (
    "locations",
    "clients",
    "projects",
    "equipment",
    "vehicles",
    "maintenance_reports",
)


def has_minimum_role(role: str, required: str) -> bool:
    return ROLE_HIERARCHY.get(role, 0) >= ROLE_HIERARCHY[required]


def has_permission(role: str, resource: str, action: str) -> bool:
    if role not in ROLE_HIERARCHY or action not in ACTIONS:
        return False

    # every authenticated role can read everything
    if action == "view":
        return True

    if has_minimum_role(role, ROLE_SUPERADMIN):
        return True

    if resource == "users":
        return False

    if resource in ASSET_RESOURCES and role == ROLE_ADMIN:
        return action != "delete"

    return False


def permissions_for(role: str, resource: str) -> dict:
    return {f"can_{action}": has_permission(role, resource, action) for action in ACTIONS}
