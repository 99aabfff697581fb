import pytest

from fleet.permissions import (
    ASSET_RESOURCES,
    ROLE_ADMIN,
    ROLE_SUPERADMIN,
    ROLE_VIEWER,
    has_minimum_role,
    has_permission,
    permissions_for,
)


@pytest.mark.parametrize("resource", ASSET_RESOURCES + ("users",))
def test_superadmin_can_do_everything(resource):
    for action in ("view", "create", "update", "delete"):
        assert has_permission(ROLE_SUPERADMIN, resource, action)


@pytest.mark.parametrize("resource", ASSET_RESOURCES)
def test_admin_manages_assets_but_cannot_delete(resource):
    assert permissions_for(ROLE_ADMIN, resource) == {
        "can_view": True,
        "can_create": True,
        "can_update": True,
        "can_delete": False,
    }


def test_admin_only_views_users():
    assert has_permission(ROLE_ADMIN, "users", "view")
    assert not has_permission(ROLE_ADMIN, "users", "create")


def test_viewer_is_read_only():
    for resource in ASSET_RESOURCES:
        assert has_permission(ROLE_VIEWER, resource, "view")
        assert not has_permission(ROLE_VIEWER, resource, "create")
        assert not has_permission(ROLE_VIEWER, resource, "update")


def test_unknown_role_or_action_is_denied():
    assert not has_permission("GUEST", "equipment", "view")
    assert not has_permission(ROLE_SUPERADMIN, "equipment", "archive")


def test_role_hierarchy():
    assert has_minimum_role(ROLE_SUPERADMIN, ROLE_ADMIN)
    assert not has_minimum_role(ROLE_VIEWER, ROLE_ADMIN)
