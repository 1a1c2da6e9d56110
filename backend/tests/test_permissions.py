"""
Permission policy table tests (no HTTP).
"""

import pytest

from stockroom.errors import ForbiddenError
from stockroom.permissions import (
    PERMISSION_DEFINITIONS,
    PermissionResource,
    UserRole,
    get_all_permission_codes,
    get_permission_definition,
    get_role_permission_codes,
    has_permission,
    validate_permission_code,
)
from stockroom.services import permission_service


class TestDefinitions:
    def test_one_code_per_resource_and_action(self):
        codes = get_all_permission_codes()
        assert len(codes) == len(set(codes)) == len(PermissionResource.ALL) * 4

    def test_codes_are_resource_dot_action(self):
        for code, _name, _description, resource in PERMISSION_DEFINITIONS:
            assert code.split(".", 1)[0] == resource

    def test_definition_lookup(self):
        definition = get_permission_definition("cartItems.update")
        assert definition["resource"] == "cartItems"
        assert definition["name"] == "Edit Cart Items"
        assert get_permission_definition("cartItems.explode") is None

    def test_validate_code(self):
        assert validate_permission_code("orders.read")
        assert not validate_permission_code("orders.*")
        assert not validate_permission_code("invoices.read")


class TestPolicyTable:
    def test_admin_wildcard(self):
        for resource in PermissionResource.ALL:
            for action in ("create", "read", "update", "delete"):
                assert has_permission(UserRole.ADMIN, resource, action)

    @pytest.mark.parametrize("resource", ["stores", "products", "orders", "reports", "graphics"])
    def test_manager_resource_wildcards(self, resource):
        assert has_permission(UserRole.MANAGER, resource, "delete")

    def test_manager_cannot_manage_teams(self):
        assert has_permission(UserRole.MANAGER, "teams", "read")
        assert not has_permission(UserRole.MANAGER, "teams", "create")
        assert not has_permission(UserRole.MANAGER, "users", "delete")

    @pytest.mark.parametrize(
        "resource,action,granted",
        [
            ("carts", "create", True),
            ("cartItems", "delete", True),
            ("orders", "create", True),
            ("orders", "delete", False),
            ("products", "read", True),
            ("products", "create", False),
            ("stores", "update", False),
            ("reports", "create", False),
            ("graphics", "read", True),
            ("histories", "read", True),
            ("histories", "update", False),
            ("users", "update", True),
        ],
    )
    def test_clerk(self, resource, action, granted):
        assert has_permission(UserRole.CLERK, resource, action) is granted

    def test_unknown_role_denied(self):
        assert not has_permission("superuser", "orders", "read")
        assert get_role_permission_codes("superuser") == []

    def test_expanded_codes(self):
        assert set(get_role_permission_codes(UserRole.ADMIN)) == set(get_all_permission_codes())
        clerk_codes = set(get_role_permission_codes(UserRole.CLERK))
        assert "carts.update" in clerk_codes
        assert "products.update" not in clerk_codes


class _FakeUser:
    def __init__(self, role):
        self.id = 1
        self.role = role


class TestRequirePermission:
    def test_granted(self, app):
        permission_service.require_permission(_FakeUser(UserRole.CLERK), "orders", "create")

    def test_denied_carries_required_code(self, app):
        with pytest.raises(ForbiddenError) as exc:
            permission_service.require_permission(_FakeUser(UserRole.CLERK), "orders", "delete")
        assert exc.value.details == {"required_permission": "orders.delete"}

    def test_no_user(self, app):
        assert permission_service.user_has_permission(None, "orders", "read") is False
