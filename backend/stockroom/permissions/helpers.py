# Overview: Utility functions for permission lookups and validation.

from .categories import PermissionAction
from .definitions import PERMISSION_DEFINITIONS, permission_code
from .roles import DEFAULT_ROLE_PERMISSIONS


def get_all_permission_codes():
    """Get list of all permission codes."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def get_permissions_by_resource(resource):
    """Get all permissions for a resource."""
    return [perm for perm in PERMISSION_DEFINITIONS if perm[3] == resource]


def get_permission_definition(code):
    """Get full definition for a permission code."""
    for perm in PERMISSION_DEFINITIONS:
        if perm[0] == code:
            return {
                "code": perm[0],
                "name": perm[1],
                "description": perm[2],
                "resource": perm[3],
            }
    return None


def validate_permission_code(code):
    """Check if a permission code is valid."""
    return code in get_all_permission_codes()


def has_permission(role, resource, action):
    """
    Policy lookup: exact code, "<resource>.*" or "*".

    Unknown roles are denied.
    """
    grants = DEFAULT_ROLE_PERMISSIONS.get(role)
    if not grants:
        return False
    return (
        PermissionAction.WILDCARD in grants
        or permission_code(resource, PermissionAction.WILDCARD) in grants
        or permission_code(resource, action) in grants
    )


def get_role_permission_codes(role):
    """Expand a role's grants into the concrete permission codes they cover."""
    return [
        code
        for code, _name, _description, resource in PERMISSION_DEFINITIONS
        if has_permission(role, resource, code.split(".", 1)[1])
    ]
