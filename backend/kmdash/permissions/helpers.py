# Overview: Utility functions for permission lookups and validation.

from .definitions import PERMISSION_DEFINITIONS, PERMISSION_KEYS
from .roles import ROLE_KM_INSIGHTS, ROLE_PERMISSIONS, Role


def get_role_permissions(role) -> dict[str, bool]:
    """Permission record for a role; unknown roles get the staff record."""
    return dict(ROLE_PERMISSIONS[Role.parse(role)])


def get_km_insight(role) -> str:
    return ROLE_KM_INSIGHTS[Role.parse(role)]


def has_permission(role, key: str) -> bool:
    """True only when the role's record grants `key`. Unknown keys are denied."""
    return ROLE_PERMISSIONS[Role.parse(role)].get(key, False)


def get_granted_keys(role) -> list[str]:
    record = ROLE_PERMISSIONS[Role.parse(role)]
    return [key for key in PERMISSION_KEYS if record[key]]


def get_permission_definition(key):
    """Get full definition for a permission key."""
    for perm in PERMISSION_DEFINITIONS:
        if perm[0] == key:
            return {
                "key": perm[0],
                "name": perm[1],
                "description": perm[2],
            }
    return None


def validate_permission_key(key):
    """Check if a permission key is valid."""
    return key in PERMISSION_KEYS
