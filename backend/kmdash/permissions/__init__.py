# Overview: Permission gate package.
# Re-exports the role table and lookup helpers.

from .definitions import PERMISSION_DEFINITIONS, PERMISSION_KEYS
from .roles import Role, ROLE_PERMISSIONS, ROLE_DESCRIPTIONS, ROLE_KM_INSIGHTS
from .helpers import (
    get_role_permissions,
    get_km_insight,
    has_permission,
    get_granted_keys,
    get_permission_definition,
    validate_permission_key,
)

__all__ = [
    "PERMISSION_DEFINITIONS",
    "PERMISSION_KEYS",
    "Role",
    "ROLE_PERMISSIONS",
    "ROLE_DESCRIPTIONS",
    "ROLE_KM_INSIGHTS",
    "get_role_permissions",
    "get_km_insight",
    "has_permission",
    "get_granted_keys",
    "get_permission_definition",
    "validate_permission_key",
]
