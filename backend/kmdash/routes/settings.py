# Overview: Flask API routes for settings; exposes the static role permission table.

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_permission
from ..permissions import PERMISSION_DEFINITIONS, ROLE_DESCRIPTIONS, Role, get_role_permissions


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("/permissions")
@require_auth
@require_permission("settings")
def permissions_route():
    """
    The fixed role -> permission table. Read-only: the table is part of
    the application, not of the database.
    """
    return jsonify({
        "permissions": [
            {"key": key, "name": name, "description": description}
            for key, name, description in PERMISSION_DEFINITIONS
        ],
        "roles": [
            {
                "role": role.value,
                "description": ROLE_DESCRIPTIONS[role],
                "permissions": get_role_permissions(role),
            }
            for role in Role
        ],
    })
