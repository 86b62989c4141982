# Overview: Flask API routes for user administration; parses input and returns JSON responses.

"""
User administration routes.

SECURITY: `users` permission (admin only). Deactivating a user revokes
all of their sessions.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_permission
from ..permissions import Role
from ..services import auth_service
from ..services.auth_service import PasswordValidationError
from ..validation import FieldRule, PayloadPolicy, ValidationError, bool_arg, validate_payload


users_bp = Blueprint("users", __name__, url_prefix="/api/users")

ROLE_VALUES = tuple(role.value for role in Role)

USER_POLICY = PayloadPolicy(fields=(
    FieldRule("name", required=True, max_length=255),
    FieldRule("email", kind="email", required=True, max_length=255),
    FieldRule("password", kind="password", required=True),
    FieldRule("role", choices=ROLE_VALUES, nullable=False),
    FieldRule("position", max_length=255),
    FieldRule("department", max_length=255),
    FieldRule("phone", max_length=32),
    FieldRule("is_active", kind="boolean", nullable=False),
))


@users_bp.get("")
@require_auth
@require_permission("users")
def list_users_route():
    """
    List users by name.

    Query params:
    - include_inactive: bool (default false) - include deactivated users
    """
    users = auth_service.list_users(include_inactive=bool_arg(request.args, "include_inactive"))
    return jsonify({
        "items": [u.to_dict() for u in users],
        "count": len(users),
    })


@users_bp.post("")
@require_auth
@require_permission("users")
def create_user_route():
    """
    Create a new user.

    Request body:
    - name: str (required)
    - email: str (required, unique)
    - password: str (required, 8+ chars with upper, lower and digit)
    - role: admin | manager | staff (default staff)
    - position, department, phone: str (optional)
    """
    data = validate_payload(payload=request.get_json(silent=True), policy=USER_POLICY, partial=False)
    data.pop("is_active", None)

    try:
        user = auth_service.create_user(**data)
    except PasswordValidationError as e:
        raise ValidationError({"password": [str(e)]})

    current_app.logger.info("User %s created by %s with role %s", user.email, g.current_user.id, user.role)
    return jsonify(user.to_dict()), 201


@users_bp.put("/<int:user_id>")
@require_auth
@require_permission("users")
def update_user_route(user_id: int):
    """
    Update a user. All fields optional; `is_active: false` deactivates the
    account and revokes its sessions.
    """
    data = validate_payload(payload=request.get_json(silent=True), policy=USER_POLICY, partial=True)

    if user_id == g.current_user.id and data.get("is_active") is False:
        raise ValidationError({"is_active": ["You cannot deactivate your own account"]})

    try:
        user = auth_service.update_user(user_id, data)
    except PasswordValidationError as e:
        raise ValidationError({"password": [str(e)]})

    return jsonify(user.to_dict())
