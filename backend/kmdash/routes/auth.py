# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

"""
Authentication API routes

- Login by email + password; the response carries everything the
  dashboard stores client-side: {token, user, permissions}
- Inactive accounts are refused with 403 so the login page can say why
- Self-registration is not offered; admins create users (/api/users)
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service
from ..services import session_service
from ..permissions import get_km_insight, get_role_permissions
from ..decorators import require_auth
from ..validation import ValidationError, validate_payload, PayloadPolicy, FieldRule


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


LOGIN_POLICY = PayloadPolicy(fields=(
    FieldRule("email", kind="email", required=True),
    FieldRule("password", kind="password", required=True),
))


def _session_payload(user, session, token: str, message: str) -> dict:
    return {
        "token": token,
        "user": user.to_dict(),
        "permissions": get_role_permissions(user.role_enum),
        "session": session.to_dict(),
        "message": message,
        "km_insight": get_km_insight(user.role_enum),
    }


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Request body: {"email": "...", "password": "..."}

    Returns 200 {token, user, permissions, session, message, km_insight}
    - 422: missing/malformed email or password
    - 401: unknown email or wrong password
    - 403: account deactivated
    """
    try:
        data = request.get_json(silent=True)

        try:
            credentials = validate_payload(payload=data, policy=LOGIN_POLICY, partial=False)
        except ValidationError as e:
            return jsonify({"error": "Validation failed", "errors": e.errors}), 422

        email = credentials["email"]
        user = auth_service.authenticate(email, credentials["password"])

        if not user:
            current_app.logger.warning("Failed login for %s from %s", email, request.remote_addr)
            return jsonify({"error": "Invalid credentials"}), 401

        if not user.is_active:
            current_app.logger.warning("Login attempt on deactivated account %s", email)
            return jsonify({"error": "Account is deactivated. Contact an administrator."}), 403

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )

        return jsonify(_session_payload(user, session, token, "Login successful")), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
@require_auth
def logout_route():
    """
    Revoke the current session token.

    WHY: Explicit logout prevents token reuse.
    """
    try:
        session_service.revoke_session(g.token, reason="User logout")
        return jsonify({"message": "Logout successful"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current user plus the permission record of their role."""
    context = g.session_context
    return jsonify({
        "user": context.user.to_dict(),
        "role": context.role.value,
        "permissions": context.permissions,
        "session": context.session.to_dict(),
        "km_insight": get_km_insight(context.role),
    })


@auth_bp.post("/refresh")
@require_auth
def refresh_route():
    """
    Swap the current token for a fresh one (new absolute expiry).

    The old token is revoked in the same request.
    """
    try:
        user = g.current_user
        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
        session_service.revoke_session(g.token, reason="Token refreshed")
        return jsonify(_session_payload(user, session, token, "Token refreshed")), 200

    except Exception:
        current_app.logger.exception("Failed to refresh session")
        return jsonify({"error": "Internal server error"}), 500
