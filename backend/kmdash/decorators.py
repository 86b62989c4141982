# Overview: Request and permission decorators for API routes.

from functools import wraps
from flask import current_app, request, jsonify, g

from .services import session_service


def _bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user') and hasattr(g, 'session_context')


def require_auth(f):
    """
    Require a valid bearer session.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.session_context: The SessionContext (role + permission record)
    - g.token: The plaintext bearer token of this request

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid, expired, idle or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = _bearer_token()
        if not token:
            return jsonify({"error": "Authentication required"}), 401

        context = session_service.validate_session(token)

        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.session_context = context
        g.token = token

        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_key: str):
    """
    Require one key of the role permission table (dashboard, inventaris, ...).

    Denials are logged at WARNING with the user, role and path.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            # Ensure @require_auth was called first
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            context = g.session_context
            if not context.has_permission(permission_key):
                current_app.logger.warning(
                    "Permission denied: user=%s role=%s permission=%s path=%s",
                    context.user.id, context.role.value, permission_key, request.path,
                )
                return jsonify({
                    "error": "Permission denied",
                    "required_permission": permission_key,
                    "message": f"Role '{context.role.value}' cannot access '{permission_key}'",
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
