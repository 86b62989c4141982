# backend/kmdash/routes/system.py
"""
System health and version endpoints.

Public: no authentication, used by the frontend and deployment checks.
"""

import sys
import time
from flask import Blueprint, current_app
from ..extensions import db
from ..models import Material, SessionToken, Supplier, User
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__, url_prefix="/api")

API_VERSION = "1.0.0"


def check_database_health() -> dict:
    """
    Check database connectivity with a few cheap counts.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        details = {
            "users": db.session.query(User).count(),
            "materials": db.session.query(Material).count(),
            "suppliers": db.session.query(Supplier).count(),
            "active_sessions": db.session.query(SessionToken).filter_by(is_revoked=False).count(),
        }
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": details,
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: database reachable
    - 503: database unreachable
    """
    database_health = check_database_health()
    healthy = database_health["status"] == "healthy"

    response = {
        "status": "healthy" if healthy else "unhealthy",
        "message": "KM Inventory Dashboard API",
        "timestamp": to_utc_z(utcnow()),
        "checks": {
            "database": database_health,
        }
    }
    return response, 200 if healthy else 503


@system_bp.get("/version")
def version():
    """Non-sensitive deployment information."""
    env = "production" if not current_app.debug else "development"

    return {
        "api_version": API_VERSION,
        "environment": env,
        "python_version": sys.version.split()[0],
        "server_time": to_utc_z(utcnow()),
    }
