# Overview: Flask API routes for the main dashboard cards and alerts.

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_permission
from ..services import dashboard_service


dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/dashboard")


@dashboard_bp.get("/metrics")
@require_auth
@require_permission("dashboard")
def metrics_route():
    """Four headline cards: stock value, material efficiency, supplier reliability, knowledge health."""
    return jsonify(dashboard_service.metrics_cards())


@dashboard_bp.get("/recent-knowledge")
@require_auth
@require_permission("dashboard")
def recent_knowledge_route():
    items = dashboard_service.recent_knowledge()
    return jsonify({"items": items, "count": len(items)})


@dashboard_bp.get("/alerts")
@require_auth
@require_permission("dashboard")
def alerts_route():
    items = dashboard_service.alerts()
    return jsonify({"items": items, "count": len(items)})
