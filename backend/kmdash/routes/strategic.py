# Overview: Flask API routes for the strategic dashboard metrics.

"""
Strategic Dashboard Routes

SECURITY: `analitik` permission (admin and manager).

Every response is computed from the current rows; nothing is cached and
nothing is written.
"""

from flask import Blueprint, jsonify

from ..decorators import require_auth, require_permission
from ..services import strategic_service


strategic_bp = Blueprint("strategic", __name__, url_prefix="/api/strategic")


@strategic_bp.get("/overview")
@require_auth
@require_permission("analitik")
def overview_route():
    """
    Returns:
        {
            total_stock_value, vendor_reliability_index,
            knowledge_health_score, lean_efficiency_score,
            period: {from, to}, generated_at
        }
    """
    return jsonify(strategic_service.overview())


@strategic_bp.get("/stock-value")
@require_auth
@require_permission("analitik")
def stock_value_route():
    return jsonify(strategic_service.stock_value())


@strategic_bp.get("/vendor-reliability")
@require_auth
@require_permission("analitik")
def vendor_reliability_route():
    return jsonify(strategic_service.vendor_reliability())


@strategic_bp.get("/knowledge-health")
@require_auth
@require_permission("analitik")
def knowledge_health_route():
    return jsonify(strategic_service.knowledge_health())


@strategic_bp.get("/lean-efficiency")
@require_auth
@require_permission("analitik")
def lean_efficiency_route():
    return jsonify(strategic_service.lean_efficiency())
