# Overview: Flask API routes for production logs and waste incidents.

"""
Production Routes (Lean KM inputs)

SECURITY: Gated by the `inventaris` permission; production usage is part
of day-to-day inventory work for every role.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..services import production_service
from ..time_utils import parse_iso_date
from ..validation import ValidationError, page_params


production_bp = Blueprint("production", __name__, url_prefix="/api/production")


def _date_arg(name: str):
    try:
        return parse_iso_date(request.args.get(name))
    except ValueError:
        raise ValidationError({name: [f"{name} must be an ISO-8601 date (YYYY-MM-DD)"]})


@production_bp.get("/logs")
@require_auth
@require_permission("inventaris")
def list_logs_route():
    """Query parameters: material_id, from, to (YYYY-MM-DD), limit, offset"""
    limit, offset = page_params(request.args)

    logs, total = production_service.list_logs(
        material_id=request.args.get("material_id", type=int),
        date_from=_date_arg("from"),
        date_to=_date_arg("to"),
        limit=limit,
        offset=offset,
    )

    return jsonify({
        "items": [log.to_dict() for log in logs],
        "count": total,
        "limit": limit,
        "offset": offset,
    })


@production_bp.post("/logs")
@require_auth
@require_permission("inventaris")
def create_log_route():
    """
    Record material usage for a production run.

    Request body:
    {
        "material_id": 1,              // required
        "quantity_used": 120,          // required
        "product_type": "Kemeja",      // required
        "quantity_produced": 60,
        "waste_quantity": 8.5,         // waste_percentage is derived
        "production_date": "2024-05-01",
        "shift": "Pagi",
        "waste_reason": "...",
        "notes": "...",
        "tacit_insight": "..."
    }
    """
    log = production_service.create_log(
        payload=request.get_json(silent=True),
        worker_id=g.current_user.id,
    )
    return jsonify(log.to_dict()), 201


@production_bp.get("/wastes")
@require_auth
@require_permission("inventaris")
def list_wastes_route():
    """Query parameters: material_id, waste_category, preventable (true/false), limit, offset"""
    limit, offset = page_params(request.args)

    preventable = request.args.get("preventable")
    if preventable is not None:
        preventable = preventable.strip().lower() in ("1", "true", "yes")

    wastes, total = production_service.list_wastes(
        material_id=request.args.get("material_id", type=int),
        waste_category=request.args.get("waste_category"),
        preventable=preventable,
        limit=limit,
        offset=offset,
    )

    return jsonify({
        "items": [w.to_dict() for w in wastes],
        "count": total,
        "limit": limit,
        "offset": offset,
    })


@production_bp.post("/wastes")
@require_auth
@require_permission("inventaris")
def create_waste_route():
    """
    Record a waste incident; cost_impact = quantity x material unit price.

    Request body:
    {
        "material_id": 1,                   // required
        "quantity": 3.5,                    // required
        "waste_category": "Cutting Error",  // required
        "waste_reason": "...",              // required
        "is_preventable": true,
        "preventive_action": "...",
        "waste_date": "2024-05-01",
        "production_log_id": 4
    }
    """
    waste = production_service.create_waste(
        payload=request.get_json(silent=True),
        recorded_by_user_id=g.current_user.id,
    )
    return jsonify(waste.to_dict()), 201
