# Overview: Flask API routes for inventory operations; parses input and returns JSON responses.

"""
Inventory Routes (inventaris)

SECURITY: All routes require authentication and the `inventaris`
permission (every role has it).

The same handlers are served under /api/inventaris and /api/materials.
Domain errors (ValidationError, MaterialNotFoundError) are turned into
422/404 JSON by the app-level handlers.
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..services import inventory_service
from ..validation import bool_arg, page_params


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventaris")
materials_bp = Blueprint("materials", __name__, url_prefix="/api/materials")


@require_auth
@require_permission("inventaris")
def list_materials_route():
    """
    List active materials, newest first.

    Query parameters:
    - search: name or category contains
    - kategori: exact category
    - status: Habis | Rendah | Cukup | Optimal
    - low_stock: only stock <= threshold_min
    - include_inactive, limit (default 100), offset

    Returns:
        {items: Material[], count: int, limit: int, offset: int}
    """
    limit, offset = page_params(request.args)

    materials, total = inventory_service.list_materials(
        search=request.args.get("search"),
        category=request.args.get("kategori"),
        status=request.args.get("status"),
        low_stock_only=bool_arg(request.args, "low_stock"),
        include_inactive=bool_arg(request.args, "include_inactive"),
        limit=limit,
        offset=offset,
    )

    return jsonify({
        "items": [m.to_dict() for m in materials],
        "count": total,
        "limit": limit,
        "offset": offset,
    })


@require_auth
@require_permission("inventaris")
def create_material_route():
    """
    Create a material.

    Request body:
    {
        "nama_bahan": "Kain Katun Combed 30s",  // required
        "kategori": "Bahan Utama",             // required
        "stok": 250,                           // required, >= 0
        "satuan": "meter",                     // required, max 20 chars
        "harga_per_unit": 45000,
        "threshold_min": 50,                   // default 20% of stok
        "supplier_id": 1,
        "explicit_knowledge": "...",
        "tacit_knowledge": "..."
    }
    """
    material = inventory_service.create_material(
        payload=request.get_json(silent=True),
        user_id=g.current_user.id,
    )
    return jsonify(material.to_dict()), 201


@require_auth
@require_permission("inventaris")
def get_material_route(material_id: int):
    material = inventory_service.get_material(material_id)
    return jsonify(material.to_dict())


@require_auth
@require_permission("inventaris")
def update_material_route(material_id: int):
    """Partial update; same field names as create."""
    material = inventory_service.update_material(
        material_id=material_id,
        payload=request.get_json(silent=True),
        user_id=g.current_user.id,
    )
    return jsonify(material.to_dict())


@require_auth
@require_permission("inventaris")
def delete_material_route(material_id: int):
    """Soft delete."""
    material = inventory_service.deactivate_material(
        material_id=material_id,
        user_id=g.current_user.id,
    )
    return jsonify(material.to_dict())


for _bp in (inventory_bp, materials_bp):
    _bp.add_url_rule("", view_func=list_materials_route, methods=["GET"])
    _bp.add_url_rule("", view_func=create_material_route, methods=["POST"])
    _bp.add_url_rule("/<int:material_id>", view_func=get_material_route, methods=["GET"])
    _bp.add_url_rule("/<int:material_id>", view_func=update_material_route, methods=["PUT"])
    _bp.add_url_rule("/<int:material_id>", view_func=delete_material_route, methods=["DELETE"])
