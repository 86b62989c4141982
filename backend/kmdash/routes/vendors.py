# Overview: Flask API routes for vendor operations; parses input and returns JSON responses.

"""
Vendor Routes (Knowledge-Based View)

SECURITY: All routes require authentication and the `vendor` permission
(admin and manager).

Vendors are listed strategic partners first. Deliveries hang off a vendor
and move Ordered -> Delivered (receive) -> Inspected (inspect).
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..services import vendor_service
from ..validation import bool_arg, page_params


vendors_bp = Blueprint("vendors", __name__, url_prefix="/api/vendors")


@vendors_bp.get("")
@require_auth
@require_permission("vendor")
def list_vendors_route():
    """
    List vendors.

    Query parameters:
    - search: name, material category or contact person contains
    - kategori: material category contains
    - include_inactive: Include deleted vendors (default: false)
    - limit: Maximum results (default: 100)
    - offset: Pagination offset (default: 0)

    Returns:
        {items: Vendor[], count: int, strategic_partners: int, limit: int, offset: int}
    """
    limit, offset = page_params(request.args)

    vendors, total = vendor_service.list_vendors(
        search=request.args.get("search"),
        category=request.args.get("kategori"),
        include_inactive=bool_arg(request.args, "include_inactive"),
        limit=limit,
        offset=offset,
    )

    return jsonify({
        "items": [v.to_dict() for v in vendors],
        "count": total,
        "strategic_partners": sum(1 for v in vendors if v.is_strategic_partner),
        "limit": limit,
        "offset": offset,
    })


@vendors_bp.get("/strategic-partners")
@require_auth
@require_permission("vendor")
def list_strategic_partners_route():
    """Active vendors with overall score >= 8.5."""
    vendors = vendor_service.list_strategic_partners()
    return jsonify({
        "items": [v.to_dict() for v in vendors],
        "count": len(vendors),
    })


@vendors_bp.post("")
@require_auth
@require_permission("vendor")
def create_vendor_route():
    """
    Create a vendor (knowledge storage for an external partner).

    Request body:
    {
        "nama_vendor": "PT Tekstil Nusantara",  // required
        "kategori_bahan": "Kain Katun",         // required
        "rating_kualitas": 9,                   // required, 1-10
        "rating_kecepatan": 8.5,                // required, 1-10
        "indeks_keandalan": 9,                  // required, 1-10
        "kbv_insight": "...",                   // required, min 10 chars
        "contact_person": "...",
        "phone": "...",
        "email": "...",
        "address": "..."
    }

    Returns:
        Created Vendor object
    """
    vendor = vendor_service.create_vendor(
        payload=request.get_json(silent=True),
        user_id=g.current_user.id,
    )
    return jsonify(vendor.to_dict()), 201


@vendors_bp.get("/<int:vendor_id>")
@require_auth
@require_permission("vendor")
def get_vendor_route(vendor_id: int):
    vendor = vendor_service.get_vendor(vendor_id)
    return jsonify(vendor.to_dict())


@vendors_bp.put("/<int:vendor_id>")
@require_auth
@require_permission("vendor")
def update_vendor_route(vendor_id: int):
    """Partial update; the strategic partner flag follows the new ratings."""
    vendor = vendor_service.update_vendor(
        vendor_id=vendor_id,
        payload=request.get_json(silent=True),
        user_id=g.current_user.id,
    )
    return jsonify(vendor.to_dict())


@vendors_bp.delete("/<int:vendor_id>")
@require_auth
@require_permission("vendor")
def deactivate_vendor_route(vendor_id: int):
    """
    Deactivate a vendor (soft delete).

    Returns:
        Deactivated Vendor object
    """
    vendor = vendor_service.deactivate_vendor(
        vendor_id=vendor_id,
        user_id=g.current_user.id,
    )
    return jsonify(vendor.to_dict())


@vendors_bp.get("/<int:vendor_id>/deliveries")
@require_auth
@require_permission("vendor")
def list_deliveries_route(vendor_id: int):
    deliveries = vendor_service.list_deliveries(
        vendor_id=vendor_id,
        status=request.args.get("status"),
    )
    return jsonify({
        "items": [d.to_dict() for d in deliveries],
        "count": len(deliveries),
    })


@vendors_bp.post("/<int:vendor_id>/deliveries")
@require_auth
@require_permission("vendor")
def create_delivery_route(vendor_id: int):
    """
    Register a purchase order.

    Request body:
    {
        "po_number": "PO-2024-001",         // required, unique
        "order_date": "2024-05-01",         // required
        "expected_delivery_date": "...",    // required, >= order_date
        "quantity_ordered": 500,            // required
        "material_id": 1,
        "unit": "meter",
        "price_per_unit": 45000,
        "delivery_notes": "..."
    }
    """
    delivery = vendor_service.create_delivery(
        vendor_id=vendor_id,
        payload=request.get_json(silent=True),
    )
    return jsonify(delivery.to_dict()), 201


@vendors_bp.post("/deliveries/<int:delivery_id>/receive")
@require_auth
@require_permission("vendor")
def receive_delivery_route(delivery_id: int):
    """
    Record arrival: {"quantity_delivered": 480, "delivery_date": "2024-05-06"}

    Updates the vendor's on-time statistics and reliability rating.
    """
    delivery = vendor_service.receive_delivery(
        delivery_id=delivery_id,
        payload=request.get_json(silent=True),
        user_id=g.current_user.id,
    )
    return jsonify(delivery.to_dict())


@vendors_bp.post("/deliveries/<int:delivery_id>/inspect")
@require_auth
@require_permission("vendor")
def inspect_delivery_route(delivery_id: int):
    """
    Record quality inspection:
    {"color_consistency": "Excellent", "material_quality": "Good", "defect_rate": 1.5}
    """
    delivery = vendor_service.inspect_delivery(
        delivery_id=delivery_id,
        payload=request.get_json(silent=True),
        user_id=g.current_user.id,
    )
    return jsonify(delivery.to_dict())
