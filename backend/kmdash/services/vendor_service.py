# Overview: Service-layer operations for vendors; encapsulates business logic and database work.

"""
Vendor Service

WHY: Suppliers are external knowledge (Knowledge-Based View). Besides the
contact data, each vendor carries three 1-10 ratings and a written KBV
insight; the strategic partner flag follows from the ratings.

DESIGN:
- overall score = mean of the three ratings; strategic partner >= 8.5
- is_recommended is a cached copy of the partner flag, refreshed on every
  write that touches the ratings
- Deliveries feed the reliability index. Receiving a delivery updates the
  supplier's order counters and reliability rating; inspecting it updates
  the quality rating from the last ten inspections.
- Delete is a soft delete (is_active = False)
"""

from datetime import date

from ..extensions import db
from ..models import Material, Supplier, SupplierDelivery
from ..models.inventory import QUALITY_LEVELS
from ..validation import (
    ConflictError,
    FieldRule,
    NotFoundError,
    PayloadPolicy,
    ValidationError,
    validate_payload,
)
from . import metrics_service
from ..time_utils import today


RECENT_INSPECTIONS = 10

VENDOR_POLICY = PayloadPolicy(fields=(
    FieldRule("nama_vendor", attr="name", required=True, max_length=255),
    FieldRule("kategori_bahan", attr="specialty", required=True, max_length=255),
    FieldRule("rating_kualitas", kind="number", attr="quality_score", required=True, min_value=1, max_value=10),
    FieldRule("rating_kecepatan", kind="number", attr="speed_score", required=True, min_value=1, max_value=10),
    FieldRule("indeks_keandalan", kind="number", attr="reliability_score", required=True, min_value=1, max_value=10),
    FieldRule("kbv_insight", kind="text", required=True, min_length=10),
    FieldRule("contact_person", max_length=255),
    FieldRule("phone", max_length=32),
    FieldRule("email", kind="email", max_length=255),
    FieldRule("address", kind="text"),
))

DELIVERY_POLICY = PayloadPolicy(fields=(
    FieldRule("po_number", required=True, max_length=64),
    FieldRule("material_id", kind="integer"),
    FieldRule("order_date", kind="date", required=True),
    FieldRule("expected_delivery_date", kind="date", required=True),
    FieldRule("quantity_ordered", kind="number", required=True, min_value=0.01),
    FieldRule("unit", max_length=20),
    FieldRule("price_per_unit", kind="number", min_value=0),
    FieldRule("delivery_notes", kind="text"),
))

RECEIVE_POLICY = PayloadPolicy(fields=(
    FieldRule("delivery_date", kind="date"),
    FieldRule("quantity_delivered", kind="number", required=True, min_value=0),
    FieldRule("delivery_notes", kind="text"),
))

INSPECT_POLICY = PayloadPolicy(fields=(
    FieldRule("color_consistency", required=True, choices=QUALITY_LEVELS),
    FieldRule("material_quality", required=True, choices=QUALITY_LEVELS),
    FieldRule("defect_rate", kind="number", min_value=0, max_value=100),
    FieldRule("quality_notes", kind="text"),
))


class VendorNotFoundError(NotFoundError):
    """Raised when a vendor is not found."""
    pass


class DeliveryNotFoundError(NotFoundError):
    pass


def _refresh_recommendation(supplier: Supplier) -> None:
    supplier.is_recommended = supplier.is_strategic_partner


def get_vendor(vendor_id: int, include_inactive: bool = False) -> Supplier:
    supplier = db.session.get(Supplier, vendor_id)
    if not supplier or (not supplier.is_active and not include_inactive):
        raise VendorNotFoundError(f"Vendor {vendor_id} not found")
    return supplier


def list_vendors(
    *,
    search: str | None = None,
    category: str | None = None,
    include_inactive: bool = False,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Supplier], int]:
    """
    List vendors, strategic partners first, then newest.

    Returns:
        Tuple of (vendors list, total count)
    """
    query = db.session.query(Supplier)

    if not include_inactive:
        query = query.filter(Supplier.is_active.is_(True))

    if search:
        term = f"%{search.strip()}%"
        query = query.filter(db.or_(
            Supplier.name.ilike(term),
            Supplier.specialty.ilike(term),
            Supplier.contact_person.ilike(term),
        ))

    if category:
        query = query.filter(Supplier.specialty.ilike(f"%{category.strip()}%"))

    total = query.count()

    vendors = query.order_by(
        Supplier.is_recommended.desc(),
        Supplier.created_at.desc(),
        Supplier.id.desc(),
    ).offset(offset).limit(limit).all()

    return vendors, total


def list_strategic_partners() -> list[Supplier]:
    """Active vendors whose overall score reaches the partner threshold."""
    vendors = db.session.query(Supplier).filter(
        Supplier.is_active.is_(True)
    ).order_by(Supplier.created_at.desc(), Supplier.id.desc()).all()
    return [v for v in vendors if v.is_strategic_partner]


def create_vendor(*, payload: dict, user_id: int | None = None) -> Supplier:
    data = validate_payload(payload=payload, policy=VENDOR_POLICY, partial=False)

    supplier = Supplier(
        **data,
        is_active=True,
        created_by_user_id=user_id,
        updated_by_user_id=user_id,
    )
    _refresh_recommendation(supplier)

    db.session.add(supplier)
    db.session.commit()
    return supplier


def update_vendor(*, vendor_id: int, payload: dict, user_id: int | None = None) -> Supplier:
    """
    Partial update; the partner flag is recomputed from the new ratings.

    Raises:
        VendorNotFoundError: unknown or deleted vendor
        ValidationError: bad field values
    """
    supplier = get_vendor(vendor_id)
    data = validate_payload(payload=payload, policy=VENDOR_POLICY, partial=True)

    for attr, value in data.items():
        setattr(supplier, attr, value)

    _refresh_recommendation(supplier)
    supplier.updated_by_user_id = user_id
    db.session.commit()
    return supplier


def deactivate_vendor(*, vendor_id: int, user_id: int | None = None) -> Supplier:
    supplier = get_vendor(vendor_id)
    supplier.is_active = False
    supplier.updated_by_user_id = user_id
    db.session.commit()
    return supplier


# =============================================================================
# DELIVERIES
# =============================================================================

def get_delivery(delivery_id: int) -> SupplierDelivery:
    delivery = db.session.get(SupplierDelivery, delivery_id)
    if not delivery:
        raise DeliveryNotFoundError(f"Delivery {delivery_id} not found")
    return delivery


def list_deliveries(*, vendor_id: int, status: str | None = None) -> list[SupplierDelivery]:
    get_vendor(vendor_id, include_inactive=True)
    query = db.session.query(SupplierDelivery).filter(SupplierDelivery.supplier_id == vendor_id)
    if status:
        query = query.filter(SupplierDelivery.status == status)
    return query.order_by(SupplierDelivery.order_date.desc(), SupplierDelivery.id.desc()).all()


def create_delivery(*, vendor_id: int, payload: dict) -> SupplierDelivery:
    """
    Register a purchase order (status Ordered).

    Raises:
        ConflictError: po_number already used
    """
    supplier = get_vendor(vendor_id)
    data = validate_payload(payload=payload, policy=DELIVERY_POLICY, partial=False)

    if data["expected_delivery_date"] < data["order_date"]:
        raise ValidationError({"expected_delivery_date": ["expected_delivery_date cannot be before order_date"]})

    material_id = data.get("material_id")
    if material_id is not None:
        material = db.session.get(Material, material_id)
        if not material or not material.is_active:
            raise ValidationError({"material_id": ["Material not found"]})
        if not data.get("unit"):
            data["unit"] = material.unit

    existing = db.session.query(SupplierDelivery).filter_by(po_number=data["po_number"]).first()
    if existing:
        raise ConflictError(f"PO number '{data['po_number']}' already exists")

    delivery = SupplierDelivery(supplier_id=supplier.id, status="Ordered", **data)
    db.session.add(delivery)
    db.session.commit()
    return delivery


def receive_delivery(*, delivery_id: int, payload: dict, user_id: int | None = None) -> SupplierDelivery:
    """
    Record arrival of the goods.

    delay_days = actual - expected (negative when early); on time when <= 0.
    Updates the supplier's order counters, last delivery date, reliability
    rating (on-time % / 10) and partner flag.
    """
    delivery = get_delivery(delivery_id)
    if delivery.status not in ("Ordered", "In_Transit"):
        raise ConflictError(f"Delivery already {delivery.status}")

    data = validate_payload(payload=payload, policy=RECEIVE_POLICY, partial=False)

    actual: date = data.get("delivery_date") or today()
    delivery.actual_delivery_date = actual
    delivery.quantity_delivered = data["quantity_delivered"]
    if data.get("delivery_notes"):
        delivery.delivery_notes = data["delivery_notes"]
    delivery.delay_days = (actual - delivery.expected_delivery_date).days
    delivery.on_time_delivery = delivery.delay_days <= 0
    delivery.status = "Delivered"
    delivery.received_by_user_id = user_id

    supplier = delivery.supplier
    supplier.total_orders = (supplier.total_orders or 0) + 1
    if delivery.on_time_delivery:
        supplier.on_time_deliveries = (supplier.on_time_deliveries or 0) + 1
    supplier.last_delivery_date = actual
    supplier.reliability_score = round(supplier.on_time_percentage / 10, 1)
    _refresh_recommendation(supplier)

    db.session.commit()
    return delivery


def inspect_delivery(*, delivery_id: int, payload: dict, user_id: int | None = None) -> SupplierDelivery:
    """
    Record the quality inspection of a received delivery.

    The supplier's quality rating becomes the mean quality score of its ten
    most recent inspected deliveries.
    """
    delivery = get_delivery(delivery_id)
    if delivery.status != "Delivered":
        raise ConflictError("Only delivered orders can be inspected")

    data = validate_payload(payload=payload, policy=INSPECT_POLICY, partial=False)

    delivery.color_consistency = data["color_consistency"]
    delivery.material_quality = data["material_quality"]
    delivery.defect_rate = data.get("defect_rate") or 0
    delivery.quality_notes = data.get("quality_notes")
    delivery.inspected_by_user_id = user_id
    delivery.status = "Inspected"
    db.session.flush()

    recent = db.session.query(SupplierDelivery).filter(
        SupplierDelivery.supplier_id == delivery.supplier_id,
        SupplierDelivery.status == "Inspected",
    ).order_by(
        SupplierDelivery.actual_delivery_date.desc(), SupplierDelivery.id.desc()
    ).limit(RECENT_INSPECTIONS).all()

    supplier = delivery.supplier
    supplier.quality_score = round(metrics_service.mean(d.quality_score for d in recent), 1)
    _refresh_recommendation(supplier)

    db.session.commit()
    return delivery
