# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

"""
Inventory Service

WHY: Materials (bahan baku) are the core asset of the convection. Each
row stores the stock level plus two kinds of knowledge about the
material: explicit (SOP text) and tacit (what the sewing staff learned).

DESIGN:
- Payload keys are the dashboard's field names (nama_bahan, stok, ...);
  MATERIAL_POLICY maps them onto model attributes.
- Stock status (Habis/Rendah/Cukup/Optimal) is never stored; listing can
  still filter on it through the equivalent SQL predicates.
- Delete is a soft delete (is_active = False).
"""

from ..extensions import db
from ..models import Material, Supplier
from ..models.inventory import MATERIAL_CATEGORIES
from ..validation import FieldRule, NotFoundError, PayloadPolicy, ValidationError, validate_payload
from ..time_utils import utcnow


DEFAULT_THRESHOLD_RATIO = 0.2   # 20% of the opening stock
REORDER_THRESHOLD_FACTOR = 1.5
DEFAULT_REORDER_RATIO = 0.3

STOCK_STATUSES = ("Habis", "Rendah", "Cukup", "Optimal")


MATERIAL_POLICY = PayloadPolicy(fields=(
    FieldRule("nama_bahan", attr="name", required=True, max_length=255),
    FieldRule("kategori", attr="category", required=True, choices=MATERIAL_CATEGORIES),
    FieldRule("stok", kind="number", attr="stock_quantity", required=True, min_value=0),
    FieldRule("satuan", attr="unit", required=True, max_length=20),
    FieldRule("harga_per_unit", kind="number", attr="price_per_unit", min_value=0),
    FieldRule("threshold_min", kind="number", min_value=0),
    FieldRule("reorder_point", kind="number", min_value=0),
    FieldRule("supplier_id", kind="integer"),
    FieldRule("explicit_knowledge", kind="text"),
    FieldRule("tacit_knowledge", kind="text"),
))


class MaterialNotFoundError(NotFoundError):
    """Raised when a material is not found (or has been deleted)."""
    pass


def _status_predicate(status: str):
    stock = Material.stock_quantity
    threshold = Material.threshold_min
    if status == "Habis":
        return stock <= 0
    if status == "Rendah":
        return db.and_(stock > 0, stock <= threshold)
    if status == "Cukup":
        return db.and_(stock > 0, stock > threshold, stock <= threshold * 2)
    return db.and_(stock > 0, stock > threshold * 2)


def _check_supplier(supplier_id: int | None) -> None:
    if supplier_id is None:
        return
    supplier = db.session.get(Supplier, supplier_id)
    if not supplier or not supplier.is_active:
        raise ValidationError({"supplier_id": ["Supplier not found"]})


def get_material(material_id: int, include_inactive: bool = False) -> Material:
    material = db.session.get(Material, material_id)
    if not material or (not material.is_active and not include_inactive):
        raise MaterialNotFoundError(f"Material {material_id} not found")
    return material


def list_materials(
    *,
    search: str | None = None,
    category: str | None = None,
    status: str | None = None,
    low_stock_only: bool = False,
    include_inactive: bool = False,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[Material], int]:
    """
    List materials, newest first.

    Returns:
        Tuple of (materials list, total count)
    """
    query = db.session.query(Material)

    if not include_inactive:
        query = query.filter(Material.is_active.is_(True))

    if search:
        term = f"%{search.strip()}%"
        query = query.filter(db.or_(
            Material.name.ilike(term),
            Material.category.ilike(term),
        ))

    if category:
        query = query.filter(Material.category == category)

    if status:
        if status not in STOCK_STATUSES:
            raise ValidationError({"status": [f"status must be one of: {', '.join(STOCK_STATUSES)}"]})
        query = query.filter(_status_predicate(status))

    if low_stock_only:
        query = query.filter(Material.stock_quantity <= Material.threshold_min)

    total = query.count()

    materials = query.order_by(
        Material.created_at.desc(), Material.id.desc()
    ).offset(offset).limit(limit).all()

    return materials, total


def create_material(*, payload: dict, user_id: int | None = None) -> Material:
    """
    Store a new material with its explicit and tacit knowledge.

    Defaults when not supplied:
    - threshold_min = 20% of the opening stock
    - reorder_point = 1.5 x threshold_min, or 30% of stock without a threshold
    """
    data = validate_payload(payload=payload, policy=MATERIAL_POLICY, partial=False)
    _check_supplier(data.get("supplier_id"))

    stock = data["stock_quantity"]
    threshold = data.get("threshold_min")

    if data.get("reorder_point") is None:
        if threshold:
            data["reorder_point"] = threshold * REORDER_THRESHOLD_FACTOR
        else:
            data["reorder_point"] = stock * DEFAULT_REORDER_RATIO

    if threshold is None:
        data["threshold_min"] = stock * DEFAULT_THRESHOLD_RATIO

    material = Material(
        **data,
        is_active=True,
        last_updated_by_user_id=user_id,
    )
    if stock > 0:
        material.last_restocked_at = utcnow()

    db.session.add(material)
    db.session.commit()
    return material


def update_material(*, material_id: int, payload: dict, user_id: int | None = None) -> Material:
    """
    Partial update. A stock increase stamps last_restocked_at.

    Raises:
        MaterialNotFoundError: unknown or deleted material
        ValidationError: bad field values
    """
    material = get_material(material_id)
    data = validate_payload(payload=payload, policy=MATERIAL_POLICY, partial=True)

    if "supplier_id" in data:
        _check_supplier(data["supplier_id"])

    # threshold_min is NOT NULL; clearing it falls back to zero
    if "threshold_min" in data and data["threshold_min"] is None:
        data["threshold_min"] = 0

    previous_stock = material.stock_quantity or 0
    for attr, value in data.items():
        setattr(material, attr, value)

    if (material.stock_quantity or 0) > previous_stock:
        material.last_restocked_at = utcnow()

    material.last_updated_by_user_id = user_id
    db.session.commit()
    return material


def deactivate_material(*, material_id: int, user_id: int | None = None) -> Material:
    """Soft delete: the row stays for history, lists and metrics skip it."""
    material = get_material(material_id)
    material.is_active = False
    material.last_updated_by_user_id = user_id
    db.session.commit()
    return material


def low_stock_count() -> int:
    return db.session.query(Material).filter(
        Material.is_active.is_(True),
        Material.stock_quantity <= Material.threshold_min,
    ).count()
