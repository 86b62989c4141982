# Overview: Service-layer operations for production logs and waste incidents.

"""
Production Service

WHY: Lean KM needs two inputs: the daily material usage (with its waste
share) and the individual waste incidents with their cost.

RULES:
- waste_percentage = waste_quantity / quantity_used x 100 (0 when nothing used)
- Recording a log refreshes the material's avg_waste_percentage cache over
  the trailing WASTE_AVERAGE_DAYS
- cost_impact = quantity x the material's unit price at recording time
"""

from ..extensions import db
from ..models import Material, ProductionLog, ProductionWaste
from ..models.production import WASTE_CATEGORIES, WASTE_STATUSES
from ..validation import FieldRule, NotFoundError, PayloadPolicy, ValidationError, validate_payload
from . import metrics_service
from ..time_utils import days_ago, today


WASTE_AVERAGE_DAYS = 90


LOG_POLICY = PayloadPolicy(fields=(
    FieldRule("production_date", kind="date"),
    FieldRule("shift", max_length=16),
    FieldRule("material_id", kind="integer", required=True),
    FieldRule("quantity_used", kind="number", required=True, min_value=0),
    FieldRule("product_type", required=True, max_length=64),
    FieldRule("quantity_produced", kind="integer", min_value=0),
    FieldRule("waste_quantity", kind="number", min_value=0),
    FieldRule("waste_reason", kind="text"),
    FieldRule("notes", kind="text"),
    FieldRule("tacit_insight", kind="text"),
))

WASTE_POLICY = PayloadPolicy(fields=(
    FieldRule("material_id", kind="integer", required=True),
    FieldRule("production_log_id", kind="integer"),
    FieldRule("waste_date", kind="date"),
    FieldRule("quantity", kind="number", required=True, min_value=0),
    FieldRule("unit", max_length=20),
    FieldRule("waste_category", required=True, choices=WASTE_CATEGORIES),
    FieldRule("waste_reason", kind="text", required=True),
    FieldRule("preventive_action", kind="text"),
    FieldRule("is_preventable", kind="boolean", nullable=False),
    FieldRule("lesson_learned", kind="text"),
    FieldRule("status", choices=WASTE_STATUSES, nullable=False),
))


class ProductionLogNotFoundError(NotFoundError):
    pass


def _active_material(material_id: int) -> Material:
    material = db.session.get(Material, material_id)
    if not material or not material.is_active:
        raise ValidationError({"material_id": ["Material not found"]})
    return material


def _refresh_material_waste_average(material: Material) -> None:
    cutoff = days_ago(WASTE_AVERAGE_DAYS).date()
    percentages = [
        row.waste_percentage
        for row in db.session.query(ProductionLog.waste_percentage).filter(
            ProductionLog.material_id == material.id,
            ProductionLog.production_date >= cutoff,
        )
    ]
    material.avg_waste_percentage = round(metrics_service.mean(percentages), 2)


def list_logs(
    *,
    material_id: int | None = None,
    date_from=None,
    date_to=None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[ProductionLog], int]:
    query = db.session.query(ProductionLog)
    if material_id:
        query = query.filter(ProductionLog.material_id == material_id)
    if date_from:
        query = query.filter(ProductionLog.production_date >= date_from)
    if date_to:
        query = query.filter(ProductionLog.production_date <= date_to)

    total = query.count()
    logs = query.order_by(
        ProductionLog.production_date.desc(), ProductionLog.id.desc()
    ).offset(offset).limit(limit).all()
    return logs, total


def create_log(*, payload: dict, worker_id: int) -> ProductionLog:
    data = validate_payload(payload=payload, policy=LOG_POLICY, partial=False)
    material = _active_material(data["material_id"])

    waste_quantity = data.get("waste_quantity") or 0
    if waste_quantity > data["quantity_used"]:
        raise ValidationError({"waste_quantity": ["waste_quantity cannot exceed quantity_used"]})

    data["waste_quantity"] = waste_quantity
    data["quantity_produced"] = data.get("quantity_produced") or 0
    data["production_date"] = data.get("production_date") or today()

    log = ProductionLog(
        worker_id=worker_id,
        waste_percentage=metrics_service.waste_percentage(waste_quantity, data["quantity_used"]),
        **data,
    )
    db.session.add(log)
    db.session.flush()

    _refresh_material_waste_average(material)
    db.session.commit()
    return log


def list_wastes(
    *,
    material_id: int | None = None,
    waste_category: str | None = None,
    preventable: bool | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[ProductionWaste], int]:
    query = db.session.query(ProductionWaste)
    if material_id:
        query = query.filter(ProductionWaste.material_id == material_id)
    if waste_category:
        query = query.filter(ProductionWaste.waste_category == waste_category)
    if preventable is not None:
        query = query.filter(ProductionWaste.is_preventable.is_(preventable))

    total = query.count()
    wastes = query.order_by(
        ProductionWaste.waste_date.desc(), ProductionWaste.id.desc()
    ).offset(offset).limit(limit).all()
    return wastes, total


def create_waste(*, payload: dict, recorded_by_user_id: int) -> ProductionWaste:
    data = validate_payload(payload=payload, policy=WASTE_POLICY, partial=False)
    material = _active_material(data["material_id"])

    log_id = data.get("production_log_id")
    if log_id is not None and not db.session.get(ProductionLog, log_id):
        raise ValidationError({"production_log_id": ["Production log not found"]})

    data["waste_date"] = data.get("waste_date") or today()
    data["unit"] = data.get("unit") or material.unit

    waste = ProductionWaste(
        recorded_by_user_id=recorded_by_user_id,
        cost_impact=round(data["quantity"] * (material.price_per_unit or 0), 2),
        **data,
    )
    db.session.add(waste)
    db.session.commit()
    return waste
