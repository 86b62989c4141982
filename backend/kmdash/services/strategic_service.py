# Overview: Query layer for the strategic dashboard; turns rows into metrics facts.

"""
Strategic Dashboard Service

WHY: metrics_service holds the formulas; this module owns the windows and
the queries. Each call reads the current rows once and hands plain facts
to the pure functions. Nothing is written: the overview is recomputed on
every request.

WINDOWS:
- Vendor reliability: delivered orders placed in the last 182 days
- SECI activity: published lessons created in the last 30 days
- SOP freshness: published SOPs updated in the last 90 days
- Tacit conversion: published Eksternalisasi lessons in the last 90 days
- Lean: production logs of the last 30 days vs the 30 days before that;
  waste incidents of the last 30 days
"""

from datetime import timedelta

from ..extensions import db
from ..models import (
    KnowledgeDocument,
    LessonLearned,
    Material,
    ProductionLog,
    ProductionWaste,
    Supplier,
    SupplierDelivery,
)
from ..models.inventory import DELIVERED_STATUSES
from ..models.knowledge import SECI_TYPES
from . import metrics_service
from .metrics_service import DeliveryFacts, KnowledgeFacts, LeanFacts, MaterialFacts, SupplierFacts
from ..time_utils import days_ago, to_iso_date, to_utc_z, today, utcnow


VENDOR_WINDOW_DAYS = 182
ACTIVITY_WINDOW_DAYS = 30
SOP_FRESHNESS_DAYS = 90
EXTERNALIZATION_WINDOW_DAYS = 90
LEAN_WINDOW_DAYS = 30


def _has_text(column):
    return db.and_(column.isnot(None), db.func.trim(column) != "")


# =============================================================================
# FACT BUILDERS
# =============================================================================

def material_facts() -> list[MaterialFacts]:
    materials = db.session.query(Material).filter(
        Material.is_active.is_(True)
    ).order_by(Material.stock_quantity.asc(), Material.id.asc()).all()
    return [
        MaterialFacts(
            name=m.name,
            category=m.category,
            stock_quantity=m.stock_quantity or 0,
            price_per_unit=m.price_per_unit,
            threshold_min=m.threshold_min or 0,
            unit=m.unit,
        )
        for m in materials
    ]


def supplier_facts() -> list[SupplierFacts]:
    cutoff = today() - timedelta(days=VENDOR_WINDOW_DAYS)
    suppliers = db.session.query(Supplier).filter(
        Supplier.is_active.is_(True)
    ).order_by(Supplier.name.asc(), Supplier.id.asc()).all()

    deliveries_by_supplier: dict[int, list[DeliveryFacts]] = {s.id: [] for s in suppliers}
    if suppliers:
        deliveries = db.session.query(SupplierDelivery).filter(
            SupplierDelivery.supplier_id.in_(deliveries_by_supplier.keys()),
            SupplierDelivery.status.in_(DELIVERED_STATUSES),
            SupplierDelivery.order_date >= cutoff,
        ).all()
        for d in deliveries:
            deliveries_by_supplier[d.supplier_id].append(DeliveryFacts(
                on_time=bool(d.on_time_delivery),
                quality_score=d.quality_score,
                delivery_score=d.delivery_score,
            ))

    return [
        SupplierFacts(
            supplier_id=s.id,
            name=s.name,
            is_recommended=bool(s.is_recommended),
            kbv_insight=s.kbv_insight,
            deliveries=tuple(deliveries_by_supplier[s.id]),
        )
        for s in suppliers
    ]


def knowledge_facts() -> KnowledgeFacts:
    active_materials = db.session.query(Material).filter(Material.is_active.is_(True))
    total_materials = active_materials.count()
    documented = active_materials.filter(
        _has_text(Material.explicit_knowledge),
        _has_text(Material.tacit_knowledge),
    ).count()

    published = db.session.query(LessonLearned).filter(LessonLearned.status == "Published")
    recent_lessons = published.filter(
        LessonLearned.created_at >= days_ago(ACTIVITY_WINDOW_DAYS)
    ).count()
    externalizations = published.filter(
        LessonLearned.seci_type == "Eksternalisasi",
        LessonLearned.created_at >= days_ago(EXTERNALIZATION_WINDOW_DAYS),
    ).count()

    distribution = {seci_type: 0 for seci_type in SECI_TYPES}
    rows = db.session.query(
        LessonLearned.seci_type, db.func.count(LessonLearned.id)
    ).filter(
        LessonLearned.status == "Published"
    ).group_by(LessonLearned.seci_type).all()
    for seci_type, count in rows:
        distribution[seci_type] = count

    sops = db.session.query(KnowledgeDocument).filter(
        KnowledgeDocument.doc_type == "SOP",
        KnowledgeDocument.status == "Published",
    )
    total_sops = sops.count()
    fresh_sops = sops.filter(KnowledgeDocument.updated_at >= days_ago(SOP_FRESHNESS_DAYS)).count()

    return KnowledgeFacts(
        total_materials=total_materials,
        documented_materials=documented,
        recent_lessons=recent_lessons,
        total_sops=total_sops,
        fresh_sops=fresh_sops,
        recent_externalizations=externalizations,
        seci_distribution=distribution,
    )


def lean_facts() -> LeanFacts:
    current_start = today() - timedelta(days=LEAN_WINDOW_DAYS)
    previous_start = current_start - timedelta(days=LEAN_WINDOW_DAYS)

    current_logs = db.session.query(ProductionLog).filter(
        ProductionLog.production_date >= current_start
    ).all()
    previous = db.session.query(ProductionLog.waste_percentage).filter(
        ProductionLog.production_date >= previous_start,
        ProductionLog.production_date < current_start,
    ).all()

    production_value = sum(
        (log.quantity_used or 0) * ((log.material.price_per_unit if log.material else 0) or 0)
        for log in current_logs
    )

    wastes = db.session.query(ProductionWaste).filter(ProductionWaste.waste_date >= current_start)
    waste_incidents = wastes.count()
    preventable = wastes.filter(ProductionWaste.is_preventable.is_(True)).count()
    total_cost = wastes.with_entities(
        db.func.coalesce(db.func.sum(ProductionWaste.cost_impact), 0)
    ).scalar()

    by_category = db.session.query(
        ProductionWaste.waste_category,
        db.func.count(ProductionWaste.id),
        db.func.sum(ProductionWaste.quantity),
        db.func.sum(ProductionWaste.cost_impact),
    ).filter(
        ProductionWaste.waste_date >= current_start
    ).group_by(ProductionWaste.waste_category).order_by(ProductionWaste.waste_category).all()

    return LeanFacts(
        current_waste_percentages=tuple(log.waste_percentage or 0 for log in current_logs),
        previous_waste_percentages=tuple(row.waste_percentage or 0 for row in previous),
        waste_incidents=waste_incidents,
        preventable_incidents=preventable,
        total_waste_cost=float(total_cost or 0),
        production_value=float(production_value),
        waste_by_category=tuple(
            {
                "waste_category": category,
                "count": count,
                "total_quantity": round(float(quantity or 0), 2),
                "total_cost": round(float(cost or 0), 2),
            }
            for category, count, quantity, cost in by_category
        ),
    )


# =============================================================================
# METRICS
# =============================================================================

def stock_value() -> dict:
    return metrics_service.stock_value_summary(material_facts())


def vendor_reliability() -> dict:
    return metrics_service.vendor_reliability_index(supplier_facts())


def knowledge_health() -> dict:
    return metrics_service.knowledge_health_score(knowledge_facts())


def lean_efficiency() -> dict:
    return metrics_service.lean_efficiency_score(lean_facts())


def overview() -> dict:
    """All four strategic metrics plus the reporting period."""
    return {
        "total_stock_value": stock_value(),
        "vendor_reliability_index": vendor_reliability(),
        "knowledge_health_score": knowledge_health(),
        "lean_efficiency_score": lean_efficiency(),
        "period": {
            "from": to_iso_date(today() - timedelta(days=LEAN_WINDOW_DAYS)),
            "to": to_iso_date(today()),
        },
        "generated_at": to_utc_z(utcnow()),
    }
