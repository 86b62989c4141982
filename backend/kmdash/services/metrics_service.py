# Overview: Pure scoring formulas for the strategic dashboard; no database access.

"""
Metrics Service

WHY: Every dashboard number is a deterministic fold over a query result.
Keeping the arithmetic here, free of SQLAlchemy, lets the formulas be
tested with plain values and reused by both the strategic overview and
the model accessors (stock status, overall supplier score).

Inputs are small frozen dataclasses ("facts") built by strategic_service
from the current request's queries. Nothing here is cached or persisted.

RULES:
- Any ratio over an empty set is 0, never a ZeroDivisionError
- Percent-scale components are clamped to [0, 100]
- Raw (unrounded) values feed the composite scores; rounding happens
  only when building the response dicts
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence


STRATEGIC_PARTNER_THRESHOLD = 8.5

# Knowledge health targets
LESSONS_PER_MONTH_TARGET = 8            # two lessons a week
EXTERNALIZATIONS_PER_QUARTER_TARGET = 15  # five a month over 90 days

# Vendor reliability weights
ON_TIME_WEIGHT = 0.4
QUALITY_WEIGHT = 0.3
DELIVERY_WEIGHT = 0.3

TREND_SCORE_MAX = 20.0
MATERIAL_EFFICIENCY_TARGET = 90

QUALITY_LEVEL_SCORES = {
    "Excellent": 10,
    "Good": 8,
    "Fair": 6,
    "Poor": 4,
}


# =============================================================================
# PRIMITIVES
# =============================================================================

def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


def safe_div(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def ratio_percent(part: float, whole: float) -> float:
    """part / whole * 100, or 0 for an empty whole."""
    return safe_div(part, whole) * 100


def mean(values: Iterable[float]) -> float:
    values = [v for v in values if v is not None]
    return safe_div(sum(values), len(values))


def format_rupiah(amount: float) -> str:
    """Rp with '.' thousands separators and no decimals: Rp 1.234.567"""
    return "Rp " + f"{amount or 0:,.0f}".replace(",", ".")


# =============================================================================
# ROW-LEVEL DERIVED FIELDS
# =============================================================================

def stock_status(stock_quantity: float | None, threshold_min: float | None) -> str:
    """
    Stock label from quantity vs minimum threshold.

    stock <= 0              -> Habis
    0 < stock <= t          -> Rendah
    t < stock <= 2t         -> Cukup
    stock > 2t              -> Optimal
    """
    stock = stock_quantity or 0
    threshold = threshold_min or 0
    if stock <= 0:
        return "Habis"
    if stock <= threshold:
        return "Rendah"
    if stock <= threshold * 2:
        return "Cukup"
    return "Optimal"


def supplier_overall_score(quality: float, speed: float, reliability: float) -> float:
    return ((quality or 0) + (speed or 0) + (reliability or 0)) / 3


def is_strategic_partner(overall_score: float) -> bool:
    return overall_score >= STRATEGIC_PARTNER_THRESHOLD


def delivery_quality_score(
    color_consistency: str | None,
    material_quality: str | None,
    defect_rate: float | None,
) -> float:
    color = QUALITY_LEVEL_SCORES.get(color_consistency, 0)
    material = QUALITY_LEVEL_SCORES.get(material_quality, 0)
    defect = 10 - (defect_rate or 0)
    return round((color + material + defect) / 3, 1)


def delivery_timeliness_score(on_time: bool | None, delay_days: int | None) -> float:
    """10 when on time; otherwise lose 0.5 per day late, at most 5 points."""
    if on_time:
        return 10.0
    penalty = min((delay_days or 0) * 0.5, 5)
    return max(10 - penalty, 0.0)


def waste_percentage(waste_quantity: float | None, quantity_used: float | None) -> float:
    return round(ratio_percent(waste_quantity or 0, quantity_used or 0), 2)


# =============================================================================
# GRADES
# =============================================================================

def reliability_grade(score: float) -> str:
    if score >= 9.0:
        return "A+ - Excellent"
    if score >= 8.5:
        return "A - Very Good"
    if score >= 8.0:
        return "B+ - Good"
    if score >= 7.0:
        return "B - Acceptable"
    return "C - Needs Improvement"


def health_grade(score: float) -> str:
    if score >= 90:
        return "A - Excellent"
    if score >= 80:
        return "B - Good"
    if score >= 70:
        return "C - Fair"
    if score >= 60:
        return "D - Needs Improvement"
    return "F - Critical"


def lean_grade(score: float) -> str:
    if score >= 90:
        return "A - World Class"
    if score >= 85:
        return "B - Competitive"
    if score >= 80:
        return "C - Average"
    return "D - Needs Improvement"


# =============================================================================
# 1. STOCK VALUE
# =============================================================================

@dataclass(frozen=True)
class MaterialFacts:
    name: str
    category: str
    stock_quantity: float
    price_per_unit: float | None
    threshold_min: float
    unit: str = ""


def stock_value_summary(materials: Sequence[MaterialFacts], critical_limit: int = 5) -> dict:
    """Total stock value over active materials, by category, with low-stock alerts."""
    total = 0.0
    by_category: dict[str, dict] = {}
    low_stock: list[MaterialFacts] = []

    for m in materials:
        value = (m.stock_quantity or 0) * (m.price_per_unit or 0)
        total += value

        bucket = by_category.setdefault(m.category, {"category": m.category, "value": 0.0, "quantity": 0.0})
        bucket["value"] += value
        bucket["quantity"] += m.stock_quantity or 0

        if (m.stock_quantity or 0) <= (m.threshold_min or 0):
            low_stock.append(m)

    return {
        "total_value": {
            "amount": round(total, 2),
            "formatted": format_rupiah(total),
        },
        "by_category": [
            {
                "category": bucket["category"],
                "value": round(bucket["value"], 2),
                "quantity": round(bucket["quantity"], 2),
            }
            for bucket in sorted(by_category.values(), key=lambda b: b["category"])
        ],
        "alerts": {
            "low_stock_count": len(low_stock),
            "critical_items": [
                {
                    "name": m.name,
                    "stock_quantity": m.stock_quantity,
                    "unit": m.unit,
                    "threshold_min": m.threshold_min,
                    "status": stock_status(m.stock_quantity, m.threshold_min),
                }
                for m in low_stock[:critical_limit]
            ],
        },
    }


# =============================================================================
# 2. VENDOR RELIABILITY INDEX (KBV)
# =============================================================================

@dataclass(frozen=True)
class DeliveryFacts:
    on_time: bool
    quality_score: float
    delivery_score: float


@dataclass(frozen=True)
class SupplierFacts:
    supplier_id: int
    name: str
    is_recommended: bool = False
    kbv_insight: str | None = None
    deliveries: tuple[DeliveryFacts, ...] = field(default_factory=tuple)


def supplier_reliability(deliveries: Sequence[DeliveryFacts]) -> tuple[float, float]:
    """
    Returns (score, on_time_rate) for one supplier's delivered orders.

    score = on_time_rate * 10 * 0.4 + avg_quality * 0.3 + avg_delivery * 0.3
    """
    if not deliveries:
        return 0.0, 0.0
    on_time_rate = safe_div(sum(1 for d in deliveries if d.on_time), len(deliveries))
    avg_quality = mean(d.quality_score for d in deliveries)
    avg_delivery = mean(d.delivery_score for d in deliveries)
    score = (
        on_time_rate * 10 * ON_TIME_WEIGHT
        + avg_quality * QUALITY_WEIGHT
        + avg_delivery * DELIVERY_WEIGHT
    )
    return score, on_time_rate


def vendor_recommendations(vendor_scores: Sequence[dict]) -> list[dict]:
    recommendations = []
    for vendor in vendor_scores:
        if vendor["score"] < 7.0:
            recommendations.append({
                "type": "warning",
                "supplier": vendor["name"],
                "message": (
                    f"Reliability score rendah ({vendor['score']}/10). "
                    "Pertimbangkan evaluasi ulang atau cari alternatif."
                ),
            })
        if vendor["on_time_percentage"] < 80:
            recommendations.append({
                "type": "action",
                "supplier": vendor["name"],
                "message": (
                    f"On-time delivery hanya {vendor['on_time_percentage']}%. "
                    "Lakukan renegosiasi lead time."
                ),
            })
    return recommendations


def vendor_reliability_index(suppliers: Sequence[SupplierFacts]) -> dict:
    """Mean per-supplier reliability score across active suppliers."""
    scores = []
    vendor_scores = []
    for s in suppliers:
        score, on_time_rate = supplier_reliability(s.deliveries)
        scores.append(score)
        vendor_scores.append({
            "supplier_id": s.supplier_id,
            "name": s.name,
            "score": round(score, 1),
            "deliveries_count": len(s.deliveries),
            "on_time_percentage": round(on_time_rate * 100, 1),
            "kbv_insight": s.kbv_insight,
        })

    overall = mean(scores)
    return {
        "overall_index": round(overall, 1),
        "grade": reliability_grade(round(overall, 1)),
        "total_suppliers": len(suppliers),
        "recommended_suppliers": sum(1 for s in suppliers if s.is_recommended),
        "vendor_scores": vendor_scores,
        "recommendations": vendor_recommendations(vendor_scores),
    }


# =============================================================================
# 3. KNOWLEDGE HEALTH SCORE (SECI)
# =============================================================================

@dataclass(frozen=True)
class KnowledgeFacts:
    total_materials: int = 0
    documented_materials: int = 0
    recent_lessons: int = 0
    total_sops: int = 0
    fresh_sops: int = 0
    recent_externalizations: int = 0
    seci_distribution: dict = field(default_factory=dict)


def knowledge_components(facts: KnowledgeFacts) -> dict[str, float]:
    """The four 0-100 components of the knowledge health score."""
    return {
        "documentation_coverage": clamp(
            ratio_percent(facts.documented_materials, facts.total_materials), 0, 100
        ),
        "seci_activity": clamp(
            ratio_percent(facts.recent_lessons, LESSONS_PER_MONTH_TARGET), 0, 100
        ),
        "sop_freshness": clamp(
            ratio_percent(facts.fresh_sops, facts.total_sops), 0, 100
        ),
        "tacit_conversion_rate": clamp(
            ratio_percent(facts.recent_externalizations, EXTERNALIZATIONS_PER_QUARTER_TARGET), 0, 100
        ),
    }


def knowledge_recommendations(components: dict[str, float]) -> list[dict]:
    recommendations = []
    if components["documentation_coverage"] < 70:
        recommendations.append({
            "priority": "high",
            "area": "Documentation",
            "message": (
                "Dokumentasi tacit knowledge kurang dari 70%. "
                "Target: setiap material harus punya explicit + tacit knowledge."
            ),
            "action": "Lakukan workshop dengan penjahit senior untuk capture knowledge.",
        })
    if components["seci_activity"] < 50:
        recommendations.append({
            "priority": "high",
            "area": "SECI Activity",
            "message": "Lessons learned creation rate rendah. Target: min 2 lessons per minggu.",
            "action": "Berikan insentif untuk staf yang aktif berbagi knowledge.",
        })
    if components["sop_freshness"] < 60:
        recommendations.append({
            "priority": "medium",
            "area": "SOP Updates",
            "message": "Banyak SOP yang belum diperbarui >3 bulan.",
            "action": "Jadwalkan review rutin SOP setiap kuartal.",
        })
    return recommendations


def knowledge_health_score(facts: KnowledgeFacts) -> dict:
    """0.25 x each of the four clamped components."""
    components = knowledge_components(facts)
    overall = sum(value * 0.25 for value in components.values())
    return {
        "overall_score": round(overall, 1),
        "grade": health_grade(overall),
        "components": {
            "documentation_coverage": {
                "score": round(components["documentation_coverage"], 1),
                "materials_documented": facts.documented_materials,
                "total_materials": facts.total_materials,
            },
            "seci_activity": {
                "score": round(components["seci_activity"], 1),
                "recent_lessons": facts.recent_lessons,
                "target": LESSONS_PER_MONTH_TARGET,
                "distribution": dict(facts.seci_distribution),
            },
            "sop_freshness": {
                "score": round(components["sop_freshness"], 1),
                "updated_sops": facts.fresh_sops,
                "total_sops": facts.total_sops,
            },
            "tacit_conversion_rate": {
                "score": round(components["tacit_conversion_rate"], 1),
                "recent_externalizations": facts.recent_externalizations,
                "target": EXTERNALIZATIONS_PER_QUARTER_TARGET,
            },
        },
        "recommendations": knowledge_recommendations(components),
    }


# =============================================================================
# 4. LEAN EFFICIENCY SCORE (Lean KM)
# =============================================================================

@dataclass(frozen=True)
class LeanFacts:
    current_waste_percentages: tuple[float, ...] = ()
    previous_waste_percentages: tuple[float, ...] = ()
    waste_incidents: int = 0
    preventable_incidents: int = 0
    total_waste_cost: float = 0.0
    production_value: float = 0.0
    waste_by_category: tuple[dict, ...] = ()


def waste_trend_percent(current_avg: float, previous_avg: float) -> float:
    """Relative change of average waste vs the previous window; 0 without history."""
    if not previous_avg or previous_avg <= 0:
        return 0.0
    return (current_avg - previous_avg) / previous_avg * 100


def trend_score(trend_percent: float) -> float:
    """Full 20 points while waste is falling, minus one point per % of growth."""
    if trend_percent < 0:
        return TREND_SCORE_MAX
    return clamp(TREND_SCORE_MAX - abs(trend_percent), 0, TREND_SCORE_MAX)


def efficiency_status(material_efficiency: float) -> str:
    if material_efficiency >= MATERIAL_EFFICIENCY_TARGET:
        return "excellent"
    if material_efficiency >= 85:
        return "good"
    return "needs_improvement"


def lean_recommendations(preventable_pct: float, avg_waste: float, waste_by_category: Sequence[dict]) -> list[dict]:
    recommendations = []
    if preventable_pct > 60:
        recommendations.append({
            "priority": "critical",
            "area": "Preventable Waste",
            "message": f"{round(preventable_pct, 1)}% waste bisa dicegah. Potensi penghematan besar!",
            "action": "Focus pada training dan SOP untuk mengurangi human error.",
        })
    if avg_waste > 15:
        recommendations.append({
            "priority": "high",
            "area": "Material Efficiency",
            "message": f"Waste {round(avg_waste, 1)}% melebihi threshold 15%.",
            "action": "Analisis pola potong dan optimasi layout cutting.",
        })
    if waste_by_category:
        top = max(waste_by_category, key=lambda row: row.get("total_cost") or 0)
        recommendations.append({
            "priority": "medium",
            "area": "Waste Category",
            "message": f"Kategori waste terbesar: {top['waste_category']}",
            "action": "Focus improvement di area ini terlebih dahulu.",
        })
    return recommendations


def lean_efficiency_score(facts: LeanFacts) -> dict:
    """
    overall = 0.5 x (100 - avg_waste%) + 0.3 x (100 - preventable%) + trend_score

    trend_score lives on a 0-20 scale, which is its 20% share of the total.
    """
    avg_waste = mean(facts.current_waste_percentages)
    previous_avg = mean(facts.previous_waste_percentages)
    material_efficiency = clamp(100 - avg_waste, 0, 100)

    preventable_pct = clamp(ratio_percent(facts.preventable_incidents, facts.waste_incidents), 0, 100)
    cost_pct = ratio_percent(facts.total_waste_cost, facts.production_value)

    trend = waste_trend_percent(avg_waste, previous_avg)
    t_score = trend_score(trend)

    overall = material_efficiency * 0.5 + (100 - preventable_pct) * 0.3 + t_score

    return {
        "overall_score": round(overall, 1),
        "grade": lean_grade(overall),
        "material_efficiency": {
            "percentage": round(material_efficiency, 1),
            "waste_percentage": round(avg_waste, 1),
            "target": MATERIAL_EFFICIENCY_TARGET,
            "status": efficiency_status(material_efficiency),
        },
        "waste_analysis": {
            "total_waste_incidents": facts.waste_incidents,
            "preventable_count": facts.preventable_incidents,
            "preventable_percentage": round(preventable_pct, 1),
            "total_cost_impact": round(facts.total_waste_cost or 0, 2),
            "cost_percentage": round(cost_pct, 2),
            "by_category": list(facts.waste_by_category),
        },
        "trend": {
            "current_waste": round(avg_waste, 1),
            "previous_waste": round(previous_avg, 1),
            "change_percentage": round(trend, 1),
            "trend_score": round(t_score, 1),
            "direction": "improving" if trend < 0 else "worsening",
        },
        "recommendations": lean_recommendations(preventable_pct, avg_waste, facts.waste_by_category),
    }
