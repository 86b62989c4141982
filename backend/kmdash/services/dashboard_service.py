# Overview: Headline cards, recent knowledge and alerts for the main dashboard.

from datetime import timedelta

from ..extensions import db
from ..models import ProductionLog, Supplier
from . import inventory_service, knowledge_service, metrics_service, strategic_service
from ..time_utils import to_utc_z, today


HIGH_WASTE_PERCENTAGE = 15
HIGH_WASTE_WINDOW_DAYS = 7
RECENT_KNOWLEDGE_LIMIT = 5


def _supplier_average_score() -> float:
    suppliers = db.session.query(Supplier).filter(Supplier.is_active.is_(True)).all()
    return metrics_service.mean(s.overall_score for s in suppliers)


def metrics_cards() -> dict:
    """
    The four cards at the top of the dashboard.

    Material efficiency shows 0 while there are no production logs in the
    window; the strategic lean score treats that case as zero waste instead.
    """
    stock = strategic_service.stock_value()

    lean = strategic_service.lean_facts()
    if lean.current_waste_percentages:
        avg_waste = metrics_service.mean(lean.current_waste_percentages)
        efficiency = 100 - avg_waste
    else:
        avg_waste = 0.0
        efficiency = 0.0

    reliability = _supplier_average_score()
    health = strategic_service.knowledge_health()

    last_lesson = knowledge_service.recent_published_lessons(limit=1)
    last_update = to_utc_z(last_lesson[0].created_at) if last_lesson else None

    return {
        "total_stock_value": {
            "value": stock["total_value"]["formatted"],
            "raw_value": stock["total_value"]["amount"],
            "positive": stock["total_value"]["amount"] > 0,
            "description": "Nilai total bahan baku & pendukung",
        },
        "material_efficiency": {
            "value": f"{round(efficiency)}%",
            "raw_value": round(efficiency, 1),
            "change": f"Waste {round(avg_waste)}% (Target <10%)",
            "positive": avg_waste < 10,
            "description": "Persentase utilisasi bahan vs sisa potongan",
        },
        "supplier_reliability": {
            "value": f"{reliability:.1f}/10",
            "raw_value": round(reliability, 1),
            "change": "Ketepatan waktu & kualitas warna",
            "positive": reliability >= 8.0,
            "description": "Berdasarkan on-time delivery dan konsistensi",
        },
        "knowledge_health": {
            "value": f"{round(health['overall_score'])}%",
            "raw_value": health["overall_score"],
            "last_update": last_update,
            "positive": health["overall_score"] >= 70,
            "description": "Tingkat kelengkapan dokumentasi tacit to explicit",
        },
    }


def recent_knowledge(limit: int = RECENT_KNOWLEDGE_LIMIT) -> list[dict]:
    return [
        {
            "id": lesson.id,
            "title": lesson.title,
            "type": lesson.seci_type,
            "author": lesson.author.name if lesson.author else "Unknown",
            "updated": to_utc_z(lesson.created_at),
        }
        for lesson in knowledge_service.recent_published_lessons(limit=limit)
    ]


def alerts() -> list[dict]:
    result = []

    low_stock = inventory_service.low_stock_count()
    if low_stock > 0:
        result.append({
            "type": "warning",
            "title": "Stok Rendah",
            "message": f"{low_stock} jenis bahan di bawah ambang batas minimum",
            "action": "Lihat Inventaris",
        })

    high_waste = db.session.query(ProductionLog).filter(
        ProductionLog.production_date >= today() - timedelta(days=HIGH_WASTE_WINDOW_DAYS),
        ProductionLog.waste_percentage > HIGH_WASTE_PERCENTAGE,
    ).count()
    if high_waste > 0:
        result.append({
            "type": "danger",
            "title": "Waste Tinggi",
            "message": f"{high_waste} catatan produksi dengan waste >{HIGH_WASTE_PERCENTAGE}% minggu ini",
            "action": "Analisis Penyebab",
        })

    return result
