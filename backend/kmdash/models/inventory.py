from __future__ import annotations

from ..extensions import db
from ..services import metrics_service
from ..time_utils import to_iso_date, to_utc_z, utcnow


MATERIAL_CATEGORIES = ("Bahan Utama", "Bahan Pendukung", "Aksesoris", "Alat Produksi")

QUALITY_LEVELS = ("Excellent", "Good", "Fair", "Poor")

DELIVERY_STATUSES = ("Ordered", "In_Transit", "Delivered", "Inspected", "Accepted", "Rejected")
DELIVERED_STATUSES = ("Delivered", "Inspected", "Accepted")


class Supplier(db.Model):
    """
    Supplier / vendor with Knowledge-Based View (KBV) scoring.

    Three 1-10 ratings are stored; overall score and the strategic partner
    flag are always derived from them. `is_recommended` is a cached copy of
    the flag so lists can sort strategic partners first.
    """
    __tablename__ = "suppliers"
    __table_args__ = (
        db.Index("ix_suppliers_active_recommended", "is_active", "is_recommended"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    specialty = db.Column(db.String(255), nullable=False)

    quality_score = db.Column(db.Numeric(3, 1, asdecimal=False), nullable=False, default=7.0)
    speed_score = db.Column(db.Numeric(3, 1, asdecimal=False), nullable=False, default=7.0)
    reliability_score = db.Column(db.Numeric(3, 1, asdecimal=False), nullable=False, default=7.0)
    is_recommended = db.Column(db.Boolean, nullable=False, default=False)

    # Tacit knowledge about the supplier
    kbv_insight = db.Column(db.Text, nullable=True)

    contact_person = db.Column(db.String(255), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    email = db.Column(db.String(255), nullable=True)
    address = db.Column(db.Text, nullable=True)

    total_orders = db.Column(db.Integer, nullable=False, default=0)
    on_time_deliveries = db.Column(db.Integer, nullable=False, default=0)
    last_delivery_date = db.Column(db.Date, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    updated_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    created_by = db.relationship("User", foreign_keys=[created_by_user_id])
    updated_by = db.relationship("User", foreign_keys=[updated_by_user_id])

    @property
    def overall_score(self) -> float:
        return metrics_service.supplier_overall_score(
            self.quality_score, self.speed_score, self.reliability_score
        )

    @property
    def is_strategic_partner(self) -> bool:
        return metrics_service.is_strategic_partner(self.overall_score)

    @property
    def on_time_percentage(self) -> float:
        return round(metrics_service.ratio_percent(self.on_time_deliveries, self.total_orders), 1)

    def __repr__(self) -> str:
        return f"<Supplier id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nama_vendor": self.name,
            "kategori_bahan": self.specialty,
            "rating_kualitas": self.quality_score,
            "rating_kecepatan": self.speed_score,
            "indeks_keandalan": self.reliability_score,
            "overall_score": round(self.overall_score, 1),
            "star_rating": round(self.overall_score / 2),
            "is_pilihan_utama": self.is_strategic_partner,
            "kbv_insight": self.kbv_insight,
            "contact_person": self.contact_person,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "total_orders": self.total_orders,
            "on_time_percentage": self.on_time_percentage,
            "last_delivery": to_iso_date(self.last_delivery_date),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Material(db.Model):
    """
    Raw material (bahan baku) with dual knowledge storage.

    explicit_knowledge holds the formal SOP text, tacit_knowledge the
    practical experience of the sewing staff. Stock status is derived from
    stock_quantity vs threshold_min and never stored.
    """
    __tablename__ = "materials"
    __table_args__ = (
        db.Index("ix_materials_stock_threshold", "stock_quantity", "threshold_min"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(32), nullable=False, index=True)

    stock_quantity = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    unit = db.Column(db.String(20), nullable=False)
    threshold_min = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    price_per_unit = db.Column(db.Numeric(14, 2, asdecimal=False), nullable=True)
    reorder_point = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=True)

    explicit_knowledge = db.Column(db.Text, nullable=True)
    tacit_knowledge = db.Column(db.Text, nullable=True)

    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=True, index=True)

    # Cache of the trailing 90-day production waste average
    avg_waste_percentage = db.Column(db.Numeric(5, 2, asdecimal=False), nullable=False, default=0)

    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)

    last_updated_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    last_restocked_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    supplier = db.relationship("Supplier", backref=db.backref("materials", lazy=True))
    last_updated_by = db.relationship("User")

    @property
    def status(self) -> str:
        return metrics_service.stock_status(self.stock_quantity, self.threshold_min)

    @property
    def total_value(self) -> float:
        return (self.stock_quantity or 0) * (self.price_per_unit or 0)

    @property
    def is_low_stock(self) -> bool:
        return (self.stock_quantity or 0) <= (self.threshold_min or 0)

    def __repr__(self) -> str:
        return f"<Material id={self.id} name={self.name!r} stock={self.stock_quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nama_bahan": self.name,
            "kategori": self.category,
            "stok": self.stock_quantity,
            "satuan": self.unit,
            "status": self.status,
            "harga_per_unit": self.price_per_unit,
            "threshold_min": self.threshold_min,
            "reorder_point": self.reorder_point,
            "nilai_stok": round(self.total_value, 2),
            "supplier_id": self.supplier_id,
            "supplier": self.supplier.name if self.supplier else "-",
            "explicit_knowledge": self.explicit_knowledge,
            "tacit_knowledge": self.tacit_knowledge,
            "avg_waste_percentage": self.avg_waste_percentage,
            "last_updated_by": self.last_updated_by.name if self.last_updated_by else None,
            "last_restocked_at": to_utc_z(self.last_restocked_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class SupplierDelivery(db.Model):
    """
    One purchase order delivery from a supplier; feeds the reliability index.
    """
    __tablename__ = "supplier_deliveries"
    __table_args__ = (
        db.Index("ix_supplier_deliveries_supplier_order", "supplier_id", "order_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=False, index=True)
    material_id = db.Column(db.Integer, db.ForeignKey("materials.id"), nullable=True, index=True)

    po_number = db.Column(db.String(64), nullable=False, unique=True)
    order_date = db.Column(db.Date, nullable=False, index=True)
    expected_delivery_date = db.Column(db.Date, nullable=False)
    actual_delivery_date = db.Column(db.Date, nullable=True)

    quantity_ordered = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False)
    quantity_delivered = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=True)
    unit = db.Column(db.String(20), nullable=True)
    price_per_unit = db.Column(db.Numeric(14, 2, asdecimal=False), nullable=True)

    color_consistency = db.Column(db.String(16), nullable=True)
    material_quality = db.Column(db.String(16), nullable=True)
    defect_rate = db.Column(db.Numeric(5, 2, asdecimal=False), nullable=True)
    quality_notes = db.Column(db.Text, nullable=True)
    delivery_notes = db.Column(db.Text, nullable=True)

    on_time_delivery = db.Column(db.Boolean, nullable=True)
    delay_days = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default="Ordered", index=True)

    received_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    inspected_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    supplier = db.relationship("Supplier", backref=db.backref("deliveries", lazy=True))
    material = db.relationship("Material")

    @property
    def total_price(self) -> float:
        return (self.quantity_ordered or 0) * (self.price_per_unit or 0)

    @property
    def quality_score(self) -> float:
        return metrics_service.delivery_quality_score(
            self.color_consistency, self.material_quality, self.defect_rate
        )

    @property
    def delivery_score(self) -> float:
        return metrics_service.delivery_timeliness_score(self.on_time_delivery, self.delay_days)

    def kbv_insight(self) -> str | None:
        insights = []
        if self.on_time_delivery:
            insights.append("Pengiriman tepat waktu")
        elif self.on_time_delivery is False:
            insights.append(f"Terlambat {self.delay_days} hari")
        if self.color_consistency == "Excellent":
            insights.append("Konsistensi warna excellent")
        if (self.defect_rate or 0) > 5:
            insights.append(f"Cacat material tinggi ({self.defect_rate}%)")
        return ". ".join(insights) if insights else None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "supplier_id": self.supplier_id,
            "material_id": self.material_id,
            "po_number": self.po_number,
            "order_date": to_iso_date(self.order_date),
            "expected_delivery_date": to_iso_date(self.expected_delivery_date),
            "actual_delivery_date": to_iso_date(self.actual_delivery_date),
            "quantity_ordered": self.quantity_ordered,
            "quantity_delivered": self.quantity_delivered,
            "unit": self.unit,
            "price_per_unit": self.price_per_unit,
            "total_price": round(self.total_price, 2),
            "color_consistency": self.color_consistency,
            "material_quality": self.material_quality,
            "defect_rate": self.defect_rate,
            "on_time_delivery": self.on_time_delivery,
            "delay_days": self.delay_days,
            "status": self.status,
            "quality_score": self.quality_score,
            "delivery_score": self.delivery_score,
            "kbv_insight": self.kbv_insight(),
            "created_at": to_utc_z(self.created_at),
        }
