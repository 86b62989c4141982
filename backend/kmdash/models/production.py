from __future__ import annotations

from ..extensions import db
from ..time_utils import to_iso_date, to_utc_z, utcnow


WASTE_CATEGORIES = (
    "Material Defect",
    "Cutting Error",
    "Production Error",
    "Planning Error",
    "Other",
)

WASTE_STATUSES = ("Recorded", "Analyzed", "Action_Taken")


class ProductionLog(db.Model):
    """
    Daily material usage. waste_percentage is computed from the two
    quantities when the log is recorded.
    """
    __tablename__ = "production_logs"
    __table_args__ = (
        db.Index("ix_production_logs_date_material", "production_date", "material_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    production_date = db.Column(db.Date, nullable=False, index=True)
    shift = db.Column(db.String(16), nullable=True)
    material_id = db.Column(db.Integer, db.ForeignKey("materials.id"), nullable=False, index=True)

    quantity_used = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False)
    product_type = db.Column(db.String(64), nullable=False)
    quantity_produced = db.Column(db.Integer, nullable=False, default=0)

    waste_quantity = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    waste_percentage = db.Column(db.Numeric(5, 2, asdecimal=False), nullable=False, default=0)
    waste_reason = db.Column(db.Text, nullable=True)

    notes = db.Column(db.Text, nullable=True)
    tacit_insight = db.Column(db.Text, nullable=True)

    worker_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    material = db.relationship("Material", backref=db.backref("production_logs", lazy=True))
    worker = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "production_date": to_iso_date(self.production_date),
            "shift": self.shift,
            "material_id": self.material_id,
            "material": self.material.name if self.material else None,
            "quantity_used": self.quantity_used,
            "product_type": self.product_type,
            "quantity_produced": self.quantity_produced,
            "waste_quantity": self.waste_quantity,
            "waste_percentage": self.waste_percentage,
            "waste_reason": self.waste_reason,
            "notes": self.notes,
            "tacit_insight": self.tacit_insight,
            "worker_id": self.worker_id,
            "created_at": to_utc_z(self.created_at),
        }


class ProductionWaste(db.Model):
    """
    A waste incident (Lean KM). cost_impact = quantity x material unit price,
    fixed at the time the incident is recorded.
    """
    __tablename__ = "production_wastes"
    __table_args__ = (
        db.Index("ix_production_wastes_material_date", "material_id", "waste_date"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    material_id = db.Column(db.Integer, db.ForeignKey("materials.id"), nullable=False)
    production_log_id = db.Column(db.Integer, db.ForeignKey("production_logs.id"), nullable=True)
    waste_date = db.Column(db.Date, nullable=False, index=True)

    quantity = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False)
    unit = db.Column(db.String(20), nullable=True)
    waste_category = db.Column(db.String(32), nullable=False, index=True)
    waste_reason = db.Column(db.Text, nullable=False)
    preventive_action = db.Column(db.Text, nullable=True)

    is_preventable = db.Column(db.Boolean, nullable=False, default=True, index=True)
    cost_impact = db.Column(db.Numeric(14, 2, asdecimal=False), nullable=False, default=0)
    lesson_learned = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(16), nullable=False, default="Recorded")
    recorded_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    material = db.relationship("Material")
    production_log = db.relationship("ProductionLog")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "material_id": self.material_id,
            "material": self.material.name if self.material else None,
            "production_log_id": self.production_log_id,
            "waste_date": to_iso_date(self.waste_date),
            "quantity": self.quantity,
            "unit": self.unit,
            "waste_category": self.waste_category,
            "waste_reason": self.waste_reason,
            "preventive_action": self.preventive_action,
            "is_preventable": self.is_preventable,
            "cost_impact": self.cost_impact,
            "lesson_learned": self.lesson_learned,
            "status": self.status,
            "recorded_by_user_id": self.recorded_by_user_id,
            "created_at": to_utc_z(self.created_at),
        }
