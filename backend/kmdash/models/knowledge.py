from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow


# SECI knowledge-conversion modes (Nonaka & Takeuchi). Labels only.
SECI_TYPES = ("Sosialisasi", "Eksternalisasi", "Kombinasi", "Internalisasi")

SECI_DESCRIPTIONS = {
    "Sosialisasi": "Tacit to Tacit - Sharing pengalaman antar penjahit",
    "Eksternalisasi": "Tacit to Explicit - Dokumentasi pengalaman ke SOP",
    "Kombinasi": "Explicit to Explicit - Analisis & sintesis data",
    "Internalisasi": "Explicit to Tacit - Penerapan SOP jadi keahlian",
}

IMPACT_LEVELS = ("Tinggi", "Sedang", "Rendah")
PUBLICATION_STATUSES = ("Draft", "Published", "Archived")

DOCUMENT_TYPES = ("SOP", "Tutorial", "Best_Practice", "Video", "Checklist", "Template")


class LessonLearned(db.Model):
    """
    Captured lesson, labelled with its SECI conversion mode.

    Status moves Draft -> Published -> Archived; only published lessons
    count toward the knowledge health score.
    """
    __tablename__ = "lessons_learned"
    __table_args__ = (
        db.Index("ix_lessons_status_created", "status", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    seci_type = db.Column(db.String(16), nullable=False, index=True)
    category = db.Column(db.String(255), nullable=True)

    problem_description = db.Column(db.Text, nullable=False)
    solution = db.Column(db.Text, nullable=False)
    recommendation = db.Column(db.Text, nullable=True)

    impact_level = db.Column(db.String(8), nullable=False, default="Sedang")
    estimated_savings = db.Column(db.Numeric(14, 2, asdecimal=False), nullable=True)

    author_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    validated_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    status = db.Column(db.String(16), nullable=False, default="Published")

    view_count = db.Column(db.Integer, nullable=False, default=0)
    likes_count = db.Column(db.Integer, nullable=False, default=0)

    material_id = db.Column(db.Integer, db.ForeignKey("materials.id"), nullable=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey("suppliers.id"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    author = db.relationship("User", foreign_keys=[author_id])
    material = db.relationship("Material")
    supplier = db.relationship("Supplier")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "seci_type": self.seci_type,
            "seci_description": SECI_DESCRIPTIONS.get(self.seci_type, ""),
            "category": self.category,
            "problem_description": self.problem_description,
            "solution": self.solution,
            "recommendation": self.recommendation,
            "impact_level": self.impact_level,
            "estimated_savings": self.estimated_savings,
            "author": self.author.name if self.author else None,
            "author_id": self.author_id,
            "status": self.status,
            "view_count": self.view_count,
            "likes_count": self.likes_count,
            "material_id": self.material_id,
            "supplier_id": self.supplier_id,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class KnowledgeDocument(db.Model):
    """Knowledge base entry (SOP, tutorial, checklist, ...)."""
    __tablename__ = "knowledge_documents"
    __table_args__ = (
        db.Index("ix_knowledge_documents_type_status", "doc_type", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    doc_type = db.Column(db.String(16), nullable=False)
    content = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(255), nullable=True)
    seci_stage = db.Column(db.String(16), nullable=True)

    status = db.Column(db.String(16), nullable=False, default="Draft")
    view_count = db.Column(db.Integer, nullable=False, default=0)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    updated_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    published_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    # Set only by content edits; view counting leaves it alone.
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    created_by = db.relationship("User", foreign_keys=[created_by_user_id])

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": self.doc_type,
            "content": self.content,
            "category": self.category,
            "seci_stage": self.seci_stage,
            "status": self.status,
            "view_count": self.view_count,
            "created_by": self.created_by.name if self.created_by else None,
            "published_at": to_utc_z(self.published_at),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
