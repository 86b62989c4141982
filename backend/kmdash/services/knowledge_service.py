# Overview: Service-layer operations for lessons learned and knowledge documents.

"""
Knowledge Service

WHY: Lessons learned are the SECI activity log of the convection; the
knowledge base holds the codified documents (SOPs, tutorials, ...).
Both feed the knowledge health score, so only Published rows count there.

STATUS FLOW: Draft -> Published -> Archived (publish may also revive an
archived lesson).
"""

from ..extensions import db
from ..models import KnowledgeDocument, LessonLearned, Material, Supplier
from ..models.knowledge import DOCUMENT_TYPES, IMPACT_LEVELS, PUBLICATION_STATUSES, SECI_TYPES
from ..validation import FieldRule, NotFoundError, PayloadPolicy, ValidationError, validate_payload
from ..time_utils import utcnow


LESSON_POLICY = PayloadPolicy(fields=(
    FieldRule("title", required=True, max_length=255),
    FieldRule("seci_type", required=True, choices=SECI_TYPES),
    FieldRule("category", max_length=255),
    FieldRule("problem_description", kind="text", required=True),
    FieldRule("solution", kind="text", required=True),
    FieldRule("recommendation", kind="text"),
    FieldRule("impact_level", choices=IMPACT_LEVELS, nullable=False),
    FieldRule("estimated_savings", kind="number", min_value=0),
    FieldRule("status", choices=PUBLICATION_STATUSES, nullable=False),
    FieldRule("material_id", kind="integer"),
    FieldRule("supplier_id", kind="integer"),
))

DOCUMENT_POLICY = PayloadPolicy(fields=(
    FieldRule("title", required=True, max_length=255),
    FieldRule("type", attr="doc_type", required=True, choices=DOCUMENT_TYPES),
    FieldRule("description", kind="text"),
    FieldRule("content", kind="text"),
    FieldRule("category", max_length=255),
    FieldRule("seci_stage", choices=SECI_TYPES),
    FieldRule("status", choices=PUBLICATION_STATUSES, nullable=False),
))


class LessonNotFoundError(NotFoundError):
    pass


class DocumentNotFoundError(NotFoundError):
    pass


def _check_links(data: dict) -> None:
    errors = {}
    material_id = data.get("material_id")
    if material_id is not None and not db.session.get(Material, material_id):
        errors["material_id"] = ["Material not found"]
    supplier_id = data.get("supplier_id")
    if supplier_id is not None and not db.session.get(Supplier, supplier_id):
        errors["supplier_id"] = ["Supplier not found"]
    if errors:
        raise ValidationError(errors)


# =============================================================================
# LESSONS LEARNED
# =============================================================================

def get_lesson(lesson_id: int) -> LessonLearned:
    lesson = db.session.get(LessonLearned, lesson_id)
    if not lesson:
        raise LessonNotFoundError(f"Lesson {lesson_id} not found")
    return lesson


def view_lesson(lesson_id: int) -> LessonLearned:
    """Fetch a lesson for reading; counts the view."""
    lesson = get_lesson(lesson_id)
    lesson.view_count = (lesson.view_count or 0) + 1
    db.session.commit()
    return lesson


def list_lessons(
    *,
    seci_type: str | None = None,
    status: str | None = None,
    impact_level: str | None = None,
    search: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[LessonLearned], int]:
    query = db.session.query(LessonLearned)

    if seci_type:
        query = query.filter(LessonLearned.seci_type == seci_type)
    if status:
        query = query.filter(LessonLearned.status == status)
    if impact_level:
        query = query.filter(LessonLearned.impact_level == impact_level)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(db.or_(
            LessonLearned.title.ilike(term),
            LessonLearned.problem_description.ilike(term),
            LessonLearned.solution.ilike(term),
        ))

    total = query.count()
    lessons = query.order_by(
        LessonLearned.created_at.desc(), LessonLearned.id.desc()
    ).offset(offset).limit(limit).all()
    return lessons, total


def create_lesson(*, payload: dict, author_id: int) -> LessonLearned:
    data = validate_payload(payload=payload, policy=LESSON_POLICY, partial=False)
    _check_links(data)

    lesson = LessonLearned(author_id=author_id, **data)
    db.session.add(lesson)
    db.session.commit()
    return lesson


def update_lesson(*, lesson_id: int, payload: dict) -> LessonLearned:
    lesson = get_lesson(lesson_id)
    data = validate_payload(payload=payload, policy=LESSON_POLICY, partial=True)
    _check_links(data)

    for attr, value in data.items():
        setattr(lesson, attr, value)
    db.session.commit()
    return lesson


def delete_lesson(*, lesson_id: int) -> None:
    lesson = get_lesson(lesson_id)
    db.session.delete(lesson)
    db.session.commit()


def publish_lesson(*, lesson_id: int, validated_by_user_id: int | None = None) -> LessonLearned:
    lesson = get_lesson(lesson_id)
    lesson.status = "Published"
    lesson.validated_by_user_id = validated_by_user_id
    db.session.commit()
    return lesson


def archive_lesson(*, lesson_id: int) -> LessonLearned:
    lesson = get_lesson(lesson_id)
    lesson.status = "Archived"
    db.session.commit()
    return lesson


def like_lesson(*, lesson_id: int) -> LessonLearned:
    lesson = get_lesson(lesson_id)
    lesson.likes_count = (lesson.likes_count or 0) + 1
    db.session.commit()
    return lesson


def recent_published_lessons(limit: int = 5) -> list[LessonLearned]:
    return db.session.query(LessonLearned).filter(
        LessonLearned.status == "Published"
    ).order_by(
        LessonLearned.created_at.desc(), LessonLearned.id.desc()
    ).limit(limit).all()


# =============================================================================
# KNOWLEDGE BASE DOCUMENTS
# =============================================================================

def get_document(document_id: int) -> KnowledgeDocument:
    document = db.session.get(KnowledgeDocument, document_id)
    if not document:
        raise DocumentNotFoundError(f"Document {document_id} not found")
    return document


def view_document(document_id: int) -> KnowledgeDocument:
    document = get_document(document_id)
    document.view_count = (document.view_count or 0) + 1
    db.session.commit()
    return document


def list_documents(
    *,
    doc_type: str | None = None,
    status: str | None = None,
    search: str | None = None,
    limit: int = 100,
    offset: int = 0,
) -> tuple[list[KnowledgeDocument], int]:
    query = db.session.query(KnowledgeDocument)

    if doc_type:
        query = query.filter(KnowledgeDocument.doc_type == doc_type)
    if status:
        query = query.filter(KnowledgeDocument.status == status)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(db.or_(
            KnowledgeDocument.title.ilike(term),
            KnowledgeDocument.description.ilike(term),
        ))

    total = query.count()
    documents = query.order_by(
        KnowledgeDocument.updated_at.desc(), KnowledgeDocument.id.desc()
    ).offset(offset).limit(limit).all()
    return documents, total


def create_document(*, payload: dict, user_id: int) -> KnowledgeDocument:
    data = validate_payload(payload=payload, policy=DOCUMENT_POLICY, partial=False)

    document = KnowledgeDocument(created_by_user_id=user_id, updated_by_user_id=user_id, **data)
    if document.status == "Published":
        document.published_at = utcnow()

    db.session.add(document)
    db.session.commit()
    return document


def update_document(*, document_id: int, payload: dict, user_id: int) -> KnowledgeDocument:
    """
    Any update bumps updated_at, which is what SOP freshness measures.
    """
    document = get_document(document_id)
    data = validate_payload(payload=payload, policy=DOCUMENT_POLICY, partial=True)

    was_published = document.status == "Published"
    for attr, value in data.items():
        setattr(document, attr, value)

    if document.status == "Published" and not was_published:
        document.published_at = utcnow()

    document.updated_by_user_id = user_id
    document.updated_at = utcnow()
    db.session.commit()
    return document
