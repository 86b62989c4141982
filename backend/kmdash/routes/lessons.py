# Overview: Flask API routes for lessons learned; parses input and returns JSON responses.

"""
Lessons Learned Routes (SECI)

SECURITY: All routes require authentication and the `pengetahuan`
permission (every role has it).
"""

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..services import knowledge_service
from ..validation import page_params


lessons_bp = Blueprint("lessons", __name__, url_prefix="/api/lessons")


@lessons_bp.get("")
@require_auth
@require_permission("pengetahuan")
def list_lessons_route():
    """
    List lessons, newest first.

    Query parameters: seci_type, status, impact_level, search, limit, offset
    """
    limit, offset = page_params(request.args)

    lessons, total = knowledge_service.list_lessons(
        seci_type=request.args.get("seci_type"),
        status=request.args.get("status"),
        impact_level=request.args.get("impact_level"),
        search=request.args.get("search"),
        limit=limit,
        offset=offset,
    )

    return jsonify({
        "items": [lesson.to_dict() for lesson in lessons],
        "count": total,
        "limit": limit,
        "offset": offset,
    })


@lessons_bp.post("")
@require_auth
@require_permission("pengetahuan")
def create_lesson_route():
    """
    Record a lesson learned; the caller becomes its author.

    Request body:
    {
        "title": "...",                     // required
        "seci_type": "Eksternalisasi",      // required
        "problem_description": "...",       // required
        "solution": "...",                  // required
        "category": "...",
        "recommendation": "...",
        "impact_level": "Tinggi",           // default Sedang
        "estimated_savings": 1500000,
        "status": "Draft",                  // default Published
        "material_id": 1,
        "supplier_id": 1
    }
    """
    lesson = knowledge_service.create_lesson(
        payload=request.get_json(silent=True),
        author_id=g.current_user.id,
    )
    return jsonify(lesson.to_dict()), 201


@lessons_bp.get("/<int:lesson_id>")
@require_auth
@require_permission("pengetahuan")
def get_lesson_route(lesson_id: int):
    lesson = knowledge_service.view_lesson(lesson_id)
    return jsonify(lesson.to_dict())


@lessons_bp.put("/<int:lesson_id>")
@require_auth
@require_permission("pengetahuan")
def update_lesson_route(lesson_id: int):
    lesson = knowledge_service.update_lesson(
        lesson_id=lesson_id,
        payload=request.get_json(silent=True),
    )
    return jsonify(lesson.to_dict())


@lessons_bp.delete("/<int:lesson_id>")
@require_auth
@require_permission("pengetahuan")
def delete_lesson_route(lesson_id: int):
    knowledge_service.delete_lesson(lesson_id=lesson_id)
    return jsonify({"message": "Lesson deleted"})


@lessons_bp.post("/<int:lesson_id>/publish")
@require_auth
@require_permission("pengetahuan")
def publish_lesson_route(lesson_id: int):
    lesson = knowledge_service.publish_lesson(
        lesson_id=lesson_id,
        validated_by_user_id=g.current_user.id,
    )
    return jsonify(lesson.to_dict())


@lessons_bp.post("/<int:lesson_id>/archive")
@require_auth
@require_permission("pengetahuan")
def archive_lesson_route(lesson_id: int):
    lesson = knowledge_service.archive_lesson(lesson_id=lesson_id)
    return jsonify(lesson.to_dict())


@lessons_bp.post("/<int:lesson_id>/like")
@require_auth
@require_permission("pengetahuan")
def like_lesson_route(lesson_id: int):
    lesson = knowledge_service.like_lesson(lesson_id=lesson_id)
    return jsonify({"id": lesson.id, "likes_count": lesson.likes_count})
