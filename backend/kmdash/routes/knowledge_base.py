# Overview: Flask API routes for knowledge base documents.

from flask import Blueprint, request, jsonify, g

from ..decorators import require_auth, require_permission
from ..services import knowledge_service
from ..validation import page_params


knowledge_base_bp = Blueprint("knowledge_base", __name__, url_prefix="/api/knowledge-base")


@knowledge_base_bp.get("")
@require_auth
@require_permission("pengetahuan")
def list_documents_route():
    """Query parameters: type (SOP, Tutorial, ...), status, search, limit, offset"""
    limit, offset = page_params(request.args)

    documents, total = knowledge_service.list_documents(
        doc_type=request.args.get("type"),
        status=request.args.get("status"),
        search=request.args.get("search"),
        limit=limit,
        offset=offset,
    )

    return jsonify({
        "items": [d.to_dict() for d in documents],
        "count": total,
        "limit": limit,
        "offset": offset,
    })


@knowledge_base_bp.post("")
@require_auth
@require_permission("pengetahuan")
def create_document_route():
    document = knowledge_service.create_document(
        payload=request.get_json(silent=True),
        user_id=g.current_user.id,
    )
    return jsonify(document.to_dict()), 201


@knowledge_base_bp.get("/<int:document_id>")
@require_auth
@require_permission("pengetahuan")
def get_document_route(document_id: int):
    document = knowledge_service.view_document(document_id)
    return jsonify(document.to_dict())


@knowledge_base_bp.put("/<int:document_id>")
@require_auth
@require_permission("pengetahuan")
def update_document_route(document_id: int):
    document = knowledge_service.update_document(
        document_id=document_id,
        payload=request.get_json(silent=True),
        user_id=g.current_user.id,
    )
    return jsonify(document.to_dict())
