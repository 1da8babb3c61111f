"""
Project blueprint — projects, their supporting documents, building-code
clause reference data and the available checklist definitions.

Endpoint groups:
  Projects     GET/POST /api/v1/projects
               GET/PUT  /api/v1/projects/<id>
               GET      /api/v1/projects/<id>/can-finalize
  Documents    GET/POST /api/v1/projects/<id>/documents
               GET      /api/v1/projects/<id>/documents/summary
               GET      /api/v1/projects/<id>/documents/outstanding
               GET      /api/v1/projects/<id>/documents/required
               PUT      /api/v1/projects/<id>/documents/reorder
               PUT/DELETE /api/v1/documents/<id>
               POST     /api/v1/documents/<id>/status      {"status": "RECEIVED"|...}
               POST     /api/v1/documents/<id>/verify
               PUT      /api/v1/documents/<id>/clauses
  Clauses      GET/POST /api/v1/building-code/clauses
               GET      /api/v1/building-code/clauses/<code>
  Checklists   GET      /api/v1/checklists
               GET      /api/v1/checklists/<id>
"""

from flask import Blueprint, jsonify, request

from building_inspection.blueprints import json_body, register_error_handlers
from building_inspection.services import (
    clause_review_service,
    document_service,
    finalization_gate,
    project_service,
)
from building_inspection.services.checklist_registry import get_registry

project_bp = Blueprint("project", __name__, url_prefix="/api/v1")
register_error_handlers(project_bp)


def _actor() -> str:
    return request.headers.get("X-User", "system")


# ═════════════════════════════════════════════════════════════════════════
# Projects
# ═════════════════════════════════════════════════════════════════════════


@project_bp.route("/projects", methods=["GET"])
def list_projects():
    return jsonify(project_service.list_projects(request.args.get("status"))), 200


@project_bp.route("/projects", methods=["POST"])
def create_project():
    return jsonify(project_service.create_project(json_body())), 201


@project_bp.route("/projects/<project_id>", methods=["GET"])
def get_project(project_id):
    return jsonify(project_service.get_project(project_id)), 200


@project_bp.route("/projects/<project_id>", methods=["PUT"])
def update_project(project_id):
    return jsonify(project_service.update_project(project_id, json_body())), 200


@project_bp.route("/projects/<project_id>/can-finalize", methods=["GET"])
def can_finalize_project(project_id):
    return jsonify(finalization_gate.can_finalize_project(project_id)), 200


# ═════════════════════════════════════════════════════════════════════════
# Documents
# ═════════════════════════════════════════════════════════════════════════


@project_bp.route("/projects/<project_id>/documents", methods=["GET"])
def list_documents(project_id):
    docs = document_service.list_documents(
        project_id,
        status=request.args.get("status"),
        document_type=request.args.get("document_type"),
    )
    return jsonify(docs), 200


@project_bp.route("/projects/<project_id>/documents", methods=["POST"])
def create_document(project_id):
    return jsonify(document_service.create_document(project_id, json_body())), 201


@project_bp.route("/projects/<project_id>/documents/summary", methods=["GET"])
def document_summary(project_id):
    return jsonify(document_service.get_summary(project_id)), 200


@project_bp.route("/projects/<project_id>/documents/outstanding", methods=["GET"])
def outstanding_documents(project_id):
    return jsonify(document_service.get_outstanding(project_id)), 200


@project_bp.route("/projects/<project_id>/documents/required", methods=["GET"])
def required_documents(project_id):
    return jsonify(document_service.get_required(project_id)), 200


@project_bp.route("/projects/<project_id>/documents/reorder", methods=["PUT"])
def reorder_documents(project_id):
    return jsonify(document_service.reorder(project_id, json_body().get("ids") or [])), 200


@project_bp.route("/documents/<document_id>", methods=["PUT"])
def update_document(document_id):
    return jsonify(document_service.update_document(document_id, json_body())), 200


@project_bp.route("/documents/<document_id>", methods=["DELETE"])
def delete_document(document_id):
    document_service.delete_document(document_id)
    return "", 204


@project_bp.route("/documents/<document_id>/status", methods=["POST"])
def set_document_status(document_id):
    status = json_body().get("status")
    return jsonify(document_service.set_status(document_id, status, actor=_actor())), 200


@project_bp.route("/documents/<document_id>/verify", methods=["POST"])
def verify_document(document_id):
    verified = json_body().get("verified", True)
    return jsonify(document_service.verify(document_id, verified, actor=_actor())), 200


@project_bp.route("/documents/<document_id>/clauses", methods=["PUT"])
def link_document_clauses(document_id):
    codes = json_body().get("clauses") or []
    return jsonify(document_service.link_clauses(document_id, codes)), 200


# ═════════════════════════════════════════════════════════════════════════
# Building-code clauses & checklists (reference data)
# ═════════════════════════════════════════════════════════════════════════


@project_bp.route("/building-code/clauses", methods=["GET"])
def list_clauses():
    return jsonify(clause_review_service.list_clauses(request.args.get("category"))), 200


@project_bp.route("/building-code/clauses", methods=["POST"])
def create_clause():
    return jsonify(clause_review_service.create_clause(json_body())), 201


@project_bp.route("/building-code/clauses/<code>", methods=["GET"])
def get_clause(code):
    return jsonify(clause_review_service.get_clause_by_code(code)), 200


@project_bp.route("/checklists", methods=["GET"])
def list_checklists():
    registry = get_registry()
    return jsonify([
        {"id": c.id, "name": c.name, "version": c.version, "sections": len(c.flattened_sections())}
        for c in (registry.get_checklist(cid) for cid in registry.available_checklists())
    ]), 200


@project_bp.route("/checklists/<checklist_id>", methods=["GET"])
def get_checklist(checklist_id):
    return jsonify(get_registry().require_checklist(checklist_id).to_dict()), 200
