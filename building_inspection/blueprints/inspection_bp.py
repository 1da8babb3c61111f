"""
Inspection blueprint — inspections, section navigation and completion.

Endpoint groups:
  Inspections      POST /api/v1/inspections
                   GET  /api/v1/inspections/<id>
                   GET  /api/v1/inspections/<id>/audit
  Navigation       POST /api/v1/inspections/<id>/navigate     {"action": "next"|"skip"|"back"|<section id>}
                   GET  /api/v1/inspections/<id>/status
                   GET  /api/v1/inspections/<id>/suggest
  Completion       GET  /api/v1/inspections/<id>/summary
                   GET  /api/v1/inspections/<id>/can-finalize
                   POST /api/v1/inspections/<id>/complete
  Findings         GET/POST /api/v1/inspections/<id>/findings
                   PUT/DELETE /api/v1/findings/<id>
  Checklist items  GET/POST /api/v1/inspections/<id>/checklist-items
                   POST /api/v1/inspections/<id>/checklist-items/bulk
                   PUT  /api/v1/inspections/<id>/checklist-items/reorder
                   GET  /api/v1/inspections/<id>/checklist-items/grouped
                   PUT/DELETE /api/v1/checklist-items/<id>
  Clause reviews   GET/POST /api/v1/inspections/<id>/clause-reviews
                   POST /api/v1/inspections/<id>/clause-reviews/initialize
                   GET  /api/v1/inspections/<id>/clause-reviews/grouped
                   PUT/DELETE /api/v1/clause-reviews/<id>
                   POST /api/v1/clause-reviews/<id>/mark-na
                   POST /api/v1/clause-reviews/<id>/mark-applicable
                   POST /api/v1/clause-reviews/<id>/observations

Service layer owns all business logic and commits.
"""

from flask import Blueprint, jsonify, request

from building_inspection.blueprints import json_body, register_error_handlers
from building_inspection.core.exceptions import ValidationError
from building_inspection.models.audit import audit_trail
from building_inspection.repositories import InspectionRepository
from building_inspection.services import (
    checklist_item_service,
    clause_review_service,
    finalization_gate,
    finding_service,
    navigation_service,
)

inspection_bp = Blueprint("inspection", __name__, url_prefix="/api/v1")
register_error_handlers(inspection_bp)

_inspections = InspectionRepository()


def _actor() -> str:
    return request.headers.get("X-User", "system")


# ═════════════════════════════════════════════════════════════════════════
# Inspections & navigation
# ═════════════════════════════════════════════════════════════════════════


@inspection_bp.route("/inspections", methods=["POST"])
def create_inspection():
    return jsonify(navigation_service.start_inspection(json_body(), actor=_actor())), 201


@inspection_bp.route("/inspections/<inspection_id>", methods=["GET"])
def get_inspection(inspection_id):
    return jsonify(_inspections.get(inspection_id).to_dict()), 200


@inspection_bp.route("/inspections/<inspection_id>/audit", methods=["GET"])
def get_inspection_audit(inspection_id):
    _inspections.get(inspection_id)
    return jsonify([row.to_dict() for row in audit_trail("inspection", inspection_id)]), 200


@inspection_bp.route("/inspections/<inspection_id>/navigate", methods=["POST"])
def navigate(inspection_id):
    action = json_body().get("action") or json_body().get("section")
    if not action:
        raise ValidationError("action is required.")
    return jsonify(navigation_service.navigate(inspection_id, action, actor=_actor())), 200


@inspection_bp.route("/inspections/<inspection_id>/status", methods=["GET"])
def get_status(inspection_id):
    return jsonify(navigation_service.get_status(inspection_id)), 200


@inspection_bp.route("/inspections/<inspection_id>/suggest", methods=["GET"])
def suggest(inspection_id):
    return jsonify(navigation_service.suggest(inspection_id)), 200


# ═════════════════════════════════════════════════════════════════════════
# Completion
# ═════════════════════════════════════════════════════════════════════════


@inspection_bp.route("/inspections/<inspection_id>/summary", methods=["GET"])
def get_summary(inspection_id):
    """Summary for the inspection's active item kind."""
    inspection = _inspections.get(inspection_id)
    if inspection.mode == "CLAUSE_REVIEW":
        summary = clause_review_service.get_summary(inspection_id)
    else:
        summary = checklist_item_service.get_summary(inspection_id)
    return jsonify({"mode": inspection.mode, "summary": summary}), 200


@inspection_bp.route("/inspections/<inspection_id>/can-finalize", methods=["GET"])
def can_finalize(inspection_id):
    return jsonify(finalization_gate.can_finalize_inspection(inspection_id)), 200


@inspection_bp.route("/inspections/<inspection_id>/complete", methods=["POST"])
def complete(inspection_id):
    return jsonify(finalization_gate.complete_inspection(inspection_id, actor=_actor())), 200


# ═════════════════════════════════════════════════════════════════════════
# Findings
# ═════════════════════════════════════════════════════════════════════════


@inspection_bp.route("/inspections/<inspection_id>/findings", methods=["GET"])
def list_findings(inspection_id):
    return jsonify(finding_service.list_findings(inspection_id, request.args.get("section"))), 200


@inspection_bp.route("/inspections/<inspection_id>/findings", methods=["POST"])
def create_finding(inspection_id):
    return jsonify(finding_service.create_finding(inspection_id, json_body())), 201


@inspection_bp.route("/findings/<finding_id>", methods=["PUT"])
def update_finding(finding_id):
    return jsonify(finding_service.update_finding(finding_id, json_body())), 200


@inspection_bp.route("/findings/<finding_id>", methods=["DELETE"])
def delete_finding(finding_id):
    finding_service.delete_finding(finding_id)
    return "", 204


# ═════════════════════════════════════════════════════════════════════════
# Checklist items (SIMPLE mode)
# ═════════════════════════════════════════════════════════════════════════


@inspection_bp.route("/inspections/<inspection_id>/checklist-items", methods=["GET"])
def list_checklist_items(inspection_id):
    items = checklist_item_service.list_items(
        inspection_id,
        category=request.args.get("category"),
        decision=request.args.get("decision"),
    )
    return jsonify(items), 200


@inspection_bp.route("/inspections/<inspection_id>/checklist-items", methods=["POST"])
def create_checklist_item(inspection_id):
    return jsonify(checklist_item_service.create_item(inspection_id, json_body())), 201


@inspection_bp.route("/inspections/<inspection_id>/checklist-items/bulk", methods=["POST"])
def bulk_create_checklist_items(inspection_id):
    rows = json_body().get("items") or []
    return jsonify(checklist_item_service.bulk_create(inspection_id, rows)), 201


@inspection_bp.route("/inspections/<inspection_id>/checklist-items/reorder", methods=["PUT"])
def reorder_checklist_items(inspection_id):
    ids = json_body().get("ids") or []
    return jsonify(checklist_item_service.reorder(inspection_id, ids)), 200


@inspection_bp.route("/inspections/<inspection_id>/checklist-items/grouped", methods=["GET"])
def grouped_checklist_items(inspection_id):
    return jsonify(checklist_item_service.get_grouped_by_category(inspection_id)), 200


@inspection_bp.route("/checklist-items/<item_id>", methods=["PUT"])
def update_checklist_item(item_id):
    return jsonify(checklist_item_service.update_item(item_id, json_body())), 200


@inspection_bp.route("/checklist-items/<item_id>", methods=["DELETE"])
def delete_checklist_item(item_id):
    checklist_item_service.delete_item(item_id)
    return "", 204


# ═════════════════════════════════════════════════════════════════════════
# Clause reviews (CLAUSE_REVIEW mode)
# ═════════════════════════════════════════════════════════════════════════


@inspection_bp.route("/inspections/<inspection_id>/clause-reviews", methods=["GET"])
def list_clause_reviews(inspection_id):
    reviews = clause_review_service.list_reviews(
        inspection_id, applicability=request.args.get("applicability"),
    )
    return jsonify(reviews), 200


@inspection_bp.route("/inspections/<inspection_id>/clause-reviews", methods=["POST"])
def create_clause_review(inspection_id):
    data = json_body()
    clause_id = data.get("clause_id")
    if not clause_id:
        raise ValidationError("clause_id is required.")
    return jsonify(clause_review_service.create_review(inspection_id, clause_id, data)), 201


@inspection_bp.route("/inspections/<inspection_id>/clause-reviews/initialize", methods=["POST"])
def initialize_clause_reviews(inspection_id):
    clause_ids = json_body().get("clause_ids") or []
    return jsonify(clause_review_service.initialize_for_inspection(inspection_id, clause_ids)), 201


@inspection_bp.route("/inspections/<inspection_id>/clause-reviews/grouped", methods=["GET"])
def grouped_clause_reviews(inspection_id):
    return jsonify(clause_review_service.get_grouped_by_category(inspection_id)), 200


@inspection_bp.route("/clause-reviews/<review_id>", methods=["PUT"])
def update_clause_review(review_id):
    return jsonify(clause_review_service.update_review(review_id, json_body())), 200


@inspection_bp.route("/clause-reviews/<review_id>", methods=["DELETE"])
def delete_clause_review(review_id):
    clause_review_service.delete_review(review_id)
    return "", 204


@inspection_bp.route("/clause-reviews/<review_id>/mark-na", methods=["POST"])
def mark_clause_review_na(review_id):
    reason = json_body().get("na_reason") or ""
    return jsonify(clause_review_service.mark_as_na(review_id, reason, actor=_actor())), 200


@inspection_bp.route("/clause-reviews/<review_id>/mark-applicable", methods=["POST"])
def mark_clause_review_applicable(review_id):
    return jsonify(clause_review_service.mark_as_applicable(review_id, actor=_actor())), 200


@inspection_bp.route("/clause-reviews/<review_id>/observations", methods=["POST"])
def add_clause_observation(review_id):
    observation = json_body().get("observation") or ""
    return jsonify(clause_review_service.add_observation(review_id, observation)), 200
