"""
Finalization Gate — decides whether an inspection or project may be completed.

Blockers are human-readable lines, collected in a fixed order:

    1. parent project documents:  "<TYPE>: <description> (<STATUS>)"
       OUTSTANDING first, then REQUIRED
    2. active item kind, required but unresolved:
       SIMPLE         "<CATEGORY>: <item> (FAIL)"   FAIL without notes
       CLAUSE_REVIEW  "<code>: <title> (NA)"        NA without a reason
    3. section progress below ceil(total * 0.5)
    4. CLAUSE_REVIEW completion below 80%

``can_finalize`` is True exactly when the blocker list is empty.
"""

import logging
from datetime import datetime, timezone

from building_inspection.core.exceptions import ValidationError
from building_inspection.models import db
from building_inspection.models.audit import write_audit
from building_inspection.repositories import (
    ChecklistItemRepository,
    ClauseReviewRepository,
    DocumentRepository,
    InspectionRepository,
    ProjectRepository,
)
from building_inspection.services import completion_rules as rules
from building_inspection.services import navigation_service
from building_inspection.services import section_navigator as nav
from building_inspection.services.progress_aggregator import CLAUSE_REVIEWS, aggregate

logger = logging.getLogger(__name__)

CLAUSE_REVIEW_COMPLETION_THRESHOLD = 80

_inspections = InspectionRepository()
_projects = ProjectRepository()
_documents = DocumentRepository()
_checklist_items = ChecklistItemRepository()
_clause_reviews = ClauseReviewRepository()


def _document_blockers(project_id: str) -> list[str]:
    docs = _documents.find_by_parent(project_id)
    blockers = []
    for status in ("OUTSTANDING", "REQUIRED"):
        blockers.extend(
            f"{d.document_type}: {d.description} ({d.status})"
            for d in docs if d.status == status
        )
    return blockers


def can_finalize_project(project_id: str) -> dict:
    """Document gate only: every required document received or marked NA."""
    _projects.get(project_id)
    blockers = _document_blockers(project_id)
    return {"can_finalize": not blockers, "blockers": blockers}


def _item_blockers(inspection) -> tuple[list[str], int | None]:
    """Required-but-unresolved lines for the inspection's mode, plus the
    clause-review completion percentage (None in SIMPLE mode)."""
    if inspection.mode == "CLAUSE_REVIEW":
        reviews = _clause_reviews.find_by_parent(inspection.id)
        lines = [
            f"{r.clause.code}: {r.clause.title} (NA)"
            for r in reviews if rules.na_without_reason(r)
        ]
        return lines, aggregate(reviews, CLAUSE_REVIEWS).completion_percentage

    items = _checklist_items.find_by_parent(inspection.id)
    lines = [
        f"{i.category}: {i.item} (FAIL)"
        for i in items if rules.failed_without_notes(i)
    ]
    return lines, None


def can_finalize_inspection(inspection_id: str) -> dict:
    inspection = _inspections.get(inspection_id)
    state = navigation_service.load_state(inspection_id)

    blockers = []
    if inspection.project_id:
        blockers.extend(_document_blockers(inspection.project_id))

    item_lines, clause_pct = _item_blockers(inspection)
    blockers.extend(item_lines)

    section_progress = nav.progress(state)
    if state.sections and not nav.can_complete(state):
        needed = nav.required_sections(section_progress["total"])
        blockers.append(
            f"Section progress: {section_progress['completed']} of "
            f"{section_progress['total']} sections completed ({needed} required)"
        )

    if clause_pct is not None and clause_pct < CLAUSE_REVIEW_COMPLETION_THRESHOLD:
        blockers.append(
            f"Clause review completion: {clause_pct}% "
            f"({CLAUSE_REVIEW_COMPLETION_THRESHOLD}% required)"
        )

    return {
        "inspection_id": inspection_id,
        "can_finalize": not blockers,
        "blockers": blockers,
        "section_progress": section_progress,
        "clause_review_completion": clause_pct,
    }


def complete_inspection(inspection_id: str, actor: str = "system") -> dict:
    """Mark the inspection COMPLETED when the gate is open.

    Raises:
        ValidationError: gate closed (``details["blockers"]``) or already completed.
    """
    inspection = _inspections.get(inspection_id)
    if inspection.is_completed:
        raise ValidationError(f"Inspection {inspection_id} is already completed.")

    gate = can_finalize_inspection(inspection_id)
    if not gate["can_finalize"]:
        logger.info(
            "Inspection %s completion blocked (%d blocker(s))",
            inspection_id, len(gate["blockers"]),
        )
        raise ValidationError(
            "Inspection cannot be completed.", details={"blockers": gate["blockers"]},
        )

    old_status = inspection.status
    inspection.status = "COMPLETED"
    inspection.completed_at = datetime.now(timezone.utc)
    write_audit(
        entity_type="inspection",
        entity_id=inspection.id,
        action="inspection.complete",
        actor=actor,
        project_id=inspection.project_id,
        diff={"status": {"old": old_status, "new": "COMPLETED"}},
    )
    db.session.commit()
    logger.info("Inspection %s completed", inspection_id)
    return inspection.to_dict()
