"""
Finalization Gate — blocker collection, ordering and thresholds.

Covers:
    - document blockers (OUTSTANDING before REQUIRED), project-level gate
    - SIMPLE mode: FAIL without notes
    - CLAUSE_REVIEW mode: NA without a reason, 80% completion threshold
    - section gate: ceil(total * 0.5)
    - complete_inspection(): success, blocked, already completed
"""

import pytest

from building_inspection.core.exceptions import NotFoundError, ValidationError
from building_inspection.models import db as _db
from building_inspection.models.review import ClauseReview
from building_inspection.services import (
    checklist_item_service,
    clause_review_service,
    document_service,
    navigation_service,
)
from building_inspection.services.finalization_gate import (
    CLAUSE_REVIEW_COMPLETION_THRESHOLD,
    can_finalize_inspection,
    can_finalize_project,
    complete_inspection,
)

SECTION_BLOCKER = "Section progress: 0 of 3 sections completed (2 required)"


def _advance(inspection_id, steps=2):
    for _ in range(steps):
        navigation_service.navigate(inspection_id, "next")


def _clause_inspection(project):
    out = navigation_service.start_inspection({
        "project_id": project.id, "checklist_id": "test-house", "mode": "CLAUSE_REVIEW",
    })
    _advance(out["id"])
    return out["id"]


def _reviews(inspection_id, resolved, unresolved):
    """Create *resolved* reviews with observations and *unresolved* without."""
    for n in range(resolved + unresolved):
        clause = clause_review_service.create_clause({"code": f"B{n + 1}", "title": f"Clause {n + 1}"})
        data = {"observations": "Sound"} if n < resolved else {}
        clause_review_service.create_review(inspection_id, clause["id"], data)


def _na_without_reason(inspection_id, clause_id):
    """Store an NA review with no reason, as a row written outside the service would be."""
    _db.session.add(ClauseReview(inspection_id=inspection_id, clause_id=clause_id, applicability="NA"))
    _db.session.commit()


class TestDocumentBlockers:
    def test_outstanding_listed_before_required(self, project, inspection):
        document_service.create_document(project.id, {
            "document_type": "PS3", "description": "Framing", "status": "REQUIRED",
        })
        document_service.create_document(project.id, {
            "document_type": "COC", "description": "Wiring", "status": "OUTSTANDING",
        })
        document_service.create_document(project.id, {
            "document_type": "ESC", "description": "Safety", "status": "RECEIVED",
        })

        gate = can_finalize_inspection(inspection["id"])
        assert gate["can_finalize"] is False
        assert gate["blockers"] == [
            "COC: Wiring (OUTSTANDING)",
            "PS3: Framing (REQUIRED)",
            SECTION_BLOCKER,
        ]

    def test_project_gate_is_documents_only(self, project, inspection):
        assert can_finalize_project(project.id) == {"can_finalize": True, "blockers": []}
        document_service.create_document(project.id, {
            "document_type": "PS3", "description": "Framing", "status": "REQUIRED",
        })
        doc = document_service.create_document(project.id, {
            "document_type": "COC", "description": "Wiring", "status": "NA",
        })
        assert can_finalize_project(project.id)["blockers"] == ["PS3: Framing (REQUIRED)"]
        document_service.mark_as_received(doc["id"])
        assert len(can_finalize_project(project.id)["blockers"]) == 1

    def test_project_gate_unknown_project(self):
        with pytest.raises(NotFoundError):
            can_finalize_project("missing")


class TestSimpleMode:
    def test_fail_without_notes_blocks(self, inspection):
        checklist_item_service.create_item(inspection["id"], {
            "category": "EXTERIOR", "item": "Cladding", "decision": "FAIL",
        })
        checklist_item_service.create_item(inspection["id"], {
            "category": "INTERIOR", "item": "Linings", "decision": "FAIL", "notes": "Stained",
        })
        _advance(inspection["id"])
        gate = can_finalize_inspection(inspection["id"])
        assert gate["blockers"] == ["EXTERIOR: Cladding (FAIL)"]
        assert gate["clause_review_completion"] is None

    def test_items_ahead_of_section_gate(self, inspection):
        checklist_item_service.create_item(inspection["id"], {
            "category": "SITE", "item": "Drainage", "decision": "FAIL",
        })
        assert can_finalize_inspection(inspection["id"])["blockers"] == [
            "SITE: Drainage (FAIL)", SECTION_BLOCKER,
        ]

    def test_open_gate(self, inspection):
        _advance(inspection["id"])
        gate = can_finalize_inspection(inspection["id"])
        assert gate["can_finalize"] is True
        assert gate["blockers"] == []
        assert gate["section_progress"] == {"completed": 2, "total": 3, "percentage": 67}


class TestSectionGate:
    def test_one_of_three_is_not_enough(self, inspection):
        _advance(inspection["id"], steps=1)
        assert can_finalize_inspection(inspection["id"])["blockers"] == [
            "Section progress: 1 of 3 sections completed (2 required)",
        ]

    def test_skipped_sections_count(self, inspection):
        navigation_service.navigate(inspection["id"], "skip")
        navigation_service.navigate(inspection["id"], "skip")
        assert can_finalize_inspection(inspection["id"])["can_finalize"] is True

    def test_empty_checklist_has_no_section_gate(self):
        out = navigation_service.start_inspection({"checklist_id": "test-empty"})
        assert can_finalize_inspection(out["id"])["can_finalize"] is True


class TestClauseReviewMode:
    def test_na_without_reason_blocks(self, project):
        inspection_id = _clause_inspection(project)
        clause = clause_review_service.create_clause({"code": "E2", "title": "External moisture"})
        _na_without_reason(inspection_id, clause["id"])
        gate = can_finalize_inspection(inspection_id)
        assert gate["blockers"] == [
            "E2: External moisture (NA)",
            "Clause review completion: 0% (80% required)",
        ]

    @pytest.mark.parametrize("resolved,unresolved,pct,allowed", [
        (4, 1, 80, True),
        (15, 4, 79, False),
        (2, 1, 67, False),
        (3, 0, 100, True),
    ])
    def test_completion_threshold(self, project, resolved, unresolved, pct, allowed):
        inspection_id = _clause_inspection(project)
        _reviews(inspection_id, resolved, unresolved)
        gate = can_finalize_inspection(inspection_id)
        assert gate["clause_review_completion"] == pct
        assert gate["can_finalize"] is allowed
        if not allowed:
            assert gate["blockers"] == [
                f"Clause review completion: {pct}% ({CLAUSE_REVIEW_COMPLETION_THRESHOLD}% required)",
            ]

    def test_no_reviews_blocks(self, project):
        inspection_id = _clause_inspection(project)
        assert can_finalize_inspection(inspection_id)["blockers"] == [
            "Clause review completion: 0% (80% required)",
        ]

    def test_full_blocker_order(self, project):
        out = navigation_service.start_inspection({
            "project_id": project.id, "checklist_id": "test-house", "mode": "CLAUSE_REVIEW",
        })
        document_service.create_document(project.id, {
            "document_type": "PS3", "description": "Framing", "status": "REQUIRED",
        })
        clause = clause_review_service.create_clause({"code": "B1", "title": "Structure"})
        _na_without_reason(out["id"], clause["id"])
        assert can_finalize_inspection(out["id"])["blockers"] == [
            "PS3: Framing (REQUIRED)",
            "B1: Structure (NA)",
            SECTION_BLOCKER,
            "Clause review completion: 0% (80% required)",
        ]


class TestCompleteInspection:
    def test_completes_when_gate_open(self, inspection):
        _advance(inspection["id"])
        out = complete_inspection(inspection["id"], actor="alice")
        assert out["status"] == "COMPLETED"
        assert out["completed_at"] is not None

    def test_blocked_completion_lists_blockers(self, inspection):
        with pytest.raises(ValidationError) as exc:
            complete_inspection(inspection["id"])
        assert exc.value.details["blockers"] == [SECTION_BLOCKER]
        assert navigation_service.get_status(inspection["id"])["status"] == "STARTED"

    def test_already_completed(self, inspection):
        _advance(inspection["id"])
        complete_inspection(inspection["id"])
        with pytest.raises(ValidationError):
            complete_inspection(inspection["id"])
