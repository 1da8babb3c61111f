"""
Reviewable-item services — checklist items, clause reviews, documents, findings.
"""

import pytest
from sqlalchemy import select

from building_inspection.core.exceptions import (
    ConflictError,
    InvalidSectionError,
    NotFoundError,
    ValidationError,
)
from building_inspection.models import db
from building_inspection.models.audit import AuditLog
from building_inspection.services import (
    checklist_item_service,
    clause_review_service,
    document_service,
    finding_service,
    project_service,
)


def _actions(entity_id):
    stmt = select(AuditLog.action).where(AuditLog.entity_id == entity_id).order_by(AuditLog.id)
    return list(db.session.execute(stmt).scalars())


# ═════════════════════════════════════════════════════════════════════════════
# Checklist items
# ═════════════════════════════════════════════════════════════════════════════


class TestChecklistItems:
    def test_create_normalises_enums(self, inspection):
        item = checklist_item_service.create_item(inspection["id"], {
            "category": "exterior", "item": "  Cladding ", "decision": "pass",
        })
        assert (item["category"], item["item"], item["decision"]) == ("EXTERIOR", "Cladding", "PASS")

    @pytest.mark.parametrize("data", [
        {"category": "ATTIC", "item": "x", "decision": "PASS"},
        {"category": "SITE", "item": "x", "decision": "MAYBE"},
        {"category": "SITE", "item": "  ", "decision": "PASS"},
        {"category": 5, "item": "x", "decision": "PASS"},
        {"category": "SITE", "item": ["x"], "decision": "PASS"},
    ])
    def test_create_rejects_invalid(self, inspection, data):
        with pytest.raises(ValidationError):
            checklist_item_service.create_item(inspection["id"], data)

    def test_unknown_inspection(self):
        with pytest.raises(NotFoundError):
            checklist_item_service.create_item("missing", {
                "category": "SITE", "item": "x", "decision": "PASS",
            })

    def test_bulk_create_and_filter(self, inspection):
        checklist_item_service.bulk_create(inspection["id"], [
            {"category": "SITE", "item": "Drainage", "decision": "PASS", "sort_order": 0},
            {"category": "SITE", "item": "Fences", "decision": "FAIL", "sort_order": 1},
            {"category": "DECKS", "item": "Balustrade", "decision": "NA", "sort_order": 2},
        ])
        assert len(checklist_item_service.list_items(inspection["id"])) == 3
        failed = checklist_item_service.list_items(inspection["id"], decision="FAIL")
        assert [i["item"] for i in failed] == ["Fences"]
        grouped = checklist_item_service.get_grouped_by_category(inspection["id"])
        assert sorted(grouped) == ["DECKS", "SITE"]
        assert len(grouped["SITE"]) == 2

    def test_partial_update(self, inspection):
        item = checklist_item_service.create_item(inspection["id"], {
            "category": "SITE", "item": "Drainage", "decision": "FAIL",
        })
        out = checklist_item_service.update_item(item["id"], {"notes": "Ponding by garage"})
        assert out["decision"] == "FAIL"
        assert out["notes"] == "Ponding by garage"
        with pytest.raises(ValidationError):
            checklist_item_service.update_item(item["id"], {"decision": "SORT_OF"})

    def test_reorder(self, inspection):
        a = checklist_item_service.create_item(inspection["id"], {
            "category": "SITE", "item": "A", "decision": "PASS",
        })
        b = checklist_item_service.create_item(inspection["id"], {
            "category": "SITE", "item": "B", "decision": "PASS",
        })
        out = checklist_item_service.reorder(inspection["id"], [b["id"], a["id"]])
        assert [i["item"] for i in out] == ["B", "A"]
        with pytest.raises(NotFoundError):
            checklist_item_service.reorder(inspection["id"], ["not-mine"])

    def test_delete(self, inspection):
        item = checklist_item_service.create_item(inspection["id"], {
            "category": "SITE", "item": "A", "decision": "PASS",
        })
        checklist_item_service.delete_item(item["id"])
        with pytest.raises(NotFoundError):
            checklist_item_service.get_item(item["id"])

    def test_summary(self, inspection):
        created = checklist_item_service.bulk_create(inspection["id"], [
            {"category": "SITE", "item": "Drainage", "decision": "PASS"},
            {"category": "SITE", "item": "Fences", "decision": "FAIL"},
            {"category": "DECKS", "item": "Fences", "decision": "FAIL"},
        ])
        summary = checklist_item_service.get_summary(inspection["id"])
        assert summary["total"] == 3
        assert summary["completion_percentage"] == 33
        blocked = summary["failed_items_without_notes"]
        assert {b["id"] for b in blocked} == {created[1]["id"], created[2]["id"]}
        assert {b["item"] for b in blocked} == {"Fences"}


# ═════════════════════════════════════════════════════════════════════════════
# Building-code clauses & clause reviews
# ═════════════════════════════════════════════════════════════════════════════


@pytest.fixture()
def clause():
    return clause_review_service.create_clause({"code": "e2", "title": "External moisture"})


@pytest.fixture()
def review(inspection, clause):
    return clause_review_service.create_review(inspection["id"], clause["id"])


class TestClauses:
    def test_create_derives_category(self, clause):
        assert clause["code"] == "E2"
        assert clause["category"] == "E"

    def test_duplicate_code(self, clause):
        with pytest.raises(ConflictError):
            clause_review_service.create_clause({"code": "E2", "title": "Again"})

    def test_invalid_category(self):
        with pytest.raises(ValidationError):
            clause_review_service.create_clause({"code": "Z1", "title": "Nope"})

    def test_lookup_by_code(self, clause):
        assert clause_review_service.get_clause_by_code("e2")["id"] == clause["id"]
        with pytest.raises(NotFoundError):
            clause_review_service.get_clause_by_code("X9")

    def test_seed_is_idempotent(self):
        inserted = clause_review_service.seed_clauses()
        assert inserted > 0
        assert clause_review_service.seed_clauses() == 0
        codes = {c["code"] for c in clause_review_service.list_clauses()}
        assert {"B1", "E2"} <= codes

    def test_seed_skipped_when_any_clause_exists(self, clause):
        assert clause_review_service.seed_clauses() == 0
        assert [c["code"] for c in clause_review_service.list_clauses()] == ["E2"]
        assert all(c["category"] == "E" for c in clause_review_service.list_clauses("e"))

    def test_seed_from_custom_file(self, tmp_path):
        path = tmp_path / "clauses.yaml"
        path.write_text(
            "clauses:\n"
            "  - code: g12\n"
            "    title: Water supplies\n",
            encoding="utf-8",
        )
        assert clause_review_service.seed_clauses(path) == 1
        assert clause_review_service.get_clause_by_code("G12")["category"] == "G"


class TestClauseReviews:
    def test_create_defaults_applicable(self, review, clause):
        assert review["applicability"] == "APPLICABLE"
        assert review["clause"]["code"] == "E2"

    def test_duplicate_review(self, inspection, clause, review):
        with pytest.raises(ConflictError):
            clause_review_service.create_review(inspection["id"], clause["id"])

    def test_initialize_skips_existing(self, inspection, clause, review):
        other = clause_review_service.create_clause({"code": "B1", "title": "Structure"})
        out = clause_review_service.initialize_for_inspection(
            inspection["id"], [clause["id"], other["id"], other["id"]],
        )
        assert len(out) == 2

    def test_mark_na_requires_reason(self, review):
        with pytest.raises(ValidationError):
            clause_review_service.mark_as_na(review["id"], "  ")
        out = clause_review_service.mark_as_na(review["id"], " No cladding ")
        assert out["applicability"] == "NA"
        assert out["na_reason"] == "No cladding"
        assert _actions(review["id"]) == ["clause_review.mark_na"]

    def test_mark_applicable_clears_reason(self, review):
        clause_review_service.mark_as_na(review["id"], "No cladding")
        out = clause_review_service.mark_as_applicable(review["id"])
        assert out["applicability"] == "APPLICABLE"
        assert out["na_reason"] is None

    def test_add_observation_appends(self, review):
        clause_review_service.add_observation(review["id"], "Cracked render")
        out = clause_review_service.add_observation(review["id"], "Moisture reading 22%")
        assert out["observations"] == "Cracked render\n\nMoisture reading 22%"
        with pytest.raises(ValidationError):
            clause_review_service.add_observation(review["id"], "")

    def test_update_to_na_requires_reason(self, review):
        with pytest.raises(ValidationError):
            clause_review_service.update_review(review["id"], {"applicability": "na"})
        out = clause_review_service.update_review(
            review["id"], {"applicability": "na", "na_reason": "  No cladding "},
        )
        assert (out["applicability"], out["na_reason"]) == ("NA", "No cladding")

    def test_update_cannot_clear_reason_of_na_row(self, review):
        clause_review_service.mark_as_na(review["id"], "No cladding")
        with pytest.raises(ValidationError):
            clause_review_service.update_review(review["id"], {"na_reason": "   "})
        out = clause_review_service.update_review(review["id"], {"observations": "Checked"})
        assert out["na_reason"] == "No cladding"

    def test_create_na_requires_reason(self, inspection):
        clause = clause_review_service.create_clause({"code": "H1", "title": "Energy efficiency"})
        with pytest.raises(ValidationError) as exc:
            clause_review_service.create_review(inspection["id"], clause["id"], {"applicability": "NA"})
        assert "na_reason" in exc.value.details
        out = clause_review_service.create_review(
            inspection["id"], clause["id"], {"applicability": "NA", "na_reason": "Unheated shed"},
        )
        assert out["na_reason"] == "Unheated shed"

    def test_non_string_reason_rejected(self, review):
        with pytest.raises(ValidationError):
            clause_review_service.mark_as_na(review["id"], 5)

    def test_grouped_and_summary(self, inspection, review):
        clause_review_service.add_observation(review["id"], "Sound")
        grouped = clause_review_service.get_grouped_by_category(inspection["id"])
        assert list(grouped) == ["E"]
        summary = clause_review_service.get_summary(inspection["id"])
        assert summary["total"] == 1
        assert summary["completion_percentage"] == 100


# ═════════════════════════════════════════════════════════════════════════════
# Documents
# ═════════════════════════════════════════════════════════════════════════════


class TestDocuments:
    def test_defaults(self, project):
        doc = document_service.create_document(project.id, {
            "document_type": "ps3", "description": "Cladding installer",
        })
        assert doc["status"] == "RECEIVED"
        assert doc["document_type"] == "PS3"
        assert doc["linked_clauses"] == ["B1", "E2", "E3", "G12", "G13"]
        assert doc["verified"] is False

    def test_explicit_links_kept(self, project):
        doc = document_service.create_document(project.id, {
            "document_type": "COC", "description": "Wiring", "linked_clauses": ["G9", "C1"],
        })
        assert doc["linked_clauses"] == ["G9", "C1"]

    @pytest.mark.parametrize("data", [
        {"document_type": "PS3", "description": " "},
        {"document_type": "MEMO", "description": "x"},
        {"description": "x"},
        {"document_type": "PS3", "description": "x", "status": "LOST"},
        {"document_type": ["PS3"], "description": "x"},
        {"document_type": "PS3", "description": 3},
    ])
    def test_create_rejects_invalid(self, project, data):
        with pytest.raises(ValidationError):
            document_service.create_document(project.id, data)

    def test_status_changes_are_audited(self, project):
        doc = document_service.create_document(project.id, {
            "document_type": "COC", "description": "Wiring", "status": "REQUIRED",
        })
        document_service.mark_as_outstanding(doc["id"])
        document_service.mark_as_received(doc["id"])
        out = document_service.verify(doc["id"])
        assert out["status"] == "RECEIVED"
        assert out["verified"] is True
        assert _actions(doc["id"]) == ["document.status", "document.status", "document.verify"]

    def test_set_status_rejects_unknown(self, project):
        doc = document_service.create_document(project.id, {
            "document_type": "COC", "description": "Wiring",
        })
        with pytest.raises(ValidationError):
            document_service.set_status(doc["id"], "LOST")
        with pytest.raises(ValidationError):
            document_service.set_status(doc["id"], 7)

    def test_outstanding_and_required_lists(self, project):
        for status in ("REQUIRED", "OUTSTANDING", "RECEIVED", "NA"):
            document_service.create_document(project.id, {
                "document_type": "OTHER", "description": status.title(), "status": status,
            })
        assert [d["status"] for d in document_service.get_outstanding(project.id)] == ["OUTSTANDING"]
        assert [d["status"] for d in document_service.get_required(project.id)] == ["REQUIRED"]
        summary = document_service.get_summary(project.id)
        assert summary["completion_percentage"] == 33
        assert summary["required"] == 2

    def test_link_clauses_uppercases(self, project):
        doc = document_service.create_document(project.id, {
            "document_type": "OTHER", "description": "Plans",
        })
        assert document_service.link_clauses(doc["id"], ["b1", "e2"])["linked_clauses"] == ["B1", "E2"]
        with pytest.raises(ValidationError):
            document_service.link_clauses(doc["id"], "b1")
        with pytest.raises(ValidationError):
            document_service.link_clauses(doc["id"], [1])


# ═════════════════════════════════════════════════════════════════════════════
# Findings & projects
# ═════════════════════════════════════════════════════════════════════════════


class TestFindings:
    def test_defaults_to_current_section(self, inspection):
        finding = finding_service.create_finding(inspection["id"], {"text": "Peeling paint"})
        assert finding["section"] == "exterior"
        assert finding["severity"] == "INFO"

    def test_unknown_section(self, inspection):
        with pytest.raises(InvalidSectionError):
            finding_service.create_finding(inspection["id"], {"section": "attic", "text": "x"})

    def test_validation(self, inspection):
        with pytest.raises(ValidationError):
            finding_service.create_finding(inspection["id"], {"text": ""})
        with pytest.raises(ValidationError):
            finding_service.create_finding(inspection["id"], {"text": "x", "severity": "HUGE"})

    def test_update_and_filter(self, inspection):
        finding = finding_service.create_finding(inspection["id"], {"text": "Rust"})
        finding_service.update_finding(finding["id"], {"section": "roof", "severity": "major"})
        roof = finding_service.list_findings(inspection["id"], section="roof")
        assert [(f["text"], f["severity"]) for f in roof] == [("Rust", "MAJOR")]
        with pytest.raises(InvalidSectionError):
            finding_service.update_finding(finding["id"], {"section": "attic"})

    def test_delete(self, inspection):
        finding = finding_service.create_finding(inspection["id"], {"text": "Rust"})
        finding_service.delete_finding(finding["id"])
        assert finding_service.list_findings(inspection["id"]) == []


class TestProjects:
    def test_create_and_get(self, inspection, project):
        out = project_service.get_project(project.id)
        assert [i["id"] for i in out["inspections"]] == [inspection["id"]]

    def test_name_required(self):
        with pytest.raises(ValidationError):
            project_service.create_project({"name": " "})

    def test_update_status(self):
        p = project_service.create_project({"name": "7 Hill St", "address": "7 Hill St"})
        assert project_service.update_project(p["id"], {"status": "ARCHIVED"})["status"] == "ARCHIVED"
        with pytest.raises(ValidationError):
            project_service.update_project(p["id"], {"status": "GONE"})
        assert [x["id"] for x in project_service.list_projects(status="ARCHIVED")] == [p["id"]]
