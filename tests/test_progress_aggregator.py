"""
Completion rules and the Progress Aggregator — pure tests over plain dicts.

The fold is shared by all three item kinds; each kind is exercised through
its summarize_* helper plus the rounding and empty-denominator rules.
"""

import pytest

from building_inspection.services import completion_rules as rules
from building_inspection.services.progress_aggregator import (
    CHECKLIST_ITEMS,
    DOCUMENTS,
    aggregate,
    percentage,
    summarize_checklist_items,
    summarize_clause_reviews,
    summarize_documents,
)


def _item(decision, notes=None, category="EXTERIOR", item="Cladding"):
    return {"category": category, "item": item, "decision": decision, "notes": notes}


def _review(applicability, na_reason=None, observations=None, category="B", **extra):
    return {
        "applicability": applicability,
        "na_reason": na_reason,
        "observations": observations,
        "clause": {"category": category},
        **extra,
    }


def _doc(status, document_type="PS3"):
    return {"status": status, "document_type": document_type}


class TestPercentage:
    """Half-up integer rounding."""

    @pytest.mark.parametrize("part,whole,expected", [
        (2, 3, 67), (1, 3, 33), (1, 8, 13), (1, 2, 50), (0, 5, 0), (5, 5, 100),
    ])
    def test_rounding(self, part, whole, expected):
        assert percentage(part, whole) == expected

    def test_empty_denominator(self):
        assert percentage(0, 0) == 0
        assert percentage(0, 0, empty=100) == 100


class TestChecklistRules:
    """PASS, NA, and FAIL with notes resolve an item."""

    def test_resolved(self):
        assert rules.checklist_item_resolved(_item("PASS"))
        assert rules.checklist_item_resolved(_item("NA"))
        assert rules.checklist_item_resolved(_item("FAIL", "cracked"))

    def test_fail_without_notes(self):
        assert not rules.checklist_item_resolved(_item("FAIL"))
        assert not rules.checklist_item_resolved(_item("FAIL", "   "))
        assert rules.failed_without_notes(_item("FAIL", ""))


class TestChecklistSummary:
    """summarize_checklist_items()."""

    def test_counts_and_blocked_items(self):
        summary = summarize_checklist_items([
            _item("PASS"),
            _item("FAIL", "", item="Roof"),
            _item("NA", category="INTERIOR"),
        ])
        assert (summary["total"], summary["passed"], summary["failed"], summary["na"]) == (3, 1, 1, 1)
        assert summary["failed_items_without_notes"] == [{"id": None, "item": "Roof"}]
        assert summary["overall_result"] == "FAIL"
        assert summary["completion_percentage"] == 67
        assert summary["by_category"]["EXTERIOR"] == {"passed": 1, "failed": 1, "na": 0}
        assert summary["by_category"]["INTERIOR"] == {"passed": 0, "failed": 0, "na": 1}

    def test_empty_is_incomplete(self):
        summary = summarize_checklist_items([])
        assert summary["overall_result"] == "INCOMPLETE"
        assert summary["completion_percentage"] == 0
        assert summary["by_category"] == {}

    def test_all_pass_or_na(self):
        assert summarize_checklist_items([_item("PASS"), _item("NA")])["overall_result"] == "PASS"

    def test_resolved_never_exceeds_total(self):
        s = aggregate([_item("PASS"), _item("FAIL"), _item("FAIL", "x")], CHECKLIST_ITEMS)
        assert s.resolved <= s.total
        assert len(s.unresolved) == 1


class TestClauseReviewRules:
    """NA needs a reason; APPLICABLE needs observations."""

    def test_resolved(self):
        assert rules.clause_review_resolved(_review("NA", na_reason="No deck"))
        assert rules.clause_review_resolved(_review("APPLICABLE", observations="Sound"))

    def test_unresolved(self):
        assert not rules.clause_review_resolved(_review("NA"))
        assert not rules.clause_review_resolved(_review("APPLICABLE", observations="  "))
        assert rules.na_without_reason(_review("NA", na_reason=""))


class TestClauseReviewSummary:
    """summarize_clause_reviews()."""

    def test_summary(self):
        summary = summarize_clause_reviews([
            _review("APPLICABLE", observations="ok", photo_ids=["p1"], remedial_works="Reseal"),
            _review("APPLICABLE", category="E", doc_ids=["d1"]),
            _review("NA", na_reason="Not present", category="E"),
            _review("NA", category="G"),
        ])
        assert summary["total"] == 4
        assert summary["applicable"] == 2
        assert summary["na"] == 2
        assert summary["with_observations"] == 1
        assert summary["with_photos"] == 1
        assert summary["with_docs"] == 1
        assert summary["needing_remedial_works"] == 1
        assert summary["completion_percentage"] == 50
        assert summary["by_category"]["E"] == {"applicable": 1, "na": 1}

    def test_empty(self):
        assert summarize_clause_reviews([])["completion_percentage"] == 0

    def test_mixed_reviews_counts(self):
        summary = summarize_clause_reviews([
            _review("APPLICABLE", observations="Sound"),
            _review("APPLICABLE", observations=None),
            _review("NA", na_reason="No decks"),
            _review("APPLICABLE", observations="Rot at sill", photo_ids=["p1"],
                    remedial_works="Replace sill"),
        ])
        assert summary["total"] == 4
        assert summary["applicable"] == 3
        assert summary["na"] == 1
        assert summary["with_observations"] == 2
        assert summary["with_photos"] == 1
        assert summary["needing_remedial_works"] == 1
        assert summary["completion_percentage"] == 75


class TestDocumentSummary:
    """NA documents are left out of the denominator."""

    def test_na_excluded_from_denominator(self):
        summary = summarize_documents([
            _doc("RECEIVED"), _doc("RECEIVED"), _doc("OUTSTANDING"), _doc("NA"),
        ])
        assert summary["completion_percentage"] == 67
        assert summary["by_status"] == {"REQUIRED": 0, "RECEIVED": 2, "OUTSTANDING": 1, "NA": 1}

    def test_required_and_outstanding_both_owed(self):
        summary = summarize_documents([
            _doc("RECEIVED"), _doc("RECEIVED", "COC"), _doc("OUTSTANDING"),
            _doc("REQUIRED", "COC"), _doc("NA"),
        ])
        assert summary["completion_percentage"] == 50
        assert summary["required"] == 2
        assert summary["received"] == 2
        assert summary["outstanding"] == 1
        assert summary["by_type"] == {"PS3": 3, "COC": 2}

    def test_empty_or_all_na_is_complete(self):
        assert summarize_documents([])["completion_percentage"] == 100
        assert summarize_documents([_doc("NA")])["completion_percentage"] == 100

    def test_resolved_predicates(self):
        assert rules.document_resolved(_doc("NA"))
        assert rules.document_outstanding(_doc("REQUIRED"))
        s = aggregate([_doc("NA"), _doc("REQUIRED")], DOCUMENTS)
        assert (s.total, s.denominator, s.resolved) == (2, 1, 0)
