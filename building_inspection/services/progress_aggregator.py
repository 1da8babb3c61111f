"""
Progress Aggregator — one fold shared by every reviewable-item kind.

A kind is described once as an ItemKind (category key, resolved predicate,
denominator rule, named counters, per-category counters and the percentage
reported for an empty denominator). ``aggregate`` folds any sequence of
items through it; the ``summarize_*`` helpers shape the result into the
per-kind summary dicts returned by the item services.

Percentages are integers rounded half-up: 2/3 -> 67, 1/8 -> 13.

Usage:
    from building_inspection.services.progress_aggregator import (
        CHECKLIST_ITEMS, aggregate, summarize_checklist_items,
    )
    summary = aggregate(items, CHECKLIST_ITEMS)
    summary.completion_percentage
"""

import math
from dataclasses import dataclass, field
from fractions import Fraction
from typing import Any, Callable

from building_inspection.models.document import DOCUMENT_STATUSES
from building_inspection.services import completion_rules as rules

Predicate = Callable[[Any], bool]


def percentage(part: int, whole: int, empty: int = 0) -> int:
    """round(part / whole * 100) with halves rounded up; *empty* when whole is 0."""
    if whole == 0:
        return empty
    return math.floor(Fraction(part * 100, whole) + Fraction(1, 2))


@dataclass(frozen=True)
class ItemKind:
    name: str
    category_of: Callable[[Any], str]
    is_resolved: Predicate
    in_denominator: Predicate = lambda item: True
    counters: dict[str, Predicate] = field(default_factory=dict)
    category_counters: dict[str, Predicate] = field(default_factory=dict)
    empty_percentage: int = 0


@dataclass
class Summary:
    kind: str
    total: int = 0
    counts: dict[str, int] = field(default_factory=dict)
    by_category: dict[str, dict[str, int]] = field(default_factory=dict)
    resolved: int = 0
    denominator: int = 0
    completion_percentage: int = 0
    unresolved: list = field(default_factory=list)


def aggregate(items, kind: ItemKind) -> Summary:
    """Fold *items* into a Summary according to *kind*.

    Categories appear in ``by_category`` only once an item of that category
    has been seen; callers should compare by key, not by position.
    """
    summary = Summary(kind=kind.name, counts={name: 0 for name in kind.counters})

    for item in items:
        summary.total += 1

        for name, predicate in kind.counters.items():
            if predicate(item):
                summary.counts[name] += 1

        bucket = summary.by_category.get(kind.category_of(item))
        if bucket is None:
            bucket = {name: 0 for name in kind.category_counters}
            summary.by_category[kind.category_of(item)] = bucket
        for name, predicate in kind.category_counters.items():
            if predicate(item):
                bucket[name] += 1

        if not kind.in_denominator(item):
            continue
        summary.denominator += 1
        if kind.is_resolved(item):
            summary.resolved += 1
        else:
            summary.unresolved.append(item)

    summary.completion_percentage = percentage(
        summary.resolved, summary.denominator, empty=kind.empty_percentage,
    )
    return summary


# ── Kinds ───────────────────────────────────────────────────────────────────


def _attr(name):
    return lambda item: rules.field_of(item, name)


def _equals(name, value):
    return lambda item: rules.field_of(item, name) == value


def _present(name):
    return lambda item: not rules.is_blank(rules.field_of(item, name))


def _non_empty_list(name):
    return lambda item: bool(rules.field_of(item, name))


def _clause_category(review):
    clause = rules.field_of(review, "clause")
    if clause is not None:
        return rules.field_of(clause, "category")
    return rules.field_of(review, "category")


CHECKLIST_ITEMS = ItemKind(
    name="checklist_item",
    category_of=_attr("category"),
    is_resolved=rules.checklist_item_resolved,
    counters={
        "passed": _equals("decision", "PASS"),
        "failed": _equals("decision", "FAIL"),
        "na": _equals("decision", "NA"),
    },
    category_counters={
        "passed": _equals("decision", "PASS"),
        "failed": _equals("decision", "FAIL"),
        "na": _equals("decision", "NA"),
    },
)

CLAUSE_REVIEWS = ItemKind(
    name="clause_review",
    category_of=_clause_category,
    is_resolved=rules.clause_review_resolved,
    counters={
        "applicable": _equals("applicability", "APPLICABLE"),
        "na": _equals("applicability", "NA"),
        "with_observations": _present("observations"),
        "with_photos": _non_empty_list("photo_ids"),
        "with_docs": _non_empty_list("doc_ids"),
        "needing_remedial_works": _present("remedial_works"),
    },
    category_counters={
        "applicable": _equals("applicability", "APPLICABLE"),
        "na": _equals("applicability", "NA"),
    },
)

DOCUMENTS = ItemKind(
    name="document",
    category_of=_attr("document_type"),
    is_resolved=rules.document_resolved,
    in_denominator=lambda doc: rules.field_of(doc, "status") != "NA",
    counters={
        "REQUIRED": _equals("status", "REQUIRED"),
        "RECEIVED": _equals("status", "RECEIVED"),
        "OUTSTANDING": _equals("status", "OUTSTANDING"),
        "NA": _equals("status", "NA"),
        # still owed, whether merely required or chased as outstanding
        "required": rules.document_outstanding,
    },
    category_counters={"count": lambda doc: True},
    empty_percentage=100,
)


# ── Per-kind summaries ──────────────────────────────────────────────────────


def summarize_checklist_items(items) -> dict:
    items = list(items)
    s = aggregate(items, CHECKLIST_ITEMS)
    passed, failed, na = s.counts["passed"], s.counts["failed"], s.counts["na"]

    if s.total == 0:
        overall = "INCOMPLETE"
    elif failed > 0:
        overall = "FAIL"
    elif passed + na == s.total:
        overall = "PASS"
    else:
        overall = "INCOMPLETE"

    return {
        "total": s.total,
        "passed": passed,
        "failed": failed,
        "na": na,
        "by_category": s.by_category,
        "failed_items_without_notes": [
            {"id": rules.field_of(i, "id"), "item": rules.field_of(i, "item")}
            for i in items if rules.failed_without_notes(i)
        ],
        "overall_result": overall,
        "completion_percentage": s.completion_percentage,
    }


def summarize_clause_reviews(reviews) -> dict:
    s = aggregate(reviews, CLAUSE_REVIEWS)
    return {
        "total": s.total,
        **s.counts,
        "by_category": s.by_category,
        "completion_percentage": s.completion_percentage,
    }


def summarize_documents(documents) -> dict:
    s = aggregate(documents, DOCUMENTS)
    by_status = {status: s.counts[status] for status in DOCUMENT_STATUSES}
    return {
        "total": s.total,
        "by_status": by_status,
        "by_type": {doc_type: bucket["count"] for doc_type, bucket in s.by_category.items()},
        "required": s.counts["required"],
        "received": s.counts["RECEIVED"],
        "outstanding": s.counts["OUTSTANDING"],
        "completion_percentage": s.completion_percentage,
    }
