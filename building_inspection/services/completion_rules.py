"""
Completion rules — one pure "is resolved" predicate per reviewable-item kind.

Each predicate reads only the item's own fields, so it can be applied to
ORM rows, plain dicts or test doubles alike (anything exposing the same
attribute names).

    checklist item : PASS, NA, or FAIL with non-blank notes
    clause review  : NA with a reason, or APPLICABLE with non-blank observations
    document       : RECEIVED or NA
"""

RESOLVED_DOCUMENT_STATUSES = frozenset({"RECEIVED", "NA"})
OUTSTANDING_DOCUMENT_STATUSES = frozenset({"REQUIRED", "OUTSTANDING"})


def field_of(item, name):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def is_blank(value) -> bool:
    return value is None or not str(value).strip()


# ── Checklist items ─────────────────────────────────────────────────────────


def failed_without_notes(item) -> bool:
    """FAIL decisions must explain themselves; these block finalization."""
    return field_of(item, "decision") == "FAIL" and is_blank(field_of(item, "notes"))


def checklist_item_resolved(item) -> bool:
    decision = field_of(item, "decision")
    if decision in ("PASS", "NA"):
        return True
    if decision == "FAIL":
        return not is_blank(field_of(item, "notes"))
    return False


# ── Clause reviews ──────────────────────────────────────────────────────────


def na_without_reason(review) -> bool:
    return field_of(review, "applicability") == "NA" and is_blank(field_of(review, "na_reason"))


def clause_review_resolved(review) -> bool:
    applicability = field_of(review, "applicability")
    if applicability == "NA":
        return not is_blank(field_of(review, "na_reason"))
    if applicability == "APPLICABLE":
        return not is_blank(field_of(review, "observations"))
    return False


# ── Documents ───────────────────────────────────────────────────────────────


def document_resolved(document) -> bool:
    return field_of(document, "status") in RESOLVED_DOCUMENT_STATUSES


def document_outstanding(document) -> bool:
    return field_of(document, "status") in OUTSTANDING_DOCUMENT_STATUSES
