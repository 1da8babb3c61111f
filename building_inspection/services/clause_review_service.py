"""
Clause review service — building-code clause reference data and the
per-inspection clause-review assessments made in CLAUSE_REVIEW mode.

Rules:
  - An NA review always carries a reason on every write path;
    rows that reach the database NA without one still block finalization.
  - One review per (inspection, clause); duplicates raise ConflictError.
  - db.session.commit() happens only here.
"""

import logging
from pathlib import Path

import yaml
from flask import current_app

from building_inspection.core.exceptions import ConflictError, NotFoundError, ValidationError
from building_inspection.models import db
from building_inspection.models.audit import write_audit
from building_inspection.models.review import APPLICABILITY, CLAUSE_CATEGORIES
from building_inspection.repositories import (
    BuildingCodeClauseRepository,
    ClauseReviewRepository,
    InspectionRepository,
)
from building_inspection.services.completion_rules import is_blank
from building_inspection.services.progress_aggregator import summarize_clause_reviews
from building_inspection.utils.helpers import text_value

logger = logging.getLogger(__name__)

_clauses = BuildingCodeClauseRepository()
_reviews = ClauseReviewRepository()
_inspections = InspectionRepository()

CLAUSES_SEED_FILE = Path(__file__).resolve().parent.parent / "data" / "building_code_clauses.yaml"

_REVIEW_FIELDS = (
    "applicability", "na_reason", "observations", "photo_ids", "doc_ids",
    "docs_required", "remedial_works", "sort_order",
)


# ── Building-code clauses ───────────────────────────────────────────────────


def create_clause(data: dict) -> dict:
    code = text_value(data.get("code"), "code").upper()
    title = text_value(data.get("title"), "title")
    category = (text_value(data.get("category"), "category") or code[:1]).upper()
    if not code or not title:
        raise ValidationError("code and title are required.")
    if category not in CLAUSE_CATEGORIES:
        raise ValidationError(
            f"category must be one of: {', '.join(CLAUSE_CATEGORIES)}",
            details={"category": data.get("category")},
        )
    if _clauses.find_by_code(code) is not None:
        raise ConflictError("BuildingCodeClause", "code", code)

    clause = _clauses.create(
        code=code,
        title=title,
        category=category,
        performance_text=data.get("performance_text") or "",
        sort_order=data.get("sort_order", 0),
    )
    db.session.commit()
    logger.info("Building code clause created code=%s", code)
    return clause.to_dict()


def seed_clauses(path: str | Path | None = None) -> int:
    """Load the reference clauses from YAML; a no-op once any clause exists.

    Returns the number of clauses inserted.
    """
    if _clauses.find_all():
        logger.info("Building code clauses already seeded")
        return 0
    path = path or current_app.config.get("CLAUSES_SEED_FILE") or CLAUSES_SEED_FILE
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    rows = [
        {
            "code": str(raw["code"]).upper(),
            "title": raw["title"],
            "category": str(raw.get("category") or raw["code"])[:1].upper(),
            "performance_text": raw.get("performance_text", ""),
            "sort_order": raw.get("sort_order", 0),
        }
        for raw in data.get("clauses") or []
    ]
    _clauses.bulk_create(rows)
    db.session.commit()
    logger.info("Seeded %d building code clauses", len(rows))
    return len(rows)


def list_clauses(category: str | None = None) -> list[dict]:
    if category:
        return [c.to_dict() for c in _clauses.find_by_parent(category.upper())]
    return [c.to_dict() for c in _clauses.find_all()]


def get_clause_by_code(code: str) -> dict:
    clause = _clauses.find_by_code(code.upper())
    if clause is None:
        raise NotFoundError(resource="BuildingCodeClause", resource_id=code)
    return clause.to_dict()


# ── Reviews ─────────────────────────────────────────────────────────────────


def _validate(data: dict, current=None) -> dict:
    """Clean review fields; *current* is the stored row for a partial update.

    The resulting row must carry a na_reason whenever it is NA, whether the
    applicability, the reason or both come from *data*.
    """
    partial = current is not None
    clean = {k: data[k] for k in _REVIEW_FIELDS if k in data}

    if not partial or "applicability" in clean:
        applicability = (text_value(clean.get("applicability"), "applicability")
                         or "APPLICABLE").upper()
        if applicability not in APPLICABILITY:
            raise ValidationError(
                f"applicability must be one of: {', '.join(APPLICABILITY)}",
                details={"applicability": data.get("applicability")},
            )
        clean["applicability"] = applicability

    if "na_reason" in clean:
        clean["na_reason"] = text_value(clean["na_reason"], "na_reason") or None

    applicability = clean.get("applicability", getattr(current, "applicability", None))
    na_reason = clean.get("na_reason", getattr(current, "na_reason", None))
    if applicability == "NA" and is_blank(na_reason):
        raise ValidationError(
            "na_reason is required when applicability is NA.",
            details={"na_reason": data.get("na_reason")},
        )

    for key in ("photo_ids", "doc_ids"):
        if key in clean:
            clean[key] = list(clean[key] or [])
    return clean


def create_review(inspection_id: str, clause_id: str, data: dict | None = None) -> dict:
    _inspections.get(inspection_id)
    _clauses.get(clause_id)
    if _reviews.find_by_inspection_and_clause(inspection_id, clause_id) is not None:
        raise ConflictError("ClauseReview", "clause_id", clause_id)

    review = _reviews.create(inspection_id=inspection_id, clause_id=clause_id,
                             **_validate(data or {}))
    db.session.commit()
    logger.info("Clause review created id=%s inspection=%s clause=%s",
                review.id, inspection_id, clause_id)
    return review.to_dict()


def initialize_for_inspection(inspection_id: str, clause_ids: list[str]) -> list[dict]:
    """Create an APPLICABLE review for each clause not already reviewed."""
    _inspections.get(inspection_id)
    existing = {r.clause_id for r in _reviews.find_by_parent(inspection_id)}
    rows = []
    for position, clause_id in enumerate(clause_ids):
        if clause_id in existing:
            continue
        _clauses.get(clause_id)
        existing.add(clause_id)
        rows.append({
            "inspection_id": inspection_id,
            "clause_id": clause_id,
            "applicability": "APPLICABLE",
            "sort_order": position,
        })
    _reviews.bulk_create(rows)
    db.session.commit()
    logger.info("Clause reviews initialised inspection=%s created=%d", inspection_id, len(rows))
    return list_reviews(inspection_id)


def list_reviews(inspection_id: str, applicability: str | None = None) -> list[dict]:
    return [r.to_dict() for r in _reviews.find_by_parent(inspection_id, applicability=applicability)]


def get_review(review_id: str) -> dict:
    return _reviews.get(review_id).to_dict()


def update_review(review_id: str, data: dict) -> dict:
    review = _reviews.get(review_id)
    review = _reviews.update(review_id, **_validate(data, current=review))
    db.session.commit()
    return review.to_dict()


def delete_review(review_id: str) -> None:
    _reviews.delete(review_id)
    db.session.commit()
    logger.info("Clause review deleted id=%s", review_id)


def mark_as_na(review_id: str, na_reason: str, actor: str = "system") -> dict:
    na_reason = text_value(na_reason, "na_reason")
    if not na_reason:
        raise ValidationError("na_reason is required to mark a clause NA.")
    review = _reviews.get(review_id)
    old = review.applicability
    _reviews.update(review_id, applicability="NA", na_reason=na_reason)
    write_audit(
        entity_type="clause_review", entity_id=review_id, action="clause_review.mark_na",
        actor=actor, diff={"applicability": {"old": old, "new": "NA"}},
    )
    db.session.commit()
    logger.info("Clause review %s marked NA", review_id)
    return review.to_dict()


def mark_as_applicable(review_id: str, actor: str = "system") -> dict:
    review = _reviews.get(review_id)
    old = review.applicability
    _reviews.update(review_id, applicability="APPLICABLE", na_reason=None)
    write_audit(
        entity_type="clause_review", entity_id=review_id,
        action="clause_review.mark_applicable", actor=actor,
        diff={"applicability": {"old": old, "new": "APPLICABLE"}},
    )
    db.session.commit()
    logger.info("Clause review %s marked applicable", review_id)
    return review.to_dict()


def add_observation(review_id: str, observation: str) -> dict:
    """Append *observation*, separated from earlier text by a blank line."""
    observation = text_value(observation, "observation")
    if not observation:
        raise ValidationError("observation must not be blank.")
    review = _reviews.get(review_id)
    current = review.observations or ""
    combined = f"{current}\n\n{observation}" if current else observation
    _reviews.update(review_id, observations=combined)
    db.session.commit()
    return review.to_dict()


def get_grouped_by_category(inspection_id: str) -> dict[str, list[dict]]:
    grouped: dict[str, list[dict]] = {}
    for review in _reviews.find_by_parent(inspection_id):
        grouped.setdefault(review.clause.category, []).append(review.to_dict())
    return grouped


def get_summary(inspection_id: str) -> dict:
    _inspections.get(inspection_id)
    return summarize_clause_reviews(_reviews.find_by_parent(inspection_id))
