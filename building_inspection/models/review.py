"""
Building Inspection Platform
Reviewable-item models for inspections.

Models:
    - ChecklistItem: simple-mode PASS / FAIL / NA decision on one item.
    - BuildingCodeClause: building-code requirement (e.g. "B1", "E2").
    - ClauseReview: clause-review-mode assessment of one clause.
"""

from building_inspection.models import db
from building_inspection.models._helpers import _iso, _utcnow, _uuid

# ── Enumerations ─────────────────────────────────────────────────────────────

CHECKLIST_CATEGORIES = ("EXTERIOR", "INTERIOR", "DECKS", "SERVICES", "SITE")

DECISIONS = ("PASS", "FAIL", "NA")

CLAUSE_CATEGORIES = ("B", "C", "D", "E", "F", "G", "H")

APPLICABILITY = ("APPLICABLE", "NA")


class ChecklistItem(db.Model):
    """One decision recorded against a checklist item label."""

    __tablename__ = "checklist_items"
    __table_args__ = (
        db.Index("idx_checklist_item_inspection_category", "inspection_id", "category"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    inspection_id = db.Column(
        db.String(36),
        db.ForeignKey("inspections.id", ondelete="CASCADE"),
        nullable=False,
    )
    category = db.Column(db.String(20), nullable=False)
    item = db.Column(db.String(500), nullable=False)
    decision = db.Column(db.String(10), nullable=False, comment="PASS | FAIL | NA")
    notes = db.Column(db.Text, nullable=True)
    photo_ids = db.Column(db.JSON, nullable=False, default=list)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "inspection_id": self.inspection_id,
            "category": self.category,
            "item": self.item,
            "decision": self.decision,
            "notes": self.notes,
            "photo_ids": list(self.photo_ids or []),
            "sort_order": self.sort_order,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }


class BuildingCodeClause(db.Model):
    """Building-code clause reference data."""

    __tablename__ = "building_code_clauses"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    code = db.Column(db.String(20), nullable=False, unique=True)
    title = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(2), nullable=False, index=True)
    performance_text = db.Column(db.Text, nullable=False, default="")
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "title": self.title,
            "category": self.category,
            "performance_text": self.performance_text,
            "sort_order": self.sort_order,
        }


class ClauseReview(db.Model):
    """Inspector's review of one building-code clause within an inspection."""

    __tablename__ = "clause_reviews"
    __table_args__ = (
        db.UniqueConstraint("inspection_id", "clause_id", name="uq_clause_review_inspection_clause"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    inspection_id = db.Column(
        db.String(36),
        db.ForeignKey("inspections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    clause_id = db.Column(
        db.String(36),
        db.ForeignKey("building_code_clauses.id", ondelete="RESTRICT"),
        nullable=False,
    )
    applicability = db.Column(db.String(12), nullable=False, comment="APPLICABLE | NA")
    na_reason = db.Column(db.Text, nullable=True)
    observations = db.Column(db.Text, nullable=True)
    photo_ids = db.Column(db.JSON, nullable=False, default=list)
    doc_ids = db.Column(db.JSON, nullable=False, default=list)
    docs_required = db.Column(db.Text, nullable=True)
    remedial_works = db.Column(db.Text, nullable=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    clause = db.relationship("BuildingCodeClause", lazy="joined")

    def to_dict(self):
        return {
            "id": self.id,
            "inspection_id": self.inspection_id,
            "clause_id": self.clause_id,
            "clause": self.clause.to_dict() if self.clause else None,
            "applicability": self.applicability,
            "na_reason": self.na_reason,
            "observations": self.observations,
            "photo_ids": list(self.photo_ids or []),
            "doc_ids": list(self.doc_ids or []),
            "docs_required": self.docs_required,
            "remedial_works": self.remedial_works,
            "sort_order": self.sort_order,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
