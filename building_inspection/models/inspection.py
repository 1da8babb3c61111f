"""
Building Inspection Platform
Inspection domain models.

Models:
    - Inspection: one inspection session walking a checklist's sections.
    - Finding: an inspector's free-text observation tied to a section.

Section state machine (see services/section_navigator.py):
    pending -> in_progress -> completed | skipped
"""

from building_inspection.models import db
from building_inspection.models._helpers import _iso, _utcnow, _uuid

# ── Constants ────────────────────────────────────────────────────────────────

INSPECTION_STATUSES = ("STARTED", "IN_PROGRESS", "COMPLETED")

INSPECTION_MODES = ("SIMPLE", "CLAUSE_REVIEW")

SECTION_STATUSES = ("pending", "in_progress", "completed", "skipped")

# Sections in these states count toward progress and are never re-counted.
TERMINAL_SECTION_STATUSES = frozenset({"completed", "skipped"})

FINDING_SEVERITIES = ("INFO", "MINOR", "MAJOR", "URGENT")


class Inspection(db.Model):
    """One inspection session.

    ``section_states`` maps section id -> SECTION_STATUSES value and is
    replaced wholesale on every navigation write. ``version`` is the
    optimistic-lock counter: two callers racing a read-modify-write on the
    same row get a StaleDataError on the second flush instead of a lost update.
    """

    __tablename__ = "inspections"
    __table_args__ = (
        db.Index("idx_inspection_project", "project_id"),
        db.Index("idx_inspection_status", "status"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    project_id = db.Column(
        db.String(36),
        db.ForeignKey("projects.id", ondelete="SET NULL"),
        nullable=True,
    )
    checklist_id = db.Column(db.String(100), nullable=False)
    mode = db.Column(
        db.String(20), nullable=False, default="SIMPLE",
        comment="SIMPLE | CLAUSE_REVIEW",
    )
    address = db.Column(db.String(500), nullable=False, default="")
    client_name = db.Column(db.String(200), nullable=False, default="")
    inspector_name = db.Column(db.String(200), nullable=True)
    status = db.Column(
        db.String(20), nullable=False, default="STARTED",
        comment="STARTED | IN_PROGRESS | COMPLETED",
    )
    current_section = db.Column(db.String(100), nullable=True)
    section_states = db.Column(db.JSON, nullable=False, default=dict)
    version = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
    completed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    __mapper_args__ = {"version_id_col": version}

    findings = db.relationship(
        "Finding", backref="inspection", lazy="dynamic", cascade="all, delete-orphan",
    )
    checklist_items = db.relationship(
        "ChecklistItem", backref="inspection", lazy="dynamic", cascade="all, delete-orphan",
    )
    clause_reviews = db.relationship(
        "ClauseReview", backref="inspection", lazy="dynamic", cascade="all, delete-orphan",
    )

    @property
    def is_completed(self) -> bool:
        return self.status == "COMPLETED"

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "checklist_id": self.checklist_id,
            "mode": self.mode,
            "address": self.address,
            "client_name": self.client_name,
            "inspector_name": self.inspector_name,
            "status": self.status,
            "current_section": self.current_section,
            "section_states": dict(self.section_states or {}),
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
            "completed_at": _iso(self.completed_at),
        }

    def __repr__(self):
        return f"<Inspection {self.id}: {self.status} @ {self.current_section}>"


class Finding(db.Model):
    """Free-text observation recorded against one checklist section."""

    __tablename__ = "findings"
    __table_args__ = (
        db.Index("idx_finding_inspection_section", "inspection_id", "section"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    inspection_id = db.Column(
        db.String(36),
        db.ForeignKey("inspections.id", ondelete="CASCADE"),
        nullable=False,
    )
    section = db.Column(db.String(100), nullable=False)
    text = db.Column(db.Text, nullable=False)
    severity = db.Column(db.String(10), nullable=False, default="INFO")
    matched_comment = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "inspection_id": self.inspection_id,
            "section": self.section,
            "text": self.text,
            "severity": self.severity,
            "matched_comment": self.matched_comment,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
