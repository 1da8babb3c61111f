"""
Building Inspection Platform
Audit domain model.

Models:
    - AuditLog: append-only record of inspection workflow events.

Every navigation move, completion and item status change writes one row
through ``write_audit`` inside the caller's transaction, so the audit row
commits or rolls back together with the change it describes.
"""

import json
from datetime import UTC, datetime

from sqlalchemy import select

from building_inspection.models import db

# ── Constants ────────────────────────────────────────────────────────────────

AUDIT_ENTITY_TYPES = frozenset({"inspection", "clause_review", "document"})

AUDIT_ACTIONS = frozenset({
    # Inspection lifecycle
    "inspection.start",
    "inspection.navigate.next",
    "inspection.navigate.skip",
    "inspection.navigate.back",
    "inspection.navigate.jump",
    "inspection.complete",
    # Item state
    "clause_review.mark_na",
    "clause_review.mark_applicable",
    "document.status",
    "document.verify",
})


class AuditLog(db.Model):
    """One workflow event: who did what to which entity, with an old/new diff."""

    __tablename__ = "audit_logs"
    __table_args__ = (
        db.Index("idx_audit_entity", "entity_type", "entity_id"),
        db.Index("idx_audit_project", "project_id"),
        db.Index("idx_audit_action", "action"),
        db.Index("idx_audit_ts", "timestamp"),
    )

    id = db.Column(db.Integer, primary_key=True)
    project_id = db.Column(db.String(36), nullable=True)
    entity_type = db.Column(
        db.String(30), nullable=False,
        comment="inspection | clause_review | document",
    )
    entity_id = db.Column(db.String(36), nullable=False)
    action = db.Column(db.String(60), nullable=False)
    actor = db.Column(db.String(150), nullable=False, default="system")
    diff_json = db.Column(db.Text, default="{}", comment="JSON: {field: {old, new}}")
    timestamp = db.Column(
        db.DateTime(timezone=True), nullable=False,
        default=lambda: datetime.now(UTC),
    )

    @property
    def diff(self) -> dict:
        return json.loads(self.diff_json or "{}")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "project_id": self.project_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "action": self.action,
            "actor": self.actor,
            "diff": self.diff,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }

    def __repr__(self):
        return f"<AuditLog {self.id}: {self.action} {self.entity_type}/{self.entity_id}>"


def write_audit(
    *,
    entity_type: str,
    entity_id: str,
    action: str,
    actor: str = "system",
    project_id: str | None = None,
    diff: dict | None = None,
) -> AuditLog:
    """
    Append one audit row and flush; the caller commits.

    Raises:
        ValueError: *entity_type* or *action* is not a known audit event.
    """
    if entity_type not in AUDIT_ENTITY_TYPES:
        raise ValueError(f"Unknown audit entity type: {entity_type}")
    if action not in AUDIT_ACTIONS:
        raise ValueError(f"Unknown audit action: {action}")

    log = AuditLog(
        project_id=project_id,
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        actor=actor or "system",
        diff_json=json.dumps(diff or {}, default=str),
    )
    db.session.add(log)
    db.session.flush()
    return log


def audit_trail(entity_type: str, entity_id: str) -> list[AuditLog]:
    """Audit rows for one entity, oldest first."""
    stmt = (
        select(AuditLog)
        .where(AuditLog.entity_type == entity_type, AuditLog.entity_id == str(entity_id))
        .order_by(AuditLog.timestamp, AuditLog.id)
    )
    return list(db.session.execute(stmt).scalars())
