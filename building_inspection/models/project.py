"""Project domain model — the parent of inspections and supporting documents."""

from building_inspection.models import db
from building_inspection.models._helpers import _iso, _utcnow, _uuid

PROJECT_STATUSES = {"ACTIVE", "COMPLETED", "ARCHIVED"}


class Project(db.Model):
    """One property engagement for one client (address + client contact)."""

    __tablename__ = "projects"

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    name = db.Column(db.String(200), nullable=False)
    address = db.Column(db.String(500), nullable=False, default="")
    client_name = db.Column(db.String(200), nullable=False, default="")
    status = db.Column(
        db.String(20), nullable=False, default="ACTIVE",
        comment="ACTIVE | COMPLETED | ARCHIVED",
    )
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    inspections = db.relationship("Inspection", backref="project", lazy="dynamic")
    documents = db.relationship(
        "Document", backref="project", lazy="dynamic", cascade="all, delete-orphan",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "address": self.address,
            "client_name": self.client_name,
            "status": self.status,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def __repr__(self):
        return f"<Project {self.id}: {self.name}>"
