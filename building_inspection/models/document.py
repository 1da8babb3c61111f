"""Supporting-document model (producer statements, certificates, warranties...)."""

from building_inspection.models import db
from building_inspection.models._helpers import _iso, _utcnow, _uuid

DOCUMENT_TYPES = (
    "PS1", "PS2", "PS3", "PS4", "COC", "ESC", "WARRANTY", "INVOICE",
    "DRAWING", "REPORT", "FLOOD_TEST", "PROPERTY_FILE", "OTHER",
)

DOCUMENT_STATUSES = ("REQUIRED", "RECEIVED", "OUTSTANDING", "NA")

# Clause codes linked automatically when a document is created without any.
CLAUSE_LINKS = {
    "PS3": ["B1", "E2", "E3", "G12", "G13"],  # producer statement, construction
    "COC": ["G9"],                             # electrical certificate
    "ESC": ["G9"],                             # electrical safety certificate
    "WARRANTY": ["B2"],                        # durability
}


class Document(db.Model):
    """A document tracked against a project's finalization."""

    __tablename__ = "documents"
    __table_args__ = (
        db.Index("idx_document_project", "project_id"),
        db.Index("idx_document_status", "status"),
    )

    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    project_id = db.Column(
        db.String(36),
        db.ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    document_type = db.Column(db.String(20), nullable=False)
    description = db.Column(db.String(500), nullable=False)
    filename = db.Column(db.String(255), nullable=True)
    file_path = db.Column(db.String(500), nullable=True)
    issuer = db.Column(db.String(200), nullable=True)
    reference_number = db.Column(db.String(100), nullable=True)
    status = db.Column(
        db.String(12), nullable=False, default="REQUIRED",
        comment="REQUIRED | RECEIVED | OUTSTANDING | NA",
    )
    verified = db.Column(db.Boolean, nullable=False, default=False)
    linked_clauses = db.Column(db.JSON, nullable=False, default=list)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "project_id": self.project_id,
            "document_type": self.document_type,
            "description": self.description,
            "filename": self.filename,
            "file_path": self.file_path,
            "issuer": self.issuer,
            "reference_number": self.reference_number,
            "status": self.status,
            "verified": self.verified,
            "linked_clauses": list(self.linked_clauses or []),
            "sort_order": self.sort_order,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }
