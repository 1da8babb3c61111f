"""
Document service — producer statements, certificates and other documents a
project needs before it can be finalized.

New documents default to RECEIVED (they are usually recorded on upload) and
pick up their building-code clause links from CLAUSE_LINKS when none are
given. Status changes are audited.
"""

import logging

from building_inspection.core.exceptions import ValidationError
from building_inspection.models import db
from building_inspection.models.audit import write_audit
from building_inspection.models.document import CLAUSE_LINKS, DOCUMENT_STATUSES, DOCUMENT_TYPES
from building_inspection.repositories import DocumentRepository, ProjectRepository
from building_inspection.services.progress_aggregator import summarize_documents
from building_inspection.utils.helpers import text_value

logger = logging.getLogger(__name__)

_documents = DocumentRepository()
_projects = ProjectRepository()

_UPDATABLE = (
    "document_type", "description", "filename", "file_path", "issuer",
    "reference_number", "status", "verified", "linked_clauses", "sort_order",
)


def _check_enum(data: dict, key: str, allowed) -> None:
    if key in data:
        value = text_value(data[key], key).upper()
        if value not in allowed:
            raise ValidationError(
                f"{key} must be one of: {', '.join(allowed)}", details={key: data[key]},
            )
        data[key] = value


def create_document(project_id: str, data: dict) -> dict:
    _projects.get(project_id)
    clean = {k: data[k] for k in _UPDATABLE if k in data}
    clean.setdefault("document_type", None)
    clean.setdefault("status", "RECEIVED")
    _check_enum(clean, "document_type", DOCUMENT_TYPES)
    _check_enum(clean, "status", DOCUMENT_STATUSES)

    description = text_value(clean.get("description"), "description")
    if not description:
        raise ValidationError("description is required.")
    clean["description"] = description

    if not clean.get("linked_clauses"):
        clean["linked_clauses"] = list(CLAUSE_LINKS.get(clean["document_type"], []))

    doc = _documents.create(project_id=project_id, **clean)
    db.session.commit()
    logger.info("Document created id=%s project=%s type=%s status=%s",
                doc.id, project_id, doc.document_type, doc.status)
    return doc.to_dict()


def list_documents(project_id: str, status: str | None = None,
                   document_type: str | None = None) -> list[dict]:
    _projects.get(project_id)
    docs = _documents.find_by_parent(project_id, status=status, document_type=document_type)
    return [d.to_dict() for d in docs]


def get_document(document_id: str) -> dict:
    return _documents.get(document_id).to_dict()


def update_document(document_id: str, data: dict) -> dict:
    clean = {k: data[k] for k in _UPDATABLE if k in data}
    _check_enum(clean, "document_type", DOCUMENT_TYPES)
    _check_enum(clean, "status", DOCUMENT_STATUSES)
    doc = _documents.update(document_id, **clean)
    db.session.commit()
    return doc.to_dict()


def delete_document(document_id: str) -> None:
    _documents.delete(document_id)
    db.session.commit()
    logger.info("Document deleted id=%s", document_id)


def set_status(document_id: str, status: str, actor: str = "system") -> dict:
    status = text_value(status, "status").upper()
    if status not in DOCUMENT_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(DOCUMENT_STATUSES)}")
    doc = _documents.get(document_id)
    old = doc.status
    doc.status = status
    write_audit(
        entity_type="document", entity_id=doc.id, action="document.status",
        actor=actor, project_id=doc.project_id,
        diff={"status": {"old": old, "new": status}},
    )
    db.session.commit()
    logger.info("Document %s status %s -> %s", document_id, old, status)
    return doc.to_dict()


def mark_as_received(document_id: str, actor: str = "system") -> dict:
    return set_status(document_id, "RECEIVED", actor)


def mark_as_outstanding(document_id: str, actor: str = "system") -> dict:
    return set_status(document_id, "OUTSTANDING", actor)


def mark_as_na(document_id: str, actor: str = "system") -> dict:
    return set_status(document_id, "NA", actor)


def verify(document_id: str, verified: bool = True, actor: str = "system") -> dict:
    doc = _documents.get(document_id)
    old = doc.verified
    doc.verified = bool(verified)
    write_audit(
        entity_type="document", entity_id=doc.id, action="document.verify",
        actor=actor, project_id=doc.project_id,
        diff={"verified": {"old": old, "new": doc.verified}},
    )
    db.session.commit()
    return doc.to_dict()


def link_clauses(document_id: str, clause_codes: list[str]) -> dict:
    if not isinstance(clause_codes, list):
        raise ValidationError("clauses must be a list of clause codes.")
    codes = [text_value(c, "clauses").upper() for c in clause_codes]
    doc = _documents.update(document_id, linked_clauses=codes)
    db.session.commit()
    return doc.to_dict()


def reorder(project_id: str, ordered_ids: list[str]) -> list[dict]:
    _projects.get(project_id)
    _documents.reorder(project_id, ordered_ids)
    db.session.commit()
    return list_documents(project_id)


def get_outstanding(project_id: str) -> list[dict]:
    return list_documents(project_id, status="OUTSTANDING")


def get_required(project_id: str) -> list[dict]:
    return list_documents(project_id, status="REQUIRED")


def get_summary(project_id: str) -> dict:
    _projects.get(project_id)
    return summarize_documents(_documents.find_by_parent(project_id))
