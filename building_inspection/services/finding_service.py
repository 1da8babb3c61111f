"""Finding service — inspector observations recorded against checklist sections."""

import logging

from building_inspection.core.exceptions import InvalidSectionError, ValidationError
from building_inspection.models import db
from building_inspection.models.inspection import FINDING_SEVERITIES
from building_inspection.repositories import FindingRepository, InspectionRepository
from building_inspection.services.checklist_registry import get_registry
from building_inspection.utils.helpers import text_value

logger = logging.getLogger(__name__)

_findings = FindingRepository()
_inspections = InspectionRepository()


def _clean(data: dict, partial: bool = False) -> dict:
    clean = {k: data[k] for k in ("section", "text", "severity", "matched_comment") if k in data}
    if not partial or "text" in clean:
        text = text_value(clean.get("text"), "text")
        if not text:
            raise ValidationError("text is required.")
        clean["text"] = text
    if not partial or "severity" in clean:
        severity = (text_value(clean.get("severity"), "severity") or "INFO").upper()
        if severity not in FINDING_SEVERITIES:
            raise ValidationError(
                f"severity must be one of: {', '.join(FINDING_SEVERITIES)}",
                details={"severity": data.get("severity")},
            )
        clean["severity"] = severity
    return clean


def create_finding(inspection_id: str, data: dict) -> dict:
    """Record a finding; the section defaults to the inspection's current section."""
    inspection = _inspections.get(inspection_id)
    clean = _clean(data)
    section = clean.get("section") or inspection.current_section
    if get_registry().get_section(inspection.checklist_id, section) is None:
        raise InvalidSectionError(section, inspection.checklist_id)
    clean["section"] = section

    finding = _findings.create(inspection_id=inspection_id, **clean)
    db.session.commit()
    logger.info("Finding created id=%s inspection=%s section=%s severity=%s",
                finding.id, inspection_id, section, finding.severity)
    return finding.to_dict()


def list_findings(inspection_id: str, section: str | None = None) -> list[dict]:
    _inspections.get(inspection_id)
    return [f.to_dict() for f in _findings.find_by_parent(inspection_id, section=section)]


def get_finding(finding_id: str) -> dict:
    return _findings.get(finding_id).to_dict()


def update_finding(finding_id: str, data: dict) -> dict:
    clean = _clean(data, partial=True)
    if "section" in clean:
        inspection = _findings.get(finding_id).inspection
        if get_registry().get_section(inspection.checklist_id, clean["section"]) is None:
            raise InvalidSectionError(clean["section"], inspection.checklist_id)
    finding = _findings.update(finding_id, **clean)
    db.session.commit()
    return finding.to_dict()


def delete_finding(finding_id: str) -> None:
    _findings.delete(finding_id)
    db.session.commit()
    logger.info("Finding deleted id=%s", finding_id)
