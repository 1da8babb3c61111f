"""
Navigation service — persistence adapter around the Section Navigator.

Loads an inspection and its checklist, runs the pure navigator, writes the
new pointer and section statuses back, and records an audit row.

Rules:
  - db.session.commit() happens only in service modules.
  - Errors (InspectionNotFoundError, InvalidSectionError, BoundaryError,
    StaleDataError from a concurrent write) propagate to the caller
    unchanged and are never retried.

Usage:
    from building_inspection.services.navigation_service import navigate

    result = navigate(inspection_id, "next")
    result = navigate(inspection_id, "roof")    # jump
"""

import logging

from building_inspection.core.exceptions import ValidationError
from building_inspection.models import db
from building_inspection.models.audit import write_audit
from building_inspection.models.inspection import INSPECTION_MODES
from building_inspection.repositories import InspectionRepository, ProjectRepository
from building_inspection.services import section_navigator as nav
from building_inspection.services.checklist_registry import get_registry
from building_inspection.utils.helpers import text_value

logger = logging.getLogger(__name__)

# Items offered by suggest() that no finding has mentioned yet.
SUGGESTION_ITEM_LIMIT = 3

_inspections = InspectionRepository()
_projects = ProjectRepository()


# ── Loading ─────────────────────────────────────────────────────────────────


def _load(inspection_id: str):
    """Return (inspection, sections, state, findings_by_section)."""
    inspection = _inspections.get(inspection_id)
    checklist = get_registry().require_checklist(inspection.checklist_id)
    sections = checklist.flattened_sections()
    findings_by_section = _inspections.count_findings_by_section(inspection_id)
    state = nav.from_persisted(
        sections,
        checklist_id=inspection.checklist_id,
        current_section_id=inspection.current_section,
        section_states=inspection.section_states,
        findings_by_section=findings_by_section,
    )
    return inspection, sections, state, findings_by_section


def load_state(inspection_id: str) -> nav.NavigatorState:
    """Navigator state of a persisted inspection (read-only)."""
    return _load(inspection_id)[2]


def _section_by_id(sections, section_id):
    return next((s for s in sections if s.id == section_id), None)


# ── Start ───────────────────────────────────────────────────────────────────


def start_inspection(data: dict, actor: str = "system") -> dict:
    """Create an inspection positioned at the first section of its checklist.

    Args:
        data: project_id (optional), checklist_id (defaults to the registry
              default), mode (SIMPLE | CLAUSE_REVIEW), address, client_name,
              inspector_name.

    Raises:
        ValidationError: unknown mode, or no checklist available.
        NotFoundError: project_id does not exist.
        ChecklistNotFoundError: checklist_id is not registered.
    """
    registry = get_registry()
    mode = (text_value(data.get("mode"), "mode") or "SIMPLE").upper()
    if mode not in INSPECTION_MODES:
        raise ValidationError(
            f"mode must be one of: {', '.join(INSPECTION_MODES)}",
            details={"mode": data.get("mode")},
        )

    checklist_id = text_value(data.get("checklist_id"), "checklist_id")
    if checklist_id:
        checklist = registry.require_checklist(checklist_id)
    else:
        checklist = registry.get_default_checklist()
        if checklist is None:
            raise ValidationError("No checklist definitions are available.")

    project = None
    project_id = text_value(data.get("project_id"), "project_id")
    if project_id:
        project = _projects.get(project_id)

    address = text_value(data.get("address"), "address") or (project.address if project else "")
    client_name = (text_value(data.get("client_name"), "client_name")
                   or (project.client_name if project else ""))

    state = nav.start(checklist.flattened_sections(), checklist_id=checklist.id)
    inspection = _inspections.create(
        project_id=project.id if project else None,
        checklist_id=checklist.id,
        mode=mode,
        address=address,
        client_name=client_name,
        inspector_name=data.get("inspector_name"),
        status="STARTED",
        current_section=state.current_section_id,
        section_states=state.to_states_dict(),
    )
    write_audit(
        entity_type="inspection",
        entity_id=inspection.id,
        action="inspection.start",
        actor=actor,
        project_id=inspection.project_id,
        diff={"checklist_id": checklist.id, "mode": mode},
    )
    db.session.commit()
    logger.info(
        "Inspection started id=%s checklist=%s mode=%s sections=%d",
        inspection.id, checklist.id, mode, len(state.sections),
    )
    return inspection.to_dict()


# ── Navigate ────────────────────────────────────────────────────────────────


def navigate(inspection_id: str, action: str, actor: str = "system") -> dict:
    """Apply a navigation action and persist the result.

    *action* is "next", "skip", "back" (case-insensitive) or a section id
    to jump to.

    Returns:
        {"inspection_id", "action", "previous_section", "current_section",
         "section_name", "prompt", "items", "changes", "status", "progress"}
    """
    inspection, sections, state, _ = _load(inspection_id)
    if inspection.is_completed:
        raise ValidationError(
            f"Inspection {inspection_id} is completed; navigation is closed.",
            details={"status": inspection.status},
        )

    new_state, result = nav.transition(state, action)

    old_section = inspection.current_section
    old_status = inspection.status
    inspection.current_section = new_state.current_section_id
    inspection.section_states = new_state.to_states_dict()
    if result.inspection_status:
        inspection.status = result.inspection_status

    write_audit(
        entity_type="inspection",
        entity_id=inspection.id,
        action=f"inspection.navigate.{result.action}",
        actor=actor,
        project_id=inspection.project_id,
        diff={
            "current_section": {"old": old_section, "new": inspection.current_section},
            "status": {"old": old_status, "new": inspection.status},
            "sections": result.to_dict()["changes"],
        },
    )
    db.session.commit()
    logger.info(
        "Inspection %s navigate action=%s %s -> %s",
        inspection_id, result.action, old_section, inspection.current_section,
    )

    section = _section_by_id(sections, new_state.current_section_id)
    out = result.to_dict()
    out.update({
        "inspection_id": inspection_id,
        "section_name": section.name,
        "prompt": section.prompt,
        "items": list(section.items),
        "status": inspection.status,
        "progress": nav.progress(new_state),
    })
    return out


# ── Status ──────────────────────────────────────────────────────────────────


def get_status(inspection_id: str) -> dict:
    """Current section, per-section statuses with findings counts, and progress."""
    inspection, sections, state, findings_by_section = _load(inspection_id)

    current = _section_by_id(sections, state.current_section_id)
    current_out = None
    if current is not None:
        current_out = {
            "id": current.id,
            "name": current.name,
            "prompt": current.prompt,
            "items": list(current.items),
            "status": state.status_of(current.id),
            "findings_count": findings_by_section.get(current.id, 0),
        }

    return {
        "inspection_id": inspection.id,
        "address": inspection.address,
        "client_name": inspection.client_name,
        "inspector_name": inspection.inspector_name,
        "status": inspection.status,
        "mode": inspection.mode,
        "current_section": current_out,
        "progress": nav.progress(state),
        "sections": [
            {
                "id": s.id,
                "name": s.name,
                "status": s.status,
                "findings_count": findings_by_section.get(s.id, 0),
                "has_findings": findings_by_section.get(s.id, 0) > 0,
            }
            for s in state.sections
        ],
        "total_findings": sum(findings_by_section.values()),
        "can_complete": nav.can_complete(state),
    }


# ── Suggest ─────────────────────────────────────────────────────────────────


def _unaddressed_items(section, findings) -> list[str]:
    texts = [(f.text or "").lower() for f in findings if f.section == section.id]
    pending = [item for item in section.items
               if not any(item.lower() in text for text in texts)]
    return pending[:SUGGESTION_ITEM_LIMIT]


def _suggestion_sentence(state: nav.NavigatorState) -> str:
    done = nav.resolved_count(state)
    total = len(state.sections)
    remaining = nav.remaining_sections(state)
    if remaining == 0:
        return "All sections have been visited. You can complete the inspection and generate a report."
    if nav.can_complete(state):
        return (
            f"You have completed {done} of {total} sections. You can complete now "
            f"or continue with {remaining} remaining section(s)."
        )
    needed = nav.required_sections(total) - done
    return (
        f"Continue inspection. {remaining} section(s) remaining. "
        f"Complete at least {needed} more section(s) before completing."
    )


def suggest(inspection_id: str) -> dict:
    """What to look at next in the current section, and where to go after it."""
    inspection, sections, state, _ = _load(inspection_id)

    current = _section_by_id(sections, state.current_section_id)
    unaddressed = []
    next_section = None
    if current is not None:
        unaddressed = _unaddressed_items(current, _inspections.find_findings(inspection_id))
        index = state.current_index
        if index < len(sections) - 1:
            following = sections[index + 1]
            next_section = {"id": following.id, "name": following.name}

    return {
        "inspection_id": inspection.id,
        "current_section": current.id if current else None,
        "section_name": current.name if current else None,
        "prompt": current.prompt if current else None,
        "items": list(current.items) if current else [],
        "unaddressed_items": unaddressed,
        "suggestions": [f"Check: {item}" for item in unaddressed],
        "next_section": next_section,
        "remaining_sections": nav.remaining_sections(state),
        "can_complete": nav.can_complete(state),
        "suggestion": _suggestion_sentence(state),
    }
