"""
Section Navigator — pure state machine over a checklist's ordered sections.

Given the current NavigatorState and an action, ``transition`` returns the
new state plus a TransitionResult describing what changed. Nothing here
touches the database; navigation_service.py loads and persists the state.

Actions:
    next   — mark the departing section completed, advance one
    skip   — mark the departing section skipped, advance one
    back   — move back one, no status changes
    jump   — move to any section id (departing section marked completed)

Section statuses (SECTION_TRANSITIONS):
    pending -> in_progress -> completed | skipped

A section already completed or skipped is never re-marked, so the resolved
count can only grow and never exceeds the section total.

Every move except back leaves at most one section in_progress, the current
one: a section still in progress after an earlier back gets the departing
status along with the section being left.

Usage:
    state = start(registry.get_all_sections("nz-ppi"))
    state, result = transition(state, "next")
    progress(state)   # {"completed": 1, "total": 6, "percentage": 17}
"""

import math
from dataclasses import dataclass, field, replace

from building_inspection.core.exceptions import BoundaryError, InvalidSectionError
from building_inspection.models.inspection import TERMINAL_SECTION_STATUSES
from building_inspection.services.progress_aggregator import percentage
from building_inspection.utils.helpers import text_value

# ── Transitions ─────────────────────────────────────────────────────────────

SECTION_TRANSITIONS = {
    "pending":     ["in_progress", "completed", "skipped"],
    "in_progress": ["completed", "skipped"],
    "completed":   [],
    "skipped":     [],
}

NAVIGATION_ACTIONS = ("next", "skip", "back", "jump")

# Share of sections that must be completed or skipped before completion.
SECTION_COMPLETION_THRESHOLD = 0.5


def validate_section_transition(old_status, new_status):
    """Return True if a section may move from *old_status* to *new_status*."""
    return new_status in SECTION_TRANSITIONS.get(old_status, [])


# ── State ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class SectionState:
    id: str
    name: str
    status: str = "pending"

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_SECTION_STATUSES


@dataclass(frozen=True)
class NavigatorState:
    checklist_id: str
    current_section_id: str | None
    sections: tuple[SectionState, ...] = ()

    def index_of(self, section_id: str | None) -> int:
        for i, section in enumerate(self.sections):
            if section.id == section_id:
                return i
        return -1

    @property
    def current_index(self) -> int:
        return self.index_of(self.current_section_id)

    @property
    def current(self) -> SectionState | None:
        i = self.current_index
        return self.sections[i] if i >= 0 else None

    def status_of(self, section_id: str) -> str | None:
        i = self.index_of(section_id)
        return self.sections[i].status if i >= 0 else None

    def to_states_dict(self) -> dict[str, str]:
        return {s.id: s.status for s in self.sections}


@dataclass(frozen=True)
class TransitionResult:
    action: str
    previous_section_id: str | None
    current_section_id: str
    changes: dict = field(default_factory=dict)   # section id -> (old, new)
    inspection_status: str | None = None           # None: leave as is

    def to_dict(self) -> dict:
        return {
            "action": self.action,
            "previous_section": self.previous_section_id,
            "current_section": self.current_section_id,
            "changes": {k: {"from": old, "to": new} for k, (old, new) in self.changes.items()},
        }


# ── Construction ────────────────────────────────────────────────────────────


def start(sections, checklist_id: str = "") -> NavigatorState:
    """Initial state: first section in progress, the rest pending."""
    states = tuple(
        SectionState(s.id, s.name, "in_progress" if i == 0 else "pending")
        for i, s in enumerate(sections)
    )
    return NavigatorState(
        checklist_id=checklist_id,
        current_section_id=states[0].id if states else None,
        sections=states,
    )


def from_persisted(sections, checklist_id: str, current_section_id: str | None,
                   section_states: dict | None, findings_by_section: dict | None = None
                   ) -> NavigatorState:
    """Rebuild a state from an inspection row.

    When no statuses were persisted, sections before the pointer count as
    completed if they hold findings and skipped otherwise; the pointer is in
    progress and later sections are pending. A pointer that is not one of
    *sections* raises InvalidSectionError.
    """
    sections = list(sections)
    if not sections:
        return NavigatorState(checklist_id=checklist_id, current_section_id=None)

    ids = [s.id for s in sections]
    if current_section_id is None:
        current_section_id = ids[0]
    if current_section_id not in ids:
        raise InvalidSectionError(current_section_id, checklist_id)

    stored = section_states or {}
    findings_by_section = findings_by_section or {}
    pointer = ids.index(current_section_id)

    states = []
    for i, s in enumerate(sections):
        status = stored.get(s.id)
        if status is None:
            if stored:
                status = "pending"
            elif i < pointer:
                status = "completed" if findings_by_section.get(s.id) else "skipped"
            elif i == pointer:
                status = "in_progress"
            else:
                status = "pending"
        states.append(SectionState(s.id, s.name, status))

    return NavigatorState(
        checklist_id=checklist_id,
        current_section_id=current_section_id,
        sections=tuple(states),
    )


# ── Transition ──────────────────────────────────────────────────────────────


def _set_status(sections: list[SectionState], index: int, new_status: str, changes: dict):
    old = sections[index].status
    if old == new_status or not validate_section_transition(old, new_status):
        return
    sections[index] = replace(sections[index], status=new_status)
    changes[sections[index].id] = (old, new_status)


def _move(state: NavigatorState, action: str, target: int, departing_status: str | None):
    sections = list(state.sections)
    changes: dict = {}
    here = state.current_index

    if departing_status is not None:
        _set_status(sections, here, departing_status, changes)
        # A section left in progress by an earlier back is closed too.
        for i, section in enumerate(sections):
            if i != target and section.status == "in_progress":
                _set_status(sections, i, departing_status, changes)
        if sections[target].status == "pending":
            _set_status(sections, target, "in_progress", changes)

    new_state = replace(state, current_section_id=sections[target].id, sections=tuple(sections))
    result = TransitionResult(
        action=action,
        previous_section_id=state.current_section_id,
        current_section_id=sections[target].id,
        changes=changes,
        inspection_status=None if action == "back" else "IN_PROGRESS",
    )
    return new_state, result


def parse_action(action: str) -> tuple[str, str | None]:
    """Split a raw action into (verb, target); anything else is a jump target."""
    verb = text_value(action, "action")
    if verb.lower() in ("next", "skip", "back"):
        return verb.lower(), None
    return "jump", verb


def transition(state: NavigatorState, action: str) -> tuple[NavigatorState, TransitionResult]:
    """Apply *action* to *state*.

    Raises:
        BoundaryError: next/skip past the last section, back before the first,
            or any move on a checklist with no sections.
        InvalidSectionError: jump to an id that is not a section.
        ValidationError: *action* is not a string.
    """
    verb, target_id = parse_action(action)
    here = state.current_index
    last = len(state.sections) - 1

    if not state.sections:
        raise BoundaryError(verb, state.current_section_id, "checklist has no sections")

    if verb in ("next", "skip"):
        if here >= last:
            raise BoundaryError(verb, state.current_section_id, "already at last section")
        return _move(state, verb, here + 1, "completed" if verb == "next" else "skipped")

    if verb == "back":
        if here <= 0:
            raise BoundaryError(verb, state.current_section_id, "already at first section")
        return _move(state, verb, here - 1, None)

    target = state.index_of(target_id)
    if target < 0:
        raise InvalidSectionError(target_id, state.checklist_id)
    if target == here:
        return state, TransitionResult(
            action="jump",
            previous_section_id=state.current_section_id,
            current_section_id=state.current_section_id,
            inspection_status="IN_PROGRESS",
        )
    return _move(state, "jump", target, "completed")


# ── Progress ────────────────────────────────────────────────────────────────


def resolved_count(state: NavigatorState) -> int:
    return sum(1 for s in state.sections if s.is_terminal)


def progress(state: NavigatorState) -> dict:
    done = resolved_count(state)
    total = len(state.sections)
    return {"completed": done, "total": total, "percentage": percentage(done, total)}


def required_sections(total: int) -> int:
    return math.ceil(total * SECTION_COMPLETION_THRESHOLD)


def can_complete(state: NavigatorState) -> bool:
    """Enough sections completed or skipped to allow finalization."""
    return resolved_count(state) >= required_sections(len(state.sections))


def remaining_sections(state: NavigatorState) -> int:
    return sum(1 for s in state.sections if s.status == "pending")
