"""
Building Inspection Platform
Checklist Registry — read-only checklist definitions.

YAML-based checklist management with:
    - Definition loading from the CHECKLISTS_DIR directory (one file per checklist)
    - Checklist id taken from the file name (nz-ppi.yaml -> "nz-ppi")
    - Section defaults (prompt, empty item list)
    - Subareas flattened into "<section>.<subarea>" navigation targets

Usage:
    from building_inspection.services.checklist_registry import get_registry
    registry = get_registry()
    sections = registry.get_all_sections("nz-ppi")
    roof = registry.get_section("nz-ppi", "roof")
"""

import logging
from pathlib import Path

import yaml
from flask import current_app

from building_inspection.core.exceptions import ChecklistNotFoundError

logger = logging.getLogger(__name__)

_EXTENSION_KEY = "checklist_registry"


class Section:
    """One checklist subdivision the inspector traverses."""

    def __init__(self, id: str, name: str, prompt: str = "", items: list[str] | None = None,
                 subareas: list["Section"] | None = None, report_section: int | None = None):
        self.id = id
        self.name = name
        self.prompt = prompt or f"Check {name.lower()}."
        self.items = list(items or [])
        self.subareas = list(subareas or [])
        self.report_section = report_section

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "prompt": self.prompt,
            "items": list(self.items),
        }

    def __repr__(self):
        return f"<Section {self.id}: {len(self.items)} items>"


class Checklist:
    """A named, versioned, ordered list of sections."""

    def __init__(self, id: str, name: str, sections: list[Section], version: str = "1.0",
                 standard: str | None = None, conclusions: dict | None = None):
        self.id = id
        self.name = name
        self.version = version
        self.standard = standard
        self.sections = list(sections)
        self.conclusions = conclusions or {}

    def flattened_sections(self) -> list[Section]:
        """Sections in checklist order, each followed by its subareas."""
        flat = []
        for section in self.sections:
            flat.append(section)
            for sub in section.subareas:
                flat.append(Section(
                    id=f"{section.id}.{sub.id}",
                    name=f"{section.name} - {sub.name}",
                    prompt=sub.prompt,
                    items=sub.items,
                ))
        return flat

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "standard": self.standard,
            "sections": [s.to_dict() for s in self.flattened_sections()],
        }


def _parse_section(raw: dict) -> Section:
    return Section(
        id=str(raw["id"]),
        name=raw.get("name") or str(raw["id"]),
        prompt=raw.get("prompt", ""),
        items=[str(i) for i in raw.get("items") or []],
        subareas=[_parse_section(sub) for sub in raw.get("subareas") or []],
        report_section=raw.get("report_section"),
    )


def parse_checklist(checklist_id: str, data: dict) -> Checklist:
    """Build a Checklist from a decoded YAML mapping."""
    return Checklist(
        id=checklist_id,
        name=data.get("name", checklist_id),
        version=str(data.get("version", "1.0")),
        standard=data.get("standard"),
        sections=[_parse_section(s) for s in data.get("sections") or []],
        conclusions=data.get("conclusions"),
    )


class ChecklistRegistry:
    """
    Registry of checklist definitions.

    Definitions are loaded lazily from YAML files on first access. A file
    that fails to parse is logged and skipped; the rest still load.
    """

    def __init__(self, checklists_dir: str | None = None, default_id: str = "nz-ppi"):
        self._checklists_dir = checklists_dir
        self._default_id = default_id
        self._checklists: dict[str, Checklist] = {}
        self._loaded = False

    def _load_from_dir(self):
        if self._loaded:
            return
        self._loaded = True
        if not self._checklists_dir:
            return

        path = Path(self._checklists_dir)
        if not path.exists():
            logger.warning("Checklist directory not found: %s", self._checklists_dir)
            return

        for yaml_file in sorted([*path.glob("*.yaml"), *path.glob("*.yml")]):
            try:
                with open(yaml_file, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f)
                if not data or not isinstance(data, dict):
                    continue
                checklist = parse_checklist(yaml_file.stem, data)
            except (OSError, yaml.YAMLError, KeyError, TypeError) as e:
                logger.error("Failed to load checklist %s: %s", yaml_file.name, e)
                continue
            self._checklists.setdefault(checklist.id, checklist)
            logger.info("Loaded checklist: %s (%d sections) from %s",
                        checklist.id, len(checklist.sections), yaml_file.name)

    def register(self, checklist: Checklist):
        """Add or replace a checklist definition."""
        self._load_from_dir()
        self._checklists[checklist.id] = checklist

    def get_checklist(self, checklist_id: str) -> Checklist | None:
        self._load_from_dir()
        return self._checklists.get(checklist_id)

    def require_checklist(self, checklist_id: str) -> Checklist:
        checklist = self.get_checklist(checklist_id)
        if checklist is None:
            raise ChecklistNotFoundError(checklist_id)
        return checklist

    def get_default_checklist(self) -> Checklist | None:
        """Prefer the configured default id; otherwise the first checklist loaded."""
        self._load_from_dir()
        if self._default_id in self._checklists:
            return self._checklists[self._default_id]
        return next(iter(self._checklists.values()), None)

    def available_checklists(self) -> list[str]:
        self._load_from_dir()
        return list(self._checklists)

    def get_all_sections(self, checklist_id: str) -> list[Section]:
        checklist = self.get_checklist(checklist_id)
        return checklist.flattened_sections() if checklist else []

    def get_section(self, checklist_id: str, section_id: str) -> Section | None:
        for section in self.get_all_sections(checklist_id):
            if section.id == section_id:
                return section
        return None


def init_checklists(app):
    """Attach a registry bound to CHECKLISTS_DIR to the Flask app."""
    app.extensions[_EXTENSION_KEY] = ChecklistRegistry(
        app.config.get("CHECKLISTS_DIR"),
        default_id=app.config.get("DEFAULT_CHECKLIST_ID", "nz-ppi"),
    )


def get_registry() -> ChecklistRegistry:
    """Return the registry of the current Flask app."""
    registry = current_app.extensions.get(_EXTENSION_KEY)
    if registry is None:
        init_checklists(current_app)
        registry = current_app.extensions[_EXTENSION_KEY]
    return registry
