"""Project service — the property engagement that owns inspections and documents."""

import logging

from sqlalchemy import select

from building_inspection.core.exceptions import ValidationError
from building_inspection.models import db
from building_inspection.models.project import PROJECT_STATUSES, Project
from building_inspection.repositories import InspectionRepository, ProjectRepository
from building_inspection.utils.helpers import text_value

logger = logging.getLogger(__name__)

_projects = ProjectRepository()
_inspections = InspectionRepository()


def create_project(data: dict) -> dict:
    name = text_value(data.get("name"), "name")
    if not name:
        raise ValidationError("name is required.")
    project = _projects.create(
        name=name,
        address=text_value(data.get("address"), "address"),
        client_name=text_value(data.get("client_name"), "client_name"),
    )
    db.session.commit()
    logger.info("Project created id=%s name=%s", project.id, name)
    return project.to_dict()


def list_projects(status: str | None = None) -> list[dict]:
    stmt = select(Project).order_by(Project.created_at.desc())
    if status:
        stmt = stmt.where(Project.status == status)
    return [p.to_dict() for p in db.session.execute(stmt).scalars()]


def get_project(project_id: str) -> dict:
    project = _projects.get(project_id)
    out = project.to_dict()
    out["inspections"] = [i.to_dict() for i in _inspections.find_by_parent(project_id)]
    return out


def update_project(project_id: str, data: dict) -> dict:
    clean = {k: data[k] for k in ("name", "address", "client_name", "status") if k in data}
    if "status" in clean and clean["status"] not in PROJECT_STATUSES:
        raise ValidationError(
            f"status must be one of: {', '.join(sorted(PROJECT_STATUSES))}",
            details={"status": clean["status"]},
        )
    project = _projects.update(project_id, **clean)
    db.session.commit()
    return project.to_dict()
