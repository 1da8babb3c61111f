"""Concrete repositories for inspections, findings and the three reviewable-item kinds."""

from sqlalchemy import func, select

from building_inspection.core.exceptions import InspectionNotFoundError
from building_inspection.models import db
from building_inspection.models.document import Document
from building_inspection.models.inspection import Finding, Inspection
from building_inspection.models.project import Project
from building_inspection.models.review import BuildingCodeClause, ChecklistItem, ClauseReview
from building_inspection.repositories.base import SqlRepository


class InspectionRepository(SqlRepository):
    model = Inspection
    resource = "Inspection"
    parent_column = "project_id"

    def get(self, pk: str) -> Inspection:
        inspection = self.find_by_id(pk)
        if inspection is None:
            raise InspectionNotFoundError(pk)
        return inspection

    def find_findings(self, inspection_id: str) -> list[Finding]:
        stmt = (
            select(Finding)
            .where(Finding.inspection_id == inspection_id)
            .order_by(Finding.created_at, Finding.id)
        )
        return list(db.session.execute(stmt).scalars())

    def count_findings_by_section(self, inspection_id: str) -> dict[str, int]:
        stmt = (
            select(Finding.section, func.count(Finding.id))
            .where(Finding.inspection_id == inspection_id)
            .group_by(Finding.section)
        )
        return {section: count for section, count in db.session.execute(stmt)}


class ProjectRepository(SqlRepository):
    model = Project
    resource = "Project"


class FindingRepository(SqlRepository):
    model = Finding
    resource = "Finding"


class ChecklistItemRepository(SqlRepository):
    model = ChecklistItem
    resource = "ChecklistItem"


class ClauseReviewRepository(SqlRepository):
    model = ClauseReview
    resource = "ClauseReview"

    def find_by_inspection_and_clause(self, inspection_id: str, clause_id: str) -> ClauseReview | None:
        stmt = select(ClauseReview).where(
            ClauseReview.inspection_id == inspection_id,
            ClauseReview.clause_id == clause_id,
        )
        return db.session.execute(stmt).scalar_one_or_none()


class BuildingCodeClauseRepository(SqlRepository):
    model = BuildingCodeClause
    resource = "BuildingCodeClause"
    parent_column = "category"

    def find_by_code(self, code: str) -> BuildingCodeClause | None:
        stmt = select(BuildingCodeClause).where(BuildingCodeClause.code == code)
        return db.session.execute(stmt).scalar_one_or_none()

    def find_all(self) -> list[BuildingCodeClause]:
        stmt = select(BuildingCodeClause).order_by(
            BuildingCodeClause.category, BuildingCodeClause.sort_order, BuildingCodeClause.code,
        )
        return list(db.session.execute(stmt).scalars())


class DocumentRepository(SqlRepository):
    model = Document
    resource = "Document"
    parent_column = "project_id"
