"""
Persistence adapters for the inspection engine.

Services depend on these repositories only; nothing in the engine issues
queries directly.
"""

from building_inspection.repositories.base import SqlRepository
from building_inspection.repositories.sql import (
    BuildingCodeClauseRepository,
    ChecklistItemRepository,
    ClauseReviewRepository,
    DocumentRepository,
    FindingRepository,
    InspectionRepository,
    ProjectRepository,
)

__all__ = [
    "SqlRepository",
    "BuildingCodeClauseRepository",
    "ChecklistItemRepository",
    "ClauseReviewRepository",
    "DocumentRepository",
    "FindingRepository",
    "InspectionRepository",
    "ProjectRepository",
]
