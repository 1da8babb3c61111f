"""
Repository base — narrow persistence contract over Flask-SQLAlchemy.

Every reviewable-item kind (and the inspection itself) is read and written
through one of these repositories. They flush but never commit: the
service layer owns transaction boundaries.

Usage:
    repo = ChecklistItemRepository()
    items = repo.find_by_parent(inspection_id)
    item = repo.get(item_id)            # raises NotFoundError
    item = repo.find_by_id(item_id)     # returns None when absent

Concurrency:
    Read-modify-write atomicity is provided by the row's optimistic version
    column where the model declares one (see Inspection.version). Failures
    raised by the session are propagated untouched.
"""

import logging

from sqlalchemy import select

from building_inspection.core.exceptions import NotFoundError
from building_inspection.models import db

logger = logging.getLogger(__name__)


class SqlRepository:
    """Generic CRUD over one model, scoped by a parent foreign-key column."""

    model = None
    resource = "Item"
    parent_column = "inspection_id"

    # ── Reads ────────────────────────────────────────────────────────────

    def find_by_id(self, pk: str):
        return db.session.get(self.model, pk)

    def get(self, pk: str):
        """Fetch by primary key or raise NotFoundError."""
        obj = self.find_by_id(pk)
        if obj is None:
            logger.debug("%s id=%s not found", self.model.__name__, pk)
            raise NotFoundError(resource=self.resource, resource_id=pk)
        return obj

    def find_by_parent(self, parent_id: str, **filters) -> list:
        """All rows belonging to *parent_id*, optionally filtered by column equality."""
        stmt = select(self.model).where(getattr(self.model, self.parent_column) == parent_id)
        for field, value in filters.items():
            if value is not None:
                stmt = stmt.where(getattr(self.model, field) == value)
        stmt = stmt.order_by(*self._ordering())
        return list(db.session.execute(stmt).scalars())

    def _ordering(self):
        cols = []
        if hasattr(self.model, "sort_order"):
            cols.append(self.model.sort_order)
        if hasattr(self.model, "created_at"):
            cols.append(self.model.created_at)
        cols.append(self.model.id)
        return cols

    # ── Writes ───────────────────────────────────────────────────────────

    def create(self, **fields):
        obj = self.model(**fields)
        db.session.add(obj)
        db.session.flush()
        return obj

    def bulk_create(self, rows: list[dict]) -> list:
        objs = [self.model(**fields) for fields in rows]
        db.session.add_all(objs)
        db.session.flush()
        return objs

    def update(self, pk: str, **fields):
        obj = self.get(pk)
        for field, value in fields.items():
            setattr(obj, field, value)
        db.session.flush()
        return obj

    def delete(self, pk: str) -> None:
        obj = self.get(pk)
        db.session.delete(obj)
        db.session.flush()

    def reorder(self, parent_id: str, ordered_ids: list[str]) -> None:
        """Assign sort_order by position in *ordered_ids*.

        Ids that do not belong to *parent_id* raise NotFoundError.
        """
        owned = {obj.id: obj for obj in self.find_by_parent(parent_id)}
        for position, pk in enumerate(ordered_ids):
            obj = owned.get(pk)
            if obj is None:
                raise NotFoundError(resource=self.resource, resource_id=pk)
            obj.sort_order = position
        db.session.flush()
