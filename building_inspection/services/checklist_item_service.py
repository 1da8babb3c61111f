"""
Checklist item service — simple-mode PASS / FAIL / NA decisions.

db.session.commit() happens only here; the repository flushes.
"""

import logging

from building_inspection.core.exceptions import ValidationError
from building_inspection.models import db
from building_inspection.models.review import CHECKLIST_CATEGORIES, DECISIONS
from building_inspection.repositories import ChecklistItemRepository, InspectionRepository
from building_inspection.services.progress_aggregator import summarize_checklist_items
from building_inspection.utils.helpers import text_value

logger = logging.getLogger(__name__)

_items = ChecklistItemRepository()
_inspections = InspectionRepository()

_UPDATABLE = ("category", "item", "decision", "notes", "photo_ids", "sort_order")


def _validate(data: dict, partial: bool = False) -> dict:
    clean = {k: data[k] for k in _UPDATABLE if k in data}

    if not partial or "category" in clean:
        category = text_value(clean.get("category"), "category").upper()
        if category not in CHECKLIST_CATEGORIES:
            raise ValidationError(
                f"category must be one of: {', '.join(CHECKLIST_CATEGORIES)}",
                details={"category": data.get("category")},
            )
        clean["category"] = category

    if not partial or "decision" in clean:
        decision = text_value(clean.get("decision"), "decision").upper()
        if decision not in DECISIONS:
            raise ValidationError(
                f"decision must be one of: {', '.join(DECISIONS)}",
                details={"decision": data.get("decision")},
            )
        clean["decision"] = decision

    if not partial or "item" in clean:
        label = text_value(clean.get("item"), "item")
        if not label:
            raise ValidationError("item is required.")
        clean["item"] = label

    if "photo_ids" in clean:
        clean["photo_ids"] = list(clean["photo_ids"] or [])
    return clean


def create_item(inspection_id: str, data: dict) -> dict:
    _inspections.get(inspection_id)
    item = _items.create(inspection_id=inspection_id, **_validate(data))
    db.session.commit()
    logger.info("Checklist item created id=%s inspection=%s decision=%s",
                item.id, inspection_id, item.decision)
    return item.to_dict()


def bulk_create(inspection_id: str, rows: list[dict]) -> list[dict]:
    _inspections.get(inspection_id)
    clean = [{"inspection_id": inspection_id, **_validate(row)} for row in rows]
    items = _items.bulk_create(clean)
    db.session.commit()
    logger.info("Checklist items bulk-created inspection=%s count=%d", inspection_id, len(items))
    return [i.to_dict() for i in items]


def list_items(inspection_id: str, category: str | None = None,
               decision: str | None = None) -> list[dict]:
    _inspections.get(inspection_id)
    return [i.to_dict() for i in _items.find_by_parent(inspection_id,
                                                       category=category, decision=decision)]


def get_item(item_id: str) -> dict:
    return _items.get(item_id).to_dict()


def update_item(item_id: str, data: dict) -> dict:
    item = _items.update(item_id, **_validate(data, partial=True))
    db.session.commit()
    logger.info("Checklist item updated id=%s decision=%s", item_id, item.decision)
    return item.to_dict()


def delete_item(item_id: str) -> None:
    _items.delete(item_id)
    db.session.commit()
    logger.info("Checklist item deleted id=%s", item_id)


def reorder(inspection_id: str, ordered_ids: list[str]) -> list[dict]:
    _inspections.get(inspection_id)
    _items.reorder(inspection_id, ordered_ids)
    db.session.commit()
    return list_items(inspection_id)


def get_grouped_by_category(inspection_id: str) -> dict[str, list[dict]]:
    _inspections.get(inspection_id)
    grouped: dict[str, list[dict]] = {}
    for item in _items.find_by_parent(inspection_id):
        grouped.setdefault(item.category, []).append(item.to_dict())
    return grouped


def get_summary(inspection_id: str) -> dict:
    _inspections.get(inspection_id)
    return summarize_checklist_items(_items.find_by_parent(inspection_id))
