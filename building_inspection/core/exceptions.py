"""
Platform-wide exception hierarchy.

Services raise these types; blueprints register handlers against them once
and get consistent HTTP status codes everywhere. None of them represent
programming bugs and none of them are retried.

Usage:
    from building_inspection.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Inspection", resource_id="abc123")
    raise ValidationError("na_reason is required", details={"na_reason": "..."})
"""


class NotFoundError(Exception):
    """Raised when a requested resource does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Inspection", "Document").
        resource_id: The key that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class InspectionNotFoundError(NotFoundError):
    """Raised when an inspection id does not resolve to a persisted inspection."""

    def __init__(self, inspection_id: str) -> None:
        super().__init__("Inspection", inspection_id)


class ChecklistNotFoundError(NotFoundError):
    """Raised when a checklist definition is not available in the registry."""

    def __init__(self, checklist_id: str) -> None:
        super().__init__("Checklist", checklist_id)


class ValidationError(Exception):
    """Raised when input fails business-rule validation in the service layer.

    Maps to HTTP 422 in blueprint error handlers.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class InvalidSectionError(Exception):
    """Raised when a section id is not part of the inspection's checklist.

    Also raised when a persisted current-section pointer no longer exists
    because the checklist definition changed after the inspection started.
    """

    def __init__(self, section_id: str | None, checklist_id: str) -> None:
        self.section_id = section_id
        self.checklist_id = checklist_id
        super().__init__(f"Invalid section '{section_id}' for checklist '{checklist_id}'")


class BoundaryError(Exception):
    """Raised when next/skip/back would move past either end of the section list."""

    def __init__(self, action: str, section_id: str | None, reason: str) -> None:
        self.action = action
        self.section_id = section_id
        self.reason = reason
        super().__init__(f"Cannot '{action}' from section '{section_id}': {reason}")


class ConflictError(Exception):
    """Raised when an operation would create a duplicate unique constraint violation.

    Maps to HTTP 409.
    """

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        msg = f"{resource} with {field}={value!r} already exists"
        super().__init__(msg)
