"""Shared input helpers for the service layer.

text_value:  JSON string field → stripped str, ValidationError for any other type
"""

from building_inspection.core.exceptions import ValidationError


def text_value(value, field: str, default: str = "") -> str:
    """Return *value* stripped, or *default* when it is None.

    Numbers, lists and objects raise ValidationError (``{"action": 5}``).
    """
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string.", details={field: value})
    return value.strip()
