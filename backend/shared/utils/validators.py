"""
Shared validators for input sanitization.
Raise ValidationError (400) so callers can tell malformed input apart from
missing or foreign records.
"""

from typing import Any, Optional

from shared.config.settings import settings
from shared.utils.exceptions import ValidationError


def validate_id(value: Any, field: str = "ID") -> None:
    """
    Validate an entity identifier.

    None is always rejected. Integer ids must be positive; other id types
    (UUIDs, strings) only need to be present.

    Raises:
        ValidationError: If the id is missing or not positive.
    """
    if value is None:
        raise ValidationError(f"{field} cannot be null", field=field)

    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a positive number", field=field, value=value)

    if isinstance(value, int) and value <= 0:
        raise ValidationError(f"{field} must be a positive number", field=field, value=value)


def validate_required_string(value: Optional[str], field: str) -> str:
    """
    Validate that a string field is present and not blank.

    Returns:
        The value, unchanged.

    Raises:
        ValidationError: If the value is None, empty or whitespace only.
    """
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} cannot be null or empty", field=field)
    return value


def escape_like_pattern(value: str) -> str:
    """
    Escape special characters in LIKE patterns.

    SQL LIKE uses % and _ as wildcards. A search for "50%" must match the
    literal text, not every row whose name starts with "50".

    Args:
        value: The search string to escape

    Returns:
        The escaped string safe for use in LIKE patterns (escape char: backslash)
    """
    if not value:
        return value

    # Escape the escape character first, then the wildcards
    value = value.replace("\\", "\\\\")
    value = value.replace("%", "\\%")
    value = value.replace("_", "\\_")
    return value


def normalize_search_term(value: Optional[str]) -> Optional[str]:
    """
    Normalize a free-text search term.

    Returns None for missing or blank terms, otherwise the stripped term
    truncated to the configured maximum length.
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    return value[: settings.max_search_term_length]
