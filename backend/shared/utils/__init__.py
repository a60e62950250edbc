"""
Utilities module: Exceptions, validators.
"""

from shared.utils.exceptions import (
    AppException,
    DatabaseError,
    DuplicateNameError,
    NotFoundError,
    OwnershipDeniedError,
    TenantContextUnavailableError,
    UnsupportedOperationError,
    ValidationError,
)
from shared.utils.validators import (
    escape_like_pattern,
    normalize_search_term,
    validate_id,
    validate_required_string,
)

__all__ = [
    # exceptions
    "AppException",
    "DatabaseError",
    "DuplicateNameError",
    "NotFoundError",
    "OwnershipDeniedError",
    "TenantContextUnavailableError",
    "UnsupportedOperationError",
    "ValidationError",
    # validators
    "escape_like_pattern",
    "normalize_search_term",
    "validate_id",
    "validate_required_string",
]
