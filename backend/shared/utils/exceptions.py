"""
Centralized HTTP exceptions for consistent error handling.

Every error the record service can raise is defined here. Each one carries
the HTTP status a controller should answer with and logs itself, with
structured context, at the moment it is raised.

Usage:
    from shared.utils.exceptions import NotFoundError, OwnershipDeniedError

    raise NotFoundError("TransactionSource", source_id)
    raise OwnershipDeniedError("TransactionSource", entity_id=source_id)
    raise ValidationError("Name cannot be null or empty", field="name")
"""

from fastapi import HTTPException, status
from typing import Any

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    """
    Base exception with automatic logging.

    All custom exceptions should inherit from this class
    to ensure consistent logging and response format.
    """

    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, status_code=status_code, **log_context)

        super().__init__(status_code=status_code, detail=detail, headers=headers)

    def __str__(self) -> str:
        return self.detail


# =============================================================================
# 400 Bad Request Errors
# =============================================================================


class ValidationError(AppException):
    """
    Invalid argument (400): bad id, blank required field, bad sort field.

    Usage:
        raise ValidationError("ID must be a positive number", field="id", value=-1)
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            log_level="warning",
            **log_context,
        )


# =============================================================================
# 401 / 403 Access Errors
# =============================================================================


class TenantContextUnavailableError(AppException):
    """
    No current tenant is bound for a tenant-scoped operation (401).

    This points at a broken integration upstream (the request was never
    authenticated, or the tenant was not bound), so it is logged as an error.
    """

    def __init__(self, entity: str | None = None, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User context not available",
            log_level="error",
            entity=entity,
            **log_context,
        )


class ForbiddenError(AppException):
    """
    Authorization/permission error (403).

    Usage:
        raise ForbiddenError("delete this goal")
    """

    def __init__(self, action: str | None = None, **log_context: Any):
        if action:
            detail = f"Not authorized to {action}"
        else:
            detail = "Access denied"

        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            log_level="warning",
            action=action,
            **log_context,
        )


class OwnershipDeniedError(ForbiddenError):
    """
    Entity exists but belongs to another tenant (403).

    The message is deliberately generic: it never names the owner.
    """

    def __init__(self, entity: str, **log_context: Any):
        AppException.__init__(
            self,
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied: entity does not belong to current user",
            log_level="warning",
            entity=entity,
            **log_context,
        )


# =============================================================================
# 404 Not Found Errors
# =============================================================================


class NotFoundError(AppException):
    """
    Entity not found error (404).

    Usage:
        raise NotFoundError("FinancialGoal", 123)
        raise NotFoundError("User")
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        if entity_id is not None:
            detail = f"{entity} with id {entity_id} not found"
        else:
            detail = f"{entity} not found"

        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail,
            log_level="warning",
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# =============================================================================
# 409 Conflict Errors
# =============================================================================


class ConflictError(AppException):
    """
    Resource conflict error (409).
    """

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
            log_level="warning",
            **log_context,
        )


class DuplicateNameError(ConflictError):
    """Another entity of the same kind (and tenant) already uses this name."""

    def __init__(self, entity: str, name: str | None = None, **log_context: Any):
        super().__init__(
            f"{entity} with this name already exists",
            entity=entity,
            name=name,
            **log_context,
        )


# =============================================================================
# 500 / 501 Server Errors
# =============================================================================


class InternalError(AppException):
    """
    Internal server error (500).
    """

    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            log_level="error",
            **log_context,
        )


class DatabaseError(InternalError):
    """Database operation failed."""

    def __init__(self, operation: str, **log_context: Any):
        detail = f"Database error while trying to {operation}. Please try again."
        super().__init__(detail, operation=operation, **log_context)


class UnsupportedOperationError(AppException):
    """
    Operation not offered by this kind of entity (501).

    Usage:
        raise UnsupportedOperationError("FinancialGoal", "find_by_name")
    """

    def __init__(self, entity: str, operation: str, **log_context: Any):
        super().__init__(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            detail="This service does not support name-based operations",
            log_level="warning",
            entity=entity,
            operation=operation,
            **log_context,
        )
