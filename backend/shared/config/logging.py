"""
Centralized structured logging for the backend.
Uses Python's standard logging with JSON formatting for production.

Every record is stamped with the current tenant id (when one is bound)
so that access-control decisions can be traced per caller.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from shared.config.settings import settings


class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    Outputs logs in a format easily parseable by log aggregation tools.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        tenant_id = getattr(record, "tenant_id", None)
        if tenant_id is not None and tenant_id != "-":
            log_data["tenant_id"] = tenant_id

        # Add extra fields if present
        if hasattr(record, "extra_data") and record.extra_data:
            log_data["data"] = record.extra_data

        # Add exception info if present
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Add source location in debug mode
        if settings.debug:
            log_data["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(log_data, default=str)


class DevelopmentFormatter(logging.Formatter):
    """
    Human-readable formatter for development.
    """

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"
    DIM = "\033[2m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        timestamp = datetime.now().strftime("%H:%M:%S")

        tenant_id = getattr(record, "tenant_id", None)
        if tenant_id is not None and tenant_id != "-":
            tenant_str = f"{self.DIM}[tenant={tenant_id}]{self.RESET} "
        else:
            tenant_str = ""

        message = f"{color}[{timestamp}] {record.levelname:8}{self.RESET} {tenant_str}{record.name}: {record.getMessage()}"

        if hasattr(record, "extra_data") and record.extra_data:
            data_str = " | ".join(f"{k}={v}" for k, v in record.extra_data.items())
            message += f" ({data_str})"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


class StructuredLogger(logging.Logger):
    """
    Custom logger that supports structured data.

        logger.info("Entity created", entity="TransactionSource", entity_id=7)
    """

    def _log_with_data(
        self,
        level: int,
        msg: str,
        args: tuple,
        exc_info: Any = None,
        extra: dict | None = None,
        **kwargs: Any,
    ) -> None:
        """Log with optional structured data."""
        if not self.isEnabledFor(level):
            return
        if extra is None:
            extra = {}
        extra["extra_data"] = kwargs if kwargs else None
        super()._log(level, msg, args, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.DEBUG, msg, args, **kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.INFO, msg, args, **kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log_with_data(logging.WARNING, msg, args, **kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        exc_info = kwargs.pop("exc_info", None)
        self._log_with_data(logging.ERROR, msg, args, exc_info=exc_info, **kwargs)

    def critical(self, msg: str, *args: Any, **kwargs: Any) -> None:
        exc_info = kwargs.pop("exc_info", None)
        self._log_with_data(logging.CRITICAL, msg, args, exc_info=exc_info, **kwargs)


# Set custom logger class
logging.setLoggerClass(StructuredLogger)


def setup_logging() -> None:
    """
    Configure logging for the application.
    Call this once at application startup.
    """
    # Import here to avoid circular imports
    from shared.security.tenant_context import TenantContextFilter

    if settings.debug:
        log_level = logging.DEBUG
    else:
        log_level = logging.getLevelName(settings.log_level.upper())
        if not isinstance(log_level, int):
            log_level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(TenantContextFilter())

    if settings.environment == "production":
        formatter = StructuredFormatter()
    else:
        formatter = DevelopmentFormatter()

    handler.setFormatter(formatter)

    # Configure root logger
    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    # SQL statement logging is controlled by DATABASE_ECHO, not DEBUG
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_logger(name: str) -> StructuredLogger:
    """
    Get a logger instance with the given name.

    Usage:
        from shared.config.logging import get_logger
        logger = get_logger(__name__)

        logger.info("Entity updated", entity="FinancialGoal", entity_id=3)
        logger.error("Commit failed", entity="FinancialGoal", exc_info=True)
    """
    return logging.getLogger(name)  # type: ignore


def mask_user_id(user_id: int | str | None) -> str:
    """
    Mask a user ID for logging in sensitive contexts.

    Ownership denials are logged with a masked tenant id so that log readers
    cannot correlate which tenant owns a record.

    Args:
        user_id: The user ID to mask.

    Returns:
        Masked user ID string safe for logging.
    """
    if user_id is None:
        return "<no-user>"

    user_str = str(user_id)
    if len(user_str) <= 2:
        return user_str[0] + "***"
    return f"{user_str[:2]}***"


# Dedicated logger for access-control decisions
security_audit_logger = get_logger("security.audit")
