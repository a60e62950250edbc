"""
Shared module for cross-cutting concerns of the finance API.

STRUCTURE:
- shared.security: Current tenant (user) context
  - tenant_context.py: ContextVar, tenant_scope(), middleware, logging filter

- shared.infrastructure: Database
  - db.py: SQLAlchemy sessions, safe_commit()

- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging
  - constants.py: Filter keys, limits, enums

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Id, required string and search term validation

IMPORT EXAMPLES:
    from shared.security.tenant_context import tenant_scope, get_current_tenant_id
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import FilterKeys, Limits
    from shared.utils.exceptions import NotFoundError, OwnershipDeniedError
    from shared.utils.validators import validate_id
"""
