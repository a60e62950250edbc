"""
User ownership guard.

Enforces per-user isolation for tenant-scoped entity modules. The current
tenant comes from a provider callable (the request-scoped tenant context by
default); the guard only reads it.

Fail-closed: a tenant-scoped operation without a current tenant raises
TenantContextUnavailableError, it never falls back to "no filtering".
For modules that are not tenant-scoped every check is a no-op.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Optional

from shared.config.constants import FilterKeys
from shared.config.logging import get_logger, mask_user_id, security_audit_logger
from shared.security.tenant_context import get_current_tenant_id
from shared.utils.exceptions import OwnershipDeniedError, TenantContextUnavailableError

if TYPE_CHECKING:
    from finance_api.services.crud.contracts import EntityModule, HasId, HasOwner

logger = get_logger(__name__)

TenantProvider = Callable[[], Optional[int]]


class OwnershipGuard:
    def __init__(
        self,
        module: "EntityModule",
        tenant_provider: TenantProvider = get_current_tenant_id,
    ):
        self._module = module
        self._tenant_provider = tenant_provider

    @property
    def enabled(self) -> bool:
        return self._module.tenant_scoped

    def require_current_tenant(self) -> int:
        """
        Get the current tenant id.

        Raises:
            TenantContextUnavailableError: If no tenant is bound.
        """
        tenant_id = self._tenant_provider()
        if tenant_id is None:
            raise TenantContextUnavailableError(entity=self._module.display_name)
        return tenant_id

    def current_tenant_if_enabled(self) -> Optional[int]:
        """Current tenant for tenant-scoped modules, None otherwise."""
        if not self.enabled:
            return None
        return self.require_current_tenant()

    def assert_ownership(self, entity: "HasId", tenant_id: Optional[int]) -> None:
        """
        Check that a loaded entity belongs to the tenant.

        Must run before the entity is mapped or mutated.

        Raises:
            OwnershipDeniedError: If the entity belongs to someone else.
        """
        if not self.enabled:
            return

        if not self._module.belongs_to_tenant(entity, tenant_id):
            security_audit_logger.warning(
                "Ownership check denied",
                entity=self._module.display_name,
                entity_id=getattr(entity, "id", None),
                tenant=mask_user_id(tenant_id),
            )
            raise OwnershipDeniedError(self._module.display_name, entity_id=getattr(entity, "id", None))

    def assign_owner(self, entity: "HasOwner", tenant_id: Optional[int]) -> None:
        """Set the owner of a new entity. Called once, before the first save."""
        if not self.enabled:
            return
        self._module.assign_owner(entity, tenant_id)

    def inject_owner_filter(self, filters: Optional[dict[str, Any]]) -> dict[str, Any]:
        """
        Add the current tenant under the owner key.

        The caller's dict is modified in place and returned; None becomes a
        new dict. A value already present under the owner key is kept
        (first write wins). Callers sharing one filter dict across calls
        must pass a fresh dict each time.

        Raises:
            TenantContextUnavailableError: If the module is tenant-scoped and
                no tenant is bound, whatever the filters contain.
        """
        if filters is None:
            filters = {}

        if not self.enabled:
            return filters

        tenant_id = self.require_current_tenant()
        if filters.get(FilterKeys.USER_ID) is None:
            filters[FilterKeys.USER_ID] = tenant_id
        else:
            logger.debug(
                "Keeping caller-supplied owner filter",
                entity=self._module.display_name,
            )
        return filters
