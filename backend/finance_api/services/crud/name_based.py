"""
Name-based operations for entities with a unique display name.

Names compare case-insensitively. For tenant-scoped entities every lookup is
restricted to the current tenant, so two users may both own a "Wallet".
Entity modules without the name_based capability reject every operation
with UnsupportedOperationError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, Optional, Sequence, TypeVar

from shared.config.logging import get_logger
from shared.utils.exceptions import DuplicateNameError, UnsupportedOperationError
from shared.utils.validators import validate_required_string

if TYPE_CHECKING:
    from finance_api.services.crud.contracts import EntityModule, HasName
    from finance_api.services.crud.ownership import OwnershipGuard
    from finance_api.services.crud.repository import EntityRepository

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound="HasName")


class NameBasedOperations(Generic[ModelT]):
    def __init__(
        self,
        module: "EntityModule",
        repository: "EntityRepository[ModelT]",
        guard: "OwnershipGuard",
    ):
        self._module = module
        self._repo = repository
        self._guard = guard

    def _require_capability(self, operation: str) -> None:
        if not self._module.name_based:
            raise UnsupportedOperationError(self._module.display_name, operation)

    def find_by_name(self, name: str) -> Optional[ModelT]:
        """Entity whose name equals `name` ignoring case, if any."""
        self._require_capability("find_by_name")
        validate_required_string(name, "Name")
        return self._repo.find_by_name_ignore_case(
            name, owner_id=self._guard.current_tenant_if_enabled()
        )

    def exists_by_name(self, name: str) -> bool:
        self._require_capability("exists_by_name")
        validate_required_string(name, "Name")
        return self._repo.exists_by_name_ignore_case(
            name, owner_id=self._guard.current_tenant_if_enabled()
        )

    def find_all_ordered_by_name(self) -> Sequence[ModelT]:
        self._require_capability("find_all_ordered_by_name")
        return self._repo.find_all_order_by_name(
            owner_id=self._guard.current_tenant_if_enabled()
        )

    def validate_name_unique(self, name: str) -> None:
        """
        Raises:
            DuplicateNameError: If another entity already uses the name.
        """
        self._require_capability("validate_name_unique")
        if self.exists_by_name(name):
            raise DuplicateNameError(self._module.display_name, name)

    def validate_name_unique_for_update(self, name: str, current_name: Optional[str]) -> None:
        """
        Same as validate_name_unique, except that an entity may always keep
        its own name (compared ignoring case).
        """
        self._require_capability("validate_name_unique_for_update")
        if _same_name(name, current_name):
            logger.debug("Name unchanged, skipping uniqueness check", entity=self._module.display_name)
            return
        self.validate_name_unique(name)


def _same_name(name: Any, current_name: Any) -> bool:
    if name is None or current_name is None:
        return False
    return str(name).lower() == str(current_name).lower()
