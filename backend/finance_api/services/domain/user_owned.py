"""
Base module for records owned by a User.
"""

from __future__ import annotations

from finance_api.models import User
from finance_api.services.crud.contracts import DtoT, EntityModule, ModelT
from shared.utils.exceptions import NotFoundError


class UserOwnedModule(EntityModule[ModelT, DtoT]):
    """
    Tenant-scoped module whose owner is a row of the users table.

    Owner assignment fails with NotFoundError("User") when the current tenant
    id does not match any user.
    """

    tenant_scoped = True

    def assign_owner(self, entity: ModelT, tenant_id: int) -> None:
        user = self.session.get(User, tenant_id)
        if user is None:
            raise NotFoundError("User", tenant_id)
        entity.user = user
        entity.user_id = user.id
