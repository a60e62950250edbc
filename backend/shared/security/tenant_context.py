"""
Current tenant (user) context.

The tenant id of the caller lives in a ContextVar so that each request, thread
or asyncio task sees only its own value. Services never read the variable
directly: they receive a tenant provider (get_current_tenant_id by default)
so tests can inject any provider they like.

Binding:
    - HTTP: TenantContextMiddleware resolves the tenant from the request
    - Jobs/tests: ``with tenant_scope(user_id): ...``
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Context variable for the current tenant id (None = no tenant bound)
current_tenant_var: ContextVar[int | None] = ContextVar("current_tenant", default=None)

TenantResolver = Callable[[Request], int | None]


def get_current_tenant_id() -> int | None:
    """Get the tenant id bound to the current context, if any."""
    return current_tenant_var.get()


def has_current_tenant() -> bool:
    return current_tenant_var.get() is not None


@contextmanager
def tenant_scope(tenant_id: int | None) -> Iterator[None]:
    """
    Bind a tenant id for the duration of the block.

    The previous value is restored on exit, also when the block raises.

    Usage:
        with tenant_scope(user.id):
            service.create(dto)
    """
    token = current_tenant_var.set(tenant_id)
    try:
        yield
    finally:
        current_tenant_var.reset(token)


def header_tenant_resolver(request: Request) -> int | None:
    """
    Resolve the tenant from the X-User-ID header.

    Meant for trusted internal callers (an authenticating gateway sits in
    front). Missing or non-numeric values resolve to no tenant.
    """
    raw = request.headers.get(TenantContextMiddleware.HEADER_NAME)
    if not raw:
        return None
    try:
        tenant_id = int(raw)
    except ValueError:
        return None
    return tenant_id if tenant_id > 0 else None


class TenantContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that binds the current tenant for the duration of a request.

    - Resolves the tenant with the configured resolver
    - Stores it in request.state.tenant_id
    - Always clears the binding when the request finishes
    """

    HEADER_NAME = "X-User-ID"

    def __init__(self, app, resolver: TenantResolver | None = None):
        super().__init__(app)
        self.resolver = resolver or header_tenant_resolver

    async def dispatch(
        self,
        request: Request,
        call_next: Callable,
    ) -> Response:
        tenant_id = self.resolver(request)

        token = current_tenant_var.set(tenant_id)
        try:
            request.state.tenant_id = tenant_id
            return await call_next(request)
        finally:
            current_tenant_var.reset(token)


class TenantContextFilter:
    """
    Logging filter that adds tenant_id to log records.

    Usage:
        import logging
        handler = logging.StreamHandler()
        handler.addFilter(TenantContextFilter())
    """

    def filter(self, record) -> bool:
        tenant_id = current_tenant_var.get()
        record.tenant_id = tenant_id if tenant_id is not None else "-"
        return True
