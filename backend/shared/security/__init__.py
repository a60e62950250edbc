"""
Security module: current tenant (user) context.
"""

from shared.security.tenant_context import (
    TenantContextFilter,
    TenantContextMiddleware,
    current_tenant_var,
    get_current_tenant_id,
    has_current_tenant,
    header_tenant_resolver,
    tenant_scope,
)

__all__ = [
    "TenantContextFilter",
    "TenantContextMiddleware",
    "current_tenant_var",
    "get_current_tenant_id",
    "has_current_tenant",
    "header_tenant_resolver",
    "tenant_scope",
]
