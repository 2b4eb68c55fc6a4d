"""Tenant-scoped RBAC.

Provides:
- ROLE_PERMISSIONS: permissions per role (owner has all of them)
- has_permission(): pure check
- require_permission(): FastAPI dependency resolving the caller's tenant
- require_tenant_owner(): FastAPI dependency for owner-only endpoints
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from fastapi import Depends, HTTPException

from hotelsync.api.auth import CurrentUser, get_current_user
from hotelsync.infra.tenants import TenantAuthorizationError, get_user_tenant

ALL_PERMISSIONS = "*"

ROLE_PERMISSIONS: dict[str, frozenset[str]] = {
    "owner": frozenset({ALL_PERMISSIONS}),
    "admin": frozenset(
        {
            "guests:read",
            "guests:write",
            "reservations:read",
            "reservations:write",
            "messages:read",
            "messages:send",
            "templates:read",
            "templates:write",
            "settings:read",
            "settings:write",
        }
    ),
    "agent": frozenset(
        {
            "guests:read",
            "reservations:read",
            "messages:read",
            "messages:send",
            "templates:read",
        }
    ),
}


@dataclass
class TenantRoleContext:
    """Context returned by the tenant dependencies."""

    user: CurrentUser
    tenant_id: str
    role: str


def has_permission(role: str, permission: str) -> bool:
    """Check a role against a permission. Unknown roles have none."""
    granted = ROLE_PERMISSIONS.get(role, frozenset())
    return ALL_PERMISSIONS in granted or permission in granted


def _tenant_context(user: CurrentUser) -> TenantRoleContext:
    try:
        membership = get_user_tenant(user.id)
    except TenantAuthorizationError as e:
        raise HTTPException(status_code=403, detail=str(e))
    if membership is None:
        raise HTTPException(status_code=403, detail="No tenant for user")
    return TenantRoleContext(user=user, tenant_id=membership.tenant_id, role=membership.role)


def require_permission(permission: str) -> Callable[..., TenantRoleContext]:
    """Create a dependency that requires a permission on the caller's tenant.

    Usage:
        @router.get("/guests")
        def endpoint(ctx: TenantRoleContext = Depends(require_permission("guests:read"))):
            ...
    """
    if not any(permission in perms for perms in ROLE_PERMISSIONS.values()):
        raise ValueError(f"Unknown permission: {permission}")

    def dependency(user: CurrentUser = Depends(get_current_user)) -> TenantRoleContext:
        ctx = _tenant_context(user)
        if not has_permission(ctx.role, permission):
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return ctx

    return dependency


def require_tenant_owner(user: CurrentUser = Depends(get_current_user)) -> TenantRoleContext:
    """Dependency for owner-only endpoints."""
    ctx = _tenant_context(user)
    if ctx.role != "owner":
        raise HTTPException(status_code=403, detail="Owner role required")
    return ctx
