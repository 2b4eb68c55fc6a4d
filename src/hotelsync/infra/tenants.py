"""Tenant membership lookups.

A user belongs to at most one tenant (UNIQUE(user_id) on tenant_users),
with one of the roles owner, admin or agent.
"""

from __future__ import annotations

from dataclasses import dataclass

from .db import fetchall, txn

ROLES = ("owner", "admin", "agent")


class TenantAuthorizationError(Exception):
    """Raised when a user has no tenant or lacks the required role."""

    pass


@dataclass(frozen=True)
class TenantMembership:
    """A user's tenant and role."""

    tenant_id: str
    user_id: str
    role: str


def _list_memberships(user_id: str) -> list[TenantMembership]:
    with txn() as cur:
        rows = fetchall(
            cur,
            "SELECT tenant_id, role FROM tenant_users WHERE user_id = %s",
            (user_id,),
        )
    return [TenantMembership(tenant_id=str(r[0]), user_id=user_id, role=r[1]) for r in rows]


def get_user_tenant(user_id: str) -> TenantMembership | None:
    """Tenant membership of a user, or None if the user has not onboarded.

    Raises:
        TenantAuthorizationError: If the user is attached to several tenants.
    """
    memberships = _list_memberships(user_id)
    if not memberships:
        return None
    if len(memberships) > 1:
        raise TenantAuthorizationError("User is attached to more than one tenant.")
    return memberships[0]


def require_user_tenant(user_id: str) -> TenantMembership:
    """Membership of a user that must have completed onboarding.

    Raises:
        TenantAuthorizationError: If the user has no tenant.
    """
    membership = get_user_tenant(user_id)
    if membership is None:
        raise TenantAuthorizationError("User must have a tenant. Please complete onboarding.")
    return membership


def require_owner(user_id: str) -> TenantMembership:
    """Membership of a user that must own exactly one tenant.

    Raises:
        TenantAuthorizationError: If the user has no tenant or is not its owner.
    """
    membership = require_user_tenant(user_id)
    if membership.role != "owner":
        raise TenantAuthorizationError("Only the tenant owner can perform this action.")
    return membership
