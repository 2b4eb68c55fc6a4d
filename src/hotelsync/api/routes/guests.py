"""Guest listing for the dashboard.

GET /guests  → latest guests of the caller's tenant
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from hotelsync.api.rbac import TenantRoleContext, require_permission
from hotelsync.infra.db import txn
from hotelsync.infra.repositories.guests_repository import list_guests

router = APIRouter(prefix="/guests", tags=["guests"])


@router.get("")
def get_guests(
    ctx: TenantRoleContext = Depends(require_permission("guests:read")),
) -> list[dict]:
    with txn() as cur:
        return list_guests(cur, tenant_id=ctx.tenant_id)
