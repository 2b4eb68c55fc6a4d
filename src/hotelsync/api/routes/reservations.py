"""Reservation listing for the dashboard.

GET /reservations?status=...  → tenant reservations with guest contact
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from hotelsync.api.rbac import TenantRoleContext, require_permission
from hotelsync.infra.db import txn
from hotelsync.infra.repositories.reservations_repository import list_reservations
from hotelsync.pms.models import RESERVATION_STATUSES

router = APIRouter(prefix="/reservations", tags=["reservations"])


@router.get("")
def get_reservations(
    status: str | None = None,
    ctx: TenantRoleContext = Depends(require_permission("reservations:read")),
) -> list[dict]:
    """List reservations, latest check-in first.

    ``status`` filters on a canonical status; omitted or "all" lists everything.
    """
    if status == "all":
        status = None
    if status is not None and status not in RESERVATION_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status")

    with txn() as cur:
        return list_reservations(cur, tenant_id=ctx.tenant_id, status=status)
