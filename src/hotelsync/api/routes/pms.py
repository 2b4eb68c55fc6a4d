"""PMS integration endpoints for the admin dashboard.

POST /pms/sync     → run a manual sync (owner only, enforced by the trigger)
GET  /pms/config   → current configuration, secrets masked (settings:read)
PUT  /pms/config   → create or replace the configuration (owner only)
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict

from hotelsync.api.auth import CurrentUser, get_current_user
from hotelsync.api.rbac import TenantRoleContext, require_permission, require_tenant_owner
from hotelsync.infra.pms_settings import (
    InvalidPmsConfigError,
    get_pms_config,
    save_pms_config,
    validate_pms_config,
)
from hotelsync.observability.logging import get_logger
from hotelsync.pms.sync_trigger import trigger_manual_sync

logger = get_logger(__name__)

router = APIRouter(prefix="/pms", tags=["pms"])


class SavePmsConfigRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    pms_type: str
    endpoint: str
    api_key: str
    is_active: bool = False


@router.post("/sync")
def sync_now(user: CurrentUser = Depends(get_current_user)) -> dict:
    """Trigger a reservation sync for the caller's tenant.

    Always answers 200; the body is ``{"success": true, "message": ...}``
    or ``{"error": ...}`` for the dashboard toast.
    """
    return trigger_manual_sync(user.id)


@router.get("/config")
def read_config(
    ctx: TenantRoleContext = Depends(require_permission("settings:read")),
) -> dict | None:
    config = get_pms_config(ctx.tenant_id)
    return config.masked() if config else None


@router.put("/config")
def write_config(
    body: SavePmsConfigRequest,
    ctx: TenantRoleContext = Depends(require_tenant_owner),
) -> dict:
    """Save the tenant PMS configuration.

    Raises 400 if a field is empty or pms_type is not supported.
    """
    try:
        config = validate_pms_config(
            pms_type=body.pms_type,
            endpoint=body.endpoint,
            api_key=body.api_key,
            is_active=body.is_active,
        )
    except InvalidPmsConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))

    save_pms_config(ctx.tenant_id, config)
    logger.info(
        "pms configuration saved",
        extra={
            "extra_fields": {
                "tenant_id": ctx.tenant_id,
                "pms_type": config.pms_type,
                "is_active": config.is_active,
            }
        },
    )
    return {"success": True}
