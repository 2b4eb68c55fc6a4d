"""Manual sync entry point used by the dashboard "Sync now" action.

Only the tenant owner may trigger a sync. The result is always a plain dict
for the UI notification: ``{"success": True, "message": ...}`` or
``{"error": ...}``; nothing raised below this point reaches the caller.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from hotelsync.infra.pms_settings import get_pms_config
from hotelsync.infra.tenants import TenantAuthorizationError, require_owner
from hotelsync.infra.time import date_window, utc_now
from hotelsync.observability.correlation import bind_tenant_id, reset_tenant_id
from hotelsync.observability.logging import get_logger

from .adapter import PMSConfigurationError
from .registry import resolve
from .sync_service import sync_reservations

logger = get_logger(__name__)

# Days on each side of now; catches stays already in progress
SYNC_WINDOW_DAYS = 7

NOT_CONFIGURED_ERROR = "PMS Sync is not configured or is inactive."
GENERIC_SYNC_ERROR = "Failed to synchronize reservations."


def trigger_manual_sync(user_id: str, *, now: datetime | None = None) -> dict[str, Any]:
    """Run a sync of the caller's tenant over the default window.

    Args:
        user_id: Authenticated user UUID.
        now: Reference time for the window. Defaults to utc_now().

    Returns:
        ``{"success": True, "message": str}`` or ``{"error": str}``.
    """
    try:
        membership = require_owner(user_id)
    except TenantAuthorizationError as e:
        logger.warning("pms sync denied", extra={"extra_fields": {"reason": str(e)}})
        return {"error": str(e)}
    except Exception as e:
        logger.exception("pms sync authorization lookup failed")
        return {"error": str(e) or "An unexpected error occurred."}

    token = bind_tenant_id(membership.tenant_id)
    try:
        return _run(membership.tenant_id, now or utc_now())
    except Exception as e:
        logger.exception("pms sync trigger failed")
        return {"error": str(e) or "An unexpected error occurred."}
    finally:
        reset_tenant_id(token)


def _run(tenant_id: str, now: datetime) -> dict[str, Any]:
    config = get_pms_config(tenant_id)
    if config is None or not config.is_active:
        return {"error": NOT_CONFIGURED_ERROR}

    adapter = resolve(config.pms_type)
    try:
        adapter.init(config.credentials, config.endpoint)
    except PMSConfigurationError as e:
        logger.warning(
            "pms adapter configuration invalid",
            extra={"extra_fields": {"pms_type": config.pms_type, "error": str(e)}},
        )
        return {"error": str(e)}

    start_date, end_date = date_window(now, SYNC_WINDOW_DAYS)
    logger.info(
        "pms sync started",
        extra={
            "extra_fields": {
                "pms_type": config.pms_type,
                "start_date": start_date,
                "end_date": end_date,
            }
        },
    )

    result = sync_reservations(tenant_id, adapter, start_date, end_date)
    if result.success:
        return {"success": True, "message": result.message}
    return {"error": result.error or GENERIC_SYNC_ERROR}
