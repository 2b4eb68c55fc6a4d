"""Reservation sync: reconcile one PMS into a tenant's guests and reservations.

Flow per run:
  1. Pull reservations overlapping the window from the adapter.
  2. For each reservation, in order:
     a. pull the guest profile (missing guest → reservation skipped);
     b. upsert the guest on (tenant_id, external_guest_id);
     c. map the native status to a canonical one;
     d. upsert the reservation on (tenant_id, external_reservation_id).
  3. Report how many reservations were written.

The run shares one connection and each upsert commits in its own short
transaction on it, so a failing row never takes the rest of the run down
with it. Re-running with the same PMS data updates rows in place.
sync_reservations() never raises: every failure is reported through
SyncResult.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import psycopg2
from psycopg2.extensions import connection as PgConnection

from hotelsync.infra.db import get_conn, txn
from hotelsync.infra.repositories.guests_repository import upsert_guest
from hotelsync.infra.repositories.reservations_repository import upsert_reservation
from hotelsync.observability.logging import get_logger
from hotelsync.observability.redaction import safe_log_context

from .adapter import PMSAdapter
from .models import AdapterReservation

logger = get_logger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a sync run. ``count`` only includes confirmed writes."""

    success: bool
    count: int = 0
    message: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "count": self.count, "message": self.message}
        return {"success": False, "error": self.error}


def _sync_one(
    conn: PgConnection,
    tenant_id: str,
    adapter: PMSAdapter,
    reservation: AdapterReservation,
) -> bool:
    """Write one reservation and its guest. Returns True if the reservation row was written."""
    log_ctx = {
        "tenant_id": tenant_id,
        **safe_log_context(
            external_reservation_id=reservation.external_reservation_id,
            external_guest_id=reservation.external_guest_id,
        ),
    }

    try:
        guest = adapter.pull_guest(reservation.external_guest_id)
    except Exception as e:
        logger.warning(
            "guest pull failed, skipping reservation",
            extra={"extra_fields": {**log_ctx, "error_type": type(e).__name__, "error": str(e)}},
        )
        return False

    if guest is None:
        logger.warning(
            "guest not found in pms, skipping reservation",
            extra={"extra_fields": log_ctx},
        )
        return False

    try:
        with txn(conn) as cur:
            guest_id = upsert_guest(cur, tenant_id=tenant_id, guest=guest)
    except psycopg2.Error as e:
        logger.error(
            "guest upsert failed, skipping reservation",
            extra={"extra_fields": {**log_ctx, "error_type": type(e).__name__, "error": str(e)}},
        )
        return False

    status = adapter.map_status(reservation.external_status)

    try:
        with txn(conn) as cur:
            upsert_reservation(
                cur,
                tenant_id=tenant_id,
                guest_id=guest_id,
                reservation=reservation,
                status=status,
            )
    except psycopg2.Error as e:
        logger.error(
            "reservation upsert failed",
            extra={"extra_fields": {**log_ctx, "error_type": type(e).__name__, "error": str(e)}},
        )
        return False

    return True


def sync_reservations(
    tenant_id: str,
    adapter: PMSAdapter,
    start_date: str,
    end_date: str,
) -> SyncResult:
    """Pull reservations in ``[start_date, end_date]`` and upsert them for a tenant.

    Args:
        tenant_id: Tenant whose rows are written. Nothing outside it is touched.
        adapter: Initialized PMS adapter.
        start_date: Window start, ``YYYY-MM-DD``.
        end_date: Window end, ``YYYY-MM-DD`` (inclusive).

    Returns:
        SyncResult. success=False only when the run failed as a whole (e.g.
        the PMS listing could not be fetched); skipped items leave it True.
    """
    run_ctx = {"tenant_id": tenant_id, "start_date": start_date, "end_date": end_date}

    try:
        reservations = adapter.pull_reservations(start_date, end_date)

        if not reservations:
            logger.info("pms sync found no reservations", extra={"extra_fields": run_ctx})
            return SyncResult(success=True, count=0, message="No reservations found")

        synced = 0
        conn = get_conn()
        try:
            for reservation in reservations:
                if _sync_one(conn, tenant_id, adapter, reservation):
                    synced += 1
        finally:
            conn.close()

        logger.info(
            "pms sync completed",
            extra={
                "extra_fields": {
                    **run_ctx,
                    "pulled": len(reservations),
                    "synced": synced,
                    "skipped": len(reservations) - synced,
                }
            },
        )
        return SyncResult(
            success=True,
            count=synced,
            message=f"Successfully synced {synced} reservations.",
        )
    except Exception as e:
        logger.exception(
            "pms sync failed",
            extra={"extra_fields": {**run_ctx, "error_type": type(e).__name__}},
        )
        return SyncResult(success=False, error=str(e))
