"""Per-tenant PMS configuration.

One row per tenant in ``pms_configurations``:
pms_type, endpoint, credentials (JSONB) and an is_active switch.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from .db import fetchone, txn

PMS_TYPES = ("cloudbeds", "mews", "custom", "qloapps")


class InvalidPmsConfigError(Exception):
    """Raised when a PMS configuration fails validation before saving."""

    pass


@dataclass(frozen=True)
class PmsConfig:
    """PMS connection settings of a tenant."""

    pms_type: str
    endpoint: str
    credentials: dict[str, str] = field(default_factory=dict)
    is_active: bool = False

    def masked(self) -> dict[str, Any]:
        """Dict form safe to return to the dashboard (secrets cut to last 4 chars)."""
        return {
            "pms_type": self.pms_type,
            "endpoint": self.endpoint,
            "credentials": {k: _mask(v) for k, v in self.credentials.items()},
            "is_active": self.is_active,
        }


def _mask(secret: str) -> str:
    if not secret:
        return ""
    return "****" + secret[-4:] if len(secret) > 4 else "****"


def get_pms_config(tenant_id: str) -> PmsConfig | None:
    """Load the PMS configuration of a tenant.

    Args:
        tenant_id: Tenant UUID.

    Returns:
        PmsConfig, or None if the tenant never configured a PMS.
    """
    with txn() as cur:
        row = fetchone(
            cur,
            """
            SELECT pms_type, endpoint, credentials, is_active
            FROM pms_configurations
            WHERE tenant_id = %s
            """,
            (tenant_id,),
        )
    if row is None:
        return None

    credentials = row[2] if isinstance(row[2], dict) else {}
    return PmsConfig(
        pms_type=row[0],
        endpoint=row[1],
        credentials={k: str(v) for k, v in credentials.items()},
        is_active=bool(row[3]),
    )


def validate_pms_config(
    *,
    pms_type: str,
    endpoint: str,
    api_key: str,
    is_active: bool,
) -> PmsConfig:
    """Build a PmsConfig from dashboard input.

    Raises:
        InvalidPmsConfigError: If a field is empty or pms_type is unknown.
    """
    pms_type = (pms_type or "").strip()
    endpoint = (endpoint or "").strip()
    api_key = (api_key or "").strip()

    if not pms_type or not endpoint or not api_key:
        raise InvalidPmsConfigError("All fields are required")
    if pms_type not in PMS_TYPES:
        raise InvalidPmsConfigError("Invalid PMS Type")

    return PmsConfig(
        pms_type=pms_type,
        endpoint=endpoint,
        credentials={"api_key": api_key},
        is_active=is_active,
    )


def save_pms_config(tenant_id: str, config: PmsConfig) -> None:
    """Insert or replace the PMS configuration of a tenant."""
    with txn() as cur:
        cur.execute(
            """
            INSERT INTO pms_configurations (
                tenant_id, pms_type, endpoint, credentials, is_active
            )
            VALUES (%s, %s, %s, %s::jsonb, %s)
            ON CONFLICT (tenant_id) DO UPDATE
            SET pms_type    = EXCLUDED.pms_type,
                endpoint    = EXCLUDED.endpoint,
                credentials = EXCLUDED.credentials,
                is_active   = EXCLUDED.is_active,
                updated_at  = now()
            """,
            (
                tenant_id,
                config.pms_type,
                config.endpoint,
                json.dumps(config.credentials),
                config.is_active,
            ),
        )
