"""Guests repository - tenant-scoped guest profiles synced from a PMS.

Uses raw SQL with psycopg2 (no ORM).

The merge key is (tenant_id, external_guest_id), backed by a UNIQUE
constraint. Upserts use INSERT ... ON CONFLICT DO UPDATE so two sync runs
racing on the same guest resolve atomically in Postgres (last write wins).
The caller is responsible for running this inside a transaction
(with txn() as cur:).
"""

from psycopg2.extensions import cursor as PgCursor

from hotelsync.pms.models import AdapterGuest

LIST_LIMIT = 50


def upsert_guest(cur: PgCursor, *, tenant_id: str, guest: AdapterGuest) -> str:
    """Insert or update a guest keyed on (tenant_id, external_guest_id).

    Args:
        cur:       Database cursor (must be inside a transaction).
        tenant_id: Owning tenant.
        guest:     Profile pulled from the PMS.

    Returns:
        UUID string of the persisted guest.
    """
    cur.execute(
        """
        INSERT INTO guests (
            tenant_id, external_guest_id, full_name, email, phone, country
        )
        VALUES (%s, %s, %s, %s, %s, %s)
        ON CONFLICT (tenant_id, external_guest_id) DO UPDATE
        SET full_name  = EXCLUDED.full_name,
            email      = EXCLUDED.email,
            phone      = EXCLUDED.phone,
            country    = EXCLUDED.country,
            updated_at = now()
        RETURNING id
        """,
        (
            tenant_id,
            guest.external_guest_id,
            guest.name,
            guest.email,
            guest.phone,
            guest.country,
        ),
    )
    row = cur.fetchone()
    return str(row[0])


def list_guests(cur: PgCursor, *, tenant_id: str, limit: int = LIST_LIMIT) -> list[dict]:
    """Most recently created guests of a tenant."""
    cur.execute(
        """
        SELECT id, external_guest_id, full_name, email, phone, country, created_at
        FROM guests
        WHERE tenant_id = %s
        ORDER BY created_at DESC
        LIMIT %s
        """,
        (tenant_id, limit),
    )
    return [
        {
            "id": str(row[0]),
            "external_guest_id": row[1],
            "name": row[2],
            "email": row[3],
            "phone": row[4],
            "country": row[5],
            "created_at": row[6].isoformat() if hasattr(row[6], "isoformat") else str(row[6]),
        }
        for row in cur.fetchall()
    ]
