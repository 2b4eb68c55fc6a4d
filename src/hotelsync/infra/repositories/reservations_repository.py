"""Reservations repository - persistence for PMS-synced reservations.

Uses raw SQL with psycopg2 (no ORM).
"""

from datetime import date

from psycopg2.extensions import cursor as PgCursor

from hotelsync.pms.models import AdapterReservation, ReservationStatus


def upsert_reservation(
    cur: PgCursor,
    *,
    tenant_id: str,
    guest_id: str,
    reservation: AdapterReservation,
    status: ReservationStatus,
) -> str:
    """Insert or update a reservation keyed on (tenant_id, external_reservation_id).

    A PMS-side cancellation arrives as status "cancelled"; rows are never
    deleted here.

    Args:
        cur: Database cursor (within transaction).
        tenant_id: Owning tenant.
        guest_id: Persisted guest UUID (same tenant) resolved beforehand.
        reservation: Reservation pulled from the PMS.
        status: Canonical status already mapped by the adapter.

    Returns:
        UUID string of the persisted reservation.
    """
    cur.execute(
        """
        INSERT INTO reservations (
            tenant_id, guest_id, external_reservation_id, room_number,
            check_in_date, check_out_date, status, amount, source
        )
        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
        ON CONFLICT (tenant_id, external_reservation_id) DO UPDATE
        SET guest_id       = EXCLUDED.guest_id,
            room_number    = EXCLUDED.room_number,
            check_in_date  = EXCLUDED.check_in_date,
            check_out_date = EXCLUDED.check_out_date,
            status         = EXCLUDED.status,
            amount         = EXCLUDED.amount,
            source         = EXCLUDED.source,
            updated_at     = now()
        RETURNING id
        """,
        (
            tenant_id,
            guest_id,
            reservation.external_reservation_id,
            reservation.room_number,
            reservation.check_in_date,
            reservation.check_out_date,
            status,
            reservation.amount,
            reservation.source,
        ),
    )
    row = cur.fetchone()
    return str(row[0])


def _iso(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def list_reservations(
    cur: PgCursor,
    *,
    tenant_id: str,
    status: ReservationStatus | None = None,
) -> list[dict]:
    """Reservations of a tenant with their guest contact, latest check-in first."""
    cur.execute(
        """
        SELECT r.id, r.external_reservation_id, r.room_number,
               r.check_in_date, r.check_out_date, r.status,
               r.amount, r.source, r.created_at,
               g.full_name, g.email, g.phone
        FROM reservations r
        JOIN guests g ON g.id = r.guest_id AND g.tenant_id = r.tenant_id
        WHERE r.tenant_id = %s
          AND (%s::text IS NULL OR r.status = %s)
        ORDER BY r.check_in_date DESC
        """,
        (tenant_id, status, status),
    )
    return [
        {
            "id": str(row[0]),
            "external_reservation_id": row[1],
            "room_number": row[2],
            "check_in_date": _iso(row[3]),
            "check_out_date": _iso(row[4]),
            "status": row[5],
            "amount": float(row[6]) if row[6] is not None else None,
            "source": row[7],
            "created_at": _iso(row[8]),
            "guest": {"name": row[9], "email": row[10], "phone": row[11]},
        }
        for row in cur.fetchall()
    ]
