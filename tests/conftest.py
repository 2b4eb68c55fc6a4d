"""Shared pytest fixtures for hotelsync tests."""
import sys
sys.dont_write_bytecode = True

from contextlib import contextmanager  # noqa: E402
from unittest.mock import MagicMock, patch  # noqa: E402
from uuid import uuid4  # noqa: E402

import psycopg2  # noqa: E402
import pytest  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_oidc_jwks_cache():
    """Reset the module-level JWKS cache so tests never share keys."""
    import hotelsync.api.auth as auth_module

    auth_module._jwks_cache = None
    auth_module._jwks_cache_time = 0
    yield
    auth_module._jwks_cache = None
    auth_module._jwks_cache_time = 0


class FakeStore:
    """In-memory stand-in for the guests/reservations repositories.

    Honours the same unique keys as the Postgres schema:
    (tenant_id, external_guest_id) and (tenant_id, external_reservation_id).
    """

    def __init__(self):
        self.guests: dict[tuple[str, str], dict] = {}
        self.reservations: dict[tuple[str, str], dict] = {}
        self.fail_guest_ids: set[str] = set()
        self.fail_reservation_ids: set[str] = set()
        self.tenants_written: list[str] = []
        self.commits = 0
        self.connections: list[MagicMock] = []
        self.txn_conns: list[object] = []

    def get_conn(self):
        conn = MagicMock()
        self.connections.append(conn)
        return conn

    @contextmanager
    def txn(self, conn=None):
        self.txn_conns.append(conn)
        yield object()
        self.commits += 1

    def upsert_guest(self, cur, *, tenant_id, guest):
        self.tenants_written.append(tenant_id)
        if guest.external_guest_id in self.fail_guest_ids:
            raise psycopg2.IntegrityError("simulated guest constraint violation")
        key = (tenant_id, guest.external_guest_id)
        existing = self.guests.get(key)
        guest_id = existing["id"] if existing else str(uuid4())
        self.guests[key] = {
            "id": guest_id,
            "tenant_id": tenant_id,
            "external_guest_id": guest.external_guest_id,
            "name": guest.name,
            "email": guest.email,
            "phone": guest.phone,
            "country": guest.country,
        }
        return guest_id

    def upsert_reservation(self, cur, *, tenant_id, guest_id, reservation, status):
        self.tenants_written.append(tenant_id)
        if reservation.external_reservation_id in self.fail_reservation_ids:
            raise psycopg2.IntegrityError("simulated reservation constraint violation")
        key = (tenant_id, reservation.external_reservation_id)
        existing = self.reservations.get(key)
        reservation_id = existing["id"] if existing else str(uuid4())
        self.reservations[key] = {
            "id": reservation_id,
            "tenant_id": tenant_id,
            "guest_id": guest_id,
            "external_reservation_id": reservation.external_reservation_id,
            "room_number": reservation.room_number,
            "check_in_date": reservation.check_in_date,
            "check_out_date": reservation.check_out_date,
            "status": status,
            "amount": reservation.amount,
            "source": reservation.source,
        }
        return reservation_id

    def guests_for(self, tenant_id: str) -> list[dict]:
        return [g for (t, _), g in self.guests.items() if t == tenant_id]

    def reservations_for(self, tenant_id: str) -> list[dict]:
        return [r for (t, _), r in self.reservations.items() if t == tenant_id]


@pytest.fixture
def fake_store():
    """Patch the sync service persistence with a FakeStore."""
    store = FakeStore()
    with patch("hotelsync.pms.sync_service.get_conn", store.get_conn), \
         patch("hotelsync.pms.sync_service.txn", store.txn), \
         patch("hotelsync.pms.sync_service.upsert_guest", store.upsert_guest), \
         patch("hotelsync.pms.sync_service.upsert_reservation", store.upsert_reservation):
        yield store
