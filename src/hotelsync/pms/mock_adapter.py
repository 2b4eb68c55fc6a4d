"""Mock PMS adapter for demo tenants and tests.

Ignores credentials and returns two fixed reservations covering whatever
window is requested.
"""

from __future__ import annotations

from hotelsync.observability.logging import get_logger

from .models import DEFAULT_STATUS, AdapterGuest, AdapterReservation, ReservationStatus

logger = get_logger(__name__)

DEFAULT_ENDPOINT = "mock://api"

_GUESTS: dict[str, AdapterGuest] = {
    "MOCK-GUEST-A": AdapterGuest(
        external_guest_id="MOCK-GUEST-A",
        name="John Doe",
        email="john.doe@example.com",
        phone="+1234567890",
        country="US",
    ),
    "MOCK-GUEST-B": AdapterGuest(
        external_guest_id="MOCK-GUEST-B",
        name="Jane Smith",
        email="jane.smith@example.com",
        phone="+0987654321",
        country="UK",
    ),
}

_STATUS_MAP: dict[str, ReservationStatus] = {
    "confirmed": "pre-arrival",
    "inhouse": "on-stay",
    "checkedout": "checked-out",
    "canceled": "cancelled",
    "cancelled": "cancelled",
}


class MockAdapter:
    """Deterministic in-memory PMS."""

    def __init__(self) -> None:
        self.endpoint = DEFAULT_ENDPOINT

    def init(self, credentials: dict[str, str], endpoint: str) -> None:
        self.endpoint = endpoint or DEFAULT_ENDPOINT
        logger.info(
            "mock pms adapter initialized",
            extra={"extra_fields": {"endpoint": self.endpoint}},
        )

    def pull_reservations(self, start_date: str, end_date: str) -> list[AdapterReservation]:
        return [
            AdapterReservation(
                external_reservation_id="MOCK-RES-001",
                external_guest_id="MOCK-GUEST-A",
                room_number="101",
                check_in_date=start_date,
                check_out_date=end_date,
                external_status="confirmed",
                amount=1500.0,
                source="Booking.com",
            ),
            AdapterReservation(
                external_reservation_id="MOCK-RES-002",
                external_guest_id="MOCK-GUEST-B",
                room_number="204",
                check_in_date=start_date,
                check_out_date=end_date,
                external_status="inhouse",
                amount=850.5,
                source="Direct",
            ),
        ]

    def pull_guest(self, external_guest_id: str) -> AdapterGuest | None:
        return _GUESTS.get(external_guest_id)

    def map_status(self, native_status: str) -> ReservationStatus:
        return _STATUS_MAP.get(str(native_status).strip().lower(), DEFAULT_STATUS)
