"""Canonical PMS records shared by every adapter and the sync service."""

from dataclasses import dataclass
from typing import Literal, get_args

ReservationStatus = Literal["pre-arrival", "on-stay", "checked-out", "cancelled"]

RESERVATION_STATUSES: tuple[str, ...] = get_args(ReservationStatus)

# Used for any native status an adapter does not recognise
DEFAULT_STATUS: ReservationStatus = "pre-arrival"


@dataclass(frozen=True)
class AdapterGuest:
    """Guest profile as pulled from a PMS. Contains PII, never logged as-is."""

    external_guest_id: str
    name: str
    email: str | None = None
    phone: str | None = None
    country: str | None = None


@dataclass(frozen=True)
class AdapterReservation:
    """Reservation as pulled from a PMS.

    check_in_date / check_out_date are ``YYYY-MM-DD`` strings. Adapters
    strip time-of-day and timezone before building the record.
    """

    external_reservation_id: str
    external_guest_id: str
    check_in_date: str
    check_out_date: str
    external_status: str
    room_number: str | None = None
    amount: float | None = None
    source: str | None = None

    def overlaps(self, start_date: str, end_date: str) -> bool:
        """Inclusive overlap with ``[start_date, end_date]`` (string comparison)."""
        return self.check_in_date <= end_date and self.check_out_date >= start_date
