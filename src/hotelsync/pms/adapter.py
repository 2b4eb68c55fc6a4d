"""PMS adapter contract and the errors adapters raise.

An adapter is anything satisfying ``PMSAdapter``; concrete providers are
picked through ``hotelsync.pms.registry``, not by subclassing.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .models import AdapterGuest, AdapterReservation, ReservationStatus


class PMSConfigurationError(Exception):
    """Raised by init() when credentials or endpoint are missing or invalid."""

    pass


class PMSIntegrationError(Exception):
    """Raised when the upstream PMS is unreachable or answers non-2xx."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@runtime_checkable
class PMSAdapter(Protocol):
    """Capability every PMS provider implements."""

    def init(self, credentials: dict[str, str], endpoint: str) -> None:
        """Validate and store tenant credentials. No network calls.

        Raises:
            PMSConfigurationError: If a required field is missing.
        """
        ...

    def pull_reservations(self, start_date: str, end_date: str) -> list[AdapterReservation]:
        """Reservations overlapping the inclusive ``[start_date, end_date]`` window.

        Raises:
            PMSIntegrationError: If the listing call fails.
        """
        ...

    def pull_guest(self, external_guest_id: str) -> AdapterGuest | None:
        """Guest profile, or None when the PMS does not know the id."""
        ...

    def map_status(self, native_status: str) -> ReservationStatus:
        """Map a native status code to a canonical status. Total, never raises."""
        ...
