"""QloApps PMS adapter.

QloApps exposes the PrestaShop webservice: HTTP Basic auth with the API
key as username and an empty password, JSON via ``output_format=JSON``.
Single resources come wrapped in a singular key (``{"customer": {...}}``);
collections are sometimes a bare object instead of a list.

Per reservation this adapter makes one order call on top of the bookings
listing; per guest it makes up to three calls (customer, address,
country). Only the bookings listing and the customer call are allowed to
fail the operation, every enrichment call degrades to missing data.

Security: guest names, e-mails and phones are never logged.
"""

from __future__ import annotations

import os
import time
from typing import Any

import requests

from hotelsync.infra.time import to_date_str
from hotelsync.observability.logging import get_logger
from hotelsync.observability.redaction import safe_log_context

from .adapter import PMSConfigurationError, PMSIntegrationError
from .models import DEFAULT_STATUS, AdapterGuest, AdapterReservation, ReservationStatus

logger = get_logger(__name__)

DEFAULT_HTTP_TIMEOUT = 10.0
DEFAULT_MAX_RETRIES = 2
RETRY_DELAY = 0.5

# PrestaShop order state "Payment accepted"
PAYMENT_ACCEPTED_STATE = "2"

# QloApps leaves unset check-in/out timestamps zeroed
_ZERO_DATETIME = "0000-00-00 00:00:00"

# Language id of the shop default language in localized fields
_DEFAULT_LANGUAGE_ID = "1"

_STATUS_MAP: dict[str, ReservationStatus] = {
    "1": "pre-arrival",  # awaiting check-in
    "2": "on-stay",  # checked in
    "3": "checked-out",
    "4": "cancelled",
    "6": "cancelled",  # refunded / invalid
    "canceled": "cancelled",
    "cancelled": "cancelled",
}


def _as_list(value: Any) -> list[Any]:
    """Normalize a PrestaShop collection that may be a bare object."""
    if not value:
        return []
    if isinstance(value, list):
        return value
    return [value]


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _stay_date(booking: dict[str, Any], actual_key: str, planned_key: str) -> str | None:
    """Actual check-in/out date when recorded, planned date otherwise."""
    actual = _clean(booking.get(actual_key))
    if actual and actual != _ZERO_DATETIME:
        return to_date_str(actual)
    planned = _clean(booking.get(planned_key))
    return to_date_str(planned) if planned else None


def _localized_name(name_obj: Any) -> str | None:
    """Extract a display name from a PrestaShop multi-language field.

    Handles ``[{"id": "1", "value": ...}]``, a plain string, and the
    XML-to-JSON shape ``{"language": {...} | [...]}``.
    """
    if name_obj is None:
        return None
    if isinstance(name_obj, str):
        return name_obj or None

    if isinstance(name_obj, dict) and "language" in name_obj:
        entries = _as_list(name_obj["language"])
    elif isinstance(name_obj, list):
        entries = name_obj
    else:
        return str(name_obj)

    entries = [e for e in entries if isinstance(e, dict)]
    if not entries:
        return None
    for entry in entries:
        if str(entry.get("id")) == _DEFAULT_LANGUAGE_ID and entry.get("value"):
            return entry["value"]
    return entries[0].get("value") or None


class QloAppsAdapter:
    """Pulls room bookings and customers from a QloApps instance."""

    def __init__(self) -> None:
        self.endpoint = ""
        self.api_key = ""
        self.timeout = DEFAULT_HTTP_TIMEOUT
        self.max_retries = DEFAULT_MAX_RETRIES

    def init(self, credentials: dict[str, str], endpoint: str) -> None:
        """Validate credentials and endpoint.

        Raises:
            PMSConfigurationError: If endpoint or api_key is missing, or the
                endpoint is not an http(s) URL, or the timeout/retry env vars
                are not numbers.
        """
        endpoint = (endpoint or "").strip()
        if not endpoint:
            raise PMSConfigurationError("QloApps API endpoint is required.")
        if not endpoint.startswith(("http://", "https://")):
            raise PMSConfigurationError("QloApps API endpoint must be an http(s) URL.")

        api_key = (credentials or {}).get("api_key", "")
        if not api_key:
            raise PMSConfigurationError("QloApps API key is required.")

        try:
            timeout = float(os.environ.get("QLOAPPS_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT))
            max_retries = int(os.environ.get("QLOAPPS_MAX_RETRIES", DEFAULT_MAX_RETRIES))
        except ValueError:
            raise PMSConfigurationError(
                "QLOAPPS_HTTP_TIMEOUT and QLOAPPS_MAX_RETRIES must be numbers."
            )

        self.endpoint = endpoint.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.max_retries = max_retries

    # ── HTTP ──────────────────────────────────────────────────────────────────

    def _get_json(self, path: str, params: dict[str, str] | None = None) -> Any:
        """GET a webservice resource and decode the JSON body.

        Connection errors, timeouts and 5xx responses are retried up to
        max_retries times. 4xx responses are returned as errors at once.

        Raises:
            PMSIntegrationError: On network failure, non-2xx or invalid JSON.
        """
        url = f"{self.endpoint}{path}"
        query = {"output_format": "JSON", **(params or {})}
        log_ctx = safe_log_context(path=path)

        for attempt in range(self.max_retries + 1):
            try:
                resp = requests.get(
                    url,
                    params=query,
                    auth=(self.api_key, ""),
                    timeout=self.timeout,
                )
            except (requests.ConnectionError, requests.Timeout) as e:
                if attempt < self.max_retries:
                    logger.warning(
                        "qloapps request failed, retrying",
                        extra={
                            "extra_fields": {
                                **log_ctx,
                                "attempt": attempt,
                                "error_type": type(e).__name__,
                            }
                        },
                    )
                    time.sleep(RETRY_DELAY * (attempt + 1))
                    continue
                raise PMSIntegrationError(f"QloApps unreachable: GET {path}") from e

            if resp.status_code >= 500 and attempt < self.max_retries:
                logger.warning(
                    "qloapps server error, retrying",
                    extra={
                        "extra_fields": {
                            **log_ctx,
                            "attempt": attempt,
                            "status_code": resp.status_code,
                        }
                    },
                )
                time.sleep(RETRY_DELAY * (attempt + 1))
                continue

            if not resp.ok:
                raise PMSIntegrationError(
                    f"QloApps GET {path} failed: {resp.status_code} {resp.reason}",
                    status_code=resp.status_code,
                )

            try:
                return resp.json()
            except ValueError as e:
                raise PMSIntegrationError(
                    f"QloApps GET {path} returned invalid JSON",
                    status_code=resp.status_code,
                ) from e

        # Unreachable: the last attempt always returns or raises
        raise PMSIntegrationError(f"QloApps GET {path} failed")

    # ── Reservations ──────────────────────────────────────────────────────────

    def pull_reservations(self, start_date: str, end_date: str) -> list[AdapterReservation]:
        """Paid room bookings overlapping ``[start_date, end_date]``.

        The webservice has no reliable date filter for room bookings, so the
        full listing is fetched and filtered on calendar-date strings.

        Raises:
            PMSIntegrationError: If the bookings listing cannot be fetched.
        """
        data = self._get_json("/api/room_bookings", {"display": "full"})
        if not isinstance(data, dict):
            return []

        start = to_date_str(start_date)
        end = to_date_str(end_date)

        reservations: list[AdapterReservation] = []
        for booking in _as_list(data.get("bookings")):
            if not isinstance(booking, dict):
                logger.warning("qloapps booking is not an object, skipping")
                continue

            check_in = _stay_date(booking, "check_in", "date_from")
            check_out = _stay_date(booking, "check_out", "date_to")
            if not check_in or not check_out:
                logger.warning(
                    "qloapps booking without stay dates, skipping",
                    extra={"extra_fields": safe_log_context(booking_id=booking.get("id"))},
                )
                continue

            if not (check_in <= end and check_out >= start):
                continue

            reservation = self._build_reservation(booking, check_in, check_out)
            if reservation is not None:
                reservations.append(reservation)

        return reservations

    def _build_reservation(
        self,
        booking: dict[str, Any],
        check_in: str,
        check_out: str,
    ) -> AdapterReservation | None:
        """Enrich a booking with its parent order. None drops the booking."""
        booking_ctx = safe_log_context(
            booking_id=booking.get("id"),
            order_id=booking.get("id_order"),
        )

        try:
            order_id = str(booking["id_order"])
            room_id = str(booking["id_room"])
            customer_id = str(booking["id_customer"])
            native_status = str(booking["id_status"])
        except KeyError as e:
            logger.warning(
                "qloapps booking missing field, skipping",
                extra={"extra_fields": {**booking_ctx, "field": str(e)}},
            )
            return None

        try:
            order_data = self._get_json(f"/api/orders/{order_id}")
        except PMSIntegrationError as e:
            logger.warning(
                "qloapps order lookup failed, skipping booking",
                extra={"extra_fields": {**booking_ctx, "error": str(e)}},
            )
            return None

        order = order_data.get("order") if isinstance(order_data, dict) else None
        if not isinstance(order, dict):
            logger.warning(
                "qloapps order payload empty, skipping booking",
                extra={"extra_fields": booking_ctx},
            )
            return None

        if str(order.get("current_state")) != PAYMENT_ACCEPTED_STATE:
            logger.debug(
                "qloapps booking payment not accepted, skipping",
                extra={"extra_fields": booking_ctx},
            )
            return None

        try:
            amount: float | None = float(order.get("total_paid_tax_incl"))
        except (TypeError, ValueError):
            amount = None

        return AdapterReservation(
            external_reservation_id=f"O{order_id}-R{room_id}",
            external_guest_id=customer_id,
            room_number=_clean(booking.get("room_num")),
            check_in_date=check_in,
            check_out_date=check_out,
            external_status=native_status,
            amount=amount,
            source=_clean(order.get("module")) or "QloApps Web",
        )

    # ── Guests ────────────────────────────────────────────────────────────────

    def pull_guest(self, external_guest_id: str) -> AdapterGuest | None:
        """Customer profile with phone and country from the first address.

        Returns None when the customer call answers non-2xx (404 included)
        or carries no customer object.

        Raises:
            PMSIntegrationError: If QloApps is unreachable for the customer call.
        """
        guest_ctx = safe_log_context(customer_id=external_guest_id)

        try:
            data = self._get_json(f"/api/customers/{external_guest_id}")
        except PMSIntegrationError as e:
            if e.status_code is None:
                raise
            if e.status_code != 404:
                logger.warning(
                    "qloapps customer lookup failed",
                    extra={"extra_fields": {**guest_ctx, "status_code": e.status_code}},
                )
            return None

        customer = data.get("customer") if isinstance(data, dict) else None
        if not isinstance(customer, dict):
            return None

        phone = _clean(customer.get("phone"))
        country: str | None = None

        address = self._first_address(external_guest_id)
        if address is not None:
            phone = _clean(address.get("phone_mobile")) or _clean(address.get("phone")) or phone
            country_id = _clean(address.get("id_country"))
            if country_id and country_id != "0":
                country = self._country_name(country_id, guest_ctx)

        name = f"{customer.get('firstname') or ''} {customer.get('lastname') or ''}".strip()

        return AdapterGuest(
            external_guest_id=str(external_guest_id),
            name=name,
            email=_clean(customer.get("email")),
            phone=phone,
            country=country,
        )

    def _first_address(self, external_guest_id: str) -> dict[str, Any] | None:
        try:
            data = self._get_json(
                "/api/addresses",
                {"display": "full", "filter[id_customer]": f"[{external_guest_id}]"},
            )
        except PMSIntegrationError as e:
            logger.warning(
                "qloapps address lookup failed",
                extra={
                    "extra_fields": {
                        **safe_log_context(customer_id=external_guest_id),
                        "error": str(e),
                    }
                },
            )
            return None

        if not isinstance(data, dict):
            return None
        addresses = [a for a in _as_list(data.get("addresses")) if isinstance(a, dict)]
        return addresses[0] if addresses else None

    def _country_name(self, country_id: str, guest_ctx: dict[str, str]) -> str | None:
        try:
            data = self._get_json(f"/api/countries/{country_id}")
        except PMSIntegrationError as e:
            logger.warning(
                "qloapps country lookup failed",
                extra={"extra_fields": {**guest_ctx, "country_id": country_id, "error": str(e)}},
            )
            return None

        country = data.get("country") if isinstance(data, dict) else None
        if not isinstance(country, dict):
            return None
        return _localized_name(country.get("name"))

    # ── Status ────────────────────────────────────────────────────────────────

    def map_status(self, native_status: str) -> ReservationStatus:
        return _STATUS_MAP.get(str(native_status).strip().lower(), DEFAULT_STATUS)
