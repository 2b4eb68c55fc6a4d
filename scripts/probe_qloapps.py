"""Probe a QloApps instance with the sync adapter, without touching the database.

Usage:
    QLOAPPS_API_KEY=... uv run python scripts/probe_qloapps.py [endpoint]

Pulls paid room bookings for the default sync window (7 days either side of
today) and the guest profile of the first booking, and prints both as JSON.
For local/staging validation only: the output contains guest PII.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import asdict

from hotelsync.infra.time import date_window, utc_now
from hotelsync.pms.adapter import PMSConfigurationError, PMSIntegrationError
from hotelsync.pms.qloapps_adapter import QloAppsAdapter
from hotelsync.pms.sync_trigger import SYNC_WINDOW_DAYS

DEFAULT_ENDPOINT = "http://localhost:8080"


def main() -> None:
    endpoint = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_ENDPOINT

    api_key = os.environ.get("QLOAPPS_API_KEY", "")
    if not api_key:
        print("ERROR: QLOAPPS_API_KEY not set")
        sys.exit(1)

    adapter = QloAppsAdapter()
    try:
        adapter.init({"api_key": api_key}, endpoint)
    except PMSConfigurationError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    start_date, end_date = date_window(utc_now(), SYNC_WINDOW_DAYS)
    print(f"Pulling reservations for {start_date} to {end_date}...")

    try:
        reservations = adapter.pull_reservations(start_date, end_date)
    except PMSIntegrationError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    print(f"Reservations found: {len(reservations)}")
    print(json.dumps([asdict(r) for r in reservations], indent=2))

    if reservations:
        guest_id = reservations[0].external_guest_id
        print(f"\nPulling guest {guest_id}...")
        guest = adapter.pull_guest(guest_id)
        print(json.dumps(asdict(guest) if guest else None, indent=2))


if __name__ == "__main__":
    main()
