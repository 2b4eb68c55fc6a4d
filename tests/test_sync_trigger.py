"""Tests for the manual sync trigger."""

from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from hotelsync.infra.pms_settings import PmsConfig
from hotelsync.infra.tenants import TenantAuthorizationError, TenantMembership
from hotelsync.observability.correlation import get_tenant_id
from hotelsync.pms.sync_service import SyncResult
from hotelsync.pms.sync_trigger import NOT_CONFIGURED_ERROR, trigger_manual_sync

USER_ID = "user-1"
TENANT_ID = "tenant-1"
NOW = datetime(2024, 1, 10, 15, 30, tzinfo=timezone.utc)

OWNER = TenantMembership(tenant_id=TENANT_ID, user_id=USER_ID, role="owner")


def _config(pms_type="custom", is_active=True, credentials=None, endpoint="mock://api"):
    return PmsConfig(
        pms_type=pms_type,
        endpoint=endpoint,
        credentials=credentials if credentials is not None else {"api_key": "k"},
        is_active=is_active,
    )


@pytest.fixture
def owner():
    with patch("hotelsync.pms.sync_trigger.require_owner", return_value=OWNER) as mock:
        yield mock


class TestAuthorization:
    def test_non_owner_rejected_before_config_load(self):
        with patch(
            "hotelsync.pms.sync_trigger.require_owner",
            side_effect=TenantAuthorizationError("Only the tenant owner can perform this action."),
        ), patch("hotelsync.pms.sync_trigger.get_pms_config") as mock_config:
            result = trigger_manual_sync(USER_ID, now=NOW)

        assert result == {"error": "Only the tenant owner can perform this action."}
        mock_config.assert_not_called()

    def test_no_tenant_rejected(self):
        with patch("hotelsync.infra.tenants._list_memberships", return_value=[]), \
             patch("hotelsync.pms.sync_trigger.get_pms_config") as mock_config:
            result = trigger_manual_sync(USER_ID, now=NOW)

        assert "onboarding" in result["error"]
        mock_config.assert_not_called()

    def test_admin_rejected(self):
        admin = TenantMembership(tenant_id=TENANT_ID, user_id=USER_ID, role="admin")
        with patch("hotelsync.infra.tenants._list_memberships", return_value=[admin]), \
             patch("hotelsync.pms.sync_trigger.get_pms_config") as mock_config:
            result = trigger_manual_sync(USER_ID, now=NOW)

        assert "owner" in result["error"]
        mock_config.assert_not_called()


class TestConfiguration:
    def test_missing_config(self, owner):
        with patch("hotelsync.pms.sync_trigger.get_pms_config", return_value=None):
            assert trigger_manual_sync(USER_ID, now=NOW) == {"error": NOT_CONFIGURED_ERROR}

    def test_inactive_config(self, owner):
        with patch("hotelsync.pms.sync_trigger.get_pms_config", return_value=_config(is_active=False)), \
             patch("hotelsync.pms.sync_trigger.sync_reservations") as mock_sync:
            assert trigger_manual_sync(USER_ID, now=NOW) == {"error": NOT_CONFIGURED_ERROR}
        mock_sync.assert_not_called()

    def test_invalid_adapter_credentials(self, owner):
        config = _config(pms_type="qloapps", credentials={}, endpoint="https://hotel.example.com")
        with patch("hotelsync.pms.sync_trigger.get_pms_config", return_value=config), \
             patch("hotelsync.pms.sync_trigger.sync_reservations") as mock_sync:
            result = trigger_manual_sync(USER_ID, now=NOW)

        assert result == {"error": "QloApps API key is required."}
        mock_sync.assert_not_called()

    def test_malformed_adapter_env_is_a_configuration_error(self, owner, monkeypatch):
        monkeypatch.setenv("QLOAPPS_HTTP_TIMEOUT", "ten")
        config = _config(pms_type="qloapps", endpoint="https://hotel.example.com")
        with patch("hotelsync.pms.sync_trigger.get_pms_config", return_value=config), \
             patch("hotelsync.pms.sync_trigger.sync_reservations") as mock_sync:
            result = trigger_manual_sync(USER_ID, now=NOW)

        assert result == {"error": "QLOAPPS_HTTP_TIMEOUT and QLOAPPS_MAX_RETRIES must be numbers."}
        mock_sync.assert_not_called()

    def test_config_lookup_error_is_reported(self, owner):
        with patch("hotelsync.pms.sync_trigger.get_pms_config", side_effect=RuntimeError("db down")):
            assert trigger_manual_sync(USER_ID, now=NOW) == {"error": "db down"}


class TestRun:
    def test_mock_sync_end_to_end(self, owner, fake_store):
        with patch("hotelsync.pms.sync_trigger.get_pms_config", return_value=_config()):
            result = trigger_manual_sync(USER_ID, now=NOW)

        assert result == {"success": True, "message": "Successfully synced 2 reservations."}
        assert len(fake_store.reservations_for(TENANT_ID)) == 2

    def test_unknown_provider_falls_back_to_mock(self, owner, fake_store):
        with patch("hotelsync.pms.sync_trigger.get_pms_config", return_value=_config(pms_type="mews")):
            result = trigger_manual_sync(USER_ID, now=NOW)

        assert result["success"] is True
        assert len(fake_store.reservations_for(TENANT_ID)) == 2

    def test_window_spans_seven_days_around_now(self, owner):
        with patch("hotelsync.pms.sync_trigger.get_pms_config", return_value=_config()), \
             patch(
                 "hotelsync.pms.sync_trigger.sync_reservations",
                 return_value=SyncResult(success=True, count=0, message="No reservations found"),
             ) as mock_sync:
            trigger_manual_sync(USER_ID, now=NOW)

        tenant_id, _adapter, start_date, end_date = mock_sync.call_args.args
        assert tenant_id == TENANT_ID
        assert (start_date, end_date) == ("2024-01-03", "2024-01-17")

    def test_sync_failure_surfaces_error(self, owner):
        with patch("hotelsync.pms.sync_trigger.get_pms_config", return_value=_config()), \
             patch(
                 "hotelsync.pms.sync_trigger.sync_reservations",
                 return_value=SyncResult(success=False, error="upstream 503"),
             ):
            assert trigger_manual_sync(USER_ID, now=NOW) == {"error": "upstream 503"}

    def test_sync_failure_without_message(self, owner):
        with patch("hotelsync.pms.sync_trigger.get_pms_config", return_value=_config()), \
             patch(
                 "hotelsync.pms.sync_trigger.sync_reservations",
                 return_value=SyncResult(success=False),
             ):
            result = trigger_manual_sync(USER_ID, now=NOW)

        assert result == {"error": "Failed to synchronize reservations."}

    def test_tenant_bound_to_log_context_during_run(self, owner):
        seen = []

        def capture(*args):
            seen.append(get_tenant_id())
            return SyncResult(success=True, count=0, message="No reservations found")

        with patch("hotelsync.pms.sync_trigger.get_pms_config", return_value=_config()), \
             patch("hotelsync.pms.sync_trigger.sync_reservations", side_effect=capture):
            trigger_manual_sync(USER_ID, now=NOW)

        assert seen == [TENANT_ID]
        assert get_tenant_id() == ""
