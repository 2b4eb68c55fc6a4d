"""Tests for the PMS adapter registry."""

from unittest.mock import patch

import pytest

from hotelsync.pms.mock_adapter import MockAdapter
from hotelsync.pms.qloapps_adapter import QloAppsAdapter
from hotelsync.pms.registry import ADAPTERS, registered_providers, resolve


class TestResolve:
    def test_qloapps(self):
        assert isinstance(resolve("qloapps"), QloAppsAdapter)

    def test_custom_is_mock(self):
        assert isinstance(resolve("custom"), MockAdapter)

    def test_fresh_instance_per_call(self):
        assert resolve("qloapps") is not resolve("qloapps")

    @pytest.mark.parametrize("provider_id", ["unknown_provider", "cloudbeds", "mews", ""])
    def test_unknown_falls_back_to_mock_with_warning(self, provider_id):
        with patch("hotelsync.pms.registry.logger") as mock_logger:
            adapter = resolve(provider_id)

        assert isinstance(adapter, MockAdapter)
        mock_logger.warning.assert_called_once()
        _, kwargs = mock_logger.warning.call_args
        assert kwargs["extra"]["extra_fields"]["pms_type"] == provider_id

    def test_fallback_adapter_is_usable(self):
        adapter = resolve("unknown_provider")
        adapter.init({}, "")
        assert len(adapter.pull_reservations("2024-01-01", "2024-01-08")) == 2

    def test_known_provider_does_not_warn(self):
        with patch("hotelsync.pms.registry.logger") as mock_logger:
            resolve("qloapps")
        mock_logger.warning.assert_not_called()


class TestRegistryTable:
    def test_read_only(self):
        with pytest.raises(TypeError):
            ADAPTERS["evil"] = MockAdapter  # type: ignore[index]

    def test_registered_providers(self):
        assert registered_providers() == ["custom", "qloapps"]
