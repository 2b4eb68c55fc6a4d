"""PMS provider registry.

Maps the ``pms_type`` stored in a tenant's configuration to an adapter
class. The table is built at import time and never mutated.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Callable, Mapping

from hotelsync.observability.logging import get_logger

from .adapter import PMSAdapter
from .mock_adapter import MockAdapter
from .qloapps_adapter import QloAppsAdapter

logger = get_logger(__name__)

ADAPTERS: Mapping[str, Callable[[], PMSAdapter]] = MappingProxyType(
    {
        "custom": MockAdapter,
        "qloapps": QloAppsAdapter,
    }
)


def registered_providers() -> list[str]:
    """Provider ids with a real adapter, sorted."""
    return sorted(ADAPTERS)


def resolve(provider_id: str) -> PMSAdapter:
    """Return a fresh, uninitialized adapter for a provider id.

    Unknown ids fall back to MockAdapter with a warning so that a
    misconfigured or demo tenant can still run a sync.
    """
    factory = ADAPTERS.get(provider_id)
    if factory is None:
        logger.warning(
            "pms adapter not registered, falling back to mock",
            extra={"extra_fields": {"pms_type": provider_id}},
        )
        return MockAdapter()
    return factory()
