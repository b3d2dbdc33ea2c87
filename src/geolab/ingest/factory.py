"""Provider factory with a lazy import of the HTTP-backed provider."""

from __future__ import annotations

import os

from geolab.ingest.cache import LRUCache
from geolab.ingest.interfaces import ClimateProvider
from geolab.ingest.mock_providers import MockClimateProvider

PROVIDER_MODES = ("mock", "open_meteo")


def resolve_mode(mode: str | None) -> str:
    """Resolve provider mode from argument or environment."""
    raw = mode or os.getenv("GEOLAB_PROVIDER", "mock")
    resolved = raw.strip().lower()
    if resolved not in PROVIDER_MODES:
        raise ValueError("provider mode must be one of: mock, open_meteo")
    return resolved


def create_climate_provider(mode: str | None = None) -> ClimateProvider:
    """Create a climate provider for the selected mode."""
    resolved = resolve_mode(mode)
    if resolved == "mock":
        cache_size = int(os.getenv("GEOLAB_NORMALS_CACHE_SIZE", "128"))
        return MockClimateProvider(cache=LRUCache(cache_size))

    from geolab.ingest.open_meteo import OpenMeteoClimateProvider

    return OpenMeteoClimateProvider()
