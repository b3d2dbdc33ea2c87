"""Tests for provider factory mode resolution."""

from __future__ import annotations

import pytest

from geolab.ingest.factory import create_climate_provider, resolve_mode
from geolab.ingest.mock_providers import MockClimateProvider


def test_default_mode_is_mock(monkeypatch: pytest.MonkeyPatch) -> None:
    """Without configuration the factory builds the offline provider."""
    monkeypatch.delenv("GEOLAB_PROVIDER", raising=False)

    assert resolve_mode(None) == "mock"
    assert isinstance(create_climate_provider(), MockClimateProvider)


def test_mode_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """GEOLAB_PROVIDER selects the provider and is case-insensitive."""
    monkeypatch.setenv("GEOLAB_PROVIDER", " Open_Meteo ")

    assert resolve_mode(None) == "open_meteo"
    assert resolve_mode("mock") == "mock"


def test_open_meteo_mode_builds_http_provider() -> None:
    """The HTTP provider is imported lazily and constructed without network access."""
    from geolab.ingest.open_meteo import OpenMeteoClimateProvider

    provider = create_climate_provider("open_meteo")
    assert isinstance(provider, OpenMeteoClimateProvider)
    provider.close()


def test_unknown_mode_is_rejected() -> None:
    """Unsupported modes raise ValueError."""
    with pytest.raises(ValueError):
        resolve_mode("gee")
