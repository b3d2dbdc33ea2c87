"""Tests for the Open-Meteo provider using an in-process HTTP transport."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from geolab.contracts import ClimateDataError
from geolab.ingest.open_meteo import (
    OpenMeteoClimateProvider,
    OpenMeteoConfig,
    aggregate_daily_to_normals,
    config_from_env,
)


def _daily_for_year(temp: float, precip: float) -> dict[str, list[Any]]:
    """Build one synthetic year of daily data with constant values."""
    days_in_month = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)
    times = [f"2001-{m + 1:02d}-{d + 1:02d}" for m, n in enumerate(days_in_month) for d in range(n)]
    return {
        "time": times,
        "temperature_2m_mean": [temp] * len(times),
        "precipitation_sum": [precip] * len(times),
    }


def _provider(handler: Any) -> OpenMeteoClimateProvider:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return OpenMeteoClimateProvider(config=OpenMeteoConfig(), client=client)


def test_aggregate_skips_nulls_and_divides_precipitation_by_years() -> None:
    """Temperature averages usable days; precipitation is total over years."""
    daily = {
        "time": ["1991-01-01", "1991-01-02", "1991-02-01", "1992-01-01"],
        "temperature_2m_mean": [1.0, 3.0, None, 5.0],
        "precipitation_sum": [2.0, None, 4.0, float("nan")],
    }
    normals = aggregate_daily_to_normals(daily, years=2)

    assert normals.temperature[0] == pytest.approx(3.0)
    assert normals.temperature[1] == 0.0
    assert normals.precipitation[0] == pytest.approx(1.0)
    assert normals.precipitation[1] == pytest.approx(2.0)
    assert normals.precipitation[5] == 0.0


def test_aggregate_requires_all_series() -> None:
    """A daily block without precipitation is a data error."""
    with pytest.raises(ClimateDataError):
        aggregate_daily_to_normals({"time": [], "temperature_2m_mean": []})


def test_normals_request_parameters_and_cache() -> None:
    """The archive is queried once per rounded coordinate pair."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"daily": _daily_for_year(12.0, 3.0)})

    provider = _provider(handler)
    first = provider.get_monthly_normals(35.6812, 139.6901)
    second = provider.get_monthly_normals(35.6799, 139.6880)

    assert first is second
    assert len(requests) == 1
    params = requests[0].url.params
    assert params["start_date"] == "1991-01-01"
    assert params["end_date"] == "2020-12-31"
    assert params["daily"] == "temperature_2m_mean,precipitation_sum"
    assert params["latitude"] == "35.6812"
    assert first.temperature == (12.0,) * 12
    assert first.precipitation[0] == pytest.approx(31 * 3.0 / 30)


def test_http_error_raises_climate_data_error_and_is_not_cached() -> None:
    """Server errors surface as ClimateDataError and are retried next call."""
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        return httpx.Response(500, json={"reason": "down"})

    provider = _provider(handler)
    with pytest.raises(ClimateDataError):
        provider.get_monthly_normals(10.0, 10.0)
    with pytest.raises(ClimateDataError):
        provider.get_monthly_normals(10.0, 10.0)
    assert calls["n"] == 2


def test_transport_error_raises_climate_data_error() -> None:
    """Connection failures are wrapped in ClimateDataError."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(ClimateDataError):
        _provider(handler).get_monthly_normals(10.0, 10.0)


def test_search_cities_parses_results() -> None:
    """Geocoding results are mapped to CityLocation values."""

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["name"] == "Tokyo"
        assert request.url.params["count"] == "10"
        return httpx.Response(
            200,
            json={
                "results": [
                    {
                        "name": "Tokyo",
                        "country": "Japan",
                        "latitude": 35.6895,
                        "longitude": 139.69171,
                        "elevation": 44.0,
                        "admin1": "Tokyo",
                    }
                ]
            },
        )

    cities = _provider(handler).search_cities("  Tokyo ")

    assert len(cities) == 1
    assert cities[0].name == "Tokyo"
    assert cities[0].elevation == 44.0


def test_short_query_skips_request_and_missing_results_is_empty() -> None:
    """Queries under two characters and empty responses both yield []."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    provider = _provider(handler)
    assert provider.search_cities("T") == []
    assert provider.search_cities("Nowhere") == []


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Environment overrides are parsed and validated."""
    monkeypatch.setenv("GEOLAB_HTTP_TIMEOUT_S", "5")
    monkeypatch.setenv("GEOLAB_NORMALS_CACHE_SIZE", "8")
    monkeypatch.setenv("GEOLAB_OPEN_METEO_ARCHIVE_URL", "http://archive.test/v1/archive")
    cfg = config_from_env()

    assert cfg.timeout_s == 5.0
    assert cfg.cache_size == 8
    assert cfg.archive_url == "http://archive.test/v1/archive"

    monkeypatch.setenv("GEOLAB_HTTP_TIMEOUT_S", "0")
    with pytest.raises(ValueError):
        config_from_env()
    monkeypatch.setenv("GEOLAB_HTTP_TIMEOUT_S", "soon")
    with pytest.raises(ValueError):
        config_from_env()
