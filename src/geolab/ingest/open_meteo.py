"""
Real-data providers backed by the Open-Meteo archive and geocoding APIs.

Implements:
- ClimateNormalsProvider.get_monthly_normals(lat, lon) -> MonthlyNormals
- CitySearchProvider.search_cities(query) -> list[CityLocation]

Normals are aggregated client-side from 30 years of daily data
(1991-01-01 .. 2020-12-31). Must be opt-in; default app/tests use the mock
provider.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from geolab.contracts import (
    MONTHS_PER_YEAR,
    CityLocation,
    ClimateDataError,
    MonthlyNormals,
    validate_latitude,
)
from geolab.ingest.cache import LRUCache
from geolab.ingest.interfaces import ClimateProvider, NormalsCache
from geolab.ingest.presets import city_id

_LOGGER = logging.getLogger(__name__)

ARCHIVE_URL = "https://archive-api.open-meteo.com/v1/archive"
GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
NORMALS_START = "1991-01-01"
NORMALS_END = "2020-12-31"
NORMALS_YEARS = 30
DAILY_VARIABLES = "temperature_2m_mean,precipitation_sum"
GEOCODING_COUNT = 10
MIN_QUERY_LENGTH = 2


@dataclass(frozen=True)
class OpenMeteoConfig:
    """Runtime configuration for the Open-Meteo providers."""

    archive_url: str = ARCHIVE_URL
    geocoding_url: str = GEOCODING_URL
    timeout_s: float = 30.0
    cache_size: int = 128
    language: str = "en"


def _positive(raw: str, name: str, cast: type[int] | type[float]) -> Any:
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ValueError(f"{name} must be positive")
    return value


def config_from_env() -> OpenMeteoConfig:
    """
    Build OpenMeteoConfig from environment variables.

    Optional:
      - GEOLAB_OPEN_METEO_ARCHIVE_URL
      - GEOLAB_OPEN_METEO_GEOCODING_URL
      - GEOLAB_HTTP_TIMEOUT_S (default 30)
      - GEOLAB_NORMALS_CACHE_SIZE (default 128)
      - GEOLAB_GEOCODING_LANGUAGE (default en)
    """
    return OpenMeteoConfig(
        archive_url=os.getenv("GEOLAB_OPEN_METEO_ARCHIVE_URL", ARCHIVE_URL),
        geocoding_url=os.getenv("GEOLAB_OPEN_METEO_GEOCODING_URL", GEOCODING_URL),
        timeout_s=_positive(os.getenv("GEOLAB_HTTP_TIMEOUT_S", "30"), "GEOLAB_HTTP_TIMEOUT_S", float),
        cache_size=_positive(
            os.getenv("GEOLAB_NORMALS_CACHE_SIZE", "128"), "GEOLAB_NORMALS_CACHE_SIZE", int
        ),
        language=os.getenv("GEOLAB_GEOCODING_LANGUAGE", "en"),
    )


def _usable(value: Any) -> bool:
    # JSON null arrives as None; NaN fails self-equality.
    return value is not None and value == value


def aggregate_daily_to_normals(
    daily: Mapping[str, Sequence[Any]], years: int = NORMALS_YEARS
) -> MonthlyNormals:
    """Aggregate an Open-Meteo `daily` block into monthly normals.

    Temperature is the mean of the non-null daily means in each calendar
    month. Precipitation is the sum of non-null daily totals divided by
    `years`. A month with no usable days yields 0 for that variable.

    Raises:
        ClimateDataError: If the block is missing a required series.
    """
    try:
        times = daily["time"]
        temps = daily["temperature_2m_mean"]
        precips = daily["precipitation_sum"]
    except KeyError as exc:
        raise ClimateDataError(f"daily block missing {exc.args[0]!r}") from exc

    temp_sums = [0.0] * MONTHS_PER_YEAR
    temp_counts = [0] * MONTHS_PER_YEAR
    precip_sums = [0.0] * MONTHS_PER_YEAR
    precip_counts = [0] * MONTHS_PER_YEAR

    for stamp, temp, precip in zip(times, temps, precips):
        month = int(stamp[5:7]) - 1
        if _usable(temp):
            temp_sums[month] += float(temp)
            temp_counts[month] += 1
        if _usable(precip):
            precip_sums[month] += float(precip)
            precip_counts[month] += 1

    temperature = [
        temp_sums[m] / temp_counts[m] if temp_counts[m] else 0.0 for m in range(MONTHS_PER_YEAR)
    ]
    precipitation = [
        precip_sums[m] / years if precip_counts[m] else 0.0 for m in range(MONTHS_PER_YEAR)
    ]
    return MonthlyNormals(temperature=temperature, precipitation=precipitation)


def _parse_city(item: Mapping[str, Any]) -> CityLocation:
    return CityLocation(
        name=str(item["name"]),
        country=str(item.get("country", "")),
        latitude=float(item["latitude"]),
        longitude=float(item["longitude"]),
        elevation=None if item.get("elevation") is None else float(item["elevation"]),
        admin1=item.get("admin1"),
    )


class OpenMeteoClimateProvider(ClimateProvider):
    """Climate normals and city search over the Open-Meteo HTTP APIs."""

    def __init__(
        self,
        config: OpenMeteoConfig | None = None,
        client: httpx.Client | None = None,
        cache: NormalsCache | None = None,
    ) -> None:
        """Initialize provider; `client` and `cache` are injectable for tests."""
        self._cfg = config or config_from_env()
        self._client = client or httpx.Client(timeout=self._cfg.timeout_s)
        self._cache: NormalsCache = cache if cache is not None else LRUCache(self._cfg.cache_size)

    def close(self) -> None:
        self._client.close()

    def _get_json(self, url: str, params: dict[str, Any], what: str) -> dict[str, Any]:
        try:
            response = self._client.get(url, params=params)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            _LOGGER.warning("%s request failed with status %s", what, exc.response.status_code)
            raise ClimateDataError(f"{what} error: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            _LOGGER.warning("%s request failed: %s", what, exc)
            raise ClimateDataError(f"{what} request failed: {exc}") from exc
        except ValueError as exc:
            raise ClimateDataError(f"{what} returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise ClimateDataError(f"{what} returned an unexpected payload")
        return payload

    def get_monthly_normals(self, lat: float, lon: float) -> MonthlyNormals:
        """Return 1991-2020 monthly normals, fetching on cache miss."""
        validate_latitude(lat)
        key = city_id(lat, lon)

        def factory() -> MonthlyNormals:
            _LOGGER.debug("fetching normals for %s", key)
            payload = self._get_json(
                self._cfg.archive_url,
                {
                    "latitude": f"{lat:.4f}",
                    "longitude": f"{lon:.4f}",
                    "start_date": NORMALS_START,
                    "end_date": NORMALS_END,
                    "daily": DAILY_VARIABLES,
                    "timezone": "auto",
                },
                "Climate API",
            )
            daily = payload.get("daily")
            if not isinstance(daily, dict):
                raise ClimateDataError("Climate API response has no daily block")
            return aggregate_daily_to_normals(daily)

        return self._cache.get(key, factory)

    def search_cities(self, query: str) -> list[CityLocation]:
        """Search places by name; queries shorter than 2 characters return []."""
        name = query.strip()
        if len(name) < MIN_QUERY_LENGTH:
            return []
        payload = self._get_json(
            self._cfg.geocoding_url,
            {"name": name, "count": GEOCODING_COUNT, "language": self._cfg.language},
            "Geocoding",
        )
        try:
            return [_parse_city(item) for item in payload.get("results") or []]
        except (KeyError, TypeError, ValueError) as exc:
            raise ClimateDataError("Geocoding returned a malformed result") from exc
