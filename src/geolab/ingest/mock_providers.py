"""Deterministic offline providers backed by preset cities."""

from __future__ import annotations

import logging
from math import cos, pi

from geolab.contracts import CityLocation, MonthlyNormals, validate_latitude
from geolab.ingest.cache import LRUCache
from geolab.ingest.interfaces import ClimateProvider, NormalsCache
from geolab.ingest.presets import PRESET_CITIES, PresetCity, city_id

_LOGGER = logging.getLogger(__name__)

PRESET_MATCH_DEG = 0.5


def _nearest_preset(lat: float, lon: float) -> PresetCity | None:
    for preset in PRESET_CITIES:
        location = preset.location
        if abs(location.latitude - lat) <= PRESET_MATCH_DEG and abs(location.longitude - lon) <= PRESET_MATCH_DEG:
            return preset
    return None


def synthetic_normals(lat: float) -> MonthlyNormals:
    """Build a smooth zonal climate from latitude alone.

    Temperature cools poleward and its seasonal swing grows with latitude;
    the warm peak falls in July north of the equator and January south of it.
    """
    abs_lat = abs(lat)
    annual_mean = 27.0 - 0.55 * abs_lat
    amplitude = 0.3 * abs_lat
    peak_month = 6 if lat >= 0 else 0
    wet = 220.0 * cos(lat * pi / 180.0) ** 4 + 30.0

    temperature = []
    precipitation = []
    for month in range(12):
        phase = cos(2.0 * pi * (month - peak_month) / 12.0)
        temperature.append(round(annual_mean + amplitude * phase, 1))
        precipitation.append(round(wet * (1.0 + 0.3 * phase), 1))
    return MonthlyNormals(temperature=temperature, precipitation=precipitation)


class MockClimateProvider(ClimateProvider):
    """Serve preset normals near preset cities and synthetic normals elsewhere."""

    def __init__(self, cache: NormalsCache | None = None) -> None:
        self._cache: NormalsCache = cache if cache is not None else LRUCache(128)

    def close(self) -> None:
        """Nothing to release; preset data lives in memory."""

    def get_monthly_normals(self, lat: float, lon: float) -> MonthlyNormals:
        """Return deterministic normals for a WGS84 point."""
        validate_latitude(lat)

        def factory() -> MonthlyNormals:
            preset = _nearest_preset(lat, lon)
            if preset is not None:
                _LOGGER.debug("serving preset normals for %s", preset.location.name)
                return preset.normals
            return synthetic_normals(lat)

        return self._cache.get(city_id(lat, lon), factory)

    def search_cities(self, query: str) -> list[CityLocation]:
        """Return preset cities whose name or country contains `query`, case-insensitively."""
        needle = query.strip().lower()
        if len(needle) < 2:
            return []
        return [
            preset.location
            for preset in PRESET_CITIES
            if needle in preset.location.name.lower() or needle in preset.location.country.lower()
        ]
