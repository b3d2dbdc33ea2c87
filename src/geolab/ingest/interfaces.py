"""Provider interfaces for climate normals and place lookup."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from geolab.contracts import CityLocation, MonthlyNormals


class ClimateNormalsProvider(Protocol):
    """Interface for retrieving 1991-2020 monthly normals for a point."""

    def get_monthly_normals(self, lat: float, lon: float) -> MonthlyNormals:
        """Return monthly mean temperature (°C) and precipitation (mm) for a WGS84 point."""


class CitySearchProvider(Protocol):
    """Interface for resolving a free-text place name to coordinates."""

    def search_cities(self, query: str) -> list[CityLocation]:
        """Return candidate places matching `query`, best match first."""


class NormalsCache(Protocol):
    """Read-through cache injected into normals providers."""

    def get(self, key: str, factory: Callable[[], MonthlyNormals]) -> MonthlyNormals:
        """Return a cached value or build and store it via `factory`."""


class ClimateProvider(ClimateNormalsProvider, CitySearchProvider, Protocol):
    """Combined normals and city-search provider used by the API layer."""

    def close(self) -> None:
        """Release network clients or other resources held by the provider."""
