"""Vectorized solar grids for day-length and noon-altitude charts."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from geolab.astro.solar import AXIAL_TILT_DEFAULT, DAYS_PER_YEAR, EQUINOX_DAY


@dataclass(frozen=True)
class SolarAltitudeGrid:
    """Noon solar altitude sampled over latitude (rows) and day of year (columns)."""

    latitudes: np.ndarray
    days: np.ndarray
    altitude: np.ndarray

    @property
    def annual_mean(self) -> np.ndarray:
        """Mean noon altitude over the year for each latitude row."""
        return self.altitude.mean(axis=1)


def _declination(days: np.ndarray, axial_tilt: float) -> np.ndarray:
    return axial_tilt * np.sin((2.0 * np.pi / DAYS_PER_YEAR) * (days - EQUINOX_DAY))


def _year_days() -> np.ndarray:
    return np.arange(1, DAYS_PER_YEAR + 1, dtype=float)


def solar_noon_altitude_grid(
    axial_tilt: float = AXIAL_TILT_DEFAULT, lat_step: float = 1.0
) -> SolarAltitudeGrid:
    """Compute noon altitude for every day of the year from 90°N down to 90°S.

    Args:
        axial_tilt: Obliquity of the planet in degrees.
        lat_step: Latitude spacing in degrees; must divide 180 evenly.

    Returns:
        SolarAltitudeGrid whose `altitude[i, j]` is the noon altitude at
        `latitudes[i]` on day `days[j]`.
    """
    if lat_step <= 0.0:
        raise ValueError("lat_step must be positive")
    rows = int(round(180.0 / lat_step))
    if not np.isclose(rows * lat_step, 180.0):
        raise ValueError("lat_step must divide 180 evenly")

    latitudes = 90.0 - lat_step * np.arange(rows + 1, dtype=float)
    days = _year_days()
    decl = _declination(days, axial_tilt)
    altitude = np.clip(90.0 - np.abs(latitudes[:, None] - decl[None, :]), 0.0, 90.0)
    return SolarAltitudeGrid(latitudes=latitudes, days=days, altitude=altitude)


def daylight_curves(
    latitudes: Iterable[float], axial_tilt: float = AXIAL_TILT_DEFAULT
) -> dict[float, np.ndarray]:
    """Return 365 daily day-length values (hours) for each requested latitude."""
    days = _year_days()
    tan_decl = np.tan(np.radians(_declination(days, axial_tilt)))
    curves: dict[float, np.ndarray] = {}
    for lat in latitudes:
        cos_hour_angle = -np.tan(np.radians(lat)) * tan_decl
        hours = 2.0 * np.arccos(np.clip(cos_hour_angle, -1.0, 1.0)) * 12.0 / np.pi
        # Polar day and night are exact, matching the scalar function.
        hours = np.where(cos_hour_angle < -1.0, 24.0, hours)
        hours = np.where(cos_hour_angle > 1.0, 0.0, hours)
        curves[float(lat)] = hours
    return curves
