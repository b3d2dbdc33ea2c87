"""Preset cities spanning the major climate groups, with reference normals.

Normals are 1991-2020 monthly means, January first: temperature in °C and
precipitation in mm.
"""

from __future__ import annotations

from dataclasses import dataclass

from geolab.contracts import CityLocation, MonthlyNormals


@dataclass(frozen=True)
class PresetCity:
    """A preset location bundled with offline climate normals."""

    location: CityLocation
    normals: MonthlyNormals
    expected_code: str


def _preset(
    name: str,
    country: str,
    latitude: float,
    longitude: float,
    temperature: list[float],
    precipitation: list[float],
    expected_code: str,
) -> PresetCity:
    return PresetCity(
        location=CityLocation(name=name, country=country, latitude=latitude, longitude=longitude),
        normals=MonthlyNormals(temperature=temperature, precipitation=precipitation),
        expected_code=expected_code,
    )


PRESET_CITIES: tuple[PresetCity, ...] = (
    _preset(
        "Tokyo", "Japan", 35.68, 139.69,
        [5.4, 6.1, 9.4, 14.3, 18.8, 21.9, 25.7, 26.9, 23.3, 18.0, 12.5, 7.7],
        [59.7, 56.5, 116.0, 133.7, 139.7, 167.8, 156.2, 154.7, 224.9, 234.8, 96.3, 57.9],
        "Cfa",
    ),
    _preset(
        "Singapore", "Singapore", 1.29, 103.85,
        [26.1, 26.6, 27.1, 27.4, 27.4, 27.0, 26.8, 26.9, 27.0, 27.0, 26.8, 26.3],
        [250.0, 162.0, 179.0, 147.0, 171.0, 161.0, 170.0, 196.0, 168.0, 208.0, 269.0, 287.0],
        "Af",
    ),
    _preset(
        "Cairo", "Egypt", 30.04, 31.24,
        [14.0, 15.3, 17.7, 21.5, 24.8, 27.2, 28.1, 28.0, 26.3, 23.5, 19.3, 15.6],
        [5.0, 3.8, 3.8, 1.1, 0.5, 0.1, 0.0, 0.0, 0.0, 0.7, 3.8, 5.9],
        "BWh",
    ),
    _preset(
        "London", "United Kingdom", 51.51, -0.13,
        [5.8, 6.2, 8.2, 10.9, 14.3, 17.4, 19.6, 19.2, 16.4, 12.7, 8.9, 6.3],
        [55.2, 40.9, 41.6, 43.7, 49.4, 45.1, 44.5, 49.5, 49.1, 68.5, 59.0, 55.2],
        "Cfb",
    ),
    _preset(
        "Moscow", "Russia", 55.76, 37.62,
        [-6.2, -5.9, -0.9, 6.9, 13.6, 17.3, 19.7, 17.6, 11.9, 5.8, -0.5, -4.4],
        [53.0, 44.0, 39.0, 37.0, 61.0, 80.0, 94.0, 72.0, 66.0, 70.0, 52.0, 51.0],
        "Dfb",
    ),
    _preset(
        "Rome", "Italy", 41.89, 12.50,
        [7.5, 8.3, 10.9, 13.9, 18.0, 22.1, 24.9, 25.1, 21.2, 17.1, 12.4, 8.6],
        [67.0, 73.0, 58.0, 81.0, 53.0, 34.0, 19.0, 33.0, 74.0, 113.0, 111.0, 92.0],
        "Csa",
    ),
    _preset(
        "Utqiagvik", "United States", 71.29, -156.79,
        [-25.4, -26.3, -25.2, -17.4, -5.6, 2.4, 5.9, 4.2, -0.2, -9.1, -17.9, -23.0],
        [3.6, 3.3, 2.8, 3.0, 3.3, 7.6, 24.1, 25.9, 17.0, 9.9, 4.6, 3.8],
        "ET",
    ),
    _preset(
        "Nairobi", "Kenya", -1.29, 36.82,
        [19.0, 19.9, 20.4, 19.8, 18.6, 17.0, 16.1, 16.6, 18.1, 19.4, 19.0, 18.6],
        [53.0, 47.0, 92.0, 182.0, 142.0, 27.0, 12.0, 17.0, 23.0, 60.0, 149.0, 100.0],
        "Cwb",
    ),
)


def city_id(lat: float, lon: float) -> str:
    """Return the stable identifier for a coordinate pair, rounded to 2 decimals."""
    return f"{lat:.2f}_{lon:.2f}"
