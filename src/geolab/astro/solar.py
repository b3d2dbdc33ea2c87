"""Solar geometry helpers.

Circular-orbit, fixed-obliquity approximations for an educational globe: the
spring equinox is pinned to day 81 and no leap-year correction is applied.
"""

from __future__ import annotations

from datetime import date, timedelta
from math import acos, pi, radians, sin, tan

AXIAL_TILT_DEFAULT = 23.4
EQUINOX_DAY = 81
DAYS_PER_YEAR = 365
DEGREES_PER_HOUR = 15.0

# Non-leap reference year for calendar conversions.
_REFERENCE_YEAR = 2023
_DAYS_BEFORE_MONTH = (0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334)

LATITUDE_PRESETS: tuple[tuple[str, float], ...] = (
    ("Arctic Circle (66.5°N)", 66.5),
    ("45°N", 45.0),
    ("Tropic of Cancer (23.4°N)", 23.4),
    ("Equator (0°)", 0.0),
    ("Tropic of Capricorn (23.4°S)", -23.4),
    ("45°S", -45.0),
    ("Antarctic Circle (66.5°S)", -66.5),
)

_TILT_BANDS: tuple[tuple[float, str], ...] = (
    (10.0, "almost no seasonal change"),
    (20.0, "mild seasons"),
    (30.0, "seasons close to present-day Earth"),
    (45.0, "extreme seasons"),
    (60.0, "very extreme seasons"),
    (80.0, "severe seasonal swings"),
)


def _clamp(value: float, lower: float, upper: float) -> float:
    """Clamp a numeric value to [lower, upper]."""
    return max(lower, min(upper, value))


def solar_declination(day_of_year: float, axial_tilt: float = AXIAL_TILT_DEFAULT) -> float:
    """Return solar declination in degrees for a day of year.

    Peaks at `+axial_tilt` near the June solstice and `-axial_tilt` near the
    December solstice; zero at day 81 and again about half a year later.
    """
    return axial_tilt * sin((2.0 * pi / DAYS_PER_YEAR) * (day_of_year - EQUINOX_DAY))


def daylight_hours(
    latitude: float, day_of_year: float, axial_tilt: float = AXIAL_TILT_DEFAULT
) -> float:
    """Return the length of daylight in hours at a latitude.

    Args:
        latitude: Latitude in degrees, north positive.
        day_of_year: Day index starting at 1 on January 1.
        axial_tilt: Obliquity of the planet in degrees.

    Returns:
        Hours of daylight in [0, 24]. Exactly 24 under polar day and exactly 0
        under polar night.
    """
    decl_rad = radians(solar_declination(day_of_year, axial_tilt))
    cos_hour_angle = -tan(radians(latitude)) * tan(decl_rad)

    if cos_hour_angle < -1.0:
        return 24.0
    if cos_hour_angle > 1.0:
        return 0.0

    hour_angle = acos(cos_hour_angle)
    return 2.0 * hour_angle * 12.0 / pi


def subsolar_point(
    day_of_year: float, hour_utc: float = 12.0, axial_tilt: float = AXIAL_TILT_DEFAULT
) -> tuple[float, float]:
    """Return `(lon, lat)` of the point where the sun is at zenith.

    Longitude is 0° at 12:00 UTC and moves 15° west per hour.
    """
    lon = -(hour_utc - 12.0) * DEGREES_PER_HOUR
    return (lon, solar_declination(day_of_year, axial_tilt))


def solar_noon_altitude(
    latitude: float, day_of_year: float, axial_tilt: float = AXIAL_TILT_DEFAULT
) -> float:
    """Return the sun's altitude above the horizon at local solar noon, in [0, 90]."""
    decl = solar_declination(day_of_year, axial_tilt)
    return _clamp(90.0 - abs(latitude - decl), 0.0, 90.0)


def tropic_latitude(axial_tilt: float = AXIAL_TILT_DEFAULT) -> float:
    """Return the latitude of the tropics for a given tilt."""
    return axial_tilt


def arctic_circle_latitude(axial_tilt: float = AXIAL_TILT_DEFAULT) -> float:
    """Return the latitude of the polar circles for a given tilt."""
    return 90.0 - axial_tilt


def day_of_year(month: int, day: int) -> int:
    """Return the day-of-year index for a calendar date in the reference year.

    Days past the end of a month roll into the following month.
    """
    return _DAYS_BEFORE_MONTH[month - 1] + day


def days_in_month(month: int) -> int:
    """Return the number of days in a month of the reference year."""
    if month == 12:
        return DAYS_PER_YEAR - _DAYS_BEFORE_MONTH[11]
    return _DAYS_BEFORE_MONTH[month] - _DAYS_BEFORE_MONTH[month - 1]


def doy_to_date(doy: int) -> tuple[int, int]:
    """Return `(month, day)` for a day-of-year index in the reference year."""
    resolved = date(_REFERENCE_YEAR, 1, 1) + timedelta(days=doy - 1)
    return (resolved.month, resolved.day)


def describe_axial_tilt(axial_tilt: float) -> str:
    """Return a short qualitative description of seasons under an axial tilt."""
    if axial_tilt == 0:
        return "no seasons (permanent equinox)"
    if abs(axial_tilt - AXIAL_TILT_DEFAULT) < 0.5:
        return "present-day Earth"
    for upper, label in _TILT_BANDS:
        if axial_tilt < upper:
            return label
    return "Uranus-like, tipped on its side"
