"""Three-cell atmospheric circulation and seasonal ITCZ migration.

The ITCZ follows the solar declination with damped amplitude and a lag for
oceanic thermal inertia. The lag, weights, northward bias and clamp range are
empirical calibration constants tuned against observed ITCZ climatology, not
physical derivations; change them only against reference output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from geolab.astro.solar import solar_declination
from geolab.contracts import CellBoundaries

ITCZ_LAG_DAYS = 25
ITCZ_LAGGED_WEIGHT = 0.22
ITCZ_CURRENT_WEIGHT = 0.08
ITCZ_NORTH_BIAS_DEG = 2.5
ITCZ_MIN_LAT = -6.0
ITCZ_MAX_LAT = 14.0

SUBTROPICAL_BASE_LAT = 30.0
SUBPOLAR_BASE_LAT = 60.0
SUBTROPICAL_DAMPING = 0.4
SUBPOLAR_DAMPING = 0.2

_DAYS_IN_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

CellId = Literal["hadley", "ferrel", "polar"]
PressureZoneId = Literal["itcz", "subtropical_high", "subpolar_low", "polar_high"]
WindZoneId = Literal["trade", "westerly", "polar_easterly"]


@dataclass(frozen=True)
class CellDefinition:
    """Static description of one circulation cell."""

    id: CellId
    name: str
    lat_range: tuple[float, float]
    direction: Literal["direct", "indirect"]
    surface_wind: str
    upper_wind: str


@dataclass(frozen=True)
class PressureZone:
    """Static description of one pressure belt at its equinox latitude."""

    id: PressureZoneId
    name: str
    base_lat: float
    type: Literal["low", "high"]


@dataclass(frozen=True)
class WindZone:
    """Surface wind belt with its bearing north and south of the ITCZ."""

    id: WindZoneId
    name: str
    lat_range: tuple[float, float]
    direction_nh: float
    direction_sh: float


CELLS: tuple[CellDefinition, ...] = (
    CellDefinition(
        id="hadley",
        name="Hadley cell",
        lat_range=(0.0, 30.0),
        direction="direct",
        surface_wind="Trade winds (toward the equator)",
        upper_wind="Flows poleward aloft and sinks in the subtropics",
    ),
    CellDefinition(
        id="ferrel",
        name="Ferrel cell",
        lat_range=(30.0, 60.0),
        direction="indirect",
        surface_wind="Westerlies (toward the poles)",
        upper_wind="Indirect cell flowing equatorward aloft",
    ),
    CellDefinition(
        id="polar",
        name="Polar cell",
        lat_range=(60.0, 90.0),
        direction="direct",
        surface_wind="Polar easterlies (toward the equator)",
        upper_wind="Flows poleward aloft and sinks over the pole",
    ),
)

PRESSURE_ZONES: tuple[PressureZone, ...] = (
    PressureZone(id="itcz", name="Equatorial low (ITCZ)", base_lat=0.0, type="low"),
    PressureZone(id="subtropical_high", name="Subtropical high", base_lat=30.0, type="high"),
    PressureZone(id="subpolar_low", name="Subpolar low", base_lat=60.0, type="low"),
    PressureZone(id="polar_high", name="Polar high", base_lat=90.0, type="high"),
)

WIND_ZONES: tuple[WindZone, ...] = (
    WindZone(id="trade", name="Trade winds", lat_range=(0.0, 30.0), direction_nh=225.0, direction_sh=315.0),
    WindZone(id="westerly", name="Westerlies", lat_range=(30.0, 60.0), direction_nh=45.0, direction_sh=135.0),
    WindZone(
        id="polar_easterly",
        name="Polar easterlies",
        lat_range=(60.0, 90.0),
        direction_nh=225.0,
        direction_sh=315.0,
    ),
)


def itcz_latitude(day_of_year: float) -> float:
    """Return the latitude of the Intertropical Convergence Zone, in [-6, 14]."""
    decl = solar_declination(day_of_year)
    lagged_decl = solar_declination(day_of_year - ITCZ_LAG_DAYS)
    lat = lagged_decl * ITCZ_LAGGED_WEIGHT + decl * ITCZ_CURRENT_WEIGHT + ITCZ_NORTH_BIAS_DEG
    return max(ITCZ_MIN_LAT, min(ITCZ_MAX_LAT, lat))


def pressure_zone_latitude(zone: PressureZone, day_of_year: float) -> float:
    """Return the seasonal latitude of a pressure belt, shifted with the ITCZ.

    The polar high is held at the pole.
    """
    damping = 1.0 - zone.base_lat / 120.0
    return min(90.0, zone.base_lat + itcz_latitude(day_of_year) * damping)


def get_cell_boundaries(day_of_year: float) -> CellBoundaries:
    """Return the five circulation boundary latitudes for a day of year.

    Both hemispheres shift in the same direction as the ITCZ, with smaller
    displacement farther from it.
    """
    itcz = itcz_latitude(day_of_year)
    subtropical_shift = itcz * SUBTROPICAL_DAMPING
    subpolar_shift = itcz * SUBPOLAR_DAMPING
    return CellBoundaries(
        itcz_lat=itcz,
        nh_subtropical_lat=SUBTROPICAL_BASE_LAT + subtropical_shift,
        sh_subtropical_lat=-SUBTROPICAL_BASE_LAT + subtropical_shift,
        nh_subpolar_lat=SUBPOLAR_BASE_LAT + subpolar_shift,
        sh_subpolar_lat=-SUBPOLAR_BASE_LAT + subpolar_shift,
    )


def wind_zone_at(latitude: float, day_of_year: float) -> WindZone:
    """Return the surface wind belt containing a latitude.

    Belt edges sit 30° and 60° from the current ITCZ, not from the equator.
    """
    distance = abs(latitude - itcz_latitude(day_of_year))
    for zone in WIND_ZONES:
        if distance < zone.lat_range[1]:
            return zone
    return WIND_ZONES[-1]


def surface_wind_direction(latitude: float, day_of_year: float) -> float:
    """Return the surface wind bearing in degrees (north = 0, clockwise)."""
    zone = wind_zone_at(latitude, day_of_year)
    north_of_itcz = latitude >= itcz_latitude(day_of_year)
    return zone.direction_nh if north_of_itcz else zone.direction_sh


def month_to_day_of_year(month: int) -> int:
    """Return the mid-month day of year for a calendar month (1-12)."""
    return sum(_DAYS_IN_MONTH[: month - 1]) + _DAYS_IN_MONTH[month - 1] // 2
