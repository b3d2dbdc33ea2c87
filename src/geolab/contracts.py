"""Core data contracts shared by the computation, ingest and API layers."""

from __future__ import annotations

from dataclasses import dataclass
from math import isfinite
from typing import Any

MONTHS_PER_YEAR = 12


class InvalidInputError(ValueError):
    """Raised when inputs violate a documented precondition."""


class ClimateDataError(RuntimeError):
    """Raised when climate normals cannot be retrieved from a remote source."""


def _to_float_list(values: object, label: str) -> list[float]:
    """Convert list-like or numpy-like values to a list of floats."""
    if hasattr(values, "tolist"):
        raw_values = values.tolist()
    else:
        raw_values = values

    if not isinstance(raw_values, (list, tuple)):
        raise InvalidInputError(f"{label} must be list-like.")

    try:
        return [float(value) for value in raw_values]
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{label} must contain only numbers.") from exc


def to_monthly_series(values: object, label: str) -> tuple[float, ...]:
    """Validate a 12-month series and return it as a tuple of finite floats."""
    series = _to_float_list(values, label)
    if len(series) != MONTHS_PER_YEAR:
        raise InvalidInputError(
            f"{label} must have exactly {MONTHS_PER_YEAR} monthly values, got {len(series)}."
        )
    if not all(isfinite(value) for value in series):
        raise InvalidInputError(f"{label} must not contain NaN or infinite values.")
    return tuple(series)


def validate_latitude(latitude: float) -> float:
    """Return latitude as float, rejecting values outside [-90, 90]."""
    lat = float(latitude)
    if not isfinite(lat) or not -90.0 <= lat <= 90.0:
        raise InvalidInputError("latitude must be within [-90, 90].")
    return lat


@dataclass(frozen=True, slots=True)
class MonthlyNormals:
    """Thirty-year monthly climate normals for one location, January first."""

    temperature: tuple[float, ...]
    precipitation: tuple[float, ...]

    def __post_init__(self) -> None:
        """Coerce both series to validated 12-month tuples."""
        object.__setattr__(self, "temperature", to_monthly_series(self.temperature, "temperature"))
        object.__setattr__(
            self, "precipitation", to_monthly_series(self.precipitation, "precipitation")
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize normals to a JSON-compatible dictionary."""
        return {
            "temperature": list(self.temperature),
            "precipitation": list(self.precipitation),
        }


@dataclass(frozen=True, slots=True)
class CellBoundaries:
    """Latitudes of the ITCZ and the Hadley/Ferrel/Polar cell boundaries."""

    itcz_lat: float
    nh_subtropical_lat: float
    sh_subtropical_lat: float
    nh_subpolar_lat: float
    sh_subpolar_lat: float

    def to_dict(self) -> dict[str, float]:
        """Serialize boundaries to a JSON-compatible dictionary."""
        return {
            "itcz_lat": self.itcz_lat,
            "nh_subtropical_lat": self.nh_subtropical_lat,
            "sh_subtropical_lat": self.sh_subtropical_lat,
            "nh_subpolar_lat": self.nh_subpolar_lat,
            "sh_subpolar_lat": self.sh_subpolar_lat,
        }


@dataclass(frozen=True, slots=True)
class KoppenCriterion:
    """One evaluated classification rule, formatted for display."""

    label: str
    value: float
    threshold: str
    met: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "value": self.value,
            "threshold": self.threshold,
            "met": self.met,
        }


@dataclass(frozen=True, slots=True)
class KoppenResult:
    """Köppen-Geiger classification of one climate."""

    code: str
    group: str
    name_ja: str
    name_en: str
    description: str
    criteria: tuple[KoppenCriterion, ...]

    def to_dict(self) -> dict[str, Any]:
        """Serialize the result to a JSON-compatible dictionary."""
        return {
            "code": self.code,
            "group": self.group,
            "name_ja": self.name_ja,
            "name_en": self.name_en,
            "description": self.description,
            "criteria": [criterion.to_dict() for criterion in self.criteria],
        }


@dataclass(frozen=True, slots=True)
class KoppenTracePath:
    """Flowchart node identifiers visited by the decision procedure, in order."""

    visited_nodes: tuple[str, ...]
    final_node: str

    def to_dict(self) -> dict[str, Any]:
        return {"visited_nodes": list(self.visited_nodes), "final_node": self.final_node}


@dataclass(frozen=True, slots=True)
class NodeMetric:
    """Tooltip payload for a single flowchart decision node."""

    condition: str
    value: str
    passed: bool

    def to_dict(self) -> dict[str, Any]:
        return {"condition": self.condition, "value": self.value, "passed": self.passed}


@dataclass(frozen=True, slots=True)
class MatrixHeaderMetric:
    """Tooltip payload for a C/D matrix row or column header."""

    values: str
    matched: bool

    def to_dict(self) -> dict[str, Any]:
        return {"values": self.values, "matched": self.matched}


@dataclass(frozen=True, slots=True)
class CityLocation:
    """A named place returned by city search or taken from presets."""

    name: str
    country: str
    latitude: float
    longitude: float
    elevation: float | None = None
    admin1: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "country": self.country,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "elevation": self.elevation,
            "admin1": self.admin1,
        }
