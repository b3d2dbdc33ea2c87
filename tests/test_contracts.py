"""Contract tests for validated data types."""

from __future__ import annotations

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from geolab.contracts import (
    CellBoundaries,
    CityLocation,
    InvalidInputError,
    KoppenCriterion,
    KoppenResult,
    MonthlyNormals,
    to_monthly_series,
    validate_latitude,
)


def test_monthly_normals_accepts_numpy_and_coerces_to_tuples() -> None:
    """Array-likes are converted to tuples of floats."""
    normals = MonthlyNormals(temperature=np.arange(12), precipitation=[1] * 12)

    assert normals.temperature == tuple(float(i) for i in range(12))
    assert normals.precipitation == (1.0,) * 12
    assert normals.to_dict()["temperature"][11] == 11.0


def test_monthly_normals_is_immutable() -> None:
    """Normals cannot be reassigned after construction."""
    normals = MonthlyNormals(temperature=[0.0] * 12, precipitation=[0.0] * 12)
    with pytest.raises(FrozenInstanceError):
        normals.temperature = (1.0,) * 12  # type: ignore[misc]


@pytest.mark.parametrize(
    "values",
    [[1.0] * 11, [1.0] * 13, [1.0] * 11 + [float("inf")], "twelve", [1.0] * 11 + ["x"]],
)
def test_monthly_series_validation(values: object) -> None:
    """Only 12 finite numbers form a valid monthly series."""
    with pytest.raises(InvalidInputError):
        to_monthly_series(values, "temperature")


def test_invalid_input_error_is_value_error() -> None:
    """Callers catching ValueError also catch InvalidInputError."""
    with pytest.raises(ValueError):
        validate_latitude(-90.5)
    assert validate_latitude(90) == 90.0


def test_koppen_result_to_dict() -> None:
    """Results serialize nested criteria."""
    result = KoppenResult(
        code="ET",
        group="E",
        name_ja="ツンドラ気候",
        name_en="Tundra",
        description="Warmest month between 0 and 10°C",
        criteria=(KoppenCriterion("Warmest month mean", 5.9, "< 10°C", True),),
    )
    payload = result.to_dict()

    assert payload["code"] == "ET"
    assert payload["criteria"] == [
        {"label": "Warmest month mean", "value": 5.9, "threshold": "< 10°C", "met": True}
    ]


def test_simple_to_dict_payloads() -> None:
    """Boundaries and cities serialize every field."""
    boundaries = CellBoundaries(1.0, 30.4, -29.6, 60.2, -59.8).to_dict()
    city = CityLocation("Tokyo", "Japan", 35.68, 139.69).to_dict()

    assert boundaries["itcz_lat"] == 1.0
    assert len(boundaries) == 5
    assert city["elevation"] is None
    assert city["admin1"] is None
