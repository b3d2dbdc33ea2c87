"""Tests for Köppen-Geiger classification and decision-path tracing."""

from __future__ import annotations

import pytest

from geolab.climate.flowchart import EDGES, NODES
from geolab.climate.koppen import (
    DECISION_TREE,
    KOPPEN_CODES,
    KOPPEN_NAMES,
    classify_koppen,
    evaluate_koppen,
    matrix_header_metric,
    node_metric,
    round1,
    trace_koppen_path,
)
from geolab.contracts import InvalidInputError
from geolab.ingest.presets import PRESET_CITIES

_BY_NAME = {preset.location.name: preset for preset in PRESET_CITIES}


def _city(name: str) -> tuple[tuple[float, ...], tuple[float, ...], float]:
    preset = _BY_NAME[name]
    return preset.normals.temperature, preset.normals.precipitation, preset.location.latitude


@pytest.mark.parametrize("preset", PRESET_CITIES, ids=lambda p: p.location.name)
def test_preset_cities_classify_as_expected(preset) -> None:
    """Each preset city lands in its reference climate type."""
    result = classify_koppen(
        preset.normals.temperature, preset.normals.precipitation, preset.location.latitude
    )

    assert result.code == preset.expected_code
    assert result.group == preset.expected_code[0]
    assert (result.name_ja, result.name_en, result.description) == KOPPEN_NAMES[result.code]


@pytest.mark.parametrize("preset", PRESET_CITIES, ids=lambda p: p.location.name)
def test_trace_agrees_with_classification_and_follows_edges(preset) -> None:
    """The trace ends at the classified code and only walks flowchart edges."""
    args = (preset.normals.temperature, preset.normals.precipitation, preset.location.latitude)
    trace = trace_koppen_path(*args)
    edges = {(edge.source, edge.target) for edge in EDGES}

    assert trace.visited_nodes[0] == "start"
    assert trace.visited_nodes[-1] == trace.final_node == classify_koppen(*args).code
    for source, target in zip(trace.visited_nodes, trace.visited_nodes[1:]):
        assert (source, target) in edges


def test_tokyo_trace_and_criteria() -> None:
    """Tokyo walks the temperate branch and records four criteria."""
    result, trace = evaluate_koppen(*_city("Tokyo"))

    assert trace.visited_nodes == (
        "start", "e_check", "b_check", "a_check", "cd_check", "c_group", "Cfa",
    )
    assert [c.label for c in result.criteria] == [
        "Aridity threshold",
        "Coldest month mean",
        "Dry season",
        "Warmest month mean",
    ]
    aridity = result.criteria[0]
    assert aridity.value == 1598.2
    assert aridity.threshold == "even rain (20×T+140) = 456.7mm"
    assert aridity.met is False


def test_polar_and_desert_traces() -> None:
    """Tundra and hot desert take the E and B branches."""
    assert trace_koppen_path(*_city("Utqiagvik")).visited_nodes == ("start", "e_check", "e_sub", "ET")
    assert trace_koppen_path(*_city("Cairo")).visited_nodes == (
        "start", "e_check", "b_check", "b_desert", "bw_temp", "BWh",
    )
    assert trace_koppen_path(*_city("Singapore")).visited_nodes == (
        "start", "e_check", "b_check", "a_check", "a_pmin60", "Af",
    )


def test_ice_cap() -> None:
    """A warmest month below freezing is EF."""
    temperature = [-30.0, -32.0, -30.0, -25.0, -15.0, -8.0, -5.0, -7.0, -14.0, -22.0, -28.0, -30.0]
    precipitation = [5.0] * 12

    assert classify_koppen(temperature, precipitation, 75.0).code == "EF"


def test_tropical_monsoon_and_savanna() -> None:
    """Dry-month rainfall against 100 - Pann/25 separates Am from Aw."""
    temperature = [27.0] * 12
    monsoon = [300.0] * 11 + [50.0]
    savanna = [10.0, 10.0, 10.0, 100.0, 200.0, 300.0, 300.0, 300.0, 200.0, 100.0, 10.0, 10.0]

    assert classify_koppen(temperature, monsoon, 10.0).code == "Am"
    assert classify_koppen(temperature, savanna, 10.0).code == "Aw"


def test_cold_steppe() -> None:
    """Rainfall between half the aridity limit and the limit is steppe."""
    temperature = [-5.0, -2.0, 3.0, 10.0, 16.0, 21.0, 24.0, 23.0, 17.0, 10.0, 3.0, -3.0]
    precipitation = [25.0] * 12

    assert classify_koppen(temperature, precipitation, 45.0).code == "BSk"


def test_temperate_continental_boundary_is_exclusive() -> None:
    """A coldest month of exactly -3°C is continental; -2.9°C is temperate."""
    base = [-3.0, -2.0, 2.0, 8.0, 14.0, 18.0, 20.0, 19.0, 14.0, 8.0, 2.0, -1.0]
    precipitation = [50.0] * 12
    warmer = [-2.9] + base[1:]

    assert classify_koppen(base, precipitation, 50.0).code == "Dfb"
    assert classify_koppen(warmer, precipitation, 50.0).code == "Cfb"
    assert trace_koppen_path(base, precipitation, 50.0).visited_nodes[-2] == "d_group"


def test_severe_winter_letter_only_in_continental_group() -> None:
    """Coldest month below -38°C with a short summer yields the `d` letter."""
    temperature = [-45.0, -42.0, -30.0, -13.0, 2.0, 12.0, 15.0, 11.0, 3.0, -14.0, -36.0, -44.0]
    precipitation = [5.0, 5.0, 4.0, 5.0, 11.0, 30.0, 35.0, 30.0, 15.0, 10.0, 8.0, 6.0]

    assert classify_koppen(temperature, precipitation, 67.0).code == "Dfd"


def test_cool_summer_temperate() -> None:
    """Fewer than four months at 10°C or above gives `c` in group C."""
    temperature = [2.0, 2.0, 3.0, 5.0, 7.0, 9.0, 10.5, 10.2, 8.0, 6.0, 4.0, 3.0]

    assert classify_koppen(temperature, [100.0] * 12, 60.0).code == "Cfc"


def test_southern_hemisphere_swaps_seasons() -> None:
    """The same series is dry-winter in the south and dry-summer in the north."""
    temperature, precipitation, _ = _city("Nairobi")

    assert classify_koppen(temperature, precipitation, -1.29).code == "Cwb"
    assert classify_koppen(temperature, precipitation, 1.29).code == "Csb"


@pytest.mark.parametrize(
    ("temperature", "precipitation", "latitude"),
    [
        ([10.0] * 11, [50.0] * 12, 0.0),
        ([10.0] * 12, [50.0] * 13, 0.0),
        ([float("nan")] + [10.0] * 11, [50.0] * 12, 0.0),
        ([10.0] * 12, [50.0] * 12, 91.0),
    ],
)
def test_invalid_inputs_are_rejected(temperature, precipitation, latitude) -> None:
    """Wrong lengths, non-finite values and bad latitudes raise InvalidInputError."""
    with pytest.raises(InvalidInputError):
        classify_koppen(temperature, precipitation, latitude)


def test_decision_tree_matches_flowchart() -> None:
    """Every decision node exists in the diagram and its Yes/No edges agree."""
    decision_ids = {node.id for node in NODES if node.type == "decision"}
    result_ids = {node.id for node in NODES if node.type == "result"}

    assert set(DECISION_TREE) == decision_ids
    assert result_ids == KOPPEN_CODES
    for edge in EDGES:
        if edge.label == "Yes":
            assert DECISION_TREE[edge.source].yes == edge.target
        elif edge.label == "No":
            assert DECISION_TREE[edge.source].no == edge.target


def test_node_metric() -> None:
    """Decision nodes report their condition, observed value and outcome."""
    metric = node_metric("b_check", *_city("Tokyo"))

    assert metric is not None
    assert metric.condition == "Pann < 456.7mm?"
    assert metric.value == "1598.2mm"
    assert metric.passed is False
    assert node_metric("cd_check", *_city("Moscow")).passed is False
    assert node_metric("c_group", *_city("Tokyo")).value == "→ Cfa"
    assert node_metric("start", *_city("Tokyo")) is None
    assert node_metric("Cfa", *_city("Tokyo")) is None


def test_matrix_header_metric() -> None:
    """Matrix headers report the matching letter and reject unknown keys."""
    tokyo = _city("Tokyo")

    assert matrix_header_metric("a", "col", "C", *tokyo).matched is True
    assert matrix_header_metric("b", "col", "C", *tokyo).matched is False
    assert matrix_header_metric("f", "row", "C", *tokyo).values == "neither s nor w"
    assert matrix_header_metric("f", "row", "C", *tokyo).matched is True
    assert matrix_header_metric("d", "col", "C", *tokyo) is None
    assert matrix_header_metric("x", "row", "C", *tokyo) is None

    moscow_d = matrix_header_metric("d", "col", "D", *_city("Moscow"))
    assert moscow_d.values == "Tmin = -6.2°C"
    assert moscow_d.matched is False


def test_round1_rounds_half_up() -> None:
    """Display rounding sends halves upward, including negatives."""
    assert round1(2.25) == 2.3
    assert round1(-2.25) == -2.2
    assert round1(1598.1999999) == 1598.2


def test_zero_precipitation_does_not_divide_by_zero() -> None:
    """A rainless year is classified as desert without NaN values."""
    result = classify_koppen([25.0] * 12, [0.0] * 12, 20.0)

    assert result.code == "BWh"
    assert all(criterion.value == criterion.value for criterion in result.criteria)
