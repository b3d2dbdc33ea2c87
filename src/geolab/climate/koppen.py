"""Köppen-Geiger climate classification with decision-path tracing.

The decision procedure is defined once, as data: `DECISION_TREE` maps each
flowchart node id to a node that evaluates derived climate metrics and names
the next node. `evaluate_koppen` walks the tree a single time and records both
the display criteria and the visited node ids, so the classification code and
the flowchart trace always end at the same leaf.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from math import floor
from typing import Literal

from geolab.contracts import (
    KoppenCriterion,
    KoppenResult,
    KoppenTracePath,
    MatrixHeaderMetric,
    MonthlyNormals,
    NodeMetric,
    validate_latitude,
)

START_NODE = "start"
ROOT_NODE = "e_check"

# 0-indexed months: April-September is summer in the northern hemisphere.
_NH_SUMMER = (3, 4, 5, 6, 7, 8)
_NH_WINTER = (0, 1, 2, 9, 10, 11)

KOPPEN_NAMES: dict[str, tuple[str, str, str]] = {
    "Af": ("熱帯雨林気候", "Tropical rainforest", "Hot and wet all year"),
    "Am": ("熱帯モンスーン気候", "Tropical monsoon", "Tropical with a short dry season"),
    "Aw": ("サバナ気候", "Tropical savanna", "Distinct dry and wet seasons"),
    "BWh": ("高温砂漠気候", "Hot desert", "Hot all year and extremely dry"),
    "BWk": ("低温砂漠気候", "Cold desert", "Cool and extremely dry"),
    "BSh": ("高温ステップ気候", "Hot steppe", "Hot semi-arid"),
    "BSk": ("低温ステップ気候", "Cold steppe", "Cool semi-arid"),
    "Csa": ("地中海性気候", "Mediterranean hot summer", "Dry hot summer, wet winter"),
    "Csb": ("西岸海洋性地中海気候", "Mediterranean warm summer", "Dry mild summer, wet winter"),
    "Csc": ("冷涼地中海性気候", "Mediterranean cold summer", "Dry cool summer"),
    "Cwa": ("温暖冬季少雨気候", "Humid subtropical dry winter", "Dry winter, hot wet summer"),
    "Cwb": ("高地温暖冬季少雨気候", "Subtropical highland", "Dry winter, mild summer"),
    "Cwc": ("冷涼冬季少雨気候", "Cold subtropical highland", "Dry winter, short cool summer"),
    "Cfa": ("温暖湿潤気候", "Humid subtropical", "Humid all year, hot summer"),
    "Cfb": ("西岸海洋性気候", "Oceanic", "Humid all year, mild summer"),
    "Cfc": ("冷涼海洋性気候", "Subpolar oceanic", "Humid all year, short summer"),
    "Dsa": ("高温夏乾燥冷帯気候", "Hot dry-summer continental", "Hot dry summer, cold winter"),
    "Dsb": ("温暖夏乾燥冷帯気候", "Warm dry-summer continental", "Warm dry summer, cold winter"),
    "Dsc": ("冷涼夏乾燥冷帯気候", "Dry-summer subarctic", "Dry summer, long cold winter"),
    "Dsd": ("極寒夏乾燥冷帯気候", "Extremely cold dry-summer", "Dry summer, severe winter"),
    "Dwa": ("冷帯冬季少雨気候(暑夏)", "Hot dry-winter continental", "Dry winter, hot summer"),
    "Dwb": ("冷帯冬季少雨気候(暖夏)", "Warm dry-winter continental", "Dry winter, warm summer"),
    "Dwc": ("冷帯冬季少雨気候", "Dry-winter subarctic", "Dry winter, long cold winter"),
    "Dwd": ("極寒冬季少雨気候", "Extremely cold dry-winter", "Dry and severe winter"),
    "Dfa": ("湿潤大陸性気候(暑夏)", "Hot humid continental", "Humid all year, hot summer"),
    "Dfb": ("湿潤大陸性気候(暖夏)", "Warm humid continental", "Humid all year, warm summer"),
    "Dfc": ("亜寒帯気候", "Subarctic", "Humid all year, long cold winter"),
    "Dfd": ("極寒亜寒帯気候", "Extremely cold subarctic", "Extremely cold winter"),
    "ET": ("ツンドラ気候", "Tundra", "Warmest month between 0 and 10°C"),
    "EF": ("氷雪気候", "Ice cap", "Below freezing all year"),
}

KOPPEN_CODES: frozenset[str] = frozenset(KOPPEN_NAMES)

KOPPEN_GROUP_COLORS: dict[str, str] = {
    "A": "#ff1744",
    "B": "#ff9100",
    "C": "#76ff03",
    "D": "#00b0ff",
    "E": "#b0bec5",
}


def round1(value: float) -> float:
    """Round half up to one decimal place."""
    return floor(value * 10.0 + 0.5) / 10.0


@dataclass(frozen=True)
class KoppenMetrics:
    """Derived quantities every decision node reads from.

    Summer and winter are six-month halves chosen by hemisphere.
    """

    tann: float
    tmax: float
    tmin: float
    pann: float
    pmin: float
    ps_min: float
    ps_max: float
    pw_min: float
    pw_max: float
    ps_total: float
    n_warm: int

    @classmethod
    def from_normals(cls, normals: MonthlyNormals, latitude: float) -> KoppenMetrics:
        """Compute metrics from validated monthly normals."""
        temperature = normals.temperature
        precipitation = normals.precipitation
        summer, winter = (_NH_SUMMER, _NH_WINTER) if latitude >= 0 else (_NH_WINTER, _NH_SUMMER)
        ps = [precipitation[m] for m in summer]
        pw = [precipitation[m] for m in winter]
        return cls(
            tann=sum(temperature) / 12.0,
            tmax=max(temperature),
            tmin=min(temperature),
            pann=sum(precipitation),
            pmin=min(precipitation),
            ps_min=min(ps),
            ps_max=max(ps),
            pw_min=min(pw),
            pw_max=max(pw),
            ps_total=sum(ps),
            n_warm=sum(1 for t in temperature if t >= 10.0),
        )

    @property
    def summer_fraction(self) -> float:
        """Share of annual precipitation falling in the summer half-year."""
        return self.ps_total / (self.pann or 1.0)

    @property
    def aridity_regime(self) -> tuple[float, str]:
        """Return `(threshold_mm, label)` of the dryness limit for group B."""
        if self.summer_fraction >= 0.7:
            return 20.0 * self.tann + 280.0, "summer rain (20×T+280)"
        if self.summer_fraction <= 0.3:
            return 20.0 * self.tann, "winter rain (20×T)"
        return 20.0 * self.tann + 140.0, "even rain (20×T+140)"

    @property
    def aridity_threshold(self) -> float:
        return self.aridity_regime[0]

    @property
    def monsoon_threshold(self) -> float:
        return 100.0 - self.pann / 25.0

    @property
    def dry_summer(self) -> bool:
        return self.ps_min < 40.0 and self.ps_min < self.pw_max / 3.0

    @property
    def dry_winter(self) -> bool:
        return self.pw_min < self.ps_max / 10.0

    @property
    def precipitation_letter(self) -> Literal["s", "w", "f"]:
        if self.dry_summer:
            return "s"
        if self.dry_winter:
            return "w"
        return "f"

    def temperature_letter(self, group: str) -> Literal["a", "b", "c", "d"]:
        """Return the summer-warmth letter; `d` only exists in group D."""
        if self.tmax >= 22.0:
            return "a"
        if self.n_warm >= 4:
            return "b"
        if group == "D" and self.tmin < -38.0:
            return "d"
        return "c"


Criteria = Callable[[KoppenMetrics, bool], list[KoppenCriterion]]


def _no_criteria(metrics: KoppenMetrics, outcome: bool) -> list[KoppenCriterion]:
    return []


@dataclass(frozen=True)
class DecisionNode:
    """Binary decision: `test` picks the `yes` or `no` successor."""

    node_id: str
    test: Callable[[KoppenMetrics], bool]
    yes: str
    no: str
    condition: Callable[[KoppenMetrics], str]
    observed: Callable[[KoppenMetrics], str]
    criteria: Criteria = _no_criteria

    def evaluate(self, metrics: KoppenMetrics) -> tuple[str, list[KoppenCriterion]]:
        """Return the successor node id and the criteria to display."""
        outcome = self.test(metrics)
        return (self.yes if outcome else self.no), self.criteria(metrics, outcome)

    def metric(self, metrics: KoppenMetrics) -> NodeMetric:
        return NodeMetric(
            condition=self.condition(metrics),
            value=self.observed(metrics),
            passed=self.test(metrics),
        )


@dataclass(frozen=True)
class PatternNode:
    """Group node whose successor is one cell of the precipitation x temperature matrix."""

    node_id: str
    group: Literal["C", "D"]

    def _letters(self, metrics: KoppenMetrics) -> tuple[str, str]:
        return metrics.precipitation_letter, metrics.temperature_letter(self.group)

    def evaluate(self, metrics: KoppenMetrics) -> tuple[str, list[KoppenCriterion]]:
        precip, temp = self._letters(metrics)
        return f"{self.group}{precip}{temp}", [
            _precipitation_criterion(metrics, precip),
            _temperature_criterion(metrics, temp),
        ]

    def metric(self, metrics: KoppenMetrics) -> NodeMetric:
        precip, temp = self._letters(metrics)
        return NodeMetric(
            condition=f"precipitation={precip}, temperature={temp}",
            value=f"→ {self.group}{precip}{temp}",
            passed=True,
        )


def _precipitation_criterion(metrics: KoppenMetrics, letter: str) -> KoppenCriterion:
    if letter == "s":
        return KoppenCriterion(
            label="Dry summer",
            value=round1(metrics.ps_min),
            threshold=f"< 40mm and < {round1(metrics.pw_max / 3.0)}mm",
            met=True,
        )
    if letter == "w":
        return KoppenCriterion(
            label="Dry winter",
            value=round1(metrics.pw_min),
            threshold=f"< {round1(metrics.ps_max / 10.0)}mm",
            met=True,
        )
    return KoppenCriterion(
        label="Dry season", value=0.0, threshold="no distinct dry season → f", met=True
    )


def _temperature_criterion(metrics: KoppenMetrics, letter: str) -> KoppenCriterion:
    if letter == "a":
        return KoppenCriterion("Warmest month mean", round1(metrics.tmax), ">= 22°C → a (hot summer)", True)
    if letter == "b":
        return KoppenCriterion("Months >= 10°C", float(metrics.n_warm), ">= 4 → b (warm summer)", True)
    if letter == "d":
        return KoppenCriterion("Coldest month mean", round1(metrics.tmin), "< -38°C → d (severe winter)", True)
    return KoppenCriterion("Months >= 10°C", float(metrics.n_warm), "< 4 → c (cool summer)", True)


def _e_check_criteria(metrics: KoppenMetrics, outcome: bool) -> list[KoppenCriterion]:
    if not outcome:
        return []
    return [KoppenCriterion("Warmest month mean", round1(metrics.tmax), "< 10°C", True)]


def _e_sub_criteria(metrics: KoppenMetrics, outcome: bool) -> list[KoppenCriterion]:
    threshold = "< 0°C (ice cap)" if outcome else ">= 0°C (tundra)"
    return [KoppenCriterion("Warmest month mean", round1(metrics.tmax), threshold, True)]


def _b_check_criteria(metrics: KoppenMetrics, outcome: bool) -> list[KoppenCriterion]:
    threshold, regime = metrics.aridity_regime
    return [
        KoppenCriterion(
            label="Aridity threshold",
            value=round1(metrics.pann),
            threshold=f"{regime} = {round1(threshold)}mm",
            met=outcome,
        )
    ]


def _b_desert_criteria(metrics: KoppenMetrics, outcome: bool) -> list[KoppenCriterion]:
    return [
        KoppenCriterion(
            label="Desert or steppe",
            value=round1(metrics.pann),
            threshold=f"< {round1(metrics.aridity_threshold / 2.0)}mm → desert",
            met=outcome,
        )
    ]


def _b_temp_criteria(metrics: KoppenMetrics, outcome: bool) -> list[KoppenCriterion]:
    return [KoppenCriterion("Annual mean temperature", round1(metrics.tann), ">= 18°C → h (hot)", outcome)]


def _a_check_criteria(metrics: KoppenMetrics, outcome: bool) -> list[KoppenCriterion]:
    if not outcome:
        return []
    return [KoppenCriterion("Coldest month mean", round1(metrics.tmin), ">= 18°C (tropical)", True)]


def _a_pmin60_criteria(metrics: KoppenMetrics, outcome: bool) -> list[KoppenCriterion]:
    if not outcome:
        return []
    return [KoppenCriterion("Driest month precipitation", round1(metrics.pmin), ">= 60mm (rainforest)", True)]


def _a_am_criteria(metrics: KoppenMetrics, outcome: bool) -> list[KoppenCriterion]:
    return [
        KoppenCriterion(
            label="Driest month precipitation",
            value=round1(metrics.pmin),
            threshold=f">= {round1(metrics.monsoon_threshold)}mm (monsoon)",
            met=outcome,
        )
    ]


def _cd_check_criteria(metrics: KoppenMetrics, outcome: bool) -> list[KoppenCriterion]:
    threshold = "> -3°C (temperate)" if outcome else "<= -3°C (continental)"
    return [KoppenCriterion("Coldest month mean", round1(metrics.tmin), threshold, True)]


def _degrees(value: Callable[[KoppenMetrics], float]) -> Callable[[KoppenMetrics], str]:
    return lambda m: f"{round1(value(m))}°C"


def _millimetres(value: Callable[[KoppenMetrics], float]) -> Callable[[KoppenMetrics], str]:
    return lambda m: f"{round1(value(m))}mm"


def _constant(text: str) -> Callable[[KoppenMetrics], str]:
    return lambda m: text


def _warm_enough(m: KoppenMetrics) -> bool:
    return m.tann >= 18.0


def _b_temp_node(node_id: str, hot: str, cold: str) -> DecisionNode:
    return DecisionNode(
        node_id=node_id,
        test=_warm_enough,
        yes=hot,
        no=cold,
        condition=_constant("Tann ≥ 18°C?"),
        observed=_degrees(lambda m: m.tann),
        criteria=_b_temp_criteria,
    )


DECISION_TREE: dict[str, DecisionNode | PatternNode] = {
    node.node_id: node
    for node in (
        DecisionNode(
            node_id="e_check",
            test=lambda m: m.tmax < 10.0,
            yes="e_sub",
            no="b_check",
            condition=_constant("Tmax < 10°C?"),
            observed=_degrees(lambda m: m.tmax),
            criteria=_e_check_criteria,
        ),
        DecisionNode(
            node_id="e_sub",
            test=lambda m: m.tmax < 0.0,
            yes="EF",
            no="ET",
            condition=_constant("Tmax < 0°C?"),
            observed=_degrees(lambda m: m.tmax),
            criteria=_e_sub_criteria,
        ),
        DecisionNode(
            node_id="b_check",
            test=lambda m: m.pann < m.aridity_threshold,
            yes="b_desert",
            no="a_check",
            condition=lambda m: f"Pann < {round1(m.aridity_threshold)}mm?",
            observed=_millimetres(lambda m: m.pann),
            criteria=_b_check_criteria,
        ),
        DecisionNode(
            node_id="b_desert",
            test=lambda m: m.pann < m.aridity_threshold / 2.0,
            yes="bw_temp",
            no="bs_temp",
            condition=lambda m: f"Pann < {round1(m.aridity_threshold / 2.0)}mm?",
            observed=_millimetres(lambda m: m.pann),
            criteria=_b_desert_criteria,
        ),
        _b_temp_node("bw_temp", "BWh", "BWk"),
        _b_temp_node("bs_temp", "BSh", "BSk"),
        DecisionNode(
            node_id="a_check",
            test=lambda m: m.tmin >= 18.0,
            yes="a_pmin60",
            no="cd_check",
            condition=_constant("Tmin ≥ 18°C?"),
            observed=_degrees(lambda m: m.tmin),
            criteria=_a_check_criteria,
        ),
        DecisionNode(
            node_id="a_pmin60",
            test=lambda m: m.pmin >= 60.0,
            yes="Af",
            no="a_am",
            condition=_constant("Pmin ≥ 60mm?"),
            observed=_millimetres(lambda m: m.pmin),
            criteria=_a_pmin60_criteria,
        ),
        DecisionNode(
            node_id="a_am",
            test=lambda m: m.pmin >= m.monsoon_threshold,
            yes="Am",
            no="Aw",
            condition=lambda m: f"Pmin ≥ {round1(m.monsoon_threshold)}mm?",
            observed=_millimetres(lambda m: m.pmin),
            criteria=_a_am_criteria,
        ),
        # Exactly -3°C falls into group D.
        DecisionNode(
            node_id="cd_check",
            test=lambda m: m.tmin > -3.0,
            yes="c_group",
            no="d_group",
            condition=_constant("Tmin > −3°C?"),
            observed=_degrees(lambda m: m.tmin),
            criteria=_cd_check_criteria,
        ),
        PatternNode(node_id="c_group", group="C"),
        PatternNode(node_id="d_group", group="D"),
    )
}


def _metrics_for(
    temperature: Sequence[float], precipitation: Sequence[float], latitude: float
) -> KoppenMetrics:
    normals = MonthlyNormals(temperature=temperature, precipitation=precipitation)
    return KoppenMetrics.from_normals(normals, validate_latitude(latitude))


def _make_result(code: str, criteria: list[KoppenCriterion]) -> KoppenResult:
    name_ja, name_en, description = KOPPEN_NAMES[code]
    return KoppenResult(
        code=code,
        group=code[0],
        name_ja=name_ja,
        name_en=name_en,
        description=description,
        criteria=tuple(criteria),
    )


def evaluate_koppen(
    temperature: Sequence[float], precipitation: Sequence[float], latitude: float
) -> tuple[KoppenResult, KoppenTracePath]:
    """Walk the decision tree once and return the classification and its trace.

    Args:
        temperature: Twelve monthly mean temperatures in °C, January first.
        precipitation: Twelve monthly precipitation totals in mm, January first.
        latitude: Latitude in degrees; its sign selects the summer half-year.

    Returns:
        Tuple of `(result, trace)` ending at the same Köppen code.

    Raises:
        InvalidInputError: If a series is not 12 finite values or latitude is
            outside [-90, 90].
    """
    metrics = _metrics_for(temperature, precipitation, latitude)

    visited = [START_NODE]
    criteria: list[KoppenCriterion] = []
    node_id = ROOT_NODE
    while node_id in DECISION_TREE:
        visited.append(node_id)
        node_id, node_criteria = DECISION_TREE[node_id].evaluate(metrics)
        criteria.extend(node_criteria)

    if node_id not in KOPPEN_CODES:
        raise RuntimeError(f"decision tree reached unknown code {node_id!r}")
    visited.append(node_id)

    return (
        _make_result(node_id, criteria),
        KoppenTracePath(visited_nodes=tuple(visited), final_node=node_id),
    )


def classify_koppen(
    temperature: Sequence[float], precipitation: Sequence[float], latitude: float
) -> KoppenResult:
    """Classify a climate and list the rules evaluated along the way."""
    result, _ = evaluate_koppen(temperature, precipitation, latitude)
    return result


def trace_koppen_path(
    temperature: Sequence[float], precipitation: Sequence[float], latitude: float
) -> KoppenTracePath:
    """Return the flowchart node ids the classification visits, in order."""
    _, trace = evaluate_koppen(temperature, precipitation, latitude)
    return trace


def node_metric(
    node_id: str,
    temperature: Sequence[float],
    precipitation: Sequence[float],
    latitude: float,
) -> NodeMetric | None:
    """Return tooltip data for a decision node, or None for start/result nodes."""
    node = DECISION_TREE.get(node_id)
    if node is None:
        return None
    return node.metric(_metrics_for(temperature, precipitation, latitude))


def matrix_header_metric(
    key: str,
    axis: Literal["col", "row"],
    group: Literal["C", "D"],
    temperature: Sequence[float],
    precipitation: Sequence[float],
    latitude: float,
) -> MatrixHeaderMetric | None:
    """Return tooltip data for a C/D matrix header.

    Columns are the temperature letters a-d, rows the precipitation letters
    s/w/f. Unknown keys return None.
    """
    m = _metrics_for(temperature, precipitation, latitude)

    if axis == "col":
        if key in {"a", "b", "c", "d"} and not (key == "d" and group == "C"):
            matched = m.temperature_letter(group) == key
        else:
            return None
        if key == "a":
            values = f"Tmax = {round1(m.tmax)}°C"
        elif key == "b":
            values = f"Tmax = {round1(m.tmax)}°C, Nwarm = {m.n_warm} months"
        elif key == "c" and group == "D":
            values = f"Nwarm = {m.n_warm} months, Tmin = {round1(m.tmin)}°C"
        elif key == "c":
            values = f"Nwarm = {m.n_warm} months"
        else:
            values = f"Tmin = {round1(m.tmin)}°C"
        return MatrixHeaderMetric(values=values, matched=matched)

    if key == "s":
        values = f"Psmin = {round1(m.ps_min)}mm, Pwmax = {round1(m.pw_max)}mm"
    elif key == "w":
        values = f"Pwmin = {round1(m.pw_min)}mm, Psmax = {round1(m.ps_max)}mm"
    elif key == "f":
        if m.dry_summer:
            values = "→ s applies"
        elif m.dry_winter:
            values = "→ w applies"
        else:
            values = "neither s nor w"
    else:
        return None
    return MatrixHeaderMetric(values=values, matched=m.precipitation_letter == key)
