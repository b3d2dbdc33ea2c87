"""Static Köppen flowchart graph.

Node identifiers are the vocabulary of `trace_koppen_path`; diagram renderers
look nodes up by these ids, so they must stay stable. Coordinates are node
centers in a 1200x720 viewBox.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cache
from typing import Any, Literal

NodeType = Literal["start", "decision", "result"]


@dataclass(frozen=True)
class FlowchartNode:
    """One box in the decision diagram."""

    id: str
    type: NodeType
    label: str
    x: float
    y: float
    width: float
    height: float
    sublabel: str | None = None
    group: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "sublabel": self.sublabel,
            "group": self.group,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class FlowchartEdge:
    """Directed edge; decision edges carry a Yes/No label."""

    source: str
    target: str
    label: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"from": self.source, "to": self.target, "label": self.label}


@dataclass(frozen=True)
class GroupRegion:
    """Background rectangle shading one climate group."""

    group: str
    label: str
    x: float
    y: float
    width: float
    height: float


def _matrix(group: str, precip_rows: dict[str, float], temp_cols: dict[str, float], size: float) -> list[FlowchartNode]:
    return [
        FlowchartNode(
            id=f"{group}{precip}{temp}",
            type="result",
            label=f"{group}{precip}{temp}",
            group=group,
            x=x,
            y=y,
            width=size,
            height=32,
        )
        for precip, y in precip_rows.items()
        for temp, x in temp_cols.items()
    ]


_MATRIX_ROWS = {"s": 530.0, "w": 576.0, "f": 622.0}

NODES: tuple[FlowchartNode, ...] = (
    FlowchartNode("start", "start", "Start", 480, 25, 72, 26),
    FlowchartNode("e_check", "decision", "Tmax < 10°C?", 480, 82, 148, 34, "warmest month mean"),
    FlowchartNode("e_sub", "decision", "Tmax < 0°C?", 130, 164, 132, 34, "warmest month mean", "E"),
    FlowchartNode("b_check", "decision", "Pann < aridity limit?", 700, 164, 185, 34, "annual precipitation"),
    FlowchartNode("EF", "result", "EF", 65, 250, 70, 42, "ice cap", "E"),
    FlowchartNode("ET", "result", "ET", 195, 250, 70, 42, "tundra", "E"),
    FlowchartNode("b_desert", "decision", "Pann < limit/2?", 460, 250, 162, 34, "desert or steppe", "B"),
    FlowchartNode("a_check", "decision", "Tmin ≥ 18°C?", 880, 250, 155, 34, "coldest month mean"),
    FlowchartNode("bw_temp", "decision", "Tann ≥ 18°C?", 345, 336, 148, 34, "annual mean (desert)", "B"),
    FlowchartNode("bs_temp", "decision", "Tann ≥ 18°C?", 565, 336, 148, 34, "annual mean (steppe)", "B"),
    FlowchartNode("a_pmin60", "decision", "Pmin ≥ 60mm?", 760, 336, 150, 34, "driest month precipitation", "A"),
    FlowchartNode("cd_check", "decision", "Tmin > −3°C?", 1070, 336, 150, 34, "coldest month mean"),
    FlowchartNode("BWh", "result", "BWh", 283, 418, 60, 38, "hot desert", "B"),
    FlowchartNode("BWk", "result", "BWk", 400, 418, 60, 38, "cold desert", "B"),
    FlowchartNode("BSh", "result", "BSh", 505, 418, 60, 38, "hot steppe", "B"),
    FlowchartNode("BSk", "result", "BSk", 622, 418, 60, 38, "cold steppe", "B"),
    FlowchartNode("Af", "result", "Af", 700, 418, 60, 38, "tropical rainforest", "A"),
    FlowchartNode("a_am", "decision", "Pmin ≥ Am limit?", 820, 418, 162, 34, "100 − Pann/25", "A"),
    FlowchartNode("c_group", "decision", "Group C", 995, 418, 90, 34, "precipitation + temperature", "C"),
    FlowchartNode("d_group", "decision", "Group D", 1175, 418, 90, 34, "precipitation + temperature", "D"),
    FlowchartNode("Am", "result", "Am", 770, 496, 60, 38, "tropical monsoon", "A"),
    FlowchartNode("Aw", "result", "Aw", 870, 496, 60, 38, "savanna", "A"),
    *_matrix("C", _MATRIX_ROWS, {"a": 953.0, "b": 1000.0, "c": 1047.0}, 44),
    *_matrix("D", _MATRIX_ROWS, {"a": 1120.0, "b": 1160.0, "c": 1200.0, "d": 1240.0}, 38),
)

_BRANCHES: tuple[tuple[str, str, str], ...] = (
    ("e_check", "e_sub", "b_check"),
    ("e_sub", "EF", "ET"),
    ("b_check", "b_desert", "a_check"),
    ("b_desert", "bw_temp", "bs_temp"),
    ("bw_temp", "BWh", "BWk"),
    ("bs_temp", "BSh", "BSk"),
    ("a_check", "a_pmin60", "cd_check"),
    ("a_pmin60", "Af", "a_am"),
    ("a_am", "Am", "Aw"),
    ("cd_check", "c_group", "d_group"),
)

EDGES: tuple[FlowchartEdge, ...] = (
    FlowchartEdge("start", "e_check"),
    *(
        edge
        for source, yes, no in _BRANCHES
        for edge in (FlowchartEdge(source, yes, "Yes"), FlowchartEdge(source, no, "No"))
    ),
    *(FlowchartEdge("c_group", node.id) for node in NODES if node.type == "result" and node.group == "C"),
    *(FlowchartEdge("d_group", node.id) for node in NODES if node.type == "result" and node.group == "D"),
)

GROUP_REGIONS: tuple[GroupRegion, ...] = (
    GroupRegion("E", "E polar", 20, 132, 248, 178),
    GroupRegion("B", "B arid", 250, 218, 420, 256),
    GroupRegion("A", "A tropical", 678, 218, 235, 332),
    GroupRegion("C", "C temperate", 920, 386, 158, 284),
    GroupRegion("D", "D continental", 1082, 386, 192, 284),
)


@cache
def node_by_id() -> dict[str, FlowchartNode]:
    """Return a lookup of flowchart nodes keyed by identifier."""
    return {node.id: node for node in NODES}


def is_matrix_edge(edge: FlowchartEdge) -> bool:
    """Return True for fan-out edges from a group node into its code matrix."""
    return edge.source in {"c_group", "d_group"}
