from enum import Enum
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field


class VisualNodeKind(str, Enum):
    ACTOR = "actor"
    FLOW_HEADER = "flowHeader"
    TRIGGER = "trigger"


class EdgeDirection(str, Enum):
    RIGHT = "right"
    LEFT = "left"
    SELF = "self"


@dataclass
class Point:
    x: float
    y: float


@dataclass
class VisualNode:
    id: str
    kind: VisualNodeKind
    x: float
    y: float
    label: str
    color: str
    width: Optional[float] = None
    height: Optional[float] = None
    icon: Optional[str] = None
    draggable: bool = True
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VisualEdge:
    id: str
    source: str
    target: str
    flow_id: str
    step_id: str
    step_type: str
    row: float                              # y of the horizontal message line
    source_x: float                         # column x of the source actor
    target_x: float                         # column x of the target actor
    label: str
    glyph: str
    color: str
    path: str
    direction: EdgeDirection
    arrow: Point
    label_position: Point
    stroke_width: float = 1.5
    dasharray: Optional[str] = None
    dashed: bool = False
    animated: bool = False
    async_badge: bool = False
    condition_badge: Optional[str] = None
    badge_color: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)


@dataclass
class VisualDiagram:
    nodes: List[VisualNode] = field(default_factory=list)
    edges: List[VisualEdge] = field(default_factory=list)
    width: float = 0.0
    height: float = 0.0
    lifeline_height: float = 0.0
    legend: Dict[str, str] = field(default_factory=dict)
    layout: str = "sequence"

    def node(self, node_id: str) -> Optional[VisualNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> dict:
        from stateflow.api.serializers import serialize_ir
        return serialize_ir(self)
