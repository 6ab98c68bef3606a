from dataclasses import dataclass
from typing import Optional

from stateflow.visual.visual_mapper import flow_header_node_id, trigger_node_id
from stateflow.visual.visual_schema import VisualDiagram


@dataclass(frozen=True)
class FocusCommand:
    """Ask the canvas to scroll/zoom to one node."""
    flow_id: str
    node_id: str
    x: float
    y: float
    zoom: float = 1.0


class FocusSlot:
    """
    A single pending focus command.

    A new request replaces whatever is pending; the renderer consumes it
    exactly once.
    """

    def __init__(self):
        self._pending: Optional[FocusCommand] = None

    @property
    def pending(self) -> Optional[FocusCommand]:
        return self._pending

    def request(self, flow_id: str, visual: VisualDiagram, zoom: float = 1.0) -> Optional[FocusCommand]:
        # Single-flow diagrams have no section header; the trigger marks the flow.
        node = visual.node(flow_header_node_id(flow_id)) or visual.node(trigger_node_id(flow_id))
        if node is None:
            self._pending = None
            return None
        self._pending = FocusCommand(
            flow_id=flow_id,
            node_id=node.id,
            x=node.x,
            y=node.y,
            zoom=zoom,
        )
        return self._pending

    def clear(self) -> None:
        self._pending = None

    def consume(self) -> Optional[FocusCommand]:
        command, self._pending = self._pending, None
        return command
