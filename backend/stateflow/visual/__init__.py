# Visual IR module
# Separates the behavioral model from what the canvas draws

from stateflow.visual.visual_schema import (
    EdgeDirection,
    Point,
    VisualDiagram,
    VisualEdge,
    VisualNode,
    VisualNodeKind,
)
from stateflow.visual.visual_style import color_for, glyph_for, step_color
from stateflow.visual.visual_mapper import map_diagram_to_visual_ir

__all__ = [
    "EdgeDirection",
    "Point",
    "VisualDiagram",
    "VisualEdge",
    "VisualNode",
    "VisualNodeKind",
    "color_for",
    "glyph_for",
    "map_diagram_to_visual_ir",
    "step_color",
]
