"""
Edge geometry and rendering rules for message edges.
"""

from __future__ import annotations

from typing import Optional, Tuple

from stateflow.ir.diagram import FlowStep, StepType
from stateflow.visual.visual_schema import EdgeDirection, Point


ARROW_OFFSET = 8.0
SELF_LOOP_WIDTH = 40.0
SELF_LOOP_HEIGHT = 30.0


# ------------------------------------------------------------------ #
# Classification
# ------------------------------------------------------------------ #

def is_self_edge(step: FlowStep) -> bool:
    """Return True when a step starts and ends on the same actor."""
    return step.from_ is not None and step.from_ == step.to


def is_notification(step: FlowStep) -> bool:
    return step.type == StepType.SUBSCRIBE


def edge_direction(source_x: float, target_x: float) -> EdgeDirection:
    """Direction comes from resolved x coordinates, never from list order."""
    if target_x > source_x:
        return EdgeDirection.RIGHT
    if target_x < source_x:
        return EdgeDirection.LEFT
    return EdgeDirection.SELF


# ------------------------------------------------------------------ #
# Labels
# ------------------------------------------------------------------ #

def edge_label(step: FlowStep, state_name: Optional[str]) -> str:
    """
    Subscriptions to a known state read "Notify: <state>", dispatches read
    "dispatch", everything else prefers action, then description, then type,
    followed by the touched state's name in parentheses when it resolves.
    """
    if step.type == StepType.SUBSCRIBE and state_name:
        return f"Notify: {state_name}"
    if step.type == StepType.DISPATCH:
        return "dispatch"
    label = step.action or step.description or step.type.value
    if state_name and state_name != label:
        label = f"{label} ({state_name})"
    return label


def target_action(step: FlowStep) -> Optional[str]:
    """The action shown beside a dispatch/subscribe label, whose own text is fixed."""
    if step.type in (StepType.SUBSCRIBE, StepType.DISPATCH):
        return step.action
    return None


# ------------------------------------------------------------------ #
# Geometry
# ------------------------------------------------------------------ #

def _fmt(value: float) -> str:
    # stable text for paths: 275.0 -> "275", 12.5 -> "12.5"
    return f"{value:g}"


def message_path(
    start_x: float, end_x: float, y: float
) -> Tuple[str, Point, Point]:
    """
    Straight horizontal message between two lifeline centers.

    Returns (svg path, arrowhead point, label point). The arrowhead sits
    ARROW_OFFSET before the end, on the target side.
    """
    direction = edge_direction(start_x, end_x)
    if direction == EdgeDirection.SELF:
        return self_loop_path(start_x, y)

    sign = 1.0 if direction == EdgeDirection.RIGHT else -1.0
    path = f"M {_fmt(start_x)} {_fmt(y)} L {_fmt(end_x)} {_fmt(y)}"
    arrow = Point(x=end_x - sign * ARROW_OFFSET, y=y)
    label = Point(x=(start_x + end_x) / 2, y=y)
    return path, arrow, label


def self_loop_path(x: float, y: float) -> Tuple[str, Point, Point]:
    """Loop-back to the right of the lifeline, returning one half row lower."""
    right = x + SELF_LOOP_WIDTH
    bottom = y + SELF_LOOP_HEIGHT
    path = (
        f"M {_fmt(x)} {_fmt(y)} H {_fmt(right)} "
        f"V {_fmt(bottom)} H {_fmt(x)}"
    )
    arrow = Point(x=x + ARROW_OFFSET, y=bottom)
    label = Point(x=right, y=(y + bottom) / 2)
    return path, arrow, label
