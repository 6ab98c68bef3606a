import logging
from typing import List

from stateflow.ir.diagram import ActorType, Diagram, Flow, StateScope, StepType
from stateflow.ir.lookup import DiagramIndex
from stateflow.visual.edge_rules import (
    edge_direction,
    edge_label,
    is_notification,
    message_path,
    target_action,
)
from stateflow.visual.visual_schema import (
    VisualDiagram,
    VisualEdge,
    VisualNode,
    VisualNodeKind,
)
from stateflow.visual.visual_style import (
    FLOW_HEADER_STYLE,
    TRIGGER_STYLE,
    actor_style,
    badge_color_for,
    glyph_for,
    minimap_legend,
    resolve_actor_color,
    step_color,
    stroke_for,
)

logger = logging.getLogger(__name__)

ACTOR_WIDTH = 150
ACTOR_GAP = 50
ACTOR_HEIGHT = 60
STEP_HEIGHT = 60
START_Y = 100

MIN_LIFELINE_HEIGHT = 500
LIFELINE_MARGIN = 200

TRIGGER_OFFSET_X = 120
TRIGGER_OFFSET_Y = 40

# Row cursor reservations, in step units
HEADER_SLOTS = 1.0
FLOW_GAP_SINGLE = 1.0
FLOW_GAP_MULTI = 1.5

COLUMN_WIDTH = ACTOR_WIDTH + ACTOR_GAP


def edge_id(flow_id: str, step_id: str) -> str:
    return f"{flow_id}-{step_id}"


def trigger_node_id(flow_id: str) -> str:
    return f"trigger-{flow_id}"


def flow_header_node_id(flow_id: str) -> str:
    return f"flow-header-{flow_id}"


def row_y(step_index: float) -> float:
    return START_Y + step_index * STEP_HEIGHT


def lifeline_height_for(total_steps: int) -> float:
    return max(MIN_LIFELINE_HEIGHT, total_steps * STEP_HEIGHT + LIFELINE_MARGIN)


def _center(column_x: float) -> float:
    return column_x + ACTOR_WIDTH / 2


def map_diagram_to_visual_ir(diagram: Diagram) -> VisualDiagram:
    """
    Project a behavioral Diagram into a positioned Visual IR.

    Actors become columns in list order, steps become horizontal message
    edges in flow/step order. References that do not resolve are skipped or
    fall back to defaults; nothing here raises for a well-formed Diagram.
    """
    if not diagram.actors:
        return VisualDiagram(legend=minimap_legend())

    index = DiagramIndex(diagram, column_width=COLUMN_WIDTH)

    columns_span = len(diagram.actors) * COLUMN_WIDTH - ACTOR_GAP
    multi_flow = len(diagram.flows) > 1

    section_nodes: List[VisualNode] = []
    edges: List[VisualEdge] = []
    step_index = 0.0
    skipped = 0

    # =========================================================
    # FLOWS
    # =========================================================
    for flow in diagram.flows:
        # -------------------------
        # Flow section header
        # -------------------------
        if multi_flow:
            section_nodes.append(
                VisualNode(
                    id=flow_header_node_id(flow.id),
                    kind=VisualNodeKind.FLOW_HEADER,
                    x=0,
                    y=row_y(step_index),
                    label=flow.name,
                    color=FLOW_HEADER_STYLE["background"],
                    width=columns_span,
                    height=FLOW_HEADER_STYLE["height"],
                    draggable=False,
                    payload={
                        "flowId": flow.id,
                        "description": flow.description,
                        "border": FLOW_HEADER_STYLE["border"],
                    },
                )
            )
            step_index += HEADER_SLOTS

        # -------------------------
        # Trigger marker
        # -------------------------
        trigger_node = _map_trigger(flow, index, step_index)
        if trigger_node is not None:
            section_nodes.append(trigger_node)

        # -------------------------
        # Steps
        # -------------------------
        for step in flow.steps:
            source_x = index.actor_x(step.from_)
            target_x = index.actor_x(step.to)
            if source_x is None or target_x is None:
                skipped += 1
                continue

            target = index.actor(step.to)
            target_kind = target.type if target else ActorType.COMPONENT
            target_scope = (target.scope if target else None) or StateScope.LOCAL

            # State-bearing steps take the color of the store that owns the state
            owner = index.owner_of(step.state)
            style_kind = owner.type if owner else target_kind
            style_scope = (owner.scope or StateScope.LOCAL) if owner else target_scope

            related_state = index.state(step.state)
            state_name = related_state.name if related_state else None

            related_condition = index.condition(step.condition)
            condition_expression = (
                related_condition.expression if related_condition else None
            )

            is_dispatch = step.type == StepType.DISPATCH
            is_subscribe = is_notification(step)

            y = row_y(step_index)
            path, arrow, label_position = message_path(
                _center(source_x), _center(target_x), y
            )
            stroke = stroke_for(step.type)

            edges.append(
                VisualEdge(
                    id=edge_id(flow.id, step.id),
                    source=step.from_,
                    target=step.to,
                    flow_id=flow.id,
                    step_id=step.id,
                    step_type=step.type.value,
                    row=y,
                    source_x=source_x,
                    target_x=target_x,
                    label=edge_label(step, state_name),
                    glyph=glyph_for(step.type),
                    color=step_color(step.type, style_kind, style_scope),
                    path=path,
                    direction=edge_direction(source_x, target_x),
                    arrow=arrow,
                    label_position=label_position,
                    stroke_width=stroke["width"],
                    dasharray=stroke["dasharray"],
                    dashed=is_subscribe,
                    animated=is_subscribe,
                    async_badge=step.is_async,
                    condition_badge=condition_expression,
                    badge_color=badge_color_for(
                        StateScope.LOCAL if is_dispatch else style_scope
                    ),
                    payload={
                        "targetType": (
                            ActorType.EXTERNAL if is_dispatch else target_kind
                        ).value,
                        "targetScope": (
                            StateScope.LOCAL if is_dispatch else target_scope
                        ).value,
                        "targetAction": target_action(step),
                        "stateName": state_name,
                        "payload": step.payload,
                        "description": step.description,
                    },
                )
            )
            step_index += 1

        step_index += FLOW_GAP_MULTI if multi_flow else FLOW_GAP_SINGLE

    if skipped:
        logger.debug("[LAYOUT] %s: skipped %d unresolved steps", diagram.id, skipped)

    # -------------------------
    # Actor headers with lifelines
    # -------------------------
    lifeline_height = max(
        lifeline_height_for(diagram.total_steps),
        row_y(step_index) + STEP_HEIGHT - ACTOR_HEIGHT,
    )
    actor_nodes: List[VisualNode] = []
    for actor in diagram.actors:
        x = index.actor_x(actor.id)
        if index.actor(actor.id) is not actor:
            # duplicate id: the first occurrence owns the column
            continue
        style = actor_style(actor.type)
        scope = actor.scope.value if actor.scope else None
        actor_nodes.append(
            VisualNode(
                id=actor.id,
                kind=VisualNodeKind.ACTOR,
                x=x,
                y=0,
                label=actor.name,
                color=resolve_actor_color(actor.type, actor.scope, actor.color),
                width=ACTOR_WIDTH,
                height=ACTOR_HEIGHT,
                icon=style["icon"],
                payload={
                    "actorType": actor.type.value,
                    "scope": scope,
                    "description": actor.description,
                    "background": style["background"],
                    "border": style["border"],
                    "lifelineHeight": lifeline_height,
                },
            )
        )

    return VisualDiagram(
        nodes=actor_nodes + section_nodes,
        edges=edges,
        width=columns_span,
        height=ACTOR_HEIGHT + lifeline_height,
        lifeline_height=lifeline_height,
        legend=minimap_legend(),
    )


def _map_trigger(flow: Flow, index: DiagramIndex, step_index: float):
    trigger = flow.trigger
    if trigger is None:
        return None
    actor_x = index.actor_x(trigger.actor)
    if actor_x is None:
        return None

    label = f"Trigger: {trigger.action}"
    if trigger.target:
        label += f" ({trigger.target})"

    return VisualNode(
        id=trigger_node_id(flow.id),
        kind=VisualNodeKind.TRIGGER,
        x=actor_x - TRIGGER_OFFSET_X,
        y=row_y(step_index) - TRIGGER_OFFSET_Y,
        label=label,
        color=TRIGGER_STYLE["background"],
        width=TRIGGER_STYLE["width"],
        draggable=False,
        payload={
            "flowId": flow.id,
            "triggerType": trigger.type.value,
            "actor": trigger.actor,
            "border": TRIGGER_STYLE["border"],
            "fontSize": TRIGGER_STYLE["font_size"],
        },
    )
