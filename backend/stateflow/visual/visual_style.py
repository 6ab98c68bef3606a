"""
Style resolution for actors and steps.

Pure lookups over closed enumerations. Every table below carries one entry per
enum member; `_check_tables` fails at import time when a member is added
without a style decision.
"""

from typing import Optional, Union

from stateflow.ir.diagram import ActorType, StateScope, StepType

NEUTRAL_COLOR = "#64748b"       # slate-500, external and unknown kinds

STORE_COLORS = {
    StateScope.GLOBAL: "#22c55e",   # green-500
    StateScope.SUBTREE: "#14b8a6",  # teal-500
    StateScope.LOCAL: "#f97316",    # orange-500
}

ACTOR_COLORS = {
    ActorType.COMPONENT: "#3b82f6",  # blue-500
    ActorType.SERVICE: "#a855f7",    # purple-500
    ActorType.STORE: None,           # resolved by scope
    ActorType.EXTERNAL: NEUTRAL_COLOR,
}

ACTOR_STYLE = {
    ActorType.COMPONENT: {"icon": "🧩", "background": "#eff6ff", "border": "#3b82f6"},
    ActorType.STORE: {"icon": "📦", "background": "#f0fdf4", "border": "#22c55e"},
    ActorType.SERVICE: {"icon": "⚙️", "background": "#faf5ff", "border": "#a855f7"},
    ActorType.EXTERNAL: {"icon": "🌐", "background": "#fff7ed", "border": "#f97316"},
}

STEP_GLYPHS = {
    StepType.DISPATCH: "→",
    StepType.STATE_CHANGE: "⟳",
    StepType.SUBSCRIBE: "◎",
    StepType.EFFECT: "⚡",
    StepType.RENDER: "🔄",
}

# Label chip color, keyed by the target's scope
BADGE_COLORS = {
    StateScope.LOCAL: "#6b7280",
    StateScope.SUBTREE: "#3b82f6",
    StateScope.GLOBAL: "#22c55e",
}

# Minimap legend of the interactive canvas
MINIMAP_COLORS = {
    ActorType.COMPONENT: "#3b82f6",
    ActorType.STORE: "#22c55e",
    ActorType.SERVICE: "#a855f7",
    ActorType.EXTERNAL: "#f97316",
}
MINIMAP_FALLBACK = "#888"

TRIGGER_STYLE = {
    "background": "#fef3c7",
    "border": "#d97706",
    "width": 150,
    "font_size": 12,
}

FLOW_HEADER_STYLE = {
    "background": "#f1f5f9",
    "border": "#cbd5e1",
    "height": 28,
}


def _check_tables():
    for table in (ACTOR_COLORS, ACTOR_STYLE, MINIMAP_COLORS):
        missing = set(ActorType) - set(table)
        assert not missing, f"actor style table missing {missing}"
    for table in (STORE_COLORS, BADGE_COLORS):
        missing = set(StateScope) - set(table)
        assert not missing, f"scope style table missing {missing}"
    missing = set(StepType) - set(STEP_GLYPHS)
    assert not missing, f"glyph table missing {missing}"


_check_tables()


def _as_enum(enum_cls, value):
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def color_for(
    kind: Union[ActorType, str, None],
    scope: Union[StateScope, str, None] = None,
) -> str:
    """Actor color. Stores are colored by scope; a missing scope counts as local."""
    kind = _as_enum(ActorType, kind)
    if kind is None:
        return NEUTRAL_COLOR
    if kind == ActorType.STORE:
        scope = _as_enum(StateScope, scope) or StateScope.LOCAL
        return STORE_COLORS[scope]
    return ACTOR_COLORS[kind]


def step_color(
    step_type: Union[StepType, str, None],
    target_kind: Union[ActorType, str, None],
    target_scope: Union[StateScope, str, None] = None,
) -> str:
    """Edge color. A dispatch is a generic action send and is always neutral."""
    if _as_enum(StepType, step_type) == StepType.DISPATCH:
        return NEUTRAL_COLOR
    return color_for(target_kind, target_scope)


def glyph_for(step_type: Union[StepType, str, None]) -> str:
    step_type = _as_enum(StepType, step_type) or StepType.DISPATCH
    return STEP_GLYPHS[step_type]


def icon_for(kind: Union[ActorType, str, None]) -> str:
    kind = _as_enum(ActorType, kind) or ActorType.COMPONENT
    return ACTOR_STYLE[kind]["icon"]


def actor_style(kind: Union[ActorType, str, None]) -> dict:
    kind = _as_enum(ActorType, kind) or ActorType.COMPONENT
    return dict(ACTOR_STYLE[kind])


def badge_color_for(scope: Union[StateScope, str, None]) -> str:
    scope = _as_enum(StateScope, scope) or StateScope.LOCAL
    return BADGE_COLORS[scope]


def minimap_color_for(kind: Union[ActorType, str, None]) -> str:
    kind = _as_enum(ActorType, kind)
    if kind is None:
        return MINIMAP_FALLBACK
    return MINIMAP_COLORS[kind]


def stroke_for(step_type: Union[StepType, str, None]) -> dict:
    """Stroke width and dash pattern; subscriptions are dashed and heavier."""
    if _as_enum(StepType, step_type) == StepType.SUBSCRIBE:
        return {"width": 2.0, "dasharray": "4 4"}
    return {"width": 1.5, "dasharray": None}


def minimap_legend() -> dict:
    return {kind.value: MINIMAP_COLORS[kind] for kind in ActorType}


def resolve_actor_color(kind, scope=None, override: Optional[str] = None) -> str:
    """An actor's explicit color wins over its kind color."""
    return override or color_for(kind, scope)
