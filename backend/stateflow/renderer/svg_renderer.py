from xml.sax.saxutils import escape

from stateflow.visual.visual_schema import VisualDiagram, VisualEdge, VisualNodeKind

PADDING = 140          # room for trigger markers left of the first column
LIFELINE_COLOR = "#d1d5db"
ARROW_SIZE = 6


def _attr(value) -> str:
    return escape(str(value), {'"': "&quot;"})


def _arrowhead(edge: VisualEdge) -> str:
    tip_x = edge.arrow.x
    tip_y = edge.arrow.y
    # arrow points toward the target: right, left, or back left for loops
    sign = 1 if edge.direction.value == "right" else -1
    base_x = tip_x - sign * ARROW_SIZE
    points = (
        f"{tip_x:g},{tip_y:g} "
        f"{base_x:g},{tip_y - ARROW_SIZE / 2:g} "
        f"{base_x:g},{tip_y + ARROW_SIZE / 2:g}"
    )
    return f'<polygon points="{points}" fill="{_attr(edge.color)}"/>'


def render_svg(visual: VisualDiagram) -> str:
    """Static preview of a Visual IR. Coordinates are the engine's, shifted by PADDING."""
    w = visual.width + 2 * PADDING
    h = visual.height + PADDING

    svg = [
        f'<svg width="{w:g}" height="{h:g}" xmlns="http://www.w3.org/2000/svg" '
        f'font-family="Arial">',
        f'<g transform="translate({PADDING},{PADDING // 2})">',
    ]

    actors = [n for n in visual.nodes if n.kind == VisualNodeKind.ACTOR]
    sections = [n for n in visual.nodes if n.kind != VisualNodeKind.ACTOR]

    # Lifelines first, everything else draws over them
    for n in actors:
        cx = n.x + n.width / 2
        top = n.y + n.height
        bottom = top + n.payload.get("lifelineHeight", visual.lifeline_height)
        svg.append(
            f'<line x1="{cx:g}" y1="{top:g}" x2="{cx:g}" y2="{bottom:g}" '
            f'stroke="{LIFELINE_COLOR}" stroke-dasharray="4 4"/>'
        )

    for n in sections:
        height = n.height or 28
        border = n.payload.get("border", "#999")
        svg.append(
            f'<rect x="{n.x:g}" y="{n.y:g}" width="{n.width:g}" height="{height:g}" '
            f'rx="4" ry="4" fill="{_attr(n.color)}" stroke="{_attr(border)}"/>'
        )
        svg.append(
            f'<text x="{n.x + 8:g}" y="{n.y + height / 2:g}" '
            f'dominant-baseline="middle" font-size="12">{escape(n.label)}</text>'
        )

    for n in actors:
        svg.append(
            f'<rect x="{n.x:g}" y="{n.y:g}" width="{n.width:g}" height="{n.height:g}" '
            f'rx="8" ry="8" fill="{_attr(n.payload.get("background", "#fff"))}" '
            f'stroke="{_attr(n.color)}" stroke-width="2"/>'
        )
        label = f"{n.icon} {n.label}" if n.icon else n.label
        svg.append(
            f'<text x="{n.x + n.width / 2:g}" y="{n.y + n.height / 2:g}" '
            f'text-anchor="middle" dominant-baseline="middle" font-size="14">'
            f'{escape(label)}</text>'
        )

    for e in visual.edges:
        dash = f' stroke-dasharray="{e.dasharray}"' if e.dasharray else ""
        svg.append(
            f'<path d="{e.path}" fill="none" stroke="{_attr(e.color)}" '
            f'stroke-width="{e.stroke_width:g}"{dash}/>'
        )
        svg.append(_arrowhead(e))

        label = f"{e.glyph} {e.label}"
        if e.async_badge:
            label += " [async]"
        if e.condition_badge:
            label += f" [{e.condition_badge}]"
        svg.append(
            f'<text x="{e.label_position.x:g}" y="{e.label_position.y - 6:g}" '
            f'text-anchor="middle" font-size="11" fill="{_attr(e.color)}">'
            f'{escape(label)}</text>'
        )

    svg.append("</g>")
    svg.append("</svg>")
    return "\n".join(svg)
