"""SVG export for mesh gradient scenes."""
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from meshgrad.types import (
    Fill,
    GradientStop,
    LinearGradientFill,
    PathCommand,
    RadialGradientFill,
    Scene,
    ShapeRecord,
    SolidFill,
)


def format_number(x: float, precision: int) -> str:
    """
    Format number with given precision.

    Args:
        x: Number to format
        precision: Decimal places

    Returns:
        Formatted string
    """
    return f"{x:.{precision}f}"


def format_percent(fraction: float) -> str:
    return f"{fraction * 100:.1f}%"


def path_data(commands: Sequence[PathCommand], precision: int = 2) -> str:
    """
    Convert path commands to an SVG ``d`` attribute.

    Uses absolute ``M``, ``L``, ``C`` and ``Z`` commands.
    """
    fmt = lambda v: format_number(v, precision)
    parts = []
    for cmd in commands:
        if cmd.op == "Z":
            parts.append("Z")
        elif cmd.op == "C":
            c1, c2, end = cmd.points
            parts.append(
                f"C {fmt(c1.x)} {fmt(c1.y)}, {fmt(c2.x)} {fmt(c2.y)}, {fmt(end.x)} {fmt(end.y)}"
            )
        else:
            p = cmd.points[0]
            parts.append(f"{cmd.op} {fmt(p.x)} {fmt(p.y)}")
    return ' '.join(parts)


def _stops_markup(stops: Sequence[GradientStop], indent: str) -> str:
    return f"\n{indent}".join(
        f'<stop offset="{format_percent(s.offset)}" stop-color="{s.color.to_hex()}" />'
        for s in stops
    )


def gradient_def(fill: Fill, gradient_id: str, precision: int = 2) -> Optional[str]:
    """
    Gradient definition for ``<defs>``, or None for a solid fill.

    Linear gradients use object-bounding-box fractions; radial gradients use
    absolute user-space pixels.
    """
    fmt = lambda v: format_number(v, precision)
    if isinstance(fill, LinearGradientFill):
        return (
            f'<linearGradient id="{gradient_id}" '
            f'x1="{format_percent(fill.x1)}" y1="{format_percent(fill.y1)}" '
            f'x2="{format_percent(fill.x2)}" y2="{format_percent(fill.y2)}">\n'
            f'      {_stops_markup(fill.stops, "      ")}\n'
            f'    </linearGradient>'
        )
    if isinstance(fill, RadialGradientFill):
        return (
            f'<radialGradient id="{gradient_id}" gradientUnits="userSpaceOnUse" '
            f'cx="{fmt(fill.cx)}" cy="{fmt(fill.cy)}" r="{fmt(fill.r)}">\n'
            f'      {_stops_markup(fill.stops, "      ")}\n'
            f'    </radialGradient>'
        )
    return None


def _fill_attr(fill: Fill, gradient_id: str) -> str:
    if isinstance(fill, SolidFill):
        return fill.color.to_hex()
    return f"url(#{gradient_id})"


def _layer_elements(
    shapes: List[ShapeRecord],
    prefix: str,
    precision: int
) -> Tuple[List[str], List[str]]:
    defs = []
    elements = []
    for i, shape in enumerate(shapes):
        gradient_id = f"{prefix}-{i}"
        definition = gradient_def(shape.fill, gradient_id, precision)
        if definition:
            defs.append(definition)
        elements.append(
            f'<path d="{path_data(shape.commands, precision)}" '
            f'fill="{_fill_attr(shape.fill, gradient_id)}" opacity="{shape.opacity:.2f}" />'
        )
    return defs, elements


def scene_to_svg(scene: Scene, precision: int = 2) -> str:
    """
    Serialize a scene into an SVG document.

    Args:
        scene: Composed scene
        precision: Decimal places for coordinates

    Returns:
        Complete SVG string with three named layer groups
    """
    w, h = scene.width, scene.height
    defs: List[str] = []
    base_elements: List[str] = []

    if scene.background is not None:
        bg = scene.background
        definition = gradient_def(bg.fill, "base-gradient", precision)
        if definition:
            defs.append(definition)
        base_elements.append(
            f'<rect width="{w}" height="{h}" fill="{_fill_attr(bg.fill, "base-gradient")}" '
            f'opacity="{bg.opacity:.2f}" />'
        )

    primary_defs, primary_elements = _layer_elements(scene.primary, "pg", precision)
    detail_defs, detail_elements = _layer_elements(scene.detail, "dg", precision)
    defs.extend(primary_defs)
    defs.extend(detail_defs)

    def group(group_id: str, title: str, elements: List[str]) -> str:
        body = '\n    '.join(elements)
        return f'''  <!-- {title} -->
  <g id="{group_id}">
    {body}
  </g>'''

    defs_content = '\n    '.join(defs)

    svg = f'''<?xml version="1.0" encoding="UTF-8"?>
<svg xmlns="http://www.w3.org/2000/svg" width="{w}" height="{h}" viewBox="0 0 {w} {h}">
  <defs>
    {defs_content}
  </defs>

{group("Base-Gradient", "Base Gradient Layer", base_elements)}

{group("Primary-Shapes", "Primary Shapes Layer", primary_elements)}

{group("Detail-Shapes", "Detail Shapes Layer", detail_elements)}
</svg>'''

    return svg


def save_svg(svg_string: str, output_path: Union[str, Path]) -> None:
    """
    Save SVG string to file.

    Args:
        svg_string: SVG content
        output_path: Output file path
    """
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(svg_string)
