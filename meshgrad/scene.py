"""Compose the three-layer mesh gradient scene."""
import logging
from typing import List, Optional, Tuple

from meshgrad.base_gradient import analyze_base_gradient
from meshgrad.color import blend_colors
from meshgrad.mood import mood_to_settings
from meshgrad.path_smoother import polygon_path, triangle_path
from meshgrad.pixel_sampler import PixelSampler, validate_dimensions
from meshgrad.shape_classifier import classify_shapes, compute_global_direction
from meshgrad.types import (
    BaseGradient,
    ColorRGB,
    Fill,
    GradientStop,
    LinearGradientFill,
    MoodSettings,
    PathCommand,
    Point2D,
    RadialGradientFill,
    Scene,
    ShapeRecord,
    ShapeTier,
    SolidFill,
    Triangle,
)

logger = logging.getLogger(__name__)

RADIAL_REACH = 1.15
DETAIL_OPACITY_FACTOR = 0.88
BASE_GRADIENT_STOPS = 5


def _even_offsets(count: int) -> List[float]:
    if count <= 1:
        return [0.0] * count
    return [i / (count - 1) for i in range(count)]


def base_gradient_fill(base: BaseGradient, width: int, height: int) -> Fill:
    """
    Background fill from the base gradient analysis.

    Samples are ordered by the projection of their pixel position onto the
    direction end point, and five evenly spaced samples become the stops.
    A uniform image gives a solid fill.
    """
    if base.is_degenerate:
        return SolidFill(base.colors[0].color)

    d = base.direction

    def projection(sample):
        return sample.position.x * width * d.x2 + sample.position.y * height * d.y2

    ordered = sorted(base.colors, key=projection)
    count = min(len(ordered), BASE_GRADIENT_STOPS)
    step = len(ordered) // count
    stops = tuple(
        GradientStop(offset, ordered[min(i * step, len(ordered) - 1)].color)
        for i, offset in enumerate(_even_offsets(count))
    )
    return LinearGradientFill(stops=stops, x1=d.x1, y1=d.y1, x2=d.x2, y2=d.y2)


def radial_fill(triangle: Triangle, sampler: Optional[PixelSampler] = None) -> RadialGradientFill:
    """
    Radial fill for a primary shape.

    Center color is the pixel under the centroid (the blended vertex color
    without a sampler), edge color is the blended vertex color, and the
    radius reaches 15% past the farthest vertex.
    """
    cx, cy = triangle.centroid.x, triangle.centroid.y
    reach = max(((p.x - cx) ** 2 + (p.y - cy) ** 2) ** 0.5 for p in triangle.points)
    edge = blend_colors(triangle.colors)
    center = sampler.sample(cx, cy) if sampler is not None else edge
    return RadialGradientFill(
        cx=cx,
        cy=cy,
        r=RADIAL_REACH * reach,
        stops=(GradientStop(0.0, center), GradientStop(1.0, edge)),
    )


def linear_fill(
    triangle: Triangle,
    direction: Tuple[float, float],
    consistency: float,
    sampler: Optional[PixelSampler] = None
) -> LinearGradientFill:
    """
    Linear fill for a detail shape, aligned with the global direction.

    Stops are the vertex colors (plus the centroid pixel when a sampler is
    given) ordered along ``direction``. Endpoints are bounding-box fractions
    pulled toward the middle as ``consistency`` drops.
    """
    dx, dy = direction
    colored: List[Tuple[Point2D, ColorRGB]] = [(p.point, p.color) for p in triangle.points]
    if sampler is not None:
        c = triangle.centroid
        colored.append((c, sampler.sample(c.x, c.y)))

    colored.sort(key=lambda pc: pc[0].x * dx + pc[0].y * dy)
    stops = tuple(
        GradientStop(offset, color)
        for offset, (_, color) in zip(_even_offsets(len(colored)), colored)
    )
    half = 0.5 * consistency
    return LinearGradientFill(
        stops=stops,
        x1=0.5 - dx * half,
        y1=0.5 - dy * half,
        x2=0.5 + dx * half,
        y2=0.5 + dy * half,
    )


def background_rect(width: int, height: int) -> List[PathCommand]:
    return polygon_path([
        Point2D(0, 0), Point2D(width, 0), Point2D(width, height), Point2D(0, height)
    ])


def compose_scene(
    triangles: List[Triangle],
    width: int,
    height: int,
    mood: float,
    sampler: Optional[PixelSampler] = None,
    settings: Optional[MoodSettings] = None
) -> Scene:
    """
    Build the layered scene from attributed triangles.

    Layers, in paint order:
      1. Base gradient rectangle (only when a sampler is given)
      2. Primary shapes with radial fills
      3. Detail shapes with linear fills aligned to the global direction

    Args:
        triangles: Attributed, culled triangles
        width: Image width in pixels
        height: Image height in pixels
        mood: Mood control, 0-100
        sampler: Optional pixel source for centroid and background colors
        settings: Precomputed settings; derived from ``mood`` when None

    Returns:
        Scene

    Raises:
        InvalidDimensionsError: If width or height is not positive
    """
    validate_dimensions(width, height)
    settings = settings or mood_to_settings(mood)
    direction = compute_global_direction(triangles)
    primary, detail = classify_shapes(triangles, settings.merge_threshold)

    background = None
    if sampler is not None:
        base = analyze_base_gradient(sampler)
        background = ShapeRecord(
            commands=background_rect(width, height),
            fill=base_gradient_fill(base, width, height),
            opacity=settings.base_gradient_opacity,
        )

    primary_shapes = [
        ShapeRecord(
            commands=triangle_path(t, settings),
            fill=radial_fill(t, sampler),
            opacity=settings.shape_opacity,
            tier=ShapeTier.PRIMARY,
        )
        for t in primary
    ]
    detail_shapes = [
        ShapeRecord(
            commands=triangle_path(t, settings),
            fill=linear_fill(t, direction, settings.gradient_consistency, sampler),
            opacity=settings.shape_opacity * DETAIL_OPACITY_FACTOR,
            tier=ShapeTier.DETAIL,
        )
        for t in detail
    ]

    logger.info(
        f"Scene: {len(primary_shapes)} primary, {len(detail_shapes)} detail shapes, "
        f"background {'on' if background else 'off'}"
    )
    return Scene(
        width=width,
        height=height,
        background=background,
        primary=primary_shapes,
        detail=detail_shapes,
        settings=settings,
    )
