"""Outline smoothing: centroid expansion, Chaikin corner cutting, bezier fitting."""
from typing import List, Sequence

from meshgrad.types import MoodSettings, PathCommand, Point2D, Triangle


def chaikin_smooth(points: Sequence[Point2D], iterations: int) -> List[Point2D]:
    """
    Chaikin corner cutting on a closed polygon.

    Each round replaces every edge (a, b), including the closing edge,
    with the points at 1/4 and 3/4 along it, doubling the point count.

    Args:
        points: Closed polygon vertices
        iterations: Number of rounds; 0 or less returns the input unchanged

    Returns:
        Smoothed vertices
    """
    if iterations <= 0:
        return list(points)

    result = list(points)
    for _ in range(iterations):
        n = len(result)
        smoothed = []
        for i in range(n):
            a, b = result[i], result[(i + 1) % n]
            smoothed.append(Point2D(0.75 * a.x + 0.25 * b.x, 0.75 * a.y + 0.25 * b.y))
            smoothed.append(Point2D(0.25 * a.x + 0.75 * b.x, 0.25 * a.y + 0.75 * b.y))
        result = smoothed
    return result


def polygon_path(points: Sequence[Point2D]) -> List[PathCommand]:
    """Straight-edged closed path."""
    if not points:
        return []
    commands = [PathCommand("M", (points[0],))]
    commands.extend(PathCommand("L", (p,)) for p in points[1:])
    commands.append(PathCommand("Z"))
    return commands


def bezier_path(points: Sequence[Point2D]) -> List[PathCommand]:
    """
    Closed cubic bezier path through every point.

    Tangents follow Catmull-Rom: the segment from p1 to p2 uses control
    points ``p1 + (p2 - p0) / 6`` and ``p2 - (p3 - p1) / 6``, indices taken
    cyclically. Fewer than three points fall back to straight segments.
    """
    n = len(points)
    if n < 3:
        return polygon_path(points)

    commands = [PathCommand("M", (points[0],))]
    for i in range(n):
        p0 = points[(i - 1) % n]
        p1 = points[i]
        p2 = points[(i + 1) % n]
        p3 = points[(i + 2) % n]
        c1 = Point2D(p1.x + (p2.x - p0.x) / 6, p1.y + (p2.y - p0.y) / 6)
        c2 = Point2D(p2.x - (p3.x - p1.x) / 6, p2.y - (p3.y - p1.y) / 6)
        commands.append(PathCommand("C", (c1, c2, p2)))
    commands.append(PathCommand("Z"))
    return commands


def expand_from_centroid(
    points: Sequence[Point2D],
    cx: float,
    cy: float,
    factor: float
) -> List[Point2D]:
    """Scale points away from (cx, cy); factor above 1 grows the shape."""
    return [Point2D(cx + (p.x - cx) * factor, cy + (p.y - cy) * factor) for p in points]


def triangle_path(triangle: Triangle, settings: MoodSettings) -> List[PathCommand]:
    """
    Smoothed outline for one triangle.

    The triangle is first grown by ``overlap_amount`` so that neighbouring
    shapes still overlap once corner cutting has pulled their edges in.
    """
    base = [p.point for p in triangle.points]
    if settings.overlap_amount > 1:
        base = expand_from_centroid(
            base, triangle.centroid.x, triangle.centroid.y, settings.overlap_amount
        )
    if settings.path_smoothing == 0:
        return polygon_path(base)
    return bezier_path(chaikin_smooth(base, settings.path_smoothing))
