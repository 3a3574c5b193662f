"""Incremental Bowyer-Watson Delaunay triangulation and mesh attribution."""
import logging
import math
from collections import Counter
from typing import List, Optional, Sequence, Tuple

from meshgrad.color import blend_colors
from meshgrad.pixel_sampler import PixelSampler
from meshgrad.types import AttributedVertex, Point2D, Triangle

logger = logging.getLogger(__name__)

IndexTriple = Tuple[int, int, int]
Edge = Tuple[int, int]


def in_circumcircle(p: Point2D, a: Point2D, b: Point2D, c: Point2D) -> bool:
    """
    Strict incircle test, valid for either winding of (a, b, c).

    The sign of the incircle determinant is compared against the
    orientation of the triangle, so clockwise and counter-clockwise
    triangles give the same answer. Points on the circle are outside.
    """
    ax, ay = a.x - p.x, a.y - p.y
    bx, by = b.x - p.x, b.y - p.y
    cx, cy = c.x - p.x, c.y - p.y
    det = (
        (ax * ax + ay * ay) * (bx * cy - cx * by)
        - (bx * bx + by * by) * (ax * cy - cx * ay)
        + (cx * cx + cy * cy) * (ax * by - bx * ay)
    )
    orientation = (a.x - c.x) * (b.y - c.y) - (a.y - c.y) * (b.x - c.x)
    return det > 0 if orientation > 0 else det < 0


def _edge_key(a: int, b: int) -> Edge:
    return (a, b) if a < b else (b, a)


class Delaunay:
    """
    Bowyer-Watson triangulation over a point list.

    Triangles live in an arena (a plain list of index triples). Each
    insertion collects the indices of triangles whose circumcircle holds the
    new point, counts their edges by sorted endpoint pair, and re-fans the
    cavity from the edges that only one bad triangle owns.

    Points are inserted in input order. The result may differ from other
    implementations only where four or more points are co-circular.

    Attributes:
        points: Input points
        triangles: Index triples into ``points``, super-triangle removed
    """

    def __init__(self, points: Sequence[Point2D], super_scale: float = 20.0):
        self.points: List[Point2D] = list(points)
        self.super_scale = super_scale
        self.triangles: List[IndexTriple] = []
        self._run()

    def _super_triangle(self) -> List[Point2D]:
        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        min_x, max_x = min(xs), max(xs)
        min_y, max_y = min(ys), max(ys)
        d = math.hypot(max_x - min_x, max_y - min_y) or 1.0
        mx, my = (min_x + max_x) / 2, (min_y + max_y) / 2
        k = self.super_scale
        return [
            Point2D(mx - k * d, my - d),
            Point2D(mx, my + k * d),
            Point2D(mx + k * d, my - d),
        ]

    def _run(self) -> None:
        n = len(self.points)
        if n < 3:
            return

        vertices = self.points + self._super_triangle()
        arena: List[IndexTriple] = [(n, n + 1, n + 2)]

        for i in range(n):
            p = vertices[i]
            bad = [
                t for t, (a, b, c) in enumerate(arena)
                if in_circumcircle(p, vertices[a], vertices[b], vertices[c])
            ]
            if not bad:
                # Duplicate point or a point on the super-triangle boundary
                continue

            edge_count: Counter = Counter()
            cavity_edges: List[Edge] = []
            for t in bad:
                a, b, c = arena[t]
                for e in ((a, b), (b, c), (c, a)):
                    edge_count[_edge_key(*e)] += 1
                    cavity_edges.append(e)

            bad_set = set(bad)
            arena = [tri for t, tri in enumerate(arena) if t not in bad_set]
            for e0, e1 in cavity_edges:
                if edge_count[_edge_key(e0, e1)] == 1:
                    arena.append((e0, e1, i))

        self.triangles = [t for t in arena if t[0] < n and t[1] < n and t[2] < n]


def triangulate(points: Sequence[Point2D], super_scale: float = 20.0) -> List[IndexTriple]:
    """
    Delaunay-triangulate a point set.

    Fewer than three points yield an empty list.
    """
    return Delaunay(points, super_scale).triangles


def triangle_area(a: Point2D, b: Point2D, c: Point2D) -> float:
    return abs((b.x - a.x) * (c.y - a.y) - (c.x - a.x) * (b.y - a.y)) / 2


def make_triangle(v0: AttributedVertex, v1: AttributedVertex, v2: AttributedVertex) -> Triangle:
    """Build a Triangle with centroid, area and color variance filled in."""
    centroid = Point2D((v0.x + v1.x + v2.x) / 3, (v0.y + v1.y + v2.y) / 3)
    area = triangle_area(v0.point, v1.point, v2.point)
    avg = blend_colors([v0.color, v1.color, v2.color])
    variance = (v0.color.distance(avg) + v1.color.distance(avg) + v2.color.distance(avg)) / 3
    return Triangle(points=(v0, v1, v2), centroid=centroid, area=area, color_variance=variance)


def filter_small_triangles(triangles: List[Triangle], ratio: float = 0.28) -> List[Triangle]:
    """
    Drop triangles smaller than ``ratio`` times the median area.

    The median is the upper-middle element of the sorted areas; a zero
    median counts as 1.
    """
    if not triangles:
        return triangles
    areas = sorted(t.area for t in triangles)
    median = areas[len(areas) // 2] or 1.0
    cut = median * ratio
    kept = [t for t in triangles if t.area >= cut]
    logger.debug(f"Micro-triangle culling: {len(triangles)} -> {len(kept)} (cut {cut:.2f})")
    return kept


def build_triangles(
    points: Sequence[Point2D],
    sampler: PixelSampler,
    cull_ratio: Optional[float] = 0.28,
    super_scale: float = 20.0
) -> List[Triangle]:
    """
    Triangulate points and attribute each triangle with sampled colors.

    Args:
        points: Mesh vertices (Poisson points plus boundary points)
        sampler: Pixel source for vertex colors
        cull_ratio: Micro-triangle cut as a fraction of the median area;
            None disables culling
        super_scale: Super-triangle size relative to the point-set diagonal

    Returns:
        Attributed triangles
    """
    points = list(points)
    result = []
    for i0, i1, i2 in triangulate(points, super_scale):
        vertices = [
            AttributedVertex(points[i].x, points[i].y, sampler.sample(points[i].x, points[i].y))
            for i in (i0, i1, i2)
        ]
        result.append(make_triangle(*vertices))

    logger.debug(f"Triangulated {len(points)} points into {len(result)} triangles")
    if cull_ratio is None:
        return result
    return filter_small_triangles(result, cull_ratio)
