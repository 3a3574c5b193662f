"""Triangle adjacency and primary/detail shape classification."""
import logging
import math
from collections import defaultdict
from typing import Dict, List, Tuple

from meshgrad.color import blend_colors
from meshgrad.types import MAX_RGB_DISTANCE, Triangle

logger = logging.getLogger(__name__)

# A primary triangle must reach this fraction of the mean area...
PRIMARY_AREA_FRACTION = 0.55
# ...and have at least this many color-similar neighbors
PRIMARY_MIN_SIMILAR = 2


def _vertex_key(x: float, y: float) -> str:
    return f"{x:.1f},{y:.1f}"


def edge_key(x1: float, y1: float, x2: float, y2: float) -> str:
    """Direction-independent edge key from coordinates rounded to 0.1px."""
    a = _vertex_key(x1, y1)
    b = _vertex_key(x2, y2)
    return f"{a}-{b}" if a < b else f"{b}-{a}"


def build_adjacency(triangles: List[Triangle]) -> Dict[int, List[int]]:
    """
    Neighbor lists for triangles that share an edge.

    Edges are matched by rounded endpoint coordinates, not vertex indices,
    so triangles built independently still find each other. An edge owned
    by exactly two triangles makes them neighbors.
    """
    neighbors: Dict[int, List[int]] = {i: [] for i in range(len(triangles))}
    edge_map: Dict[str, List[int]] = defaultdict(list)

    for i, t in enumerate(triangles):
        p = t.points
        for a, b in ((p[0], p[1]), (p[1], p[2]), (p[2], p[0])):
            edge_map[edge_key(a.x, a.y, b.x, b.y)].append(i)

    for owners in edge_map.values():
        if len(owners) == 2:
            neighbors[owners[0]].append(owners[1])
            neighbors[owners[1]].append(owners[0])

    return neighbors


def classify_shapes(
    triangles: List[Triangle],
    threshold: float
) -> Tuple[List[Triangle], List[Triangle]]:
    """
    Split triangles into primary (smooth) and detail (high-contrast) sets.

    A triangle is primary when its area is at least 55% of the mean area
    and at least two neighbors have a blended color within ``threshold``
    (distance normalized by the maximum RGB distance). Everything else is
    detail. Input order is preserved within each set.

    Args:
        triangles: Attributed triangles
        threshold: Normalized color-similarity threshold

    Returns:
        Tuple of (primary, detail)
    """
    if not triangles:
        return [], []

    mean_area = sum(t.area for t in triangles) / len(triangles)
    neighbors = build_adjacency(triangles)
    blended = [blend_colors(t.colors) for t in triangles]

    primary: List[Triangle] = []
    detail: List[Triangle] = []
    for i, t in enumerate(triangles):
        similar = sum(
            1 for n in neighbors[i]
            if blended[i].distance(blended[n]) / MAX_RGB_DISTANCE < threshold
        )
        if t.area >= mean_area * PRIMARY_AREA_FRACTION and similar >= PRIMARY_MIN_SIMILAR:
            primary.append(t)
        else:
            detail.append(t)

    logger.debug(f"Classified {len(triangles)} triangles: {len(primary)} primary, {len(detail)} detail")
    return primary, detail


def compute_global_direction(triangles: List[Triangle]) -> Tuple[float, float]:
    """
    Dominant light-flow direction over the mesh.

    Sums, for every triangle, the vector from its darkest to its lightest
    vertex and normalizes the total. Returns (1, 0) for an empty mesh; a
    zero total stays (0, 0).
    """
    if not triangles:
        return 1.0, 0.0

    tdx = tdy = 0.0
    for t in triangles:
        lums = [p.color.luminance for p in t.points]
        min_i = max_i = 0
        for i in (1, 2):
            if lums[i] < lums[min_i]:
                min_i = i
            if lums[i] > lums[max_i]:
                max_i = i
        tdx += t.points[max_i].x - t.points[min_i].x
        tdy += t.points[max_i].y - t.points[min_i].y

    length = math.hypot(tdx, tdy) or 1.0
    return tdx / length, tdy / length
