"""Variance-adaptive Poisson-disk sampling over the image plane."""
import logging
import math
from typing import List, Optional

import numpy as np

from meshgrad.pixel_sampler import PixelSampler
from meshgrad.types import MoodSettings, Point2D

logger = logging.getLogger(__name__)

# Spacing never shrinks below this fraction of the base distance
MIN_SPACING_FACTOR = 0.35


def local_spacing(
    sampler: PixelSampler,
    x: float,
    y: float,
    base_min_dist: float,
    settings: MoodSettings
) -> float:
    """
    Minimum spacing at (x, y).

    Higher local variance gives denser points, floored at 35% of the base
    distance.
    """
    variance = sampler.local_variance(x, y, base_min_dist)
    factor = max(MIN_SPACING_FACTOR, 1 - (variance / 255) * settings.adaptive_sensitivity)
    return base_min_dist * factor * settings.min_shape_scale


class _SpatialGrid:
    """Uniform bucket grid with cell size ``base_min_dist / sqrt(2)``."""

    def __init__(self, width: float, height: float, cell: float):
        self.cell = cell
        self.cols = max(1, int(math.ceil(width / cell)))
        self.rows = max(1, int(math.ceil(height / cell)))
        # Adaptive spacing can drop below the cell size, so cells hold lists
        self.buckets: List[List[List[int]]] = [
            [[] for _ in range(self.rows)] for _ in range(self.cols)
        ]

    def insert(self, idx: int, x: float, y: float) -> None:
        gx, gy = int(x // self.cell), int(y // self.cell)
        if 0 <= gx < self.cols and 0 <= gy < self.rows:
            self.buckets[gx][gy].append(idx)

    def too_close(self, points: List[Point2D], x: float, y: float, min_dist: float) -> bool:
        gx, gy = int(x // self.cell), int(y // self.cell)
        r = int(math.ceil(min_dist / self.cell)) + 1
        min_sq = min_dist * min_dist
        for i in range(max(0, gx - r), min(self.cols - 1, gx + r) + 1):
            for j in range(max(0, gy - r), min(self.rows - 1, gy + r) + 1):
                for idx in self.buckets[i][j]:
                    dx = points[idx].x - x
                    dy = points[idx].y - y
                    if dx * dx + dy * dy < min_sq:
                        return True
        return False


def adaptive_poisson_sampling(
    sampler: PixelSampler,
    base_min_dist: float,
    settings: MoodSettings,
    max_attempts: int = 30,
    rng: Optional[np.random.Generator] = None
) -> List[Point2D]:
    """
    Generate a density-adaptive Poisson-disk point set.

    A variant of Bridson's algorithm seeded at the image center. Each
    active point gets up to ``max_attempts`` candidates at a random angle
    and a distance in ``[d, 2d)``, where ``d`` is the local spacing at the
    active point. A candidate is accepted when no existing point lies within
    the local spacing at the candidate. Active points that produce no
    candidate are retired.

    Args:
        sampler: Pixel source for the variance probe
        base_min_dist: Base spacing in pixels
        settings: Mood settings (sensitivity and scale)
        max_attempts: Candidates tried per active point
        rng: Random generator; a fresh unseeded one when None

    Returns:
        Accepted points in acceptance order
    """
    if rng is None:
        rng = np.random.default_rng()

    w, h = sampler.width, sampler.height
    grid = _SpatialGrid(w, h, base_min_dist / math.sqrt(2))
    points: List[Point2D] = []
    active: List[int] = []

    def add_point(x: float, y: float) -> None:
        idx = len(points)
        points.append(Point2D(x, y))
        active.append(idx)
        grid.insert(idx, x, y)

    add_point(w / 2, h / 2)

    while active:
        ri = int(rng.integers(len(active)))
        p = points[active[ri]]
        found = False
        ld = local_spacing(sampler, p.x, p.y, base_min_dist, settings)

        for _ in range(max_attempts):
            angle = rng.random() * math.pi * 2
            dist = ld + rng.random() * ld
            nx = p.x + math.cos(angle) * dist
            ny = p.y + math.sin(angle) * dist
            if 0 <= nx < w and 0 <= ny < h:
                nld = local_spacing(sampler, nx, ny, base_min_dist, settings)
                if not grid.too_close(points, nx, ny, nld):
                    add_point(nx, ny)
                    found = True
                    break

        if not found:
            active.pop(ri)

    logger.debug(f"Poisson sampling: {len(points)} points (base spacing {base_min_dist:.1f}px)")
    return points


def add_boundary_points(
    points: List[Point2D],
    width: float,
    height: float,
    spacing: float
) -> List[Point2D]:
    """
    Append the four corners and evenly spaced edge points.

    Returns a new list; the input is left untouched.
    """
    boundary = [
        Point2D(0, 0), Point2D(width, 0), Point2D(0, height), Point2D(width, height)
    ]
    if spacing > 0:
        x = spacing
        while x < width:
            boundary.append(Point2D(x, 0))
            boundary.append(Point2D(x, height))
            x += spacing
        y = spacing
        while y < height:
            boundary.append(Point2D(0, y))
            boundary.append(Point2D(width, y))
            y += spacing
    return list(points) + boundary
