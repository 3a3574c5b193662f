"""Debug visualization for mesh pipeline stages."""
from pathlib import Path
from typing import List, Sequence

import numpy as np
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
from matplotlib import pyplot as plt
from matplotlib.collections import PolyCollection

from meshgrad.color import blend_colors
from meshgrad.types import Point2D, Triangle


def _polygons(triangles: Sequence[Triangle]) -> List[List[tuple]]:
    return [[(p.x, p.y) for p in t.points] for t in triangles]


def _frame(ax, image: np.ndarray):
    h, w = image.shape[:2]
    ax.set_xlim(0, w)
    ax.set_ylim(h, 0)  # Invert Y for image coords
    ax.set_aspect('equal')
    ax.axis('off')


def visualize_points(
    image: np.ndarray,
    points: Sequence[Point2D],
    boundary_count: int,
    output_path: Path
):
    """
    Stage 2: Poisson points over the image, boundary points in red.
    """
    fig, ax = plt.subplots(figsize=(8, 8))
    ax.imshow(image)

    split = len(points) - boundary_count
    inner, boundary = points[:split], points[split:]
    ax.scatter([p.x for p in inner], [p.y for p in inner], s=6, c='cyan', edgecolors='black', linewidths=0.3)
    ax.scatter([p.x for p in boundary], [p.y for p in boundary], s=6, c='red')
    ax.set_title(f'Points ({len(inner)} sampled, {boundary_count} boundary)')
    _frame(ax, image)

    plt.tight_layout()
    plt.savefig(output_path, dpi=100, bbox_inches='tight')
    plt.close()


def visualize_mesh(
    image: np.ndarray,
    triangles: Sequence[Triangle],
    output_path: Path
):
    """
    Stage 3: Triangles filled with their blended vertex colors.
    """
    colors = [blend_colors(t.colors) for t in triangles]
    facecolors = [(c.r / 255, c.g / 255, c.b / 255) for c in colors]

    fig, ax = plt.subplots(figsize=(8, 8))
    ax.add_collection(PolyCollection(
        _polygons(triangles), facecolors=facecolors, edgecolors='white', linewidths=0.3
    ))
    ax.set_title(f'Mesh ({len(triangles)} triangles)')
    _frame(ax, image)

    plt.tight_layout()
    plt.savefig(output_path, dpi=100, bbox_inches='tight')
    plt.close()


def visualize_classes(
    image: np.ndarray,
    primary: Sequence[Triangle],
    detail: Sequence[Triangle],
    output_path: Path
):
    """
    Stage 4: Primary triangles in blue, detail triangles in orange.
    """
    fig, ax = plt.subplots(figsize=(8, 8))
    ax.imshow(image, alpha=0.35)
    ax.add_collection(PolyCollection(
        _polygons(primary), facecolors='tab:blue', edgecolors='white', linewidths=0.3, alpha=0.6
    ))
    ax.add_collection(PolyCollection(
        _polygons(detail), facecolors='tab:orange', edgecolors='white', linewidths=0.3, alpha=0.6
    ))
    ax.set_title(f'Classification ({len(primary)} primary, {len(detail)} detail)')
    _frame(ax, image)

    plt.tight_layout()
    plt.savefig(output_path, dpi=100, bbox_inches='tight')
    plt.close()
