"""Dominant colors and dark-to-light direction for the background layer."""
import logging

import numpy as np

from meshgrad.pixel_sampler import PixelSampler
from meshgrad.types import BaseGradient, DominantColorSample, GradientDirection, Point2D

logger = logging.getLogger(__name__)

GRID_SIZE = 6


def analyze_base_gradient(sampler: PixelSampler, grid_size: int = GRID_SIZE) -> BaseGradient:
    """
    Sample a fixed grid of region-averaged colors and pick a gradient axis.

    The axis joins the pair of samples with the largest color distance
    (first pair in row-major order on ties) and runs from the darker to the
    lighter sample. When every sample has the same color the axis has zero
    length at the first sample.

    Args:
        sampler: Pixel source
        grid_size: Samples per side

    Returns:
        BaseGradient with all samples and the normalized direction
    """
    w, h = sampler.width, sampler.height
    cell_w, cell_h = w / grid_size, h / grid_size
    radius = min(cell_w, cell_h) * 0.3

    samples = []
    for gy in range(grid_size):
        for gx in range(grid_size):
            cx = (gx + 0.5) * cell_w
            cy = (gy + 0.5) * cell_h
            color = sampler.sample_region(cx, cy, radius)
            samples.append(DominantColorSample(color=color, position=Point2D(cx / w, cy / h)))

    rgb = np.array([(s.color.r, s.color.g, s.color.b) for s in samples], dtype=np.float64)
    dists = np.sqrt(((rgb[:, None, :] - rgb[None, :, :]) ** 2).sum(axis=-1))
    iu, ju = np.triu_indices(len(samples), k=1)
    pair_dists = dists[iu, ju]

    source = target = samples[0]
    if len(pair_dists) and pair_dists.max() > 0:
        k = int(np.argmax(pair_dists))
        a, b = samples[iu[k]], samples[ju[k]]
        if a.color.luminance < b.color.luminance:
            source, target = a, b
        else:
            source, target = b, a
    else:
        logger.debug("Base gradient: uniform image, zero-length direction")

    direction = GradientDirection(
        x1=source.position.x, y1=source.position.y,
        x2=target.position.x, y2=target.position.y,
    )
    return BaseGradient(colors=samples, direction=direction)
