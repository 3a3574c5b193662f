"""Color and variance probes over a caller-owned pixel source."""
import logging
import math
from typing import Callable

import numpy as np

from meshgrad.color import ColorLike, as_color, blend_colors
from meshgrad.types import ColorRGB, InvalidDimensionsError, PixelSourceError

logger = logging.getLogger(__name__)

PixelFetch = Callable[[int, int], ColorLike]


def validate_dimensions(width: int, height: int) -> None:
    """Raise InvalidDimensionsError unless both dimensions are positive."""
    if width is None or height is None or width <= 0 or height <= 0:
        raise InvalidDimensionsError(
            f"Image dimensions must be positive, got {width}x{height}"
        )


class PixelSampler:
    """
    Reads point colors, region averages and local variance from a pixel source.

    The source is any callable ``fetch(x, y)`` taking integer pixel
    coordinates already clamped to the image, and returning a ColorRGB,
    an ``rgb(r, g, b)`` string or an RGB(A) sequence. Coordinates passed to
    the sampler are clamped to ``[0, dimension - 1]`` and floored, so
    out-of-range input never fails.
    """

    def __init__(self, width: int, height: int, fetch: PixelFetch):
        validate_dimensions(width, height)
        self.width = int(width)
        self.height = int(height)
        self._fetch = fetch

    @classmethod
    def from_array(cls, image: np.ndarray) -> "PixelSampler":
        """
        Build a sampler over an (H, W, 3) or (H, W, 4) array.

        Float arrays in [0, 1] are scaled to 8-bit. The array is read, never
        modified.
        """
        if image.ndim == 2:
            image = np.stack([image] * 3, axis=-1)
        if image.ndim != 3 or image.shape[2] not in (3, 4):
            raise InvalidDimensionsError(
                f"Expected (H, W, 3) or (H, W, 4) array, got shape {image.shape}"
            )
        if image.dtype != np.uint8:
            scale = 255.0 if image.size and float(image.max()) <= 1.0 else 1.0
            image = np.clip(image * scale, 0, 255).round().astype(np.uint8)

        height, width = image.shape[:2]

        def fetch(x: int, y: int):
            return image[y, x, :3]

        return cls(width, height, fetch)

    def _clamp(self, x: float, y: float):
        ix = int(math.floor(min(max(x, 0), self.width - 1)))
        iy = int(math.floor(min(max(y, 0), self.height - 1)))
        return ix, iy

    def sample(self, x: float, y: float) -> ColorRGB:
        """Color of the pixel under (x, y)."""
        ix, iy = self._clamp(x, y)
        try:
            value = self._fetch(ix, iy)
        except Exception as e:
            raise PixelSourceError(f"Pixel source failed at ({ix}, {iy}): {e}") from e
        return as_color(value)

    def sample_string(self, x: float, y: float) -> str:
        return self.sample(x, y).to_string()

    def sample_region(self, x: float, y: float, radius: float) -> ColorRGB:
        """
        Average color of a 3x3 grid spaced ``0.5 * radius`` around (x, y).

        Args:
            x: Center x coordinate
            y: Center y coordinate
            radius: Region radius in pixels

        Returns:
            Blended color of the nine samples
        """
        step = radius * 0.5
        samples = [
            self.sample(x + dx * step, y + dy * step)
            for dy in (-1, 0, 1)
            for dx in (-1, 0, 1)
        ]
        return blend_colors(samples)

    def local_variance(self, x: float, y: float, radius: float, steps: int = 8) -> float:
        """
        Mean color distance between (x, y) and ``steps`` points on a circle.

        Used as the image-complexity signal for adaptive point density.
        """
        center = self.sample(x, y)
        total = 0.0
        for i in range(steps):
            angle = (i / steps) * math.pi * 2
            s = self.sample(x + math.cos(angle) * radius, y + math.sin(angle) * radius)
            total += s.distance(center)
        return total / steps
