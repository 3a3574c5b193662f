"""Raster image ingestion and denoising ahead of sampling."""
import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, ImageOps
from scipy import ndimage

from meshgrad.types import IngestResult, InvalidDimensionsError, VectorizationError

logger = logging.getLogger(__name__)

_ALPHA_MODES = ('RGBA', 'LA', 'PA', 'RGBa', 'La')


def _to_uint8(image: np.ndarray) -> np.ndarray:
    if image.dtype == np.uint8:
        return image
    if image.size and float(image.max()) <= 1.0:
        image = image * 255.0
    return np.clip(image, 0, 255).round().astype(np.uint8)


def _has_alpha(img: Image.Image) -> bool:
    return img.mode in _ALPHA_MODES or (img.mode == 'P' and 'transparency' in img.info)


def _flatten_on_white(img: Image.Image) -> Image.Image:
    rgba = img.convert('RGBA')
    white = Image.new('RGBA', rgba.size, (255, 255, 255, 255))
    return Image.alpha_composite(white, rgba).convert('RGB')


def ingest(path: Union[str, Path]) -> IngestResult:
    """
    Decode an image file into an opaque sRGB buffer.

    EXIF orientation is applied and any transparency (RGBA, LA, or a
    palette with a transparent index) is composited onto white.

    Args:
        path: Path to image file

    Returns:
        IngestResult with an (H, W, 3) uint8 array

    Raises:
        FileNotFoundError: If the path does not exist
        VectorizationError: If the path is not a file or cannot be decoded
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")
    if not path.is_file():
        raise VectorizationError(f"Not a regular file: {path}")

    try:
        with Image.open(path) as src:
            oriented = ImageOps.exif_transpose(src)
            has_alpha = _has_alpha(oriented)
            rgb = _flatten_on_white(oriented) if has_alpha else oriented.convert('RGB')
            image = np.asarray(rgb, dtype=np.uint8).copy()
    except OSError as e:
        raise VectorizationError(f"Cannot decode {path.name}: {e}") from e

    height, width = image.shape[:2]
    if width == 0 or height == 0:
        raise InvalidDimensionsError(f"Image has no pixels: {path}")

    logger.debug(f"Ingested {path.name}: {width}x{height}, alpha={has_alpha}")
    return IngestResult(
        image=image,
        original_path=str(path),
        width=width,
        height=height,
        has_alpha=has_alpha
    )


def ingest_from_array(image: np.ndarray, path: str = "") -> IngestResult:
    """
    Wrap an in-memory array as an IngestResult.

    Args:
        image: (H, W), (H, W, 3) or (H, W, 4) sRGB array, uint8 or float
            in [0, 1]; RGBA is composited onto white
        path: Optional source path kept for reference

    Returns:
        IngestResult
    """
    if image.ndim == 2:
        image = image[..., None].repeat(3, axis=2)
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise VectorizationError(
            f"Expected (H, W), (H, W, 3) or (H, W, 4) array, got shape {image.shape}"
        )

    has_alpha = image.shape[2] == 4
    if has_alpha:
        rgba = image.astype(np.float64)
        if rgba.size and rgba.max() > 1.0:
            rgba /= 255.0
        alpha = rgba[..., 3:]
        rgb = _to_uint8(rgba[..., :3] * alpha + (1.0 - alpha))
    else:
        rgb = _to_uint8(image)

    height, width = rgb.shape[:2]
    if width == 0 or height == 0:
        raise InvalidDimensionsError(f"Image must be non-empty, got {width}x{height}")

    return IngestResult(
        image=rgb,
        original_path=path,
        width=width,
        height=height,
        has_alpha=has_alpha
    )


def create_smoothed_buffer(
    image: np.ndarray,
    scale: float = 1.0,
    blur_sigma: float = 1.2
) -> np.ndarray:
    """
    Downscale and lightly blur an image to melt micro-noise before sampling.

    Args:
        image: (H, W, 3) uint8 image
        scale: Resize factor (1.0 keeps the size)
        blur_sigma: Gaussian sigma in pixels (0 disables the blur)

    Returns:
        New (H', W', 3) uint8 image; the input is not modified
    """
    result = image
    if scale != 1.0:
        h, w = image.shape[:2]
        new_size = (max(1, round(w * scale)), max(1, round(h * scale)))
        result = np.array(Image.fromarray(image).resize(new_size, Image.Resampling.LANCZOS))

    if blur_sigma > 0:
        blurred = ndimage.gaussian_filter(
            result.astype(np.float32), sigma=(blur_sigma, blur_sigma, 0), mode='nearest'
        )
        result = np.clip(blurred, 0, 255).round().astype(np.uint8)

    return result
