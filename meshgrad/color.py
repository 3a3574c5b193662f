"""Color parsing, formatting and blending helpers."""
import re
from typing import Iterable, Sequence, Union

import numpy as np

from meshgrad.types import BLACK, ColorRGB

_RGB_PATTERN = re.compile(r"rgb\((\d+),\s*(\d+),\s*(\d+)\)")

ColorLike = Union[ColorRGB, str, Sequence[int], np.ndarray]


def _channel(value) -> int:
    return int(min(255, max(0, int(value))))


def parse_rgb(value: str) -> ColorRGB:
    """
    Parse a CSS ``rgb(r, g, b)`` string.

    Malformed input yields black instead of raising.

    Args:
        value: Color string

    Returns:
        Parsed color
    """
    match = _RGB_PATTERN.search(value) if isinstance(value, str) else None
    if not match:
        return BLACK
    return ColorRGB(*(_channel(match.group(i)) for i in range(1, 4)))


def rgb_to_string(color: ColorRGB) -> str:
    return color.to_string()


def to_hex(color: ColorRGB) -> str:
    return color.to_hex()


def as_color(value: ColorLike) -> ColorRGB:
    """
    Coerce whatever a pixel source returned into a ColorRGB.

    Accepts ColorRGB, ``rgb(...)`` strings and RGB/RGBA sequences or arrays.
    Anything that cannot be read as a color becomes black.
    """
    if isinstance(value, ColorRGB):
        return value
    if isinstance(value, str):
        return parse_rgb(value)
    try:
        r, g, b = value[0], value[1], value[2]
        return ColorRGB(_channel(r), _channel(g), _channel(b))
    except (TypeError, IndexError, ValueError):
        return BLACK


def color_distance(a: ColorRGB, b: ColorRGB) -> float:
    return a.distance(b)


def luminance(color: ColorRGB) -> float:
    return color.luminance


def blend_colors(colors: Iterable[ColorRGB]) -> ColorRGB:
    """
    Component-wise mean of colors, rounded to integers.

    Halves round up; an empty input blends to black.
    """
    channels = np.array([(c.r, c.g, c.b) for c in colors], dtype=np.float64)
    if len(channels) == 0:
        return BLACK
    mean = np.floor(channels.mean(axis=0) + 0.5).astype(int)
    return ColorRGB(int(mean[0]), int(mean[1]), int(mean[2]))
