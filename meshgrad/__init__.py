"""meshgrad: raster images to layered, editable mesh gradient vectors."""
from meshgrad.types import (
    ColorRGB,
    Point2D,
    Triangle,
    MoodSettings,
    MeshConfig,
    Scene,
    ShapeRecord,
    SolidFill,
    LinearGradientFill,
    RadialGradientFill,
    VectorizationError,
    InvalidDimensionsError,
    PixelSourceError,
)
from meshgrad.pixel_sampler import PixelSampler
from meshgrad.mood import mood_to_settings, mood_to_min_distance
from meshgrad.scene import compose_scene

__version__ = "0.1.0"

__all__ = [
    "ColorRGB",
    "Point2D",
    "Triangle",
    "MoodSettings",
    "MeshConfig",
    "Scene",
    "ShapeRecord",
    "SolidFill",
    "LinearGradientFill",
    "RadialGradientFill",
    "VectorizationError",
    "InvalidDimensionsError",
    "PixelSourceError",
    "PixelSampler",
    "mood_to_settings",
    "mood_to_min_distance",
    "compose_scene",
]
