"""Core types for the mesh gradient pipeline."""
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import List, Optional, Tuple, Union
import math

import numpy as np


class FillKind(Enum):
    """Kinds of fill a shape can carry."""
    SOLID = auto()
    LINEAR = auto()
    RADIAL = auto()


class ShapeTier(Enum):
    """Classification tier of a triangle-derived shape."""
    PRIMARY = auto()
    DETAIL = auto()


@dataclass(frozen=True)
class Point2D:
    """2D point with float coordinates."""
    x: float
    y: float


@dataclass(frozen=True)
class ColorRGB:
    """8-bit RGB color."""
    r: int
    g: int
    b: int

    def distance(self, other: "ColorRGB") -> float:
        """Euclidean distance in RGB space."""
        dr = self.r - other.r
        dg = self.g - other.g
        db = self.b - other.b
        return math.sqrt(dr * dr + dg * dg + db * db)

    @property
    def luminance(self) -> float:
        return 0.299 * self.r + 0.587 * self.g + 0.114 * self.b

    def to_hex(self) -> str:
        return f"#{self.r:02x}{self.g:02x}{self.b:02x}"

    def to_string(self) -> str:
        return f"rgb({self.r}, {self.g}, {self.b})"


BLACK = ColorRGB(0, 0, 0)

# sqrt(255^2 * 3)
MAX_RGB_DISTANCE = 441.67


@dataclass(frozen=True)
class AttributedVertex:
    """Triangle vertex with its sampled color."""
    x: float
    y: float
    color: ColorRGB

    @property
    def point(self) -> Point2D:
        return Point2D(self.x, self.y)


@dataclass
class Triangle:
    """Mesh triangle with derived geometry and color attributes.

    Vertex order is the order produced by the triangulator and is not
    guaranteed to be counter-clockwise.
    """
    points: Tuple[AttributedVertex, AttributedVertex, AttributedVertex]
    centroid: Point2D
    area: float
    color_variance: float

    @property
    def colors(self) -> List[ColorRGB]:
        return [p.color for p in self.points]


@dataclass(frozen=True)
class DominantColorSample:
    """Grid sample used by the background gradient.

    ``position`` is in image-fraction coordinates ([0, 1] on both axes).
    """
    color: ColorRGB
    position: Point2D
    weight: float = 1.0


@dataclass(frozen=True)
class GradientDirection:
    """Gradient axis in image-fraction coordinates."""
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def magnitude(self) -> float:
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)


@dataclass
class BaseGradient:
    """Dominant colors plus the dark-to-light direction across the image."""
    colors: List[DominantColorSample]
    direction: GradientDirection

    @property
    def is_degenerate(self) -> bool:
        """True when every sample has the same color."""
        return self.direction.magnitude == 0.0


@dataclass(frozen=True)
class MoodSettings:
    """Shape styling parameters derived from the mood control."""
    path_smoothing: int          # Chaikin iterations, at least 1
    overlap_amount: float        # shape expansion factor
    shape_opacity: float
    adaptive_sensitivity: float  # how strongly variance shrinks spacing
    min_shape_scale: float
    merge_threshold: float       # normalized color distance for "similar"
    gradient_consistency: float  # 0 = per-shape, 1 = fully aligned
    base_gradient_opacity: float


# Fill descriptors

@dataclass(frozen=True)
class GradientStop:
    """Color stop, offset in [0, 1]."""
    offset: float
    color: ColorRGB


@dataclass(frozen=True)
class SolidFill:
    color: ColorRGB
    kind: FillKind = field(default=FillKind.SOLID, init=False)


@dataclass(frozen=True)
class LinearGradientFill:
    """Linear gradient with endpoints as fractions of the shape's bounding box."""
    stops: Tuple[GradientStop, ...]
    x1: float
    y1: float
    x2: float
    y2: float
    kind: FillKind = field(default=FillKind.LINEAR, init=False)


@dataclass(frozen=True)
class RadialGradientFill:
    """Radial gradient with center and radius in absolute pixels."""
    cx: float
    cy: float
    r: float
    stops: Tuple[GradientStop, ...]
    kind: FillKind = field(default=FillKind.RADIAL, init=False)


Fill = Union[SolidFill, LinearGradientFill, RadialGradientFill]


@dataclass(frozen=True)
class PathCommand:
    """One outline command.

    ``op`` is ``M`` or ``L`` (one point), ``C`` (two control points then the
    end point) or ``Z`` (no points). Coordinates are absolute pixels.
    """
    op: str
    points: Tuple[Point2D, ...] = ()


@dataclass
class ShapeRecord:
    """A filled outline in one scene layer."""
    commands: List[PathCommand]
    fill: Fill
    opacity: float
    tier: Optional[ShapeTier] = None


@dataclass
class Scene:
    """Three ordered layers: background, primary shapes, detail shapes."""
    width: int
    height: int
    background: Optional[ShapeRecord]
    primary: List[ShapeRecord] = field(default_factory=list)
    detail: List[ShapeRecord] = field(default_factory=list)
    settings: Optional[MoodSettings] = None

    @property
    def shape_count(self) -> int:
        return len(self.primary) + len(self.detail)

    def layers(self) -> List[Tuple[str, List[ShapeRecord]]]:
        """Layers in paint order, keyed by their group name."""
        background = [self.background] if self.background is not None else []
        return [
            ("Base-Gradient", background),
            ("Primary-Shapes", self.primary),
            ("Detail-Shapes", self.detail),
        ]


@dataclass
class MeshConfig:
    """Configuration for the mesh gradient pipeline."""
    # Poisson sampling
    max_attempts: int = 30
    min_distance_floor: float = 24.0

    # Triangulation
    super_triangle_scale: float = 20.0
    cull_ratio: float = 0.28

    # Randomness; None gives a different mesh on every run
    seed: Optional[int] = None

    # Input preprocessing
    smooth_input: bool = True
    input_scale: float = 1.0
    blur_sigma: float = 1.2

    # Output
    precision: int = 2  # Decimal places for SVG coordinates

    # Debug
    save_stages: Optional[Path] = None


@dataclass
class IngestResult:
    """Result from raster image ingestion."""
    image: np.ndarray  # (H, W, 3) uint8 sRGB
    original_path: str
    width: int
    height: int
    has_alpha: bool


class VectorizationError(Exception):
    """Base exception for vectorization errors."""
    pass


class InvalidDimensionsError(VectorizationError):
    """Raised when an image has zero or negative width or height."""
    pass


class PixelSourceError(VectorizationError):
    """Raised when the pixel source cannot service a sample request."""
    pass
