"""Core types for the svgrefine post-processing pipeline."""
from dataclasses import dataclass, field, replace
from typing import Optional, List, Tuple
from enum import Enum, auto
import numpy as np


class CommandKind(Enum):
    """Kind of an absolute path command."""
    MOVE_TO = auto()
    LINE_TO = auto()
    CUBIC_TO = auto()
    QUAD_TO = auto()
    ARC_TO = auto()
    CLOSE = auto()


@dataclass
class Point:
    """2D point with float coordinates."""
    x: float
    y: float


@dataclass
class PathCommandPoint:
    """Polyline vertex produced by flattening path commands."""
    x: float
    y: float
    kind: CommandKind = CommandKind.LINE_TO


@dataclass
class PathCommand:
    """Absolute path command.

    ``points`` holds the control points followed by the endpoint. Arcs keep
    their radii, rotation and flags in ``arc`` as (rx, ry, rotation,
    large_arc, sweep).
    ``repeated`` marks a curve or arc segment that continues the previous
    command letter through implicit repetition.
    """
    kind: CommandKind
    points: List[Point] = field(default_factory=list)
    arc: Optional[Tuple[float, float, float, float, float]] = None
    repeated: bool = False

    @property
    def end(self) -> Optional[Point]:
        if self.kind is CommandKind.CLOSE or not self.points:
            return None
        return self.points[-1]


EdgeMap = np.ndarray


@dataclass
class ImageBuffer:
    """RGBA pixel buffer, rows first, 4 bytes per pixel."""
    width: int
    height: int
    pixels: np.ndarray  # (height, width, 4) uint8

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ImageBufferError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        pixels = np.asarray(self.pixels)
        if pixels.size != self.width * self.height * 4:
            raise ImageBufferError(
                f"Expected {self.width * self.height * 4} values, got {pixels.size}"
            )
        self.pixels = pixels.reshape(self.height, self.width, 4).astype(np.uint8, copy=False)

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "ImageBuffer":
        """Build a buffer from flat RGBA bytes."""
        return cls(width, height, np.frombuffer(bytes(data), dtype=np.uint8))

    @classmethod
    def blank(cls, width: int, height: int) -> "ImageBuffer":
        """Fully transparent buffer."""
        return cls(width, height, np.zeros((height, width, 4), dtype=np.uint8))

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def copy(self) -> "ImageBuffer":
        return ImageBuffer(self.width, self.height, self.pixels.copy())


@dataclass(frozen=True)
class SubjectExtractOptions:
    """Background removal settings."""
    threshold: float = 30.0
    detect_edges: bool = True
    keep_corners: bool = True


@dataclass(frozen=True)
class EdgeDetectOptions:
    """Edge detection settings."""
    mode: str = "sobel"  # "sobel" or "canny"
    threshold: float = 50.0
    low_threshold: float = 50.0
    high_threshold: float = 100.0
    iterative: bool = False  # multi-pass hysteresis for canny


@dataclass(frozen=True)
class PipelineOptions:
    """Configuration threaded through a single conversion."""
    # Simplification
    simplify_tolerance: float = 0.0

    # Smoothing, in percent (0-100)
    smoothness: float = 0.0

    # Merging
    path_merge: bool = False

    # Small region removal
    remove_small_threshold: float = 0.0
    remove_small_mode: str = "dimension"  # "area", "length", "dimension"

    # Outline
    outline_width: float = 0.0

    # Grouping
    path_group: bool = False
    group_by_color: bool = True
    group_by_proximity: bool = False
    proximity_threshold: float = 50.0
    transitive_proximity: bool = True

    # Color quantization
    color_quantization_levels: Optional[int] = None
    color_quantization_mode: str = "reduce"  # "reduce" or "channels"
    canonical_colors: bool = True

    # Display
    preview_mode: str = "normal"  # "normal", "fill-only", "outline-only", "wireframe"
    preview_outline_width: float = 2.0

    # Raster pre-processing
    subject_extract: Optional[SubjectExtractOptions] = None
    edge_detect: Optional[EdgeDetectOptions] = None

    # Output
    precision: int = 3  # Decimal places for path coordinates

    def replace(self, **changes) -> "PipelineOptions":
        """Return a copy with the given fields changed."""
        return replace(self, **changes)


@dataclass
class Stats:
    """Counters describing a piece of markup."""
    path_count: int = 0
    node_count: int = 0
    color_count: int = 0
    byte_size: int = 0


@dataclass
class PipelineResult:
    """Result of one conversion."""
    svg: str
    preview_svg: str
    stats: Stats


@dataclass
class BatchResult:
    """Outcome of one batch item."""
    file_name: str
    svg: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SvgRefineError(Exception):
    """Base exception for svgrefine errors."""
    pass


class MarkupError(SvgRefineError):
    """Exception raised when vector markup cannot be parsed."""
    pass


class ImageBufferError(SvgRefineError):
    """Exception raised for malformed pixel buffers."""
    pass


class TracingError(SvgRefineError):
    """Exception raised by the tracing engine."""
    pass


class ExportError(SvgRefineError):
    """Exception raised while exporting markup."""
    pass
