"""Color parsing and comparison helpers."""
import math
from typing import Optional, Sequence, Tuple, Union

from PIL import ImageColor

RGB = Tuple[int, int, int]
ColorKey = Union[str, Tuple[int, int, int, int]]

DEFAULT_COLOR = "#000000"


def parse_color(value: Optional[str]) -> Optional[Tuple[int, int, int, int]]:
    """
    Parse a paint value into an RGBA tuple.

    Accepts hex (#rgb, #rrggbb, with optional alpha), rgb()/rgba(), hsl() and
    named colors. Returns None for values that are not plain colors, such as
    ``none``, ``currentColor`` or ``url(#id)``.
    """
    if not value:
        return None
    try:
        parsed = ImageColor.getrgb(value.strip())
    except ValueError:
        return None
    if len(parsed) == 3:
        return (parsed[0], parsed[1], parsed[2], 255)
    return tuple(parsed[:4])


def parse_rgb(value: Optional[str]) -> Optional[RGB]:
    """Parse a paint value into an RGB tuple, dropping alpha."""
    rgba = parse_color(value)
    if rgba is None:
        return None
    return rgba[:3]


def color_key(value: Optional[str], canonical: bool = True) -> ColorKey:
    """
    Key used to decide whether two paint values are the same color.

    With ``canonical`` the key is the numeric RGBA tuple, so ``#f00`` and
    ``rgb(255, 0, 0)`` compare equal. Values that are not plain colors, or
    any value when ``canonical`` is False, key on the exact string.
    """
    if value is None:
        return DEFAULT_COLOR
    if canonical:
        rgba = parse_color(value)
        if rgba is not None:
            return rgba
    return value


def format_rgb(rgb: Sequence[float]) -> str:
    """Format an RGB triple as an ``rgb(r, g, b)`` string."""
    r, g, b = [int(min(255, max(0, c))) for c in rgb[:3]]
    return f"rgb({r}, {g}, {b})"


def color_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """Euclidean distance in RGB space."""
    return math.sqrt(
        (a[0] - b[0]) ** 2 + (a[1] - b[1]) ** 2 + (a[2] - b[2]) ** 2
    )


def is_paint(value: Optional[str]) -> bool:
    """True for a present paint value other than ``none``."""
    return bool(value) and value.strip().lower() != "none"
