"""
Textures: decoded images that can be sampled during rendering.

A texture stores its texels as sRGB bytes and decodes them to linear
Color on lookup. All blending happens in linear space.
"""

import logging

import numpy as np

from .color import Color
from .decoder import TextureLoadError, decode_rgb8
from .gamma import SRGB_TO_LINEAR, decode_bytes

logger = logging.getLogger(__name__)


def error_description(err: TextureLoadError) -> str:
    """Short human-readable form of a load error."""
    return f"error #{err.cause}"


def _clamp01(x: float) -> float:
    if not x > 0.0:  # also NaN
        return 0.0
    if x > 1.0:
        return 1.0
    return x


def _lerp(a: Color, b: Color, t: float) -> Color:
    return a.scale(1.0 - t).add(b.scale(t))


class Texture:
    """
    An immutable RGB texture held in memory.

    Texels are stored row-major, 3 gamma-encoded bytes each. Use
    load() to decode one from a file, at() to read a texel and
    sample() to read a blended color at a continuous position.
    """

    __slots__ = ("_width", "_height", "_data")

    def __init__(self, width: int, height: int, data: bytes):
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid texture size {width}x{height}")
        if len(data) != width * height * 3:
            raise ValueError(
                f"Buffer holds {len(data)} bytes, "
                f"{width}x{height} RGB needs {width * height * 3}"
            )
        self._width = width
        self._height = height
        self._data = bytes(data)

    @classmethod
    def load(cls, source) -> "Texture":
        """
        Load a texture from an image file.

        The image is assumed to be in the sRGB colorspace.

        Args:
            source: Path, raw bytes or binary file object

        Raises:
            TextureLoadError: If the image cannot be decoded
        """
        width, height, data = decode_rgb8(source)
        logger.debug("loaded texture %dx%d", width, height)
        return cls(width, height, data)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Texture":
        """
        Build a texture from sRGB pixels.

        Args:
            arr: uint8 array, shape (H, W, 3), RGB
        """
        arr = np.asarray(arr)
        if arr.ndim != 3 or arr.shape[2] != 3:
            raise ValueError(f"Expected (H, W, 3) array, got shape {arr.shape}")
        h, w = arr.shape[:2]
        return cls(w, h, np.ascontiguousarray(arr, dtype=np.uint8).tobytes())

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def data(self) -> bytes:
        return self._data

    def at(self, x: int, y: int) -> Color:
        """Color of the texel at (x, y), in pixels."""
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(
                f"texel ({x}, {y}) outside {self._width}x{self._height} texture"
            )
        idx = 3 * (x + y * self._width)
        data = self._data
        return Color(
            float(SRGB_TO_LINEAR[data[idx]]),
            float(SRGB_TO_LINEAR[data[idx + 1]]),
            float(SRGB_TO_LINEAR[data[idx + 2]]),
        )

    def sample(self, u: float, v: float) -> Color:
        """
        Bilinearly blended color at (u, v).

        u and v span [0, 1] across the texture and are clamped to it.
        Along each axis the last texel is repeated, so sampling never
        extrapolates past the border.
        """
        x = _clamp01(u) * (self._width - 1)
        y = _clamp01(v) * (self._height - 1)

        x0 = int(x)
        x1 = min(x0 + 1, self._width - 1)
        fx = x - x0

        y0 = int(y)
        y1 = min(y0 + 1, self._height - 1)
        fy = y - y0

        top = _lerp(self.at(x0, y0), self.at(x1, y0), fx)
        bottom = _lerp(self.at(x0, y1), self.at(x1, y1), fx)
        return _lerp(top, bottom, fy)

    def to_linear(self) -> np.ndarray:
        """Whole texture decoded to linear float64, shape (H, W, 3)."""
        raw = np.frombuffer(self._data, dtype=np.uint8)
        return decode_bytes(raw).reshape(self._height, self._width, 3)

    def __repr__(self) -> str:
        return f"Texture({self._width}x{self._height})"
