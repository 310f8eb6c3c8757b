"""
Linear light color.

A Color holds three float64 channels (red, green, blue) in linear
light. Channels are not clamped: sums and products may leave [0, 1]
freely, only the byte export functions clamp.
"""

from dataclasses import dataclass
from numbers import Real

import numpy as np

from .gamma import decode_byte, encode_linear


def _fdiv(a: float, b: float) -> float:
    # IEEE division: x/0 -> inf, 0/0 -> nan
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        return float(np.float64(a) / np.float64(b))


def _clamp_byte(val: float) -> int:
    x = val * 255.0
    if not x >= 0.0:  # negative or NaN
        return 0
    if x >= 255.0:
        return 255
    return int(x)


@dataclass(frozen=True)
class Color:
    r: float
    g: float
    b: float

    @classmethod
    def from_linear(cls, r: float, g: float, b: float) -> "Color":
        """Color from linear components, no clamping."""
        return cls(float(r), float(g), float(b))

    @classmethod
    def from_encoded(cls, r: int, g: int, b: int) -> "Color":
        """Color from sRGB bytes."""
        return cls(decode_byte(r), decode_byte(g), decode_byte(b))

    # ---------- Componentwise arithmetic ----------

    def add(self, other: "Color") -> "Color":
        return Color(self.r + other.r, self.g + other.g, self.b + other.b)

    def sub(self, other: "Color") -> "Color":
        return Color(self.r - other.r, self.g - other.g, self.b - other.b)

    def mul(self, other: "Color") -> "Color":
        return Color(self.r * other.r, self.g * other.g, self.b * other.b)

    def div(self, other: "Color") -> "Color":
        return Color(_fdiv(self.r, other.r), _fdiv(self.g, other.g), _fdiv(self.b, other.b))

    def scale(self, k: float) -> "Color":
        return Color(self.r * k, self.g * k, self.b * k)

    def div_scalar(self, k: float) -> "Color":
        return Color(_fdiv(self.r, k), _fdiv(self.g, k), _fdiv(self.b, k))

    def __add__(self, other):
        if not isinstance(other, Color):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other):
        if not isinstance(other, Color):
            return NotImplemented
        return self.sub(other)

    def __mul__(self, other):
        if isinstance(other, Color):
            return self.mul(other)
        if isinstance(other, Real):
            return self.scale(float(other))
        return NotImplemented

    def __rmul__(self, other):
        if isinstance(other, Real):
            return self.scale(float(other))
        return NotImplemented

    def __truediv__(self, other):
        if isinstance(other, Color):
            return self.div(other)
        if isinstance(other, Real):
            return self.div_scalar(float(other))
        return NotImplemented

    # ---------- Export ----------

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.r, self.g, self.b)

    def to_clamped_bytes_rgb(self) -> tuple[int, int, int]:
        """
        RGB components as bytes, for writing an image.

        Each channel is scaled by 255, clamped to [0, 255] and
        truncated (not rounded): 0.5 -> 127.
        """
        return (_clamp_byte(self.r), _clamp_byte(self.g), _clamp_byte(self.b))

    def to_clamped_bytes_bgr(self) -> tuple[int, int, int]:
        """Same as to_clamped_bytes_rgb, in BGR order."""
        return (_clamp_byte(self.b), _clamp_byte(self.g), _clamp_byte(self.r))

    def write_encoded_bgr(self, buffer, index: int) -> None:
        """
        Write this color as sRGB bytes to pixel `index` of a row buffer.

        Args:
            buffer: mutable byte buffer (bytearray, memoryview or uint8
                    numpy array), at least 3 * (index + 1) long
            index: pixel index within the row
        """
        i = index * 3
        if index < 0 or i + 3 > len(buffer):
            raise IndexError(
                f"pixel {index} out of range for buffer of {len(buffer)} bytes"
            )
        buffer[i] = encode_linear(self.b)
        buffer[i + 1] = encode_linear(self.g)
        buffer[i + 2] = encode_linear(self.r)

    def significance(self) -> float:
        """Sum of the three channels."""
        return self.r + self.g + self.b


BLACK = Color(0.0, 0.0, 0.0)
