"""
Color encoding and texture sampling for image synthesis.

This package contains:
- sRGB gamma codec (bit-exact byte <-> linear tables)
- Linear light Color with componentwise arithmetic
- Image decoding (Pillow, rawpy for camera RAW)
- Textures with texel lookup and bilinear sampling
- BGR row buffers and image export
"""

from .color import BLACK, Color
from .decoder import TextureLoadError
from .gamma import decode_byte, encode_linear
from .texture import Texture, error_description

__version__ = "1.0.0"
