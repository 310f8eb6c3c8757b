"""
Image decoding for textures.

Turns an image source into an 8-bit, gamma-encoded RGB raster:
(width, height, bytes), row-major, 3 bytes per texel.

Ordinary formats (PNG, JPEG, BMP, TIFF, ...) go through Pillow.
Camera RAW files (RAF, DNG, NEF, ARW, CR2, CR3) go through rawpy
(LibRaw), postprocessed to 8-bit sRGB.
"""

import io
import logging
from pathlib import Path

import numpy as np
import rawpy
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

RAW_EXTENSIONS = frozenset({".raf", ".dng", ".nef", ".arw", ".cr2", ".cr3"})


class TextureLoadError(Exception):
    """Raised when an image source cannot be decoded."""

    def __init__(self, cause):
        super().__init__(str(cause))
        self.cause = cause


def decode_rgb8(
    source,
    raw_use_camera_wb: bool = True,
) -> tuple[int, int, bytes]:
    """
    Decode an image source into an sRGB byte raster.

    Args:
        source: Path (str or Path), raw bytes, or binary file object
        raw_use_camera_wb: Apply the camera's white balance to RAW files

    Returns:
        (width, height, data) with len(data) == width * height * 3

    Raises:
        TextureLoadError: If the source cannot be opened or decoded
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = io.BytesIO(bytes(source))
    elif isinstance(source, (str, Path)):
        source = Path(source)
        if not source.exists():
            raise TextureLoadError(f"File not found: {source}")

    if _is_raw(source):
        rgb = _decode_raw(source, raw_use_camera_wb)
    else:
        rgb = _decode_pillow(source)

    height, width = rgb.shape[:2]
    logger.debug("decoded %s: %dx%d", source, width, height)
    return width, height, rgb.tobytes()


def _is_raw(source) -> bool:
    return isinstance(source, Path) and source.suffix.lower() in RAW_EXTENSIONS


def _decode_pillow(source) -> np.ndarray:
    try:
        with Image.open(source) as image:
            if image.mode == "I" or image.mode.startswith("I;16"):
                # 16-bit greyscale: keep the high byte
                grey = np.clip(np.asarray(image).astype(np.int64), 0, 65535) >> 8
                return _grey_to_rgb(grey.astype(np.uint8))
            if image.mode == "F":
                # float greyscale, nominal range [0, 1]
                grey = np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0) * 255.0
                return _grey_to_rgb(grey.astype(np.uint8))
            if image.mode in ("RGBA", "LA", "PA"):
                logger.warning("flattening %s image onto black", image.mode)
                # composite onto black, using alpha as the mask
                image = image.convert("RGBA")
                background = Image.new("RGB", image.size, (0, 0, 0))
                background.paste(image, (0, 0), image)
                image = background
            elif image.mode != "RGB":
                logger.debug("converting %s image to RGB", image.mode)
                image = image.convert("RGB")
            return np.asarray(image, dtype=np.uint8)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
        raise TextureLoadError(e) from e


def _grey_to_rgb(grey: np.ndarray) -> np.ndarray:
    return np.ascontiguousarray(np.repeat(grey[..., None], 3, axis=2))


def _decode_raw(path: Path, use_camera_wb: bool) -> np.ndarray:
    try:
        with rawpy.imread(str(path)) as raw:
            logger.debug("decoding RAW %s (%s sensor)", path,
                         "X-Trans" if _is_xtrans(raw) else "Bayer")
            # default output is sRGB primaries with a gamma curve
            rgb = raw.postprocess(
                demosaic_algorithm=rawpy.DemosaicAlgorithm.AHD,
                use_camera_wb=use_camera_wb,
                output_bps=8,
            )
            return np.ascontiguousarray(rgb, dtype=np.uint8)
    except rawpy.LibRawError as e:
        raise TextureLoadError(e) from e


def _is_xtrans(raw: rawpy.RawPy) -> bool:
    # X-Trans has a 6x6 color filter pattern, Bayer 2x2
    pattern = raw.raw_pattern
    return pattern is not None and pattern.shape == (6, 6)


if __name__ == "__main__":
    import sys

    if len(sys.argv) < 2:
        print("Usage: python -m texsample.decoder <image_file>")
        sys.exit(1)

    filepath = sys.argv[1]

    try:
        print(f"Decoding: {filepath}")
        width, height, data = decode_rgb8(filepath)
        print(f"Size: {width}×{height}")
        print(f"Bytes: {len(data)}")
        print("✓ Success!")

    except TextureLoadError as e:
        print(f"✗ Error: {e}")
        sys.exit(1)
