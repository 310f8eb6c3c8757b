# texsample/export.py
import logging

import cv2
import numpy as np

from .gamma import encode_array

logger = logging.getLogger(__name__)


def new_row_buffer(width: int) -> bytearray:
    """Zeroed BGR row buffer for `width` pixels."""
    return bytearray(width * 3)


def encode_row(colors, buffer=None) -> bytearray:
    """
    Encode a row of linear colors into sRGB BGR bytes.

    Args:
        colors: sequence of Color
        buffer: row buffer to fill; a new one is made if None

    Returns:
        The filled buffer
    """
    if buffer is None:
        buffer = new_row_buffer(len(colors))
    for i, c in enumerate(colors):
        c.write_encoded_bgr(buffer, i)
    return buffer


def encode_image(rows, bottom_up: bool = False) -> np.ndarray:
    """
    Encode rows of linear colors into a BGR image.

    Args:
        rows: sequence of rows, each a sequence of Color, top row first
        bottom_up: store the last row first (BMP row order)

    Returns:
        uint8 array, shape (H, W, 3), BGR
    """
    rows = list(rows)
    if not rows:
        raise ValueError("No rows to encode")
    width = len(rows[0])
    out = np.zeros((len(rows), width, 3), dtype=np.uint8)
    for y, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(f"Row {y} has {len(row)} pixels, expected {width}")
        # write through the numpy row; same layout as a row buffer
        encode_row(row, out[y].reshape(-1))
    if bottom_up:
        out = np.flip(out, axis=0).copy()
    return out


def linear_to_bgr_u8(img_linear: np.ndarray) -> np.ndarray:
    """
    Linear RGB float (H, W, 3) -> sRGB BGR uint8 (H, W, 3).

    Each channel is encoded exactly as Color.write_encoded_bgr does.
    """
    img_linear = np.asarray(img_linear, dtype=np.float64)
    u8 = encode_array(img_linear)
    return np.ascontiguousarray(u8[..., ::-1])


def colors_to_linear(rows) -> np.ndarray:
    """Rows of Color -> linear float64 array (H, W, 3), RGB."""
    return np.array([[c.as_tuple() for c in row] for row in rows], dtype=np.float64)


def save_bgr(bgr: np.ndarray, path: str, jpeg_quality: int = 95) -> None:
    """
    Save a BGR uint8 image. The format follows the file extension.
    Uses OpenCV.
    """
    params = [cv2.IMWRITE_JPEG_QUALITY, int(jpeg_quality)]
    if not cv2.imwrite(str(path), bgr, params):
        raise OSError(f"Failed to write image: {path}")
    logger.debug("wrote %s (%dx%d)", path, bgr.shape[1], bgr.shape[0])


def save_colors(rows, path: str, jpeg_quality: int = 95) -> None:
    """Encode rows of Color and save them as an image file."""
    save_bgr(encode_image(rows), path, jpeg_quality=jpeg_quality)
