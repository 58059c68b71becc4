"""
Image loading and saving with OpenCV.

Reads go through a scoped file read + cv2.imdecode and writes through
cv2.imencode + a plain file write, so non-ASCII paths work and OS errors
surface as DecodeError / EncodeError instead of a silent None/False.
"""

import contextlib
import logging
from pathlib import Path
from typing import Union

import cv2
import numpy as np

from .errors import DecodeError, EncodeError

logger = logging.getLogger(__name__)


def load_image(path: Union[str, Path]) -> np.ndarray:
    """
    Load and decode an image, keeping alpha channel and bit depth.

    Raises:
        DecodeError: If the file cannot be read or is not a supported image.
    """
    path = Path(path)
    try:
        with open(path, 'rb') as f:
            buffer = np.frombuffer(f.read(), dtype=np.uint8)
    except OSError as e:
        raise DecodeError(f"Cannot read {path}: {e}") from e

    if buffer.size == 0:
        raise DecodeError(f"Empty file: {path}")

    try:
        image = cv2.imdecode(buffer, cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise DecodeError(f"Cannot decode {path}: {e}") from e
    if image is None:
        raise DecodeError(f"Not a supported image: {path}")
    return image


def save_image(image: np.ndarray, path: Union[str, Path]) -> Path:
    """
    Encode an image in the format implied by the path suffix and write it.

    Returns:
        The path written.

    Raises:
        EncodeError: If the suffix is unsupported, encoding fails, or the write fails.
    """
    path = Path(path)
    if not path.suffix:
        raise EncodeError(f"No file extension to infer output format: {path}")

    suffix = path.suffix.lower()
    channels = 1 if image.ndim == 2 else image.shape[2]
    layout = f"{channels}-channel {image.dtype}"
    try:
        ok, encoded = cv2.imencode(suffix, image)
    except cv2.error as e:
        raise EncodeError(f"'{suffix}' encoder cannot write {layout} image to {path}: {e}") from e
    if not ok:
        raise EncodeError(f"'{suffix}' encoder rejected {layout} image for {path}")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'wb') as f:
            f.write(encoded.tobytes())
    except OSError as e:
        with contextlib.suppress(OSError):
            path.unlink()
        raise EncodeError(f"Cannot write {path}: {e}") from e

    logger.debug(f"Saved image to {path}")
    return path
