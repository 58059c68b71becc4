"""Image builders shared by the test modules."""

from pathlib import Path

import cv2
import numpy as np


def make_image(height: int = 48, width: int = 32, channels: int = 3, seed: int = 0) -> np.ndarray:
    """Random uint8 image; channels=1 gives a 2-D grayscale array."""
    rng = np.random.default_rng(seed)
    shape = (height, width) if channels == 1 else (height, width, channels)
    return rng.integers(0, 256, shape, dtype=np.uint8)


def write_image(path: Path, image: np.ndarray) -> Path:
    """Encode by lowercase suffix and write, so any filename casing works."""
    ok, encoded = cv2.imencode(path.suffix.lower(), image)
    assert ok
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encoded.tobytes())
    return path
