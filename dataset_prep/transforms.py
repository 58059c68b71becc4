"""
Composable Transforms - Deterministic geometric operations.

Each transform wraps Albumentations transforms with p=1.0 and provides a
consistent interface. All transforms inherit from BaseTransform.

TransformEngine applies them in a fixed order: resize -> rotate -> flip.
Rotations are built from transpose and flips only, so they are lossless
pixel permutations.
"""

from abc import ABC, abstractmethod
from typing import List

import albumentations as A
import cv2
import numpy as np

from .config import FlipMode, TransformSpec, VALID_ROTATIONS
from .errors import TransformError

RESIZE_INTERPOLATION = cv2.INTER_LINEAR


class BaseTransform(ABC):
    """Base class for all transforms."""

    @abstractmethod
    def get_albumentations_transforms(self) -> List[A.BasicTransform]:
        """Return the underlying Albumentations transforms, in application order."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Transform name for logging."""
        pass


class ResizeTransform(BaseTransform):
    """Resize to exact (width, height), stretching to fit."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Resize dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height

    @property
    def name(self) -> str:
        return f"resize({self.width}x{self.height})"

    def get_albumentations_transforms(self) -> List[A.BasicTransform]:
        return [A.Resize(height=self.height, width=self.width, interpolation=RESIZE_INTERPOLATION, p=1.0)]


class RotateTransform(BaseTransform):
    """Clockwise rotation by a multiple of 90 degrees."""

    def __init__(self, angle: int):
        if angle not in VALID_ROTATIONS:
            raise ValueError(f"Invalid rotation angle: {angle}")
        self.angle = angle

    @property
    def name(self) -> str:
        return f"rotate({self.angle})"

    def get_albumentations_transforms(self) -> List[A.BasicTransform]:
        if self.angle == 90:
            return [A.Transpose(p=1.0), A.HorizontalFlip(p=1.0)]
        if self.angle == 180:
            return [A.HorizontalFlip(p=1.0), A.VerticalFlip(p=1.0)]
        return [A.Transpose(p=1.0), A.VerticalFlip(p=1.0)]


class FlipTransform(BaseTransform):
    """Horizontal and/or vertical mirror."""

    def __init__(self, mode: FlipMode = FlipMode.NONE):
        self.mode = mode

    @property
    def name(self) -> str:
        return f"flip({self.mode.value})"

    def get_albumentations_transforms(self) -> List[A.BasicTransform]:
        transforms = []
        if self.mode.horizontal:
            transforms.append(A.HorizontalFlip(p=1.0))
        if self.mode.vertical:
            transforms.append(A.VerticalFlip(p=1.0))
        return transforms


class TransformEngine:
    """
    Applies a TransformSpec to a single decoded image, independent of I/O.

    Example:
        engine = TransformEngine(TransformSpec(resize=(64, 64), rotate=90))
        out = engine.apply(image)
    """

    def __init__(self, spec: TransformSpec):
        self.spec = spec
        self.transforms = self._build_transforms(spec)

    @staticmethod
    def _build_transforms(spec: TransformSpec) -> List[BaseTransform]:
        transforms: List[BaseTransform] = []
        if spec.resize is not None:
            width, height = spec.resize
            transforms.append(ResizeTransform(width, height))
        if spec.rotate is not None:
            transforms.append(RotateTransform(spec.rotate))
        if spec.flip is not FlipMode.NONE:
            transforms.append(FlipTransform(spec.flip))
        return transforms

    @property
    def name(self) -> str:
        return " >> ".join(t.name for t in self.transforms) or "identity"

    def build(self) -> A.Compose:
        """Build a fresh Albumentations pipeline; one per call keeps workers independent."""
        alb_transforms = []
        for t in self.transforms:
            alb_transforms.extend(t.get_albumentations_transforms())
        return A.Compose(alb_transforms)

    def apply(self, image: np.ndarray) -> np.ndarray:
        """
        Apply resize -> rotate -> flip to an image.

        Args:
            image: HxW or HxWxC numpy array. Never modified.

        Returns:
            New contiguous numpy array with the transformed pixels.

        Raises:
            TransformError: If the image dtype or layout is not supported.
        """
        if not self.transforms:
            return image.copy()
        try:
            out = self.build()(image=image)['image']
        except (cv2.error, ValueError, TypeError) as e:
            raise TransformError(
                f"Cannot apply {self.name} to {image.dtype} image of shape {image.shape}: {e}"
            ) from e
        if out is image or np.may_share_memory(out, image):
            out = out.copy()
        return np.ascontiguousarray(out)
