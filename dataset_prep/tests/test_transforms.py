"""
Tests for the transform engine: resize -> rotate -> flip.
"""

import numpy as np
import pytest

from dataset_prep.config import FlipMode, TransformSpec
from dataset_prep.errors import TransformError
from dataset_prep.image_io import load_image, save_image
from dataset_prep.transforms import (
    FlipTransform,
    ResizeTransform,
    RotateTransform,
    TransformEngine,
)

from .fixtures import make_image


def apply(image, **spec):
    return TransformEngine(TransformSpec(**spec)).apply(image)


class TestComponents:
    """Tests for individual transform wrappers."""

    def test_names(self):
        assert ResizeTransform(64, 32).name == "resize(64x32)"
        assert RotateTransform(270).name == "rotate(270)"
        assert FlipTransform(FlipMode.BOTH).name == "flip(both)"

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            ResizeTransform(0, 10)
        with pytest.raises(ValueError):
            RotateTransform(45)

    def test_flip_none_has_no_ops(self):
        assert FlipTransform(FlipMode.NONE).get_albumentations_transforms() == []

    def test_engine_order(self):
        engine = TransformEngine(TransformSpec(resize=(8, 8), rotate=90, flip=FlipMode.VERTICAL))
        assert engine.name == "resize(8x8) >> rotate(90) >> flip(vertical)"
        assert TransformEngine(TransformSpec()).name == "identity"


class TestResize:
    """Resize stretches to exact dimensions."""

    @pytest.mark.parametrize("source_shape", [(48, 32), (7, 300), (256, 256), (1, 1)])
    def test_exact_dimensions(self, source_shape):
        image = make_image(*source_shape)
        out = apply(image, resize=(64, 40))
        assert out.shape == (40, 64, 3)
        assert out.dtype == image.dtype

    def test_dimensions_survive_encode_decode(self, tmp_path, image):
        out = apply(image, resize=(17, 23))
        path = save_image(out, tmp_path / "resized.jpg")
        decoded = load_image(path)
        assert decoded.shape[:2] == (23, 17)

    def test_grayscale_and_alpha(self):
        gray = apply(make_image(20, 10, channels=1), resize=(5, 6))
        assert gray.shape[:2] == (6, 5)
        rgba = apply(make_image(20, 10, channels=4), resize=(5, 6))
        assert rgba.shape == (6, 5, 4)


class TestRotate:
    """Rotation is a clockwise, lossless pixel permutation."""

    @pytest.mark.parametrize("angle,k", [(90, -1), (180, 2), (270, 1)])
    def test_matches_rot90(self, image, angle, k):
        out = apply(image, rotate=angle)
        np.testing.assert_array_equal(out, np.rot90(image, k=k))

    def test_90_swaps_dimensions(self, image):
        out = apply(image, rotate=90)
        assert out.shape == (image.shape[1], image.shape[0], 3)

    def test_clockwise_corner(self):
        image = np.zeros((2, 3), dtype=np.uint8)
        image[0, 0] = 255  # top-left
        out = apply(image, rotate=90)
        assert out.shape[:2] == (3, 2)
        assert out[0, -1] == 255  # top-left moves to top-right

    def test_four_quarter_turns_are_identity(self, image):
        out = image
        for _ in range(4):
            out = apply(out, rotate=90)
        np.testing.assert_array_equal(out, image)

    def test_four_quarter_turns_through_png(self, tmp_path, image):
        path = tmp_path / "r.png"
        current = image
        for _ in range(4):
            save_image(apply(current, rotate=90), path)
            current = load_image(path)
        np.testing.assert_array_equal(current, image)


class TestFlip:
    """Flip mirrors along one or both axes."""

    def test_horizontal(self, image):
        np.testing.assert_array_equal(apply(image, flip=FlipMode.HORIZONTAL), image[:, ::-1])

    def test_vertical(self, image):
        np.testing.assert_array_equal(apply(image, flip=FlipMode.VERTICAL), image[::-1, :])

    def test_horizontal_twice_is_identity(self, image):
        once = apply(image, flip=FlipMode.HORIZONTAL)
        np.testing.assert_array_equal(apply(once, flip=FlipMode.HORIZONTAL), image)

    def test_both_equals_composition_in_either_order(self, image):
        both = apply(image, flip=FlipMode.BOTH)
        h_then_v = apply(apply(image, flip=FlipMode.HORIZONTAL), flip=FlipMode.VERTICAL)
        v_then_h = apply(apply(image, flip=FlipMode.VERTICAL), flip=FlipMode.HORIZONTAL)
        np.testing.assert_array_equal(both, h_then_v)
        np.testing.assert_array_equal(both, v_then_h)


class TestEngine:
    """Tests for TransformEngine behavior."""

    def test_resize_happens_before_rotate(self, image):
        out = apply(image, resize=(40, 20), rotate=90)
        # resized to 40 wide x 20 high, then turned: 20 wide x 40 high
        assert out.shape[:2] == (40, 20)

    def test_rotate_happens_before_flip(self, image):
        out = apply(image, rotate=90, flip=FlipMode.HORIZONTAL)
        expected = np.rot90(image, k=-1)[:, ::-1]
        np.testing.assert_array_equal(out, expected)

    def test_does_not_mutate_input(self, image):
        original = image.copy()
        apply(image, resize=(10, 10), rotate=180, flip=FlipMode.BOTH)
        np.testing.assert_array_equal(image, original)

    @pytest.mark.parametrize("spec", [
        {},
        {"flip": FlipMode.HORIZONTAL},
        {"rotate": 180},
    ])
    def test_returns_new_buffer(self, image, spec):
        out = apply(image, **spec)
        assert not np.may_share_memory(out, image)
        out[...] = 0
        assert image.any()

    def test_unsupported_dtype_raises_transform_error(self):
        image = np.ones((20, 30), dtype=np.int32)
        with pytest.raises(TransformError, match="int32"):
            apply(image, resize=(16, 16))
