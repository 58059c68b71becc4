"""
Tests for image loading and saving.
"""

import numpy as np
import pytest

from dataset_prep.errors import DecodeError, EncodeError
from dataset_prep.image_io import load_image, save_image

from .fixtures import make_image


def test_png_is_lossless(tmp_path, image):
    path = save_image(image, tmp_path / "sub" / "img.png")
    assert path.exists()
    np.testing.assert_array_equal(load_image(path), image)


def test_keeps_alpha_channel(tmp_path):
    rgba = make_image(channels=4)
    loaded = load_image(save_image(rgba, tmp_path / "alpha.png"))
    assert loaded.shape == rgba.shape


def test_non_ascii_path(tmp_path, image):
    path = save_image(image, tmp_path / "кошка" / "изображение.png")
    np.testing.assert_array_equal(load_image(path), image)


def test_decode_errors(tmp_path):
    garbage = tmp_path / "corrupt.png"
    garbage.write_bytes(b"definitely not a png")
    with pytest.raises(DecodeError):
        load_image(garbage)

    empty = tmp_path / "empty.jpg"
    empty.write_bytes(b"")
    with pytest.raises(DecodeError):
        load_image(empty)

    with pytest.raises(DecodeError):
        load_image(tmp_path / "missing.png")


def test_encode_errors(tmp_path, image):
    with pytest.raises(EncodeError):
        save_image(image, tmp_path / "img.unknownext")
    with pytest.raises(EncodeError):
        save_image(image, tmp_path / "no_suffix")

    blocker = tmp_path / "blocked"
    blocker.write_text("a file where a directory should be")
    with pytest.raises(EncodeError):
        save_image(image, blocker / "img.png")


def test_encode_error_names_format_and_layout(tmp_path):
    rgba = make_image(channels=4)
    with pytest.raises(EncodeError) as exc:
        save_image(rgba, tmp_path / "img.unknownext")
    message = str(exc.value)
    assert "'.unknownext'" in message
    assert "4-channel uint8" in message
    assert not (tmp_path / "img.unknownext").exists()
