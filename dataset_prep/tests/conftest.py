"""
Shared fixtures for dataset_prep tests.

dataset_prep/
├── config.py
├── errors.py
├── image_io.py
├── indexer.py
├── manifest.py
├── pipeline.py
├── transforms.py
├── walker.py
└── tests/
    ├── conftest.py
    ├── fixtures.py
    └── test_*.py
"""

import pytest

from .fixtures import make_image, write_image


@pytest.fixture
def image():
    return make_image()


@pytest.fixture
def dataset_tree(tmp_path):
    """
    Input tree with classes A (2 images) and B (1 image), plus files the
    walker must ignore.
    """
    root = tmp_path / "input"
    write_image(root / "A" / "a1.png", make_image(100, 80, seed=1))
    write_image(root / "A" / "a2.jpg", make_image(30, 50, seed=2))
    write_image(root / "B" / "b1.png", make_image(64, 128, seed=3))

    (root / "A" / "notes.txt").write_text("not an image")
    write_image(root / "A" / "nested" / "deep.png", make_image(seed=4))
    write_image(root / ".hidden" / "h.png", make_image(seed=5))
    return root
