"""
Directory Walker - enumerate class subdirectories and their images.

Layout: <root>/<class_name>/<image files>, one level deep. Nested
directories, hidden entries and non-image files are ignored.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Iterator, List, Optional, Tuple, Union

from .config import DEFAULT_EXTENSIONS
from .errors import InputError
from .indexer import ClassEntry, ClassIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageTask:
    """One source image to transform and record."""
    source_path: Path
    class_entry: ClassEntry
    relative_output_path: Path  # <class_name>/<file name>


def _check_root(root: Path) -> None:
    if not root.exists():
        raise InputError(f"Input directory not found: {root}")
    if not root.is_dir():
        raise InputError(f"Input path is not a directory: {root}")


def _is_hidden(path: Path) -> bool:
    return path.name.startswith('.')


def _same_path(a: Path, b: Optional[Path]) -> bool:
    if b is None:
        return False
    return a.resolve() == b.resolve()


def _class_dirs(root: Path, exclude: Optional[Path]) -> List[Path]:
    """Immediate subdirectories of root, sorted by name."""
    try:
        entries = list(root.iterdir())
    except OSError as e:
        raise InputError(f"Cannot list input directory {root}: {e}") from e
    return sorted(
        (d for d in entries if d.is_dir() and not _is_hidden(d) and not _same_path(d, exclude)),
        key=lambda d: d.name,
    )


def _image_files(class_dir: Path, extensions: FrozenSet[str]) -> List[Path]:
    """Regular image files directly inside class_dir, sorted by name."""
    try:
        entries = list(class_dir.iterdir())
    except OSError as e:
        logger.error(f"Cannot list class directory {class_dir}: {e}")
        return []
    return sorted(
        (
            f for f in entries
            if f.is_file() and not _is_hidden(f) and f.suffix.lower() in extensions
        ),
        key=lambda f: f.name,
    )


def iter_images(
    root: Union[str, Path],
    extensions: FrozenSet[str] = DEFAULT_EXTENSIONS,
    exclude: Optional[Path] = None,
) -> Iterator[Tuple[str, Path]]:
    """
    Lazily yield (class_name, image_path) pairs, sorted by class then file name.

    Args:
        root: Input root directory.
        extensions: Lowercase suffixes (with dot) recognized as images.
        exclude: Directory to skip, e.g. an output root nested in the input root.

    Raises:
        InputError: If root does not exist or is not a directory.
    """
    root = Path(root)
    _check_root(root)
    for class_dir in _class_dirs(root, exclude):
        for image_path in _image_files(class_dir, extensions):
            yield class_dir.name, image_path


def list_classes(
    root: Union[str, Path],
    extensions: FrozenSet[str] = DEFAULT_EXTENSIONS,
    exclude: Optional[Path] = None,
) -> List[str]:
    """Sorted names of class directories that hold at least one image."""
    root = Path(root)
    _check_root(root)
    return [
        class_dir.name
        for class_dir in _class_dirs(root, exclude)
        if _image_files(class_dir, extensions)
    ]


def plan_tasks(
    root: Union[str, Path],
    class_index: ClassIndex,
    extensions: FrozenSet[str] = DEFAULT_EXTENSIONS,
    exclude: Optional[Path] = None,
) -> Iterator[ImageTask]:
    """Yield one ImageTask per image whose class is in class_index."""
    for class_name, image_path in iter_images(root, extensions, exclude):
        if class_name not in class_index:
            continue
        yield ImageTask(
            source_path=image_path,
            class_entry=class_index[class_name],
            relative_output_path=Path(class_name) / image_path.name,
        )
