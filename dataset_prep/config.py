"""
Configuration dataclasses for dataset preparation.
Type-safe configuration for the transform engine and the pipeline run.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple, Union

import yaml

from .errors import ConfigError

DEFAULT_EXTENSIONS = frozenset({'.jpg', '.jpeg', '.png', '.bmp', '.tif', '.tiff', '.webp'})
DEFAULT_MANIFEST_NAME = "training_data.json"
DEFAULT_DATASET_LABEL = "train"
VALID_ROTATIONS = (90, 180, 270)


class FlipMode(Enum):
    """Mirror applied after resize and rotate."""
    NONE = "none"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
    BOTH = "both"

    @property
    def horizontal(self) -> bool:
        return self in (FlipMode.HORIZONTAL, FlipMode.BOTH)

    @property
    def vertical(self) -> bool:
        return self in (FlipMode.VERTICAL, FlipMode.BOTH)


def parse_resize(value: Union[str, Iterable[int], None]) -> Optional[Tuple[int, int]]:
    """
    Parse resize dimensions.

    Args:
        value: "WIDTHxHEIGHT" string (e.g. "800x600"), a (width, height) pair,
            or None/"" to skip resizing.

    Returns:
        (width, height) tuple or None.

    Raises:
        ConfigError: If the format is invalid or a dimension is not positive.
    """
    if value is None or value == "":
        return None

    if isinstance(value, str):
        parts = value.strip().lower().split('x')
        if len(parts) != 2:
            raise ConfigError(f"Invalid resize format '{value}', expected WIDTHxHEIGHT")
        try:
            width, height = int(parts[0]), int(parts[1])
        except ValueError:
            raise ConfigError(f"Invalid resize format '{value}', expected WIDTHxHEIGHT")
    else:
        try:
            width, height = (int(v) for v in value)
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid resize value {value!r}, expected [width, height]")

    if width <= 0 or height <= 0:
        raise ConfigError(f"Resize dimensions must be positive, got {width}x{height}")
    return width, height


def parse_rotate(value: Union[str, int, None]) -> Optional[int]:
    """Parse a rotate angle; None or "" means no rotation."""
    if value is None or value == "":
        return None
    try:
        angle = int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Invalid rotate angle {value!r}, expected one of {VALID_ROTATIONS}")
    if angle not in VALID_ROTATIONS:
        raise ConfigError(f"Invalid rotate angle {angle}, expected one of {VALID_ROTATIONS}")
    return angle


def parse_flip(value: Union[str, FlipMode, None]) -> FlipMode:
    """Parse a flip mode name (case-insensitive); None means no flip."""
    if value is None:
        return FlipMode.NONE
    if isinstance(value, FlipMode):
        return value
    try:
        return FlipMode(str(value).strip().lower())
    except ValueError:
        options = ", ".join(m.value for m in FlipMode)
        raise ConfigError(f"Invalid flip mode {value!r}, expected one of: {options}")


def normalize_extensions(extensions: Union[str, Iterable[str]]) -> FrozenSet[str]:
    """
    Lowercase extensions and make sure each starts with a dot.
    A single string is read as a comma-separated list ("png,jpg").
    """
    if isinstance(extensions, str):
        extensions = extensions.split(',')
    normalized = set()
    for ext in extensions:
        if not isinstance(ext, str):
            raise ConfigError(f"Invalid image extension {ext!r}, expected a string")
        ext = ext.strip().lower()
        if not ext:
            continue
        normalized.add(ext if ext.startswith('.') else f".{ext}")
    if not normalized:
        raise ConfigError("At least one image extension is required")
    return frozenset(normalized)


@dataclass(frozen=True)
class TransformSpec:
    """
    Geometric transforms applied to every image, in the order
    resize -> rotate -> flip. Shared read-only across workers.
    """
    resize: Optional[Tuple[int, int]] = None  # (width, height)
    rotate: Optional[int] = None  # clockwise degrees: 90, 180 or 270
    flip: FlipMode = FlipMode.NONE

    def __post_init__(self):
        if self.resize is not None:
            object.__setattr__(self, "resize", parse_resize(self.resize))
        if self.rotate is not None:
            object.__setattr__(self, "rotate", parse_rotate(self.rotate))
        object.__setattr__(self, "flip", parse_flip(self.flip))

    @property
    def is_identity(self) -> bool:
        return self.resize is None and self.rotate is None and self.flip is FlipMode.NONE


@dataclass
class ProcessingConfig:
    """Configuration for a single dataset preparation run."""
    input_dir: Path
    output_dir: Path
    transform: TransformSpec = field(default_factory=TransformSpec)
    dataset_label: str = DEFAULT_DATASET_LABEL  # "data set" value in every manifest record
    manifest_name: str = DEFAULT_MANIFEST_NAME
    extensions: FrozenSet[str] = DEFAULT_EXTENSIONS
    num_workers: Optional[int] = None  # defaults to os.cpu_count()
    reuse_indices: bool = False  # seed class indices from an existing manifest in input_dir

    _FIELDS = (
        "input_dir", "output_dir", "resize", "rotate", "flip", "dataset_label",
        "manifest_name", "extensions", "num_workers", "reuse_indices",
    )

    def __post_init__(self):
        self.input_dir = Path(self.input_dir)
        self.output_dir = Path(self.output_dir)
        self.extensions = normalize_extensions(self.extensions)

        # YAML turns 2024 into an int; the manifest field is always a string
        if isinstance(self.dataset_label, (int, float)) and not isinstance(self.dataset_label, bool):
            self.dataset_label = str(self.dataset_label)
        if not isinstance(self.dataset_label, str):
            raise ConfigError(f"dataset_label must be a string, got {self.dataset_label!r}")

        if self.num_workers is None:
            self.num_workers = os.cpu_count() or 1
        if not isinstance(self.num_workers, int) or isinstance(self.num_workers, bool):
            raise ConfigError(f"num_workers must be an integer, got {self.num_workers!r}")
        if self.num_workers < 1:
            raise ConfigError(f"num_workers must be >= 1, got {self.num_workers}")

        if not isinstance(self.reuse_indices, bool):
            raise ConfigError(f"reuse_indices must be true or false, got {self.reuse_indices!r}")
        if (
            not isinstance(self.manifest_name, str)
            or not self.manifest_name
            or Path(self.manifest_name).name != self.manifest_name
        ):
            raise ConfigError(f"Invalid manifest name {self.manifest_name!r}")

    @property
    def manifest_path(self) -> Path:
        return self.output_dir / self.manifest_name

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProcessingConfig':
        """Build a config from a flat dict, as found in a YAML file."""
        unknown = set(data) - set(cls._FIELDS)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(sorted(unknown))}")
        for key in ("input_dir", "output_dir"):
            if not data.get(key):
                raise ConfigError(f"Missing required config key: {key}")
            if not isinstance(data[key], (str, Path)):
                raise ConfigError(f"{key} must be a path string, got {data[key]!r}")

        transform = TransformSpec(
            resize=parse_resize(data.get("resize")),
            rotate=parse_rotate(data.get("rotate")),
            flip=parse_flip(data.get("flip")),
        )
        kwargs = {
            key: data[key]
            for key in ("dataset_label", "manifest_name", "extensions", "num_workers", "reuse_indices")
            if data.get(key) is not None
        }
        return cls(
            input_dir=data["input_dir"],
            output_dir=data["output_dir"],
            transform=transform,
            **kwargs,
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> 'ProcessingConfig':
        """
        Load a config from a YAML file.

        Raises:
            ConfigError: If the file is unreadable, malformed, or has unknown keys.
        """
        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config {path} must be a mapping, got {type(data).__name__}")
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        resize = self.transform.resize
        return {
            "input_dir": str(self.input_dir),
            "output_dir": str(self.output_dir),
            "resize": f"{resize[0]}x{resize[1]}" if resize else None,
            "rotate": self.transform.rotate,
            "flip": self.transform.flip.value,
            "dataset_label": self.dataset_label,
            "manifest_name": self.manifest_name,
            "extensions": sorted(self.extensions),
            "num_workers": self.num_workers,
            "reuse_indices": self.reuse_indices,
        }
