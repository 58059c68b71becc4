"""
Dataset Prep - Batch image transforms with a training manifest

Walks a class-labeled directory tree (<root>/<class>/<images>), applies
resize -> rotate -> flip to every image in parallel, mirrors the tree in the
output directory and writes training_data.json describing the result.

Example usage:
    from dataset_prep import DatasetPipeline, ProcessingConfig, TransformSpec, FlipMode

    config = ProcessingConfig(
        input_dir="raw/",
        output_dir="prepared/",
        transform=TransformSpec(resize=(64, 64), rotate=90, flip=FlipMode.HORIZONTAL),
        dataset_label="train",
    )
    result = DatasetPipeline(config).run()
    print(f"{result.images_processed} images -> {result.manifest_path}")
"""

__version__ = "0.1.0"

# Configuration
from .config import (
    FlipMode,
    ProcessingConfig,
    TransformSpec,
    parse_flip,
    parse_resize,
    parse_rotate,
)

# Errors
from .errors import (
    ConfigError,
    DatasetPrepError,
    DecodeError,
    EmptyInputError,
    EncodeError,
    InputError,
    TransformError,
    WriteError,
)

# Components
from .image_io import load_image, save_image
from .indexer import ClassEntry, ClassIndex
from .manifest import (
    ManifestAccumulator,
    ManifestRecord,
    read_class_map,
    read_manifest,
    write_manifest,
)
from .pipeline import DatasetPipeline, ProcessingResult, TaskOutcome
from .transforms import (
    BaseTransform,
    FlipTransform,
    ResizeTransform,
    RotateTransform,
    TransformEngine,
)
from .walker import ImageTask, iter_images, list_classes, plan_tasks

__all__ = [
    # Version
    "__version__",
    # Configs
    "FlipMode",
    "ProcessingConfig",
    "TransformSpec",
    "parse_flip",
    "parse_resize",
    "parse_rotate",
    # Errors
    "ConfigError",
    "DatasetPrepError",
    "DecodeError",
    "EmptyInputError",
    "EncodeError",
    "InputError",
    "TransformError",
    "WriteError",
    # Image I/O
    "load_image",
    "save_image",
    # Indexing and walking
    "ClassEntry",
    "ClassIndex",
    "ImageTask",
    "iter_images",
    "list_classes",
    "plan_tasks",
    # Manifest
    "ManifestAccumulator",
    "ManifestRecord",
    "read_class_map",
    "read_manifest",
    "write_manifest",
    # Transforms
    "BaseTransform",
    "FlipTransform",
    "ResizeTransform",
    "RotateTransform",
    "TransformEngine",
    # Pipeline
    "DatasetPipeline",
    "ProcessingResult",
    "TaskOutcome",
]
