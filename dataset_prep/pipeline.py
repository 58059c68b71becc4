"""
Dataset Pipeline - Walks, transforms and records a class-labeled image tree.

Supports:
- Deterministic class indexing from sorted subdirectory names
- Parallel load -> transform -> save with num_workers threads
- Per-image failures skipped without aborting the run
- Detailed statistics
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .config import ProcessingConfig
from .errors import (
    ConfigError,
    DecodeError,
    EmptyInputError,
    EncodeError,
    InputError,
    TransformError,
)
from .image_io import load_image, save_image
from .indexer import ClassIndex
from .manifest import ManifestAccumulator, ManifestRecord, read_class_map, write_manifest
from .transforms import TransformEngine
from .walker import ImageTask, list_classes, plan_tasks

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskOutcome:
    """Tagged result of one task: a record on success, a reason when skipped."""
    task: ImageTask
    record: Optional[ManifestRecord] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.record is not None

    @classmethod
    def success(cls, task: ImageTask, record: ManifestRecord) -> 'TaskOutcome':
        return cls(task=task, record=record)

    @classmethod
    def skipped(cls, task: ImageTask, reason: str) -> 'TaskOutcome':
        return cls(task=task, reason=reason)


@dataclass
class ProcessingResult:
    """Result from a pipeline run."""
    manifest_path: Optional[Path] = None
    records: List[ManifestRecord] = field(default_factory=list)
    class_index: Dict[str, int] = field(default_factory=dict)
    images_processed: int = 0
    images_skipped: int = 0
    elapsed_seconds: float = 0.0
    errors: List[str] = field(default_factory=list)

    @property
    def average_seconds_per_image(self) -> float:
        if self.images_processed == 0:
            return 0.0
        return self.elapsed_seconds / self.images_processed


class DatasetPipeline:
    """
    Directory-to-manifest pipeline.

    Example:
        config = ProcessingConfig(
            input_dir="raw/",
            output_dir="prepared/",
            transform=TransformSpec(resize=(224, 224), flip=FlipMode.HORIZONTAL),
            num_workers=8,
        )
        result = DatasetPipeline(config).run()
    """

    def __init__(self, config: ProcessingConfig):
        self.config = config
        self.engine = TransformEngine(config.transform)

    def _output_inside_input(self) -> Optional[Path]:
        """Output root, when it is nested in the input root, so the walker can skip it."""
        input_root = self.config.input_dir.resolve()
        output_root = self.config.output_dir.resolve()
        if output_root == input_root:
            raise InputError(f"Output directory must differ from input directory: {input_root}")
        if input_root in output_root.parents:
            return self.config.output_dir
        return None

    def _load_seed(self) -> Optional[Dict[str, int]]:
        """Existing label -> index mapping when reuse_indices is enabled."""
        if not self.config.reuse_indices:
            return None
        existing = self.config.input_dir / self.config.manifest_name
        if not existing.exists():
            logger.info(f"No existing manifest at {existing}, assigning fresh indices")
            return None
        seed = read_class_map(existing)
        logger.info(f"Reusing {len(seed)} class indices from {existing}")
        return seed

    def build_class_index(self, exclude: Optional[Path] = None) -> ClassIndex:
        """
        Discover classes under the input root and assign indices.

        Raises:
            InputError: If the input root is missing or not a directory.
            EmptyInputError: If no class directory holds a recognized image.
        """
        names = list_classes(self.config.input_dir, self.config.extensions, exclude)
        try:
            class_index = ClassIndex.from_names(names, seed=self._load_seed())
        except ValueError as e:
            raise ConfigError(f"Existing manifest has conflicting class indices: {e}") from e
        logger.info(f"Found {len(class_index)} classes: {class_index.as_dict()}")
        return class_index

    def _process_single(self, task: ImageTask, accumulator: ManifestAccumulator) -> TaskOutcome:
        """Load, transform and save one image, then record it."""
        output_path = self.config.output_dir / task.relative_output_path
        try:
            image = load_image(task.source_path)
            transformed = self.engine.apply(image)
            save_image(transformed, output_path)
        except (DecodeError, TransformError, EncodeError) as e:
            logger.error(f"Skipping {task.source_path}: {e}")
            return TaskOutcome.skipped(task, str(e))
        except Exception as e:
            logger.exception(f"Unexpected failure on {task.source_path}, skipping")
            return TaskOutcome.skipped(task, f"{type(e).__name__}: {e}")

        record = ManifestRecord(
            class_index=task.class_entry.index,
            filepath=str(output_path),
            label=task.class_entry.name,
            dataset=self.config.dataset_label,
        )
        accumulator.add(record)
        return TaskOutcome.success(task, record)

    def process_tasks(self, tasks: List[ImageTask], accumulator: ManifestAccumulator) -> List[TaskOutcome]:
        """Run every task; blocks until all have completed or been skipped."""
        outcomes: List[TaskOutcome] = []

        if self.config.num_workers > 1 and len(tasks) > 1:
            with ThreadPoolExecutor(max_workers=self.config.num_workers) as executor:
                futures = {
                    executor.submit(self._process_single, task, accumulator): task
                    for task in tasks
                }
                for future in as_completed(futures):
                    outcomes.append(future.result())
        else:
            for task in tasks:
                outcomes.append(self._process_single(task, accumulator))

        return outcomes

    def run(self) -> ProcessingResult:
        """
        Run the full pipeline: walk, index, transform, write manifest.

        Returns:
            ProcessingResult with records and timing statistics.

        Raises:
            InputError: If the input root is unusable.
            ConfigError: If an existing manifest cannot be reused.
            WriteError: If the manifest cannot be written.
        """
        start = time.perf_counter()
        exclude = self._output_inside_input()
        logger.info(
            f"Processing {self.config.input_dir} -> {self.config.output_dir} "
            f"({self.engine.name}, {self.config.num_workers} workers)"
        )

        result = ProcessingResult()
        accumulator = ManifestAccumulator()

        try:
            class_index = self.build_class_index(exclude)
        except EmptyInputError:
            logger.warning(f"No images found under {self.config.input_dir}, writing empty manifest")
            class_index = None

        if class_index is not None:
            result.class_index = class_index.as_dict()
            tasks = list(plan_tasks(self.config.input_dir, class_index, self.config.extensions, exclude))
            logger.info(f"Planned {len(tasks)} images")

            for outcome in self.process_tasks(tasks, accumulator):
                if outcome.ok:
                    result.images_processed += 1
                else:
                    result.images_skipped += 1
                    result.errors.append(f"{outcome.task.source_path}: {outcome.reason}")

        result.records = accumulator.drain()
        result.manifest_path = write_manifest(result.records, self.config.manifest_path)
        result.elapsed_seconds = time.perf_counter() - start

        logger.info(
            f"Processed {result.images_processed} images "
            f"({result.images_skipped} skipped) in {result.elapsed_seconds:.3f}s"
        )
        return result
