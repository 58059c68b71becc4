"""
Manifest Builder - records, thread-safe accumulation and JSON serialization.

Manifest schema (JSON array, one object per written image):

    {"class index": 0, "filepaths": "out/cat/1.png", "labels": "cat", "data set": "train"}
"""

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from .errors import ConfigError, WriteError

logger = logging.getLogger(__name__)

FIELD_CLASS_INDEX = "class index"
FIELD_FILEPATH = "filepaths"
FIELD_LABEL = "labels"
FIELD_DATASET = "data set"


@dataclass(frozen=True)
class ManifestRecord:
    """One successfully transformed image."""
    class_index: int
    filepath: str  # output path of the written image
    label: str  # class name
    dataset: str  # constant dataset label, e.g. "train"

    def to_dict(self) -> Dict[str, Any]:
        return {
            FIELD_CLASS_INDEX: self.class_index,
            FIELD_FILEPATH: self.filepath,
            FIELD_LABEL: self.label,
            FIELD_DATASET: self.dataset,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ManifestRecord':
        try:
            record = cls(
                class_index=int(data[FIELD_CLASS_INDEX]),
                filepath=str(data[FIELD_FILEPATH]),
                label=str(data[FIELD_LABEL]),
                dataset=str(data[FIELD_DATASET]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigError(f"Invalid manifest record {data!r}: {e}") from e
        if record.class_index < 0:
            raise ConfigError(f"Negative class index in manifest record {data!r}")
        return record


class ManifestAccumulator:
    """
    Lock-protected collection of records shared by pipeline workers.

    Created per run and passed explicitly to workers. At most one record
    is kept per output filepath.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._records: List[ManifestRecord] = []
        self._filepaths = set()

    def add(self, record: ManifestRecord) -> None:
        """
        Append a record.

        Raises:
            ValueError: If a record for the same filepath was already added.
        """
        with self._lock:
            if record.filepath in self._filepaths:
                raise ValueError(f"Duplicate manifest record for {record.filepath}")
            self._filepaths.add(record.filepath)
            self._records.append(record)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def drain(self) -> List[ManifestRecord]:
        """Return all records sorted by (class_index, filepath) and empty the accumulator."""
        with self._lock:
            records = sorted(self._records, key=lambda r: (r.class_index, r.filepath))
            self._records = []
            self._filepaths = set()
        return records


def write_manifest(records: List[ManifestRecord], path: Union[str, Path]) -> Path:
    """
    Serialize records as a pretty-printed JSON array.

    Raises:
        WriteError: If the manifest file cannot be written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            json.dump([r.to_dict() for r in records], f, indent=2, ensure_ascii=False)
            f.write("\n")
    except OSError as e:
        raise WriteError(f"Failed to write manifest {path}: {e}") from e

    logger.info(f"Manifest with {len(records)} records written to {path}")
    return path


def read_manifest(path: Union[str, Path]) -> List[ManifestRecord]:
    """
    Load records from a manifest file.

    Raises:
        ConfigError: If the file is unreadable or not a manifest.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read manifest {path}: {e}") from e
    if not isinstance(data, list):
        raise ConfigError(f"Manifest {path} must be a JSON array")
    return [ManifestRecord.from_dict(item) for item in data]


def read_class_map(path: Union[str, Path]) -> Dict[str, int]:
    """Label -> class index from an existing manifest; the first occurrence of a label wins."""
    class_map: Dict[str, int] = {}
    for record in read_manifest(path):
        class_map.setdefault(record.label, record.class_index)
    return class_map
