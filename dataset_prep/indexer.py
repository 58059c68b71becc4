"""
Class Indexer - stable mapping from class directory name to integer index.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from .errors import EmptyInputError


@dataclass(frozen=True)
class ClassEntry:
    """A class (one input subdirectory) and its assigned index."""
    name: str
    index: int


class ClassIndex:
    """
    Read-only mapping of class name to ClassEntry.

    Without a seed, indices 0..N-1 follow sorted class-name order, so the
    same set of names always yields the same indices.

    Example:
        index = ClassIndex.from_names(["dog", "cat"])
        index["cat"].index  # -> 0
    """

    def __init__(self, entries: Iterable[ClassEntry]):
        self._entries: Dict[str, ClassEntry] = {}
        seen_indices = set()
        for entry in entries:
            if entry.name in self._entries:
                raise ValueError(f"Duplicate class name: {entry.name}")
            if entry.index < 0:
                raise ValueError(f"Negative class index {entry.index} for {entry.name}")
            if entry.index in seen_indices:
                raise ValueError(f"Duplicate class index: {entry.index}")
            self._entries[entry.name] = entry
            seen_indices.add(entry.index)

    @classmethod
    def from_names(
        cls,
        names: Iterable[str],
        seed: Optional[Mapping[str, int]] = None,
    ) -> 'ClassIndex':
        """
        Assign indices to class names.

        Args:
            names: Class names, in any order, duplicates allowed.
            seed: Optional label -> index mapping from a previous manifest.
                Seeded labels keep their index; new labels are appended in
                sorted order after the largest seeded index.

        Raises:
            EmptyInputError: If no class names are given.
        """
        distinct = sorted(set(names))
        if not distinct:
            raise EmptyInputError("No classes found")

        if not seed:
            return cls(ClassEntry(name, i) for i, name in enumerate(distinct))

        next_index = max(seed.values()) + 1
        entries: List[ClassEntry] = []
        for name in distinct:
            if name in seed:
                entries.append(ClassEntry(name, int(seed[name])))
            else:
                entries.append(ClassEntry(name, next_index))
                next_index += 1
        return cls(entries)

    def __getitem__(self, name: str) -> ClassEntry:
        return self._entries[name]

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ClassEntry]:
        return iter(sorted(self._entries.values(), key=lambda e: e.index))

    @property
    def names(self) -> List[str]:
        return [entry.name for entry in self]

    def as_dict(self) -> Dict[str, int]:
        return {entry.name: entry.index for entry in self}

    def __repr__(self) -> str:
        return f"ClassIndex({self.as_dict()})"
