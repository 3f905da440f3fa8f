"""
Vocabulary: every tag name known across the loaded corpus.
"""

from typing import Iterable, Iterator

from .errors import DuplicateTagError
from .types import HIDDEN_TAG, Record


class Vocabulary:
    """Set of known tag names.

    Rebuilt wholesale on load, extended by ``add_new``, never shrunk.
    The hidden marker is kept internally but left out of ``assignable()``.
    """

    def __init__(self, hidden_tag: str = HIDDEN_TAG):
        self._tags: set[str] = set()
        self._hidden_tag = hidden_tag

    def rebuild(self, records: Iterable[Record]) -> None:
        self._tags.clear()
        for record in records:
            self._tags.update(record.tags)

    def add_new(self, tag: str) -> None:
        """Add a tag name. Raises DuplicateTagError on an exact match."""
        if tag in self._tags:
            raise DuplicateTagError(tag)
        self._tags.add(tag)

    def assignable(self) -> list[str]:
        """Sorted tag names offered to the operator (no hidden marker)."""
        return sorted(t for t in self._tags if t != self._hidden_tag)

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._tags))

    def __len__(self) -> int:
        return len(self._tags)
