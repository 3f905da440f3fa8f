"""
Data types for the record corpus.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional

from .errors import MalformedIndexError


# Reserved tag that removes a record from future missions without deleting it
HIDDEN_TAG = "隱藏貼文"

DEFAULT_EXTENSION = ".txt"

# Year segment of an index: second "-"-delimited component, digits only
_YEAR_RE = re.compile(r'^\d+$')


@dataclass
class Record:
    """
    One tagged unit of content.

    ``index`` is the identity key (``<sequence>-<year>[-...]``). A block
    decoded without an ``Index:`` header carries an empty index.
    """
    index: str = ""
    timestamp: str = ""
    source: str = ""
    char_count: str = ""
    tags: list[str] = field(default_factory=list)
    content: str = ""

    @property
    def has_index(self) -> bool:
        return bool(self.index)


def index_year(index: str) -> str:
    """Return the year component of a record index.

    Raises:
        MalformedIndexError: If the index has no second segment or the
            segment is not a run of digits.
    """
    parts = (index or "").split("-")
    if len(parts) < 2 or not _YEAR_RE.match(parts[1]):
        raise MalformedIndexError(index)
    return parts[1]


def shard_name(index: str, extension: str = DEFAULT_EXTENSION) -> str:
    """Shard filename for a record index, e.g. ``5-2022`` -> ``2022.txt``."""
    return f"{index_year(index)}{extension}"


class TagSet:
    """
    Insertion-ordered set of tag names.

    Equality is set equality; ``sorted()`` gives the on-disk order.
    """

    def __init__(self, tags: Optional[Iterable[str]] = None):
        self._tags: dict[str, None] = dict.fromkeys(tags or ())

    def add(self, tag: str) -> None:
        self._tags[tag] = None

    def discard(self, tag: str) -> None:
        self._tags.pop(tag, None)

    def toggle(self, tag: str) -> bool:
        """Flip membership of ``tag``. Returns True if it is now present."""
        if tag in self._tags:
            del self._tags[tag]
            return False
        self._tags[tag] = None
        return True

    def sorted(self) -> list[str]:
        return sorted(self._tags)

    def copy(self) -> "TagSet":
        return TagSet(self._tags)

    def __contains__(self, tag: object) -> bool:
        return tag in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._tags))

    def __len__(self) -> int:
        return len(self._tags)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TagSet):
            return self._tags.keys() == other._tags.keys()
        if isinstance(other, (set, frozenset, list, tuple)):
            return self._tags.keys() == set(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"TagSet({list(self._tags)!r})"


class NavigationResult(str, Enum):
    """Outcome of a navigate step."""
    MOVED = "moved"
    AT_FIRST = "first"
    AT_LAST = "last"


class Action(str, Enum):
    """Operator commands read by the review loop."""
    NEXT = "next"
    PREV = "prev"
    ADD = "add"
    REMOVE = "remove"
    TOGGLE = "toggle"
    NEW = "new"
    HIDE = "hide"
    QUIT = "quit"


@dataclass
class Command:
    """A single operator command, with an optional tag argument."""
    action: Action
    tag: Optional[str] = None
