"""
Navigation and edit session over a mission's working set.

States::

    UNSTARTED --start(non-empty)--> ACTIVE --hide(last record)--> EXHAUSTED

The session holds the cursor and the pending (unsaved) tags for the record
under it. Navigating or hiding saves first, then moves.
"""

import logging
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from .errors import EmptyMissionError, ReservedTagError, SaveError, SessionStateError
from .types import HIDDEN_TAG, NavigationResult, Record, TagSet
from .vocabulary import Vocabulary

logger = logging.getLogger(__name__)

Saver = Callable[[Record, Iterable[str]], Any]


class SessionState(str, Enum):
    UNSTARTED = "unstarted"
    ACTIVE = "active"
    EXHAUSTED = "exhausted"


class EditSession:
    """
    Cursor plus pending tags over a list of records.

    Args:
        saver: Called as ``saver(record, tags)`` to persist a record;
            normally ``shard.save_record`` bound to a directory.
        vocabulary: Shared vocabulary, extended by ``define_new_tag``.
        on_save_error: Receives any SaveError raised by ``saver``. The
            session carries on after reporting it.
    """

    def __init__(
        self,
        saver: Saver,
        vocabulary: Optional[Vocabulary] = None,
        *,
        hidden_tag: str = HIDDEN_TAG,
        on_save_error: Optional[Callable[[SaveError], None]] = None,
    ):
        self._saver = saver
        self.vocabulary = vocabulary if vocabulary is not None else Vocabulary(hidden_tag)
        self._hidden_tag = hidden_tag
        self._on_save_error = on_save_error
        self.records: list[Record] = []
        self.current_index = 0
        self.pending_tags = TagSet()
        self.state = SessionState.UNSTARTED

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def current(self) -> Record:
        self._require_active()
        return self.records[self.current_index]

    @property
    def dirty(self) -> bool:
        """True if pending tags differ (as a set) from the stored tags."""
        if self.state != SessionState.ACTIVE:
            return False
        return self.pending_tags != set(self.current.tags)

    def _require_active(self) -> None:
        if self.state != SessionState.ACTIVE:
            raise SessionStateError(f"Session is {self.state.value}, not active")

    def start(self, working_set: list[Record], scope: str = "") -> Record:
        """Begin a mission at the first record.

        Raises:
            EmptyMissionError: If ``working_set`` is empty; state is unchanged.
        """
        if not working_set:
            raise EmptyMissionError(scope)
        self.records = working_set
        self.state = SessionState.ACTIVE
        return self.display_at(0)

    def display_at(self, i: int) -> Record:
        """Move the cursor to ``i`` (clamped) and reseed pending tags."""
        self._require_active()
        i = max(0, min(i, len(self.records) - 1))
        self.current_index = i
        record = self.records[i]
        self.pending_tags = TagSet(record.tags)
        return record

    # -------------------------------------------------------------------------
    # Tag edits (in memory only)
    # -------------------------------------------------------------------------

    def check_assignable(self, tag: str) -> None:
        """Raise ReservedTagError for the hidden marker; ``hide`` alone sets it."""
        if tag == self._hidden_tag:
            raise ReservedTagError(tag)

    def add_tag(self, tag: str) -> None:
        self._require_active()
        self.check_assignable(tag)
        self.pending_tags.add(tag)

    def remove_tag(self, tag: str) -> None:
        self._require_active()
        self.pending_tags.discard(tag)

    def toggle_tag(self, tag: str) -> bool:
        self._require_active()
        self.check_assignable(tag)
        return self.pending_tags.toggle(tag)

    def define_new_tag(self, name: str) -> Optional[str]:
        """Add a new tag to the vocabulary and to the pending tags.

        Blank names are ignored (returns None).

        Raises:
            DuplicateTagError: If the name is already known; nothing changes.
            ReservedTagError: If the name is the hidden marker.
        """
        self._require_active()
        tag = (name or "").strip()
        if not tag:
            return None
        self.check_assignable(tag)
        self.vocabulary.add_new(tag)
        self.pending_tags.add(tag)
        return tag

    # -------------------------------------------------------------------------
    # Persisting moves
    # -------------------------------------------------------------------------

    def save_current(self, force: bool = False) -> bool:
        """Save the current record if dirty (or if ``force``).

        Returns True if the save succeeded, False if skipped or failed.
        """
        self._require_active()
        if not force and not self.dirty:
            return False
        record = self.current
        try:
            self._saver(record, self.pending_tags.sorted())
        except SaveError as e:
            logger.warning("Save failed for %s: %s", record.index, e)
            if self._on_save_error is not None:
                self._on_save_error(e)
            return False
        return True

    def navigate(self, direction: int) -> NavigationResult:
        """Save if dirty, then step the cursor by ``direction`` (-1 or +1).

        At either end the cursor stays put and the boundary is returned.
        """
        if direction not in (-1, 1):
            raise ValueError(f"direction must be -1 or +1, got {direction!r}")
        self._require_active()
        self.save_current()
        new_index = self.current_index + direction
        if 0 <= new_index < len(self.records):
            self.display_at(new_index)
            return NavigationResult.MOVED
        return NavigationResult.AT_LAST if direction > 0 else NavigationResult.AT_FIRST

    def hide(self) -> Optional[Record]:
        """Mark the current record hidden, save, and drop it from the set.

        Returns the record now under the cursor, or None when the working
        set is exhausted.
        """
        self._require_active()
        hidden = self.current
        self.pending_tags.add(self._hidden_tag)
        self.save_current(force=True)
        del self.records[self.current_index]
        logger.info("Hid %s", hidden.index)
        if not self.records:
            self.state = SessionState.EXHAUSTED
            self.pending_tags = TagSet()
            return None
        return self.display_at(self.current_index)
