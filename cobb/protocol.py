"""
Protocol definitions for the collaborators a review session talks to.

- DirectoryProtocol: the corpus directory (list, read, write, permissions)
- SettingsProtocol: remembers the last chosen directory between sessions
- OperatorProtocol: the person reviewing, via whatever front end
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from .types import Command, Record


@dataclass(frozen=True)
class Entry:
    """A directory entry: ``kind`` is ``"file"`` or ``"directory"``."""
    name: str
    kind: str


@runtime_checkable
class DirectoryProtocol(Protocol):
    """
    Access to the directory holding the shard files.

    Implemented by:
    - LocalDirectory (a directory on local disk)
    - MemoryDirectory (tests)
    """

    def list_entries(self) -> list[Entry]: ...

    def read_text(self, name: str) -> str:
        """Return file text. Raises FileNotFoundError if absent."""
        ...

    def write_text(self, name: str, text: str, *, create: bool = True) -> None:
        """Replace the file's whole content."""
        ...

    def query_permission(self, mode: str = "readwrite") -> bool: ...

    def request_permission(self, mode: str = "readwrite") -> bool: ...


@runtime_checkable
class SettingsProtocol(Protocol):
    """Key-value store persisted across sessions."""

    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...


@runtime_checkable
class OperatorProtocol(Protocol):
    """
    The front end driving a review.

    Prompts return None when the operator cancels.
    """

    def prompt_scope(self) -> Optional[str]: ...

    def prompt_new_tag_name(self) -> Optional[str]: ...

    def confirm_hide(self, record: Record) -> bool: ...

    def notify(self, message: str) -> None: ...

    def render_record(
        self,
        record: Record,
        pending_tags: Sequence[str],
        vocabulary: Sequence[str],
        position: int,
        total: int,
    ) -> None: ...

    def render_mission_complete(self) -> None: ...

    def read_command(self) -> Optional[Command]:
        """Next command; None means quit."""
        ...
