"""
Shared pytest fixtures for cobb tests.

Provides an in-memory directory and a scripted operator so the review
flow can be driven without a terminal or real files.
"""

from typing import Optional, Sequence

import pytest

from cobb.protocol import Entry
from cobb.types import Command, Record


class MemoryDirectory:
    """
    In-memory corpus directory.

    ``files`` maps name to text. Names in ``fail_read`` / ``fail_write``
    raise OSError to simulate I/O failures.
    """

    def __init__(self, files: Optional[dict[str, str]] = None, *, granted: bool = True):
        self.files: dict[str, str] = dict(files or {})
        self.subdirs: list[str] = []
        self.granted = granted
        self.grant_on_request = granted
        self.fail_read: set[str] = set()
        self.fail_write: set[str] = set()
        self.writes: list[str] = []
        self.permission_requests = 0

    def list_entries(self) -> list[Entry]:
        entries = [Entry(name, "file") for name in sorted(self.files)]
        entries += [Entry(name, "directory") for name in self.subdirs]
        return entries

    def read_text(self, name: str) -> str:
        if name in self.fail_read:
            raise OSError(f"simulated read failure: {name}")
        if name not in self.files:
            raise FileNotFoundError(name)
        return self.files[name]

    def write_text(self, name: str, text: str, *, create: bool = True) -> None:
        if name in self.fail_write:
            raise OSError(f"simulated write failure: {name}")
        if not create and name not in self.files:
            raise FileNotFoundError(name)
        self.files[name] = text
        self.writes.append(name)

    def query_permission(self, mode: str = "readwrite") -> bool:
        return self.granted

    def request_permission(self, mode: str = "readwrite") -> bool:
        self.permission_requests += 1
        self.granted = self.grant_on_request
        return self.granted


class ScriptedOperator:
    """Operator that replays queued answers and records what it was shown."""

    def __init__(
        self,
        scope: Optional[str] = "",
        commands: Sequence[Command] = (),
        new_tag_names: Sequence[Optional[str]] = (),
        confirm: bool = True,
    ):
        self.scope = scope
        self.commands = list(commands)
        self.new_tag_names = list(new_tag_names)
        self.confirm = confirm
        self.notices: list[str] = []
        self.rendered: list[tuple] = []
        self.completed = 0
        self.scope_prompts = 0

    def prompt_scope(self) -> Optional[str]:
        self.scope_prompts += 1
        return self.scope

    def prompt_new_tag_name(self) -> Optional[str]:
        return self.new_tag_names.pop(0) if self.new_tag_names else None

    def confirm_hide(self, record: Record) -> bool:
        return self.confirm

    def notify(self, message: str) -> None:
        self.notices.append(message)

    def render_record(self, record, pending_tags, vocabulary, position, total) -> None:
        self.rendered.append((record.index, list(pending_tags), list(vocabulary), position, total))

    def render_mission_complete(self) -> None:
        self.completed += 1

    def read_command(self) -> Optional[Command]:
        return self.commands.pop(0) if self.commands else None


def make_block(index, timestamp="", tags=(), content="body", source="web", char_count="4"):
    """Text of one record block in shard format."""
    return "\n".join([
        f"Index: {index}",
        f"Timestamp: {timestamp}",
        f"Source: {source}",
        f"Tags: {', '.join(tags)}",
        f"CharCount: {char_count}",
        "---",
        content,
    ])


def make_shard(*blocks: str, separator: str = "=" * 40) -> str:
    return f"\n{separator}\n".join(blocks)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep config, settings and logs out of the real home directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("COBB_CONFIG_DIR", str(config_dir))
    return config_dir


@pytest.fixture
def memory_dir():
    """Two shards, one hidden record, one stray non-shard file."""
    return MemoryDirectory({
        "2021.txt": make_shard(
            make_block("1-2021", "2021-03-01", ["a"], "first"),
            make_block("2-2021", "2021-07-15", [], "second"),
        ),
        "2022.txt": make_shard(
            make_block("1-2022", "2022-01-05", ["b", "a"], "third"),
            make_block("2-2022", "2022-12-30", ["隱藏貼文"], "hidden one"),
            make_block("3-2022", "2022-12-31", [], "fourth"),
        ),
        "notes.md": "not a shard",
    })
