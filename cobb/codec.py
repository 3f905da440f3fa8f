"""
Record file format: parse and serialize.

A shard is a sequence of blocks separated by a line of ``=`` characters.
Each block has ``Key: value`` headers, a ``---`` marker line, then content::

    Index: 1-2021
    Timestamp: 2021-03-04 10:00
    Source: web
    Tags: a, b
    CharCount: 120
    ---
    body text
    ========================================

Decoding tolerates separators of 40 or more ``=``; encoding always writes 40.
Content may not contain such a line, since it would split the record.
"""

import re
from typing import Iterable

from .types import Record

SEPARATOR = "=" * 40

# Lenient: older files carry longer separator lines
SEPARATOR_PATTERN = re.compile(r'^={40,}[ \t]*\r?$', re.MULTILINE)

CONTENT_MARKER = "---"

HEADER_FIELDS = {
    "Index": "index",
    "Timestamp": "timestamp",
    "Source": "source",
    "CharCount": "char_count",
}


def parse_tags(value: str) -> list[str]:
    """Split a comma-joined tag header, dropping blank entries."""
    return [t.strip() for t in value.split(",") if t.strip()]


def _decode_block(block: str) -> Record:
    record = Record()
    content_lines: list[str] = []
    in_content = False
    for line in block.strip().splitlines():
        if in_content:
            content_lines.append(line)
            continue
        if line.strip() == CONTENT_MARKER:
            in_content = True
            continue
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip()
        value = value.strip()
        if key == "Tags":
            record.tags = parse_tags(value)
        elif key in HEADER_FIELDS:
            setattr(record, HEADER_FIELDS[key], value)
        # Unknown keys are ignored
    record.content = "\n".join(content_lines).strip()
    return record


def decode(text: str) -> list[Record]:
    """Parse shard text into records, in file order. Blank blocks are skipped."""
    return [
        _decode_block(block)
        for block in SEPARATOR_PATTERN.split(text)
        if block.strip()
    ]


def _encode_block(record: Record) -> str:
    if SEPARATOR_PATTERN.search(record.content):
        raise ValueError(
            f"Content of {record.index or '(no index)'} has a line of 40+ '=', "
            "which would read back as a record separator"
        )
    return "\n".join([
        f"Index: {record.index}",
        f"Timestamp: {record.timestamp}",
        f"Source: {record.source}",
        f"Tags: {', '.join(record.tags)}",
        f"CharCount: {record.char_count}",
        CONTENT_MARKER,
        record.content.strip(),
    ])


def encode(records: Iterable[Record]) -> str:
    """Serialize records in the given order. No separator after the last block.

    Tag order is written as-is; callers wanting deterministic output sort first.
    Raises ValueError if a record's content holds a separator line.
    """
    return f"\n{SEPARATOR}\n".join(_encode_block(r) for r in records)


def sort_key(record: Record) -> str:
    """Ordinal sort key by index; records without an index sort first."""
    return record.index or ""
