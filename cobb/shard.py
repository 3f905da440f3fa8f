"""
Save/upsert: write one edited record back into its year's shard.

The shard is re-read from disk rather than rebuilt from the in-memory
working set, so records outside the current mission are never lost.
"""

import logging
from typing import Iterable

from . import codec
from .errors import FileOperationError
from .protocol import DirectoryProtocol
from .types import DEFAULT_EXTENSION, Record, shard_name

logger = logging.getLogger(__name__)


def upsert(records: list[Record], record: Record) -> list[Record]:
    """
    Replace the record with the same index in place, or append and re-sort.

    An update keeps its position in the shard; a new index puts the whole
    shard back into index order. Mutates and returns ``records``.
    """
    for i, existing in enumerate(records):
        if existing.index == record.index:
            records[i] = record
            return records
    records.append(record)
    records.sort(key=codec.sort_key)
    return records


def save_record(
    directory: DirectoryProtocol,
    record: Record,
    new_tags: Iterable[str],
    extension: str = DEFAULT_EXTENSION,
) -> str:
    """
    Set ``record.tags`` to ``new_tags`` (sorted) and rewrite its shard.

    The tag change on ``record`` stays applied even if the write fails;
    the in-memory record may then disagree with disk until a retry succeeds.

    Returns:
        The shard filename written.

    Raises:
        MalformedIndexError: If the index has no year segment (nothing changed).
        FileOperationError: If reading, decoding or writing the shard failed.
    """
    name = shard_name(record.index, extension)
    record.tags = sorted(set(new_tags))

    try:
        try:
            text = directory.read_text(name)
        except FileNotFoundError:
            text = ""  # new shard
        shard_records = codec.decode(text)
        upsert(shard_records, record)
        directory.write_text(name, codec.encode(shard_records), create=True)
    except Exception as e:
        logger.warning("Failed to save %s to %s: %s", record.index, name, e)
        raise FileOperationError(name, e) from e

    logger.info("Saved %s to %s", record.index, name)
    return name
