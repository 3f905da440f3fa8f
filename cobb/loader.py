"""
Corpus loading: read every shard in a directory into one sorted list.
"""

import logging

from . import codec
from .errors import DecodeSkipError
from .protocol import DirectoryProtocol
from .types import DEFAULT_EXTENSION, Record

logger = logging.getLogger(__name__)


def load_corpus(
    directory: DirectoryProtocol,
    extension: str = DEFAULT_EXTENSION,
) -> list[Record]:
    """
    Load all records from the shard files in ``directory``.

    Only plain files whose name ends with ``extension`` are read. A file
    that fails to read or decode is logged and skipped; the rest still load.

    Returns:
        Records from every shard, sorted by index (ordinal string order,
        so numeric sequences need zero-padding to sort numerically).
    """
    records: list[Record] = []
    skipped: list[DecodeSkipError] = []
    for entry in directory.list_entries():
        if entry.kind != "file" or not entry.name.endswith(extension):
            continue
        try:
            text = directory.read_text(entry.name)
            found = codec.decode(text)
        except Exception as e:
            skip = DecodeSkipError(entry.name, e)
            logger.warning("%s", skip)
            skipped.append(skip)
            continue
        logger.debug("Loaded %d records from %s", len(found), entry.name)
        records.extend(found)

    records.sort(key=codec.sort_key)
    logger.info(
        "Loaded %d records (%d files skipped)", len(records), len(skipped),
    )
    return records
