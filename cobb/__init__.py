"""
Cobb

Review a corpus of time-stamped text records, one shard file per year,
attaching and removing free-form tags ("concepts") and saving each edit
back into its year's file.

Quick Start:
    from cobb import Reviewer, LocalDirectory

    reviewer = Reviewer(LocalDirectory("~/pasiv"), operator)
    reviewer.open()
    reviewer.run(scope="2022")

CLI Usage:
    cobb review ~/pasiv --scope 2022
    cobb list ~/pasiv --hidden
    cobb tags ~/pasiv

Environment Variables:
    COBB_CONFIG_DIR  - Override config directory (default ~/.cobb)
    COBB_VERBOSE     - Set to 1 for debug logging
"""

from .api import Reviewer
from .codec import decode, encode
from .errors import (
    CobbError,
    DuplicateTagError,
    EmptyMissionError,
    FileOperationError,
    MalformedIndexError,
)
from .filesystem import LocalDirectory
from .loader import load_corpus
from .mission import select
from .session import EditSession, SessionState
from .shard import save_record
from .types import HIDDEN_TAG, Record, TagSet
from .vocabulary import Vocabulary

__version__ = "0.1.0"
__all__ = [
    "Reviewer",
    "EditSession",
    "SessionState",
    "LocalDirectory",
    "Record",
    "TagSet",
    "Vocabulary",
    "HIDDEN_TAG",
    "decode",
    "encode",
    "load_corpus",
    "select",
    "save_record",
    "CobbError",
    "DuplicateTagError",
    "EmptyMissionError",
    "FileOperationError",
    "MalformedIndexError",
]
