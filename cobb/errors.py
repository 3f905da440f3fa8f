"""
Errors raised by cobb, and traceback logging for the CLI.

Logs full stack traces for debugging while showing clean messages to users.
"""

import logging
import os
import traceback
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)


class CobbError(Exception):
    """Base class for cobb errors."""


class DecodeSkipError(CobbError):
    """A corpus file could not be read or decoded and was skipped."""

    def __init__(self, name: str, cause: Exception):
        self.name = name
        self.cause = cause
        super().__init__(f"Could not read or parse file: {name} ({cause})")


class EmptyMissionError(CobbError):
    """The mission filter selected no records."""

    def __init__(self, scope: str):
        self.scope = scope
        super().__init__(f"No non-hidden records found for scope '{scope}'.")


class DuplicateTagError(CobbError):
    """A new tag name collides with one already in the vocabulary."""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"Concept '{tag}' already exists.")


class ReservedTagError(CobbError):
    """The hidden marker was used as an ordinary tag; only hide sets it."""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"'{tag}' is reserved. Use 'hide' to hide a record.")


class SaveError(CobbError):
    """A record could not be written back to its shard."""


class MalformedIndexError(SaveError, ValueError):
    """A record index has no usable year segment for shard routing."""

    def __init__(self, index: str):
        self.index = index
        super().__init__(f"Index {index!r} has no year segment (expected <sequence>-<year>)")


class FileOperationError(SaveError):
    """Reading, decoding or writing a shard failed."""

    def __init__(self, shard: str, cause: Exception):
        self.shard = shard
        self.cause = cause
        super().__init__(f"Could not save changes to {shard}: {cause}")


class PermissionDeniedError(CobbError):
    """Read/write permission on the corpus directory was denied."""


class MissionCancelled(CobbError):
    """The operator cancelled the scope prompt."""


class SessionStateError(CobbError):
    """An edit operation was attempted on a session that is not active."""


def _error_log_path() -> Path:
    """Resolve error log path, respecting COBB_CONFIG_DIR."""
    config_dir = os.environ.get("COBB_CONFIG_DIR")
    if config_dir:
        return Path(config_dir) / "cobb-errors.log"
    return Path.home() / ".cobb" / "cobb-errors.log"


def log_exception(exc: Exception, context: str = "") -> Path:
    """
    Append ``exc`` and its traceback to the error log.

    The log is created owner-only. If it cannot be written, the failure is
    reported through the ``cobb`` logger and the path is still returned.
    """
    log_path = _error_log_path()
    header = f"[{datetime.now(timezone.utc).isoformat()}]"
    if context:
        header += f" {context}"
    entry = "\n".join([
        "",
        "=" * 60,
        header,
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
    ])
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(log_path, os.O_WRONLY | os.O_CREAT | os.O_APPEND, 0o600)
        with os.fdopen(fd, "a", encoding="utf-8") as f:
            f.write(entry)
    except OSError as e:
        logger.warning("Error log %s not written: %s", log_path, e)
    return log_path
