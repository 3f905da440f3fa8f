"""
Logging configuration for cobb.

Quiet by default: only warnings reach stderr. ``--verbose`` or
``COBB_VERBOSE=1`` switches to debug output.
"""

import logging
import sys
import warnings
from logging.handlers import RotatingFileHandler
from pathlib import Path


def configure_quiet_mode(quiet: bool = True):
    """
    Configure logging to suppress routine output.

    Args:
        quiet: If True, only warnings and errors are shown. If False, INFO too.
    """
    if quiet:
        warnings.filterwarnings("ignore", category=DeprecationWarning)
    logging.getLogger("cobb").setLevel(logging.WARNING if quiet else logging.INFO)


_DEBUG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def enable_debug_mode():
    """Send cobb's debug output to stderr. Safe to call more than once."""
    warnings.filterwarnings("default")
    cobb_logger = logging.getLogger("cobb")
    cobb_logger.setLevel(logging.DEBUG)
    if any(getattr(h, "_cobb_debug", False) for h in cobb_logger.handlers):
        return
    stderr = logging.StreamHandler(sys.stderr)
    stderr.setFormatter(logging.Formatter(_DEBUG_FORMAT, datefmt="%H:%M:%S"))
    stderr._cobb_debug = True
    cobb_logger.addHandler(stderr)


def configure_ops_log(config_dir):
    """Configure a persistent operations log.

    Writes to {config_dir}/cobb-ops.log using a rotating file handler
    (1MB max, 3 backups). Always active regardless of --verbose.
    Returns the handler so it can be removed on close().
    """
    log_dir = Path(config_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        str(log_dir / "cobb-ops.log"),
        maxBytes=1_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    cobb_logger = logging.getLogger("cobb")
    cobb_logger.addHandler(handler)
    # Ensure cobb logger allows INFO through even in quiet mode
    if cobb_logger.level == logging.NOTSET or cobb_logger.level > logging.INFO:
        cobb_logger.setLevel(logging.INFO)

    return handler
