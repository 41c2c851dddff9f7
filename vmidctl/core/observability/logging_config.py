"""
Logging configuration — central setup for the CLI.

Two independent channels:

    Diagnostics    Every module does ``logger = logging.getLogger(__name__)``.
                   Configured once by setup_logging(), level resolved as
                   CLI flag  >  VMIDCTL_LOG_LEVEL env var  >  WARNING.
                   Optional file output via VMIDCTL_DEBUG_LOG.

    Operator log   The append-only record of what a run did, one line per
                   event:  ``[SEVERITY] YYYY-MM-DD HH:MM:SS message``.
                   Opened by open_operator_log(), written by the Reporter.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

# ── Format strings ──────────────────────────────────────────────

# WARNING level — minimal, no noise
_FMT_MINIMAL = "%(message)s"

# INFO level — timestamped with module context
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG level — full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# Diagnostic file output — always full detail
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# Operator log
_FMT_OPERATOR = "[%(levelname)s] %(asctime)s %(message)s"
_DATEFMT_OPERATOR = "%Y-%m-%d %H:%M:%S"

OPERATOR_LOGGER = "vmidctl.operator"

# Extra severities of the operator log, between INFO and WARNING
SUCCESS = 25
SUMMARY = 26
logging.addLevelName(SUCCESS, "SUCCESS")
logging.addLevelName(SUMMARY, "SUMMARY")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure diagnostic logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a diagnostic log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
    """
    numeric_level = _parse_level(level)

    # ── Console handler (stderr) ────────────────────────────────
    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif numeric_level <= logging.INFO:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_MINIMAL, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    # ── Root logger ─────────────────────────────────────────────
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    effective_level = numeric_level

    # ── File handler (optional) ─────────────────────────────────
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False


def open_operator_log(path: str | Path) -> logging.Logger:
    """Attach the append-only operator log file.

    The returned logger does not propagate, so operator lines never
    show up twice on the console through the root handler.

    Raises:
        OSError: If the file (or its directory) cannot be opened.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(_FMT_OPERATOR, datefmt=_DATEFMT_OPERATOR))

    op_logger = logging.getLogger(OPERATOR_LOGGER)
    close_operator_log(op_logger)
    op_logger.addHandler(handler)
    op_logger.setLevel(logging.INFO)
    op_logger.propagate = False
    return op_logger


def close_operator_log(op_logger: logging.Logger | None = None) -> None:
    """Flush and detach every handler of the operator logger."""
    op_logger = op_logger or logging.getLogger(OPERATOR_LOGGER)
    for handler in list(op_logger.handlers):
        handler.close()
        op_logger.removeHandler(handler)


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.WARNING
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        return logging.WARNING
    return numeric
