"""
Reporter — the operator-facing record of a run.

Every notable event is one of four severities:

    info      what is about to happen
    error     something failed (the run may still continue)
    success   a step completed
    summary   the closing overview

The engine and use cases only ever talk to a Reporter, so tests can
pass a MemoryReporter and inspect the lines instead of scraping the
console or a log file.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Literal

import click

from vmidctl.core.observability.logging_config import (
    SUCCESS,
    SUMMARY,
    close_operator_log,
    open_operator_log,
)

logger = logging.getLogger(__name__)

Severity = Literal["info", "error", "success", "summary"]

_LEVELS: dict[str, int] = {
    "info": logging.INFO,
    "error": logging.ERROR,
    "success": SUCCESS,
    "summary": SUMMARY,
}

_COLORS: dict[str, str] = {
    "info": "blue",
    "error": "red",
    "success": "green",
    "summary": "yellow",
}


class Reporter(ABC):
    """Severity-tagged status lines for the operator."""

    @abstractmethod
    def emit(self, severity: Severity, message: str) -> None:
        """Record one line."""

    def info(self, message: str) -> None:
        self.emit("info", message)

    def error(self, message: str) -> None:
        self.emit("error", message)

    def success(self, message: str) -> None:
        self.emit("success", message)

    def summary(self, message: str) -> None:
        self.emit("summary", message)

    def close(self) -> None:
        """Release any resources (log files)."""


class OperatorReporter(Reporter):
    """Console + append-only log file.

    Console lines carry the same ``[SEVERITY] timestamp message`` shape
    as the file, colored by severity. Errors go to stderr.
    """

    def __init__(self, log_file: str | Path | None = None, color: bool = True):
        self._color = color
        self._log_file = Path(log_file) if log_file else None
        self._op_logger: logging.Logger | None = None

        if self._log_file is not None:
            try:
                self._op_logger = open_operator_log(self._log_file)
            except OSError as e:
                logger.warning("Cannot open operator log %s: %s", self._log_file, e)
                self._log_file = None

    @property
    def log_file(self) -> Path | None:
        """The operator log actually in use (None if it could not be opened)."""
        return self._log_file

    def emit(self, severity: Severity, message: str) -> None:
        stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        line = f"[{severity.upper()}] {stamp} {message}"
        click.secho(
            line,
            fg=_COLORS[severity],
            bold=True,
            err=severity == "error",
            color=None if self._color else False,
        )

        if self._op_logger is not None:
            self._op_logger.log(_LEVELS[severity], message)

    def close(self) -> None:
        if self._op_logger is not None:
            close_operator_log(self._op_logger)
            self._op_logger = None


class MemoryReporter(Reporter):
    """Keeps every line in memory instead of printing it."""

    def __init__(self) -> None:
        self.lines: list[tuple[Severity, str]] = []

    def emit(self, severity: Severity, message: str) -> None:
        self.lines.append((severity, message))

    def messages(self, severity: Severity | None = None) -> list[str]:
        """All messages, optionally filtered by severity."""
        return [m for s, m in self.lines if severity is None or s == severity]

    def contains(self, text: str, severity: Severity | None = None) -> bool:
        return any(text in m for m in self.messages(severity))
