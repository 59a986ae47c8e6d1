"""Non-intrusive error reporting.

Problems with individual memory files are never raised to callers. They are
recorded here (bounded history plus a per-file problem list) and written to
the ``mnemo`` logger, and the offending file is simply left out of the index.
"""

from __future__ import annotations

import logging
from collections import deque
from datetime import UTC, datetime
from typing import Protocol

from .config import MAX_ERROR_HISTORY
from .models import ErrorReport, Severity

log = logging.getLogger(__name__)

_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
}


class DiagnosticSink(Protocol):
    """Anything that accepts (message, path, details) reports."""

    def report_error(self, message: str, path: str | None = None, details: str | None = None) -> None: ...

    def report_warning(self, message: str, path: str | None = None, details: str | None = None) -> None: ...

    def report_info(self, message: str, path: str | None = None, details: str | None = None) -> None: ...

    def set_file_problem(self, path: str, message: str) -> None: ...

    def clear_file_problem(self, path: str) -> None: ...


def format_report(report: ErrorReport) -> str:
    """Render a report as a single output line plus optional details line."""
    line = f"[{report.timestamp:%H:%M:%S}] [{report.severity.value}] {report.message}"
    if report.path:
        line += f" (File: {report.path})"
    if report.details:
        line += f"\n  Details: {report.details}"
    return line


class ErrorReporter:
    """Collects reports in memory and forwards them to logging.

    Args:
        max_history: Reports kept before the oldest is dropped.
        logger: Logger to forward reports to. Defaults to this module's logger.
    """

    def __init__(
        self,
        max_history: int = MAX_ERROR_HISTORY,
        logger: logging.Logger | None = None,
    ) -> None:
        self._history: deque[ErrorReport] = deque(maxlen=max_history)
        self._problems: dict[str, str] = {}
        self._log = logger or log

    def report_error(self, message: str, path: str | None = None, details: str | None = None) -> None:
        self._report(Severity.ERROR, message, path, details)

    def report_warning(self, message: str, path: str | None = None, details: str | None = None) -> None:
        self._report(Severity.WARNING, message, path, details)

    def report_info(self, message: str, path: str | None = None, details: str | None = None) -> None:
        self._report(Severity.INFO, message, path, details)

    def _report(self, severity: Severity, message: str, path: str | None, details: str | None) -> None:
        report = ErrorReport(
            timestamp=datetime.now(UTC),
            severity=severity,
            message=message,
            path=path,
            details=details,
        )
        self._history.append(report)

        if path and details:
            self._log.log(_LOG_LEVELS[severity], "%s (%s): %s", message, path, details)
        elif path:
            self._log.log(_LOG_LEVELS[severity], "%s (%s)", message, path)
        else:
            self._log.log(_LOG_LEVELS[severity], "%s", message)

    # History

    def get_error_history(self) -> list[ErrorReport]:
        return list(self._history)

    def get_errors_for_file(self, path: str) -> list[ErrorReport]:
        return [report for report in self._history if report.path == path]

    def get_recent_errors(self, count: int) -> list[ErrorReport]:
        if count <= 0:
            return []
        return list(self._history)[-count:]

    def clear_history(self) -> None:
        self._history.clear()

    # Per-file problems (current state, not history)

    def set_file_problem(self, path: str, message: str) -> None:
        """Record the current problem for a file, replacing any previous one."""
        self._problems[path] = message

    def clear_file_problem(self, path: str) -> None:
        self._problems.pop(path, None)

    def get_file_problems(self) -> dict[str, str]:
        return dict(self._problems)

    def clear_all_problems(self) -> None:
        self._problems.clear()
