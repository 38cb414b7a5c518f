from __future__ import annotations

"""backend/errbit_debugger/services/diagnostics/platform.py

Local diagnostics facility.

Every captured signal ends up here after the remote sinks had their turn,
so errors stay visible in local logs even when remote reporting is off,
ignored, or failing.
"""

import logging
from typing import Any, Protocol

from .error_classifier import (
    NOTICE_KINDS,
    UNRECOVERABLE_KINDS,
    WARNING_KINDS,
    ErrorKind,
    SeverityLevel,
    coerce_kind,
)

logger = logging.getLogger("errbit_debugger.platform")


class PlatformDiagnostics(Protocol):
    """Interface of the local diagnostics facility."""

    def log(self, message: Any, severity: SeverityLevel = SeverityLevel.INFO) -> None:
        ...

    def handle_exception(self, exc: BaseException, shutdown: bool = False) -> None:
        ...

    def handle_error(
        self,
        kind: ErrorKind | str,
        message: str,
        file: str,
        line: int,
        context: Any = None,
    ) -> None:
        ...


def severity_for_kind(kind: ErrorKind | str | None) -> SeverityLevel:
    """Severity used when displaying a runtime error locally."""
    resolved = coerce_kind(kind)
    if resolved in NOTICE_KINDS:
        return SeverityLevel.INFO
    if resolved in WARNING_KINDS or resolved in (
        ErrorKind.DEPRECATED,
        ErrorKind.USER_DEPRECATED,
        ErrorKind.STRICT,
    ):
        return SeverityLevel.WARNING
    if resolved in UNRECOVERABLE_KINDS:
        return SeverityLevel.CRITICAL
    return SeverityLevel.ERROR


class LoggingDiagnostics:
    """PlatformDiagnostics backed by the standard logging module."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._logger = log or logger

    def log(self, message: Any, severity: SeverityLevel = SeverityLevel.INFO) -> None:
        if isinstance(message, BaseException):
            self._logger.log(
                severity.logging_level,
                "%s: %s",
                type(message).__name__,
                message,
                exc_info=(type(message), message, message.__traceback__),
            )
            return
        self._logger.log(severity.logging_level, "%s", message)

    def handle_exception(self, exc: BaseException, shutdown: bool = False) -> None:
        level = logging.CRITICAL if shutdown else logging.ERROR
        self._logger.log(
            level,
            "Uncaught exception%s: %s: %s",
            " during shutdown" if shutdown else "",
            type(exc).__name__,
            exc,
            exc_info=(type(exc), exc, exc.__traceback__),
        )

    def handle_error(
        self,
        kind: ErrorKind | str,
        message: str,
        file: str,
        line: int,
        context: Any = None,
    ) -> None:
        resolved = coerce_kind(kind)
        label = resolved.value if resolved else str(kind)
        self._logger.log(
            severity_for_kind(kind).logging_level,
            "%s: %s in %s:%s",
            label,
            message,
            file,
            line,
            extra={"error_context": context} if context is not None else None,
        )
