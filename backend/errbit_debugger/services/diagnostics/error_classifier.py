from __future__ import annotations

"""backend/errbit_debugger/services/diagnostics/error_classifier.py

Severity classification for captured runtime signals.

This module maps a raw runtime error kind (notice, warning, error, ...)
to a normalized SeverityLevel and a typed CapturedSignal carrying the
message, source location and a call-stack snapshot.

The classification is:
- pure (no I/O, no logging)
- lenient: any kind it does not recognize lands in the Error bucket
- split: unrecoverable kinds are only turned into signals by
  classify_fatal(), which the shutdown path uses

Signal labels match what Errbit displays as the error class:
- Notice
- Warning
- Error
- Fatal Error
- <exception class name> for uncaught exceptions
"""

import enum
import logging
import traceback
from dataclasses import dataclass
from types import TracebackType
from typing import ClassVar, Iterable, Optional, Tuple


class SeverityLevel(str, enum.Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    @property
    def logging_level(self) -> int:
        return _LOGGING_LEVELS[self]

    # str comparison would order these alphabetically
    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SeverityLevel):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, SeverityLevel):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, SeverityLevel):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, SeverityLevel):
            return NotImplemented
        return self.rank >= other.rank


_SEVERITY_ORDER = [
    SeverityLevel.DEBUG,
    SeverityLevel.INFO,
    SeverityLevel.WARNING,
    SeverityLevel.ERROR,
    SeverityLevel.CRITICAL,
]

_LOGGING_LEVELS = {
    SeverityLevel.DEBUG: logging.DEBUG,
    SeverityLevel.INFO: logging.INFO,
    SeverityLevel.WARNING: logging.WARNING,
    SeverityLevel.ERROR: logging.ERROR,
    SeverityLevel.CRITICAL: logging.CRITICAL,
}


class ErrorKind(str, enum.Enum):
    NOTICE = "notice"
    USER_NOTICE = "user_notice"
    WARNING = "warning"
    USER_WARNING = "user_warning"
    DEPRECATED = "deprecated"
    USER_DEPRECATED = "user_deprecated"
    STRICT = "strict"
    ERROR = "error"
    USER_ERROR = "user_error"
    RECOVERABLE_ERROR = "recoverable_error"
    CORE_ERROR = "core_error"
    COMPILE_ERROR = "compile_error"
    PARSE = "parse"
    FATAL = "fatal"


NOTICE_KINDS = frozenset({ErrorKind.NOTICE, ErrorKind.USER_NOTICE})
WARNING_KINDS = frozenset({ErrorKind.WARNING, ErrorKind.USER_WARNING})

# The host cannot keep running application code after one of these.
UNRECOVERABLE_KINDS = frozenset(
    {
        ErrorKind.CORE_ERROR,
        ErrorKind.COMPILE_ERROR,
        ErrorKind.PARSE,
        ErrorKind.FATAL,
    }
)


def coerce_kind(value: ErrorKind | str | None) -> Optional[ErrorKind]:
    """Return the ErrorKind for *value*, or None when it is not recognized."""
    if isinstance(value, ErrorKind):
        return value
    if value is None:
        return None
    try:
        return ErrorKind(str(value).strip().lower())
    except ValueError:
        return None


@dataclass(frozen=True)
class StackFrame:
    """One call-stack frame descriptor."""

    file: str
    line: int
    function: str

    def to_dict(self) -> dict:
        return {"file": self.file, "line": self.line, "function": self.function}


def capture_stack(skip: int = 0) -> Tuple[StackFrame, ...]:
    """Snapshot the current call stack, most recent call first.

    ``skip`` drops that many innermost frames in addition to this function's own.
    """
    summary = traceback.extract_stack()[: -(skip + 1)]
    return tuple(
        StackFrame(file=fs.filename, line=fs.lineno or 0, function=fs.name)
        for fs in reversed(summary)
    )


def frames_from_traceback(tb: TracebackType | None) -> Tuple[StackFrame, ...]:
    """Convert a traceback into frame descriptors, most recent call first."""
    if tb is None:
        return ()
    summary = traceback.extract_tb(tb)
    return tuple(
        StackFrame(file=fs.filename, line=fs.lineno or 0, function=fs.name)
        for fs in reversed(summary)
    )


@dataclass(frozen=True)
class CapturedSignal:
    """Normalized error record handed to the remote sink."""

    message: str
    source_file: str = ""
    source_line: int = 0
    stack_trace: Tuple[StackFrame, ...] = ()

    label: ClassVar[str] = "Error"
    severity: ClassVar[SeverityLevel] = SeverityLevel.ERROR

    @property
    def error_class(self) -> str:
        return self.label


@dataclass(frozen=True)
class NoticeSignal(CapturedSignal):
    label: ClassVar[str] = "Notice"
    severity: ClassVar[SeverityLevel] = SeverityLevel.INFO


@dataclass(frozen=True)
class WarningSignal(CapturedSignal):
    label: ClassVar[str] = "Warning"
    severity: ClassVar[SeverityLevel] = SeverityLevel.WARNING


@dataclass(frozen=True)
class ErrorSignal(CapturedSignal):
    label: ClassVar[str] = "Error"
    severity: ClassVar[SeverityLevel] = SeverityLevel.ERROR


@dataclass(frozen=True)
class ExceptionSignal(CapturedSignal):
    """An exception that propagated out of application code."""

    exception_type: str = "Exception"

    severity: ClassVar[SeverityLevel] = SeverityLevel.ERROR

    @property
    def error_class(self) -> str:
        return self.exception_type


@dataclass(frozen=True)
class FatalErrorSignal(CapturedSignal):
    label: ClassVar[str] = "Fatal Error"
    severity: ClassVar[SeverityLevel] = SeverityLevel.CRITICAL


def classify(
    kind: ErrorKind | str | None,
    message: str,
    file: str,
    line: int,
    stack_trace: Iterable[StackFrame] = (),
) -> Tuple[SeverityLevel, CapturedSignal]:
    """Classify a live runtime error into a severity and a typed signal.

    Never fails: unrecognized kinds (and deprecations) take the Error branch.
    """
    resolved = coerce_kind(kind)
    frames = tuple(stack_trace)
    signal: CapturedSignal

    if resolved in NOTICE_KINDS:
        signal = NoticeSignal(message, file, line, frames)
    elif resolved in WARNING_KINDS:
        signal = WarningSignal(message, file, line, frames)
    else:
        signal = ErrorSignal(message, file, line, frames)
    return signal.severity, signal


def classify_fatal(
    kind: ErrorKind | str | None,
    message: str,
    file: str,
    line: int,
) -> Tuple[SeverityLevel, FatalErrorSignal]:
    """Classify an unrecoverable error found at shutdown. Always critical."""
    signal = FatalErrorSignal(message, file, line)
    return signal.severity, signal


def signal_from_exception(exc: BaseException) -> ExceptionSignal:
    """Wrap an exception (and its traceback) into an ExceptionSignal."""
    frames = frames_from_traceback(exc.__traceback__)
    top = frames[0] if frames else None
    return ExceptionSignal(
        message=str(exc),
        source_file=top.file if top else "",
        source_line=top.line if top else 0,
        stack_trace=frames,
        exception_type=type(exc).__name__,
    )


def kind_for_warning(category: type) -> ErrorKind:
    """Map a Python warning category to the runtime error kind it represents."""
    if issubclass(category, (DeprecationWarning, PendingDeprecationWarning)):
        return ErrorKind.DEPRECATED
    if issubclass(category, UserWarning):
        return ErrorKind.USER_WARNING
    return ErrorKind.WARNING
