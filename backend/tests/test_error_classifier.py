"""Tests for severity classification of runtime signals."""

import pytest

from errbit_debugger.services.diagnostics.error_classifier import (
    ErrorKind,
    ErrorSignal,
    ExceptionSignal,
    FatalErrorSignal,
    NoticeSignal,
    SeverityLevel,
    StackFrame,
    WarningSignal,
    capture_stack,
    classify,
    classify_fatal,
    coerce_kind,
    kind_for_warning,
    signal_from_exception,
)


def test_severity_levels_are_totally_ordered():
    ordered = [
        SeverityLevel.DEBUG,
        SeverityLevel.INFO,
        SeverityLevel.WARNING,
        SeverityLevel.ERROR,
        SeverityLevel.CRITICAL,
    ]
    assert sorted(reversed(ordered)) == ordered
    assert SeverityLevel.ERROR > SeverityLevel.WARNING
    assert SeverityLevel.INFO <= SeverityLevel.INFO
    assert SeverityLevel.CRITICAL >= SeverityLevel.DEBUG
    assert SeverityLevel.DEBUG < SeverityLevel.CRITICAL


@pytest.mark.parametrize("kind", [ErrorKind.NOTICE, ErrorKind.USER_NOTICE])
def test_notice_family(kind):
    severity, signal = classify(kind, "undefined index", "app.py", 3)
    assert isinstance(signal, NoticeSignal)
    assert severity is SeverityLevel.INFO
    assert signal.error_class == "Notice"


@pytest.mark.parametrize("kind", [ErrorKind.WARNING, ErrorKind.USER_WARNING])
def test_warning_family(kind):
    severity, signal = classify(kind, "division by zero", "app.py", 4)
    assert isinstance(signal, WarningSignal)
    assert severity is SeverityLevel.WARNING


@pytest.mark.parametrize(
    "kind",
    [
        ErrorKind.ERROR,
        ErrorKind.USER_ERROR,
        ErrorKind.RECOVERABLE_ERROR,
        ErrorKind.DEPRECATED,
        "no_such_kind",
        None,
    ],
)
def test_error_family_and_fallback(kind):
    severity, signal = classify(kind, "boom", "app.py", 5)
    assert isinstance(signal, ErrorSignal)
    assert severity is SeverityLevel.ERROR
    assert signal.error_class == "Error"


def test_classify_keeps_location_and_stack():
    frames = [StackFrame("a.py", 1, "outer"), StackFrame("b.py", 2, "inner")]
    _, signal = classify("user_warning", "careful", "a.py", 1, frames)
    assert signal.message == "careful"
    assert signal.source_file == "a.py"
    assert signal.source_line == 1
    assert signal.stack_trace == tuple(frames)


@pytest.mark.parametrize(
    "kind",
    [ErrorKind.FATAL, ErrorKind.CORE_ERROR, ErrorKind.COMPILE_ERROR, ErrorKind.PARSE],
)
def test_fatal_classification_is_critical(kind):
    severity, signal = classify_fatal(kind, "out of memory", "worker.py", 90)
    assert severity is SeverityLevel.CRITICAL
    assert isinstance(signal, FatalErrorSignal)
    assert signal.error_class == "Fatal Error"
    assert signal.source_line == 90


def test_coerce_kind_accepts_names():
    assert coerce_kind("USER_ERROR") is ErrorKind.USER_ERROR
    assert coerce_kind(ErrorKind.PARSE) is ErrorKind.PARSE
    assert coerce_kind("E_WHATEVER") is None


def test_signal_from_exception_uses_innermost_frame():
    def explode():
        raise KeyError("missing")

    try:
        explode()
    except KeyError as exc:
        signal = signal_from_exception(exc)

    assert isinstance(signal, ExceptionSignal)
    assert signal.error_class == "KeyError"
    assert signal.stack_trace[0].function == "explode"
    assert signal.source_file.endswith("test_error_classifier.py")
    assert signal.severity is SeverityLevel.ERROR


def test_signal_from_exception_without_traceback():
    signal = signal_from_exception(ValueError("never raised"))
    assert signal.stack_trace == ()
    assert signal.source_file == ""
    assert signal.source_line == 0


def test_capture_stack_starts_at_caller():
    def where():
        return capture_stack()

    frames = where()
    assert frames[0].function == "where"
    assert frames[1].function == "test_capture_stack_starts_at_caller"


def test_kind_for_warning():
    assert kind_for_warning(DeprecationWarning) is ErrorKind.DEPRECATED
    assert kind_for_warning(PendingDeprecationWarning) is ErrorKind.DEPRECATED
    assert kind_for_warning(UserWarning) is ErrorKind.USER_WARNING
    assert kind_for_warning(RuntimeWarning) is ErrorKind.WARNING
