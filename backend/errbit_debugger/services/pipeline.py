from __future__ import annotations

"""backend/errbit_debugger/services/pipeline.py

Error dispatch pipeline.

Responsibilities:
- Receive signals from the three process entry points (runtime error,
  uncaught exception, shutdown)
- Filter ignored exceptions and gate runtime errors on the allow-list
- Classify signals and fan them out to the remote sink
- Always delegate to the local diagnostics facility afterwards
- Write audit records and echo console output for application code

Every public entry point returns normally. Sink failures are turned into
result values and logged locally; nothing is re-raised into application
code.
"""

import logging
import sys
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from errbit_debugger.config import DebuggerState, Settings
from errbit_debugger.errors import DebuggerError
from errbit_debugger.schemas import AuditRecord, serialize_payload
from errbit_debugger.services.audit.store import AuditStore, StoreResult
from errbit_debugger.services.diagnostics.error_classifier import (
    CapturedSignal,
    ErrorKind,
    SeverityLevel,
    UNRECOVERABLE_KINDS,
    capture_stack,
    classify,
    classify_fatal,
    coerce_kind,
    signal_from_exception,
)
from errbit_debugger.services.diagnostics.ignore_filter import IgnoreFilter
from errbit_debugger.services.diagnostics.platform import (
    LoggingDiagnostics,
    PlatformDiagnostics,
)
from errbit_debugger.services.errbit_client import (
    NotifyResult,
    NullRemoteSink,
    RemoteSink,
    build_remote_sink,
)

logger = logging.getLogger(__name__)


class AuditStoreError(DebuggerError):
    """An audit record could not be written."""


@dataclass(frozen=True)
class LastError:
    """Most recent runtime error seen by on_error."""

    kind: Optional[ErrorKind]
    message: str
    file: str
    line: int


class ErrorPipeline:
    """Filter -> classify -> remote sink -> local diagnostics, per signal."""

    def __init__(
        self,
        state: DebuggerState,
        *,
        remote: RemoteSink | None = None,
        diagnostics: PlatformDiagnostics | None = None,
        ignore_filter: IgnoreFilter | None = None,
    ) -> None:
        self.state = state
        self.remote = remote or NullRemoteSink()
        self.diagnostics = diagnostics or LoggingDiagnostics()
        self.ignore_filter = ignore_filter or IgnoreFilter()
        self._last_error: Optional[LastError] = None
        self._shutdown_done = False
        self._audit_reentry = threading.local()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        remote_address: str = "",
        audit_store: AuditStore | None = None,
        remote: RemoteSink | None = None,
        diagnostics: PlatformDiagnostics | None = None,
    ) -> ErrorPipeline:
        state = DebuggerState.from_settings(
            settings,
            remote_address=remote_address,
            audit_store=audit_store,
        )
        return cls(
            state,
            remote=remote if remote is not None else build_remote_sink(settings),
            diagnostics=diagnostics,
            ignore_filter=IgnoreFilter(
                settings.ignored_exceptions,
                settings.exception_parents,
            ),
        )

    def for_request(self, remote_address: str) -> ErrorPipeline:
        """Pipeline for one request: same sinks, state bound to *remote_address*."""
        return ErrorPipeline(
            self.state.with_remote_address(remote_address),
            remote=self.remote,
            diagnostics=self.diagnostics,
            ignore_filter=self.ignore_filter,
        )

    @property
    def last_error(self) -> Optional[LastError]:
        return self._last_error

    # ---- Entry points ----

    def on_error(
        self,
        kind: ErrorKind | str,
        message: str,
        file: str,
        line: int,
        context: Any = None,
    ) -> bool:
        """Handle a runtime error. Returns True if the remote sink accepted it."""
        resolved = coerce_kind(kind)
        self._last_error = LastError(resolved, message, file, line)

        sent = False
        if resolved in UNRECOVERABLE_KINDS:
            # Reported as a fatal error by on_shutdown.
            logger.debug("Deferring %s to shutdown: %s", resolved.value, message)
        elif self.state.send_errors and self.state.is_reportable(resolved):
            _, signal = classify(kind, message, file, line, capture_stack(skip=1))
            sent = self._notify(signal)

        self._delegate(self.diagnostics.handle_error, kind, message, file, line, context)
        return sent

    def on_exception(self, exc: BaseException, shutdown: bool = False) -> bool:
        """Handle an uncaught exception. Returns True if the remote sink accepted it."""
        sent = False
        if self.state.send_errors:
            if self.ignore_filter.should_ignore_exception(exc):
                logger.debug("Not reporting ignored exception %s", type(exc).__name__)
            else:
                signal = self._exception_signal(exc)
                if signal is not None:
                    sent = self._notify(signal)

        self._delegate(self.diagnostics.handle_exception, exc, shutdown)
        return sent

    def on_shutdown(self) -> bool:
        """Report a pending unrecoverable error. Only the first call does anything."""
        if self._shutdown_done:
            return False
        self._shutdown_done = True

        last = self._last_error
        if last is None or last.kind not in UNRECOVERABLE_KINDS:
            return False
        if not self.state.send_errors:
            return False
        _, signal = classify_fatal(last.kind, last.message, last.file, last.line)
        return self._notify(signal)

    def close(self) -> None:
        """Release the remote sink. Call after on_shutdown."""
        close = getattr(self.remote, "close", None)
        if close is None:
            return
        try:
            close()
        except Exception as exc:  # noqa: BLE001
            logger.debug("Closing the remote sink failed: %s", exc)

    # ---- Application helpers ----

    def log(self, message: Any, severity: SeverityLevel | str = SeverityLevel.INFO) -> bool:
        """Log locally; error-severity messages are also sent to the remote sink."""
        level = SeverityLevel(severity)
        self._delegate(self.diagnostics.log, message, level)

        if not (self.state.send_errors and level is SeverityLevel.ERROR):
            return False
        if isinstance(message, BaseException):
            signal = self._exception_signal(message)
        else:
            stack = capture_stack(skip=1)
            top = stack[0] if stack else None
            _, signal = classify(
                ErrorKind.USER_ERROR,
                str(message),
                top.file if top else "",
                top.line if top else 0,
                stack,
            )
        return self._notify(signal) if signal is not None else False

    def db_log(self, flag: str, method: str, description: str, data: Any = None) -> bool:
        """Write an audit record. Returns True when the store accepted it."""
        store = self.state.audit_store
        if store is None:
            self._delegate(
                self.diagnostics.log,
                "No audit log store configured",
                SeverityLevel.WARNING,
            )
            return False

        try:
            record = AuditRecord(
                flag=flag,
                method=method,
                description=description,
                data=serialize_payload(data),
                ip=self.state.remote_address,
                created_at=datetime.now(),
            )
            result = store.insert(record)
        except Exception as exc:  # noqa: BLE001
            result = StoreResult(ok=False, error=exc)

        if result.ok:
            return True
        self._report_audit_failure(result.error)
        return False

    def console_log(self, msg: str) -> None:
        if self.state.console_mode:
            sys.stdout.write(msg)
            sys.stdout.flush()

    # ---- Internals ----

    def _report_audit_failure(self, error: Optional[Exception]) -> None:
        # One re-entry per failed insert, per thread; failures raised while it runs are dropped.
        if getattr(self._audit_reentry, "active", False):
            logger.debug("Dropping audit failure raised during re-entry: %s", error)
            return
        self._audit_reentry.active = True
        try:
            self.log(error or AuditStoreError("audit insert failed"), SeverityLevel.ERROR)
        finally:
            self._audit_reentry.active = False

    def _exception_signal(self, exc: BaseException) -> Optional[CapturedSignal]:
        try:
            return signal_from_exception(exc)
        except Exception as err:  # noqa: BLE001
            logger.debug("Could not build a signal for %s: %s", type(exc).__name__, err)
            return None

    def _notify(self, signal: CapturedSignal) -> bool:
        try:
            result = self.remote.notify(signal, self.state.remote_address)
        except Exception as exc:  # noqa: BLE001
            result = NotifyResult(ok=False, error=str(exc))
        if not result.ok:
            logger.debug("Remote notify for %s failed: %s", signal.error_class, result.error)
        return result.ok

    def _delegate(self, handler: Callable[..., Any], *args: Any) -> None:
        try:
            handler(*args)
        except Exception:  # noqa: BLE001
            logger.warning("Local diagnostics handler failed", exc_info=True)
