from __future__ import annotations

"""backend/errbit_debugger/services/hooks.py

Process-level hook registration.

init() builds the state and sinks once and installs an ErrorPipeline as:
- sys.excepthook and threading.excepthook (uncaught exceptions)
- warnings.showwarning (runtime notices, warnings and deprecations)
- an atexit callback (shutdown handler, then release of the remote sink)

Initialization is one-time and non-reentrant: call uninstall() before
initializing again.
"""

import atexit
import logging
import sys
import threading
import warnings
from dataclasses import dataclass
from typing import Any, Callable, Optional

from errbit_debugger.config import Settings, get_settings
from errbit_debugger.errors import ConfigError
from errbit_debugger.services.audit.store import AuditStore, SqlAlchemyAuditStore
from errbit_debugger.services.diagnostics.error_classifier import kind_for_warning
from errbit_debugger.services.diagnostics.platform import PlatformDiagnostics
from errbit_debugger.services.errbit_client import RemoteSink
from errbit_debugger.services.pipeline import ErrorPipeline

logger = logging.getLogger(__name__)


@dataclass
class _InstalledHooks:
    pipeline: ErrorPipeline
    excepthook: Callable[..., Any]
    threading_excepthook: Callable[..., Any]
    showwarning: Callable[..., Any]
    shutdown: Callable[[], None]


_installed: Optional[_InstalledHooks] = None


def init(
    settings: Settings | None = None,
    *,
    remote_address: str = "",
    audit_store: AuditStore | None = None,
    remote: RemoteSink | None = None,
    diagnostics: PlatformDiagnostics | None = None,
) -> ErrorPipeline:
    """Build the process pipeline from settings and install it."""
    if _installed is not None:
        raise ConfigError("errbit_debugger is already initialized")

    settings = settings or get_settings()
    if audit_store is None and settings.database_url:
        audit_store = SqlAlchemyAuditStore.from_url(settings.database_url)

    pipeline = ErrorPipeline.from_settings(
        settings,
        remote_address=remote_address,
        audit_store=audit_store,
        remote=remote,
        diagnostics=diagnostics,
    )
    install(pipeline)
    return pipeline


def install(pipeline: ErrorPipeline) -> None:
    """Register *pipeline* as the process's error, exception and shutdown handler."""
    global _installed
    if _installed is not None:
        raise ConfigError("errbit_debugger hooks are already installed")

    previous = _InstalledHooks(
        pipeline=pipeline,
        excepthook=sys.excepthook,
        threading_excepthook=threading.excepthook,
        showwarning=warnings.showwarning,
        shutdown=lambda: _shutdown(pipeline),
    )

    def _excepthook(exc_type, exc, tb):
        if issubclass(exc_type, KeyboardInterrupt) or exc is None:
            previous.excepthook(exc_type, exc, tb)
            return
        if exc.__traceback__ is None and tb is not None:
            exc = exc.with_traceback(tb)
        pipeline.on_exception(exc, shutdown=False)

    def _threading_excepthook(args):
        if args.exc_value is None or issubclass(args.exc_type, SystemExit):
            previous.threading_excepthook(args)
            return
        pipeline.on_exception(args.exc_value, shutdown=False)

    def _showwarning(message, category, filename, lineno, file=None, line=None):
        pipeline.on_error(kind_for_warning(category), str(message), filename, lineno)

    sys.excepthook = _excepthook
    threading.excepthook = _threading_excepthook
    warnings.showwarning = _showwarning
    atexit.register(previous.shutdown)
    _installed = previous
    logger.debug("errbit_debugger hooks installed")


def _shutdown(pipeline: ErrorPipeline) -> None:
    pipeline.on_shutdown()
    pipeline.close()


def uninstall() -> None:
    """Restore the hooks that were active before install()."""
    global _installed
    if _installed is None:
        return
    sys.excepthook = _installed.excepthook
    threading.excepthook = _installed.threading_excepthook
    warnings.showwarning = _installed.showwarning
    atexit.unregister(_installed.shutdown)
    _installed = None
    logger.debug("errbit_debugger hooks removed")


def current_pipeline() -> Optional[ErrorPipeline]:
    return _installed.pipeline if _installed else None
