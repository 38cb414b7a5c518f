"""Shared fakes and fixtures for errbit_debugger tests."""

import pytest

from errbit_debugger.config import DebuggerState, Settings
from errbit_debugger.services.audit.store import StoreResult
from errbit_debugger.services.diagnostics.ignore_filter import IgnoreFilter
from errbit_debugger.services.errbit_client import NotifyResult
from errbit_debugger.services.pipeline import ErrorPipeline


class FakeRemote:
    def __init__(self, ok=True):
        self.ok = ok
        self.calls = []
        self.closed = False

    def notify(self, signal, remote_address=""):
        self.calls.append((signal, remote_address))
        return NotifyResult(ok=self.ok, error=None if self.ok else "unreachable")

    def close(self):
        self.closed = True


class FakeDiagnostics:
    def __init__(self):
        self.logs = []
        self.exceptions = []
        self.errors = []

    def log(self, message, severity):
        self.logs.append((message, severity))

    def handle_exception(self, exc, shutdown=False):
        self.exceptions.append((exc, shutdown))

    def handle_error(self, kind, message, file, line, context=None):
        self.errors.append((kind, message, file, line, context))


class FakeStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.records = []

    def insert(self, record):
        self.records.append(record)
        if self.fail:
            return StoreResult(ok=False, error=RuntimeError("database is locked"))
        return StoreResult(ok=True)


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def remote():
    return FakeRemote()


@pytest.fixture
def diagnostics():
    return FakeDiagnostics()


@pytest.fixture
def make_pipeline(remote, diagnostics):
    def _make(
        send_errors=True,
        console_mode=False,
        remote_address="10.0.0.7",
        audit_store=None,
        reportable_kinds=None,
        ignored=("BadRequestError",),
        parents=None,
    ):
        state = DebuggerState(
            send_errors=send_errors,
            console_mode=console_mode,
            remote_address=remote_address,
            audit_store=audit_store,
            reportable_kinds=reportable_kinds,
        )
        return ErrorPipeline(
            state,
            remote=remote,
            diagnostics=diagnostics,
            ignore_filter=IgnoreFilter(
                ignored,
                parents
                if parents is not None
                else {"NotFoundError": ["BadRequestError"]},
            ),
        )

    return _make
