"""Tests for the FastAPI integration."""

from fastapi import Request
from fastapi.testclient import TestClient

from errbit_debugger.config import Settings
from errbit_debugger.errors import NotFoundError
from errbit_debugger.main import create_app
from errbit_debugger.services.diagnostics.error_classifier import ErrorKind

from conftest import FakeStore


def _app(pipeline):
    app = create_app(pipeline=pipeline, settings=Settings(_env_file=None))

    @app.get("/boom")
    def boom():
        raise RuntimeError("kaboom")

    @app.get("/users/{user_id}")
    def get_user(user_id: int):
        raise NotFoundError(f"User {user_id} not found")

    @app.post("/users")
    def create_user(request: Request):
        request.state.debugger.db_log("audit", "create", "user created", {"id": 5})
        return {"id": 5}

    return app


def test_health(make_pipeline):
    client = TestClient(_app(make_pipeline()))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_unhandled_exception_is_reported(make_pipeline, remote, diagnostics):
    client = TestClient(_app(make_pipeline(remote_address="")), raise_server_exceptions=False)

    response = client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"detail": "Internal Server Error"}
    signal, remote_address = remote.calls[0]
    assert signal.error_class == "RuntimeError"
    assert signal.message == "kaboom"
    assert remote_address == "testclient"
    assert len(diagnostics.exceptions) == 1


def test_not_found_is_shown_but_not_reported(make_pipeline, remote, diagnostics):
    client = TestClient(_app(make_pipeline()))

    response = client.get("/users/9")

    assert response.status_code == 404
    assert response.json() == {"detail": "User 9 not found"}
    assert remote.calls == []
    assert isinstance(diagnostics.exceptions[0][0], NotFoundError)


def test_request_audit_record_uses_client_address(make_pipeline):
    store = FakeStore()
    client = TestClient(_app(make_pipeline(audit_store=store, remote_address="")))

    response = client.post("/users")

    assert response.status_code == 200
    assert store.records[0].ip == "testclient"
    assert store.records[0].flag == "audit"


def test_app_shutdown_runs_shutdown_handler(make_pipeline, remote):
    pipeline = make_pipeline()
    pipeline.on_error(ErrorKind.CORE_ERROR, "extension failed to load", "ext.py", 1)

    with TestClient(_app(pipeline)):
        pass

    assert len(remote.calls) == 1
    assert remote.calls[0][0].error_class == "Fatal Error"
    assert remote.closed is True


def test_create_app_builds_pipeline_from_settings():
    settings = Settings(_env_file=None, database_url="sqlite:///:memory:", console_mode=True)

    app = create_app(settings=settings)

    assert app.state.debugger.state.console_mode is True
    assert app.state.debugger.state.audit_store is not None
