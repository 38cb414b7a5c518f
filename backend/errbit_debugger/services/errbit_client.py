"""Errbit (Airbrake v3 API) transport for captured signals."""
from __future__ import annotations

import logging
import platform
import sys
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from errbit_debugger import __version__
from errbit_debugger.config import Settings
from errbit_debugger.services.diagnostics.error_classifier import CapturedSignal

logger = logging.getLogger(__name__)

NOTIFIER = {
    "name": "errbit-debugger",
    "version": __version__,
    "url": "https://github.com/errbit/errbit",
}


@dataclass(frozen=True)
class NotifyResult:
    """Outcome of RemoteSink.notify."""

    ok: bool
    error: Optional[str] = None


class RemoteSink(Protocol):
    def notify(self, signal: CapturedSignal, remote_address: str = "") -> NotifyResult:
        """Send one signal. Must not raise."""
        ...


class NullRemoteSink:
    """Used when no Errbit API key is configured."""

    def notify(self, signal: CapturedSignal, remote_address: str = "") -> NotifyResult:
        return NotifyResult(ok=False, error="remote reporting is not configured")


class ErrbitTransport:
    def __init__(
        self,
        *,
        host: str,
        port: int,
        api_key: str,
        secure: bool = True,
        environment: str = "development",
        timeout: float = 2.0,
        client: httpx.Client | None = None,
    ):
        self._api_key = api_key
        self._environment = environment
        scheme = "https" if secure else "http"
        self.endpoint = f"{scheme}://{host}:{port}/api/v3/projects/1/notices"
        # One attempt per signal; the timeout bounds how long a handler can block.
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def configure(
        cls,
        host: str,
        port: int,
        api_key: str,
        secure: bool,
        environment: str,
        timeout: float = 2.0,
    ) -> ErrbitTransport:
        return cls(
            host=host,
            port=port,
            api_key=api_key,
            secure=secure,
            environment=environment,
            timeout=timeout,
        )

    def build_notice(self, signal: CapturedSignal, remote_address: str = "") -> dict[str, Any]:
        context: dict[str, Any] = {
            "notifier": NOTIFIER,
            "environment": self._environment,
            "severity": signal.severity.value,
            "language": f"Python/{platform.python_version()}",
            "os": sys.platform,
        }
        if remote_address:
            context["userAddr"] = remote_address
        return {
            "errors": [
                {
                    "type": signal.error_class,
                    "message": signal.message,
                    "backtrace": [frame.to_dict() for frame in signal.stack_trace]
                    or [
                        {
                            "file": signal.source_file,
                            "line": signal.source_line,
                            "function": "",
                        }
                    ],
                }
            ],
            "context": context,
            "environment": {},
            "session": {},
            "params": {},
        }

    def notify(self, signal: CapturedSignal, remote_address: str = "") -> NotifyResult:
        try:
            response = self._client.post(
                self.endpoint,
                params={"key": self._api_key},
                json=self.build_notice(signal, remote_address),
            )
            response.raise_for_status()
        except Exception as exc:  # noqa: BLE001
            logger.debug("Errbit notify failed: %s", exc)
            return NotifyResult(ok=False, error=str(exc))
        return NotifyResult(ok=True)

    def close(self) -> None:
        try:
            self._client.close()
        except Exception as exc:  # noqa: BLE001
            logger.debug("Errbit client close failed: %s", exc)


def build_remote_sink(settings: Settings, client: httpx.Client | None = None) -> RemoteSink:
    """Errbit transport for *settings*, or a null sink when no API key is set."""
    if not settings.errbit_api_key:
        return NullRemoteSink()
    return ErrbitTransport(
        host=settings.errbit_host,
        port=settings.errbit_port,
        api_key=settings.errbit_api_key,
        secure=settings.errbit_secure,
        environment=settings.errbit_environment,
        timeout=settings.errbit_timeout_seconds,
        client=client,
    )
