"""Shared exceptions for errbit_debugger.

Sink failures never surface as exceptions; they are reported through
NotifyResult / StoreResult values instead.
"""

from __future__ import annotations


class DebuggerError(Exception):
    """Base exception for errbit_debugger."""


class ConfigError(DebuggerError):
    """Raised when configuration is invalid or the debugger is initialized twice."""


class BadRequestError(DebuggerError):
    """Client sent a request the application cannot serve (HTTP 4xx)."""

    status_code = 400


class NotFoundError(BadRequestError):
    """Requested resource does not exist (HTTP 404)."""

    status_code = 404


class InvalidRouteError(BadRequestError):
    """No handler is registered for the requested route (HTTP 404)."""

    status_code = 404
