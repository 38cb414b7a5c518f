from __future__ import annotations

"""backend/errbit_debugger/config/settings.py

Error-capture configuration using environment-driven settings.

This module centralizes:
- the master switch for remote reporting (send_errors)
- console echo mode
- Errbit endpoint, credentials and environment label
- which runtime error kinds are reportable and which exceptions are ignored
- the audit log database URL
"""
from functools import lru_cache
from typing import Dict, List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
  app_name: str = "errbit-debugger"

  # Reporting switches
  send_errors: bool = True
  console_mode: bool = False

  # Errbit (Airbrake v3 compatible) endpoint
  errbit_api_key: str = ""
  errbit_host: str = "errbit.local"
  errbit_port: int = 443
  errbit_secure: bool = True
  errbit_environment: str = "development"

  # Reporting runs inside request handlers and at shutdown; keep it short.
  errbit_timeout_seconds: float = 2.0

  # Runtime error kinds forwarded by the error handler ("all" is a wildcard)
  reportable_kinds: List[str] = [
      "notice",
      "user_notice",
      "warning",
      "user_warning",
      "deprecated",
      "user_deprecated",
      "strict",
      "error",
      "user_error",
      "recoverable_error",
      "core_error",
      "compile_error",
      "parse",
      "fatal",
  ]

  # Routine client errors (HTTP 400/404) are never reported remotely
  ignored_exceptions: List[str] = [
      "BadRequestError",
      "RequestValidationError",
  ]
  exception_parents: Dict[str, List[str]] = {
      "NotFoundError": ["BadRequestError"],
      "InvalidRouteError": ["BadRequestError"],
  }

  # Audit log store; no store is configured when unset
  database_url: str | None = None

  log_level: str = "INFO"

  model_config = SettingsConfigDict(
      env_prefix="ERRBIT_DEBUGGER_",
      env_file=".env",
      env_file_encoding="utf-8",
  )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Return a cached Settings instance."""
  return Settings()
