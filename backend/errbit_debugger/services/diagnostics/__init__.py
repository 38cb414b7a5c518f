from __future__ import annotations

"""
Diagnostics and error classification utilities.

This package provides:
- error_classifier: map runtime error kinds to severities and typed
  signals that the remote sink understands.
- ignore_filter: keep routine client exceptions away from remote reporting.
- platform: the local diagnostics facility (stdlib logging) every signal
  is delegated to, whatever happened on the remote side.

The goal is to keep error handling logic centralized and deterministic.
"""
