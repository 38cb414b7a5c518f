# backend/errbit_debugger/config/__init__.py
from __future__ import annotations

"""
Shortcut imports for configuration.
"""

from .settings import Settings, get_settings  # noqa: F401
from .state import DebuggerState, parse_reportable_kinds  # noqa: F401
