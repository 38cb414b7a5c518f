# backend/errbit_debugger/__init__.py
from __future__ import annotations

"""
Centralized error capture for server-side Python applications.

Configuration lives in errbit_debugger.config, sinks and the dispatch
pipeline in errbit_debugger.services, the FastAPI wiring in
errbit_debugger.main.
"""

__version__ = "0.1.0"
