# backend/errbit_debugger/schemas/__init__.py
from __future__ import annotations

"""
Pydantic schemas for audit records.

This module is the contract between callers of ErrorPipeline.db_log and
the audit store implementations. It is used by:
- errbit_debugger.services.pipeline (to build records)
- errbit_debugger.services.audit.store (to persist them)
"""

import json
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


def serialize_payload(data: Any) -> Optional[str]:
    """Serialize an audit payload to JSON text.

    Empty payloads are stored as NULL. Values json cannot encode natively
    (dates, UUIDs, custom objects) fall back to their str() form.
    """
    if data is None or data == "" or data == {} or data == []:
        return None
    return json.dumps(data, default=str)


class AuditRecord(BaseModel):
    """One audit trail entry. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    flag: str
    method: str
    description: str
    data: Optional[str] = None
    ip: str = ""
    created_at: datetime = Field(default_factory=datetime.now)
