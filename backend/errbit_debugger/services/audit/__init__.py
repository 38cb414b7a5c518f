from __future__ import annotations

"""
Audit log sink package.

Provides the AuditStore interface and its SQLAlchemy implementation used
by ErrorPipeline.db_log.
"""

from .store import (  # noqa: F401
    AuditStore,
    SqlAlchemyAuditStore,
    StoreResult,
    create_log_table,
)
