from __future__ import annotations

"""backend/errbit_debugger/services/audit/store.py

Persistent audit log store.

This module provides:

- StoreResult: ok/error outcome of a single insert
- AuditStore: interface the dispatch pipeline writes audit records to
- SqlAlchemyAuditStore: AuditStore writing LogEntry rows through SQLAlchemy
- create_log_table: creates the `log` table on a fresh database

Inserts never raise. A failed insert is rolled back and reported as a
StoreResult so the pipeline can decide what to do with the failure.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from errbit_debugger import models
from errbit_debugger.db.session import Base, create_db_engine, make_session_factory
from errbit_debugger.schemas import AuditRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreResult:
    """Outcome of AuditStore.insert."""

    ok: bool
    error: Optional[Exception] = None


class AuditStore(Protocol):
    """Minimal interface that audit stores must implement."""

    def insert(self, record: AuditRecord) -> StoreResult:
        """Persist *record* once. Must not raise."""
        ...


def create_log_table(engine: Engine) -> None:
    """Create the audit `log` table (and its `created` index) if missing."""
    Base.metadata.create_all(bind=engine, tables=[models.LogEntry.__table__])


class SqlAlchemyAuditStore:
    """AuditStore backed by a SQLAlchemy session factory."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, database_url: str, *, create_table: bool = True) -> SqlAlchemyAuditStore:
        engine = create_db_engine(database_url)
        if create_table:
            create_log_table(engine)
        return cls(make_session_factory(engine))

    def insert(self, record: AuditRecord) -> StoreResult:
        session = self._session_factory()
        try:
            session.add(
                models.LogEntry(
                    data=record.data,
                    description=record.description,
                    method=record.method,
                    flag=record.flag,
                    ip=record.ip,
                    created=record.created_at,
                )
            )
            session.commit()
            return StoreResult(ok=True)
        except Exception as exc:  # noqa: BLE001
            session.rollback()
            logger.debug("Audit insert failed: %s", exc)
            return StoreResult(ok=False, error=exc)
        finally:
            session.close()
