# backend/errbit_debugger/models/__init__.py
from __future__ import annotations

"""
ORM models for the audit log store.

This module depends on:
- errbit_debugger.db.session.Base for the declarative base

It is used by:
- errbit_debugger.services.audit.store for inserts and table creation

Models:
- LogEntry: one audit trail row (flag, method, description, payload, ip)
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text

from errbit_debugger.db.session import Base


class LogEntry(Base):
    """
    Durable audit record written by ErrorPipeline.db_log.

    Rows are written once and never updated.
    """

    __tablename__ = "log"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # JSON-serialized payload supplied by the caller
    data = Column(Text, nullable=True)
    description = Column(Text, nullable=False)
    method = Column(String(255), nullable=False)
    flag = Column(String(255), nullable=False)
    ip = Column(String(64), nullable=False, default="")

    created = Column(DateTime, default=datetime.now, nullable=False, index=True)
