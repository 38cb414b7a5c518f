# backend/errbit_debugger/db/session.py
from __future__ import annotations

"""
Database engine, session factory and Base ORM declarations.

The audit log store is optional, so nothing is connected at import time:
- create_db_engine(url) builds an engine for the configured DATABASE_URL
- make_session_factory(engine) returns the sessionmaker the store uses
It is imported by:
- errbit_debugger.models (for Base)
- errbit_debugger.services.audit.store (for engines and sessions)
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

# Base class for all ORM models
Base = declarative_base()


def create_db_engine(database_url: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across threads."""
    if database_url.startswith("sqlite") and (
        ":memory:" in database_url or database_url.rstrip("/") == "sqlite:"
    ):
        return create_engine(
            database_url,
            future=True,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(
        database_url,
        future=True,
        pool_pre_ping=True,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to *engine*."""
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        future=True,
    )
