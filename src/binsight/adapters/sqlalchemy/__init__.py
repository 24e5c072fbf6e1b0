"""SQLAlchemy adapter package for the repository property store."""

from __future__ import annotations

from .engine import (
    StartupError,
    build_engine,
    configured_engine,
    is_started,
    session_factory,
    shutdown,
    startup,
)
from .store import SqlAlchemyPropertyStore
from .tables import create_all_tables, metadata

__all__ = [
    "SqlAlchemyPropertyStore",
    "StartupError",
    "build_engine",
    "configured_engine",
    "create_all_tables",
    "is_started",
    "metadata",
    "session_factory",
    "shutdown",
    "startup",
]
