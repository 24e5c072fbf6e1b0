"""Process-wide engine for the property store.

``startup`` must run once before any store is opened without an explicit
session factory. Tests hand in their own engine and call ``shutdown`` after.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from binsight.config.storage import get_database_config

from .tables import create_all_tables

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine
    from sqlalchemy.engine.interfaces import DBAPIConnection
    from sqlalchemy.pool import ConnectionPoolEntry

    from binsight.config.storage import DatabaseConfig

log = getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the property store is used before initialisation."""


@dataclass(slots=True)
class _EngineState:
    engine: Engine | None = None
    sessions: sessionmaker[Session] | None = None

    def bind(self, engine: Engine) -> None:
        self.engine = engine
        self.sessions = sessionmaker(bind=engine, expire_on_commit=False)

    def clear(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.sessions = None


_STATE = _EngineState()


def build_engine(config: DatabaseConfig) -> Engine:
    """Create an engine for ``config``; SQLite connections enforce foreign keys."""

    engine = create_engine(config.uri, echo=config.echo)
    if config.is_sqlite:
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(
    dbapi_connection: DBAPIConnection, _connection_record: ConnectionPoolEntry
) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
    force: bool = False,
) -> None:
    """Bind the store to ``engine`` (or a new one) and create missing tables."""

    if _STATE.engine is not None and not force:
        raise StartupError("Property store already initialised. Pass force=True to reconfigure.")

    if engine is None:
        config = get_database_config()
        if database_uri is not None:
            config = replace(config, uri=database_uri)
        engine = build_engine(config)
    create_all_tables(engine)
    log.debug("Property store bound to %s", engine.url.render_as_string(hide_password=True))
    _STATE.bind(engine)


def configured_engine() -> Engine | None:
    return _STATE.engine


def is_started() -> bool:
    return _STATE.engine is not None


def session_factory() -> sessionmaker[Session]:
    if _STATE.sessions is None:
        raise StartupError(
            "Property store not initialised. Call binsight.adapters.sqlalchemy.startup() "
            "before opening the store."
        )
    return _STATE.sessions


def shutdown() -> None:
    """Dispose the managed engine; the next store needs a fresh ``startup``."""

    _STATE.clear()
