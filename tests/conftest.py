from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from binsight.adapters.sqlalchemy import (
    SqlAlchemyPropertyStore,
    create_all_tables,
    shutdown,
    startup,
)

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Iterator


@pytest.fixture
def sqlite_engine() -> Iterator[Engine]:
    # one shared connection so classifier threads see the same in-memory database
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_all_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def property_store(sqlite_engine: Engine) -> SqlAlchemyPropertyStore:
    return SqlAlchemyPropertyStore(sessionmaker(bind=sqlite_engine, expire_on_commit=False))


@pytest.fixture
def started_store(sqlite_engine: Engine) -> Iterator[SqlAlchemyPropertyStore]:
    startup(engine=sqlite_engine, force=True)
    try:
        yield SqlAlchemyPropertyStore()
    finally:
        shutdown()
