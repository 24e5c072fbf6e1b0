"""SQLAlchemy table metadata for the repository item property store."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    TypeDecorator,
    UniqueConstraint,
)

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

metadata = MetaData()


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


item_table = Table(
    "item",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("repo_key", String(255), nullable=False),
    Column("path", String(2048), nullable=False),
    Column("sha1", String(40)),
    Column("layout_organization", String(255)),
    Column("layout_module", String(255)),
    Column("layout_base_revision", String(255)),
    Column("created_at", UTCDateTime(), nullable=False),
    UniqueConstraint("repo_key", "path", name="uq_item_location"),
)

item_property_table = Table(
    "item_property",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("item_id", Integer, ForeignKey("item.id", ondelete="CASCADE"), nullable=False),
    Column("name", String(255), nullable=False),
    Column("value", Text, nullable=False),
    Column("updated_at", UTCDateTime(), nullable=False),
    UniqueConstraint("item_id", "name", name="uq_item_property_name"),
    Index("ix_item_property_name_value", "name", "value"),
)

item_manifest_table = Table(
    "item_manifest",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("repo_key", String(255), nullable=False),
    Column("path", String(2048), nullable=False),
    Column("document", JSON, nullable=False),
    UniqueConstraint("repo_key", "path", name="uq_item_manifest_location"),
    Index("ix_item_manifest_repo_key", "repo_key"),
)


def create_all_tables(engine: Engine) -> None:
    log.debug("Creating property store tables on %s", engine.url)
    metadata.create_all(engine, checkfirst=True)
