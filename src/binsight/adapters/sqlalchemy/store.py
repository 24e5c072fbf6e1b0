"""Repository item property store backed by SQLAlchemy Core tables."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from types import MappingProxyType
from typing import TYPE_CHECKING

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.orm import aliased

from binsight.domain.model import (
    ArtifactLocation,
    ArtifactMetadata,
    ArtifactProperty,
    LayoutInfo,
)

from .engine import session_factory as default_session_factory
from .tables import item_manifest_table, item_property_table, item_table

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from sqlalchemy.orm import Session, sessionmaker

log = getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SqlAlchemyPropertyStore:
    """Item metadata, properties and package manifests for every repository.

    Every call runs in its own short transaction, so one store may be shared
    by the classifier threads of a reconciliation pass.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session] | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._session_factory = session_factory or default_session_factory()
        self._clock = clock

    # Items

    def register_item(
        self,
        location: ArtifactLocation,
        *,
        sha1: str | None = None,
        layout: LayoutInfo | None = None,
        properties: Mapping[str, str] | None = None,
    ) -> None:
        """Record an item (or refresh its checksum and layout) with optional properties."""

        values = {
            "sha1": sha1,
            "layout_organization": layout.organization if layout else None,
            "layout_module": layout.module if layout else None,
            "layout_base_revision": layout.base_revision if layout else None,
        }
        with self._session_factory.begin() as session:
            item_id = self._item_id(session, location)
            if item_id is None:
                item_id = self._insert_item(session, location, **values)
            else:
                session.execute(
                    update(item_table).where(item_table.c.id == item_id).values(**values)
                )
            if properties:
                self._upsert_properties(session, item_id, properties)

    def iter_locations(self, location: ArtifactLocation) -> list[ArtifactLocation]:
        """Return ``location`` itself or every item beneath it, sorted."""

        stmt = select(item_table.c.repo_key, item_table.c.path).where(
            item_table.c.repo_key == location.repo_key
        )
        if not location.is_root:
            stmt = stmt.where(
                (item_table.c.path == location.path)
                | item_table.c.path.startswith(f"{location.path}/", autoescape=True)
            )
        with self._session_factory() as session:
            rows = session.execute(stmt).all()
        return sorted(ArtifactLocation(repo_key, path) for repo_key, path in rows)

    # ArtifactMetadataReader

    def read(self, location: ArtifactLocation) -> ArtifactMetadata | None:
        with self._session_factory() as session:
            row = session.execute(
                select(item_table).where(
                    item_table.c.repo_key == location.repo_key,
                    item_table.c.path == location.path,
                )
            ).first()
            if row is None:
                return None
            properties = dict(
                session.execute(
                    select(item_property_table.c.name, item_property_table.c.value).where(
                        item_property_table.c.item_id == row.id
                    )
                ).tuples()
            )

        layout = None
        if row.layout_organization or row.layout_module or row.layout_base_revision:
            layout = LayoutInfo(
                organization=row.layout_organization,
                module=row.layout_module,
                base_revision=row.layout_base_revision,
            )
        return ArtifactMetadata(
            properties=MappingProxyType(properties),
            layout=layout,
            sha1=row.sha1,
        )

    # ManifestLocator

    def add_manifest(self, location: ArtifactLocation, document: Mapping[str, object]) -> None:
        with self._session_factory.begin() as session:
            updated = session.execute(
                update(item_manifest_table)
                .where(
                    item_manifest_table.c.repo_key == location.repo_key,
                    item_manifest_table.c.path == location.path,
                )
                .values(document=dict(document))
            )
            if updated.rowcount == 0:
                session.execute(
                    insert(item_manifest_table).values(
                        repo_key=location.repo_key,
                        path=location.path,
                        document=dict(document),
                    )
                )

    def find_manifests(self, repo_key: str) -> list[Mapping[str, object]]:
        with self._session_factory() as session:
            return list(
                session.execute(
                    select(item_manifest_table.c.document)
                    .where(item_manifest_table.c.repo_key == repo_key)
                    .order_by(item_manifest_table.c.path)
                ).scalars()
            )

    # LocationIndex

    def locations_for(
        self, project_name: str, project_version_name: str
    ) -> list[ArtifactLocation]:
        project = aliased(item_property_table)
        version = aliased(item_property_table)
        stmt = (
            select(item_table.c.repo_key, item_table.c.path)
            .join(
                project,
                and_(
                    project.c.item_id == item_table.c.id,
                    project.c.name == ArtifactProperty.PROJECT_NAME.value,
                    project.c.value == project_name,
                ),
            )
            .join(
                version,
                and_(
                    version.c.item_id == item_table.c.id,
                    version.c.name == ArtifactProperty.PROJECT_VERSION_NAME.value,
                    version.c.value == project_version_name,
                ),
            )
            .order_by(item_table.c.repo_key, item_table.c.path)
        )
        with self._session_factory() as session:
            rows = session.execute(stmt).all()
        return [ArtifactLocation(repo_key, path) for repo_key, path in rows]

    # PropertyWriter

    def set_properties(self, location: ArtifactLocation, values: Mapping[str, str]) -> None:
        if not values:
            return
        with self._session_factory.begin() as session:
            item_id = self._item_id(session, location)
            if item_id is None:
                log.debug("Creating item record for %s before setting properties", location)
                item_id = self._insert_item(session, location)
            self._upsert_properties(session, item_id, values)

    def delete_properties(self, location: ArtifactLocation, keys: Iterable[str]) -> None:
        names = [str(key) for key in keys]
        if not names:
            return
        with self._session_factory.begin() as session:
            item_id = self._item_id(session, location)
            if item_id is None:
                return
            session.execute(
                delete(item_property_table).where(
                    item_property_table.c.item_id == item_id,
                    item_property_table.c.name.in_(names),
                )
            )

    def _item_id(self, session: Session, location: ArtifactLocation) -> int | None:
        return session.execute(
            select(item_table.c.id).where(
                item_table.c.repo_key == location.repo_key,
                item_table.c.path == location.path,
            )
        ).scalar_one_or_none()

    def _insert_item(
        self,
        session: Session,
        location: ArtifactLocation,
        **values: str | None,
    ) -> int:
        result = session.execute(
            insert(item_table).values(
                repo_key=location.repo_key,
                path=location.path,
                created_at=self._clock(),
                **values,
            )
        )
        (item_id,) = result.inserted_primary_key
        return item_id

    def _upsert_properties(
        self, session: Session, item_id: int, values: Mapping[str, str]
    ) -> None:
        now = self._clock()
        values = {str(name): str(value) for name, value in values.items()}
        existing = set(
            session.execute(
                select(item_property_table.c.name).where(
                    item_property_table.c.item_id == item_id,
                    item_property_table.c.name.in_(list(values)),
                )
            ).scalars()
        )
        for name, value in values.items():
            if name in existing:
                session.execute(
                    update(item_property_table)
                    .where(
                        item_property_table.c.item_id == item_id,
                        item_property_table.c.name == name,
                    )
                    .values(value=value, updated_at=now)
                )
            else:
                session.execute(
                    insert(item_property_table).values(
                        item_id=item_id, name=name, value=value, updated_at=now
                    )
                )
