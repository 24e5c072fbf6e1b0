"""Ports onto the repository's per-item property store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from binsight.domain.model import ArtifactLocation, ArtifactMetadata


@runtime_checkable
class ArtifactMetadataReader(Protocol):
    """Read-only access to the ambient metadata of an item."""

    def read(self, location: ArtifactLocation) -> ArtifactMetadata | None: ...


@runtime_checkable
class ManifestLocator(Protocol):
    """Locate and deserialize package manifests stored alongside artifacts."""

    def find_manifests(self, repo_key: str) -> Iterable[Mapping[str, object]]: ...


@runtime_checkable
class LocationIndex(Protocol):
    """Project/version to artifact index built at scan time."""

    def locations_for(
        self, project_name: str, project_version_name: str
    ) -> Iterable[ArtifactLocation]: ...


@runtime_checkable
class PropertyWriter(Protocol):
    """Write side of the property store, used by application services only."""

    def set_properties(self, location: ArtifactLocation, values: Mapping[str, str]) -> None: ...

    def delete_properties(self, location: ArtifactLocation, keys: Iterable[str]) -> None: ...
