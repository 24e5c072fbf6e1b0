"""Identities read from metadata the repository already attached to an item."""

from __future__ import annotations

from typing import TYPE_CHECKING, Final

from binsight.domain.model import (
    CanonicalIdentity,
    Ecosystem,
    ExtractionFailure,
    ExtractionFailureKind,
)

if TYPE_CHECKING:
    from binsight.domain.model import ArtifactLocation, ArtifactMetadata, ExtractionResult

# (name property, version property) written by the repository's package indexers
NAME_VERSION_PROPERTIES: Final[dict[Ecosystem, tuple[str, str]]] = {
    Ecosystem.BOWER: ("bower.name", "bower.version"),
    Ecosystem.COCOAPODS: ("pods.name", "pods.version"),
    Ecosystem.CRAN: ("cran.name", "cran.version"),
    Ecosystem.GEMS: ("gem.name", "gem.version"),
    Ecosystem.GO: ("go.name", "go.version"),
    Ecosystem.NPM: ("npm.name", "npm.version"),
    Ecosystem.NUGET: ("nuget.id", "nuget.version"),
    Ecosystem.PYPI: ("pypi.name", "pypi.version"),
}

LAYOUT_ECOSYSTEMS: Final[frozenset[Ecosystem]] = frozenset({Ecosystem.MAVEN, Ecosystem.GRADLE})


def supports_metadata(ecosystem: Ecosystem) -> bool:
    return ecosystem in NAME_VERSION_PROPERTIES or ecosystem in LAYOUT_ECOSYSTEMS


def extract_from_metadata(
    ecosystem: Ecosystem,
    location: ArtifactLocation,
    metadata: ArtifactMetadata | None,
) -> ExtractionResult:
    """Build an identity from item properties or the repository layout."""

    if not supports_metadata(ecosystem):
        return _missing(location, f"No metadata properties are known for {ecosystem}")
    if metadata is None:
        return _missing(location, f"No metadata available for {location}")

    if ecosystem in LAYOUT_ECOSYSTEMS:
        layout = metadata.layout
        if layout is None:
            return _missing(location, f"No {ecosystem} layout information for {location}")
        organization = _clean(layout.organization)
        module = _clean(layout.module)
        revision = _clean(layout.base_revision)
        if not (organization and module and revision):
            return _missing(location, f"Incomplete {ecosystem} layout information for {location}")
        return CanonicalIdentity(
            ecosystem=ecosystem, namespace=organization, name=module, version=revision
        )

    name_key, version_key = NAME_VERSION_PROPERTIES[ecosystem]
    name = _clean(metadata.get_property(name_key))
    version = _clean(metadata.get_property(version_key))
    if not (name and version):
        return _missing(
            location,
            f"Missing {name_key} or {version_key} property on {location}",
        )
    return CanonicalIdentity(ecosystem=ecosystem, name=name, version=version)


def _clean(value: str | None) -> str:
    return (value or "").strip()


def _missing(location: ArtifactLocation, message: str) -> ExtractionFailure:
    return ExtractionFailure(
        kind=ExtractionFailureKind.MISSING_METADATA,
        location=location,
        message=message,
    )
