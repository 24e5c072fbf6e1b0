"""Composer identities, found by matching the artifact checksum against package manifests.

Composer dist archives carry no reliable name or version in their filename. The
repository keeps the upstream ``packages.json`` style manifests next to them, so
the artifact is identified by the manifest entry whose ``dist.shasum`` equals the
artifact's sha1.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from binsight.domain.model import CanonicalIdentity, ExtractionFailure, ExtractionFailureKind

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from binsight.domain.model import (
        ArtifactLocation,
        ArtifactMetadata,
        Ecosystem,
        ExtractionResult,
    )

log = getLogger(__name__)


class ComposerBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ComposerDist(ComposerBaseModel):
    type: str | None = None
    url: str | None = None
    reference: str | None = None
    shasum: str | None = None


class ComposerVersion(ComposerBaseModel):
    name: str
    version: str
    dist: ComposerDist | None = None


class ComposerManifest(ComposerBaseModel):
    packages: dict[str, dict[str, ComposerVersion]] = Field(default_factory=dict)


def extract_composer(
    ecosystem: Ecosystem,
    location: ArtifactLocation,
    metadata: ArtifactMetadata | None,
    manifests: Iterable[Mapping[str, object]],
) -> ExtractionResult:
    """Find the manifest entry describing ``location``."""

    sha1 = metadata.sha1 if metadata is not None else None
    if not sha1:
        return ExtractionFailure(
            kind=ExtractionFailureKind.MANIFEST_NOT_FOUND,
            location=location,
            message=f"No sha1 checksum available for {location}",
        )

    for raw_manifest in manifests:
        try:
            manifest = ComposerManifest.model_validate(raw_manifest)
        except ValidationError as exc:
            log.debug("Skipping unreadable composer manifest in %s: %s", location.repo_key, exc)
            continue
        match = _find_version(manifest, sha1)
        if match is None:
            continue
        name, version = match.name.strip(), match.version.strip()
        if not (name and version):
            return ExtractionFailure(
                kind=ExtractionFailureKind.MISSING_METADATA,
                location=location,
                message=f"Composer manifest entry for checksum {sha1} lacks a name or version",
            )
        return CanonicalIdentity(ecosystem=ecosystem, name=name, version=version)

    return ExtractionFailure(
        kind=ExtractionFailureKind.MANIFEST_NOT_FOUND,
        location=location,
        message=f"No composer manifest in {location.repo_key} lists checksum {sha1}",
    )


def _find_version(manifest: ComposerManifest, sha1: str) -> ComposerVersion | None:
    wanted = sha1.lower()
    for versions in manifest.packages.values():
        for candidate in versions.values():
            dist = candidate.dist
            if dist is not None and dist.shasum and dist.shasum.lower() == wanted:
                return candidate
    return None
