"""Dispatch artifacts to the extractor of their declared ecosystem.

The ecosystem comes from the repository's configuration, never from sniffing
the artifact. A failing extractor skips the artifact; there is no fallback to
another ecosystem's extractor.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from binsight.domain.model import (
    CanonicalIdentity,
    Ecosystem,
    ExtractionFailure,
    ExtractionFailureKind,
)

from .composer import extract_composer
from .conda import extract_conda
from .metadata import extract_from_metadata

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from binsight.domain.model import ArtifactLocation, ExtractionResult
    from binsight.domain.ports import ArtifactMetadataReader, ManifestLocator

log = getLogger(__name__)

DEFAULT_CONDA_EXTENSIONS = (".tar.bz2", ".conda")


@dataclass(frozen=True, slots=True)
class ExtractionSettings:
    """Which ecosystem governs each repository and which ecosystems are enabled."""

    repositories: Mapping[str, Ecosystem] = field(default_factory=dict[str, Ecosystem])
    enabled_ecosystems: frozenset[Ecosystem] = frozenset(Ecosystem)
    conda_extensions: tuple[str, ...] = DEFAULT_CONDA_EXTENSIONS


@dataclass(slots=True)
class IdentificationResult:
    identities: dict[ArtifactLocation, CanonicalIdentity] = field(
        default_factory=dict["ArtifactLocation", "CanonicalIdentity"]
    )
    failures: list[ExtractionFailure] = field(default_factory=list["ExtractionFailure"])


class IdentityResolver:
    """Resolve canonical identities for repository artifacts."""

    def __init__(
        self,
        settings: ExtractionSettings,
        *,
        metadata_reader: ArtifactMetadataReader,
        manifest_locator: ManifestLocator | None = None,
    ) -> None:
        self._settings = settings
        self._metadata_reader = metadata_reader
        self._manifest_locator = manifest_locator

    def ecosystem_for(self, location: ArtifactLocation) -> Ecosystem | None:
        return self._settings.repositories.get(location.repo_key)

    def resolve(self, location: ArtifactLocation) -> ExtractionResult:
        ecosystem = self.ecosystem_for(location)
        if ecosystem is None:
            result: ExtractionResult = ExtractionFailure(
                kind=ExtractionFailureKind.UNKNOWN_REPOSITORY,
                location=location,
                message=f"Repository {location.repo_key} has no declared ecosystem",
            )
        elif ecosystem not in self._settings.enabled_ecosystems:
            result = ExtractionFailure(
                kind=ExtractionFailureKind.ECOSYSTEM_DISABLED,
                location=location,
                message=f"Ecosystem {ecosystem} is not enabled",
            )
        else:
            result = self._extract(ecosystem, location)

        if isinstance(result, ExtractionFailure):
            log.info("Failed to extract component identity at %s (%s)", location, result.kind)
            log.debug(result.message)
        return result

    def resolve_many(self, locations: Iterable[ArtifactLocation]) -> IdentificationResult:
        outcome = IdentificationResult()
        for location in locations:
            result = self.resolve(location)
            if isinstance(result, ExtractionFailure):
                outcome.failures.append(result)
            else:
                outcome.identities[location] = result
        return outcome

    def _extract(self, ecosystem: Ecosystem, location: ArtifactLocation) -> ExtractionResult:
        match ecosystem:
            case Ecosystem.CONDA:
                return extract_conda(
                    ecosystem, location, extensions=self._settings.conda_extensions
                )
            case Ecosystem.COMPOSER:
                manifests = (
                    self._manifest_locator.find_manifests(location.repo_key)
                    if self._manifest_locator is not None
                    else ()
                )
                return extract_composer(
                    ecosystem, location, self._metadata_reader.read(location), manifests
                )
            case _:
                return extract_from_metadata(
                    ecosystem, location, self._metadata_reader.read(location)
                )
