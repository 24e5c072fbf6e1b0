"""Conda archive identities, derived from the filename and its platform folder.

Conda archives are named ``<name>-<version>-<build>.<ext>`` and stored under a
platform folder such as ``linux-64`` or ``noarch``. The intelligence service
keys conda components by ``<version>-<build>-<platform>``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Final

from binsight.domain.model import CanonicalIdentity, ExtractionFailure, ExtractionFailureKind

if TYPE_CHECKING:
    from collections.abc import Sequence

    from binsight.domain.model import ArtifactLocation, Ecosystem, ExtractionResult

CONDA_FILENAME_PATTERN: Final = re.compile(r"(.*)-(.*)-([^-|\s]*)")


def extract_conda(
    ecosystem: Ecosystem,
    location: ArtifactLocation,
    *,
    extensions: Sequence[str],
) -> ExtractionResult:
    """Derive the canonical identity of a conda archive."""

    match = CONDA_FILENAME_PATTERN.fullmatch(location.name)
    if match is None or not all(group.strip() for group in match.groups()):
        return ExtractionFailure(
            kind=ExtractionFailureKind.MALFORMED_FILENAME,
            location=location,
            message="Failed to parse conda filename to extract component details.",
        )
    raw_name, raw_version, build_and_extension = match.groups()

    build_string = _strip_extension(build_and_extension, extensions)
    if build_string is None:
        return ExtractionFailure(
            kind=ExtractionFailureKind.UNSUPPORTED_EXTENSION,
            location=location,
            message=(
                "Failed to parse conda filename to extract component details. "
                "Likely unsupported file extension. "
                f"Supported conda file extensions are {', '.join(extensions)}"
            ),
        )

    platform = location.parent_name
    if platform is None or not platform.strip():
        return ExtractionFailure(
            kind=ExtractionFailureKind.MISSING_PARENT,
            location=location,
            message="Artifact does not have a parent folder. Cannot extract architecture.",
        )

    version = f"{raw_version.strip()}-{build_string}-{platform.strip()}"
    return CanonicalIdentity(ecosystem=ecosystem, name=raw_name.strip(), version=version)


def _strip_extension(value: str, extensions: Sequence[str]) -> str | None:
    # first listed extension wins
    for extension in extensions:
        if value.endswith(extension):
            return value.removesuffix(extension)
    return None
