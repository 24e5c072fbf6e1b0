"""Canonical component identities and extraction outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .enums import forge_for

if TYPE_CHECKING:
    from .enums import Ecosystem, ExtractionFailureKind
    from .locations import ArtifactLocation


@dataclass(frozen=True, slots=True)
class CanonicalIdentity:
    """A component as the intelligence service knows it."""

    ecosystem: Ecosystem
    name: str
    version: str
    namespace: str | None = None

    def __post_init__(self) -> None:
        if not self.name.strip():
            raise ValueError("Canonical identity requires a non-empty name")
        if not self.version.strip():
            raise ValueError("Canonical identity requires a non-empty version")

    @property
    def forge(self) -> str:
        return forge_for(self.ecosystem)

    @property
    def external_id(self) -> str:
        if self.namespace:
            return f"{self.forge}:{self.namespace}:{self.name}:{self.version}"
        return f"{self.forge}:{self.name}/{self.version}"


@dataclass(frozen=True, slots=True)
class ExtractionFailure:
    """Why one artifact could not be given a canonical identity."""

    kind: ExtractionFailureKind
    location: ArtifactLocation
    message: str


type ExtractionResult = CanonicalIdentity | ExtractionFailure
