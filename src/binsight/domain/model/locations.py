"""Repository item locations and the ambient metadata attached to them."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True, order=True)
class ArtifactLocation:
    """Path to one item in the repository.

    ``path`` is relative to the repository root and never starts or ends with
    a slash; the repository root itself has an empty path.
    """

    repo_key: str
    path: str = ""

    def __post_init__(self) -> None:
        if not self.repo_key or "/" in self.repo_key:
            raise ValueError(f"Invalid repository key: {self.repo_key!r}")
        object.__setattr__(self, "path", self.path.strip("/"))

    @classmethod
    def parse(cls, value: str) -> ArtifactLocation:
        """Build a location from ``repo-key/some/path``."""

        repo_key, _, path = value.strip().strip("/").partition("/")
        return cls(repo_key=repo_key, path=path)

    @property
    def segments(self) -> tuple[str, ...]:
        if not self.path:
            return ()
        return tuple(self.path.split("/"))

    @property
    def name(self) -> str:
        segments = self.segments
        return segments[-1] if segments else self.repo_key

    @property
    def is_root(self) -> bool:
        return not self.path

    @property
    def parent(self) -> ArtifactLocation | None:
        """Enclosing folder, or ``None`` for items at the repository root."""

        segments = self.segments
        if len(segments) <= 1:
            return None
        return ArtifactLocation(self.repo_key, "/".join(segments[:-1]))

    @property
    def parent_name(self) -> str | None:
        parent = self.parent
        return None if parent is None else parent.name

    def __str__(self) -> str:
        return f"{self.repo_key}/{self.path}" if self.path else self.repo_key


@dataclass(frozen=True, slots=True)
class LayoutInfo:
    """Module coordinates derived from the repository layout (maven style)."""

    organization: str | None
    module: str | None
    base_revision: str | None


@dataclass(frozen=True, slots=True)
class ArtifactMetadata:
    """Ambient metadata the repository already holds for an item."""

    properties: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    layout: LayoutInfo | None = None
    sha1: str | None = None

    def get_property(self, key: str) -> str | None:
        value = self.properties.get(key)
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None
