"""Domain port definitions for adapters."""

from __future__ import annotations

from .intelligence import ComponentStatusService, NotificationSource, StatusFetchError
from .properties import ArtifactMetadataReader, LocationIndex, ManifestLocator, PropertyWriter

__all__ = [
    "ArtifactMetadataReader",
    "ComponentStatusService",
    "LocationIndex",
    "ManifestLocator",
    "NotificationSource",
    "PropertyWriter",
    "StatusFetchError",
]
