"""External identity extraction for repository artifacts."""

from __future__ import annotations

from .composer import extract_composer
from .conda import extract_conda
from .metadata import extract_from_metadata, supports_metadata
from .resolver import ExtractionSettings, IdentificationResult, IdentityResolver

__all__ = [
    "ExtractionSettings",
    "IdentificationResult",
    "IdentityResolver",
    "extract_composer",
    "extract_conda",
    "extract_from_metadata",
    "supports_metadata",
]
