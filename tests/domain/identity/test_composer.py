from __future__ import annotations

from binsight.domain.identity import extract_composer
from binsight.domain.model import (
    ArtifactLocation,
    ArtifactMetadata,
    CanonicalIdentity,
    Ecosystem,
    ExtractionFailure,
    ExtractionFailureKind,
)

LOCATION = ArtifactLocation("composer-remote", "monolog/monolog/3.5.0.zip")
SHA1 = "aa6e5ea4e40b6f57a3a4f4b2b3a9a8d0f1e2c3d4"


def _manifest(shasum: str) -> dict[str, object]:
    return {
        "packages": {
            "monolog/monolog": {
                "3.4.0": {
                    "name": "monolog/monolog",
                    "version": "3.4.0",
                    "dist": {"type": "zip", "shasum": "0" * 40},
                },
                "3.5.0": {
                    "name": "monolog/monolog",
                    "version": "3.5.0",
                    "dist": {"type": "zip", "shasum": shasum},
                },
            }
        }
    }


def test_matches_manifest_entry_by_checksum() -> None:
    result = extract_composer(
        Ecosystem.COMPOSER,
        LOCATION,
        ArtifactMetadata(sha1=SHA1.upper()),
        [_manifest(SHA1)],
    )

    assert result == CanonicalIdentity(
        ecosystem=Ecosystem.COMPOSER, name="monolog/monolog", version="3.5.0"
    )
    assert isinstance(result, CanonicalIdentity)
    assert result.external_id == "packagist:monolog/monolog/3.5.0"


def test_unreadable_manifests_are_skipped() -> None:
    result = extract_composer(
        Ecosystem.COMPOSER,
        LOCATION,
        ArtifactMetadata(sha1=SHA1),
        [{"packages": "not-a-mapping"}, _manifest(SHA1)],
    )

    assert isinstance(result, CanonicalIdentity)


def test_no_matching_checksum_is_a_failure() -> None:
    result = extract_composer(
        Ecosystem.COMPOSER, LOCATION, ArtifactMetadata(sha1=SHA1), [_manifest("f" * 40)]
    )

    assert isinstance(result, ExtractionFailure)
    assert result.kind is ExtractionFailureKind.MANIFEST_NOT_FOUND


def test_missing_checksum_is_a_failure() -> None:
    result = extract_composer(Ecosystem.COMPOSER, LOCATION, None, [_manifest(SHA1)])

    assert isinstance(result, ExtractionFailure)
    assert result.kind is ExtractionFailureKind.MANIFEST_NOT_FOUND


def test_blank_manifest_entry_is_a_failure() -> None:
    manifest = {
        "packages": {
            "monolog/monolog": {
                "3.5.0": {"name": "  ", "version": "3.5.0", "dist": {"shasum": SHA1}},
            }
        }
    }

    result = extract_composer(
        Ecosystem.COMPOSER, LOCATION, ArtifactMetadata(sha1=SHA1), [manifest]
    )

    assert isinstance(result, ExtractionFailure)
    assert result.kind is ExtractionFailureKind.MISSING_METADATA
