from __future__ import annotations

import pytest

from binsight.domain.model import ArtifactLocation, ArtifactMetadata


def test_parse_splits_repository_key_and_path() -> None:
    location = ArtifactLocation.parse("/conda-local/linux-64/numpy-1.19.2-py38_0.tar.bz2/")

    assert location.repo_key == "conda-local"
    assert location.path == "linux-64/numpy-1.19.2-py38_0.tar.bz2"
    assert location.name == "numpy-1.19.2-py38_0.tar.bz2"
    assert location.parent == ArtifactLocation("conda-local", "linux-64")
    assert location.parent_name == "linux-64"
    assert str(location) == "conda-local/linux-64/numpy-1.19.2-py38_0.tar.bz2"


def test_items_at_repository_root_have_no_parent() -> None:
    location = ArtifactLocation("conda-local", "numpy-1.19.2-py38_0.tar.bz2")

    assert location.parent is None
    assert location.parent_name is None


def test_repository_root() -> None:
    root = ArtifactLocation.parse("conda-local")

    assert root.is_root
    assert root.segments == ()
    assert root.name == "conda-local"
    assert str(root) == "conda-local"


@pytest.mark.parametrize("repo_key", ["", "a/b"])
def test_rejects_invalid_repository_keys(repo_key: str) -> None:
    with pytest.raises(ValueError, match="Invalid repository key"):
        ArtifactLocation(repo_key, "path")


def test_locations_are_ordered_and_hashable() -> None:
    locations = {
        ArtifactLocation("b", "x"),
        ArtifactLocation("a", "y"),
        ArtifactLocation("a", "/y/"),
    }

    assert sorted(locations) == [ArtifactLocation("a", "y"), ArtifactLocation("b", "x")]


def test_metadata_property_lookup_strips_values() -> None:
    metadata = ArtifactMetadata(properties={"npm.name": "  lodash ", "npm.version": " "})

    assert metadata.get_property("npm.name") == "lodash"
    assert metadata.get_property("npm.version") is None
    assert metadata.get_property("absent") is None
