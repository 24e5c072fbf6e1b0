"""Inspection and notification-pass settings."""

from __future__ import annotations

from dataclasses import dataclass, field

from .env import env_float, env_int, env_list
from .errors import ConfigurationError

DEFAULT_CONDA_EXTENSIONS = (".tar.bz2", ".conda")
DEFAULT_FETCH_RETRY_COUNT = 3
DEFAULT_MAX_WORKERS = 4


@dataclass(frozen=True, slots=True)
class InspectionConfig:
    """Values driving identity extraction and notification reconciliation.

    ``repositories`` maps a repository key to the ecosystem tag declared for it.
    An empty ``enabled_ecosystems`` means every declared ecosystem is enabled.
    """

    repositories: dict[str, str] = field(default_factory=dict[str, str])
    enabled_ecosystems: tuple[str, ...] = ()
    conda_extensions: tuple[str, ...] = DEFAULT_CONDA_EXTENSIONS
    fetch_retry_count: int = DEFAULT_FETCH_RETRY_COUNT
    max_workers: int = DEFAULT_MAX_WORKERS
    deadline_seconds: float | None = None


def parse_repository_mapping(entries: tuple[str, ...]) -> dict[str, str]:
    """Parse ``repo-key=ecosystem`` entries."""

    mapping: dict[str, str] = {}
    for entry in entries:
        repo_key, sep, ecosystem = entry.partition("=")
        if not sep or not repo_key.strip() or not ecosystem.strip():
            raise ConfigurationError(
                f"Invalid repository entry {entry!r}; expected 'repo-key=ecosystem'"
            )
        mapping[repo_key.strip()] = ecosystem.strip().lower()
    return mapping


def get_inspection_config() -> InspectionConfig:
    fetch_retry_count = env_int("BINSIGHT_FETCH_RETRY_COUNT", DEFAULT_FETCH_RETRY_COUNT)
    if fetch_retry_count < 0:
        raise ConfigurationError("BINSIGHT_FETCH_RETRY_COUNT must be non-negative")
    max_workers = env_int("BINSIGHT_MAX_WORKERS", DEFAULT_MAX_WORKERS)
    if max_workers < 1:
        raise ConfigurationError("BINSIGHT_MAX_WORKERS must be at least 1")

    return InspectionConfig(
        repositories=parse_repository_mapping(env_list("BINSIGHT_REPOSITORIES")),
        enabled_ecosystems=tuple(
            value.lower() for value in env_list("BINSIGHT_ENABLED_ECOSYSTEMS")
        ),
        conda_extensions=env_list("BINSIGHT_CONDA_EXTENSIONS", DEFAULT_CONDA_EXTENSIONS),
        fetch_retry_count=fetch_retry_count,
        max_workers=max_workers,
        deadline_seconds=env_float("BINSIGHT_PASS_DEADLINE_SECONDS", None),
    )
