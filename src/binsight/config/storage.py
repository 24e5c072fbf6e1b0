"""Where the property store keeps its database."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .errors import ConfigurationError

DATA_DIR_ENV: Final[str] = "BINSIGHT_DATA_DIR"
DATABASE_URI_ENV: Final[str] = "DATABASE_URI"
DATABASE_FILENAME: Final[str] = "properties.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Connection settings for the property store.

    ``uri`` is any SQLAlchemy URL. ``echo`` turns on statement logging through
    the ``sqlalchemy.engine`` logger.
    """

    uri: str
    echo: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.uri.startswith("sqlite")


def default_data_dir() -> Path:
    """Per-user data directory following the XDG base directory layout."""

    configured = os.getenv(DATA_DIR_ENV)
    if configured:
        return Path(configured).expanduser().resolve()
    xdg_home = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_home) if xdg_home else Path.home() / ".local" / "share"
    return (base / "binsight").expanduser().resolve()


def sqlite_uri(data_dir: Path, *, create: bool = True) -> str:
    if create:
        try:
            data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigurationError(f"Cannot create data directory {data_dir}: {exc}") from exc
    return f"sqlite+pysqlite:///{data_dir / DATABASE_FILENAME}"


def get_database_config(*, data_dir: Path | None = None) -> DatabaseConfig:
    uri = os.getenv(DATABASE_URI_ENV)
    if not uri or not uri.strip():
        uri = sqlite_uri(data_dir or default_data_dir())
    return DatabaseConfig(
        uri=uri.strip(),
        echo=os.getenv("BINSIGHT_DATABASE_ECHO", "").strip().lower() in {"1", "true", "yes"},
    )
