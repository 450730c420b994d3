"""Location of the billing store.

``DATABASE_URI`` points at the shared billing database in every real
deployment. Without it the job falls back to a local SQLite file, which is
only meant for development runs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

SQLITE_FILENAME: Final[str] = "subsync.db"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def resolve_data_dir() -> Path:
    """Return the directory for the SQLite fallback, creating it if needed."""

    env_dir = os.getenv("SUBSYNC_DATA_DIR")
    if env_dir:
        data_dir = Path(env_dir)
    else:
        xdg_home = os.getenv("XDG_DATA_HOME")
        data_dir = (Path(xdg_home) if xdg_home else Path.home() / ".local" / "share") / "subsync"
    data_dir = data_dir.expanduser().resolve()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir


def get_database_config() -> DatabaseConfig:
    env_uri = os.getenv("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri)
    return DatabaseConfig(uri=f"sqlite+pysqlite:///{resolve_data_dir() / SQLITE_FILENAME}")
