"""Where intakesync keeps its local files.

Everything lives under one data directory: ``$INTAKESYNC_DATA_DIR`` when set,
otherwise ``$XDG_DATA_HOME/intakesync`` (``~/.local/share/intakesync``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "intakesync"
DEFAULT_DB_FILENAME: Final[str] = "intakesync.db"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"
PROCESSED_QUESTIONNAIRES_FILENAME: Final[str] = "processed_questionnaires.json"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME
    http_cache_filename: str = HTTP_CACHE_FILENAME
    processed_questionnaires_filename: str = PROCESSED_QUESTIONNAIRES_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def _file(self, filename: str, *, ensure: bool) -> Path:
        data_dir = self.resolve_data_dir()
        if ensure:
            data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / filename

    def database_path(self, *, ensure: bool = True) -> Path:
        return self._file(self.database_filename, ensure=ensure)

    def http_cache_path(self, *, ensure: bool = True) -> Path:
        return self._file(self.http_cache_filename, ensure=ensure)

    def processed_questionnaires_path(self, *, ensure: bool = True) -> Path:
        return self._file(self.processed_questionnaires_filename, ensure=ensure)

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    uri: str


def _default_data_dir() -> Path:
    xdg_home = os.getenv("XDG_DATA_HOME")
    base = Path(xdg_home) if xdg_home else Path.home() / ".local" / "share"
    return base / APP_DIR_NAME


def get_storage_config() -> StorageConfig:
    override = os.getenv("INTAKESYNC_DATA_DIR")
    return StorageConfig(data_dir=Path(override) if override else _default_data_dir())


def get_database_config(*, storage: StorageConfig | None = None) -> DatabaseConfig:
    if uri := os.getenv("DATABASE_URI"):
        return DatabaseConfig(uri=uri)
    return DatabaseConfig(uri=(storage or get_storage_config()).database_uri())


def get_database_uri() -> str:
    return get_database_config().uri


def get_http_cache_path() -> Path:
    return get_storage_config().http_cache_path()
