from __future__ import annotations

import os
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from intakesync.adapters.sqlalchemy import Database, create_store_engine, startup

os.environ.setdefault("DATABASE_URI", "sqlite+pysqlite:///:memory:")

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator
    from pathlib import Path

    from intakesync.adapters.sqlalchemy import SqlAlchemyUnitOfWork


FIXED_NOW = datetime(2025, 10, 20, 9, 0, tzinfo=UTC)


@pytest.fixture
def database() -> Iterator[Database]:
    db = startup(engine=create_store_engine("sqlite://"))
    try:
        yield db
    finally:
        db.dispose()


@pytest.fixture
def uow_factory(database: Database) -> Callable[[], SqlAlchemyUnitOfWork]:
    return database.unit_of_work


@pytest.fixture
def clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW


@pytest.fixture
def client_folder(tmp_path: Path) -> Path:
    folder = tmp_path / "clients" / "smith_jane"
    folder.mkdir(parents=True)
    return folder
