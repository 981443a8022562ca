"""SQLAlchemy-backed units of work over the intake record store."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Literal

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from intakesync.adapters.sqlalchemy.mappings import start_mappers
from intakesync.adapters.sqlalchemy.migrations import upgrade_head
from intakesync.adapters.sqlalchemy.repositories import (
    SqlAlchemyClientRepository,
    SqlAlchemyEventRepository,
    SqlAlchemyPetRepository,
    SqlAlchemyTaskRepository,
)
from intakesync.config.storage import get_database_uri
from intakesync.domain.ports.unit_of_work import IntakeRepositories, RepositoryCollection

if TYPE_CHECKING:
    from types import TracebackType

    from sqlalchemy.engine import Engine
    from sqlalchemy.engine.interfaces import DBAPIConnection
    from sqlalchemy.pool import ConnectionPoolEntry

log = logging.getLogger(__name__)


class StartupError(RuntimeError):
    """Raised when the record store is used before it is opened or after it is closed."""


def _enable_sqlite_foreign_keys(
    dbapi_connection: DBAPIConnection,
    record: ConnectionPoolEntry,
) -> None:
    _ = record
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_store_engine(database_uri: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection so every session sees the schema."""

    if database_uri in {"sqlite://", "sqlite:///:memory:"}:
        engine = create_engine(
            database_uri,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            future=True,
        )
    else:
        engine = create_engine(database_uri, future=True)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


class Database:
    """An opened record store: one engine plus the session factory bound to it."""

    def __init__(self, engine: Engine) -> None:
        self._engine: Engine | None = engine
        self._session_factory: sessionmaker[Session] | None = sessionmaker(
            bind=engine, expire_on_commit=False
        )

    @classmethod
    def from_uri(cls, database_uri: str) -> Database:
        return cls(create_store_engine(database_uri))

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StartupError("Database has been closed")
        return self._engine

    @property
    def session_factory(self) -> sessionmaker[Session]:
        if self._session_factory is None:
            raise StartupError("Database has been closed")
        return self._session_factory

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def unit_of_work(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(self)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._session_factory = None


def startup(
    *,
    engine: Engine | None = None,
    database_uri: str | None = None,
) -> Database:
    """Open the record store: configure mappers and bring the schema to head."""

    resolved_engine = engine or create_store_engine(database_uri or get_database_uri())
    start_mappers()
    upgrade_head(engine=resolved_engine)
    log.info("Record store ready at %s", resolved_engine.url.render_as_string(hide_password=True))
    return Database(resolved_engine)


class BaseSqlAlchemyUnitOfWork[TRepositories: RepositoryCollection](ABC):
    """Generic SQLAlchemy unit of work with pluggable repository collections."""

    def __init__(self, database: Database | sessionmaker[Session]) -> None:
        self.session_factory: sessionmaker[Session] = (
            database.session_factory if isinstance(database, Database) else database
        )
        self._session: Session | None = None

    @abstractmethod
    def _build_repositories(self, session: Session) -> TRepositories: ...

    def __enter__(self) -> BaseSqlAlchemyUnitOfWork[TRepositories]:
        self.session = self.session_factory()
        self._repositories = self._build_repositories(self.session)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        if exc_type is not None:
            self.rollback()
        self.session.close()
        self.session = None
        return False

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()

    @property
    def repositories(self) -> TRepositories:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._repositories

    @property
    def session(self) -> Session:
        if self._session is None:
            raise StartupError("Unit of work session not initialised")
        return self._session

    @session.setter
    def session(self, session: Session | None) -> None:
        if self._session is not None and session is not None:
            raise StartupError("Unit of work session already initialised")
        self._session = session


class SqlAlchemyUnitOfWork(BaseSqlAlchemyUnitOfWork[IntakeRepositories]):
    """Unit of work shared by the import pipelines, automation and review surface."""

    def _build_repositories(self, session: Session) -> IntakeRepositories:
        return IntakeRepositories(
            clients=SqlAlchemyClientRepository(session),
            pets=SqlAlchemyPetRepository(session),
            events=SqlAlchemyEventRepository(session),
            tasks=SqlAlchemyTaskRepository(session),
        )


if TYPE_CHECKING:
    from intakesync.domain.ports.unit_of_work import IntakeUnitOfWork, IntakeUnitOfWorkFactory

    def _uow_check(database: Database) -> tuple[IntakeUnitOfWork, IntakeUnitOfWorkFactory]:
        return SqlAlchemyUnitOfWork(database), database.unit_of_work
