"""Engine and session handling for the build history store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from buildit.state_store.models import Base

if TYPE_CHECKING:
    from sqlalchemy import Engine

SQLITE_MEMORY_URL = "sqlite:///:memory:"
MEMORY_URLS = (":memory:", "sqlite://", SQLITE_MEMORY_URL)


def resolve_url(url: str) -> str:
    """Turn a bare file path into a SQLite URL; leave real URLs alone."""
    if url in MEMORY_URLS:
        return SQLITE_MEMORY_URL
    if "://" not in url:
        return f"sqlite:///{url}"
    return url


def _enable_wal(dbapi_connection: Any, _connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.close()


def make_engine(url: str) -> Engine:
    """Create an engine for a resolved URL.

    SQLite connections are shared across consumer threads; file databases
    run in WAL mode so the API can read while a consumer writes. An
    in-memory database lives on one pooled connection.
    """
    if url == SQLITE_MEMORY_URL:
        return create_engine(
            url, poolclass=StaticPool, connect_args={"check_same_thread": False}
        )
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    Path(url.removeprefix("sqlite:///")).parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(url, connect_args={"check_same_thread": False})
    event.listen(engine, "connect", _enable_wal)
    return engine


class Database:
    """Lazily created engine and session factory for one database URL."""

    def __init__(self, url: str = "buildit.db") -> None:
        """Initialize the database handle.

        Args:
            url: SQLAlchemy URL or SQLite file path. Use ":memory:" for an
                in-memory database.
        """
        self.url = resolve_url(url)
        self._engine: Engine | None = None
        self._sessions: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            self._engine = make_engine(self.url)
        return self._engine

    def create_tables(self) -> None:
        """Create the pipeline and job result tables if missing."""
        Base.metadata.create_all(self.engine)

    def get_session(self) -> Session:
        """New session; rows stay readable after commit."""
        if self._sessions is None:
            self._sessions = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._sessions()

    def close(self) -> None:
        """Dispose of the engine. A later session reconnects."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._sessions = None
