"""Async SQLite engine, schema bootstrap and the DbManager that owns the pool."""

from __future__ import annotations

from pathlib import Path

import structlog
from sqlalchemy import event, inspect
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from src.infra.errors import OpenConnectionError
from src.storage.models import SCHEMA_TABLES, Base

logger = structlog.get_logger()

_ASYNC_DRIVER = "sqlite+aiosqlite"


def build_db_url(locator: str) -> URL:
    """Normalize a file path or SQLAlchemy URL to the aiosqlite driver.

    Raises OpenConnectionError for unparseable URLs or non-SQLite backends.
    """
    if "://" not in locator:
        return URL.create(_ASYNC_DRIVER, database=locator)
    try:
        url = make_url(locator)
    except ArgumentError as e:
        raise OpenConnectionError(f"Invalid database locator '{locator}': {e}") from e
    if url.get_backend_name() != "sqlite":
        raise OpenConnectionError(f"Unsupported database backend: {url.get_backend_name()}")
    return url.set(drivername=_ASYNC_DRIVER)


def _is_memory_db(database: str | None) -> bool:
    return not database or database == ":memory:" or database.startswith("file::memory:")


def _on_connect(dbapi_connection, connection_record) -> None:
    # Hand transaction control to SQLAlchemy so DDL runs inside BEGIN/COMMIT.
    dbapi_connection.isolation_level = None
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _on_begin(conn) -> None:
    conn.exec_driver_sql("BEGIN")


def create_db_engine(url: URL, *, echo: bool = False) -> AsyncEngine:
    """Create the pooled async engine with per-connection SQLite setup."""
    engine = create_async_engine(url, echo=echo)
    event.listen(engine.sync_engine, "connect", _on_connect)
    event.listen(engine.sync_engine, "begin", _on_begin)
    logger.info("db_engine_created", database=url.database)
    return engine


async def is_initialized(engine: AsyncEngine, database: str | None) -> bool:
    """True when the store file exists and every table is present."""
    if _is_memory_db(database) or not Path(database).is_file():
        return False
    async with engine.connect() as conn:
        existing = await conn.run_sync(lambda sync_conn: set(inspect(sync_conn).get_table_names()))
    return all(table in existing for table in SCHEMA_TABLES)


async def ensure_schema(engine: AsyncEngine, database: str | None) -> bool:
    """Create the store and its tables unless already initialized.

    All tables are created in one transaction, so an interrupted bootstrap
    leaves either the full schema or none of it. Returns True if the schema
    was created by this call.
    """
    if await is_initialized(engine, database):
        logger.info("db_schema_creation_skipped", database=database)
        return False

    if not _is_memory_db(database):
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    logger.info("db_creating", database=database)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info("db_schema_created", database=database, tables=list(SCHEMA_TABLES))
    return True


def make_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create an async session factory bound to the engine."""
    return async_sessionmaker(engine, expire_on_commit=False)


class DbManager:
    """Owns the backing store's connection pool.

    The pool is shared by every repository operation; the driver handles
    connection checkout, so callers need no extra locking.
    """

    def __init__(self, engine: AsyncEngine, url: URL, *, created: bool = False) -> None:
        self.engine = engine
        self.url = url
        self.created = created
        self.session_factory: async_sessionmaker = make_session_factory(engine)

    @classmethod
    async def open(cls, locator: str, *, echo: bool = False) -> DbManager:
        """Open (creating if needed) the store at locator.

        Raises OpenConnectionError on any I/O or driver failure; no manager
        is returned in that case.
        """
        url = build_db_url(locator)
        engine = create_db_engine(url, echo=echo)
        try:
            created = await ensure_schema(engine, url.database)
        except (SQLAlchemyError, OSError) as e:
            await engine.dispose()
            logger.error("db_open_failed", database=url.database, error=str(e))
            raise OpenConnectionError(f"Failed to open the connection to the db: {e}") from e
        return cls(engine, url, created=created)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("db_engine_disposed", database=self.url.database)
