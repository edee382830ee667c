"""
Database handle and unit-of-work management.

The storage handle is constructed explicitly by the composition root
(the application lifespan) and injected into every store and service.
Nothing in this module opens a connection at import time.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# Create declarative base for models
Base = declarative_base()


def _install_sqlite_pragmas(sync_engine: Engine) -> None:
    """
    Per-connection SQLite setup.

    The driver's own transaction handling is switched off so that every
    transaction starts with BEGIN IMMEDIATE: the write lock is taken before
    the account row is read, which serializes concurrent read-modify-write
    units of work against the same file.
    """

    @event.listens_for(sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA synchronous=NORMAL")
        cursor.close()

    @event.listens_for(sync_engine, "begin")
    def begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Database:
    """
    Process-wide storage handle: one engine plus its session factory.

    Lifecycle is owned by the caller: ``open()`` at startup,
    ``await close()`` at shutdown.
    """

    def __init__(self, url: str, echo: bool = False, busy_timeout: float = 5.0):
        self.url = url
        self.echo = echo
        self.busy_timeout = busy_timeout
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self.engine is not None

    def open(self) -> "Database":
        if self.is_open:
            return self

        engine_kwargs = {"echo": self.echo, "future": True}
        if self.url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"timeout": self.busy_timeout, "check_same_thread": False}
            if ":memory:" in self.url:
                # A private in-memory database only exists on its one connection
                engine_kwargs["poolclass"] = StaticPool

        self.engine = create_async_engine(self.url, **engine_kwargs)
        if self.engine.dialect.name == "sqlite":
            _install_sqlite_pragmas(self.engine.sync_engine)

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info("Database opened: %s", self.engine.url.render_as_string(hide_password=True))
        return self

    async def close(self) -> None:
        if self.engine is None:
            return
        await self.engine.dispose()
        logger.info("Database closed")
        self.engine = None
        self.session_factory = None

    async def create_schema(self) -> None:
        """Create all tables registered on ``Base``."""
        # Imported for their side effect of registering tables on Base
        from ledger_backend.app.models import account, ledger_entry, payment  # noqa: F401

        async with self._require_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_schema(self) -> None:
        async with self._require_engine().begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    def session(self) -> AsyncSession:
        """A plain session for read-only work; use as ``async with``."""
        if self.session_factory is None:
            raise RuntimeError("Database is not open")
        return self.session_factory()

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[AsyncSession]:
        """
        Scoped transaction.

        Commits when the block exits normally and rolls back on any
        exception, which is then re-raised unchanged.
        """
        async with self.session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def _require_engine(self) -> AsyncEngine:
        if self.engine is None:
            raise RuntimeError("Database is not open")
        return self.engine


def get_database(request: Request) -> Database:
    """
    FastAPI dependency returning the handle opened by the lifespan.
    """
    return request.app.state.database
