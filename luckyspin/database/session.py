# luckyspin/database/session.py
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from luckyspin.database.base import Base

# connection execution option: open the SQLite transaction as a writer
SQLITE_IMMEDIATE = "sqlite_immediate"


def _apply_sqlite_pragmas(dbapi_connection) -> None:
    # Let SQLAlchemy emit BEGIN itself (see _on_begin), not the driver.
    dbapi_connection.isolation_level = None

    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute("PRAGMA synchronous=NORMAL;")
    cursor.execute("PRAGMA busy_timeout=5000;")  # 5s
    cursor.close()


class Database:
    """
    Engine + session factory.

    Spins need serializable isolation so two concurrent winners can never both
    read "count = cap - 1":
    - PostgreSQL: engine-wide SERIALIZABLE, conflicts surface as SQLSTATE 40001
    - SQLite: writer transactions (see tx.acquire_writer) start with BEGIN
      IMMEDIATE, everything else with a deferred BEGIN so reads never take
      the write lock
    """

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        self.is_sqlite = database_url.startswith("sqlite")

        engine_kwargs: dict = {"echo": False, "pool_pre_ping": True}
        if self.is_sqlite:
            engine_kwargs["connect_args"] = {"timeout": 30}
        else:
            engine_kwargs["isolation_level"] = "SERIALIZABLE"

        self.engine: AsyncEngine = create_async_engine(database_url, **engine_kwargs)

        if self.is_sqlite:
            @event.listens_for(self.engine.sync_engine, "connect")
            def _on_connect(dbapi_connection, _connection_record) -> None:  # type: ignore[no-redef]
                _apply_sqlite_pragmas(dbapi_connection)

            @event.listens_for(self.engine.sync_engine, "begin")
            def _on_begin(conn) -> None:  # type: ignore[no-redef]
                if conn.get_execution_options().get(SQLITE_IMMEDIATE):
                    conn.exec_driver_sql("BEGIN IMMEDIATE")
                else:
                    conn.exec_driver_sql("BEGIN")

        self.SessionLocal = async_sessionmaker(
            bind=self.engine,
            expire_on_commit=False,
            autoflush=False,
            class_=AsyncSession,
        )

    async def init_models(self) -> None:
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
            await conn.run_sync(Base.metadata.create_all)

    async def close(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.SessionLocal() as s:
            yield s
