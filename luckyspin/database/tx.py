# luckyspin/database/tx.py
from __future__ import annotations

from contextlib import asynccontextmanager

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from luckyspin.database.session import SQLITE_IMMEDIATE

# PostgreSQL: serialization_failure, deadlock_detected
_RETRYABLE_SQLSTATES = {"40001", "40P01"}


@asynccontextmanager
async def transactional(session: AsyncSession):
    """
    Safe transactional context for SQLAlchemy 2.x autobegin.

    - If a transaction is already active, use SAVEPOINT (begin_nested)
    - Otherwise, start a new transaction
    """
    if session.in_transaction():
        async with session.begin_nested():
            yield
    else:
        async with session.begin():
            yield


async def acquire_writer(session: AsyncSession) -> None:
    """
    Bind the session to its connection as a writer. Call it inside a fresh
    transaction before the first statement: on SQLite the transaction then
    opens with BEGIN IMMEDIATE. Other backends ignore the option.
    """
    await session.connection(execution_options={SQLITE_IMMEDIATE: True})


def is_serialization_failure(exc: BaseException) -> bool:
    """
    True when the storage layer rejected a commit because of a concurrent writer
    and the whole transaction may be replayed.
    """
    if isinstance(exc, OperationalError):
        # SQLite: "database is locked" / "database is busy" (SQLITE_BUSY*)
        msg = str(exc.orig).lower() if exc.orig is not None else str(exc).lower()
        if "locked" in msg or "busy" in msg:
            return True

    if isinstance(exc, DBAPIError) and exc.orig is not None:
        code = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
        if code in _RETRYABLE_SQLSTATES:
            return True

    return False
