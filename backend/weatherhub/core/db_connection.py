import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, TypeVar

from sqlalchemy import event
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from weatherhub.core.logger import logs
from weatherhub.models.entities import Base

T = TypeVar("T")

UNIQUE_VIOLATION_SQLSTATE = "23505"
UNIQUE_VIOLATION_MARKERS = ("unique constraint", "duplicate key", "duplicate entry")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores ON DELETE CASCADE unless foreign keys are switched on per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def is_unique_violation(error: IntegrityError) -> bool:
    """True when the write collided with a unique constraint, not a NOT NULL, CHECK or foreign key rule."""
    orig = error.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE
    message = str(orig).lower()
    return any(marker in message for marker in UNIQUE_VIOLATION_MARKERS)


class Database:
    """
    Manages the asynchronous connection to the relational database.
    One engine per application; one session per unit of work.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo)
        if self.engine.dialect.name == "sqlite":
            event.listen(self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        self._sessions = async_sessionmaker(self.engine, expire_on_commit=False)
        logs.log(logging.INFO, f"Database engine initialized ({self.engine.dialect.name})")

    async def create_tables(self) -> None:
        """Creates all tables from base."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Read-only unit of work."""
        async with self._sessions() as session:
            yield session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """Unit of work that commits on success and rolls back on any error."""
        async with self._sessions() as session:
            async with session.begin():
                yield session

    async def run_in_transaction(self, work: Callable[[AsyncSession], Awaitable[T]], description: str = "transaction") -> T:
        """
        Runs work in a fresh transaction. A unique-constraint conflict with a
        concurrent writer rolls everything back and the work is replayed once,
        so it sees the other writer's rows. Any other integrity error is raised.
        """
        try:
            async with self.transaction() as session:
                return await work(session)
        except IntegrityError as e:
            if not is_unique_violation(e):
                raise
            logs.log(logging.WARNING, f"Concurrent write conflict in {description}, retrying once: {e.orig}")

        async with self.transaction() as session:
            return await work(session)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logs.log(logging.INFO, "Database engine disposed")
