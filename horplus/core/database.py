import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from horplus.core.errors import StorageFailure

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Store:
    """
    The relational store: one async engine with a bounded connection pool.

    Opened once at startup and disposed at shutdown by the application
    lifespan.  Every unit of work runs inside ``transaction()``, which commits
    on success and rolls back on any exception, including cancellation when
    the client goes away.
    """

    def __init__(self, url: str, *, pool_size: int = 10, max_overflow: int = 0, echo: bool = False):
        self.url = url
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Store is not open")
        return self._engine

    def open(self) -> "Store":
        if self._engine is not None:
            return self

        kwargs: dict = {"echo": self.echo, "pool_pre_ping": True}
        if not self.is_sqlite:
            kwargs.update(pool_size=self.pool_size, max_overflow=self.max_overflow)

        self._engine = create_async_engine(self.url, **kwargs)
        if self.is_sqlite:
            # SQLite ignores FOREIGN KEY clauses unless asked per connection
            event.listen(self._engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self._sessionmaker = async_sessionmaker(self._engine, expire_on_commit=False)
        logger.info("Store opened (pool_size=%d)", self.pool_size)
        return self

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Store closed")

    async def create_all(self) -> None:
        """Create every table directly (tests and local SQLite only; production uses Alembic)."""
        import horplus.models  # noqa: F401  (registers every table on Base.metadata)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    def session(self) -> AsyncSession:
        if self._sessionmaker is None:
            raise RuntimeError("Store is not open")
        return self._sessionmaker()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """One atomic unit of work; store errors surface as ``StorageFailure``."""
        session = self.session()
        try:
            async with session.begin():
                yield session
        except IntegrityError:
            raise
        except DBAPIError as exc:
            raise StorageFailure(exc) from exc
        finally:
            await session.close()

    async def ping(self) -> None:
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except DBAPIError as exc:
            raise StorageFailure(exc) from exc


def get_store(request: Request) -> Store:
    return request.app.state.store


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    async with get_store(request).session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
