from __future__ import annotations

from asyncio import current_task
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from functools import wraps
from typing import Any, AsyncIterator, Awaitable, Callable, ParamSpec, TypeVar, cast

from sqlalchemy import DateTime, TypeDecorator, func
from sqlalchemy import select as sa_select
from sqlalchemy.engine import Dialect
from sqlalchemy.ext.asyncio import (
    AsyncResult,
    AsyncScalarResult,
    AsyncSession,
    async_scoped_session,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, selectinload
from sqlalchemy.pool import NullPool
from sqlalchemy.sql import Executable, Select

from ..logger import get_logger
from ..settings import settings


T = TypeVar("T")
P = ParamSpec("P")

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


class UTCDateTime(TypeDecorator[datetime]):
    """Stores naive UTC timestamps and hands back timezone aware ones."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        if value is None:
            return None
        return value.replace(tzinfo=timezone.utc)


def select(entity: Any, *args: Any) -> Select[Any]:
    """Shortcut for :meth:`sqlalchemy.future.select` with eager loading of the given relationships"""

    if not args:
        return sa_select(entity)

    return sa_select(entity).options(*[selectinload(arg) for arg in args])


def filter_by(cls: Any, *args: Any, **kwargs: Any) -> Select[Any]:
    """Shortcut for :meth:`sqlalchemy.future.Select.filter_by`"""

    return select(cls, *args).filter_by(**kwargs)


class DB:
    """An async SQLAlchemy session bound to the current asyncio task"""

    def __init__(
        self, url: str, *, pool_recycle: int, pool_size: int, max_overflow: int, echo: bool
    ) -> None:
        options: dict[str, Any] = {"echo": echo}
        if url.startswith("sqlite"):
            options["poolclass"] = NullPool
        else:
            options |= {"pool_recycle": pool_recycle, "pool_size": pool_size, "max_overflow": max_overflow}

        self.engine = create_async_engine(url, **options)
        self._session: async_scoped_session[AsyncSession] = async_scoped_session(
            async_sessionmaker(self.engine, expire_on_commit=False), scopefunc=current_task
        )

    @property
    def session(self) -> AsyncSession:
        return self._session()

    async def create_tables(self) -> None:
        """Create all tables defined in enabled models"""

        logger.debug("creating tables")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        logger.debug("dropping tables")
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def add(self, obj: T) -> T:
        """
        Add a new row to the database

        :param obj: the row to insert
        :return: the same row
        """

        self._session.add(obj)
        return obj

    async def delete(self, obj: T) -> T:
        """
        Remove a row from the database

        :param obj: the row to remove
        :return: the same row
        """

        await self._session.delete(obj)
        return obj

    async def exec(self, statement: Executable) -> Any:
        """Execute an SQL statement and return the result"""

        return await self._session.execute(statement)

    async def stream(self, statement: Executable) -> AsyncScalarResult[Any]:
        """Execute an SQL statement and stream the result"""

        result: AsyncResult[Any] = await self._session.stream(statement)
        return result.scalars()

    async def all(self, statement: Executable) -> list[Any]:
        """Execute an SQL statement and return all results as a list"""

        return [*(await self.exec(statement)).scalars()]

    async def first(self, statement: Executable) -> Any | None:
        """Execute an SQL statement and return the first result"""

        return (await self.exec(statement)).scalar()

    async def exists(self, statement: Select[Any]) -> bool:
        """Execute an SQL statement and check whether it returns any rows"""

        return bool(await self.first(sa_select(statement.exists())))

    async def count(self, statement: Select[Any]) -> int:
        """Execute an SQL statement and return the number of returned rows"""

        return cast(int, await self.first(sa_select(func.count()).select_from(statement.subquery())))

    async def get(self, cls: type[T], *args: Any, **kwargs: Any) -> T | None:
        """Shortcut for first(filter_by(...))"""

        return cast(T | None, await self.first(filter_by(cls, *args, **kwargs)))

    async def flush(self) -> None:
        await self._session.flush()

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()

    async def close(self) -> None:
        await self._session.remove()


def get_database() -> DB:
    """Create a database connection object using the environment variables"""

    return DB(
        settings.database_url,
        pool_recycle=settings.pool_recycle,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        echo=settings.sql_show_statements,
    )


db: DB = get_database()


@asynccontextmanager
async def db_context() -> AsyncIterator[DB]:
    """Async context manager for database sessions. Commits on success, rolls back on error."""

    try:
        yield db
    except BaseException:
        await db.rollback()
        raise
    else:
        await db.commit()
    finally:
        await db.close()


def db_wrapper(f: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
    """Decorator which wraps an async function in a database context."""

    @wraps(f)
    async def inner(*args: P.args, **kwargs: P.kwargs) -> T:
        async with db_context():
            return await f(*args, **kwargs)

    return inner
