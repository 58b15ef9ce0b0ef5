from typing import Awaitable, Callable

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import DeclarativeBase

from blog.config import settings
from blog.middleware import install_query_counter


def _engine_options(url: str) -> dict:
    """Pool options for *url*; SQLite picks its own pool class."""
    options: dict = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if make_url(url).get_backend_name() != "sqlite":
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
        )
    return options


def install_sqlite_foreign_keys(engine) -> None:
    """
    Turn on foreign-key enforcement for every new SQLite connection so
    ``ON DELETE CASCADE`` behaves as it does on PostgreSQL.  No-op for
    other backends.
    """
    sync_engine = engine.sync_engine
    if sync_engine.dialect.name != "sqlite":
        return

    @event.listens_for(sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def configure_engine(engine) -> None:
    """Register the event listeners every engine in this app needs."""
    install_query_counter(engine)
    install_sqlite_foreign_keys(engine)


# Module-level engine variable allows tests to override with a test engine.
engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))
configure_engine(engine)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


_AFTER_COMMIT_KEY = "after_commit"


def after_commit(session: AsyncSession, callback: Callable[[], Awaitable[None]]) -> None:
    """
    Schedule *callback* to be awaited once *session* has committed.

    Used for side effects outside the database (cache invalidation) that
    must not run while other connections can still read the old rows.
    Dropped on rollback.
    """
    session.info.setdefault(_AFTER_COMMIT_KEY, []).append(callback)


async def commit(session: AsyncSession) -> None:
    """Commit *session*, then run the callbacks registered with ``after_commit``."""
    await session.commit()
    for callback in session.info.pop(_AFTER_COMMIT_KEY, []):
        await callback()


async def rollback(session: AsyncSession) -> None:
    session.info.pop(_AFTER_COMMIT_KEY, None)
    await session.rollback()


async def get_db():
    async with async_session() as session:
        try:
            yield session
            await commit(session)
        except Exception:
            await rollback(session)
            raise
