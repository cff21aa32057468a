"""
Program store database

One async SQLite engine per process, created by init_db() at startup and
disposed by close_db() at shutdown.
"""
import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from radioguide.config import settings
from radioguide.models import Base

logger = logging.getLogger(__name__)

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def _sqlite_url(database_path: str) -> str:
    return f"sqlite+aiosqlite:///{database_path}"


def _register_pragmas(engine: AsyncEngine, journal_mode: str, cache_size_kb: int) -> None:
    """Apply journal mode and page cache size to every new SQLite connection"""

    def on_connect(dbapi_conn, _):
        cursor = dbapi_conn.cursor()
        cursor.execute(f"PRAGMA journal_mode = {journal_mode}")
        cursor.execute(f"PRAGMA cache_size = -{cache_size_kb}")
        cursor.close()

    event.listen(engine.sync_engine, "connect", on_connect)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Session factory created by init_db()"""
    if _session_factory is None:
        raise RuntimeError("Program database not initialized. Call init_db() during startup.")
    return _session_factory


async def get_db() -> AsyncIterator[AsyncSession]:
    """Request-scoped session for FastAPI routes; routes commit their own writes"""
    async with get_session_factory()() as session:
        yield session


async def init_db(database_path: str | None = None) -> None:
    """
    Create the engine, the programs table and the session factory.

    Args:
        database_path: SQLite file, defaults to settings.database_path
    """
    global _engine, _session_factory

    database_path = database_path or settings.database_path
    logger.info(
        f"Opening program database at {database_path} "
        f"(journal_mode={settings.sqlite_journal_mode}, cache={settings.sqlite_cache_size_kb}KB)"
    )

    _engine = create_async_engine(
        _sqlite_url(database_path),
        echo=False,
        pool_pre_ping=True,
        connect_args={"timeout": 30, "check_same_thread": False},
    )
    _register_pragmas(_engine, settings.sqlite_journal_mode, settings.sqlite_cache_size_kb)

    async with _engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    _session_factory = async_sessionmaker(
        _engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    logger.info("Program database ready")


async def close_db() -> None:
    """Dispose of the engine; init_db() must run again before further use"""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("Program database closed")
    _engine = None
    _session_factory = None


@asynccontextmanager
async def session_scope(*, begin: bool = True) -> AsyncIterator[AsyncSession]:
    """
    Session with transaction handling.

    Args:
        begin: Wrap the session in `session.begin()` so the block commits on
               success and rolls back on error. With False the session is
               committed after the block and rolled back if it raises.
    """
    async with get_session_factory()() as session:
        if begin:
            async with session.begin():
                yield session
        else:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            await session.commit()
