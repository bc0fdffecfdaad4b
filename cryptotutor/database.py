"""
Database engine and sessions (SQLAlchemy 2.0 async).

One engine per process. Request handlers get a session from get_db; the
content provider and the background progress sink open their own sessions
from async_session_maker.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from cryptotutor.config import get_settings
from cryptotutor.logging_config import get_logger

logger = get_logger(__name__)
settings = get_settings()


def engine_options(database_url: str, debug: bool = False) -> Dict[str, Any]:
    """Keyword arguments for create_async_engine on the given backend."""
    if make_url(database_url).get_backend_name() == "sqlite":
        # One connection per session: background progress writes never
        # share a connection with a request session
        return {
            "echo": debug,
            "connect_args": {"check_same_thread": False},
            "poolclass": NullPool,
        }
    return {
        "echo": debug,
        "pool_pre_ping": True,
        "pool_size": 5,
        "max_overflow": 10,
    }


def _sqlite_pragmas(dbapi_conn, connection_record) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


engine = create_async_engine(
    settings.database_url,
    **engine_options(settings.database_url, settings.debug),
)
if engine.dialect.name == "sqlite":
    event.listen(engine.sync_engine, "connect", _sqlite_pragmas)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session; commit on success, roll back on error."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def ping_db() -> bool:
    """True when the database answers a trivial query."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Database ping failed: %s", exc)
        return False
    return True


async def init_db() -> None:
    """Create missing tables. Alembic owns schema changes after that."""
    from cryptotutor.kernel.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Schema ready (%d tables)", len(Base.metadata.tables))


async def close_db() -> None:
    await engine.dispose()
