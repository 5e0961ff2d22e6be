"""Database configuration and connection management."""

from collections.abc import AsyncGenerator
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import settings


def to_async_url(database_url: str) -> str:
    """Convert a sync database URL to its async driver equivalent."""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("sqlite://"):
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


def enable_sqlite_transactions(engine: AsyncEngine) -> None:
    """
    Let SQLAlchemy drive SQLite transactions instead of the pysqlite driver.

    pysqlite defers BEGIN until the first DML statement and does not support
    SAVEPOINT reliably otherwise.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def set_sqlite_pragma(dbapi_conn: Any, connection_record: Any) -> None:
        """Disable the driver's own transaction handling."""
        dbapi_conn.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn: Any) -> None:
        """Emit our own BEGIN."""
        conn.exec_driver_sql("BEGIN")


def create_engine_for(database_url: str, **kwargs: Any) -> AsyncEngine:
    """Create an async engine for the given URL with dialect-specific options."""
    url: URL = make_url(to_async_url(database_url))

    if url.get_backend_name() == "sqlite":
        sqlite_engine = create_async_engine(url, echo=settings.debug, **kwargs)
        enable_sqlite_transactions(sqlite_engine)
        return sqlite_engine

    options: dict[str, Any] = {
        "pool_pre_ping": True,
        "pool_size": 10,
        "max_overflow": 20,
        "pool_recycle": 3600,
        "connect_args": {
            "server_settings": {
                "application_name": settings.app_name,
            },
        },
    }
    if "poolclass" in kwargs:
        # Sizing options are only valid for the default QueuePool
        for key in ("pool_size", "max_overflow"):
            options.pop(key)
    options.update(kwargs)
    return create_async_engine(url, echo=settings.debug, **options)


# Create async engine with connection pooling
engine: AsyncEngine = create_engine_for(settings.database_url)

# Async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def check_database_connection() -> bool:
    """Check if database connection is healthy."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
