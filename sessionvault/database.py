"""
Database connection and session management.
Uses SQLAlchemy 2.0 async pattern.

A ``Database`` is built by the application factory and handed to request
handlers through ``app.state``; nothing here is a module-level singleton.
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from sessionvault.config import Settings


def _set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable WAL mode + foreign keys on every new SQLite connection."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA busy_timeout=5000")
    cursor.close()


def build_engine(database_url: str, *, echo: bool = False) -> AsyncEngine:
    """Create an async engine with options suited to the backing database."""
    if database_url.startswith("sqlite"):
        # NullPool: every session gets its own connection, so concurrent
        # requests never share an in-flight SQLite transaction.
        engine = create_async_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=NullPool,
        )
        event.listen(engine.sync_engine, "connect", _set_sqlite_pragma)
        return engine

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, settings: Settings):
        self.engine = build_engine(settings.database_url, echo=settings.debug)
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def init_models(self) -> None:
        """Create tables for all registered models."""
        from sessionvault.kernel.models import Base

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Close database connections."""
        await self.engine.dispose()
