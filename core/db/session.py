from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from core.config import config


def get_engine_config(database_url: str) -> Dict[str, Any]:
    """Build engine keyword arguments for the given database URL.

    PostgreSQL gets a pooled engine; SQLite disables pooling so that every
    session opens its own connection.
    """
    config_dict: Dict[str, Any] = {"echo": False}

    if database_url.startswith("postgresql"):
        config_dict.update({
            "pool_size": config.DATABASE_POOL_SIZE,
            "max_overflow": config.DATABASE_MAX_OVERFLOW,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
        })
    elif database_url.startswith("sqlite"):
        config_dict.update({
            "connect_args": {"check_same_thread": False},
            "poolclass": NullPool,
        })

    return config_dict


def enable_sqlite_foreign_keys(engine_to_watch: Engine) -> None:
    """Turn on FK enforcement (and ON DELETE CASCADE) for SQLite connections."""

    @event.listens_for(engine_to_watch, "connect")
    def set_sqlite_pragma(dbapi_conn, connection_record):
        if engine_to_watch.dialect.name == "sqlite":
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()


engine = create_async_engine(
    config.DATABASE_URL,
    **get_engine_config(config.DATABASE_URL)
)
enable_sqlite_foreign_keys(engine.sync_engine)

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides an async database session.

    Usage:
        @router.get("/companies")
        async def list_companies(db_session: AsyncSession = Depends(get_db)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()
