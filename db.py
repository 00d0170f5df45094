"""Async engine, session factory and startup hooks."""

import logging
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

import config

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict:
    # aiosqlite is used for local runs and tests; it rejects pool sizing
    if make_url(database_url).get_backend_name() == "sqlite":
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}


engine = create_async_engine(
    config.settings.DATABASE_URL,
    echo=config.settings.DB_ECHO,
    **_engine_options(config.settings.DATABASE_URL),
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


def ensure_storage_dirs() -> list[Path]:
    """Create the project file root and the recycle bin root if missing."""
    roots = [
        Path(config.settings.FILE_STORAGE_DIR),
        Path(config.settings.RECYCLE_BIN_DIR),
    ]
    for root in roots:
        root.mkdir(parents=True, exist_ok=True)
    return roots


async def init_db() -> None:
    """
    Create tables and storage roots on startup.

    Production deployments run Alembic first, so ``create_all`` only fills
    in tables that are missing.
    """
    import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    for root in ensure_storage_dirs():
        logger.info("Storage root ready: %s", root.resolve())


async def close_db() -> None:
    await engine.dispose()
