"""Persistence: async engine, session factory, and Base for SQLAlchemy ORM.

Engine and session factory are created lazily on first use so import does
not read settings. When DATABASE_URL is empty no engine is created and
course lookups are disabled.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from coursestore.core.config import get_settings

logger = logging.getLogger(__name__)

# Set by _ensure_engine() on first use.
engine: Any = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


def _ensure_engine() -> None:
    """Create engine and AsyncSessionLocal on first use (only when DATABASE_URL is set)."""
    global engine, AsyncSessionLocal
    if AsyncSessionLocal is not None:
        return
    settings = get_settings()
    if not settings.database_url:
        return
    engine = create_async_engine(
        settings.database_url,
        echo=settings.database_echo,
        pool_pre_ping=True,
        pool_recycle=3600,
    )
    AsyncSessionLocal = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    logger.info("Course database engine created")


def is_configured() -> bool:
    """Return True when a session factory is available."""
    _ensure_engine()
    return AsyncSessionLocal is not None


async def dispose_engine() -> None:
    """Close pooled connections and forget the engine."""
    global engine, AsyncSessionLocal
    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    AsyncSessionLocal = None


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy declarative models."""
