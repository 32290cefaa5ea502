# src/Tierbot/db.py
from __future__ import annotations

import contextlib
import os
from collections.abc import AsyncIterator

import structlog
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from Tierbot.config import load_settings

settings = load_settings()
log = structlog.get_logger()


def _normalize_url(url: str) -> str:
    # Upgrade to async drivers if user supplies sync URLs
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://") and not url.startswith("sqlite+aiosqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


DATABASE_URL = _normalize_url(settings.database_url)


class Base(DeclarativeBase):
    pass


_engine: AsyncEngine | None = None
_sessionmaker: async_sessionmaker[AsyncSession] | None = None
_schema_initialized: bool = False


def get_engine() -> AsyncEngine:
    global _engine, _sessionmaker
    if _engine is None:
        kwargs: dict[str, object] = {}
        if DATABASE_URL.startswith("sqlite+aiosqlite://"):
            kwargs.update(connect_args={"timeout": 30})
            # In-memory DBs must share a single connection so the schema persists
            if ":memory:" in DATABASE_URL or os.environ.get("TIERBOT_SQLITE_STATIC_POOL") == "1":
                kwargs.update(poolclass=StaticPool)
        elif DATABASE_URL.startswith("postgresql+asyncpg://"):
            kwargs.update(
                pool_pre_ping=True,
                pool_size=5,
                max_overflow=10,
                pool_timeout=30,
            )

        _engine = create_async_engine(DATABASE_URL, **kwargs)
        _sessionmaker = async_sessionmaker(_engine, expire_on_commit=False)
        url = make_url(DATABASE_URL)
        log.info(
            "db.connection.config",
            backend=url.get_backend_name(),
            host=url.host or "",
            database=url.database or "",
            driver=url.drivername,
        )
    return _engine


def get_sessionmaker() -> async_sessionmaker[AsyncSession]:
    if _sessionmaker is None:
        get_engine()
    return _sessionmaker  # type: ignore[return-value]


async def _ensure_schema_created_if_needed() -> None:
    """Create tables for in-memory SQLite; real databases are migrated with Alembic."""
    global _schema_initialized
    if _schema_initialized:
        return
    if DATABASE_URL.startswith("sqlite+aiosqlite://") and ":memory:" in DATABASE_URL:
        from Tierbot import models as _models  # noqa: F401

        engine = get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    _schema_initialized = True


@contextlib.asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    await _ensure_schema_created_if_needed()
    sm = get_sessionmaker()
    async with sm() as s:
        try:
            yield s
            await s.commit()
        except BaseException:
            log.error("db.session.error", exc_info=True)
            await s.rollback()
            raise
