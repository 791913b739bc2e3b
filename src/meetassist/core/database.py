"""Async SQLAlchemy engine, declarative base, and session factory.

Provides:
- Base: Declarative base shared by every domain model
- get_engine(): Lazily created async engine singleton
- get_session(): AsyncSession generator used as the repository session_factory
- init_db() / close_db(): Startup table creation and engine disposal
"""

from __future__ import annotations

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from src.meetassist.config import get_settings

# ── Module-level engine (lazy init) ────────────────────────────────────────

_engine: AsyncEngine | None = None


def get_engine() -> AsyncEngine:
    """Get or create the async engine singleton."""
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.DATABASE_URL,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_pre_ping=True,
            echo=False,
        )
    return _engine


# ── Declarative Base ────────────────────────────────────────────────────────


class Base(DeclarativeBase):
    """Base class for all persistence models."""


# ── Session Factory ─────────────────────────────────────────────────────────


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an AsyncSession bound to the shared engine."""
    engine = get_engine()
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


# ── Database Initialization ─────────────────────────────────────────────────


def _import_models() -> None:
    """Import every model module so Base.metadata knows all tables."""
    from src.meetassist.action_items import models as _action_items  # noqa: F401
    from src.meetassist.agents import models as _agents  # noqa: F401
    from src.meetassist.analytics import models as _analytics  # noqa: F401
    from src.meetassist.follow_ups import models as _follow_ups  # noqa: F401
    from src.meetassist.integrations import models as _integrations  # noqa: F401
    from src.meetassist.meetings import models as _meetings  # noqa: F401
    from src.meetassist.users import models as _users  # noqa: F401


async def init_db() -> None:
    """Create all tables if they don't exist.

    Production deployments run Alembic migrations instead; this keeps local
    development and demo databases usable without a migration step.
    """
    _import_models()
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose of the engine and close all connections."""
    global _engine
    if _engine:
        await _engine.dispose()
        _engine = None
