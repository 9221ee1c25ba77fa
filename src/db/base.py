from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from src.db.models import Base


def build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine for one process; callers own its disposal."""
    return create_async_engine(database_url, future=True, echo=False)


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create missing tables; a no-op once Alembic migrations have run."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
