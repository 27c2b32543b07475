from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from libs.db.base import Base
from libs.db.config import AsyncSessionLocal


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that yields an async database session.
    Uncommitted work is rolled back if the handler raises.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def check_connection(engine: AsyncEngine) -> None:
    """Round-trip ``SELECT 1``; raises if the database is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def create_all(engine: AsyncEngine) -> None:
    """Create every registered table (local runs and tests)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
