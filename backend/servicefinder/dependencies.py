from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from servicefinder.db import async_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a request-scoped session; commit on success, roll back on error."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
