"""FastAPI dependency providing the request's database session."""

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.infrastructure.database.session import get_async_session


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Yield one session per request.

    The session is committed after the route handler returns and rolled back
    if it raises, so every request is a single unit of work.

    Yields:
        AsyncGenerator[AsyncSession]: The request's database session.
    """
    async with get_async_session() as session:
        yield session


DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
