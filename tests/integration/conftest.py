"""Fixtures for integration tests against a real PostgreSQL database.

The schema is created from the ORM metadata once per test and every test runs
inside a connection-level transaction that is rolled back afterwards. Tests
are skipped when the configured database cannot be reached.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine

from src.api.main import create_app
from src.core.config import get_settings
from src.core.context import RequestContext
from src.infrastructure.database.base import Base
from src.infrastructure.database.dependencies import get_db
from src.infrastructure.security import get_token_service


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Start every test from freshly loaded settings and an empty context."""
    get_settings.cache_clear()
    get_token_service.cache_clear()
    RequestContext.clear()
    yield
    get_settings.cache_clear()
    get_token_service.cache_clear()
    RequestContext.clear()


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    engine = create_async_engine(get_settings().database_config.database_url)
    try:
        async with engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
    except (SQLAlchemyError, OSError) as e:
        await engine.dispose()
        pytest.skip(f"PostgreSQL is not available: {e}")

    yield engine

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session whose changes are rolled back when the test finishes."""
    async with db_engine.connect() as connection:
        transaction = await connection.begin()
        session = AsyncSession(bind=connection, expire_on_commit=False)
        try:
            yield session
        finally:
            await session.close()
            await transaction.rollback()


@pytest.fixture
async def client_with_db(db_session: AsyncSession) -> AsyncGenerator[AsyncClient]:
    """API client whose requests all share the transactional test session."""
    test_app = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession]:
        yield db_session

    test_app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    test_app.dependency_overrides.clear()
