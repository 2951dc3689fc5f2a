import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENV", "test")

from collections.abc import Iterator  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402

from app.core.db import get_session  # noqa: E402
from app.main import app  # noqa: E402


class TestDatabase:
    """Seeds rows through the TestClient event loop so the app sees them."""

    __test__ = False

    def __init__(self, client: TestClient, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._client = client
        self._session_maker = session_maker

    def add(self, *objects):
        async def _add() -> None:
            async with self._session_maker() as session:
                session.add_all(objects)
                await session.commit()
                for obj in objects:
                    await session.refresh(obj)

        self._client.portal.call(_add)
        return objects[0] if len(objects) == 1 else objects

    def get(self, model, pk):
        async def _get():
            async with self._session_maker() as session:
                return await session.get(model, pk)

        return self._client.portal.call(_get)


@pytest.fixture
def engine():
    return create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)


@pytest.fixture
def client(engine) -> Iterator[TestClient]:
    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_tables() -> None:
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    app.dependency_overrides[get_session] = override_get_session
    with TestClient(app) as test_client:
        test_client.portal.call(create_tables)
        test_client.db = TestDatabase(test_client, session_maker)
        yield test_client
        test_client.portal.call(engine.dispose)
    app.dependency_overrides.clear()


@pytest.fixture
def db(client: TestClient) -> TestDatabase:
    return client.db
