from collections.abc import AsyncGenerator
from typing import Any
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings


def to_async_url(database_url: str) -> str:
    """Map a sync DSN to its async driver. asyncpg does not accept psycopg params
    like sslmode/channel_binding, so they are stripped; SSL goes through connect_args."""
    parsed = urlparse(database_url)
    if parsed.scheme == "sqlite":
        return database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    if not parsed.scheme.startswith("postgresql"):
        return database_url
    scheme = "postgresql+asyncpg" if parsed.scheme == "postgresql" else parsed.scheme
    query = parse_qs(parsed.query, keep_blank_values=True)
    query.pop("sslmode", None)
    query.pop("channel_binding", None)
    new_query = urlencode(query, doseq=True)
    return urlunparse((scheme, parsed.netloc, parsed.path, parsed.params, new_query, parsed.fragment))


def _engine_kwargs(async_url: str) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"echo": settings.env == "development"}
    if async_url.startswith("postgresql"):
        require_ssl = "sslmode=require" in settings.database_url
        kwargs.update(
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=10,
            connect_args={"ssl": True} if require_ssl else {},
        )
    return kwargs


async_database_url = to_async_url(settings.database_url)

engine = create_async_engine(async_database_url, **_engine_kwargs(async_database_url))

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

