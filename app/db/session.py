from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from app.core.config import settings

Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """
    PostgreSQL in production, SQLite for local runs and tests.

    pool_pre_ping: check connection is alive before use (avoids "connection is closed" errors
    when DB or network closed idle connections).
    pool_recycle: discard connections after this many seconds to avoid stale connections.
    An in-memory SQLite database lives and dies with its connection, so it gets one
    connection shared by every session.
    """
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        if url.database in (None, "", ":memory:"):
            return create_async_engine(
                url,
                echo=echo,
                poolclass=StaticPool,
                connect_args={"check_same_thread": False},
            )
        return create_async_engine(url, echo=echo)
    return create_async_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        pool_recycle=300,
    )


async def create_all(bind: AsyncEngine) -> None:
    """Create every table that does not exist yet."""
    # Register the models on Base.metadata.
    import app.core.models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


engine = build_engine(settings.database_url, echo=settings.log_level.upper() == "DEBUG")

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
