"""
Database configuration.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from editorial.infrastructure.config.settings import Settings, get_settings


def build_engine(settings: Optional[Settings] = None) -> AsyncEngine:
    """
    Создать асинхронный движок.

    Для SQLite в памяти используется StaticPool, чтобы все сессии
    видели одну и ту же базу.
    """
    settings = settings or get_settings()
    url = settings.get_async_database_url()

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url.endswith("://"):
            kwargs["poolclass"] = StaticPool
        return create_async_engine(url, echo=settings.database_echo, **kwargs)

    return create_async_engine(
        url,
        echo=settings.database_echo,
        pool_size=20,
        max_overflow=10
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


async def init_models(engine: AsyncEngine) -> None:
    """Создать таблицы (для локального запуска и тестов)."""
    from editorial.infrastructure.persistence.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
