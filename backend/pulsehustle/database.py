from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from pulsehustle.config import get_settings

settings = get_settings()


def to_async_url(url: str) -> str:
    # Convert sqlite:/// to sqlite+aiosqlite:///
    return url.replace("sqlite:///", "sqlite+aiosqlite:///")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


engine = create_async_engine(to_async_url(settings.database_url), echo=False)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    def as_dict(self) -> Dict[str, Any]:
        """Column values keyed by attribute name (used for change events)."""
        mapper = inspect(type(self))
        return {attr.key: getattr(self, attr.key) for attr in mapper.column_attrs}


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(bind: AsyncEngine = None):
    # Import models so every table is registered on Base.metadata
    import pulsehustle.models  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
