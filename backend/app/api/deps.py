from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings, get_settings
from ..db.session import get_session
from ..db.store import CatalogStore


async def get_settings_dep() -> Settings:
    return get_settings()


async def get_db_session() -> AsyncIterator[AsyncSession]:
    async for session in get_session():
        yield session


async def get_catalog_store(session: AsyncSession = Depends(get_db_session)) -> CatalogStore:
    return CatalogStore(session)


def clamp_limit(requested: int | None, *, default: int, maximum: int) -> int:
    limit = requested or default
    return max(1, min(limit, maximum))
