from datetime import date

from fastapi import Request

from app.core.exceptions import ConfigurationError
from app.core.store import StudioStore


async def get_store(request: Request) -> StudioStore:
    """Dependency для получения хранилища студии"""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise ConfigurationError("store", "Studio store is not initialized")
    return store


async def get_today() -> date:
    """Текущая календарная дата (время суток отбрасывается)"""
    return date.today()
