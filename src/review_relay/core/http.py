"""
Upstream HTTP client dependency
"""
from typing import AsyncIterator

import httpx
from fastapi import Depends

from .config import Settings, get_settings


async def get_http_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[httpx.AsyncClient]:
    """Yield a per-request client with an explicit timeout"""
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT) as client:
        yield client
