from typing import AsyncIterator

import httpx

from app.core.config import settings
from app.services.content_api import ContentApiClient


async def get_content_client() -> AsyncIterator[ContentApiClient]:
    """One upstream HTTP client per request, closed when the request ends."""
    http = httpx.AsyncClient(timeout=settings.api_timeout_seconds)
    try:
        yield ContentApiClient(http)
    finally:
        await http.aclose()
