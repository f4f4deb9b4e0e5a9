from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import JSONResponse

from app.api.deps import get_content_client
from app.core.config import settings
from app.core.rate_limit import limiter
from app.schemas.search import SearchResponse
from app.services.content_api import ContentApiClient
from app.services.search_service import search

router = APIRouter(prefix="/search", tags=["search"])

# Sent on every search response, whether or not the request carries an Origin
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}


@router.get("", response_model=SearchResponse)
@limiter.limit(settings.search_rate_limit)
async def global_search(
    request: Request,
    q: str = Query("", description="Free-text query"),
    client: ContentApiClient = Depends(get_content_client),
):
    """Search blogs, articles, courses, authors, books, events, fatwas, awlyaa and tasawwuf."""
    result = await search(q, client)
    return JSONResponse(
        status_code=200 if result.success else 500,
        content=result.model_dump(exclude_none=True),
        headers=CORS_HEADERS,
    )


@router.options("")
async def search_preflight():
    return Response(status_code=200, headers=CORS_HEADERS)
