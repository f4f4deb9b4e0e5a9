"""
Federated site search.

The CMS global search endpoint is tried first. If it fails for any reason the
nine content listings are fetched concurrently and filtered locally. All
failures end up in the returned SearchResponse; search() never raises.
"""
import asyncio

from app.core.config import settings
from app.core.logging_config import get_logger
from app.schemas.content import ApiResponse
from app.schemas.search import RESULT_TYPES, SearchResponse, SearchResult
from app.services.content_api import ContentApiClient, UpstreamUnreachable, encode_uri_component
from app.services.search_matching import QueryTerms, build_searchable_text, matches_fields, matches_text
from app.services.search_normalizer import normalize, transform_search_result

logger = get_logger(__name__)

UNREACHABLE_MESSAGE = "Unable to connect to search API. Please check if the API server is running."

# Fields each listing is matched on during fallback. Fatwas have no title.
FALLBACK_FIELDS = {
    "blog": ("title", "description", "excerpt", "author.name"),
    "article": ("title", "description", "excerpt", "author.name"),
    "course": ("title", "name", "description"),
    "author": ("first_name", "last_name", "bio"),
    "book": ("title", "description", "author.first_name", "author.last_name"),
    "event": ("title", "name", "description"),
    "fatwa": ("question", "answer"),
    "awlyaa": ("name", "first_name", "last_name", "description", "bio"),
    "tasawwuf": ("title", "name", "description"),
}


async def global_search(client: ContentApiClient, term: str, terms: QueryTerms) -> list[SearchResult]:
    payload = await client.search_global(term, cache_seconds=settings.search_cache_seconds)
    if settings.environment == "development" and isinstance(payload, dict):
        logger.debug(f"Search response keys: {list(payload.keys())}")

    results = normalize(payload)
    return [
        r for r in results
        if matches_text(
            build_searchable_text([r.title, r.description, r.author]),
            terms,
            settings.search_phrase_min_length,
        )
    ]


async def _fetch_listing(client: ContentApiClient, content_type: str) -> ApiResponse:
    if content_type == "fatwa":
        limit = settings.search_fatwa_fallback_limit
    else:
        limit = settings.search_fallback_limit
    return await client.list_content(content_type, limit=limit)


async def fallback_search(client: ContentApiClient, terms: QueryTerms) -> list[SearchResult]:
    """Fan out to every content listing; a failed listing contributes nothing."""
    outcomes = await asyncio.gather(
        *(_fetch_listing(client, content_type) for content_type in RESULT_TYPES),
        return_exceptions=True,
    )

    results: list[SearchResult] = []
    errors: list[BaseException] = []
    for content_type, outcome in zip(RESULT_TYPES, outcomes):
        if isinstance(outcome, BaseException):
            logger.warning(f"Fallback {content_type} listing failed: {outcome}")
            errors.append(outcome)
            continue

        for item in outcome.data:
            if not matches_fields(item, FALLBACK_FIELDS[content_type], terms, settings.search_phrase_min_length):
                continue
            result = transform_search_result(item, content_type)
            if result is not None:
                results.append(result)

    if len(errors) == len(RESULT_TYPES):
        raise errors[0]
    return results


async def search(query: str, client: ContentApiClient) -> SearchResponse:
    """Run a site-wide search for the free-text query."""
    term = query.strip()
    if not term:
        return SearchResponse.ok("", [])

    terms = QueryTerms.parse(term)

    try:
        results = await global_search(client, term, terms)
        logger.info(f"Global search | query={term!r} | results={len(results)}")
        return SearchResponse.ok(term, results)
    except Exception as e:
        primary_error = e
        logger.warning(f"Global search failed, falling back to individual API searches: {e}")

    try:
        results = await fallback_search(client, terms)
        logger.info(f"Fallback search | query={term!r} | results={len(results)}")
        return SearchResponse.ok(term, results)
    except Exception as fallback_error:
        logger.error(f"Fallback search also failed: {fallback_error}")
        if isinstance(primary_error, UpstreamUnreachable):
            message = UNREACHABLE_MESSAGE
        else:
            message = str(fallback_error) or "Failed to perform search"

    search_url = f"{client.endpoints.search_global}?q={encode_uri_component(term)}"
    logger.error(f"Search API Error | query={term!r} | searchUrl={search_url} | error={message}")
    return SearchResponse.failed(term, message)
