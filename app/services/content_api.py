"""
Client for the upstream content API (the Laravel CMS behind the site).

Wraps a single httpx.AsyncClient and translates transport and HTTP failures
into the UpstreamError hierarchy so callers can decide how to degrade.
"""
import json
from typing import Any, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from app.core.config import ApiEndpoints, endpoints as default_endpoints
from app.core.logging_config import get_logger
from app.schemas.content import ApiResponse, PaginationMeta

logger = get_logger(__name__)

JSON_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

SCHEMA_ERROR_MARKERS = ("Column not found", "Unknown column")

# Result type -> ApiEndpoints attribute holding its listing URL
LISTING_ENDPOINTS = {
    "blog": "blogs",
    "article": "articles",
    "course": "courses",
    "author": "authors",
    "book": "books",
    "event": "events",
    "fatwa": "iftah",
    "awlyaa": "awlyaa",
    "tasawwuf": "tasawwuf",
}


class UpstreamError(Exception):
    """Base class for failures talking to the content API."""
    pass


class UpstreamUnreachable(UpstreamError):
    """The content API could not be reached (connect error, DNS, timeout)."""
    pass


class UpstreamHTTPError(UpstreamError):
    """The content API answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.status_code = status_code


class UpstreamSchemaError(UpstreamHTTPError):
    """The content API reported a database schema problem."""
    pass


class UpstreamMalformed(UpstreamError):
    """The content API answered with something that is not usable JSON."""
    pass


def encode_uri_component(value: Any) -> str:
    """Percent-encode a path or query component the way browsers do."""
    return quote(str(value), safe="!~*'()")


class ContentApiClient:
    """Read-only access to the content API listings and global search."""

    def __init__(self, http: httpx.AsyncClient, api_endpoints: ApiEndpoints = default_endpoints):
        self._http = http
        self.endpoints = api_endpoints

    async def _get(self, url: str, params: Optional[dict] = None, headers: Optional[dict] = None) -> httpx.Response:
        try:
            return await self._http.get(url, params=params, headers={**JSON_HEADERS, **(headers or {})})
        except httpx.TimeoutException as e:
            timeout_ms = int((self._http.timeout.read or 0) * 1000)
            raise UpstreamUnreachable(
                f"Request timed out after {timeout_ms}ms. Please try again."
            ) from e
        except httpx.RequestError as e:
            logger.debug(f"Transport error for {url}: {e!r}")
            raise UpstreamUnreachable(
                "Unable to reach the server. Check your internet connection."
            ) from e

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if response.status_code == 204:
            return {}
        try:
            if "application/json" in response.headers.get("content-type", ""):
                return response.json()
            return json.loads(response.text)
        except ValueError as e:
            raise UpstreamMalformed(f"Invalid JSON from {response.request.url.path}") from e

    @staticmethod
    def _to_api_response(payload: Any) -> ApiResponse:
        """Unwrap a bare array, a {data: [...]} envelope, or a paginated envelope."""
        if isinstance(payload, list):
            items = payload
            pagination = None
            message = None
        elif isinstance(payload, dict):
            if payload.get("success") is False:
                raise UpstreamError(payload.get("message") or payload.get("error") or "API request failed")
            items = payload.get("data")
            if not isinstance(items, list):
                items = []
            pagination = payload.get("pagination")
            message = payload.get("message")
        else:
            items, pagination, message = [], None, None

        meta = None
        if isinstance(pagination, dict):
            try:
                meta = PaginationMeta.model_validate(pagination)
            except ValidationError:
                logger.debug("Ignoring unparseable pagination block")

        return ApiResponse(
            success=True,
            data=[item for item in items if isinstance(item, dict)],
            pagination=meta,
            message=message if isinstance(message, str) else None,
        )

    async def list_content(self, content_type: str, *, limit: int, page: int = 1) -> ApiResponse:
        """Fetch one page of a content listing (blogs, courses, fatwas, ...)."""
        url = getattr(self.endpoints, LISTING_ENDPOINTS[content_type])
        logger.debug(f"Fetching {content_type} listing | page={page} | limit={limit}")

        response = await self._get(url, params={"page": page, "limit": limit})
        if response.is_error:
            raise UpstreamHTTPError(f"HTTP error! status: {response.status_code}", response.status_code)

        result = self._to_api_response(self._decode(response))
        logger.debug(f"Fetched {content_type} listing | count={len(result.data)}")
        return result

    async def search_global(self, query: str, cache_seconds: int = 60) -> Any:
        """
        Call the CMS global search endpoint and return its decoded JSON.

        Raises:
            UpstreamUnreachable: the endpoint could not be reached
            UpstreamSchemaError: the CMS reported a missing/unknown column
            UpstreamHTTPError: any other non-2xx answer
            UpstreamMalformed: the answer is not JSON
        """
        url = f"{self.endpoints.search_global}?q={encode_uri_component(query)}"
        response = await self._get(url, headers={"Cache-Control": f"max-age={cache_seconds}"})

        if response.is_error:
            body = response.text
            logger.error(f"Search API error ({response.status_code}): {body[:500]}")
            raise self._search_error(response.status_code, response.reason_phrase, body)

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            logger.error(f"Search API returned non-JSON response: {response.text[:500]}")
            raise UpstreamMalformed("Search API returned non-JSON response")

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamMalformed("Search API returned invalid JSON") from e

    @staticmethod
    def _search_error(status_code: int, reason: str, body: str) -> UpstreamHTTPError:
        message = f"Search API returned {status_code}: {reason}"
        try:
            payload = json.loads(body)
        except ValueError:
            return UpstreamHTTPError(body[:500] or message, status_code)

        if isinstance(payload, dict) and payload.get("message"):
            message = str(payload["message"])
            if any(marker in message for marker in SCHEMA_ERROR_MARKERS):
                return UpstreamSchemaError(
                    "Database schema issue in search API. Please check the Laravel SearchController.",
                    status_code,
                )
        return UpstreamHTTPError(message, status_code)
