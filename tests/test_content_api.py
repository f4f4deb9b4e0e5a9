"""Tests for the upstream content API client."""

import asyncio

import httpx
import pytest

from app.core.config import ApiEndpoints
from app.services.content_api import (
    ContentApiClient,
    UpstreamError,
    UpstreamHTTPError,
    UpstreamMalformed,
    UpstreamSchemaError,
    UpstreamUnreachable,
)


def _call(handler, method, *args, **kwargs):
    """Run one ContentApiClient coroutine against a mock transport."""
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler), timeout=2.0) as http:
            client = ContentApiClient(http, ApiEndpoints("http://cms.test/api/"))
            return await getattr(client, method)(*args, **kwargs)
    return asyncio.run(run())


def _respond(response: httpx.Response):
    seen = []

    def handler(request):
        seen.append(request)
        return response
    return handler, seen


class TestListContent:
    def test_unwraps_paginated_envelope(self):
        handler, seen = _respond(httpx.Response(200, json={
            "success": True,
            "data": [{"id": 1, "title": "A"}, {"id": 2, "title": "B"}],
            "pagination": {"current_page": 1, "per_page": 50, "total": 2},
        }))
        result = _call(handler, "list_content", "blog", limit=50)

        assert result.success
        assert [item["id"] for item in result.data] == [1, 2]
        assert result.pagination.total == 2
        assert set(result.model_dump()) == {"success", "data", "pagination", "message"}
        assert seen[0].url.path == "/api/blogs"
        assert seen[0].url.params["limit"] == "50"
        assert seen[0].url.params["page"] == "1"

    def test_bare_array(self):
        handler, _ = _respond(httpx.Response(200, json=[{"id": 1}, "junk"]))
        result = _call(handler, "list_content", "tasawwuf", limit=10)
        assert result.data == [{"id": 1}]
        assert result.pagination is None

    def test_fatwas_use_darul_ifta_endpoint(self):
        handler, seen = _respond(httpx.Response(200, json={"data": []}))
        _call(handler, "list_content", "fatwa", limit=100)
        assert seen[0].url.path == "/api/darul-ifta"
        assert seen[0].url.params["limit"] == "100"

    def test_unsuccessful_envelope_raises(self):
        handler, _ = _respond(httpx.Response(200, json={"success": False, "message": "Maintenance"}))
        with pytest.raises(UpstreamError, match="Maintenance"):
            _call(handler, "list_content", "blog", limit=50)

    def test_http_error_status(self):
        handler, _ = _respond(httpx.Response(503, text="down"))
        with pytest.raises(UpstreamHTTPError) as exc_info:
            _call(handler, "list_content", "event", limit=50)
        assert exc_info.value.status_code == 503

    def test_invalid_json(self):
        handler, _ = _respond(httpx.Response(200, text="<html>oops</html>"))
        with pytest.raises(UpstreamMalformed):
            _call(handler, "list_content", "book", limit=50)

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)
        with pytest.raises(UpstreamUnreachable, match="Unable to reach the server"):
            _call(handler, "list_content", "author", limit=50)

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)
        with pytest.raises(UpstreamUnreachable, match="timed out after 2000ms"):
            _call(handler, "list_content", "author", limit=50)


class TestSearchGlobal:
    def test_returns_decoded_json_and_sends_cache_hint(self):
        handler, seen = _respond(httpx.Response(200, json={"data": []}))
        payload = _call(handler, "search_global", "zakat rules", cache_seconds=60)

        assert payload == {"data": []}
        request = seen[0]
        assert request.url.path == "/api/search/global"
        assert request.url.params["q"] == "zakat rules"
        assert b"q=zakat%20rules" in request.url.query
        assert request.headers["cache-control"] == "max-age=60"
        assert request.headers["accept"] == "application/json"

    def test_schema_error_is_classified(self):
        handler, _ = _respond(httpx.Response(500, json={
            "message": "SQLSTATE[42S22]: Column not found: 1054 Unknown column 'slug'",
        }))
        with pytest.raises(UpstreamSchemaError) as exc_info:
            _call(handler, "search_global", "zakat")
        assert isinstance(exc_info.value, UpstreamHTTPError)
        assert exc_info.value.status_code == 500

    def test_json_error_message_is_kept(self):
        handler, _ = _respond(httpx.Response(422, json={"message": "The q field is required."}))
        with pytest.raises(UpstreamHTTPError, match="The q field is required."):
            _call(handler, "search_global", "zakat")

    def test_text_error_body_is_used(self):
        handler, _ = _respond(httpx.Response(502, text="Bad gateway from proxy"))
        with pytest.raises(UpstreamHTTPError, match="Bad gateway from proxy"):
            _call(handler, "search_global", "zakat")

    def test_empty_error_body_uses_status(self):
        handler, _ = _respond(httpx.Response(500))
        with pytest.raises(UpstreamHTTPError, match="Search API returned 500"):
            _call(handler, "search_global", "zakat")

    def test_non_json_content_type(self):
        handler, _ = _respond(httpx.Response(
            200, headers={"content-type": "text/html"}, content=b"<html></html>",
        ))
        with pytest.raises(UpstreamMalformed):
            _call(handler, "search_global", "zakat")
