import os

import httpx
import pytest
from fastapi.testclient import TestClient

# Must be in place before app.core.config is first imported
os.environ["API_BASE_URL"] = "http://cms.test/api"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_TO_FILE"] = "false"

API_PREFIX = "/api"


class FakeCMS:
    """In-memory stand-in for the upstream content API, served through httpx.MockTransport."""

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def on(self, path: str, response):
        """Register a canned httpx.Response, or a callable(request) -> Response, for a path under /api."""
        self.routes[API_PREFIX + path] = response

    def listing(self, path: str, items: list[dict]):
        self.on(path, httpx.Response(200, json={"success": True, "data": items}))

    def empty_listings(self):
        for path in ("/blogs", "/articles", "/courses", "/authors", "/books",
                     "/events", "/darul-ifta", "/awlyaa", "/tasawwuf"):
            self.listing(path, [])

    def refuse(self, path: str):
        """Make requests to the path fail at the transport level."""
        def refused(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)
        self.on(path, refused)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "Not Found"})
        if callable(route):
            return route(request)
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)


@pytest.fixture(scope="session")
def app():
    import main as main_module
    return main_module.app


@pytest.fixture()
def cms():
    return FakeCMS()


@pytest.fixture()
def client(app, cms):
    from app.api.deps import get_content_client
    from app.core.config import ApiEndpoints
    from app.services.content_api import ContentApiClient

    async def fake_content_client():
        http = httpx.AsyncClient(transport=httpx.MockTransport(cms.handler))
        try:
            yield ContentApiClient(http, ApiEndpoints("http://cms.test/api"))
        finally:
            await http.aclose()

    app.dependency_overrides[get_content_client] = fake_content_client
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
