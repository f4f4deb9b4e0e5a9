from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "Anwarul Uloom"
    environment: str = "development"  # development, production
    log_level: str = ""  # DEBUG, INFO, WARNING, ERROR, CRITICAL (empty = auto based on environment)
    log_to_file: bool = True  # Enable file logging

    # Upstream content API (Laravel CMS)
    api_base_url: str = "https://website.anwarululoom.com/api"
    api_timeout_seconds: float = 10.0

    # Search
    search_cache_seconds: int = 60
    search_fallback_limit: int = 50
    search_fatwa_fallback_limit: int = 100  # darul-ifta listing has no server-side search
    search_phrase_min_length: int = 5

    # Rate limiting
    rate_limit_enabled: bool = True
    search_rate_limit: str = "120/minute"

    class Config:
        env_file = ".env"
        extra = "ignore"


class ApiEndpoints:
    """Upstream content API URLs, derived from the configured base URL."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path}"

    @property
    def blogs(self) -> str:
        return self._url("blogs")

    @property
    def articles(self) -> str:
        return self._url("articles")

    @property
    def courses(self) -> str:
        return self._url("courses")

    @property
    def authors(self) -> str:
        return self._url("authors")

    @property
    def books(self) -> str:
        return self._url("books")

    @property
    def events(self) -> str:
        return self._url("events")

    @property
    def iftah(self) -> str:
        return self._url("darul-ifta")

    @property
    def awlyaa(self) -> str:
        return self._url("awlyaa")

    @property
    def tasawwuf(self) -> str:
        return self._url("tasawwuf")

    @property
    def search_global(self) -> str:
        return self._url("search/global")


settings = Settings()
endpoints = ApiEndpoints(settings.api_base_url)
