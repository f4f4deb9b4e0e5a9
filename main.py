import time
import traceback
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from app.core.config import settings
from app.core.logging_config import setup_logging, get_logger, RequestLogger
from app.core.middleware import SecurityHeadersMiddleware
from app.core.rate_limit import limiter
from app.api.routes import search

# Initialize logging first (auto-determines level based on environment)
setup_logging(
    app_name="anwarululoom",
    log_level=settings.log_level,  # Empty = auto (DEBUG in dev, WARNING in prod)
    environment=settings.environment,
    enable_console=True,
    enable_file=settings.log_to_file,
)

logger = get_logger(__name__)
request_logger = RequestLogger(get_logger("anwarululoom.requests"))

logger.info(f"Starting {settings.app_name} API | upstream={settings.api_base_url}")

app = FastAPI(
    title=settings.app_name,
    description="Site search for the Anwarul Uloom Islamic learning platform",
    version="1.0.0",
)

# Rate limiting
app.state.limiter = limiter


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded):
    """slowapi's 429 reply, readable cross-origin on the search endpoint."""
    response = _rate_limit_exceeded_handler(request, exc)
    if request.url.path.startswith("/api/search"):
        response.headers.update(search.CORS_HEADERS)
    return response


app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# Global exception handler: logs full tracebacks for 500 errors
@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions, log full traceback, return 500."""
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}: {exc}\n"
        f"{traceback.format_exc()}"
    )
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests with timing."""
    start_time = time.time()
    client_ip = request.client.host if request.client else "unknown"

    response = await call_next(request)

    duration_ms = (time.time() - start_time) * 1000
    request_logger.log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=duration_ms,
        client_ip=client_ip,
        query=request.url.query,
    )
    return response


# No CORSMiddleware: its preflight reply ("OK" body) would shadow the search
# router's own OPTIONS handler, which answers with CORS headers and no body.

# Security headers middleware
app.add_middleware(SecurityHeadersMiddleware, hsts=settings.environment == "production")

app.include_router(search.router, prefix="/api")

logger.info("API routes registered at /api")


@app.get("/health")
def health_check():
    logger.debug("Health check requested")
    return {"status": "healthy"}


@app.get("/")
def root():
    return {"message": f"{settings.app_name} API", "app": settings.app_name, "docs": "/docs"}
