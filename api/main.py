"""
api/main.py -- FastAPI application entry point for TaskMarket.

Run with:      python main.py serve
               uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. SlowAPIMiddleware     -- enforces per-route rate limits from api.limiter

Lifespan opens the user and market stores on startup, seeds the admin
account when ADMIN_PASSWORD is set, and closes both stores on shutdown.
Handlers reach the stores through request.app.state, which is also how the
tests swap in in-memory databases.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.submissions import router as submissions_router
from api.routes.tasks import router as tasks_router
from auth.store import UserStore
from auth.tokens import ensure_admin_account
from core.config import get_settings
from core.errors import StoreFailure, TaskMarketError
from market.store import MarketStore

__version__ = "0.1.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=getattr(logging, _settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("taskmarket.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open stores on startup and close them on shutdown.

    Both stores point at the same DATABASE_URL: submissions reference users
    and tasks through foreign keys, and the admin listing joins all three.
    """
    logger.info("TaskMarket API starting up")
    app.state.user_store = UserStore(_settings.database_url)
    app.state.market = MarketStore(_settings.database_url)
    if _settings.admin_password:
        created = ensure_admin_account(
            app.state.user_store,
            _settings.admin_name,
            _settings.admin_email,
            _settings.admin_password,
        )
        if created:
            logger.info("Seeded admin account %s", _settings.admin_email)
    logger.info("Stores initialized")

    yield

    app.state.market.close()
    app.state.user_store.close()
    logger.info("TaskMarket API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="TaskMarket API",
    description="Microtask marketplace: admins publish tasks, workers submit evidence, admins review.",
    version=__version__,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(TrustedHostMiddleware, allowed_hosts=_settings.allowed_hosts)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(tasks_router, prefix="/api", tags=["Tasks"])
app.include_router(submissions_router, prefix="/api", tags=["Submissions"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly. Internal detail goes to the log, never to the body.
# ---------------------------------------------------------------------------


def _error_response(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail)).model_dump(),
    )


@app.exception_handler(TaskMarketError)
async def domain_error_handler(request: Request, exc: TaskMarketError) -> JSONResponse:
    """Render a classified domain error; exc.detail is logged only."""
    if exc.status_code >= 500:
        logger.error("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.detail)
    else:
        logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.detail)
    return _error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Unclassified store failures become 500 store_failure.

    The driver message can name tables, columns and constraint details, so
    it is written to the log with the traceback and withheld from the client.
    """
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    return _error_response(StoreFailure.status_code, StoreFailure.code, StoreFailure.message)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with Retry-After when a rate limit is exceeded."""
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _error_response(429, "rate_limited", "Too many requests.", detail=str(exc.detail))
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 422 with structured error when request body or params fail validation."""
    return _error_response(422, "validation_error", "Request validation failed.", detail=str(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Structured body for framework-level errors (unknown route, wrong method)."""
    return _error_response(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable.
# No rate limit -- load balancer probes must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and database reachability."""
    market: MarketStore = request.app.state.market
    database = "ok" if market.ping() else "error"
    return HealthResponse(version=__version__, components={"app": "ok", "database": database})
