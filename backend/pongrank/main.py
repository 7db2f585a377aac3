"""PongRank API application: configuration checks, error rendering, routers."""

import logging
import os

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from .routers import admin, leaderboards, matches, players
from .exceptions import DomainException, ProblemDetail
from .config import API_PREFIX
from .rate_limit import limiter, rate_limit_handler
from .utils.sentry import init_sentry

logger = logging.getLogger(__name__)

init_sentry()

# The leaderboard front end runs on its own origin; refuse to start without an
# explicit allow-list.
allowed_origins_raw = os.getenv("ALLOWED_ORIGINS", "").strip()

if not allowed_origins_raw:
    raise ValueError(
        "ALLOWED_ORIGINS must list the front-end origins allowed to call the "
        "PongRank API (comma separated)."
    )

ALLOWED_ORIGINS = [o.strip() for o in allowed_origins_raw.split(",") if o.strip()]

if not ALLOWED_ORIGINS:
    raise ValueError("ALLOWED_ORIGINS must contain at least one non-empty origin.")
if "*" in ALLOWED_ORIGINS:
    raise ValueError("ALLOWED_ORIGINS cannot include '*'; list the origins explicitly.")

ALLOW_CREDENTIALS = os.getenv("ALLOW_CREDENTIALS", "true").lower() == "true"

app = FastAPI(
    title="PongRank API",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=ALLOW_CREDENTIALS,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("Serving PongRank API under %r", API_PREFIX)


@app.get("/healthz", tags=["health"])  # outside API_PREFIX for load balancers
def root_healthz():
    return {"status": "ok"}


def _problem_response(problem: ProblemDetail) -> JSONResponse:
    return JSONResponse(
        status_code=problem.status,
        content=problem.model_dump(),
        media_type="application/problem+json",
    )


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    return _problem_response(
        ProblemDetail(
            type=exc.type,
            title=exc.title,
            detail=exc.detail,
            status=exc.status_code,
            code=exc.code,
        )
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Render ``HTTPException`` (including :func:`http_problem`) as problem+json."""

    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return _problem_response(
        ProblemDetail(
            title=detail,
            detail=detail,
            status=exc.status_code,
            code=getattr(exc, "code", f"http_{exc.status_code}"),
        )
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception", exc_info=(type(exc), exc, exc.__traceback__))
    return _problem_response(
        ProblemDetail(
            title="Internal Server Error",
            status=500,
            detail=str(exc),
            code="internal_server_error",
        )
    )


api_router = APIRouter(prefix=API_PREFIX, tags=["meta"])


@api_router.get("/healthz", tags=["health"])
def api_healthz():
    return {"status": "ok"}


@api_router.get("")
def api_root():
    return {"message": "PongRank API. See /docs."}


# Routers carry resource prefixes only; the version lives here.
v0_router = APIRouter(prefix="/v0")
v0_router.include_router(players.router)
v0_router.include_router(matches.router)
v0_router.include_router(leaderboards.router)
v0_router.include_router(admin.router)

api_router.include_router(v0_router)
app.include_router(api_router)
