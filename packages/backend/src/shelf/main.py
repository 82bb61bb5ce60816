"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown. Middleware, CORS, error
handlers and routers are all registered here.

The auth collaborators (password hasher, token issuer, guard) are
constructed here from settings and attached to app.state. Nothing
else builds them, so there is exactly one place that reads the
signing secret.
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shelf import __version__
from shelf.api import api_router
from shelf.auth.dependencies import AuthorizationGuard
from shelf.auth.jwt import TokenIssuer
from shelf.auth.password import PasswordHasher
from shelf.config import Settings, settings
from shelf.errors import StoreFailureError

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: Anything before `yield` runs at startup, after `yield` runs
    at shutdown.
    """
    app_settings: Settings = app.state.settings
    logger.info(
        "shelf.starting",
        version=__version__,
        environment=app_settings.environment,
        port=app_settings.port,
        token_ttl_minutes=app_settings.access_token_expire_minutes,
    )

    yield

    logger.info("shelf.shutdown")

    # Close database engine
    from shelf.db.engine import engine
    await engine.dispose()


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed or missing fields are a plain 400, before any auth logic runs."""
    return JSONResponse(
        status_code=400,
        content={"detail": jsonable_encoder(exc.errors())},
    )


async def store_failure_handler(request: Request, exc: StoreFailureError):
    """Persistence failures surface as a generic 500 with no internals."""
    logger.error("shelf.store_failure", error_type=str(exc), path=request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    app_settings = app_settings or settings

    app = FastAPI(
        title="Shelf",
        description="Bookmarks with stateless bearer-token authentication",
        version=__version__,
        lifespan=lifespan,
    )

    # ── Auth collaborators ───────────────────────────────────
    token_issuer = TokenIssuer(
        secret=app_settings.jwt_secret,
        algorithm=app_settings.jwt_algorithm,
        ttl=timedelta(minutes=app_settings.access_token_expire_minutes),
        leeway_seconds=app_settings.token_leeway_seconds,
    )
    app.state.settings = app_settings
    app.state.token_issuer = token_issuer
    app.state.guard = AuthorizationGuard(token_issuer)
    app.state.password_hasher = PasswordHasher(
        time_cost=app_settings.argon2_time_cost,
        memory_cost=app_settings.argon2_memory_cost,
        parallelism=app_settings.argon2_parallelism,
    )

    # ── Error handlers ───────────────────────────────────────
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StoreFailureError, store_failure_handler)

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler

    from shelf.middleware.request_id import RequestIdMiddleware
    from shelf.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: shelf.main:app)
app = create_app()
