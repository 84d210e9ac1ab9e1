"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Everything with state is built here exactly once per app and
hung on app.state: the settings, the engine, the token service, and the
two repositories. Route dependencies read them back from the request, so
there is no global registry and tests can build as many isolated apps as
they like.

Lifespan only manages startup logging and engine disposal.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from movieapi import __version__
from movieapi.api import api_router
from movieapi.auth.jwt import TokenService
from movieapi.config import Settings, get_settings
from movieapi.db.engine import build_engine, build_session_factory
from movieapi.errors import register_exception_handlers
from movieapi.log import configure_logging
from movieapi.middleware.request_id import RequestIdMiddleware
from movieapi.middleware.security import SecurityHeadersMiddleware
from movieapi.repositories.movies import MovieRepository
from movieapi.repositories.users import UserRepository

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    settings: Settings = app.state.settings
    logger.info(
        "movieapi.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("movieapi.shutdown")
    await app.state.engine.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, json=settings.log_json)

    app = FastAPI(
        title="Movie API",
        description="Signup/signin with JWT and validated CRUD over movies",
        version=__version__,
        lifespan=lifespan,
    )

    engine = build_engine(settings.database_url, echo=settings.debug)
    session_factory = build_session_factory(engine)

    app.state.settings = settings
    app.state.engine = engine
    app.state.token_service = TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expires_minutes=settings.access_token_expire_minutes,
    )
    app.state.users = UserRepository(session_factory)
    app.state.movies = MovieRepository(session_factory)

    # ── Middleware stack ──────────────────────────────────────
    # Starlette middleware executes in reverse order of registration.
    # Request flow: RequestId → Security → CORS → handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(api_router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {"message": "Welcome to the Movie API"}

    return app
