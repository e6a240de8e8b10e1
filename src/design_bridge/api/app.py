"""
design_bridge.api.app

FastAPI app factory for the design bridge service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Freeze the server identity and build the auth chain once at startup.
- Create and close the shared upstream HTTP client.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from design_bridge import __version__
from design_bridge.api.routers.admin import router as admin_router
from design_bridge.api.routers.auth import router as auth_router
from design_bridge.api.routers.health import router as health_router
from design_bridge.auth.gate import AdminGate, HttpRejection, rejection_handler
from design_bridge.auth.identity import ServerIdentity
from design_bridge.auth.resolver import AuthResolver
from design_bridge.observability.logging import configure_logging, get_logger
from design_bridge.observability.middleware import RequestContextMiddleware
from design_bridge.settings import Settings
from design_bridge.upstream.client import UpstreamClient

log = get_logger(__name__)


def create_app(
    *,
    settings: Settings,
    upstream_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """
    `upstream_transport` replaces the network transport of the upstream client
    (tests pass an `httpx.MockTransport`).
    """

    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(service_name=settings.service_name, level=settings.log_level)
    identity = ServerIdentity.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info(
            "startup",
            env=settings.env,
            upstream_url=identity.upstream_base_url,
            secret_token_configured=identity.secret_token is not None,
            api_key_configured=identity.api_key_configured,
        )
        # One pooled client for every upstream call; per-call timeouts override the default.
        async with httpx.AsyncClient(
            base_url=identity.upstream_base_url,
            timeout=httpx.Timeout(settings.bulk_timeout),
            transport=upstream_transport,
        ) as http:
            upstream = UpstreamClient(settings=settings, http=http)
            resolver = AuthResolver(identity=identity, upstream=upstream)
            app.state.upstream = upstream
            app.state.resolver = resolver
            app.state.admin_gate = AdminGate(resolver=resolver)
            yield
        log.info("shutdown")

    app = FastAPI(
        title="Design Bridge",
        version=__version__,
        docs_url="/docs" if settings.env != "prod" else None,
        openapi_url="/openapi.json" if settings.env != "prod" else None,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.identity = identity

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)
    app.add_exception_handler(HttpRejection, rejection_handler)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(admin_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Settings validation errors surface before `create_app` runs (in `get_settings`),
# which is the only fatal path in the auth subsystem.
