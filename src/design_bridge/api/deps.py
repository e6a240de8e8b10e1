"""
design_bridge.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings and the startup-built auth objects.
- Encapsulate app.state access patterns (upstream client, resolver, identity).
"""

from __future__ import annotations

from fastapi import Request

from design_bridge.auth.identity import ServerIdentity
from design_bridge.auth.resolver import AuthResolver
from design_bridge.settings import Settings
from design_bridge.upstream.client import UpstreamClient


def settings_from_app(request: Request) -> Settings:
    # The app is built for one Settings instance; routes see the same one.
    return request.app.state.settings  # type: ignore[attr-defined]


def identity_from_app(request: Request) -> ServerIdentity:
    return request.app.state.identity  # type: ignore[attr-defined]


def upstream_from_app(request: Request) -> UpstreamClient:
    # Created on app startup in `design_bridge.api.app.create_app`.
    return request.app.state.upstream  # type: ignore[attr-defined]


def resolver_from_app(request: Request) -> AuthResolver:
    return request.app.state.resolver  # type: ignore[attr-defined]


# --- Module Notes -----------------------------------------------------------
# The admin gate dependency lives in `auth.gate.require_admin`.
