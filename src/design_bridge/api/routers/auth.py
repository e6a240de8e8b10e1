"""
design_bridge.api.routers.auth

Login and session validation endpoints used by the design client.

Responsibilities:
- `POST /api/auth/login`: local admin, API-key deployment, upstream token, or
  upstream cookie-session login, in that order.
- `GET /api/auth/validate`: run the resolver and report the result as 200.
"""

from __future__ import annotations

import hmac
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_401_UNAUTHORIZED, HTTP_502_BAD_GATEWAY

from design_bridge.api.deps import identity_from_app, resolver_from_app, upstream_from_app
from design_bridge.auth.gate import credential_from_request
from design_bridge.auth.identity import ServerIdentity
from design_bridge.auth.models import (
    COOKIE_AUTH_SENTINEL,
    LOCAL_ADMIN_SENTINEL,
    Authenticated,
)
from design_bridge.auth.resolver import AuthResolver
from design_bridge.observability.logging import get_logger
from design_bridge.upstream.client import UpstreamClient
from design_bridge.upstream.errors import UpstreamError, UpstreamUnreachable

router = APIRouter(prefix="/api/auth", tags=["auth"])
log = get_logger(__name__)

API_KEY_TOKEN = "api-key"


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _is_local_admin(identity: ServerIdentity, body: LoginRequest) -> bool:
    user_ok = hmac.compare_digest(body.username.encode(), identity.local_admin_user.encode())
    pass_ok = hmac.compare_digest(body.password.encode(), identity.local_admin_password.encode())
    return user_ok and pass_ok


@router.post("/login", response_model=None)
async def login(
    body: LoginRequest,
    identity: ServerIdentity = Depends(identity_from_app),
    upstream: UpstreamClient = Depends(upstream_from_app),
) -> dict[str, Any] | JSONResponse:
    if not body.username or not body.password:
        return _error(HTTP_400_BAD_REQUEST, "Username and password are required")

    if identity.trust_sentinels and _is_local_admin(identity, body):
        log.info("login.succeeded", method="local-admin")
        return {
            "success": True,
            "token": LOCAL_ADMIN_SENTINEL,
            "user_id": 1,
            "user_display_name": "Administrator",
            "user_email": "admin@localhost",
            "auth_method": "local_admin",
        }

    if identity.api_key_configured:
        # The backend talks to the platform with its own keys; any login is accepted.
        log.info("login.succeeded", method="api-key")
        return {
            "success": True,
            "token": API_KEY_TOKEN,
            "user_id": 1,
            "user_display_name": body.username,
            "auth_method": "api_key",
        }

    failures: list[UpstreamError] = []
    try:
        issued = await upstream.issue_token(username=body.username, password=body.password)
    except UpstreamError as e:
        failures.append(e)
        log.info("login.token_failed", reason=e.reason.value)
    else:
        log.info("login.succeeded", method="bearer-token")
        return issued

    try:
        session = await upstream.session_login(username=body.username, password=body.password)
    except UpstreamError as e:
        failures.append(e)
        log.info("login.session_failed", reason=e.reason.value)
    else:
        if session.nonce is None and not identity.trust_sentinels:
            return _error(HTTP_401_UNAUTHORIZED, "Invalid credentials")
        token = session.nonce or COOKIE_AUTH_SENTINEL
        response: dict[str, Any] = {
            "success": True,
            "token": token,
            "user_id": session.user_id,
            "user_display_name": session.user_display_name,
            "user_email": session.user_email,
            "auth_method": "cookie_session",
        }
        if token == COOKIE_AUTH_SENTINEL:
            response["cookie_auth"] = True
            response["user_info"] = {
                "id": session.user_id,
                "display_name": session.user_display_name,
                "email": session.user_email,
            }
        log.info("login.succeeded", method="cookie-session")
        return response

    if all(isinstance(e, UpstreamUnreachable) for e in failures):
        return _error(HTTP_502_BAD_GATEWAY, "Cannot connect to upstream platform")
    return _error(HTTP_401_UNAUTHORIZED, "Invalid credentials")


@router.get("/validate")
async def validate(
    request: Request,
    resolver: AuthResolver = Depends(resolver_from_app),
) -> dict[str, Any]:
    credential = credential_from_request(
        request, short_token_threshold=resolver.identity.short_token_threshold
    )
    outcome = await resolver.resolve(credential)
    if not isinstance(outcome, Authenticated):
        return {"valid": False}
    principal = outcome.principal
    return {
        "valid": True,
        "user_id": principal.id,
        "role": principal.role.value,
        "auth_method": principal.method.value,
    }


# --- Module Notes -----------------------------------------------------------
# Login responses keep the field names the design client already reads
# (`token`, `user_id`, `user_display_name`, `auth_method`).
