"""
design_bridge.api.routers.admin

Privileged endpoints behind the admin gate.

Responsibilities:
- Report the effective upstream configuration (flags only, no secret values).
- Check upstream connectivity for operators.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from design_bridge.api.deps import identity_from_app, settings_from_app, upstream_from_app
from design_bridge.auth.gate import require_admin
from design_bridge.auth.identity import ServerIdentity
from design_bridge.auth.models import Principal
from design_bridge.settings import Settings
from design_bridge.upstream.client import UpstreamClient

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])


class ConnectionTestRequest(BaseModel):
    upstream_url: str | None = None


class ConnectionTestResponse(BaseModel):
    success: bool
    results: dict[str, str]


@router.get("/config")
async def get_config(
    principal: Principal = Depends(require_admin),
    settings: Settings = Depends(settings_from_app),
    identity: ServerIdentity = Depends(identity_from_app),
) -> dict[str, Any]:
    return {
        "config": {
            "upstream_url": identity.upstream_base_url,
            "session_validate_path": settings.session_validate_path,
            "token_validate_path": settings.token_validate_path,
            "secret_token_configured": identity.secret_token is not None,
            "api_key_configured": identity.api_key_configured,
            "trust_sentinel_tokens": identity.trust_sentinels,
        },
        "principal": {
            "id": principal.id,
            "role": principal.role.value,
            "method": principal.method.value,
        },
    }


@router.post("/test-connection", response_model=ConnectionTestResponse)
async def test_connection(
    body: ConnectionTestRequest | None = None,
    settings: Settings = Depends(settings_from_app),
    identity: ServerIdentity = Depends(identity_from_app),
    upstream: UpstreamClient = Depends(upstream_from_app),
) -> ConnectionTestResponse:
    base_url = (body.upstream_url or None) if body else None
    if base_url is not None and upstream.is_configured_upstream(base_url):
        base_url = None
    checks: dict[str, tuple[str, dict[str, str] | None]] = {
        "Upstream API": (settings.upstream_index_path, None),
        "Session endpoint": (settings.session_validate_path, None),
    }
    basic = identity.api_basic_auth()
    # Key material only ever goes to the configured upstream.
    if basic and base_url is None:
        checks["Commerce API keys"] = (settings.upstream_index_path, {"Authorization": basic})

    results: dict[str, str] = {}
    for name, (path, headers) in checks.items():
        ok = await upstream.check_reachable(path, base_url=base_url, headers=headers)
        results[name] = "OK" if ok else "FAILED"
    return ConnectionTestResponse(success=all(v == "OK" for v in results.values()), results=results)


# --- Module Notes -----------------------------------------------------------
# The router-level dependency guarantees the gate runs even for handlers that do
# not take a `Principal` argument; FastAPI caches it per request, so it runs once.
