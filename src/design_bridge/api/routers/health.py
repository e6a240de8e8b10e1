"""
design_bridge.api.routers.health

Health endpoint.
"""

from __future__ import annotations

from datetime import UTC, datetime

from fastapi import APIRouter, Depends

from design_bridge.api.deps import identity_from_app
from design_bridge.auth.identity import ServerIdentity

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
async def health(identity: ServerIdentity = Depends(identity_from_app)) -> dict[str, str]:
    # Liveness only; upstream reachability is checked by the admin connection test.
    return {
        "status": "ok",
        "timestamp": datetime.now(tz=UTC).isoformat(),
        "upstream_url": identity.upstream_base_url,
    }
