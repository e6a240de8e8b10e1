"""
design_bridge.auth.identity

Process-wide server identity.

Responsibilities:
- Snapshot the auth-relevant parts of `Settings` into an immutable value.
- Answer the questions the resolver asks about the deployment (API key present, etc.).
"""

from __future__ import annotations

import base64
from dataclasses import dataclass

from design_bridge.settings import Settings


@dataclass(frozen=True, slots=True)
class ServerIdentity:
    """
    Built once at startup and shared read-only by every request.
    """

    local_admin_user: str
    local_admin_password: str
    upstream_base_url: str
    api_key: str | None = None
    api_secret: str | None = None
    secret_token: str | None = None
    trust_sentinels: bool = True
    short_token_threshold: int = 50

    @classmethod
    def from_settings(cls, settings: Settings) -> ServerIdentity:
        return cls(
            local_admin_user=settings.local_admin_user,
            local_admin_password=settings.local_admin_password,
            upstream_base_url=settings.upstream_base_url.rstrip("/"),
            api_key=settings.api_consumer_key or None,
            api_secret=settings.api_consumer_secret or None,
            secret_token=settings.upstream_secret_token or None,
            trust_sentinels=settings.trust_sentinel_tokens,
            short_token_threshold=settings.short_token_threshold,
        )

    @property
    def api_key_configured(self) -> bool:
        return bool(self.api_key and self.api_secret)

    def api_basic_auth(self) -> str | None:
        # Basic auth header for privileged upstream calls made with the API key pair.
        if not self.api_key_configured:
            return None
        raw = f"{self.api_key}:{self.api_secret}".encode()
        return f"Basic {base64.b64encode(raw).decode()}"

    def __repr__(self) -> str:
        return (
            f"ServerIdentity(upstream_base_url={self.upstream_base_url!r}, "
            f"api_key_configured={self.api_key_configured}, "
            f"secret_token_configured={self.secret_token is not None})"
        )


# --- Module Notes -----------------------------------------------------------
# The custom __repr__ keeps credentials out of logs and tracebacks.
