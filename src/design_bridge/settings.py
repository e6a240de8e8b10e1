"""
design_bridge.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets (admin password, API secret, shared token) from repr/logging.
- Reject inconsistent configuration at startup.
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration. Every field maps to `DESIGN_BRIDGE_<NAME>`.
    """

    model_config = SettingsConfigDict(env_prefix="DESIGN_BRIDGE_", case_sensitive=False)

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "design-bridge"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 5000
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )

    # Upstream platform
    upstream_base_url: str = "http://localhost:8080"
    upstream_secret_token: str | None = Field(default=None, repr=False)
    upstream_secret_param: str = "sgs-token"
    upstream_index_path: str = "/"
    session_validate_path: str = "/session/validate"
    session_login_path: str = "/session/login"
    token_validate_path: str = "/token/validate"
    token_issue_path: str = "/token"

    # Server-held API key pair; both or neither.
    api_consumer_key: str | None = Field(default=None, repr=False)
    api_consumer_secret: str | None = Field(default=None, repr=False)

    # Local admin login
    local_admin_user: str = "admin"
    local_admin_password: str = Field(default="admin123", repr=False)

    # Auth
    trust_sentinel_tokens: bool = True
    short_token_threshold: int = Field(default=50, ge=1)

    # Timeouts (seconds). Authorization checks must stay well below bulk calls.
    auth_connect_timeout: float = 2.0
    auth_read_timeout: float = 3.0
    bulk_timeout: float = 10.0

    @model_validator(mode="after")
    def _check_consistency(self) -> Settings:
        if bool(self.api_consumer_key) != bool(self.api_consumer_secret):
            raise ValueError("api_consumer_key and api_consumer_secret must be set together")
        timeouts = (self.auth_connect_timeout, self.auth_read_timeout, self.bulk_timeout)
        if min(timeouts) <= 0:
            raise ValueError("timeouts must be positive")
        if max(self.auth_connect_timeout, self.auth_read_timeout) >= self.bulk_timeout:
            raise ValueError("auth timeouts must be shorter than bulk_timeout")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    # Cache avoids re-parsing env vars for each request dependency.
    return Settings()


# --- Module Notes -----------------------------------------------------------
# Settings are parsed once; anything request handling needs at runtime is copied
# into the frozen `auth.identity.ServerIdentity` at startup.
