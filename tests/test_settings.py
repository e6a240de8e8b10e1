from __future__ import annotations

import pytest
from pydantic import ValidationError

from design_bridge.auth.identity import ServerIdentity
from design_bridge.settings import Settings


def test_env_prefix(monkeypatch) -> None:
    monkeypatch.setenv("DESIGN_BRIDGE_UPSTREAM_BASE_URL", "https://shop.example/wp-json/")
    monkeypatch.setenv("DESIGN_BRIDGE_UPSTREAM_SECRET_TOKEN", "tok")
    identity = ServerIdentity.from_settings(Settings())
    assert identity.upstream_base_url == "https://shop.example/wp-json"
    assert identity.secret_token == "tok"


def test_half_configured_api_key_is_fatal() -> None:
    with pytest.raises(ValidationError):
        Settings(api_consumer_key="ck_only")


def test_auth_timeouts_must_be_shorter_than_bulk() -> None:
    with pytest.raises(ValidationError):
        Settings(auth_read_timeout=10, bulk_timeout=10)
    with pytest.raises(ValidationError):
        Settings(auth_connect_timeout=0)


def test_secrets_hidden_from_repr() -> None:
    settings = Settings(
        api_consumer_key="ck_live",
        api_consumer_secret="cs_live",
        upstream_secret_token="tok-123",
        local_admin_password="pw-123",
    )
    identity = ServerIdentity.from_settings(settings)
    for text in (repr(settings), repr(identity)):
        for secret in ("ck_live", "cs_live", "tok-123", "pw-123"):
            assert secret not in text
    assert identity.api_key_configured
    assert identity.api_basic_auth() == "Basic Y2tfbGl2ZTpjc19saXZl"
