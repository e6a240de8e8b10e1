"""
tests.test_resolver

Ordering and fallback behaviour of the authentication chain.
"""

from __future__ import annotations

import httpx
import pytest

from design_bridge.auth.classifier import classify
from design_bridge.auth.identity import ServerIdentity
from design_bridge.auth.models import (
    AuthMethod,
    Authenticated,
    Principal,
    Rejected,
    RejectionReason,
    Role,
)
from design_bridge.auth.resolver import AuthResolver
from design_bridge.upstream.client import UpstreamClient
from tests.conftest import LONG_TOKEN, UPSTREAM_URL, FakeUpstream


@pytest.fixture
def build(make_settings, upstream: FakeUpstream):
    def _build(**overrides) -> AuthResolver:
        settings = make_settings(**overrides)
        http = httpx.AsyncClient(base_url=UPSTREAM_URL, transport=upstream.transport)
        return AuthResolver(
            identity=ServerIdentity.from_settings(settings),
            upstream=UpstreamClient(settings=settings, http=http),
        )

    return _build


@pytest.mark.asyncio
async def test_local_admin_sentinel_needs_no_network(build, upstream) -> None:
    outcome = await build().resolve(classify("Bearer local-admin-token", "wp=1"))

    assert isinstance(outcome, Authenticated)
    assert outcome.principal.id == 1
    assert outcome.principal.role is Role.ADMINISTRATOR
    assert outcome.principal.method is AuthMethod.LOCAL_ADMIN
    assert upstream.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "authorization",
    [None, "Bearer short-nonce", f"Bearer {LONG_TOKEN}", "Bearer cookie-auth", "Basic abc"],
)
async def test_api_key_bypass_wins_for_any_credential(build, upstream, authorization) -> None:
    resolver = build(api_consumer_key="ck_1", api_consumer_secret="cs_1")
    outcome = await resolver.resolve(classify(authorization, None))

    assert isinstance(outcome, Authenticated)
    assert outcome.principal.method is AuthMethod.API_KEY
    assert outcome.principal.role is Role.ADMINISTRATOR
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_local_admin_takes_priority_over_api_key(build) -> None:
    resolver = build(api_consumer_key="ck_1", api_consumer_secret="cs_1")
    outcome = await resolver.resolve(classify("Bearer local-admin-token", None))
    assert isinstance(outcome, Authenticated)
    assert outcome.principal.method is AuthMethod.LOCAL_ADMIN


@pytest.mark.asyncio
async def test_cookie_sentinel_is_trusted_without_revalidation(build, upstream) -> None:
    outcome = await build().resolve(classify("Bearer cookie-auth", None))

    assert isinstance(outcome, Authenticated)
    assert outcome.principal.method is AuthMethod.COOKIE_SESSION
    assert outcome.principal.role is Role.ADMINISTRATOR
    assert upstream.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("authorization", ["Bearer local-admin-token", "Bearer cookie-auth"])
async def test_sentinels_refused_when_not_trusted(build, upstream, authorization) -> None:
    outcome = await build(trust_sentinel_tokens=False).resolve(classify(authorization, "wp=1"))

    assert isinstance(outcome, Rejected)
    assert outcome.reason is RejectionReason.UPSTREAM_REJECTED
    assert upstream.requests == []
    assert [a.strategy for a in outcome.attempts] == ["untrusted_sentinel"]


@pytest.mark.asyncio
@pytest.mark.parametrize("authorization", ["Bearer local-admin-token", "Bearer cookie-auth"])
async def test_api_key_still_admits_untrusted_sentinels(build, upstream, authorization) -> None:
    resolver = build(
        trust_sentinel_tokens=False, api_consumer_key="ck_1", api_consumer_secret="cs_1"
    )
    outcome = await resolver.resolve(classify(authorization, None))

    assert isinstance(outcome, Authenticated)
    assert outcome.principal.method is AuthMethod.API_KEY
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_bearer_success_skips_cookie_fallback(build, upstream) -> None:
    upstream.json("POST", "/token/validate", {"data": {"user": {"id": 12}}})
    upstream.json("GET", "/session/validate", {"valid": True, "user_id": 99})

    outcome = await build().resolve(classify(f"Bearer {LONG_TOKEN}", "wp=1"))

    assert isinstance(outcome, Authenticated)
    assert outcome.principal.id == 12
    assert outcome.principal.method is AuthMethod.BEARER_TOKEN
    assert outcome.principal.role is Role.UNKNOWN
    assert len(upstream.calls("/token/validate")) == 1
    assert upstream.calls("/session/validate") == []


@pytest.mark.asyncio
async def test_bearer_timeout_falls_back_to_cookie(build, upstream) -> None:
    upstream.timeout("POST", "/token/validate")
    upstream.json("GET", "/session/validate", {"valid": True, "user_id": "5"})

    outcome = await build().resolve(classify(f"Bearer {LONG_TOKEN}", "wp=1"))

    assert isinstance(outcome, Authenticated)
    assert outcome.principal.id == "5"
    assert outcome.principal.method is AuthMethod.COOKIE_SESSION
    assert [a.strategy for a in outcome.attempts] == ["bearer_token"]
    assert outcome.attempts[0].reason is RejectionReason.UPSTREAM_UNREACHABLE
    # The fallback forwards only the cookie, never the bearer token as a nonce.
    (fallback,) = upstream.calls("/session/validate")
    assert "x-wp-nonce" not in fallback.headers


@pytest.mark.asyncio
async def test_bearer_and_cookie_both_fail(build, upstream) -> None:
    upstream.json("POST", "/token/validate", {"unexpected": True})
    upstream.json("GET", "/session/validate", {"valid": False})

    outcome = await build().resolve(classify(f"Bearer {LONG_TOKEN}", "wp=1"))

    assert isinstance(outcome, Rejected)
    assert outcome.reason is RejectionReason.UPSTREAM_REJECTED
    assert [(a.strategy, a.reason) for a in outcome.attempts] == [
        ("bearer_token", RejectionReason.MALFORMED_RESPONSE),
        ("session", RejectionReason.UPSTREAM_REJECTED),
    ]


@pytest.mark.asyncio
async def test_bearer_failure_without_cookie_makes_one_call(build, upstream) -> None:
    upstream.json("POST", "/token/validate", {}, status_code=403)

    outcome = await build().resolve(classify(f"Bearer {LONG_TOKEN}", None))

    assert isinstance(outcome, Rejected)
    assert outcome.reason is RejectionReason.UPSTREAM_REJECTED
    assert len(upstream.requests) == 1


@pytest.mark.asyncio
async def test_short_token_is_validated_as_nonce(build, upstream) -> None:
    upstream.json("GET", "/session/validate", {"valid": True, "user_id": 8})

    outcome = await build().resolve(classify("Bearer abc123nonce", "wp=1"))

    assert isinstance(outcome, Authenticated)
    assert outcome.principal.method is AuthMethod.COOKIE_SESSION
    assert upstream.calls("/session/validate")[0].headers["x-wp-nonce"] == "abc123nonce"


@pytest.mark.asyncio
async def test_short_token_rejected_upstream(build, upstream) -> None:
    upstream.json("GET", "/session/validate", {"valid": False})
    outcome = await build().resolve(classify("Bearer short-nonce-123", None))
    assert isinstance(outcome, Rejected)
    assert outcome.reason is RejectionReason.UPSTREAM_REJECTED


@pytest.mark.asyncio
async def test_cookie_only_request(build, upstream) -> None:
    upstream.json("GET", "/session/validate", {"valid": True, "user_id": 21})

    outcome = await build().resolve(classify(None, "wordpress_logged_in=abc"))

    assert isinstance(outcome, Authenticated)
    assert outcome.principal.id == 21
    assert outcome.principal.method is AuthMethod.COOKIE_SESSION


@pytest.mark.asyncio
async def test_cookie_only_unreachable_is_no_credential(build, upstream) -> None:
    upstream.timeout("GET", "/session/validate")
    outcome = await build().resolve(classify(None, "wordpress_logged_in=abc"))
    assert isinstance(outcome, Rejected)
    assert outcome.reason is RejectionReason.NO_CREDENTIAL
    assert outcome.attempts[0].reason is RejectionReason.UPSTREAM_UNREACHABLE


@pytest.mark.asyncio
async def test_no_credential_and_no_cookie(build, upstream) -> None:
    outcome = await build().resolve(classify(None, None))

    assert isinstance(outcome, Rejected)
    assert outcome.reason is RejectionReason.NO_CREDENTIAL
    assert upstream.requests == []


@pytest.mark.asyncio
async def test_custom_chain_order_is_respected(build) -> None:
    calls: list[str] = []

    async def first(cred, ctx):
        calls.append("first")
        return None

    async def second(cred, ctx):
        calls.append("second")
        return Rejected(reason=RejectionReason.UPSTREAM_REJECTED)

    async def never(cred, ctx):  # pragma: no cover
        calls.append("never")
        return None

    base = build()
    resolver = AuthResolver(
        identity=base.identity,
        upstream=base._upstream,
        chain=[("first", first), ("second", second), ("never", never)],
    )
    outcome = await resolver.resolve(classify(None, None))

    assert isinstance(outcome, Rejected)
    assert calls == ["first", "second"]


@pytest.mark.asyncio
async def test_unencodable_bearer_falls_back_to_cookie(build, upstream) -> None:
    upstream.json("GET", "/session/validate", {"valid": True, "user_id": 31})

    outcome = await build().resolve(classify("Bearer " + "é" * 60, "wp=1"))

    assert isinstance(outcome, Authenticated)
    assert outcome.principal.id == 31
    assert outcome.principal.method is AuthMethod.COOKIE_SESSION
    assert [(a.strategy, a.reason) for a in outcome.attempts] == [
        ("bearer_token", RejectionReason.UPSTREAM_REJECTED),
    ]
    assert upstream.calls("/token/validate") == []


@pytest.mark.asyncio
async def test_faulty_strategy_does_not_stop_the_chain(build) -> None:
    async def broken(cred, ctx):
        raise RuntimeError("boom")

    async def accept(cred, ctx):
        principal = Principal(id=2, role=Role.UNKNOWN, method=AuthMethod.COOKIE_SESSION)
        return Authenticated(principal=principal)

    base = build()
    resolver = AuthResolver(
        identity=base.identity,
        upstream=base._upstream,
        chain=[("broken", broken), ("accept", accept)],
    )
    outcome = await resolver.resolve(classify(None, "wp=1"))

    assert isinstance(outcome, Authenticated)
    assert outcome.principal.id == 2
    assert [(a.strategy, a.reason) for a in outcome.attempts] == [
        ("broken", RejectionReason.MALFORMED_RESPONSE),
    ]


@pytest.mark.asyncio
async def test_every_strategy_faulting_is_rejected(build) -> None:
    async def broken(cred, ctx):
        raise RuntimeError("boom")

    base = build()
    resolver = AuthResolver(
        identity=base.identity, upstream=base._upstream, chain=[("broken", broken)]
    )

    assert (await resolver.resolve(classify(None, None))).reason is RejectionReason.NO_CREDENTIAL
    outcome = await resolver.resolve(classify("Bearer short-nonce", None))
    assert isinstance(outcome, Rejected)
    assert outcome.reason is RejectionReason.UPSTREAM_REJECTED
