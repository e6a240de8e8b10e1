"""
design_bridge.auth.strategies

The ordered authentication chain.

Responsibilities:
- Implement each way a request can be authenticated as one small async function.
- Define the default order in which the resolver evaluates them.

A strategy returns:
- `Authenticated` when it accepts the request (chain stops),
- `Rejected` when it owns the credential and refuses it (chain stops),
- `None` when it does not apply or wants the next strategy to try (chain continues).
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from design_bridge.auth.identity import ServerIdentity
from design_bridge.auth.models import (
    Attempt,
    AuthMethod,
    Authenticated,
    AuthOutcome,
    Credential,
    CredentialKind,
    Principal,
    Rejected,
    RejectionReason,
    Role,
    SentinelTag,
)
from design_bridge.upstream.client import UpstreamClient
from design_bridge.upstream.errors import UpstreamError

ADMIN_USER_ID = 1


@dataclass(slots=True)
class ChainContext:
    """
    Per-resolution state handed to every strategy.
    """

    identity: ServerIdentity
    upstream: UpstreamClient
    attempts: list[Attempt] = field(default_factory=list)

    def failed(self, strategy: str, reason: RejectionReason) -> None:
        self.attempts.append(Attempt(strategy=strategy, reason=reason))


Strategy = Callable[[Credential, ChainContext], Awaitable[AuthOutcome | None]]


def _admin(method: AuthMethod) -> Principal:
    return Principal(id=ADMIN_USER_ID, role=Role.ADMINISTRATOR, method=method)


async def local_admin(cred: Credential, ctx: ChainContext) -> AuthOutcome | None:
    if cred.sentinel is not SentinelTag.LOCAL_ADMIN or not ctx.identity.trust_sentinels:
        return None
    return Authenticated(principal=_admin(AuthMethod.LOCAL_ADMIN))


async def api_key(cred: Credential, ctx: ChainContext) -> AuthOutcome | None:
    # A configured API key pair trusts this deployment, not the caller.
    if not ctx.identity.api_key_configured:
        return None
    return Authenticated(principal=_admin(AuthMethod.API_KEY))


async def untrusted_sentinel(cred: Credential, ctx: ChainContext) -> AuthOutcome | None:
    # Hardened mode: a sentinel that got past the API-key check is refused outright.
    if cred.sentinel is None or ctx.identity.trust_sentinels:
        return None
    ctx.failed("untrusted_sentinel", RejectionReason.UPSTREAM_REJECTED)
    return Rejected(reason=RejectionReason.UPSTREAM_REJECTED)


async def cookie_sentinel(cred: Credential, ctx: ChainContext) -> AuthOutcome | None:
    if cred.sentinel is not SentinelTag.COOKIE_AUTH:
        return None
    return Authenticated(principal=_admin(AuthMethod.COOKIE_SESSION))


async def bearer_token(cred: Credential, ctx: ChainContext) -> AuthOutcome | None:
    if cred.kind is not CredentialKind.BEARER_LONG:
        return None
    try:
        user_id = await ctx.upstream.validate_token(token=cred.raw_value)
    except UpstreamError as e:
        ctx.failed("bearer_token", e.reason)
        return None
    return Authenticated(
        principal=Principal(id=user_id, role=Role.UNKNOWN, method=AuthMethod.BEARER_TOKEN)
    )


async def session(cred: Credential, ctx: ChainContext) -> AuthOutcome | None:
    """
    Cookie/nonce validation: primary path for `none` and `bearer-short`,
    fallback for `bearer-long`. Always final.
    """

    if cred.kind is CredentialKind.BEARER_SENTINEL:
        return None

    nonce = cred.raw_value if cred.kind is CredentialKind.BEARER_SHORT else None
    final = (
        RejectionReason.NO_CREDENTIAL
        if cred.kind is CredentialKind.NONE
        else RejectionReason.UPSTREAM_REJECTED
    )
    if nonce is None and not cred.cookie_header:
        # Nothing to forward; skip the round trip.
        ctx.failed("session", RejectionReason.NO_CREDENTIAL)
        return Rejected(reason=final)

    try:
        user_id = await ctx.upstream.validate_session(cookie_header=cred.cookie_header, nonce=nonce)
    except UpstreamError as e:
        ctx.failed("session", e.reason)
        return Rejected(reason=final)
    return Authenticated(
        principal=Principal(id=user_id, role=Role.UNKNOWN, method=AuthMethod.COOKIE_SESSION)
    )


DEFAULT_CHAIN: tuple[tuple[str, Strategy], ...] = (
    ("local_admin", local_admin),
    ("api_key", api_key),
    ("untrusted_sentinel", untrusted_sentinel),
    ("cookie_sentinel", cookie_sentinel),
    ("bearer_token", bearer_token),
    ("session", session),
)


# --- Module Notes -----------------------------------------------------------
# The cookie-auth sentinel is trusted because it is only handed out after a
# successful upstream login whose cookies live on the platform's domain. It is
# still a guessable constant; `trust_sentinel_tokens=False` turns it off.
