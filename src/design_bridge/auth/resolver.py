"""
design_bridge.auth.resolver

Request authentication resolver.

Responsibilities:
- Evaluate the strategy chain in order for one classified credential.
- Guarantee a result (`Authenticated` or `Rejected`) for every input.
"""

from __future__ import annotations

from collections.abc import Sequence

from design_bridge.auth.identity import ServerIdentity
from design_bridge.auth.models import (
    AuthOutcome,
    Authenticated,
    Credential,
    CredentialKind,
    Rejected,
    RejectionReason,
)
from design_bridge.auth.strategies import DEFAULT_CHAIN, ChainContext, Strategy
from design_bridge.observability.logging import get_logger
from design_bridge.upstream.client import UpstreamClient

log = get_logger(__name__)


class AuthResolver:
    """
    First strategy to return an outcome wins; later strategies never run.
    """

    def __init__(
        self,
        *,
        identity: ServerIdentity,
        upstream: UpstreamClient,
        chain: Sequence[tuple[str, Strategy]] = DEFAULT_CHAIN,
    ) -> None:
        self._identity = identity
        self._upstream = upstream
        self._chain = tuple(chain)

    @property
    def identity(self) -> ServerIdentity:
        return self._identity

    async def resolve(self, credential: Credential) -> AuthOutcome:
        ctx = ChainContext(identity=self._identity, upstream=self._upstream)
        for name, strategy in self._chain:
            try:
                outcome = await strategy(credential, ctx)
            except Exception:
                # A faulty strategy counts as a failed attempt; later ones still run.
                log.exception(
                    "auth.strategy_error", strategy=name, credential_kind=credential.kind.value
                )
                ctx.failed(name, RejectionReason.MALFORMED_RESPONSE)
                continue
            if outcome is None:
                continue
            attempts = tuple(ctx.attempts)
            if isinstance(outcome, Authenticated):
                return Authenticated(principal=outcome.principal, attempts=attempts)
            return Rejected(reason=outcome.reason, attempts=attempts)

        # Reached when every strategy passed or faulted.
        reason = (
            RejectionReason.NO_CREDENTIAL
            if credential.kind is CredentialKind.NONE
            else RejectionReason.UPSTREAM_REJECTED
        )
        return Rejected(reason=reason, attempts=tuple(ctx.attempts))


# --- Module Notes -----------------------------------------------------------
# Strategies catch `UpstreamError` themselves; anything else is logged here.
# At most two of them make network calls for a single credential
# (bearer_token, then session).
