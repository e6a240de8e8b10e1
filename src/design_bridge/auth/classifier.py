"""
design_bridge.auth.classifier

Inbound credential classification.

Responsibilities:
- Turn raw `Authorization` / `Cookie` header values into a typed `Credential`.
"""

from __future__ import annotations

from design_bridge.auth.models import (
    COOKIE_AUTH_SENTINEL,
    LOCAL_ADMIN_SENTINEL,
    Credential,
    CredentialKind,
    SentinelTag,
)

BEARER_PREFIX = "Bearer "
SHORT_TOKEN_THRESHOLD = 50


def classify(
    authorization: str | None,
    cookie: str | None,
    *,
    short_token_threshold: int = SHORT_TOKEN_THRESHOLD,
) -> Credential:
    """
    Total function: every header combination maps to exactly one credential kind.
    """

    cookie_header = cookie or None
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return Credential(kind=CredentialKind.NONE, cookie_header=cookie_header)

    value = authorization[len(BEARER_PREFIX) :]
    if value == LOCAL_ADMIN_SENTINEL:
        return Credential(
            kind=CredentialKind.BEARER_SENTINEL,
            raw_value=value,
            cookie_header=cookie_header,
            sentinel=SentinelTag.LOCAL_ADMIN,
        )
    if value == COOKIE_AUTH_SENTINEL:
        return Credential(
            kind=CredentialKind.BEARER_SENTINEL,
            raw_value=value,
            cookie_header=cookie_header,
            sentinel=SentinelTag.COOKIE_AUTH,
        )
    if len(value) < short_token_threshold:
        return Credential(kind=CredentialKind.BEARER_SHORT, raw_value=value, cookie_header=cookie_header)
    return Credential(kind=CredentialKind.BEARER_LONG, raw_value=value, cookie_header=cookie_header)


# --- Module Notes -----------------------------------------------------------
# An empty value after the prefix ("Bearer ") is a short token, not "none"; the
# upstream nonce check then rejects it.
