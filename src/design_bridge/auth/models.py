"""
design_bridge.auth.models

Auth domain models.

Responsibilities:
- Describe the classified inbound credential (`Credential`).
- Define the authenticated identity type (`Principal`) injected into endpoints.
- Define the resolver's result type (`Authenticated` | `Rejected`).
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

LOCAL_ADMIN_SENTINEL = "local-admin-token"
COOKIE_AUTH_SENTINEL = "cookie-auth"


class CredentialKind(str, enum.Enum):
    NONE = "none"
    BEARER_SHORT = "bearer-short"
    BEARER_LONG = "bearer-long"
    BEARER_SENTINEL = "bearer-sentinel"


class SentinelTag(str, enum.Enum):
    LOCAL_ADMIN = "local-admin"
    COOKIE_AUTH = "cookie-auth"


class Role(str, enum.Enum):
    ADMINISTRATOR = "administrator"
    SUBSCRIBER = "subscriber"
    UNKNOWN = "unknown"


class AuthMethod(str, enum.Enum):
    LOCAL_ADMIN = "local-admin"
    API_KEY = "api-key"
    COOKIE_SESSION = "cookie-session"
    BEARER_TOKEN = "bearer-token"


class RejectionReason(str, enum.Enum):
    NO_CREDENTIAL = "no-credential"
    UPSTREAM_UNREACHABLE = "upstream-unreachable"
    UPSTREAM_REJECTED = "upstream-rejected"
    MALFORMED_RESPONSE = "malformed-response"


@dataclass(frozen=True, slots=True)
class Credential:
    """
    Raw credential material from one request. Never persisted.
    """

    kind: CredentialKind
    raw_value: str = ""
    cookie_header: str | None = None
    sentinel: SentinelTag | None = None

    def __repr__(self) -> str:
        # Raw values must not leak into logs or tracebacks.
        sentinel = self.sentinel.value if self.sentinel else None
        return (
            f"Credential(kind={self.kind.value!r}, sentinel={sentinel!r}, "
            f"has_cookie={self.cookie_header is not None})"
        )


@dataclass(frozen=True, slots=True)
class Principal:
    """
    Authenticated caller identity.
    """

    id: str | int
    role: Role
    method: AuthMethod

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMINISTRATOR


@dataclass(frozen=True, slots=True)
class Attempt:
    # One strategy that ran and failed; kept for diagnostics only.
    strategy: str
    reason: RejectionReason


@dataclass(frozen=True, slots=True)
class Authenticated:
    principal: Principal
    attempts: tuple[Attempt, ...] = field(default=())


@dataclass(frozen=True, slots=True)
class Rejected:
    reason: RejectionReason
    attempts: tuple[Attempt, ...] = field(default=())


AuthOutcome = Authenticated | Rejected


# --- Module Notes -----------------------------------------------------------
# Principal ids are whatever the upstream platform reports (string or integer);
# local shortcuts use id 1, the platform's primary administrator.
