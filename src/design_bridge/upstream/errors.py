"""
design_bridge.upstream.errors

Failure taxonomy for calls to the upstream platform.

Responsibilities:
- Distinguish "could not reach", "said no" and "answered nonsense".
- Map each failure to the resolver's `RejectionReason`.
"""

from __future__ import annotations

from design_bridge.auth.models import RejectionReason


class UpstreamError(Exception):
    reason: RejectionReason = RejectionReason.UPSTREAM_REJECTED


class UpstreamUnreachable(UpstreamError):
    """Connection failure or timeout."""

    reason = RejectionReason.UPSTREAM_UNREACHABLE


class UpstreamRejected(UpstreamError):
    """Non-2xx status or an explicit negative answer."""

    reason = RejectionReason.UPSTREAM_REJECTED


class MalformedResponse(UpstreamError):
    """2xx answer whose body matches none of the known shapes."""

    reason = RejectionReason.MALFORMED_RESPONSE


# --- Module Notes -----------------------------------------------------------
# Messages carry status codes and endpoint names only, never credential values.
