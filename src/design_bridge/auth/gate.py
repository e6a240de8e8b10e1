"""
design_bridge.auth.gate

Admin gate: the FastAPI-facing side of authentication.

Responsibilities:
- Classify the request's credential and run the resolver.
- Attach the resulting `Principal` to `request.state`.
- Turn every rejection (and any unexpected fault) into a uniform 401.
- Log which strategies ran and why they failed, without credential values.
"""

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from starlette.status import HTTP_401_UNAUTHORIZED

from design_bridge.auth.classifier import classify
from design_bridge.auth.models import Authenticated, Credential, Principal, RejectionReason
from design_bridge.auth.resolver import AuthResolver
from design_bridge.observability.logging import get_logger

log = get_logger(__name__)

_MESSAGES: dict[RejectionReason, str] = {
    RejectionReason.NO_CREDENTIAL: "Unauthorized - Please login",
    RejectionReason.UPSTREAM_UNREACHABLE: "Authentication service unavailable",
    RejectionReason.UPSTREAM_REJECTED: "Invalid token or authentication failed",
    RejectionReason.MALFORMED_RESPONSE: "Authentication service returned an invalid response",
}


class HttpRejection(Exception):
    """
    Raised by the gate; rendered as `401 {"error": message}` by `rejection_handler`.
    """

    def __init__(self, message: str, *, reason: RejectionReason | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason


async def rejection_handler(_: Request, exc: HttpRejection) -> JSONResponse:
    return JSONResponse(status_code=HTTP_401_UNAUTHORIZED, content={"error": exc.message})


def credential_from_request(request: Request, *, short_token_threshold: int) -> Credential:
    return classify(
        request.headers.get("authorization"),
        request.headers.get("cookie"),
        short_token_threshold=short_token_threshold,
    )


class AdminGate:
    def __init__(self, *, resolver: AuthResolver) -> None:
        self._resolver = resolver

    async def authorize(self, request: Request) -> Principal:
        threshold = self._resolver.identity.short_token_threshold
        credential = credential_from_request(request, short_token_threshold=threshold)
        try:
            outcome = await self._resolver.resolve(credential)
        except Exception as e:
            log.exception("auth.error", credential_kind=credential.kind.value)
            raise HttpRejection("Authentication error") from e

        attempts = [f"{a.strategy}:{a.reason.value}" for a in outcome.attempts]
        if isinstance(outcome, Authenticated):
            principal = outcome.principal
            log.info(
                "auth.authenticated",
                credential_kind=credential.kind.value,
                method=principal.method.value,
                user_id=str(principal.id),
                failed_attempts=attempts,
            )
            request.state.principal = principal
            return principal

        log.warning(
            "auth.rejected",
            credential_kind=credential.kind.value,
            has_cookie=credential.cookie_header is not None,
            reason=outcome.reason.value,
            failed_attempts=attempts,
        )
        raise HttpRejection(_MESSAGES[outcome.reason], reason=outcome.reason)


def gate_from_app(request: Request) -> AdminGate:
    # The gate is created on app startup in `design_bridge.api.app.create_app`.
    return request.app.state.admin_gate  # type: ignore[attr-defined]


async def require_admin(request: Request, gate: AdminGate = Depends(gate_from_app)) -> Principal:
    return await gate.authorize(request)


# --- Module Notes -----------------------------------------------------------
# Unlike `HTTPException`, the rejection body uses the `error` key the design
# client already expects. 401 is the only status this gate ever produces.
