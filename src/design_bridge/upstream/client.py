"""
design_bridge.upstream.client

HTTP client boundary used to talk to the upstream content/commerce platform.

Responsibilities:
- Validate cookie/nonce sessions and bearer tokens against the platform.
- Log users in (token issue or cookie-session login).
- Stamp the shared-secret query parameter on every call except token endpoints.
- Enforce short timeouts for authorization calls and convert every failure
  into an `UpstreamError`.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

import httpx
from pydantic import BaseModel, Field, StrictBool, StrictStr, TypeAdapter, ValidationError

from design_bridge.settings import Settings
from design_bridge.upstream.errors import MalformedResponse, UpstreamRejected, UpstreamUnreachable

# The platform reports ids as positive integers or non-empty strings.
UserId = (
    Annotated[int, Field(strict=True, gt=0)] | Annotated[str, Field(strict=True, min_length=1)]
)


class SessionValidation(BaseModel):
    valid: StrictBool
    user_id: UserId | None = None


class SessionLogin(BaseModel):
    success: StrictBool
    nonce: StrictStr | None = None
    user_id: UserId | None = None
    user_display_name: str | None = None
    user_email: str | None = None


class _UserRef(BaseModel):
    id: UserId


class _UserData(BaseModel):
    user: _UserRef


class _StatusData(BaseModel):
    status: Literal[200]
    id: UserId


class TokenUserShape(BaseModel):
    # {"data": {"user": {"id": ...}}}
    data: _UserData

    @property
    def user_id(self) -> int | str:
        return self.data.user.id


class TokenStatusShape(BaseModel):
    # {"data": {"status": 200, "id": ...}}
    data: _StatusData

    @property
    def user_id(self) -> int | str:
        return self.data.id


_token_validation = TypeAdapter(TokenUserShape | TokenStatusShape)


class UpstreamClient:
    """
    Thin, typed wrapper over a shared `httpx.AsyncClient` whose base_url is the
    upstream platform. No retries: one call, one answer.
    """

    def __init__(self, *, settings: Settings, http: httpx.AsyncClient) -> None:
        self._settings = settings
        self._http = http
        self._auth_timeout = httpx.Timeout(
            settings.auth_read_timeout, connect=settings.auth_connect_timeout
        )
        self._bulk_timeout = httpx.Timeout(settings.bulk_timeout)

    def _stamp(self, stamp: bool) -> dict[str, str] | None:
        # Token endpoints reject unknown query parameters, so callers opt out.
        token = self._settings.upstream_secret_token
        if not stamp or not token:
            return None
        return {self._settings.upstream_secret_param: token}

    async def _send(
        self,
        method: str,
        url: str,
        *,
        stamp: bool,
        timeout: httpx.Timeout,
        headers: dict[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        try:
            r = await self._http.request(
                method,
                url,
                params=self._stamp(stamp),
                headers=headers,
                json=json,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise UpstreamUnreachable(f"{method} {url}: timed out") from e
        except httpx.HTTPError as e:
            raise UpstreamUnreachable(f"{method} {url}: {type(e).__name__}") from e
        except (httpx.InvalidURL, UnicodeError) as e:
            # Header values or URLs that cannot be put on the wire; nothing was sent.
            raise UpstreamRejected(f"{method} {url}: request not encodable") from e

        if not r.is_success:
            raise UpstreamRejected(f"{method} {url}: HTTP {r.status_code}")
        try:
            return r.json()
        except ValueError as e:
            raise MalformedResponse(f"{method} {url}: body is not JSON") from e

    async def validate_session(
        self, *, cookie_header: str | None, nonce: str | None = None
    ) -> int | str:
        """
        Cookie/nonce validation. Returns the upstream user id.
        """

        headers = {"Accept": "application/json"}
        if cookie_header:
            headers["Cookie"] = cookie_header
        if nonce:
            headers["X-WP-Nonce"] = nonce
        path = self._settings.session_validate_path
        body = await self._send(
            "GET", path, stamp=True, timeout=self._auth_timeout, headers=headers
        )
        try:
            parsed = SessionValidation.model_validate(body)
        except ValidationError as e:
            raise MalformedResponse(f"GET {path}: unexpected body shape") from e
        if not parsed.valid or parsed.user_id is None:
            raise UpstreamRejected(f"GET {path}: session not valid")
        return parsed.user_id

    async def validate_token(self, *, token: str) -> int | str:
        """
        Bearer token validation. Returns the upstream user id.
        """

        path = self._settings.token_validate_path
        body = await self._send(
            "POST",
            path,
            stamp=False,
            timeout=self._auth_timeout,
            headers={"Authorization": f"Bearer {token}"},
            json={},
        )
        try:
            parsed = _token_validation.validate_python(body)
        except ValidationError as e:
            raise MalformedResponse(f"POST {path}: unexpected body shape") from e
        return parsed.user_id

    async def issue_token(self, *, username: str, password: str) -> dict[str, Any]:
        path = self._settings.token_issue_path
        body = await self._send(
            "POST",
            path,
            stamp=False,
            timeout=self._auth_timeout,
            json={"username": username, "password": password},
        )
        if not isinstance(body, dict) or not isinstance(body.get("token"), str):
            raise MalformedResponse(f"POST {path}: no token in body")
        return body

    async def session_login(self, *, username: str, password: str) -> SessionLogin:
        path = self._settings.session_login_path
        body = await self._send(
            "POST",
            path,
            stamp=True,
            timeout=self._auth_timeout,
            json={"username": username, "password": password},
        )
        try:
            parsed = SessionLogin.model_validate(body)
        except ValidationError as e:
            raise MalformedResponse(f"POST {path}: unexpected body shape") from e
        if not parsed.success:
            raise UpstreamRejected(f"POST {path}: login refused")
        return parsed

    def is_configured_upstream(self, base_url: str) -> bool:
        configured = httpx.URL(self._settings.upstream_base_url.rstrip("/"))
        try:
            candidate = httpx.URL(base_url.rstrip("/"))
        except httpx.InvalidURL:
            return False
        return candidate == configured

    async def check_reachable(
        self,
        path: str,
        *,
        base_url: str | None = None,
        headers: dict[str, str] | None = None,
    ) -> bool:
        """
        Connectivity check for admin diagnostics; uses the bulk timeout.

        A `base_url` other than the configured upstream is a foreign host: it
        never receives the shared-secret stamp or caller-supplied headers.
        """

        foreign = base_url is not None and not self.is_configured_upstream(base_url)
        url = f"{base_url.rstrip('/')}{path}" if base_url else path
        try:
            await self._send(
                "GET",
                url,
                stamp=not foreign,
                timeout=self._bulk_timeout,
                headers=None if foreign else headers,
            )
        except (UpstreamRejected, UpstreamUnreachable):
            return False
        except MalformedResponse:
            # Reachable and answering; body shape is irrelevant here.
            return True
        return True


# --- Module Notes -----------------------------------------------------------
# The shared AsyncClient is created in `api.app.create_app` and closed on shutdown.
# A cancelled request task cancels the in-flight httpx call and returns its
# connection to the pool.
