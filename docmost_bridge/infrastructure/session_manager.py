"""Session Manager — cookie-authenticated session lifecycle for the remote Docmost service.

Invariants:
    - login() is serialized by a single asyncio.Lock — at most one exchange in flight
    - Non-forced login within the debounce window is a no-op success (no remote call)
    - A forced login that waited on the lock behind a fresh login skips its own exchange
    - Only 200/204 from /api/auth/login counts as success; anything else → AuthenticationFailure
      immediately, without retry
    - Transport failures of the login exchange are retried with the RetryPolicy backoff;
      exhaustion → TransientFailure
    - Missing authToken cookie after login is a warning, never a failure
    - Redirects are never followed: a 3xx is the caller's session-expiry signal

Design Decisions:
    - Owns the httpx.AsyncClient: the client's cookie jar IS the credential store,
      scoped to the base URL host by http.cookiejar
    - Phase tracked as SessionPhase state machine:
      UNAUTHENTICATED → AUTHENTICATED → REAUTHENTICATING → AUTHENTICATED | UNAUTHENTICATED
    - Clock, transport and backoff sleep injectable for tests (no real network, no real time)
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from http.cookiejar import Cookie
from typing import Any, Awaitable, Callable

import httpx

from docmost_bridge.core.domain_types import RemoteCall, RetryPolicy, SessionPhase
from docmost_bridge.core.errors import (
    AuthenticationFailure, ErrorContext, TransientFailure,
)

logger = logging.getLogger(__name__)

LOGIN_PATH = "/api/auth/login"
SESSION_COOKIE_NAME = "authtoken"
_LOGIN_OK = (200, 204)


@dataclass
class SessionState:
    """Mutable session bookkeeping. Cookies themselves live in the client jar."""
    last_auth_at: float = 0.0
    session_ttl_seconds: float = 6 * 60 * 60
    debounce_seconds: float = 60.0
    phase: SessionPhase = SessionPhase.UNAUTHENTICATED
    login_count: int = 0


def _response_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


def _is_http_only(cookie: Cookie) -> bool:
    return cookie.has_nonstandard_attr("HttpOnly") or cookie.has_nonstandard_attr("httponly")


class SessionManager:
    """Authenticates against Docmost and issues calls on the authenticated client."""

    def __init__(
        self,
        base_url: str,
        email: str,
        password: str,
        session_ttl_seconds: float = 6 * 60 * 60,
        debounce_seconds: float = 60.0,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self._email = email
        self._password = password
        self._clock = clock
        self._policy = policy or RetryPolicy()
        self._sleep = sleep
        self._lock = asyncio.Lock()
        self.state = SessionState(
            session_ttl_seconds=session_ttl_seconds,
            debounce_seconds=debounce_seconds,
        )
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout_seconds,
            follow_redirects=False,
            headers={"Accept": "application/json, */*"},
            transport=transport,
        )

    # ── Session lifecycle ──

    async def ensure_session(self) -> None:
        """Force re-login once the session TTL has elapsed."""
        if self._clock() - self.state.last_auth_at > self.state.session_ttl_seconds:
            if self.state.phase == SessionPhase.AUTHENTICATED:
                self.state.phase = SessionPhase.REAUTHENTICATING
            await self.login(force=True)

    def mark_rejected(self) -> None:
        """Remote bounced a call to login — the next login must be real."""
        self.state.phase = SessionPhase.REAUTHENTICATING

    async def login(self, force: bool = False) -> str | None:
        """Authenticate and return the authToken cookie value (None if absent or debounced)."""
        observed = self.state.last_auth_at
        async with self._lock:
            now = self._clock()
            fresh = now - self.state.last_auth_at < self.state.debounce_seconds
            if not force and fresh:
                return None
            if force and fresh and self.state.last_auth_at != observed:
                logger.info("Concurrent login already refreshed the session; skipping")
                return self.auth_token()
            return await self._authenticate()

    async def _post_credentials(self) -> httpx.Response:
        """POST the credentials, retrying transport failures with the policy backoff."""
        for attempt in range(1, self._policy.max_attempts + 1):
            try:
                return await self.client.post(
                    LOGIN_PATH,
                    json={"email": self._email, "password": self._password},
                    headers={"Content-Type": "application/json"},
                )
            except httpx.TransportError as e:
                retries_left = self._policy.max_attempts - attempt
                logger.warning(
                    f"Login attempt {attempt} failed: {type(e).__name__}: {e}. "
                    f"{retries_left} retries left.",
                    extra={"attempt": attempt, "path": LOGIN_PATH},
                )
                if retries_left <= 0:
                    self.state.phase = SessionPhase.UNAUTHENTICATED
                    raise TransientFailure(
                        f"Login request failed after {attempt} attempts: {e}",
                        context=ErrorContext(
                            operation="login", path=LOGIN_PATH, attempts=attempt,
                        ),
                    ) from e
                await self._sleep(self._policy.delay_ms(attempt) / 1000)
        self.state.phase = SessionPhase.UNAUTHENTICATED
        raise TransientFailure(
            "No login attempts allowed",
            context=ErrorContext(operation="login", path=LOGIN_PATH, attempts=0),
        )

    async def _authenticate(self) -> str | None:
        resp = await self._post_credentials()

        if resp.status_code not in _LOGIN_OK:
            self.state.phase = SessionPhase.UNAUTHENTICATED
            logger.error(
                f"Login rejected: HTTP {resp.status_code}",
                extra={"status_code": resp.status_code, "path": LOGIN_PATH},
            )
            raise AuthenticationFailure(
                resp.status_code,
                _response_body(resp),
                context=ErrorContext(operation="login", path=LOGIN_PATH),
            )

        self.state.last_auth_at = self._clock()
        self.state.phase = SessionPhase.AUTHENTICATED
        self.state.login_count += 1
        logger.info(
            "Logged in. Cookies: %s", ", ".join(self._summaries()),
            extra={"status_code": resp.status_code},
        )
        token = self.auth_token()
        if token is None:
            logger.warning(
                "authToken cookie not found. Backend may rely on a different cookie name.",
            )
        return token

    def auth_token(self) -> str | None:
        for cookie in self.client.cookies.jar:
            if cookie.name.lower() == SESSION_COOKIE_NAME and cookie.value:
                return cookie.value
        return None

    @property
    def session_valid(self) -> bool:
        return (
            self.state.phase == SessionPhase.AUTHENTICATED
            and self._clock() - self.state.last_auth_at <= self.state.session_ttl_seconds
        )

    # ── Transport ──

    async def send(self, call: RemoteCall) -> httpx.Response:
        """Issue a call on the authenticated client; redirects are returned, not followed."""
        kwargs: dict[str, Any] = {"headers": {"Content-Type": "application/json"}}
        if call.method != "GET":
            kwargs["json"] = call.body if call.body is not None else {}
        return await self.client.request(call.method, call.path, **kwargs)

    # ── Diagnostics ──

    def cookies(self) -> list[dict]:
        return [
            {
                "key": c.name,
                "domain": c.domain,
                "path": c.path,
                "httpOnly": _is_http_only(c),
                "secure": bool(c.secure),
                "expires": c.expires,
            }
            for c in self.client.cookies.jar
        ]

    def _summaries(self) -> list[str]:
        return [
            f"{c['key']} (domain={c['domain']}; path={c['path']}; httpOnly={c['httpOnly']})"
            for c in self.cookies()
        ]

    def describe(self) -> dict:
        return {
            "baseURL": self.base_url,
            "lastLoginAt": int(self.state.last_auth_at * 1000),
            "phase": self.state.phase.value,
            "sessionValid": self.session_valid,
            "cookies": self.cookies(),
        }

    async def aclose(self) -> None:
        await self.client.aclose()
