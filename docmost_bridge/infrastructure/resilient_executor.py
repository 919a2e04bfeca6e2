"""Resilient Executor — wraps every remote call with session checks, retry, backoff and error mapping.

Invariants:
    - ensure_session() runs before the first attempt of every call
    - Redirect (301/302/303/307/308): exactly one forced re-login and exactly one retried
      call, outside the backoff loop and regardless of max_attempts
    - Transient errors (5xx, connection, timeout): up to max_attempts total attempts,
      sleeping min(max_delay, min_delay * factor^(attempt-1)) between them
    - Client errors (4xx): immediate NonRetryableClientError, no retry budget consumed
    - AuthenticationFailure from a re-login propagates unchanged

Design Decisions:
    - Wrapper over SessionManager.send: isolates retry logic from the gateway
    - No jitter: the delay sequence is exactly the policy sequence
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

import httpx

from docmost_bridge.core.domain_types import RemoteCall, RetryPolicy
from docmost_bridge.core.errors import (
    ErrorContext,
    NonRetryableClientError,
    SessionExpired,
    TransientFailure,
)
from docmost_bridge.infrastructure.session_manager import SessionManager

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


def _body(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class ResilientExecutor:
    """Executes RemoteCall descriptions against the authenticated session."""

    def __init__(
        self,
        session: SessionManager,
        policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.session = session
        self.policy = policy or RetryPolicy()
        self._sleep = sleep

    async def execute(self, call: RemoteCall) -> Any:
        """Run the call to completion or exhaustion of the retry budget.

        Returns parsed JSON (or text) for regular calls, the raw
        httpx.Response for raw calls.
        """
        await self.session.ensure_session()

        for attempt in range(1, self.policy.max_attempts + 1):
            try:
                resp = await self.session.send(call)
            except httpx.TransportError as e:
                await self._handle_transient_error(
                    call, attempt, f"{type(e).__name__}: {e}", None, None,
                )
                continue

            status = resp.status_code
            if status in REDIRECT_STATUSES:
                return await self._reauthenticate_and_retry(call, status)
            if status >= 500:
                await self._handle_transient_error(
                    call, attempt, f"HTTP {status}", status, _body(resp),
                )
                continue
            if status >= 400:
                raise self._client_error(call, resp, attempt)
            return self._result(call, resp, attempt)

        # max_attempts < 1 — nothing was attempted
        raise TransientFailure(
            f"No attempts allowed for {call.method} {call.path}",
            context=ErrorContext(operation="execute", path=call.path, attempts=0),
        )

    async def _reauthenticate_and_retry(self, call: RemoteCall, status: int) -> Any:
        """Session-expiry path: one forced re-login, one retry, never more."""
        logger.warning(
            f"Redirect on {call.path}; session rejected, forcing re-login",
            extra={"status_code": status, "path": call.path},
        )
        self.session.mark_rejected()
        await self.session.login(force=True)

        try:
            resp = await self.session.send(call)
        except httpx.TransportError as e:
            raise TransientFailure(
                f"Retry after re-login failed: {e}",
                context=ErrorContext(operation="execute", path=call.path, attempts=1),
            ) from e

        if resp.status_code in REDIRECT_STATUSES:
            raise SessionExpired(
                call.path, resp.status_code,
                context=ErrorContext(operation="execute", attempts=1),
            )
        if resp.status_code >= 500:
            raise TransientFailure(
                f"Retry after re-login failed: HTTP {resp.status_code}",
                resp.status_code, _body(resp),
                context=ErrorContext(operation="execute", path=call.path, attempts=1),
            )
        if resp.status_code >= 400:
            raise self._client_error(call, resp, 1)
        return self._result(call, resp, 1)

    async def _handle_transient_error(
        self,
        call: RemoteCall,
        attempt: int,
        reason: str,
        status: int | None,
        body: Any,
    ) -> None:
        """Sleep before the next attempt, or raise once the budget is spent."""
        retries_left = self.policy.max_attempts - attempt
        logger.warning(
            f"API call attempt {attempt} failed: {reason}. {retries_left} retries left.",
            extra={"attempt": attempt, "status_code": status, "path": call.path},
        )
        if retries_left <= 0:
            logger.error(f"All API call attempts failed for {call.path}")
            raise TransientFailure(
                f"{call.method} {call.path} failed after {attempt} attempts: {reason}",
                status, body,
                context=ErrorContext(
                    operation="execute", path=call.path, attempts=attempt,
                ),
            )
        await self._sleep(self.policy.delay_ms(attempt) / 1000)

    def _client_error(
        self, call: RemoteCall, resp: httpx.Response, attempt: int,
    ) -> NonRetryableClientError:
        return NonRetryableClientError(
            resp.status_code, _body(resp),
            context=ErrorContext(operation="execute", path=call.path, attempts=attempt),
        )

    def _result(self, call: RemoteCall, resp: httpx.Response, attempt: int) -> Any:
        if attempt > 1:
            logger.info(
                f"API call succeeded on attempt {attempt}",
                extra={"attempt": attempt, "path": call.path},
            )
        if call.raw:
            return resp
        return _body(resp)
