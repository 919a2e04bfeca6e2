"""Tests for domain value types and the error hierarchy."""

import dataclasses

import pytest

from docmost_bridge.core.domain_types import RemoteCall, RetryPolicy
from docmost_bridge.core.errors import (
    AuthenticationFailure,
    BridgeError,
    NonRetryableClientError,
    PartialAggregationFailure,
    SessionExpired,
    TransientFailure,
)


def test_retry_delays_follow_factor():
    policy = RetryPolicy(max_attempts=3, min_delay_ms=100, max_delay_ms=30_000, factor=2)
    assert [policy.delay_ms(n) for n in (1, 2, 3)] == [100, 200, 400]


def test_retry_delays_are_capped_and_non_decreasing():
    policy = RetryPolicy(max_attempts=10, min_delay_ms=1000, max_delay_ms=5000, factor=3)
    delays = [policy.delay_ms(n) for n in range(1, 10)]
    assert delays == sorted(delays)
    assert max(delays) == 5000


def test_remote_call_is_immutable():
    call = RemoteCall.post("/api/spaces")
    assert call.body == {}
    with pytest.raises(dataclasses.FrozenInstanceError):
        call.path = "/other"


def test_remote_get_has_no_body():
    call = RemoteCall.get("/api/files/a/b.svg", raw=True)
    assert call.method == "GET"
    assert call.body is None
    assert call.raw is True


def test_authentication_failure_carries_status_and_body():
    err = AuthenticationFailure(401, {"message": "bad"})
    assert isinstance(err, BridgeError)
    assert err.status_code == 401
    assert err.remote_body == {"message": "bad"}
    assert err.http_status == 502


def test_client_error_echoes_remote_4xx():
    err = NonRetryableClientError(404, {"message": "Page not found"})
    assert err.http_status == 404
    resp = err.to_response()
    assert resp["error"]["code"] == "REMOTE_CLIENT_ERROR"
    assert resp["error"]["context"]["status_code"] == 404
    assert resp["error"]["detail"] == {"message": "Page not found"}


def test_transient_failure_maps_to_503():
    err = TransientFailure("down", 503, "Service Unavailable")
    assert err.http_status == 503
    assert err.to_response()["error"]["category"] == "external_api"


def test_session_expired_records_path():
    err = SessionExpired("/api/spaces", 302)
    assert err.context.path == "/api/spaces"
    assert err.status_code == 302


def test_partial_aggregation_failure_keeps_cause():
    cause = TransientFailure("boom")
    err = PartialAggregationFailure("s1", "Docs", cause)
    assert err.cause is cause
    assert "Docs" in err.message
