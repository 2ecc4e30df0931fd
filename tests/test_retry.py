import httpx
import pytest

from riskline.core.config import ClientConfig
from riskline.core.retry import (
    backoff_strategy,
    call_with_retry,
    exponential_delay,
    is_retryable_error,
    rate_limit_delay,
    retry_after_seconds,
)

REQUEST = httpx.Request("GET", "https://api.test/patients")


def _status_error(status: int, headers: dict | None = None, json=None) -> httpx.HTTPStatusError:
    response = httpx.Response(status, headers=headers, json=json, request=REQUEST)
    return httpx.HTTPStatusError(f"HTTP {status}", request=REQUEST, response=response)


def test_is_retryable_error_classification():
    assert is_retryable_error(httpx.ConnectError("refused", request=REQUEST)) is True
    assert is_retryable_error(_status_error(429)) is True
    assert is_retryable_error(_status_error(500)) is True
    assert is_retryable_error(_status_error(503)) is True
    assert is_retryable_error(_status_error(400)) is False
    assert is_retryable_error(_status_error(404)) is False


def test_rate_limit_delay_uses_retry_after_header():
    config = ClientConfig()
    error = _status_error(429, headers={"Retry-After": "5"})
    assert rate_limit_delay(error, 1, config) == 5000
    assert rate_limit_delay(error, 3, config) == 5000


@pytest.mark.parametrize("field", ["retry_after", "retryAfter", "retry_after_seconds", "retryAfterSeconds"])
def test_retry_after_seconds_from_body(field):
    error = _status_error(429, json={field: 7})
    assert retry_after_seconds(error.response) == 7


def test_retry_after_header_takes_priority_over_body():
    error = _status_error(429, headers={"Retry-After": "2"}, json={"retry_after": 9})
    assert retry_after_seconds(error.response) == 2


@pytest.mark.parametrize("value", ["0", "-1", "3601", "soon"])
def test_rate_limit_delay_ignores_out_of_range_hint(value):
    config = ClientConfig(rate_limit_delay_ms=2000, retry_max_delay_ms=10000)
    error = _status_error(429, headers={"Retry-After": value})
    assert rate_limit_delay(error, 2, config) == 4000


def test_rate_limit_delay_scales_linearly_up_to_cap():
    config = ClientConfig(rate_limit_delay_ms=2000, retry_max_delay_ms=5000)
    error = _status_error(429)
    assert [rate_limit_delay(error, attempt, config) for attempt in (1, 2, 3)] == [2000, 4000, 5000]


def test_exponential_delay_doubles_with_jitter():
    config = ClientConfig(retry_base_delay_ms=500, retry_max_delay_ms=10000)
    assert exponential_delay(1, config, jitter=lambda: 0.5) == 600
    assert exponential_delay(2, config, jitter=lambda: 0.0) == 1000
    assert exponential_delay(3, config, jitter=lambda: 0.0) == 2000
    assert exponential_delay(10, config, jitter=lambda: 0.99) == 10000


def test_backoff_strategy_server_error_strictly_increases():
    config = ClientConfig(retry_base_delay_ms=500, retry_max_delay_ms=10000)
    delay = backoff_strategy(config)
    error = _status_error(503)
    delays = [delay(error, attempt) for attempt in range(1, 5)]
    assert delays == sorted(delays)
    assert all(a < b for a, b in zip(delays, delays[1:]))
    assert all(value <= 10000 for value in delays)


def test_backoff_strategy_rate_limit_has_no_exponential_component():
    delay = backoff_strategy(ClientConfig())
    error = _status_error(429, headers={"Retry-After": "5"})
    assert delay(error, 4) == 5000


def test_call_with_retry_recovers_after_transient_errors():
    calls = []
    waits = []

    def flaky():
        calls.append(1)
        if len(calls) < 3:
            raise _status_error(503)
        return "ok"

    result = call_with_retry(flaky, "flaky", 5, lambda exc, attempt: 100 * attempt, sleep=waits.append)
    assert result == "ok"
    assert len(calls) == 3
    assert waits == [0.1, 0.2]


def test_call_with_retry_raises_non_retryable_immediately():
    waits = []

    def rejected():
        raise _status_error(401)

    with pytest.raises(httpx.HTTPStatusError):
        call_with_retry(rejected, "rejected", 5, lambda exc, attempt: 100, sleep=waits.append)
    assert waits == []


def test_call_with_retry_exhaustion_raises_last_error():
    errors = [_status_error(500), _status_error(502), _status_error(503)]
    waits = []

    def failing():
        raise errors.pop(0)

    with pytest.raises(httpx.HTTPStatusError) as exc_info:
        call_with_retry(failing, "failing", 3, lambda exc, attempt: 10, sleep=waits.append)
    assert exc_info.value.response.status_code == 503
    assert len(waits) == 2
