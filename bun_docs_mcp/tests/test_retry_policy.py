import pytest
import httpx

from bun_docs_mcp.core.retry_policy import (
    BACKOFF_MAX_MS,
    MAX_RETRIES,
    RetryState,
    backoff_delay_ms,
    is_transient_network_error,
    is_transient_status,
)


def test_backoff_delay_sequence():
    assert [backoff_delay_ms(a) for a in (1, 2, 3, 4)] == [200, 400, 800, 1000]


@pytest.mark.parametrize("attempt", [4, 5, 10, 64])
def test_backoff_delay_capped(attempt):
    assert backoff_delay_ms(attempt) == BACKOFF_MAX_MS


def test_backoff_delay_rejects_zero():
    with pytest.raises(ValueError):
        backoff_delay_ms(0)


def test_transient_status_partition():
    transient = {429, 500, 502, 503, 504}
    for code in range(100, 600):
        assert is_transient_status(code) is (code in transient), code


@pytest.mark.parametrize("code", [200, 201, 204, 301, 302, 400, 401, 403, 404, 501, 505])
def test_non_transient_status(code):
    assert not is_transient_status(code)


@pytest.mark.parametrize("error", [
    httpx.ConnectError("connection refused"),
    httpx.ConnectTimeout("connect timed out"),
    httpx.ReadTimeout("read timed out"),
    httpx.PoolTimeout("pool exhausted"),
    httpx.UnsupportedProtocol("no scheme"),
    httpx.LocalProtocolError("bad request line"),
])
def test_transient_network_errors(error):
    assert is_transient_network_error(error)


@pytest.mark.parametrize("error", [
    httpx.RemoteProtocolError("server hung up"),
    httpx.ReadError("connection reset"),
    httpx.TooManyRedirects("loop"),
    ValueError("not a network error"),
])
def test_fatal_network_errors(error):
    assert not is_transient_network_error(error)


def test_retry_state_threads_last_error():
    state = RetryState()
    assert state.attempt == 1
    assert state.last_error is None
    assert state.has_attempts_left

    first = RuntimeError("first")
    state = state.next(first)
    assert state.attempt == 2
    assert state.last_error is first

    state = state.next(RuntimeError("second"))
    assert state.attempt == MAX_RETRIES
    assert not state.has_attempts_left
