"""
Tests for retry utilities.

This module tests:
- Retry configuration
- fetch_with_retry function
"""

import pytest
from unittest.mock import AsyncMock, Mock, patch
import httpx

from geofence_kit.retry import (
    fetch_with_retry,
    RETRY_MAX_ATTEMPTS,
    RETRY_MIN_WAIT,
    RETRY_MAX_WAIT,
    RETRYABLE_EXCEPTIONS,
    _create_retry_config,
)


def mock_async_client(mock_client):
    mock_instance = AsyncMock()
    mock_instance.__aenter__.return_value = mock_instance
    mock_instance.__aexit__.return_value = None
    mock_client.return_value = mock_instance
    return mock_instance


def json_response(data):
    mock_response = Mock()
    mock_response.json.return_value = data
    mock_response.raise_for_status = Mock()
    return mock_response


class TestRetryConfiguration:
    """Tests for retry configuration."""

    def test_default_retry_attempts(self):
        """Default retry attempts should be 3."""
        assert RETRY_MAX_ATTEMPTS == 3

    def test_default_waits(self):
        """Default waits should be 1 and 10 seconds."""
        assert RETRY_MIN_WAIT == 1
        assert RETRY_MAX_WAIT == 10

    def test_retryable_exceptions(self):
        """Retryable exceptions should include network errors."""
        assert httpx.TimeoutException in RETRYABLE_EXCEPTIONS
        assert httpx.NetworkError in RETRYABLE_EXCEPTIONS
        assert httpx.ConnectError in RETRYABLE_EXCEPTIONS

    def test_http_status_errors_are_not_retryable(self):
        """HTTP status errors should not trigger a retry."""
        assert not issubclass(httpx.HTTPStatusError, RETRYABLE_EXCEPTIONS)

    def test_create_retry_config_defaults(self):
        """_create_retry_config should reraise the last error."""
        config = _create_retry_config()
        assert config["reraise"] is True
        assert set(config) == {"stop", "wait", "retry", "before_sleep", "after", "reraise"}

    def test_create_retry_config_custom(self):
        """_create_retry_config should accept custom values."""
        config = _create_retry_config(max_attempts=1, min_wait=0.5, max_wait=2.0)
        assert config["stop"].max_attempt_number == 1


class TestFetchWithRetry:
    """Tests for fetch_with_retry function."""

    @pytest.mark.asyncio
    async def test_successful_fetch(self):
        """fetch_with_retry should return data on success."""
        with patch("geofence_kit.retry.httpx.AsyncClient") as mock_client:
            mock_instance = mock_async_client(mock_client)
            mock_instance.get.return_value = json_response({"routes": []})

            result = await fetch_with_retry("https://example.com/mapbox-osrm/route/v1/car/0,0;1,1")

            assert result == {"routes": []}
            mock_instance.get.assert_called_once()

    @pytest.mark.asyncio
    async def test_fetch_with_params_and_headers(self):
        """fetch_with_retry should pass params and headers to the request."""
        with patch("geofence_kit.retry.httpx.AsyncClient") as mock_client:
            mock_instance = mock_async_client(mock_client)
            mock_instance.get.return_value = json_response({})

            await fetch_with_retry(
                "https://example.com/api",
                params={"steps": "true"},
                headers={"Accept": "application/json"},
            )

            call_args = mock_instance.get.call_args
            assert call_args[1]["params"] == {"steps": "true"}
            assert call_args[1]["headers"] == {"Accept": "application/json"}

    @pytest.mark.asyncio
    async def test_timeout_is_passed_to_client(self):
        """An explicit timeout should be used for the client."""
        with patch("geofence_kit.retry.httpx.AsyncClient") as mock_client:
            mock_instance = mock_async_client(mock_client)
            mock_instance.get.return_value = json_response({})

            await fetch_with_retry("https://example.com/api", timeout=5.0)

            assert mock_client.call_args.kwargs["timeout"] == 5.0

    @pytest.mark.asyncio
    async def test_default_timeout_and_redirects(self):
        """Without a timeout the client waits indefinitely and follows redirects."""
        with patch("geofence_kit.retry.httpx.AsyncClient") as mock_client:
            mock_instance = mock_async_client(mock_client)
            mock_instance.get.return_value = json_response({})

            await fetch_with_retry("https://example.com/api")

            assert mock_client.call_args.kwargs["timeout"] is None
            assert mock_client.call_args.kwargs["follow_redirects"] is True

    @pytest.mark.asyncio
    async def test_fetch_retries_on_timeout(self):
        """fetch_with_retry should retry on timeout."""
        mock_response = json_response({"data": "test"})
        call_count = 0

        async def mock_get(*args, **kwargs):
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise httpx.TimeoutException("Timeout")
            return mock_response

        with patch("geofence_kit.retry.httpx.AsyncClient") as mock_client:
            mock_instance = mock_async_client(mock_client)
            mock_instance.get.side_effect = mock_get

            # Reduce wait time for faster tests
            with patch("geofence_kit.retry.RETRY_MIN_WAIT", 0.01), \
                    patch("geofence_kit.retry.RETRY_MAX_WAIT", 0.02):
                result = await fetch_with_retry("https://example.com/api", max_attempts=3)

            assert result == {"data": "test"}
            assert call_count == 2

    @pytest.mark.asyncio
    async def test_fetch_raises_after_max_retries(self):
        """fetch_with_retry should raise after max retries."""
        with patch("geofence_kit.retry.httpx.AsyncClient") as mock_client:
            mock_instance = mock_async_client(mock_client)
            mock_instance.get.side_effect = httpx.TimeoutException("Timeout")

            with patch("geofence_kit.retry.RETRY_MIN_WAIT", 0.01), \
                    patch("geofence_kit.retry.RETRY_MAX_WAIT", 0.02):
                with pytest.raises(httpx.TimeoutException):
                    await fetch_with_retry("https://example.com/api", max_attempts=2)

            assert mock_instance.get.call_count == 2

    @pytest.mark.asyncio
    async def test_single_attempt_does_not_retry(self):
        """max_attempts=1 should fail on the first transient error."""
        with patch("geofence_kit.retry.httpx.AsyncClient") as mock_client:
            mock_instance = mock_async_client(mock_client)
            mock_instance.get.side_effect = httpx.ConnectError("refused")

            with pytest.raises(httpx.ConnectError):
                await fetch_with_retry("https://example.com/api", max_attempts=1)

            assert mock_instance.get.call_count == 1

    @pytest.mark.asyncio
    async def test_http_status_error_is_not_retried(self):
        """HTTP errors should be raised immediately."""
        mock_response = Mock()
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Server error",
            request=Mock(),
            response=Mock(status_code=503),
        )

        with patch("geofence_kit.retry.httpx.AsyncClient") as mock_client:
            mock_instance = mock_async_client(mock_client)
            mock_instance.get.return_value = mock_response

            with pytest.raises(httpx.HTTPStatusError):
                await fetch_with_retry("https://example.com/api", max_attempts=3)

            assert mock_instance.get.call_count == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
