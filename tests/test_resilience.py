"""
EduGen - Resilience Pattern Tests
Tests for retry logic
"""
from unittest.mock import AsyncMock

import pytest

from config.settings import get_settings
from src.utils.resilience import RetryConfig, retry_with_backoff


class TestRetryConfig:
    """Tests for RetryConfig."""

    def test_default_values(self):
        """Test default configuration values."""
        config = RetryConfig()
        assert config.max_attempts == 2
        assert config.base_delay == 1.0
        assert config.max_delay == 10.0
        assert config.jitter is True

    @pytest.mark.unit
    def test_from_settings(self):
        """Test creating config from settings."""
        settings = get_settings()
        config = RetryConfig.from_settings()
        assert config.max_attempts == settings.retry_max_attempts
        assert config.base_delay == settings.retry_base_delay
        assert config.label == "call"
        assert RetryConfig.from_settings(label="rewrite").label == "rewrite"

    @pytest.mark.unit
    def test_exponential_delay_is_capped(self):
        config = RetryConfig(base_delay=1.0, max_delay=5.0, exponential_base=2.0, jitter=False)
        assert [config.delay_for(i) for i in range(4)] == [1.0, 2.0, 4.0, 5.0]

    @pytest.mark.unit
    def test_jitter_range(self):
        config = RetryConfig(base_delay=2.0, jitter=True)
        for _ in range(20):
            assert 1.0 <= config.delay_for(0) <= 3.0


class TestRetryWithBackoff:
    """Tests for retry_with_backoff."""

    @pytest.fixture
    def fast_config(self):
        return RetryConfig(max_attempts=3, base_delay=0, jitter=False)

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_success_first_try(self, fast_config):
        """Successful call should not retry."""
        func = AsyncMock(return_value="ok")

        assert await retry_with_backoff(func, fast_config, "arg", key="value") == "ok"
        func.assert_awaited_once_with("arg", key="value")

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_retries_until_success(self, fast_config):
        func = AsyncMock(side_effect=[ValueError("1"), ValueError("2"), "ok"])

        assert await retry_with_backoff(func, fast_config) == "ok"
        assert func.await_count == 3

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_raises_last_exception(self, fast_config):
        func = AsyncMock(side_effect=[ValueError("1"), ValueError("2"), ValueError("3")])

        with pytest.raises(ValueError, match="3"):
            await retry_with_backoff(func, fast_config)

    @pytest.mark.asyncio
    @pytest.mark.unit
    async def test_non_retryable_exception(self):
        config = RetryConfig(max_attempts=3, base_delay=0, jitter=False, retryable_exceptions=(ValueError,))
        func = AsyncMock(side_effect=KeyError("x"))

        with pytest.raises(KeyError):
            await retry_with_backoff(func, config)
        assert func.await_count == 1
