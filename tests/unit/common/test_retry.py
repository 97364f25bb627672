"""
재시도 유틸리티 단위 테스트
"""

import pytest
from unittest.mock import AsyncMock, Mock, patch

from floodcap.common.retry import backoff_delay, retry_with_backoff


class TestBackoffDelay:
    """backoff_delay 테스트"""

    @pytest.mark.parametrize("attempt,expected", [(1, 1.0), (2, 2.0), (3, 4.0), (4, 8.0)])
    def test_doubles_each_attempt(self, attempt, expected):
        assert backoff_delay(attempt, 1.0, 60.0) == expected

    def test_capped_at_max_delay(self):
        assert backoff_delay(10, 1.0, 180.0) == 180.0


class TestRetryWithBackoff:
    """retry_with_backoff 테스트"""

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        func = AsyncMock(return_value="ok")

        assert await retry_with_backoff(func) == "ok"
        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_success_after_retries(self):
        func = AsyncMock(side_effect=[ConnectionError(), ConnectionError(), "ok"])

        with patch("floodcap.common.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            assert await retry_with_backoff(func, max_retries=3, jitter=False) == "ok"

        assert func.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_raises_last_exception_when_exhausted(self):
        func = AsyncMock(side_effect=ConnectionError("down"))

        with patch("floodcap.common.retry.asyncio.sleep", new=AsyncMock()):
            with pytest.raises(ConnectionError, match="down"):
                await retry_with_backoff(func, max_retries=2)

        assert func.await_count == 3

    @pytest.mark.asyncio
    async def test_unlisted_exception_is_not_retried(self):
        func = AsyncMock(side_effect=ValueError("bad"))

        with pytest.raises(ValueError):
            await retry_with_backoff(func, retry_on=(ConnectionError,))
        assert func.await_count == 1

    @pytest.mark.asyncio
    async def test_jitter_keeps_delay_within_half_to_full(self):
        func = AsyncMock(side_effect=[ConnectionError(), "ok"])

        with patch("floodcap.common.retry.asyncio.sleep", new=AsyncMock()) as sleep:
            await retry_with_backoff(func, base_delay=4.0, jitter=True)

        delay = sleep.await_args.args[0]
        assert 2.0 <= delay <= 4.0

    @pytest.mark.asyncio
    async def test_on_retry_callback(self):
        func = AsyncMock(side_effect=[ConnectionError("x"), "ok"])
        on_retry = Mock()

        with patch("floodcap.common.retry.asyncio.sleep", new=AsyncMock()):
            await retry_with_backoff(func, jitter=False, on_retry=on_retry)

        attempt, error, delay = on_retry.call_args.args
        assert attempt == 1
        assert isinstance(error, ConnectionError)
        assert delay == 1.0

    @pytest.mark.asyncio
    async def test_zero_retries_calls_once(self):
        func = AsyncMock(side_effect=ConnectionError())

        with pytest.raises(ConnectionError):
            await retry_with_backoff(func, max_retries=0)
        assert func.await_count == 1
