"""
Retry utilities for floodcap.

This module provides retry and backoff utilities
for re-establishing database connections.
"""

import asyncio
import random
from typing import Awaitable, Callable, Tuple, Type, TypeVar

T = TypeVar('T')

def backoff_delay(attempt: int, base: float, max_delay: float) -> float:
    """
    지수 백오프 지연 시간을 계산합니다.

    Args:
        attempt: 현재 시도 횟수 (1부터 시작)
        base: 기본 지연 시간 (초)
        max_delay: 최대 지연 시간 (초)
    """
    return min(max_delay, base * (2 ** max(0, attempt - 1)))

async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    jitter: bool = True,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    on_retry: Callable[[int, BaseException, float], None] = None,
) -> T:
    """
    지수 백오프와 함께 함수를 재시도합니다.

    Args:
        func: 재시도할 비동기 함수
        max_retries: 최대 재시도 횟수
        base_delay: 기본 지연 시간 (초)
        max_delay: 최대 지연 시간 (초)
        jitter: 지터 적용 여부
        retry_on: 재시도 대상 예외 타입
        on_retry: 재시도 직전 호출 (시도 횟수, 예외, 지연)

    Returns:
        함수 실행 결과

    Raises:
        마지막 시도에서 발생한 예외, 또는 retry_on에 없는 예외
    """
    last_exception = None

    for attempt in range(1, max_retries + 2):  # 최초 1회 + max_retries
        try:
            return await func()
        except retry_on as e:
            last_exception = e

            if attempt > max_retries:
                break

            delay = backoff_delay(attempt, base_delay, max_delay)

            # 지터 적용
            if jitter:
                delay = delay * (0.5 + random.random() * 0.5)

            if on_retry is not None:
                on_retry(attempt, e, delay)

            await asyncio.sleep(delay)

    raise last_exception
