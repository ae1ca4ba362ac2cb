"""
Retry utilities for hazardwatch.

This module provides the serial retry helper used by the hazard
source client. Every failure is treated as transient; the delay between
attempts grows linearly with the attempt index.
"""

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar
from hazardwatch.observability.logging_setup import get_logger

log = get_logger("hazardwatch.retry")

T = TypeVar('T')

def linear_backoff_delay(attempt: int, unit_delay: float) -> float:
    """
    선형 백오프 지연 시간을 계산합니다.

    Args:
        attempt: 실패한 시도 번호 (1부터 시작)
        unit_delay: 단위 지연 시간 (초)

    Returns:
        다음 시도 전 대기 시간 (초)
    """
    return max(0, attempt) * unit_delay

async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    unit_delay: float = 1.0,
    *,
    operation_name: str = "operation",
    on_retry: Optional[Callable[[int, Exception], None]] = None,
) -> T:
    """
    선형 백오프와 함께 함수를 재시도합니다.

    Args:
        func: 재시도할 비동기 함수
        max_attempts: 최대 시도 횟수 (첫 시도 포함)
        unit_delay: 단위 지연 시간 (초), n번째 실패 후 n * unit_delay 대기
        operation_name: 로그에 사용할 작업 이름
        on_retry: 재시도 직전 호출되는 콜백 (시도 번호, 예외)

    Returns:
        함수 실행 결과

    Raises:
        마지막 시도에서 발생한 예외
    """
    attempts = max(1, max_attempts)
    last_exception: Optional[Exception] = None

    for attempt in range(1, attempts + 1):
        try:
            result = await func()
            if attempt > 1:
                log.info(f"{operation_name} 성공 (시도 {attempt}/{attempts})")
            return result
        except Exception as e:
            last_exception = e

            if attempt >= attempts:
                log.error(f"{operation_name} 최종 실패 (시도 {attempt}/{attempts}): {e}")
                break

            delay = linear_backoff_delay(attempt, unit_delay)
            log.warning(
                f"{operation_name} 실패 (시도 {attempt}/{attempts}): {e}. "
                f"{delay:.1f}초 후 재시도..."
            )
            if on_retry is not None:
                on_retry(attempt, e)

            await asyncio.sleep(delay)

    assert last_exception is not None
    raise last_exception
