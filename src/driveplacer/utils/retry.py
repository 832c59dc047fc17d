"""
재시도 로직 유틸리티.

외부 API(채팅 completion) 호출의 일시적 실패만 재시도한다.
배치 추천 호출은 1회만 시도하므로 여기서 감싸지 않는다.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Backoff:
    """
    지수 백오프 정책.

    max_retries=3 → 총 4회 시도, 대기 1s, 2s, 4s (max_delay 상한).
    """
    max_retries: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    exponential_base: float = 2.0

    def delays(self) -> Iterator[float]:
        """재시도 사이 대기 시간 (max_retries개)."""
        delay = self.initial_delay
        for _ in range(self.max_retries):
            yield delay
            delay = min(delay * self.exponential_base, self.max_delay)


async def retry_async(
    call: Callable[[], Awaitable[T]],
    retry_on: tuple[type[BaseException], ...],
    backoff: Backoff | None = None,
    label: str = "call",
) -> T:
    """
    인자 없는 비동기 호출을 백오프 정책에 따라 재시도.

    Args:
        call: 매 시도마다 새 awaitable을 만드는 함수
        retry_on: 재시도 대상 예외 (그 외 예외는 즉시 전파)
        backoff: 백오프 정책 (None이면 기본값)
        label: 로그 식별용 이름

    Raises:
        마지막 시도의 예외
    """
    policy = backoff or Backoff()
    delays = policy.delays()
    attempt = 1

    while True:
        try:
            result = await call()
        except retry_on as e:
            delay = next(delays, None)
            if delay is None:
                logger.error(f"{label}: all {attempt} attempts failed. Last error: {e}")
                raise
            logger.warning(
                f"{label}: attempt {attempt} failed: {e}. Retrying in {delay:.1f}s..."
            )
            await asyncio.sleep(delay)
            attempt += 1
        else:
            if attempt > 1:
                logger.info(f"{label}: succeeded on attempt {attempt}")
            return result
