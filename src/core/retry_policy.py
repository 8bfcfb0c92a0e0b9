import asyncio
import logging
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from src.core.config import settings
from src.core.llm.exceptions import ParseError, ProviderTransportError

logger = logging.getLogger(__name__)

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[None]]


def is_retryable_error(exception: BaseException) -> bool:
    """
    재시도 가능한 오류 판단.
    과부하/Rate limit(ProviderOverloadedError)은 재시도하지 않고 즉시 페일오버한다.
    """
    return isinstance(exception, (ProviderTransportError, ParseError))


class RetryPolicy:
    """
    Provider 호출 재시도 정책.
    1차/2차 Provider에 동일한 인스턴스를 사용하여 두 페일오버 경로를 대칭으로 유지한다.

    delay = base_delay * 2^(n-1)  (n: 재시도 순번, 1부터)
    """

    def __init__(
        self,
        max_retries: Optional[int] = None,
        base_delay: Optional[float] = None,
        is_retryable: Callable[[BaseException], bool] = is_retryable_error,
        sleep: Optional[SleepFunc] = None,
    ):
        self.max_retries = settings.GENERATION_MAX_RETRIES if max_retries is None else max_retries
        self.base_delay = settings.GENERATION_BASE_DELAY_SECONDS if base_delay is None else base_delay
        self.is_retryable = is_retryable
        self.sleep = sleep or asyncio.sleep

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_for(self, retry_number: int) -> float:
        return self.base_delay * (2 ** (retry_number - 1))

    async def run(self, operation: Callable[[], Awaitable[T]], label: str = "operation") -> T:
        """
        operation을 정책에 따라 실행한다.
        재시도 불가 오류는 즉시, 재시도 소진 시에는 마지막 오류를 그대로 전파한다.
        """

        def log_before_sleep(retry_state: RetryCallState) -> None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            next_wait = retry_state.next_action.sleep if retry_state.next_action else 0
            logger.warning(
                f"{label} attempt {retry_state.attempt_number}/{self.max_attempts} failed: {error}. "
                f"Retrying in {next_wait:.2f}s"
            )

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.base_delay, exp_base=2),
            retry=retry_if_exception(self.is_retryable),
            sleep=self.sleep,
            before_sleep=log_before_sleep,
            reraise=True,
        )

        result = None
        async for attempt in retrying:
            with attempt:
                result = await operation()
        return result
