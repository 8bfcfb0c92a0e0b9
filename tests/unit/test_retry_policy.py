import pytest

from src.core.llm.exceptions import ParseError, ProviderOverloadedError, ProviderTransportError
from src.core.retry_policy import RetryPolicy, is_retryable_error


class Flaky:
    """정해진 횟수만큼 실패한 뒤 성공하는 호출"""

    def __init__(self, failures, result="ok"):
        self.failures = list(failures)
        self.result = result
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return self.result


@pytest.fixture
def policy(recording_sleep):
    return RetryPolicy(max_retries=2, base_delay=0.5, sleep=recording_sleep)


class TestRetryPolicy:

    @pytest.mark.asyncio
    async def test_success_on_first_attempt_does_not_sleep(self, policy, recording_sleep):
        operation = Flaky([])

        assert await policy.run(operation) == "ok"
        assert operation.calls == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_retryable_failures(self, policy, recording_sleep):
        operation = Flaky([ProviderTransportError("boom"), ParseError("bad json")])

        assert await policy.run(operation, label="primary") == "ok"
        assert operation.calls == 3
        assert recording_sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts_with_last_error(self, policy, recording_sleep):
        """최초 1회 + 재시도 2회 = 최대 3회 호출"""
        last = ProviderTransportError("third")
        operation = Flaky([ProviderTransportError("first"), ProviderTransportError("second"), last])

        with pytest.raises(ProviderTransportError) as exc_info:
            await policy.run(operation)

        assert exc_info.value is last
        assert operation.calls == 3
        assert recording_sleep.delays == [0.5, 1.0]

    @pytest.mark.asyncio
    async def test_overloaded_error_is_not_retried(self, policy, recording_sleep):
        operation = Flaky([ProviderOverloadedError("429")])

        with pytest.raises(ProviderOverloadedError):
            await policy.run(operation)

        assert operation.calls == 1
        assert recording_sleep.delays == []

    @pytest.mark.asyncio
    async def test_unexpected_error_is_not_retried(self, policy):
        operation = Flaky([KeyError("payload")])

        with pytest.raises(KeyError):
            await policy.run(operation)

        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt(self, recording_sleep):
        policy = RetryPolicy(max_retries=0, base_delay=0.5, sleep=recording_sleep)
        operation = Flaky([ParseError("bad")])

        with pytest.raises(ParseError):
            await policy.run(operation)

        assert operation.calls == 1
        assert policy.max_attempts == 1

    def test_delay_doubles_per_retry(self, policy):
        assert [policy.delay_for(n) for n in (1, 2, 3)] == [0.5, 1.0, 2.0]

    @pytest.mark.parametrize("error, expected", [
        (ProviderTransportError(), True),
        (ParseError(), True),
        (ProviderOverloadedError(), False),
        (ValueError("x"), False),
    ])
    def test_is_retryable_error(self, error, expected):
        assert is_retryable_error(error) is expected
