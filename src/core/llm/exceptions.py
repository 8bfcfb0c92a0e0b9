"""LLM Provider 호출 실패 분류.

오케스트레이터는 이 계층만 보고 재시도/페일오버를 결정한다.
- ProviderTransportError, ParseError: 같은 Provider로 재시도
- ProviderOverloadedError: 재시도 없이 다음 Provider로 페일오버
- AllProvidersExhaustedError: 결정적 폴백으로 전환 (외부 노출 안 됨)
"""
from typing import Optional


class LLMError(Exception):
    """Provider 관련 예외의 공통 부모"""

    def __init__(self, message: str, provider: Optional[str] = None, original_error: Optional[Exception] = None):
        self.provider = provider
        self.original_error = original_error
        super().__init__(message)


class ProviderTransportError(LLMError):
    """네트워크 오류, 5xx 등 일시적 실패"""

    def __init__(self, message: str = "Provider transport failure", **kwargs):
        super().__init__(message, **kwargs)


class ProviderOverloadedError(LLMError):
    """과부하 또는 Rate/Quota 제한"""

    def __init__(self, message: str = "Provider overloaded or rate limited", **kwargs):
        super().__init__(message, **kwargs)


class ParseError(LLMError):
    """응답 본문에서 콘텐츠 목록을 찾지 못함"""

    def __init__(self, message: str = "Could not extract content items from provider payload", **kwargs):
        super().__init__(message, **kwargs)


class AllProvidersExhaustedError(LLMError):
    def __init__(self, message: str = "All generation providers exhausted", attempts: int = 0, **kwargs):
        self.attempts = attempts
        super().__init__(message, **kwargs)


class ProviderNotFoundError(LLMError):
    """레지스트리에 없는 Provider 타입"""

    def __init__(self, provider: str):
        super().__init__(f"No factory registered for provider {provider}", provider=provider)


class ProviderNotInitializedError(LLMError):
    """SDK import 또는 인증 단계에서 실패한 Provider"""

    def __init__(self, provider: str, reason: Optional[str] = None):
        message = f"Provider {provider} could not be initialized"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, provider=provider)
