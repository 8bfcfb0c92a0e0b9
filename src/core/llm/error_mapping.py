"""SDK 예외를 Provider 중립 예외로 변환하는 공통 판별 로직"""

import logging
import re
from typing import Optional

from src.core.llm.exceptions import LLMError, ProviderOverloadedError, ProviderTransportError

logger = logging.getLogger(__name__)

OVERLOADED_STATUS_CODES = {429, 503, 529}

OVERLOADED_MESSAGE_MARKERS = (
    "overloaded",
    "rate limit",
    "rate_limit",
    "quota",
    "resource exhausted",
    "resource_exhausted",
    "too many requests",
)

# 포트 번호나 요청 id 안의 숫자는 제외
OVERLOADED_STATUS_PATTERN = re.compile(r"\b429\b")


def is_overloaded_message(message: str) -> bool:
    """과부하/할당량 관련 오류 메시지인지 판단"""
    lowered = message.lower()
    if any(marker in lowered for marker in OVERLOADED_MESSAGE_MARKERS):
        return True
    return OVERLOADED_STATUS_PATTERN.search(message) is not None


def is_overloaded_status(status_code: Optional[int]) -> bool:
    """과부하/할당량 관련 HTTP 상태 코드인지 판단"""
    return status_code in OVERLOADED_STATUS_CODES


def to_provider_error(error: Exception, provider: str, status_code: Optional[int] = None) -> LLMError:
    """
    임의의 예외를 ProviderOverloadedError 또는 ProviderTransportError로 변환한다.

    Args:
        error: 원본 예외
        provider: Provider 이름
        status_code: SDK가 제공하는 HTTP 상태 코드 (없으면 메시지로만 판단)
    """
    if isinstance(error, LLMError):
        return error

    message = f"{type(error).__name__}: {error}"
    if is_overloaded_status(status_code) or is_overloaded_message(str(error)):
        logger.debug(f"Classified as overloaded ({provider}): {message}")
        return ProviderOverloadedError(message, provider=provider, original_error=error)

    return ProviderTransportError(message, provider=provider, original_error=error)
