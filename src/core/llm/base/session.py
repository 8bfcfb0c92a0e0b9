"""생성 세션 추상 클래스"""

import logging
from abc import ABC, abstractmethod

from src.core.llm.enums import ProviderType
from src.core.llm.models import LLMResponse

logger = logging.getLogger(__name__)


class LLMProviderSession(ABC):
    """
    하나의 Provider/모델에 묶인 stateless 생성 세션.

    구현체는 SDK 예외를 ProviderOverloadedError(과부하, 즉시 페일오버) 또는
    ProviderTransportError(일시 오류, 재시도)로 변환해서 던져야 한다.
    """

    provider_type: ProviderType

    def __init__(self, model_name: str):
        self._model_name = model_name

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def provider_name(self) -> str:
        return self.provider_type.value

    @abstractmethod
    async def generate_content(self, prompt: str) -> LLMResponse:
        ...

    def _log_response(self, response: LLMResponse) -> None:
        if response.usage.total_tokens:
            logger.debug(f"{self.provider_name} tokens: {response.usage.total_tokens} (model: {self._model_name})")
        if not response.finish_reason.is_usable:
            logger.warning(
                f"{self.provider_name} finish_reason alert: {response.finish_reason.value} (model: {self._model_name})"
            )
