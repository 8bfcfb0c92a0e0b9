import logging
from abc import ABC, abstractmethod
from typing import Optional, Type

from src.core.config import settings
from src.core.llm.base.session import LLMProviderSession
from src.core.llm.enums import ProviderType, ResponseFormat
from src.core.llm.exceptions import ParseError
from src.core.llm.models import SessionConfig
from src.core.llm.registry import ProviderRegistry
from src.schemas.models.api.generation_request import GenerationRequest
from src.utils.prompt_manager import PromptManager

logger = logging.getLogger(__name__)


class BaseProviderClient(ABC):
    """
    "생성 프롬프트를 보내고 원문 텍스트를 받는다"는 계약.
    과부하/Rate limit은 ProviderOverloadedError, 그 외 실패는 ProviderTransportError/ParseError로 구분해야 한다.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> str:
        ...


class ProviderClient(BaseProviderClient):
    """
    ProviderRegistry 위의 얇은 호출 래퍼 (1차/2차 Provider 각각 하나씩).
    세션은 최초 호출 시 생성되어 재사용된다.
    """

    def __init__(
        self,
        provider_type: ProviderType,
        prompt_manager: Optional[PromptManager] = None,
        registry: Type[ProviderRegistry] = ProviderRegistry,
        model_name: Optional[str] = None,
    ):
        self.provider_type = provider_type
        self.prompt_manager = prompt_manager or PromptManager()
        self.registry = registry
        self._model_name = model_name
        self._session: Optional[LLMProviderSession] = None

    @property
    def name(self) -> str:
        return self.provider_type.value

    def _get_session(self) -> LLMProviderSession:
        if self._session is None:
            factory = self.registry.get_factory(self.provider_type)
            session_config = SessionConfig(
                name="content_block_generator",
                model_name=self._model_name or factory.default_model_name(),
                temperature=settings.GENERATION_TEMPERATURE,
                system_instruction=self.prompt_manager.get_system_instruction(),
                response_format=ResponseFormat.JSON,
                max_output_tokens=settings.MAX_OUTPUT_TOKENS,
            )
            self._session = factory.start_session(session_config)
            logger.info(f"Started {self.name} session (model: {self._session.model_name})")
        return self._session

    async def generate(self, request: GenerationRequest) -> str:
        session = self._get_session()
        prompt = self.prompt_manager.get_content_block_generation_prompt(request, self.provider_type)

        response = await session.generate_content(prompt)

        if not response.finish_reason.is_usable:
            # 잘리거나 차단된 응답은 JSON으로 쓸 수 없으므로 재시도 대상
            raise ParseError(
                f"Unusable response (finish_reason={response.finish_reason.value})",
                provider=self.name,
            )
        if not response.has_text:
            raise ParseError("Provider returned empty text", provider=self.name)

        logger.info(
            f"{self.name} returned {len(response.text)} chars "
            f"(tokens: {response.usage.total_tokens}, query='{request.query}')"
        )
        return response.text
