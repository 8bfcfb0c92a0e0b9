"""OpenAI Provider Factory (2차 Provider 기본값)"""

import logging
from typing import Any, Dict, Optional

import openai

from src.core.config import settings
from src.core.llm.base.factory import LLMProviderFactory
from src.core.llm.enums import ProviderType, ResponseFormat
from src.core.llm.models import SessionConfig
from src.core.llm.providers.openai.session import OpenAISession

logger = logging.getLogger(__name__)


class OpenAIProviderFactory(LLMProviderFactory):

    provider_type = ProviderType.OPENAI
    _client: Optional[openai.AsyncOpenAI] = None

    @classmethod
    def initialize(cls) -> None:
        """SDK 재시도는 끈다 (max_retries=0). 재시도/페일오버는 RetryPolicy가 담당."""
        if not settings.OPENAI_API_KEY:
            raise ValueError("OPENAI_API_KEY is not set in settings")

        client_kwargs: Dict[str, Any] = {"api_key": settings.OPENAI_API_KEY, "max_retries": 0}
        if settings.OPENAI_ORG_ID:
            client_kwargs["organization"] = settings.OPENAI_ORG_ID

        cls._client = openai.AsyncOpenAI(**client_kwargs)
        logger.info("OpenAI client initialized")

    @classmethod
    def is_client_ready(cls) -> bool:
        return cls._client is not None

    @classmethod
    def create_session(cls, config: SessionConfig) -> OpenAISession:
        # JSON 모드는 최상위 object만 허용하므로 {"blocks": [...]} envelope로 받는다
        text_format = {"type": "json_object"} if config.response_format == ResponseFormat.JSON else None
        return OpenAISession(
            client=cls._client,
            model_name=config.model_name,
            temperature=config.temperature,
            system_instruction=config.system_instruction,
            text_format=text_format,
            max_output_tokens=config.max_output_tokens,
        )

    @classmethod
    def default_model_name(cls) -> str:
        return settings.OPENAI_MODEL
