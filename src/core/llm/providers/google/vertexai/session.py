"""Vertex AI 생성 세션"""

import logging

import google.genai as genai
from google.genai import errors, types

from src.core.llm.base.session import LLMProviderSession
from src.core.llm.enums import ProviderType
from src.core.llm.error_mapping import to_provider_error
from src.core.llm.models import LLMResponse
from src.core.llm.providers.google.vertexai.response_mapper import VertexAIResponseMapper

logger = logging.getLogger(__name__)


class VertexAISession(LLMProviderSession):
    """client.aio 비동기 호출. 429 RESOURCE_EXHAUSTED / 503 UNAVAILABLE은 과부하로 분류된다."""

    provider_type = ProviderType.VERTEX_AI

    def __init__(self, client: genai.Client, model_name: str, config: types.GenerateContentConfig):
        super().__init__(model_name)
        self._client = client
        self._config = config

    async def generate_content(self, prompt: str) -> LLMResponse:
        try:
            response = await self._client.aio.models.generate_content(
                model=self._model_name,
                contents=prompt,
                config=self._config,
            )
        except errors.APIError as e:
            logger.warning(f"Vertex AI API error (code={e.code}, status={e.status}, model={self._model_name})")
            raise to_provider_error(e, self.provider_name, status_code=e.code) from e
        except Exception as e:
            logger.warning(f"Vertex AI call failed (model={self._model_name}): {e}")
            raise to_provider_error(e, self.provider_name) from e

        llm_response = VertexAIResponseMapper.map_response(response)
        self._log_response(llm_response)
        return llm_response
