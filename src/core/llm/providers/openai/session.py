"""OpenAI Responses API 생성 세션"""

import logging
from typing import Any, Dict, List, Optional

import openai

from src.core.llm.base.session import LLMProviderSession
from src.core.llm.enums import ProviderType
from src.core.llm.error_mapping import to_provider_error
from src.core.llm.exceptions import ProviderOverloadedError, ProviderTransportError
from src.core.llm.models import LLMResponse
from src.core.llm.providers.openai.response_mapper import OpenAIResponseMapper

logger = logging.getLogger(__name__)


class OpenAISession(LLMProviderSession):

    provider_type = ProviderType.OPENAI

    def __init__(
        self,
        client: openai.AsyncOpenAI,
        model_name: str,
        temperature: float,
        system_instruction: Optional[str] = None,
        text_format: Optional[Dict[str, Any]] = None,
        max_output_tokens: Optional[int] = None,
    ):
        super().__init__(model_name)
        self._client = client
        self._temperature = temperature
        self._system_instruction = system_instruction
        self._text_format = text_format
        self._max_output_tokens = max_output_tokens

    async def generate_content(self, prompt: str) -> LLMResponse:
        request = self._build_request(prompt)

        try:
            response = await self._client.responses.create(**request)
        except openai.RateLimitError as e:
            raise ProviderOverloadedError(str(e), provider=self.provider_name, original_error=e) from e
        except (openai.APIConnectionError, openai.APITimeoutError) as e:
            raise ProviderTransportError(str(e), provider=self.provider_name, original_error=e) from e
        except openai.APIStatusError as e:
            # 503/529 → 과부하, 나머지 상태 코드 → 전송 오류
            logger.warning(f"OpenAI API status error (status={e.status_code}, model={self._model_name})")
            raise to_provider_error(e, self.provider_name, status_code=e.status_code) from e
        except Exception as e:
            logger.warning(f"OpenAI call failed (model={self._model_name}): {e}")
            raise to_provider_error(e, self.provider_name) from e

        llm_response = OpenAIResponseMapper.map_response(response)
        self._log_response(llm_response)
        return llm_response

    def _build_request(self, prompt: str) -> Dict[str, Any]:
        messages: List[Dict[str, str]] = []
        if self._system_instruction:
            # Responses API의 시스템 지시는 developer role
            messages.append({"role": "developer", "content": self._system_instruction})
        messages.append({"role": "user", "content": prompt})

        request: Dict[str, Any] = {
            "model": self._model_name,
            "input": messages,
            "temperature": self._temperature,
        }
        if self._text_format:
            request["text"] = {"format": self._text_format}
        if self._max_output_tokens:
            request["max_output_tokens"] = self._max_output_tokens
        return request
