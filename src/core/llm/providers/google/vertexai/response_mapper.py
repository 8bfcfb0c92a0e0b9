"""google-genai 응답을 LLMResponse로 변환"""

import logging
from typing import TYPE_CHECKING, Optional

from src.core.llm.enums import FinishReason
from src.core.llm.models import LLMResponse, TokenUsage

if TYPE_CHECKING:
    from google.genai import types

logger = logging.getLogger(__name__)


class VertexAIResponseMapper:
    """
    GenerateContentResponse → LLMResponse.
    프롬프트 자체가 차단된 경우(prompt_feedback.block_reason)는 후보가 없으므로
    CONTENT_FILTER로 취급한다.
    """

    FINISH_REASON_MAP = {
        "STOP": FinishReason.STOP,
        "MAX_TOKENS": FinishReason.MAX_TOKENS,
        "SAFETY": FinishReason.SAFETY,
        "PROHIBITED_CONTENT": FinishReason.CONTENT_FILTER,
        "BLOCKLIST": FinishReason.CONTENT_FILTER,
        "SPII": FinishReason.CONTENT_FILTER,
        "RECITATION": FinishReason.RECITATION,
    }

    @classmethod
    def map_response(cls, response: "types.GenerateContentResponse") -> LLMResponse:
        return LLMResponse(
            text=cls._extract_text(response),
            finish_reason=cls._extract_finish_reason(response),
            usage=cls._extract_usage(response),
            raw_response=response,
        )

    @staticmethod
    def _extract_text(response: "types.GenerateContentResponse") -> str:
        # response.text는 후보가 없거나 text 파트가 없으면 None
        try:
            return response.text or ""
        except (ValueError, AttributeError) as e:
            logger.debug(f"Response has no text part: {e}")
            return ""

    @classmethod
    def _extract_finish_reason(cls, response: "types.GenerateContentResponse") -> FinishReason:
        feedback = getattr(response, "prompt_feedback", None)
        if feedback is not None and getattr(feedback, "block_reason", None):
            return FinishReason.CONTENT_FILTER

        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            return FinishReason.OTHER

        reason = getattr(candidates[0], "finish_reason", None)
        if reason is None:
            return FinishReason.OTHER
        return cls.FINISH_REASON_MAP.get(cls._reason_name(reason), FinishReason.OTHER)

    @staticmethod
    def _reason_name(reason) -> Optional[str]:
        return reason.name if hasattr(reason, "name") else str(reason)

    @staticmethod
    def _extract_usage(response: "types.GenerateContentResponse") -> TokenUsage:
        usage = getattr(response, "usage_metadata", None)
        if not usage:
            return TokenUsage()
        return TokenUsage(
            prompt_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            completion_tokens=getattr(usage, "candidates_token_count", 0) or 0,
            total_tokens=getattr(usage, "total_token_count", 0) or 0,
        )
