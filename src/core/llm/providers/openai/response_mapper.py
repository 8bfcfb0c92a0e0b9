"""OpenAI Responses API 응답 → LLMResponse"""

from typing import Any

from src.core.llm.enums import FinishReason
from src.core.llm.models import LLMResponse, TokenUsage

# status가 incomplete일 때 incomplete_details.reason으로 세분화
INCOMPLETE_REASON_MAP = {
    "max_output_tokens": FinishReason.MAX_TOKENS,
    "content_filter": FinishReason.CONTENT_FILTER,
}


class OpenAIResponseMapper:

    @classmethod
    def map_response(cls, response: Any) -> LLMResponse:
        return LLMResponse(
            text=cls._collect_text(response),
            finish_reason=cls._finish_reason(response),
            usage=cls._usage(response),
            raw_response=response,
        )

    @staticmethod
    def _collect_text(response: Any) -> str:
        """output_text(SDK 편의 속성)가 없으면 message 출력의 output_text 파트를 이어 붙인다."""
        text = getattr(response, "output_text", None)
        if text:
            return text

        parts = []
        for output in getattr(response, "output", None) or []:
            if getattr(output, "type", None) != "message":
                continue
            for content in getattr(output, "content", None) or []:
                if getattr(content, "type", None) == "output_text" and getattr(content, "text", None):
                    parts.append(content.text)
        return "".join(parts)

    @staticmethod
    def _finish_reason(response: Any) -> FinishReason:
        status = getattr(response, "status", None)
        if status == "completed":
            return FinishReason.STOP
        if status == "incomplete":
            details = getattr(response, "incomplete_details", None)
            return INCOMPLETE_REASON_MAP.get(getattr(details, "reason", None), FinishReason.MAX_TOKENS)
        return FinishReason.OTHER

    @staticmethod
    def _usage(response: Any) -> TokenUsage:
        usage = getattr(response, "usage", None)
        if usage is None:
            return TokenUsage()
        return TokenUsage(
            prompt_tokens=getattr(usage, "input_tokens", 0) or 0,
            completion_tokens=getattr(usage, "output_tokens", 0) or 0,
            total_tokens=getattr(usage, "total_tokens", 0) or 0,
        )
