"""Provider 중립 세션 설정/응답 모델"""

from dataclasses import dataclass, field
from typing import Any, Optional

from src.core.llm.enums import FinishReason, ResponseFormat


@dataclass
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


@dataclass
class LLMResponse:
    """세션이 반환하는 응답. 원문 텍스트는 ResponseParser가 해석한다."""
    text: str
    finish_reason: FinishReason
    usage: TokenUsage = field(default_factory=TokenUsage)
    raw_response: Any = None

    @property
    def has_text(self) -> bool:
        return bool(self.text and self.text.strip())


@dataclass
class SessionConfig:
    """
    생성 세션 설정.
    1차/2차 Provider 모두 같은 시스템 지시문과 온도를 사용하고 모델명만 다르다.
    """
    name: str
    model_name: str
    temperature: float
    system_instruction: Optional[str] = None
    response_format: ResponseFormat = ResponseFormat.JSON
    max_output_tokens: Optional[int] = None
