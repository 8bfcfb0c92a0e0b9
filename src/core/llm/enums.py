"""생성 Provider 공통 Enum"""

from enum import Enum


class ProviderType(str, Enum):
    """콘텐츠 생성 Provider (PRIMARY/SECONDARY 설정값)"""
    VERTEX_AI = "VERTEX_AI"      # Gemini on Vertex AI (google-genai SDK)
    OPENAI = "OPENAI"            # OpenAI Responses API

    @property
    def template_dir(self) -> str:
        """Provider별 생성 프롬프트 디렉토리 (task/<dir>/)"""
        return self.value.lower()


class FinishReason(str, Enum):
    """응답 종료 사유 (SDK별 값을 이 값으로 정규화한다)"""
    STOP = "STOP"
    MAX_TOKENS = "MAX_TOKENS"          # 잘린 JSON
    SAFETY = "SAFETY"
    CONTENT_FILTER = "CONTENT_FILTER"
    RECITATION = "RECITATION"
    OTHER = "OTHER"

    @property
    def is_usable(self) -> bool:
        """텍스트를 파서에 넘길 수 있는지 여부"""
        return self in (FinishReason.STOP, FinishReason.OTHER)


class ResponseFormat(str, Enum):
    TEXT = "TEXT"
    JSON = "JSON"

    @property
    def mime_type(self) -> str:
        return "application/json" if self is ResponseFormat.JSON else "text/plain"
