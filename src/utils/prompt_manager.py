from typing import Sequence

from src.core.llm.enums import ProviderType
from src.schemas.enums.specialist_tag import SpecialistTag
from src.schemas.models.api.generation_request import GenerationRequest
from src.utils.prompt_renderer import PromptRenderer
from src.utils.prompt_template import PromptTemplate


class PromptManager:
    """
    High-level manager for constructing prompts.
    Implemented as a Singleton to share the internal PromptRenderer instance.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(PromptManager, cls).__new__(cls)
            # Initialize renderer only once
            cls._instance._renderer = PromptRenderer()
        return cls._instance

    @property
    def renderer(self) -> PromptRenderer:
        """Access the underlying PromptRenderer instance."""
        return self._renderer

    def get_system_instruction(self) -> str:
        template = PromptTemplate.CONTENT_BLOCK_SYSTEM.get_template(self._renderer)
        return self._renderer.render(template)

    def get_content_block_generation_prompt(
        self,
        request: GenerationRequest,
        provider: ProviderType,
        specialists: Sequence[SpecialistTag] = tuple(SpecialistTag),
    ) -> str:
        """
        콘텐츠 블록 생성 프롬프트.
        프로필(나이/관심사/언어)은 해석하지 않고 그대로 전달한다.

        Args:
            request: 생성 요청
            provider: 대상 Provider (응답 envelope 형태가 다름)
            specialists: 배정 가능한 스페셜리스트
        """
        template = PromptTemplate.CONTENT_BLOCK_GENERATION.get_template(self._renderer, provider)
        return self._renderer.render(
            template,
            query=request.query.strip(),
            requested_count=request.requested_count,
            skip_count=request.skip_count,
            age=request.profile.age,
            interests=request.profile.interests,
            language=request.profile.language,
            specialists=[tag.value for tag in specialists],
        )
