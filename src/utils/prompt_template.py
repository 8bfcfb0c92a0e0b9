from enum import Enum
from typing import Dict

from jinja2 import Template

from src.core.llm.enums import ProviderType
from src.utils.prompt_renderer import PromptRenderer


class PromptTemplate(Enum):
    """
    프롬프트 템플릿 정의 및 캐시 관리를 위한 내부 Enum.
    provider_specific 템플릿은 provider별 경로(task/{provider}/...)에서 로드된다.
    (OpenAI JSON 모드는 최상위 객체만 허용하므로 envelope 형태가 다르다)
    """

    CONTENT_BLOCK_GENERATION = ("content_block_generation.jinja2", True)
    CONTENT_BLOCK_SYSTEM = ("system/content_block_system.jinja2", False)

    def __init__(self, template_name: str, provider_specific: bool):
        self.template_name = template_name
        self.provider_specific = provider_specific
        self._cached_templates: Dict[str, Template] = {}

    def get_template(self, renderer: PromptRenderer, provider: ProviderType = None) -> Template:
        """
        Provider별 Template을 캐시에서 가져오거나 처음 호출 시 로드하여 캐시에 저장.

        Args:
            renderer: PromptRenderer 인스턴스
            provider: 대상 Provider (provider_specific 템플릿에서만 사용)
        """
        if self.provider_specific:
            if provider is None:
                raise ValueError(f"{self.name} requires a provider")
            cache_key = provider.value
            template_path = f"task/{provider.template_dir}/{self.template_name}"
        else:
            cache_key = "common"
            template_path = self.template_name

        if cache_key not in self._cached_templates:
            self._cached_templates[cache_key] = renderer.get_template(template_path)
        return self._cached_templates[cache_key]
