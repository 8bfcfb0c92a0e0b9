from pathlib import Path
from typing import Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

# src/prompts/templates/
DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "prompts" / "templates"


class PromptRenderer:
    """
    Jinja2 렌더러. 정의되지 않은 변수는 빈 문자열 대신 오류로 처리한다 (StrictUndefined).
    """

    def __init__(self, template_dir: Optional[Union[str, Path]] = None):
        self.template_dir = Path(template_dir) if template_dir else DEFAULT_TEMPLATE_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            undefined=StrictUndefined,
            keep_trailing_newline=False,
            autoescape=False,
        )

    def get_template(self, template_name: str) -> Template:
        return self.env.get_template(template_name)

    def render(self, template: Union[str, Template], **context) -> str:
        """템플릿 이름 또는 로드된 Template을 렌더링하고 앞뒤 공백을 제거한다."""
        if isinstance(template, str):
            template = self.get_template(template)
        return template.render(**context).strip()
