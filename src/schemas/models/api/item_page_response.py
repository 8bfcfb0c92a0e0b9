from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.schemas.models.common.content_item import ContentItem


class ItemPageResponse(BaseModel):
    """컨테이너 아이템 offset 페이지"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: List[ContentItem] = Field(default_factory=list)
    total: int = Field(..., description="컨테이너에 저장된 전체 아이템 수")
    offset: int = 0
    has_more: bool = False
