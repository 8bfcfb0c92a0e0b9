from typing import List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.schemas.models.common.content_item import ContentItem


class GenerateResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    items: List[ContentItem]
    source: str
