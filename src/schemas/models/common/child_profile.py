from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ChildProfile(BaseModel):
    """프롬프트에 그대로 전달되는 아이 프로필 (생성 로직에서는 해석하지 않음)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    child_id: Optional[str] = Field(default=None, description="보상 알림 대상 아이 ID")
    age: int = Field(default=10, description="아이 나이")
    interests: List[str] = Field(default_factory=list, description="관심사")
    language: str = Field(default="English", description="생성 언어")
