from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.schemas.enums.spark_trigger import SparkTrigger


class SparkNotifyRequest(BaseModel):
    """보상 포인트 지급 알림 (응답 없는 단방향 계약)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    child_id: str = Field(..., description="아이 ID")
    trigger: SparkTrigger = Field(..., description="보상 트리거")
    reason: Optional[str] = Field(default=None, description="사유 (없으면 트리거 기본 사유)")
