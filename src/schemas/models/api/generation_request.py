from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.schemas.models.common.child_profile import ChildProfile


class GenerationRequest(BaseModel):
    """
    콘텐츠 생성 요청 값 객체.
    유효성(빈 query, requested_count <= 0, skip_count < 0)은 Orchestrator가 검사한다.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    query: str = Field(..., description="토픽 질의")
    container_id: str = Field(..., description="컨테이너 ID")
    requested_count: int = Field(..., description="요청 아이템 수")
    quick_mode: bool = Field(default=False, description="빠른 첫 화면용 요청 여부")
    skip_count: int = Field(default=0, description="이미 전달된 아이템 수 (중복 방지용)")
    profile: ChildProfile = Field(default_factory=ChildProfile, description="아이 프로필")
