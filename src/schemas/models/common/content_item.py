import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel
from typing_extensions import Annotated

from src.schemas.enums.content_kind import ContentKind
from src.schemas.enums.specialist_tag import SpecialistTag
from src.schemas.models.common.content_payload import (
    ActivityPayload,
    ContentPayload,
    CreativePayload,
    FactPayload,
    FlashcardPayload,
    FunFactPayload,
    MindfulnessPayload,
    NewsPayload,
    QuizPayload,
    RiddlePayload,
    TaskPayload,
)

GENERATED_ID_PREFIX = "generated-"
PLACEHOLDER_ID_PREFIX = "placeholder-"


def new_generated_id() -> str:
    """Orchestrator가 부여하는 임시 id"""
    return f"{GENERATED_ID_PREFIX}{uuid.uuid4().hex}"


def new_placeholder_id() -> str:
    """클라이언트 placeholder용 임시 id (저장되지 않음)"""
    return f"{PLACEHOLDER_ID_PREFIX}{uuid.uuid4().hex}"


def is_temporary_id(item_id: str) -> bool:
    return item_id.startswith((GENERATED_ID_PREFIX, PLACEHOLDER_ID_PREFIX))


class BaseContentItem(BaseModel):
    """
    콘텐츠 블록 공통 필드 (Discriminated Union 기반).
    kind 값이 payload 모델을 결정하며, kind/payload 불일치는 생성 시점에 ValidationError가 된다.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_generated_id, description="아이템 식별자 (임시 또는 영구)")
    container_id: str = Field(description="아이템이 속한 컨테이너(학습 세션/토픽) ID")
    specialist_tag: SpecialistTag = Field(
        default=SpecialistTag.WHIZZY,
        validation_alias=AliasChoices("specialist_tag", "specialistTag", "specialist_id"),
        description="UI 테마용 스페셜리스트",
    )
    kind: ContentKind
    payload: ContentPayload
    liked: bool = False
    bookmarked: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="생성 시간")

    @field_validator("specialist_tag", mode="before")
    @classmethod
    def coerce_specialist(cls, value: Any) -> SpecialistTag:
        return SpecialistTag.coerce(value)

    @property
    def is_temporary(self) -> bool:
        return is_temporary_id(self.id)

    def main_text(self) -> str:
        return self.payload.main_text()

    def matches(self, text: str) -> bool:
        """payload 텍스트 필드에 대한 대소문자 무시 부분 문자열 검색"""
        needle = text.strip().lower()
        if not needle:
            return True
        return any(needle in value.lower() for value in self.payload.text_fields())


class FactItem(BaseContentItem):
    kind: Literal[ContentKind.FACT] = ContentKind.FACT
    payload: FactPayload


class FunFactItem(BaseContentItem):
    kind: Literal[ContentKind.FUN_FACT] = ContentKind.FUN_FACT
    payload: FunFactPayload


class QuizItem(BaseContentItem):
    kind: Literal[ContentKind.QUIZ] = ContentKind.QUIZ
    payload: QuizPayload


class FlashcardItem(BaseContentItem):
    kind: Literal[ContentKind.FLASHCARD] = ContentKind.FLASHCARD
    payload: FlashcardPayload


class CreativeItem(BaseContentItem):
    kind: Literal[ContentKind.CREATIVE] = ContentKind.CREATIVE
    payload: CreativePayload


class TaskItem(BaseContentItem):
    kind: Literal[ContentKind.TASK] = ContentKind.TASK
    payload: TaskPayload


class RiddleItem(BaseContentItem):
    kind: Literal[ContentKind.RIDDLE] = ContentKind.RIDDLE
    payload: RiddlePayload


class ActivityItem(BaseContentItem):
    kind: Literal[ContentKind.ACTIVITY] = ContentKind.ACTIVITY
    payload: ActivityPayload


class NewsItem(BaseContentItem):
    kind: Literal[ContentKind.NEWS] = ContentKind.NEWS
    payload: NewsPayload


class MindfulnessItem(BaseContentItem):
    kind: Literal[ContentKind.MINDFULNESS] = ContentKind.MINDFULNESS
    payload: MindfulnessPayload


ContentItem = Annotated[
    Union[
        FactItem,
        FunFactItem,
        QuizItem,
        FlashcardItem,
        CreativeItem,
        TaskItem,
        RiddleItem,
        ActivityItem,
        NewsItem,
        MindfulnessItem,
    ],
    Field(discriminator="kind"),
]

ContentItemAdapter = TypeAdapter(ContentItem)
ContentItemListAdapter = TypeAdapter(List[ContentItem])

PAYLOAD_MODELS: Dict[ContentKind, type] = {
    ContentKind.FACT: FactPayload,
    ContentKind.FUN_FACT: FunFactPayload,
    ContentKind.QUIZ: QuizPayload,
    ContentKind.FLASHCARD: FlashcardPayload,
    ContentKind.CREATIVE: CreativePayload,
    ContentKind.TASK: TaskPayload,
    ContentKind.RIDDLE: RiddlePayload,
    ContentKind.ACTIVITY: ActivityPayload,
    ContentKind.NEWS: NewsPayload,
    ContentKind.MINDFULNESS: MindfulnessPayload,
}
