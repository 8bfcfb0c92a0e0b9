from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StringConstraints, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing_extensions import Annotated

# 필수 텍스트 필드: 공백만 있는 값은 허용하지 않는다.
RequiredText = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ContentPayload(BaseModel):
    """
    kind별 payload 기본 클래스.
    필드는 camelCase(correctIndex, rabbitHoles)로 직렬화되며 snake_case 입력도 허용한다.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def text_fields(self) -> List[str]:
        """검색 대상이 되는 모든 텍스트 값 (리스트 필드 포함)"""
        values: List[str] = []
        for name in type(self).model_fields:
            value = getattr(self, name)
            if isinstance(value, str):
                values.append(value)
            elif isinstance(value, list):
                values.extend(v for v in value if isinstance(v, str))
        return values

    def main_text(self) -> str:
        raise NotImplementedError


class FactPayload(ContentPayload):
    fact: RequiredText
    title: RequiredText
    source: Optional[str] = None
    rabbit_holes: List[str] = Field(default_factory=list)

    def main_text(self) -> str:
        return self.fact


class FunFactPayload(ContentPayload):
    # 생성 모델이 funFact에도 "fact" 키를 쓰는 경우가 있어 둘 다 받는다.
    text: RequiredText = Field(validation_alias=AliasChoices("text", "fact"))
    title: Optional[str] = None
    rabbit_holes: List[str] = Field(default_factory=list)

    def main_text(self) -> str:
        return self.text


class QuizPayload(ContentPayload):
    question: RequiredText
    options: List[RequiredText] = Field(min_length=2)
    correct_index: int
    explanation: Optional[str] = None
    difficulty: Optional[str] = None

    @model_validator(mode="after")
    def check_correct_index(self) -> "QuizPayload":
        if not 0 <= self.correct_index < len(self.options):
            raise ValueError(
                f"correctIndex {self.correct_index} out of range for {len(self.options)} options"
            )
        return self

    def main_text(self) -> str:
        return self.question


class FlashcardPayload(ContentPayload):
    front: RequiredText
    back: RequiredText
    hint: Optional[str] = None
    topic: Optional[str] = None

    def main_text(self) -> str:
        return self.front


class CreativePayload(ContentPayload):
    prompt: RequiredText
    description: Optional[str] = None
    examples: List[str] = Field(default_factory=list)

    def main_text(self) -> str:
        return self.prompt


class TaskPayload(ContentPayload):
    task: RequiredText
    title: Optional[str] = None
    reward: Optional[str] = None
    steps: List[str] = Field(default_factory=list)

    @field_validator("reward", mode="before")
    @classmethod
    def stringify_reward(cls, value: Any) -> Any:
        return str(value) if isinstance(value, (int, float)) else value

    def main_text(self) -> str:
        return self.task


class RiddlePayload(ContentPayload):
    riddle: RequiredText
    answer: RequiredText
    hint: Optional[str] = None

    def main_text(self) -> str:
        return self.riddle


class ActivityPayload(ContentPayload):
    activity: RequiredText
    title: Optional[str] = None
    instructions: Optional[str] = None
    steps: List[str] = Field(default_factory=list)
    materials: List[str] = Field(default_factory=list)

    def main_text(self) -> str:
        return self.activity


class NewsPayload(ContentPayload):
    headline: RequiredText
    summary: RequiredText
    body: Optional[str] = None
    source: Optional[str] = None

    def main_text(self) -> str:
        return self.headline


class MindfulnessPayload(ContentPayload):
    exercise: RequiredText
    title: Optional[str] = None
    instruction: Optional[str] = None
    duration: Optional[str] = None
    benefits: List[str] = Field(default_factory=list)

    @field_validator("duration", mode="before")
    @classmethod
    def stringify_duration(cls, value: Any) -> Any:
        """duration은 숫자(분)로 오기도 한다."""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return f"{value} minutes"
        return value

    def main_text(self) -> str:
        return self.exercise
