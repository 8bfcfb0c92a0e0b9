from enum import Enum
from typing import Any


class ContentKind(str, Enum):
    """
    콘텐츠 블록 종류. kind가 payload의 형태를 결정한다.
    """
    FACT = "fact"
    FUN_FACT = "funFact"
    QUIZ = "quiz"
    FLASHCARD = "flashcard"
    CREATIVE = "creative"
    TASK = "task"
    RIDDLE = "riddle"
    ACTIVITY = "activity"
    NEWS = "news"
    MINDFULNESS = "mindfulness"

    @classmethod
    def coerce(cls, value: Any) -> "ContentKind":
        """
        알 수 없는 kind는 거부하지 않고 FACT로 강등한다.
        대소문자/구분자 차이("fun_fact", "FUNFACT")는 허용한다.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.FACT

        normalized = value.strip().replace("_", "").replace("-", "").lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return cls.FACT
