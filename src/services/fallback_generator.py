import logging
import re
from typing import Callable, Dict, List, Sequence

from src.schemas.enums.content_kind import ContentKind
from src.schemas.enums.specialist_tag import SpecialistTag
from src.schemas.models.common.content_item import ContentItem, ContentItemAdapter, new_generated_id

logger = logging.getLogger(__name__)

FALLBACK_TAGS: Sequence[SpecialistTag] = (
    SpecialistTag.NOVA,
    SpecialistTag.SPARK,
    SpecialistTag.PRISM,
    SpecialistTag.SPARK,
    SpecialistTag.LOTUS,
)

FALLBACK_KINDS: Sequence[ContentKind] = (
    ContentKind.FACT,
    ContentKind.FUN_FACT,
    ContentKind.QUIZ,
    ContentKind.CREATIVE,
    ContentKind.MINDFULNESS,
)

QUIZ_CORRECT_INDEX = 3


def simplify_query(query: str) -> str:
    """템플릿 삽입용 질의 정리 (소문자, 문장부호 제거)"""
    simplified = re.sub(r"[?.,!]", "", query.lower()).strip()
    return simplified or query.strip() or "this topic"


def _fact(topic: str) -> Dict:
    return {
        "fact": f"{topic} is fascinating because it connects to many areas of knowledge. "
                f"Scientists are constantly discovering new aspects about this topic!",
        "title": "Fascinating Discovery",
        "rabbitHoles": [f"Why is {topic} important?", f"How does {topic} work?"],
    }


def _fun_fact(topic: str) -> Dict:
    return {
        "text": f"Did you know? {topic} has connections to creativity and imagination that might surprise you!",
        "rabbitHoles": [f"{topic} in art", f"Creative uses of {topic}"],
    }


def _quiz(topic: str) -> Dict:
    return {
        "question": f"What's one thing that makes {topic} so interesting to explore?",
        "options": [
            "It connects to many everyday experiences",
            "Scientists are still making discoveries about it",
            "It helps us understand the world better",
            "All of the above",
        ],
        "correctIndex": QUIZ_CORRECT_INDEX,
        "explanation": f"{topic} is fascinating for all these reasons! It connects to our daily lives, "
                       f"continues to be researched, and helps us make sense of the world around us.",
    }


def _creative(topic: str) -> Dict:
    return {
        "prompt": f"Draw or describe how you imagine {topic} might look or work!",
        "description": f"Use your imagination to explore {topic} in a creative way. There are no wrong answers!",
        "examples": ["You could draw a picture", "Write a short story", "Create a diagram"],
    }


def _mindfulness(topic: str) -> Dict:
    return {
        "exercise": f"Take a moment to think about how {topic} might connect to your own experiences. "
                    f"What does it remind you of?",
        "title": f"Reflect on {topic}",
        "duration": "2 minutes",
    }


TEMPLATES: Dict[ContentKind, Callable[[str], Dict]] = {
    ContentKind.FACT: _fact,
    ContentKind.FUN_FACT: _fun_fact,
    ContentKind.QUIZ: _quiz,
    ContentKind.CREATIVE: _creative,
    ContentKind.MINDFULNESS: _mindfulness,
}


class DeterministicFallbackGenerator:
    """
    Provider를 사용할 수 없을 때 질의 기반 템플릿으로 콘텐츠를 합성한다.
    I/O가 없고 항상 성공하며, 랜덤 요소 없이 태그/종류를 순환 선택한다.
    """

    def __init__(
        self,
        tags: Sequence[SpecialistTag] = FALLBACK_TAGS,
        kinds: Sequence[ContentKind] = FALLBACK_KINDS,
    ):
        missing = [kind.value for kind in kinds if kind not in TEMPLATES]
        if missing:
            raise ValueError(f"No fallback template for kinds: {missing}")
        self.tags = tuple(tags)
        self.kinds = tuple(kinds)

    def generate(self, query: str, count: int, container_id: str = "") -> List[ContentItem]:
        topic = simplify_query(query)
        items: List[ContentItem] = []
        for i in range(max(count, 0)):
            kind = self.kinds[i % len(self.kinds)]
            items.append(ContentItemAdapter.validate_python({
                "id": new_generated_id(),
                "container_id": container_id,
                "specialist_tag": self.tags[i % len(self.tags)],
                "kind": kind,
                "payload": TEMPLATES[kind](topic),
            }))

        logger.info(f"Generated {len(items)} fallback items for query='{query}'")
        return items
