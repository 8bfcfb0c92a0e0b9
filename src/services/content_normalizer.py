import logging
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from src.core.llm.exceptions import ParseError
from src.schemas.enums.content_kind import ContentKind
from src.schemas.enums.specialist_tag import SpecialistTag
from src.schemas.models.common.content_item import ContentItem, ContentItemAdapter, new_generated_id

logger = logging.getLogger(__name__)

DEFAULT_QUIZ_OPTIONS = ["Option A", "Option B", "Option C", "Option D"]

# kind별 필수 텍스트 필드와 질의 기반 기본값
REQUIRED_TEXT_DEFAULTS: Dict[ContentKind, Dict[str, Callable[[str], str]]] = {
    ContentKind.FACT: {
        "fact": lambda q: f"{q} is an interesting topic with many fascinating aspects to learn about.",
        "title": lambda q: f"Fact About {q}",
    },
    ContentKind.FUN_FACT: {
        "text": lambda q: f"Did you know that {q} has some amazing properties that scientists are still studying?",
    },
    ContentKind.QUIZ: {
        "question": lambda q: f"What do you know about {q}?",
        "explanation": lambda q: f"This is important to understand about {q}.",
    },
    ContentKind.FLASHCARD: {
        "front": lambda q: f"What is one thing you learned about {q}?",
        "back": lambda q: f"{q} has many fascinating details worth remembering.",
    },
    ContentKind.CREATIVE: {
        "prompt": lambda q: f"Draw or describe how you imagine {q}!",
    },
    ContentKind.TASK: {
        "task": lambda q: f"Find three new things about {q} and share them with someone.",
    },
    ContentKind.RIDDLE: {
        "riddle": lambda q: f"I am something you can learn about when you explore {q}. What am I?",
        "answer": lambda q: q,
    },
    ContentKind.ACTIVITY: {
        "activity": lambda q: f"Make a mini poster about {q}.",
    },
    ContentKind.NEWS: {
        "headline": lambda q: f"New discoveries about {q}",
        "summary": lambda q: f"Researchers keep finding new things about {q}.",
    },
    ContentKind.MINDFULNESS: {
        "exercise": lambda q: f"Take a slow breath and think about {q}. What does it remind you of?",
    },
}

# 실제 키가 다른 이름으로 오는 경우 (예: funFact의 fact, mindfulness의 instruction)
FIELD_FALLBACK_KEYS: Dict[ContentKind, Dict[str, tuple]] = {
    ContentKind.FUN_FACT: {"text": ("fact",)},
    ContentKind.MINDFULNESS: {"exercise": ("instruction",)},
    ContentKind.RIDDLE: {"riddle": ("question",)},
    ContentKind.NEWS: {"summary": ("body",)},
}

RABBIT_HOLE_KINDS = (ContentKind.FACT, ContentKind.FUN_FACT)

_META_KEYS = ("kind", "type", "specialist_tag", "specialistTag", "specialist_id", "specialist", "id")
_MAIN_TEXT_KEYS = ("fact", "text", "content", "description", "question", "prompt", "task", "activity", "summary")


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


class ContentNormalizer:
    """
    Provider가 반환한 원시 블록을 타입이 보장된 ContentItem으로 정규화한다.
    - 알 수 없는 kind는 거부하지 않고 fact로 강등
    - 누락된 필수 필드는 질의 기반 기본값으로 보정
    - 객체가 아닌 항목은 제외
    """

    def normalize(self, raw_items: List[Any], query: str, container_id: str = "") -> List[ContentItem]:
        items: List[ContentItem] = []
        for index, raw in enumerate(raw_items):
            if not isinstance(raw, dict):
                logger.warning(f"Dropping non-object entry at index {index}: {type(raw).__name__}")
                continue

            item = self._normalize_one(raw, query, container_id)
            if item is None:
                logger.warning(f"Dropping unrecoverable entry at index {index}")
                continue
            items.append(item)

        if not items:
            raise ParseError(f"No usable content items among {len(raw_items)} parsed entries")
        return items

    def _normalize_one(self, raw: Dict[str, Any], query: str, container_id: str) -> Optional[ContentItem]:
        raw_kind = raw.get("kind", raw.get("type"))
        kind = ContentKind.coerce(raw_kind)
        if kind == ContentKind.FACT and raw_kind != ContentKind.FACT.value:
            logger.info(f"Coercing unknown kind '{raw_kind}' to fact")

        specialist = SpecialistTag.coerce(
            raw.get("specialist_tag") or raw.get("specialistTag") or raw.get("specialist_id") or raw.get("specialist")
        )
        payload = self._extract_payload(raw)

        try:
            return self._build(kind, specialist, self._repair(kind, payload, query), container_id)
        except ValidationError as e:
            if kind == ContentKind.FACT:
                logger.warning(f"Fact entry failed validation: {e.error_count()} errors")
                return None
            logger.warning(f"{kind.value} entry failed validation, downgrading to fact: {e.error_count()} errors")

        try:
            return self._build(ContentKind.FACT, specialist, self._as_fact(payload, query), container_id)
        except ValidationError:
            return None

    def _extract_payload(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """content/payload envelope를 풀고, 없으면 메타 키를 제외한 나머지를 payload로 본다."""
        for key in ("payload", "content"):
            value = raw.get(key)
            if isinstance(value, dict):
                return dict(value)
            if isinstance(value, str) and value.strip():
                return {"text": value}
        return {k: v for k, v in raw.items() if k not in _META_KEYS}

    def _repair(self, kind: ContentKind, payload: Dict[str, Any], query: str) -> Dict[str, Any]:
        repaired = dict(payload)

        if kind == ContentKind.FACT and _is_blank(repaired.get("fact")):
            main_text = self._main_text(repaired)
            if main_text:
                repaired["fact"] = main_text

        fallback_keys = FIELD_FALLBACK_KEYS.get(kind, {})
        for field, default in REQUIRED_TEXT_DEFAULTS.get(kind, {}).items():
            if not _is_blank(repaired.get(field)):
                continue
            alternative = next((repaired[k] for k in fallback_keys.get(field, ()) if not _is_blank(repaired.get(k))), None)
            repaired[field] = alternative if alternative is not None else default(query)

        if kind == ContentKind.QUIZ:
            self._repair_quiz(repaired)

        if kind in RABBIT_HOLE_KINDS:
            holes = repaired.get("rabbitHoles", repaired.get("rabbit_holes"))
            if not isinstance(holes, list) or len(holes) < 2:
                repaired.pop("rabbit_holes", None)
                repaired["rabbitHoles"] = [
                    f"What else can we learn about {query}?",
                    f"How does {query} affect our daily life?",
                ]
        return repaired

    @staticmethod
    def _repair_quiz(payload: Dict[str, Any]) -> None:
        options = payload.get("options")
        if isinstance(options, list):
            options = [str(option).strip() for option in options if option is not None and str(option).strip()]
        if not isinstance(options, list) or len(options) < 2:
            options = list(DEFAULT_QUIZ_OPTIONS)
        payload["options"] = options

        index = payload.pop("correct_index", payload.get("correctIndex"))
        try:
            index = int(index)
        except (TypeError, ValueError):
            index = 0
        payload["correctIndex"] = index if 0 <= index < len(options) else 0

    def _as_fact(self, payload: Dict[str, Any], query: str) -> Dict[str, Any]:
        return {
            "fact": self._main_text(payload) or REQUIRED_TEXT_DEFAULTS[ContentKind.FACT]["fact"](query),
            "title": payload.get("title") if not _is_blank(payload.get("title")) else f"Fact About {query}",
        }

    @staticmethod
    def _main_text(payload: Dict[str, Any]) -> Optional[str]:
        for key in _MAIN_TEXT_KEYS:
            if not _is_blank(payload.get(key)):
                return payload[key].strip()
        for value in payload.values():
            if not _is_blank(value):
                return value.strip()
        return None

    @staticmethod
    def _build(kind: ContentKind, specialist: SpecialistTag, payload: Dict[str, Any], container_id: str) -> ContentItem:
        return ContentItemAdapter.validate_python({
            "id": new_generated_id(),
            "container_id": container_id,
            "specialist_tag": specialist,
            "kind": kind,
            "payload": payload,
        })
