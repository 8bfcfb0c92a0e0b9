import json
import logging
import re
from typing import Any, List, Optional

from src.core.llm.exceptions import ParseError

logger = logging.getLogger(__name__)

# 블록 목록을 담는 것으로 알려진 envelope 키 (우선 탐색)
ENVELOPE_KEYS = ("blocks", "items", "contentBlocks", "content_blocks")

_CODE_FENCE = re.compile(r"^```[a-zA-Z0-9_-]*\s*|\s*```$")
_TRAILING_COMMA = re.compile(r",\s*([\]}])")
_ARRAY_SPAN = re.compile(r"\[[\s\S]*\]")


class ResponseParser:
    """
    Provider 원문 응답에서 구조화된 아이템 목록을 추출한다.
    여러 envelope 형태({"blocks": [...]}, {"data": {"blocks": [...]}} 등)를 허용하며,
    목록을 찾지 못하면 빈 결과 대신 ParseError를 발생시킨다.
    """

    def parse(self, raw_text: str) -> List[Any]:
        if raw_text is None or not raw_text.strip():
            raise ParseError("Provider returned an empty payload")

        decoded = self._decode(raw_text)
        items = self._find_list(decoded)
        if items is None:
            raise ParseError(f"No list found in provider payload (top-level type: {type(decoded).__name__})")
        return items

    def _decode(self, raw_text: str) -> Any:
        cleaned = _CODE_FENCE.sub("", raw_text.strip()).strip()

        try:
            return json.loads(cleaned)
        except json.JSONDecodeError as e:
            logger.warning(f"Strict JSON decode failed at position {e.pos}: {e.msg}")

        # 시도 1: Trailing comma 제거 (가장 흔한 오류)
        repaired = _TRAILING_COMMA.sub(r"\1", cleaned)
        try:
            return json.loads(repaired)
        except json.JSONDecodeError:
            pass

        # 시도 2: 설명 문장 사이에 섞인 첫 번째 배열 구간 추출
        match = _ARRAY_SPAN.search(repaired)
        if match:
            try:
                return json.loads(match.group(0))
            except json.JSONDecodeError:
                pass

        logger.debug(f"Unparseable provider payload: {raw_text[:500]}")
        raise ParseError("Provider payload is not valid JSON")

    def _find_list(self, value: Any) -> Optional[List[Any]]:
        """목록 자체 → envelope 키 → 필드 순서대로 깊이 우선 탐색"""
        if isinstance(value, list):
            return value
        if not isinstance(value, dict):
            return None

        for key in ENVELOPE_KEYS:
            if isinstance(value.get(key), list):
                return value[key]

        for child in value.values():
            found = self._find_list(child)
            if found is not None:
                return found
        return None
