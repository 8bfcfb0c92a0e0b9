import asyncio
import json
from typing import Any, Dict, List, Optional, Sequence, Union

from src.schemas.models.api.generation_request import GenerationRequest
from src.schemas.models.common.content_item import ContentItem
from src.services.fallback_generator import DeterministicFallbackGenerator
from src.services.provider_client import BaseProviderClient


class FakeProvider(BaseProviderClient):
    """
    미리 정한 응답(원문 텍스트 또는 예외)을 순서대로 돌려주는 Provider.
    응답 목록이 끝나면 마지막 응답을 반복한다.
    """

    def __init__(self, name: str, responses: Sequence[Union[str, BaseException]]):
        self._name = name
        self._responses = list(responses)
        self.calls: List[GenerationRequest] = []

    @property
    def name(self) -> str:
        return self._name

    async def generate(self, request: GenerationRequest) -> str:
        response = self._responses[min(len(self.calls), len(self._responses) - 1)]
        self.calls.append(request)
        if isinstance(response, BaseException):
            raise response
        return response


class RecordingSleep:
    """대기 시간을 기록만 하고 즉시 반환하는 sleep"""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


class FakeGenerator:
    """
    Controller 테스트용 생성기.
    호출 시점의 화면 상태를 기록하고, gate가 설정된 호출은 해제될 때까지 대기한다.
    """

    def __init__(self):
        self.requests: List[GenerationRequest] = []
        self.visible_at_call: List[List[str]] = []
        self.gates: Dict[int, asyncio.Event] = {}
        self.errors: Dict[int, BaseException] = {}
        self.controller = None
        self._fallback = DeterministicFallbackGenerator()

    def gate(self, call_index: int) -> asyncio.Event:
        self.gates[call_index] = asyncio.Event()
        return self.gates[call_index]

    async def generate(self, request: GenerationRequest) -> List[ContentItem]:
        index = len(self.requests)
        self.requests.append(request)
        view = self.controller.view if self.controller is not None else None
        self.visible_at_call.append([item.id for item in view.items] if view else [])

        if index in self.gates:
            await self.gates[index].wait()
        if index in self.errors:
            raise self.errors[index]
        return self._fallback.generate(request.query, request.requested_count, request.container_id)


def make_block(kind: str = "fact", specialist: str = "nova", **payload: Any) -> Dict[str, Any]:
    if not payload:
        payload = {"fact": "Lava can reach 1200 degrees Celsius.", "title": "Hot Lava"}
    return {"kind": kind, "specialist": specialist, "payload": payload}


def blocks_json(count: int, envelope: Optional[str] = None) -> str:
    blocks = [
        make_block(fact=f"Volcano fact number {i}.", title=f"Fact {i}")
        for i in range(count)
    ]
    return json.dumps({envelope: blocks} if envelope else blocks)
