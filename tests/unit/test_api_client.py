import json
from typing import List

import httpx
import pytest

from src.client.api_client import ApiSparksSink, CurioApiClient
from src.core.errors import InvalidGenerationRequestError, ItemNotFoundError, PersistenceError
from src.core.llm.exceptions import ProviderOverloadedError, ProviderTransportError
from src.schemas.enums.content_flag import ContentFlag
from src.schemas.enums.content_kind import ContentKind
from src.schemas.enums.spark_trigger import SparkTrigger
from src.schemas.models.common.content_item import ContentItemAdapter
from src.schemas.models.es.content_item_document import SparkTransactionDocument


def _item_json(item_id="item-1", kind="fact"):
    return {
        "id": item_id,
        "containerId": "curio-1",
        "specialistTag": "nova",
        "kind": kind,
        "payload": {"fact": "Lava is hot.", "title": "Volcanoes"},
        "liked": False,
        "bookmarked": False,
        "createdAt": "2026-01-01T00:00:00Z",
    }


class Recorder:
    """요청을 기록하고 미리 정한 응답을 돌려주는 MockTransport 핸들러"""

    def __init__(self, response: httpx.Response = None, error: Exception = None):
        self.requests: List[httpx.Request] = []
        self.response = response
        self.error = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.response


def _client(recorder: Recorder) -> CurioApiClient:
    return CurioApiClient(base_url="http://curio.test", transport=httpx.MockTransport(recorder))


class TestGenerate:

    @pytest.mark.asyncio
    async def test_posts_request_and_parses_items(self, generation_request):
        recorder = Recorder(httpx.Response(200, json={"items": [_item_json(), _item_json("item-2")], "source": "VERTEX_AI"}))

        async with _client(recorder) as client:
            items = await client.generate(generation_request(quick_mode=True, skip_count=2))

        [request] = recorder.requests
        assert request.method == "POST"
        assert request.url.path == "/generate"
        body = json.loads(request.content)
        assert body["containerId"] == "curio-1"
        assert body["requestedCount"] == 3
        assert body["quickMode"] is True
        assert body["skipCount"] == 2
        assert [item.id for item in items] == ["item-1", "item-2"]
        assert items[0].kind == ContentKind.FACT

    @pytest.mark.asyncio
    async def test_bad_request(self, generation_request):
        recorder = Recorder(httpx.Response(400, json={"detail": "query must not be blank"}))

        async with _client(recorder) as client:
            with pytest.raises(InvalidGenerationRequestError, match="blank"):
                await client.generate(generation_request())

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code, error", [
        (429, ProviderOverloadedError),
        (503, ProviderOverloadedError),
        (500, ProviderTransportError),
    ])
    async def test_server_errors(self, generation_request, status_code, error):
        recorder = Recorder(httpx.Response(status_code, text="oops"))

        async with _client(recorder) as client:
            with pytest.raises(error):
                await client.generate(generation_request())

    @pytest.mark.asyncio
    async def test_transport_failure(self, generation_request):
        recorder = Recorder(error=httpx.ConnectError("connection refused"))

        async with _client(recorder) as client:
            with pytest.raises(ProviderTransportError):
                await client.generate(generation_request())


class TestContentStoreContract:

    @pytest.mark.asyncio
    async def test_range_read(self):
        recorder = Recorder(httpx.Response(200, json={"items": [_item_json()], "total": 11, "offset": 10, "hasMore": False}))

        async with _client(recorder) as client:
            items, total = await client.range_read("curio-1", 10, 5)

        request = recorder.requests[0]
        assert request.url.path == "/containers/curio-1/items"
        assert request.url.params["offset"] == "10"
        assert request.url.params["limit"] == "5"
        assert total == 11
        assert items[0].id == "item-1"

    @pytest.mark.asyncio
    async def test_upsert(self):
        recorder = Recorder(httpx.Response(200, json=_item_json("durable-1")))

        async with _client(recorder) as client:
            stored = await client.upsert(ContentItemAdapter.validate_python(_item_json("generated-abc")))

        assert recorder.requests[0].method == "PUT"
        assert json.loads(recorder.requests[0].content)["id"] == "generated-abc"
        assert stored.id == "durable-1"

    @pytest.mark.asyncio
    async def test_set_flag(self):
        recorder = Recorder(httpx.Response(204))

        async with _client(recorder) as client:
            await client.set_flag("item-1", ContentFlag.LIKED, True)

        request = recorder.requests[0]
        assert request.method == "PATCH"
        assert request.url.path == "/items/item-1/flags"
        assert json.loads(request.content) == {"flag": "liked", "value": True}

    @pytest.mark.asyncio
    async def test_set_flag_on_missing_item(self):
        recorder = Recorder(httpx.Response(404, json={"detail": "Content item not found: x"}))

        async with _client(recorder) as client:
            with pytest.raises(ItemNotFoundError):
                await client.set_flag("x", ContentFlag.LIKED, True)

    @pytest.mark.asyncio
    async def test_get_missing_item(self):
        recorder = Recorder(httpx.Response(404, json={"detail": "not found"}))

        async with _client(recorder) as client:
            assert await client.get("x") is None

    @pytest.mark.asyncio
    async def test_store_failure_is_persistence_error(self):
        recorder = Recorder(httpx.Response(503, json={"detail": "store offline"}))

        async with _client(recorder) as client:
            with pytest.raises(PersistenceError, match="store offline"):
                await client.range_read("curio-1", 0, 10)

    @pytest.mark.asyncio
    async def test_transport_failure_is_persistence_error(self):
        recorder = Recorder(error=httpx.ReadTimeout("timed out"))

        async with _client(recorder) as client:
            with pytest.raises(PersistenceError):
                await client.get("item-1")


class TestSparks:

    @pytest.mark.asyncio
    async def test_sink_posts_notification(self):
        recorder = Recorder(httpx.Response(202, json={"accepted": True}))

        async with _client(recorder) as client:
            await ApiSparksSink(client).record(
                SparkTransactionDocument(child_id="kid-1", trigger="new_curio", amount=1, reason="Starting new Curio")
            )

        assert json.loads(recorder.requests[0].content) == {
            "childId": "kid-1", "trigger": "new_curio", "reason": "Starting new Curio",
        }

    @pytest.mark.asyncio
    async def test_notification_failure_is_swallowed(self):
        recorder = Recorder(httpx.Response(500))

        async with _client(recorder) as client:
            await client.notify_sparks("kid-1", SparkTrigger.STREAK)

        assert len(recorder.requests) == 1
