from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from elasticsearch import ConnectionError as ESConnectionError, NotFoundError

from src.core.errors import ItemNotFoundError, PersistenceError
from src.schemas.enums.content_flag import ContentFlag
from src.schemas.enums.content_kind import ContentKind
from src.schemas.models.common.content_item import QuizItem
from src.schemas.models.common.content_payload import QuizPayload
from src.schemas.models.es.content_item_document import ContentItemDocument
from src.stores.es_content_store import ESContentStore


def _not_found() -> NotFoundError:
    return NotFoundError("document_missing_exception", meta=MagicMock(status=404), body={})


def _quiz_item(**kwargs) -> QuizItem:
    return QuizItem(
        container_id="curio-1",
        payload=QuizPayload(question="Which volcano is tallest?", options=["Mauna Kea", "Fuji"], correct_index=0),
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        **kwargs,
    )


class TestESContentStore:

    @pytest.fixture
    def mock_es_client(self):
        """Mock Elasticsearch Client"""
        with patch('src.core.elasticsearch_config.es_manager') as mock_manager:
            mock_client = MagicMock()
            mock_manager.client = mock_client
            mock_client.index.return_value = {"result": "created"}
            mock_client.indices.exists_alias.return_value = True
            yield mock_client

    @pytest.fixture
    def store(self, mock_es_client):
        return ESContentStore(index_name="content-items-test", alias_name="content-items")

    def test_creates_index_and_alias_when_missing(self):
        client = MagicMock()
        client.indices.exists_alias.return_value = False
        client.indices.exists.return_value = False

        ESContentStore(client=client, index_name="content-items-v1", alias_name="content-items")

        client.indices.create.assert_called_once_with(
            index="content-items-v1", body=ContentItemDocument.get_es_mapping()
        )
        client.indices.put_alias.assert_called_once_with(index="content-items-v1", name="content-items")

    @pytest.mark.asyncio
    async def test_upsert(self, store, mock_es_client):
        """아이템 저장 시 영구 id 부여"""
        # Given
        item = _quiz_item()

        # When
        stored = await store.upsert(item)

        # Then
        assert not stored.is_temporary
        mock_es_client.index.assert_called_once()

        call_args = mock_es_client.index.call_args
        assert call_args.kwargs['index'] == "content-items"
        assert call_args.kwargs['id'] == stored.id
        assert call_args.kwargs['refresh'] == "wait_for"
        document = call_args.kwargs['document']
        assert document['item_id'] == stored.id
        assert document['kind'] == "quiz"
        assert document['payload']['correctIndex'] == 0
        assert "Mauna Kea" in document['search_text']

    @pytest.mark.asyncio
    async def test_upsert_failure_is_persistence_error(self, store, mock_es_client):
        mock_es_client.index.side_effect = ESConnectionError("cluster unreachable")

        with pytest.raises(PersistenceError):
            await store.upsert(_quiz_item())

    @pytest.mark.asyncio
    async def test_range_read(self, store, mock_es_client):
        # Given
        stored = _quiz_item(id="item-1")
        document = ContentItemDocument.from_item(stored, seq=1).model_dump(mode="json")
        mock_es_client.search.return_value = {
            "hits": {"total": {"value": 12}, "hits": [{"_source": document}]}
        }

        # When
        items, total = await store.range_read("curio-1", 5, 5)

        # Then
        assert total == 12
        assert items[0].id == "item-1"
        assert items[0].kind == ContentKind.QUIZ
        assert items[0].payload.options == ["Mauna Kea", "Fuji"]

        call_args = mock_es_client.search.call_args
        assert call_args.kwargs['query'] == {"term": {"container_id": "curio-1"}}
        assert call_args.kwargs['from_'] == 5
        assert call_args.kwargs['size'] == 5
        assert call_args.kwargs['sort'][0] == {"created_at": {"order": "asc"}}

    @pytest.mark.asyncio
    async def test_set_flag(self, store, mock_es_client):
        await store.set_flag("item-1", ContentFlag.LIKED, True)

        call_args = mock_es_client.update.call_args
        assert call_args.kwargs['id'] == "item-1"
        assert call_args.kwargs['doc'] == {"liked": True}

    @pytest.mark.asyncio
    async def test_set_flag_on_missing_item(self, store, mock_es_client):
        mock_es_client.update.side_effect = _not_found()

        with pytest.raises(ItemNotFoundError):
            await store.set_flag("missing", ContentFlag.BOOKMARKED, True)

    @pytest.mark.asyncio
    async def test_get_missing_item_returns_none(self, store, mock_es_client):
        mock_es_client.get.side_effect = _not_found()

        assert await store.get("missing") is None
