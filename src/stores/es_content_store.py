import logging
import time
from typing import List, Optional, Tuple

from elasticsearch import Elasticsearch, NotFoundError

from src.core.config import settings
from src.core.errors import ItemNotFoundError, PersistenceError
from src.schemas.enums.content_flag import ContentFlag
from src.schemas.models.common.content_item import ContentItem
from src.schemas.models.es.content_item_document import ContentItemDocument
from src.stores.base import ContentStore, with_durable_id

logger = logging.getLogger(__name__)


class ESContentStore(ContentStore):
    """Elasticsearch 기반 Content Store"""

    def __init__(self, client: Optional[Elasticsearch] = None, index_name: Optional[str] = None, alias_name: Optional[str] = None):
        if client is None:
            from src.core.elasticsearch_config import es_manager
            client = es_manager.client
        self.client = client
        self.index_name = index_name or settings.CONTENT_ITEM_INDEX
        self.index_alias = alias_name or settings.CONTENT_ITEM_ALIAS

        self._ensure_alias_exists()

    def _ensure_alias_exists(self) -> None:
        """인덱스와 Alias가 없으면 생성 후 연결"""
        # 1. Alias 존재 여부 확인 (있으면 index도 존재한다고 간주)
        if self.client.indices.exists_alias(name=self.index_alias):
            logger.debug(f"Alias already exists: {self.index_alias}")
            return

        # 2. 인덱스 존재 여부 확인 및 생성
        if not self.client.indices.exists(index=self.index_name):
            self.client.indices.create(index=self.index_name, body=ContentItemDocument.get_es_mapping())
            logger.info(f"Created index: {self.index_name}")

        # 3. Alias 생성
        self.client.indices.put_alias(index=self.index_name, name=self.index_alias)
        logger.info(f"Created alias: {self.index_alias} -> {self.index_name}")

    async def upsert(self, item: ContentItem) -> ContentItem:
        stored = with_durable_id(item)
        # 프로세스 간에도 단조 증가하는 삽입 순번 (동일 created_at 정렬용)
        document = ContentItemDocument.from_item(stored, seq=time.time_ns())

        try:
            response = self.client.index(
                index=self.index_alias,
                id=stored.id,
                document=document.model_dump(mode="json"),
                refresh="wait_for",
            )
        except Exception as e:
            logger.error(f"Failed to index item {stored.id}: {e}")
            if hasattr(e, 'info'):
                logger.error(f"ES Error Detailed Info: {e.info}")
            raise PersistenceError(f"Failed to persist item {stored.id}", original_error=e) from e

        logger.debug(f"ES Save Result: {response.get('result')} for item: {stored.id}")
        return stored

    async def range_read(self, container_id: str, offset: int, limit: int) -> Tuple[List[ContentItem], int]:
        try:
            response = self.client.search(
                index=self.index_alias,
                query={"term": {"container_id": container_id}},
                sort=[{"created_at": {"order": "asc"}}, {"seq": {"order": "asc"}}],
                from_=offset,
                size=limit,
                track_total_hits=True,
            )
        except Exception as e:
            logger.error(f"Failed to read container {container_id} (offset={offset}, limit={limit}): {e}")
            raise PersistenceError(f"Failed to read container {container_id}", original_error=e) from e

        hits = response["hits"]
        items = [ContentItemDocument(**hit["_source"]).to_item() for hit in hits["hits"]]
        return items, hits["total"]["value"]

    async def set_flag(self, item_id: str, flag: ContentFlag, value: bool) -> None:
        try:
            self.client.update(
                index=self.index_alias,
                id=item_id,
                doc={flag.value: value},
                refresh="wait_for",
            )
        except NotFoundError as e:
            raise ItemNotFoundError(item_id) from e
        except Exception as e:
            logger.error(f"Failed to set {flag.value}={value} on item {item_id}: {e}")
            raise PersistenceError(f"Failed to update item {item_id}", original_error=e) from e

        logger.info(f"Updated item {item_id}: {flag.value}={value}")

    async def get(self, item_id: str) -> Optional[ContentItem]:
        try:
            response = self.client.get(index=self.index_alias, id=item_id)
        except NotFoundError:
            return None
        except Exception as e:
            raise PersistenceError(f"Failed to get item {item_id}", original_error=e) from e
        return ContentItemDocument(**response["_source"]).to_item()
