import itertools
import logging
from typing import Dict, List, Optional, Tuple

from src.core.errors import ItemNotFoundError, PersistenceError
from src.schemas.enums.content_flag import ContentFlag
from src.schemas.models.common.content_item import ContentItem
from src.stores.base import ContentStore, with_durable_id

logger = logging.getLogger(__name__)


class InMemoryContentStore(ContentStore):
    """
    로컬 개발/테스트용 Content Store (프로세스 메모리).
    호출자가 받은 사본을 변경해도 저장된 값에는 영향이 없다.
    """

    def __init__(self):
        self._items: Dict[str, ContentItem] = {}
        self._seq: Dict[str, int] = {}
        self._counter = itertools.count()

    async def upsert(self, item: ContentItem) -> ContentItem:
        stored = with_durable_id(item)
        if stored.id not in self._seq:
            self._seq[stored.id] = next(self._counter)
        self._items[stored.id] = stored.model_copy()
        logger.debug(f"Upserted item {stored.id} into container {stored.container_id}")
        return stored

    async def range_read(self, container_id: str, offset: int, limit: int) -> Tuple[List[ContentItem], int]:
        if offset < 0 or limit < 0:
            raise PersistenceError(f"Invalid range: offset={offset}, limit={limit}")

        items = sorted(
            (item for item in self._items.values() if item.container_id == container_id),
            key=lambda item: (item.created_at, self._seq[item.id]),
        )
        return [item.model_copy() for item in items[offset:offset + limit]], len(items)

    async def set_flag(self, item_id: str, flag: ContentFlag, value: bool) -> None:
        item = self._items.get(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        self._items[item_id] = item.model_copy(update={flag.value: value})

    async def get(self, item_id: str) -> Optional[ContentItem]:
        item = self._items.get(item_id)
        return item.model_copy() if item is not None else None
