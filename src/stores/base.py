import uuid
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from src.schemas.enums.content_flag import ContentFlag
from src.schemas.models.common.content_item import ContentItem


def with_durable_id(item: ContentItem) -> ContentItem:
    """임시 id(generated-/placeholder-)를 영구 UUID로 교체한 사본을 반환한다."""
    if item.is_temporary:
        return item.model_copy(update={"id": str(uuid.uuid4())})
    return item


class ContentStore(ABC):
    """
    콘텐츠 아이템 영속화 경계.
    모든 실패는 PersistenceError(또는 하위 ItemNotFoundError)로 전달된다.
    upsert 직후 다른 호출자의 range_read에 즉시 보이지 않을 수 있다 (eventual visibility).
    """

    @abstractmethod
    async def upsert(self, item: ContentItem) -> ContentItem:
        """
        아이템을 저장하고 저장된 사본을 반환한다.
        임시 id를 가진 아이템은 영구 id가 부여된다.
        """
        ...

    @abstractmethod
    async def range_read(self, container_id: str, offset: int, limit: int) -> Tuple[List[ContentItem], int]:
        """created_at 오름차순(동률은 삽입 순) offset 페이지와 컨테이너 전체 건수"""
        ...

    @abstractmethod
    async def set_flag(self, item_id: str, flag: ContentFlag, value: bool) -> None:
        ...

    @abstractmethod
    async def get(self, item_id: str) -> Optional[ContentItem]:
        ...
