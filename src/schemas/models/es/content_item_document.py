from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, Field, field_serializer

from src.schemas.enums.content_kind import ContentKind
from src.schemas.enums.specialist_tag import SpecialistTag
from src.schemas.models.common.content_item import BaseContentItem, ContentItem, ContentItemAdapter


class ContentItemDocument(BaseModel):
    """ES에 저장될 콘텐츠 아이템 문서"""
    item_id: str = Field(description="영구 아이템 ID (문서 _id와 동일)")
    container_id: str = Field(description="컨테이너 ID")
    specialist_tag: SpecialistTag
    kind: ContentKind
    payload: Dict[str, Any] = Field(description="kind별 payload (camelCase)")
    search_text: str = Field(default="", description="payload 텍스트 필드 결합본")
    liked: bool = False
    bookmarked: bool = False
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="생성 시간")
    seq: int = Field(default=0, description="동일 created_at 정렬용 삽입 순번")

    @field_serializer('specialist_tag', 'kind')
    def serialize_enum(self, value, _info):
        return value.value

    @classmethod
    def from_item(cls, item: BaseContentItem, seq: int) -> "ContentItemDocument":
        return cls(
            item_id=item.id,
            container_id=item.container_id,
            specialist_tag=item.specialist_tag,
            kind=item.kind,
            payload=item.payload.model_dump(mode="json", by_alias=True, exclude_none=True),
            search_text=" ".join(item.payload.text_fields()),
            liked=item.liked,
            bookmarked=item.bookmarked,
            created_at=item.created_at,
            seq=seq,
        )

    def to_item(self) -> ContentItem:
        return ContentItemAdapter.validate_python({
            "id": self.item_id,
            "container_id": self.container_id,
            "specialist_tag": self.specialist_tag,
            "kind": self.kind,
            "payload": self.payload,
            "liked": self.liked,
            "bookmarked": self.bookmarked,
            "created_at": self.created_at,
        })

    @classmethod
    def get_es_mapping(cls) -> Dict[str, Any]:
        """Elasticsearch index mapping 생성"""
        return {
            "mappings": {
                "properties": {
                    "item_id": {"type": "keyword"},
                    "container_id": {"type": "keyword"},
                    "specialist_tag": {"type": "keyword"},
                    "kind": {"type": "keyword"},
                    "payload": {
                        "type": "object",
                        "enabled": False
                    },
                    "search_text": {"type": "text"},
                    "liked": {"type": "boolean"},
                    "bookmarked": {"type": "boolean"},
                    "created_at": {"type": "date"},
                    "seq": {"type": "long"}
                }
            }
        }


class SparkTransactionDocument(BaseModel):
    """ES에 저장될 보상 포인트 트랜잭션 문서"""
    child_id: str
    trigger: str
    amount: int
    reason: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="생성 시간")

    @classmethod
    def get_es_mapping(cls) -> Dict[str, Any]:
        return {
            "mappings": {
                "properties": {
                    "child_id": {"type": "keyword"},
                    "trigger": {"type": "keyword"},
                    "amount": {"type": "integer"},
                    "reason": {"type": "text"},
                    "created_at": {"type": "date"}
                }
            }
        }
