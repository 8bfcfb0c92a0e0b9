import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from src.core.config import settings
from src.core.errors import InvalidGenerationRequestError, ItemNotFoundError, PersistenceError
from src.core.llm.error_mapping import is_overloaded_status
from src.core.llm.exceptions import ProviderOverloadedError, ProviderTransportError
from src.schemas.enums.content_flag import ContentFlag
from src.schemas.enums.spark_trigger import SparkTrigger
from src.schemas.models.api.generation_request import GenerationRequest
from src.schemas.models.common.content_item import ContentItem, ContentItemAdapter, ContentItemListAdapter
from src.schemas.models.es.content_item_document import SparkTransactionDocument
from src.services.sparks_service import SparksSink
from src.stores.base import ContentStore

logger = logging.getLogger(__name__)

PROVIDER_NAME = "CURIO_API"


class CurioApiClient(ContentStore):
    """
    Curio Block Agent HTTP API 클라이언트.
    생성기(generate)와 ContentStore 계약을 모두 구현하여
    ProgressiveDeliveryController를 원격 서버에 연결할 수 있게 한다.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=timeout, transport=transport)

    async def __aenter__(self) -> "CurioApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ========================================================================
    # Generator
    # ========================================================================

    async def generate(self, request: GenerationRequest) -> List[ContentItem]:
        try:
            response = await self._client.post("/generate", json=request.model_dump(mode="json", by_alias=True))
        except httpx.TransportError as e:
            raise ProviderTransportError(f"Generate request failed: {e}", provider=PROVIDER_NAME, original_error=e) from e

        if response.status_code == httpx.codes.BAD_REQUEST:
            raise InvalidGenerationRequestError(self._detail(response))
        if is_overloaded_status(response.status_code):
            raise ProviderOverloadedError(f"Generate API overloaded ({response.status_code})", provider=PROVIDER_NAME)
        if response.is_error:
            raise ProviderTransportError(
                f"Generate API error ({response.status_code}): {self._detail(response)}", provider=PROVIDER_NAME
            )

        body = response.json()
        logger.debug(f"Generate API returned {len(body.get('items', []))} items from {body.get('source')}")
        return ContentItemListAdapter.validate_python(body.get("items", []))

    # ========================================================================
    # ContentStore
    # ========================================================================

    async def upsert(self, item: ContentItem) -> ContentItem:
        response = await self._send("PUT", "/items", json=item.model_dump(mode="json", by_alias=True))
        return ContentItemAdapter.validate_python(response.json())

    async def range_read(self, container_id: str, offset: int, limit: int) -> Tuple[List[ContentItem], int]:
        response = await self._send(
            "GET", f"/containers/{container_id}/items", params={"offset": offset, "limit": limit}
        )
        body = response.json()
        return ContentItemListAdapter.validate_python(body.get("items", [])), body.get("total", 0)

    async def set_flag(self, item_id: str, flag: ContentFlag, value: bool) -> None:
        response = await self._send(
            "PATCH", f"/items/{item_id}/flags", json={"flag": flag.value, "value": value}, allow_not_found=True
        )
        if response.status_code == httpx.codes.NOT_FOUND:
            raise ItemNotFoundError(item_id)

    async def get(self, item_id: str) -> Optional[ContentItem]:
        response = await self._send("GET", f"/items/{item_id}", allow_not_found=True)
        if response.status_code == httpx.codes.NOT_FOUND:
            return None
        return ContentItemAdapter.validate_python(response.json())

    # ========================================================================
    # Sparks
    # ========================================================================

    async def notify_sparks(self, child_id: str, trigger: SparkTrigger, reason: Optional[str] = None) -> None:
        """단방향 알림: 실패는 로그만 남긴다."""
        payload: Dict[str, Any] = {"childId": child_id, "trigger": trigger.value}
        if reason:
            payload["reason"] = reason
        try:
            response = await self._client.post("/sparks", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Sparks notification failed for child {child_id}: {e}")

    # ========================================================================
    # Helpers
    # ========================================================================

    async def _send(self, method: str, url: str, allow_not_found: bool = False, **kwargs) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TransportError as e:
            raise PersistenceError(f"{method} {url} failed: {e}", original_error=e) from e

        if response.is_error and not (allow_not_found and response.status_code == httpx.codes.NOT_FOUND):
            raise PersistenceError(f"{method} {url} returned {response.status_code}: {self._detail(response)}")
        return response

    @staticmethod
    def _detail(response: httpx.Response) -> str:
        try:
            return str(response.json().get("detail", response.text))
        except (ValueError, AttributeError):
            return response.text


class ApiSparksSink(SparksSink):
    """원격 컨트롤러용: 보상 알림을 /sparks 엔드포인트로 전달한다."""

    def __init__(self, client: CurioApiClient):
        self.client = client

    async def record(self, transaction: SparkTransactionDocument) -> None:
        await self.client.notify_sparks(transaction.child_id, SparkTrigger(transaction.trigger), transaction.reason)
