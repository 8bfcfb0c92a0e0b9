import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from src.agent.agent import CurioBlockAgent
from src.core.config import settings
from src.core.errors import InvalidGenerationRequestError, ItemNotFoundError, PersistenceError
from src.schemas.models.api.flag_update_request import FlagUpdateRequest
from src.schemas.models.api.generate_response import GenerateResponse
from src.schemas.models.api.generation_request import GenerationRequest
from src.schemas.models.api.item_page_response import ItemPageResponse
from src.schemas.models.api.spark_notify_request import SparkNotifyRequest
from src.schemas.models.common.content_item import ContentItem, ContentItemAdapter

logger = logging.getLogger(__name__)

router = APIRouter()

# This instance will be shared across requests (set up in the app lifespan)
agent = CurioBlockAgent()


def get_agent() -> CurioBlockAgent:
    if not agent.is_set_up:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Agent not set up")
    return agent


@router.get("/health")
def health_check():
    return {"status": "healthy", "env": settings.ENV}


@router.post("/generate", response_model=GenerateResponse)
async def generate(request: GenerationRequest, curio_agent: CurioBlockAgent = Depends(get_agent)):
    """
    질의로부터 콘텐츠 아이템을 생성한다.
    Provider가 모두 실패해도 결정적 폴백으로 항상 requested_count개를 반환하며,
    잘못된 요청만 400으로 거부한다.
    """
    try:
        result = await curio_agent.orchestrator.generate_with_source(request)
    except InvalidGenerationRequestError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return GenerateResponse(items=result.items, source=result.source)


@router.get("/containers/{container_id}/items", response_model=ItemPageResponse)
async def list_items(
    container_id: str,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=settings.PAGE_SIZE, ge=1, le=100),
    curio_agent: CurioBlockAgent = Depends(get_agent),
):
    try:
        items, total = await curio_agent.store.range_read(container_id, offset, limit)
    except PersistenceError as e:
        logger.error(f"List items API Error: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return ItemPageResponse(items=items, total=total, offset=offset, has_more=total > offset + len(items))


@router.put("/items", response_model=ContentItem)
async def upsert_item(payload: dict, curio_agent: CurioBlockAgent = Depends(get_agent)):
    """아이템을 저장하고 영구 id가 부여된 사본을 반환한다."""
    try:
        item = ContentItemAdapter.validate_python(payload)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    try:
        return await curio_agent.store.upsert(item)
    except PersistenceError as e:
        logger.error(f"Upsert API Error: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.get("/items/{item_id}", response_model=ContentItem)
async def get_item(item_id: str, curio_agent: CurioBlockAgent = Depends(get_agent)):
    try:
        item = await curio_agent.store.get(item_id)
    except PersistenceError as e:
        logger.error(f"Get item API Error: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Content item not found: {item_id}")
    return item


@router.patch("/items/{item_id}/flags", status_code=status.HTTP_204_NO_CONTENT)
async def set_flag(item_id: str, request: FlagUpdateRequest, curio_agent: CurioBlockAgent = Depends(get_agent)):
    try:
        await curio_agent.store.set_flag(item_id, request.flag, request.value)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PersistenceError as e:
        logger.error(f"Set flag API Error: {e}")
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/sparks", status_code=status.HTTP_202_ACCEPTED)
async def notify_sparks(request: SparkNotifyRequest, curio_agent: CurioBlockAgent = Depends(get_agent)):
    """보상 포인트 알림 (fire-and-forget)"""
    curio_agent.sparks.notify(request.child_id, request.trigger, request.reason)
    return {"accepted": True}
