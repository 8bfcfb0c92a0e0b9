import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Coroutine, Dict, List, Optional, Protocol, Set

from src.core.config import settings
from src.core.errors import GenerationTimeoutError, PersistenceError
from src.schemas.enums.content_flag import ContentFlag
from src.schemas.enums.delivery_phase import DeliveryPhase
from src.schemas.enums.spark_trigger import SparkTrigger
from src.schemas.enums.specialist_tag import SpecialistTag
from src.schemas.models.api.generation_request import GenerationRequest
from src.schemas.models.common.child_profile import ChildProfile
from src.schemas.models.common.content_item import ContentItem, FactItem, new_placeholder_id
from src.schemas.models.common.content_payload import FactPayload
from src.services.sparks_service import SparksService
from src.stores.base import ContentStore

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Generating new content is taking longer than expected. Please try again in a moment."
GENERATION_FAILED_MESSAGE = "We couldn't create new content right now. Please try again."


class ContentGenerator(Protocol):
    """GenerationOrchestrator(in-process) 또는 CurioApiClient(remote)"""

    async def generate(self, request: GenerationRequest) -> List[ContentItem]:
        ...


@dataclass
class ContainerView:
    """한 컨테이너에 대한 화면 상태. 컨트롤러의 단일 태스크만 변경한다."""
    container_id: str
    query: str
    profile: ChildProfile
    phase: DeliveryPhase = DeliveryPhase.EMPTY
    items: List[ContentItem] = field(default_factory=list)
    buffer: List[ContentItem] = field(default_factory=list)
    loaded_count: int = 0
    has_more: bool = False
    error: Optional[str] = None
    notices: List[str] = field(default_factory=list)
    search_text: str = ""
    pipeline_task: Optional[asyncio.Task] = field(default=None, repr=False)
    reveal_task: Optional[asyncio.Task] = field(default=None, repr=False)
    watchdog_task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def visible_items(self) -> List[ContentItem]:
        if not self.search_text.strip():
            return list(self.items)
        return [item for item in self.items if not self._is_placeholder(item) and item.matches(self.search_text)]

    @property
    def placeholder(self) -> Optional[ContentItem]:
        return next((item for item in self.items if self._is_placeholder(item)), None)

    @staticmethod
    def _is_placeholder(item: ContentItem) -> bool:
        return item.id.startswith("placeholder-")


def build_placeholder(container_id: str, query: str) -> ContentItem:
    """생성 중 표시용 placeholder (저장되지 않고 페이지네이션에 포함되지 않음)"""
    return FactItem(
        id=new_placeholder_id(),
        container_id=container_id,
        specialist_tag=SpecialistTag.WHIZZY,
        payload=FactPayload(title="Generating...", fact=f"Creating something amazing about {query}..."),
    )


class ProgressiveDeliveryController:
    """
    2단계(빠른 배치 + 백그라운드 배치) 로딩과 순차 노출, 페이지네이션을 담당한다.

    한 번에 하나의 컨테이너만 활성화되며, 컨테이너별 생성 파이프라인은 주입된
    in_flight 맵으로 최대 하나만 실행된다. 타임아웃은 UI용이며 실제 생성을 취소하지 않는다.
    """

    def __init__(
        self,
        generator: ContentGenerator,
        store: ContentStore,
        in_flight: Optional[Dict[str, asyncio.Task]] = None,
        notifier: Optional[SparksService] = None,
        quick_count: Optional[int] = None,
        background_count: Optional[int] = None,
        skip_count: Optional[int] = None,
        reveal_delay: Optional[float] = None,
        generation_timeout: Optional[float] = None,
        page_size: Optional[int] = None,
        reveal_pass_size: Optional[int] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.generator = generator
        self.store = store
        self.in_flight = in_flight if in_flight is not None else {}
        self.notifier = notifier
        self.quick_count = quick_count or settings.QUICK_BATCH_SIZE
        self.background_count = background_count or settings.BACKGROUND_BATCH_SIZE
        self.skip_count = self.quick_count if skip_count is None else skip_count
        self.reveal_delay = settings.REVEAL_DELAY_SECONDS if reveal_delay is None else reveal_delay
        self.generation_timeout = generation_timeout or settings.GENERATION_TIMEOUT_SECONDS
        self.page_size = page_size or settings.PAGE_SIZE
        self.reveal_pass_size = reveal_pass_size or settings.REVEAL_PASS_SIZE
        # reveal 간격 대기 (watchdog은 항상 asyncio.sleep 사용)
        self.sleep = sleep or asyncio.sleep

        self.view: Optional[ContainerView] = None
        self._tasks: Set[asyncio.Task] = set()

    # ========================================================================
    # Public operations
    # ========================================================================

    async def open_container(self, container_id: str, query: str, profile: Optional[ChildProfile] = None) -> ContainerView:
        if self.view is not None:
            self.close_container()

        view = ContainerView(container_id=container_id, query=query, profile=profile or ChildProfile())
        self.view = view

        try:
            items, total = await self.store.range_read(container_id, 0, self.page_size)
        except PersistenceError as e:
            logger.warning(f"Could not read container {container_id}, treating as empty: {e}")
            view.notices.append("Saved content could not be loaded.")
            items, total = [], 0

        if self.view is not view:
            return view

        if items:
            view.items = list(items)
            view.loaded_count = len(items)
            view.has_more = total > view.loaded_count
            self._set_phase(view, DeliveryPhase.STEADY)
            return view

        view.items = [build_placeholder(container_id, query)]
        self._set_phase(view, DeliveryPhase.QUICK_PENDING)

        running = self.in_flight.get(container_id)
        if running is not None and not running.done():
            # 같은 컨테이너의 파이프라인이 이미 실행 중: 새 생성 없이 결과만 이어받는다
            logger.info(f"Generation already in flight for container {container_id}; not starting another")
            view.pipeline_task = running
        else:
            view.pipeline_task = self._spawn(self._run_pipeline(container_id, query, view.profile))
            self.in_flight[container_id] = view.pipeline_task
            if self.notifier is not None:
                self.notifier.notify(view.profile.child_id, SparkTrigger.NEW_CURIO)

        self._arm_watchdog(view)
        return view

    def close_container(self) -> None:
        """reveal/watchdog은 취소하고, 진행 중인 생성은 완료되더라도 결과를 버린다."""
        view = self.view
        if view is None:
            return
        self._cancel(view.reveal_task)
        self._cancel(view.watchdog_task)
        self.view = None
        logger.info(f"Closed container {view.container_id} (phase: {view.phase.value})")

    async def load_more(self) -> List[ContentItem]:
        view = self.view
        if view is None or view.phase not in (DeliveryPhase.STEADY, DeliveryPhase.ERROR):
            return []

        if view.buffer:
            view.reveal_task = self._spawn(self._reveal_pass(view))
            return await view.reveal_task

        try:
            items, total = await self.store.range_read(view.container_id, view.loaded_count, self.page_size)
        except PersistenceError as e:
            logger.warning(f"Load more failed for container {view.container_id}: {e}")
            view.notices.append("More content could not be loaded.")
            return []

        if self.view is not view:
            return []

        known_ids = {item.id for item in view.items}
        appended = [item for item in items if item.id not in known_ids]
        view.items.extend(appended)
        view.loaded_count += len(items)
        view.has_more = total > view.loaded_count
        return appended

    def toggle_flag(self, item_id: str, flag: ContentFlag) -> Optional[bool]:
        """
        화면 값을 즉시 뒤집고 저장은 비동기로 수행한다.
        저장 실패 시 알림만 남기고 되돌리지 않는다.
        """
        view = self.view
        item = next((i for i in view.items if i.id == item_id), None) if view else None
        if item is None:
            logger.warning(f"Toggle ignored: item {item_id} is not loaded")
            return None

        new_value = not getattr(item, flag.value)
        setattr(item, flag.value, new_value)

        if item.is_temporary:
            logger.warning(f"Item {item_id} has no durable id; {flag.value} kept locally only")
        else:
            self._spawn(self._persist_flag(view, item_id, flag, new_value))
        return new_value

    def search(self, text: str) -> List[ContentItem]:
        """이미 로드된 아이템만 대상으로 하며 생성을 유발하지 않는다."""
        if self.view is None:
            return []
        self.view.search_text = text or ""
        return self.view.visible_items

    async def wait_idle(self) -> None:
        """파이프라인/reveal/저장 태스크가 모두 끝날 때까지 대기 (watchdog 제외)"""
        while True:
            pending = [
                task for task in self._tasks
                if not task.done() and (self.view is None or task is not self.view.watchdog_task)
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # ========================================================================
    # Pipeline
    # ========================================================================

    async def _run_pipeline(self, container_id: str, query: str, profile: ChildProfile) -> None:
        try:
            quick_request = GenerationRequest(
                query=query,
                container_id=container_id,
                requested_count=self.quick_count,
                quick_mode=True,
                profile=profile,
            )
            quick_items = await self._request(quick_request)
            if quick_items is None:
                return

            view = self._attached_view()
            if view is None:
                logger.info(f"Container {container_id} no longer active; discarding quick batch")
                return
            if view.phase == DeliveryPhase.ERROR:
                for item in quick_items:
                    await self._persist(item, view)
                logger.info(f"Quick batch for {container_id} arrived after timeout; persisted but not shown")
                await self._refresh_has_more(view)
                return

            # 화면 교체 후 저장
            self._show_quick(view, quick_items)
            self._arm_watchdog(view)
            for index, item in enumerate(list(quick_items)):
                stored = await self._persist(item, view)
                if stored is None:
                    continue
                quick_items[index] = stored
                current = self._attached_view()
                if current is not None:
                    self._swap_in_stored(current, item, stored)

            view = self._attached_view()
            if view is None:
                logger.info(f"Container {container_id} no longer active; skipping background batch")
                return
            if view.phase == DeliveryPhase.ERROR:
                return
            if view.phase == DeliveryPhase.QUICK_PENDING:
                # 저장 도중 다시 열린 화면
                self._show_quick(view, quick_items)
                self._arm_watchdog(view)

            background_request = GenerationRequest(
                query=query,
                container_id=container_id,
                requested_count=self.background_count,
                quick_mode=False,
                skip_count=self.skip_count,
                profile=profile,
            )
            self._set_phase(view, DeliveryPhase.BACKGROUND_PENDING)
            remainder = await self._request(background_request)
            if remainder is None:
                return

            view = self._attached_view()
            if view is None:
                logger.info(f"Container {container_id} no longer active; discarding {len(remainder)} background items")
                return
            if view.phase == DeliveryPhase.ERROR:
                for item in remainder:
                    await self._persist(item, view)
                logger.info(f"Background batch for {container_id} arrived after timeout; persisted but not shown")
                await self._refresh_has_more(view)
                return
            if view.phase == DeliveryPhase.QUICK_PENDING:
                # 백그라운드 대기 중 다시 열린 화면: 빠른 배치가 저장소에 없으면 여기서 채운다
                self._show_quick(view, quick_items)

            self._cancel(view.watchdog_task)
            view.buffer.extend(remainder)
            view.reveal_task = self._spawn(self._reveal_pass(view))
        finally:
            if self.in_flight.get(container_id) is asyncio.current_task():
                del self.in_flight[container_id]

    async def _request(self, request: GenerationRequest) -> Optional[List[ContentItem]]:
        try:
            return await self.generator.generate(request)
        except Exception as e:
            logger.error(f"Generation failed for container {request.container_id}: {e}")
            view = self._attached_view()
            if view is not None and view.phase != DeliveryPhase.ERROR:
                self._fail(view, GENERATION_FAILED_MESSAGE)
            return None

    async def _reveal_pass(self, view: ContainerView) -> List[ContentItem]:
        """버퍼에서 한 개씩 꺼내 저장/노출하고 reveal_delay 만큼 대기한다."""
        self._set_phase(view, DeliveryPhase.REVEALING)
        revealed: List[ContentItem] = []

        for index in range(min(len(view.buffer), self.reveal_pass_size)):
            if index > 0:
                await self.sleep(self.reveal_delay)
            if self.view is not view:
                return revealed
            item = view.buffer.pop(0)
            stored = await self._persist(item, view)
            if stored is not None:
                view.loaded_count += 1
            view.items.append(stored or item)
            revealed.append(stored or item)

        await self._refresh_has_more(view)
        self._set_phase(view, DeliveryPhase.STEADY)
        return revealed

    # ========================================================================
    # Helpers
    # ========================================================================

    def _show_quick(self, view: ContainerView, quick_items: List[ContentItem]) -> None:
        """placeholder를 빠른 배치로 교체한다. 영구 id가 있는 아이템만 loaded_count에 포함된다."""
        placeholder = view.placeholder
        if placeholder is not None:
            view.items.remove(placeholder)
        known_ids = {item.id for item in view.items}
        for item in quick_items:
            if item.id in known_ids:
                continue
            view.items.append(item.model_copy())
            if not item.is_temporary:
                view.loaded_count += 1
        self._set_phase(view, DeliveryPhase.QUICK_SHOWN)

    def _swap_in_stored(self, view: ContainerView, item: ContentItem, stored: ContentItem) -> None:
        """화면의 임시 아이템을 저장된 사본으로 바꾸고, 그 사이 바뀐 플래그는 이어서 저장한다."""
        for index, shown in enumerate(view.items):
            if shown.id != item.id:
                continue
            replacement = stored.model_copy()
            for flag in ContentFlag:
                value = getattr(shown, flag.value)
                if value != getattr(replacement, flag.value):
                    setattr(replacement, flag.value, value)
                    self._spawn(self._persist_flag(view, replacement.id, flag, value))
            view.items[index] = replacement
            view.loaded_count += 1
            return

    async def _refresh_has_more(self, view: ContainerView) -> None:
        """버퍼가 남았거나 저장소에 아직 읽지 않은 아이템이 있으면 has_more"""
        if view.buffer:
            view.has_more = True
            return
        try:
            _, total = await self.store.range_read(view.container_id, view.loaded_count, 1)
        except PersistenceError as e:
            logger.warning(f"Could not count items for container {view.container_id}: {e}")
            view.has_more = False
            return
        view.has_more = total > view.loaded_count

    def _attached_view(self) -> Optional[ContainerView]:
        """현재 태스크(파이프라인)의 결과를 받을 활성 화면"""
        view = self.view
        if view is not None and view.pipeline_task is asyncio.current_task():
            return view
        return None

    async def _persist(self, item: ContentItem, view: ContainerView) -> Optional[ContentItem]:
        """저장된 사본(영구 id)을 반환하고, 실패 시 알림을 남기고 None을 반환한다."""
        try:
            stored = await self.store.upsert(item)
        except PersistenceError as e:
            logger.warning(f"Failed to persist item {item.id} for container {view.container_id}: {e}")
            view.notices.append("Some content could not be saved.")
            return None
        return stored

    async def _persist_flag(self, view: ContainerView, item_id: str, flag: ContentFlag, value: bool) -> None:
        try:
            await self.store.set_flag(item_id, flag, value)
        except PersistenceError as e:
            logger.warning(f"Failed to persist {flag.value}={value} for item {item_id}: {e}")
            view.notices.append(f"Could not save your {flag.value} change.")

    def _arm_watchdog(self, view: ContainerView) -> None:
        self._cancel(view.watchdog_task)
        view.watchdog_task = self._spawn(self._watchdog(view))

    async def _watchdog(self, view: ContainerView) -> None:
        await asyncio.sleep(self.generation_timeout)
        if self.view is view and view.phase.is_pending:
            error = GenerationTimeoutError(view.container_id, self.generation_timeout)
            logger.warning(f"{error} (phase: {view.phase.value})")
            self._fail(view, TIMEOUT_MESSAGE)

    def _fail(self, view: ContainerView, message: str) -> None:
        placeholder = view.placeholder
        if placeholder is not None:
            view.items.remove(placeholder)
        view.error = message
        self._set_phase(view, DeliveryPhase.ERROR)

    @staticmethod
    def _set_phase(view: ContainerView, phase: DeliveryPhase) -> None:
        if view.phase != phase:
            logger.info(f"Container {view.container_id}: {view.phase.value} -> {phase.value}")
            view.phase = phase

    def _spawn(self, coroutine: Coroutine[Any, Any, Any]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coroutine)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @staticmethod
    def _cancel(task: Optional[asyncio.Task]) -> None:
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
