import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Optional, Set

from src.core.config import settings
from src.schemas.enums.spark_trigger import SparkTrigger
from src.schemas.models.es.content_item_document import SparkTransactionDocument

logger = logging.getLogger(__name__)


class SparksSink(ABC):
    """보상 포인트 알림 수신처 (게임화 시스템 경계)"""

    @abstractmethod
    async def record(self, transaction: SparkTransactionDocument) -> None:
        ...


class LoggingSparksSink(SparksSink):
    """로컬 개발용: 알림을 로그로만 남긴다."""

    async def record(self, transaction: SparkTransactionDocument) -> None:
        logger.info(
            f"Sparks +{transaction.amount} for child {transaction.child_id} "
            f"({transaction.trigger}: {transaction.reason})"
        )


class ESSparksSink(SparksSink):
    """보상 트랜잭션을 Elasticsearch에 append 한다."""

    def __init__(self, client=None, index_name: Optional[str] = None):
        if client is None:
            from src.core.elasticsearch_config import es_manager
            client = es_manager.client
        self.client = client
        self.index_name = index_name or settings.SPARKS_TRANSACTION_INDEX
        self._index_ready = False

    def _ensure_index_exists(self) -> None:
        if self._index_ready:
            return
        if not self.client.indices.exists(index=self.index_name):
            self.client.indices.create(index=self.index_name, body=SparkTransactionDocument.get_es_mapping())
            logger.info(f"Created index: {self.index_name}")
        self._index_ready = True

    async def record(self, transaction: SparkTransactionDocument) -> None:
        self._ensure_index_exists()
        self.client.index(
            index=self.index_name,
            document=transaction.model_dump(mode="json"),
        )


class SparksService:
    """
    사용자 행동에 대한 보상 포인트 알림 (단방향, fire-and-forget).
    전달 실패는 로그만 남기고 호출자에게 전파하지 않는다.
    """

    def __init__(self, sink: Optional[SparksSink] = None):
        self.sink = sink or LoggingSparksSink()
        self._pending: Set[asyncio.Task] = set()

    def notify(self, child_id: Optional[str], trigger: SparkTrigger, reason: Optional[str] = None) -> Optional[asyncio.Task]:
        if not child_id:
            return None

        transaction = SparkTransactionDocument(
            child_id=child_id,
            trigger=trigger.value,
            amount=trigger.amount,
            reason=reason or trigger.reason,
        )

        try:
            task = asyncio.get_running_loop().create_task(self._deliver(transaction))
        except RuntimeError:
            logger.warning(f"No running event loop; dropping sparks notification for child {child_id}")
            return None

        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _deliver(self, transaction: SparkTransactionDocument) -> None:
        try:
            await self.sink.record(transaction)
        except Exception as e:
            logger.warning(f"Failed to deliver sparks notification for child {transaction.child_id}: {e}")

    async def drain(self) -> None:
        """대기 중인 알림 전달을 모두 기다린다 (종료 시/테스트용)."""
        if self._pending:
            await asyncio.gather(*list(self._pending))
