from typing import List
from unittest.mock import MagicMock

import pytest

from src.schemas.enums.spark_trigger import SparkTrigger
from src.schemas.models.es.content_item_document import SparkTransactionDocument
from src.services.sparks_service import ESSparksSink, SparksService, SparksSink


class RecordingSink(SparksSink):

    def __init__(self, error: Exception = None):
        self.transactions: List[SparkTransactionDocument] = []
        self.error = error

    async def record(self, transaction: SparkTransactionDocument) -> None:
        if self.error:
            raise self.error
        self.transactions.append(transaction)


class TestSparksService:

    @pytest.mark.asyncio
    async def test_notify_records_amount_and_default_reason(self):
        sink = RecordingSink()
        service = SparksService(sink)

        task = service.notify("kid-1", SparkTrigger.NEW_CURIO)
        await service.drain()

        assert task is not None and task.done()
        [transaction] = sink.transactions
        assert transaction.child_id == "kid-1"
        assert transaction.trigger == "new_curio"
        assert transaction.amount == 1
        assert transaction.reason == "Starting new Curio"

    @pytest.mark.asyncio
    async def test_custom_reason(self):
        sink = RecordingSink()
        service = SparksService(sink)

        service.notify("kid-1", SparkTrigger.QUIZ_CORRECT, reason="Volcano quiz")
        await service.drain()

        assert sink.transactions[0].reason == "Volcano quiz"
        assert sink.transactions[0].amount == 5

    @pytest.mark.asyncio
    async def test_without_child_nothing_is_sent(self):
        sink = RecordingSink()
        service = SparksService(sink)

        assert service.notify(None, SparkTrigger.STREAK) is None
        await service.drain()

        assert sink.transactions == []

    @pytest.mark.asyncio
    async def test_sink_failure_is_not_propagated(self):
        """알림 실패는 로그만 남기고 호출자에게 전파하지 않는다"""
        service = SparksService(RecordingSink(error=ConnectionError("sink down")))

        service.notify("kid-1", SparkTrigger.TASK_COMPLETION)
        await service.drain()

    def test_notify_without_event_loop_is_dropped(self):
        sink = RecordingSink()
        assert SparksService(sink).notify("kid-1", SparkTrigger.STREAK) is None

    @pytest.mark.parametrize("trigger, amount", [
        (SparkTrigger.TASK_COMPLETION, 7),
        (SparkTrigger.CREATIVE_UPLOAD, 10),
        (SparkTrigger.RABBIT_HOLE, 2),
        (SparkTrigger.CONTENT_GENERATED, 1),
    ])
    def test_trigger_amounts(self, trigger, amount):
        assert trigger.amount == amount
        assert SparkTrigger(trigger.value) is trigger


class TestESSparksSink:

    @pytest.mark.asyncio
    async def test_creates_index_once_and_appends(self):
        # Given
        client = MagicMock()
        client.indices.exists.return_value = False
        sink = ESSparksSink(client=client, index_name="sparks-test")
        transaction = SparkTransactionDocument(child_id="kid-1", trigger="streak", amount=10, reason="bonus")

        # When
        await sink.record(transaction)
        await sink.record(transaction)

        # Then
        client.indices.create.assert_called_once()
        assert client.index.call_count == 2
        call_args = client.index.call_args
        assert call_args.kwargs["index"] == "sparks-test"
        assert call_args.kwargs["document"]["child_id"] == "kid-1"
        assert call_args.kwargs["document"]["amount"] == 10
