import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from src.core.config import settings
from src.core.errors import InvalidGenerationRequestError
from src.core.llm.exceptions import AllProvidersExhaustedError, LLMError, ProviderOverloadedError
from src.core.retry_policy import RetryPolicy
from src.schemas.enums.spark_trigger import SparkTrigger
from src.schemas.models.api.generation_request import GenerationRequest
from src.schemas.models.common.content_item import ContentItem, new_generated_id
from src.services.content_normalizer import ContentNormalizer
from src.services.fallback_generator import DeterministicFallbackGenerator
from src.services.provider_client import BaseProviderClient, ProviderClient
from src.services.response_parser import ResponseParser
from src.services.sparks_service import SparksService

logger = logging.getLogger(__name__)

FALLBACK_SOURCE = "fallback"
QUICK_FALLBACK_MAX_COUNT = 2


@dataclass
class GenerationResult:
    items: List[ContentItem]
    source: str


class GenerationOrchestrator:
    """
    질의 → N개의 타입이 보장된 콘텐츠 아이템.

    1차 Provider → (재시도) → 2차 Provider → (재시도) → 결정적 폴백 순서로 진행하며,
    잘못된 요청을 제외하고는 호출자에게 오류를 전파하지 않는다.
    요청 간 공유 상태가 없으므로 하나의 인스턴스를 동시에 사용해도 된다.
    """

    def __init__(
        self,
        providers: Optional[Sequence[BaseProviderClient]] = None,
        retry_policy: Optional[RetryPolicy] = None,
        parser: Optional[ResponseParser] = None,
        normalizer: Optional[ContentNormalizer] = None,
        fallback: Optional[DeterministicFallbackGenerator] = None,
        sparks: Optional[SparksService] = None,
    ):
        if providers is None:
            providers = [
                ProviderClient(settings.PRIMARY_PROVIDER),
                ProviderClient(settings.SECONDARY_PROVIDER),
            ]
        self.providers = list(providers)
        self.retry_policy = retry_policy or RetryPolicy()
        self.parser = parser or ResponseParser()
        self.normalizer = normalizer or ContentNormalizer()
        self.fallback = fallback or DeterministicFallbackGenerator()
        self.sparks = sparks

    @staticmethod
    def validate_request(request: GenerationRequest) -> None:
        if not request.query or not request.query.strip():
            raise InvalidGenerationRequestError("query must not be blank")
        if request.requested_count <= 0:
            raise InvalidGenerationRequestError(f"requested_count must be positive, got {request.requested_count}")
        if request.skip_count < 0:
            raise InvalidGenerationRequestError(f"skip_count must not be negative, got {request.skip_count}")

    async def generate(self, request: GenerationRequest) -> List[ContentItem]:
        result = await self.generate_with_source(request)
        return result.items

    async def generate_with_source(self, request: GenerationRequest) -> GenerationResult:
        self.validate_request(request)

        if request.quick_mode and request.requested_count <= QUICK_FALLBACK_MAX_COUNT:
            # 첫 화면은 네트워크 생성을 기다리지 않는다
            logger.info(f"Quick mode fast path for query='{request.query}' ({request.requested_count} items)")
            items = self._fallback_items(request, request.requested_count)
            return GenerationResult(items=self._finalize(items, request), source=FALLBACK_SOURCE)

        try:
            items, source = await self._generate_from_providers(request)
        except AllProvidersExhaustedError as e:
            logger.error(f"{e} after {e.attempts} attempts; using deterministic fallback for query='{request.query}'")
            items, source = self._fallback_items(request, request.requested_count), FALLBACK_SOURCE

        result = GenerationResult(items=self._finalize(items, request), source=source)

        if source != FALLBACK_SOURCE and self.sparks is not None:
            self.sparks.notify(request.profile.child_id, SparkTrigger.CONTENT_GENERATED)

        logger.info(f"Generated {len(result.items)} items from {source} for container {request.container_id}")
        return result

    async def _generate_from_providers(self, request: GenerationRequest):
        total_attempts = 0

        for provider in self.providers:
            attempts = 0

            async def attempt(provider=provider) -> List[ContentItem]:
                nonlocal attempts
                attempts += 1
                raw_text = await provider.generate(request)
                raw_items = self.parser.parse(raw_text)
                return self.normalizer.normalize(raw_items, request.query, request.container_id)

            try:
                items = await self.retry_policy.run(attempt, label=provider.name)
                return items, provider.name
            except ProviderOverloadedError as e:
                logger.warning(f"{provider.name} overloaded, failing over without retry: {e}")
            except LLMError as e:
                logger.warning(f"{provider.name} failed after {attempts} attempts: {e}")
            except Exception as e:
                logger.exception(f"Unexpected error from {provider.name}: {e}")
            finally:
                total_attempts += attempts

        raise AllProvidersExhaustedError(attempts=total_attempts)

    def _fallback_items(self, request: GenerationRequest, count: int) -> List[ContentItem]:
        return self.fallback.generate(request.query, count, request.container_id)

    def _finalize(self, items: List[ContentItem], request: GenerationRequest) -> List[ContentItem]:
        """부족분을 폴백으로 채우고, 요청 수로 자른 뒤 새 id와 container_id를 부여한다."""
        if len(items) < request.requested_count:
            shortfall = request.requested_count - len(items)
            logger.info(f"Padding {shortfall} fallback items (provider returned {len(items)})")
            items = list(items) + self._fallback_items(request, shortfall)

        return [
            item.model_copy(update={"id": new_generated_id(), "container_id": request.container_id})
            for item in items[:request.requested_count]
        ]
