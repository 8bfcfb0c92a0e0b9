import json
import logging
from typing import Any, Dict, Optional

from src.core.elasticsearch_config import es_manager
from src.core.llm.enums import ProviderType
from src.core.llm.registry import ProviderRegistry
from src.schemas.models.api.generation_request import GenerationRequest
from src.services.generation_orchestrator import GenerationOrchestrator
from src.services.sparks_service import ESSparksSink, SparksService
from src.stores.base import ContentStore
from src.stores.store_factory import create_content_store

logger = logging.getLogger(__name__)


class CurioBlockAgent:
    """
    Vertex AI Reasoning Engine Compatible Agent.
    Serves as the main entry point, wiring the Content Store, Sparks notifier and Orchestrator.
    """

    def __init__(self):
        self.store: Optional[ContentStore] = None
        self.sparks: Optional[SparksService] = None
        self.orchestrator: Optional[GenerationOrchestrator] = None

    @property
    def is_set_up(self) -> bool:
        return self.orchestrator is not None

    def set_up(
        self,
        store: Optional[ContentStore] = None,
        sparks: Optional[SparksService] = None,
        orchestrator: Optional[GenerationOrchestrator] = None,
    ):
        """
        Initialization logic called by the Reasoning Engine or Local Wrapper.
        Collaborators can be injected (tests); otherwise they are built from settings.
        """
        logger.info("Setting up CurioBlockAgent services...")

        self.store = store or create_content_store()
        if sparks is None:
            sparks = SparksService(ESSparksSink()) if es_manager.is_initialized else SparksService()
        self.sparks = sparks
        self.orchestrator = orchestrator or GenerationOrchestrator(sparks=self.sparks)

        for provider_type in ProviderType:
            logger.info(f"Provider {provider_type.value} initialized: {ProviderRegistry.is_initialized(provider_type)}")
        logger.info("Agent setup complete.")

    async def tear_down(self):
        if self.sparks is not None:
            await self.sparks.drain()
        es_manager.close()
        logger.info("Agent torn down.")

    async def query(self, **kwargs) -> Dict[str, Any]:
        """
        Main query method. Executes the generation pipeline.
        kwargs는 GenerationRequest 필드(camelCase/snake_case)를 받는다.
        """
        if not self.orchestrator:
            raise RuntimeError("Agent not set up. Call set_up() before query().")

        try:
            request = GenerationRequest.model_validate(kwargs)
            result = await self.orchestrator.generate_with_source(request)
            return {
                "items": [json.loads(item.model_dump_json(by_alias=True)) for item in result.items],
                "source": result.source,
            }
        except Exception as e:
            logger.error(f"Error during agent query: {e}")
            raise
