import logging

from src.core.config import settings
from src.core.elasticsearch_config import ElasticsearchConfig, es_manager
from src.stores.base import ContentStore
from src.stores.memory_content_store import InMemoryContentStore

logger = logging.getLogger(__name__)

STORE_BACKEND_ELASTICSEARCH = "elasticsearch"
STORE_BACKEND_MEMORY = "memory"


def create_content_store(backend: str = None) -> ContentStore:
    """설정(CONTENT_STORE_BACKEND)에 따라 Content Store 구현체를 생성한다."""
    backend = (backend or settings.CONTENT_STORE_BACKEND).lower()

    if backend == STORE_BACKEND_MEMORY:
        logger.info("Using in-memory content store")
        return InMemoryContentStore()

    if backend == STORE_BACKEND_ELASTICSEARCH:
        from src.stores.es_content_store import ESContentStore

        if not es_manager.is_initialized:
            logger.info("Initializing ES manager...")
            es_manager.initialize(ElasticsearchConfig.from_settings(settings))
        return ESContentStore(es_manager.client)

    raise ValueError(f"Unknown CONTENT_STORE_BACKEND: {backend}")
