import logging
import os
import sys

import pytest

# 프로젝트 루트 경로 설정
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.schemas.models.api.generation_request import GenerationRequest
from src.services.fallback_generator import DeterministicFallbackGenerator
from src.stores.memory_content_store import InMemoryContentStore
from tests.fakes import RecordingSleep

logging.basicConfig(level=logging.INFO)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def memory_store() -> InMemoryContentStore:
    return InMemoryContentStore()


@pytest.fixture
def fallback_generator() -> DeterministicFallbackGenerator:
    return DeterministicFallbackGenerator()


@pytest.fixture
def generation_request():
    def _build(**overrides) -> GenerationRequest:
        values = {
            "query": "volcanoes",
            "container_id": "curio-1",
            "requested_count": 3,
        }
        values.update(overrides)
        return GenerationRequest(**values)
    return _build
