"""Provider 팩토리 Registry"""

import importlib
import logging
from typing import Dict, Type

from src.core.llm.base.factory import LLMProviderFactory
from src.core.llm.enums import ProviderType
from src.core.llm.exceptions import ProviderNotFoundError, ProviderNotInitializedError

logger = logging.getLogger(__name__)

# 기본 제공 Provider: 실제로 쓰일 때 import 한다 (1차만 쓰는 환경에서 2차 SDK 인증 불필요)
BUILTIN_FACTORIES: Dict[ProviderType, str] = {
    ProviderType.VERTEX_AI: "src.core.llm.providers.google.vertexai.factory:VertexAIProviderFactory",
    ProviderType.OPENAI: "src.core.llm.providers.openai.factory:OpenAIProviderFactory",
}


class ProviderRegistry:
    """
    ProviderType → 팩토리 조회.
    1차/2차 Provider가 동시에 쓰이므로 "현재 Provider" 상태는 없다.
    """

    _factories: Dict[ProviderType, Type[LLMProviderFactory]] = {}
    _initialized: Dict[ProviderType, bool] = {}

    @classmethod
    def register(cls, provider_type: ProviderType, factory: Type[LLMProviderFactory]) -> None:
        """테스트나 사설 Provider용 수동 등록 (기본 제공 팩토리보다 우선)"""
        cls._factories[provider_type] = factory
        cls._initialized[provider_type] = False
        logger.debug(f"Registered provider: {provider_type.value}")

    @classmethod
    def get_factory(cls, provider_type: ProviderType) -> Type[LLMProviderFactory]:
        """
        팩토리를 반환하고, 처음 조회될 때 SDK 클라이언트를 초기화한다.

        Raises:
            ProviderNotFoundError: 등록되지 않은 Provider
            ProviderNotInitializedError: SDK import/인증 실패
        """
        factory = cls._factories.get(provider_type) or cls._load_builtin(provider_type)

        if not cls._initialized.get(provider_type, False):
            try:
                factory.initialize()
            except Exception as e:
                logger.error(f"Failed to initialize provider {provider_type.value}: {e}")
                raise ProviderNotInitializedError(provider_type.value, str(e)) from e
            cls._initialized[provider_type] = True
            logger.info(f"Initialized provider: {provider_type.value}")

        return factory

    @classmethod
    def is_initialized(cls, provider_type: ProviderType) -> bool:
        return cls._initialized.get(provider_type, False)

    @classmethod
    def _load_builtin(cls, provider_type: ProviderType) -> Type[LLMProviderFactory]:
        path = BUILTIN_FACTORIES.get(provider_type)
        if path is None:
            raise ProviderNotFoundError(provider_type.value)

        module_name, class_name = path.split(":")
        try:
            factory = getattr(importlib.import_module(module_name), class_name)
        except ImportError as e:
            logger.error(f"Could not import {provider_type.value} provider: {e}")
            raise ProviderNotInitializedError(provider_type.value, str(e)) from e

        cls._factories[provider_type] = factory
        return factory
