"""Provider 팩토리 추상 클래스"""

import logging
from abc import ABC, abstractmethod
from typing import ClassVar

from src.core.llm.base.session import LLMProviderSession
from src.core.llm.enums import ProviderType
from src.core.llm.models import SessionConfig

logger = logging.getLogger(__name__)


class LLMProviderFactory(ABC):
    """
    SDK 클라이언트를 클래스 단위로 한 번만 만들고, 설정별 세션을 찍어낸다.
    """

    provider_type: ClassVar[ProviderType]

    @classmethod
    @abstractmethod
    def initialize(cls) -> None:
        """SDK 클라이언트 생성 및 인증"""
        ...

    @classmethod
    @abstractmethod
    def is_client_ready(cls) -> bool:
        ...

    @classmethod
    @abstractmethod
    def create_session(cls, config: SessionConfig) -> LLMProviderSession:
        ...

    @classmethod
    @abstractmethod
    def default_model_name(cls) -> str:
        """설정에 지정된 이 Provider의 모델명"""
        ...

    @classmethod
    def start_session(cls, config: SessionConfig) -> LLMProviderSession:
        if not cls.is_client_ready():
            cls.initialize()
        session = cls.create_session(config)
        logger.debug(f"{cls.provider_type.value} session '{config.name}' created (model: {config.model_name})")
        return session
