"""Vertex AI (google-genai, vertexai=True) Provider Factory"""

import logging
import os
from typing import Optional

import google.genai as genai
from google.genai import types

from src.core.config import settings
from src.core.llm.base.factory import LLMProviderFactory
from src.core.llm.enums import ProviderType
from src.core.llm.models import SessionConfig
from src.core.llm.providers.google.vertexai.session import VertexAISession

logger = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def load_service_account_credentials(path: Optional[str]):
    """
    서비스 계정 키 파일을 cloud-platform scope로 로드한다.
    경로가 없거나 읽을 수 없으면 None (ADC 사용).
    """
    if not path:
        return None
    if not os.path.exists(path):
        logger.error(f"Credentials file NOT FOUND at: {path}")
        return None

    from google.oauth2 import service_account

    try:
        credentials = service_account.Credentials.from_service_account_file(path)
    except (ValueError, OSError) as e:
        logger.warning(f"Failed to load credentials file {path}: {e}")
        return None
    logger.info(f"Loaded service account credentials from: {path}")
    return credentials.with_scopes([CLOUD_PLATFORM_SCOPE])


class VertexAIProviderFactory(LLMProviderFactory):
    """1차 Provider 기본값. 클라이언트는 프로세스당 하나를 공유한다."""

    provider_type = ProviderType.VERTEX_AI
    _client: Optional[genai.Client] = None

    @classmethod
    def initialize(cls) -> None:
        logger.info(f"Initializing Vertex AI client (project: {settings.GCP_PROJECT_ID}, region: {settings.GCP_REGION})")
        cls._client = genai.Client(
            vertexai=True,
            project=settings.GCP_PROJECT_ID,
            location=settings.GCP_REGION,
            credentials=load_service_account_credentials(settings.GOOGLE_APPLICATION_CREDENTIALS),
        )

    @classmethod
    def is_client_ready(cls) -> bool:
        return cls._client is not None

    @classmethod
    def create_session(cls, config: SessionConfig) -> VertexAISession:
        generate_config = types.GenerateContentConfig(
            temperature=config.temperature,
            system_instruction=config.system_instruction,
            response_mime_type=config.response_format.mime_type,
            max_output_tokens=config.max_output_tokens,
        )
        return VertexAISession(client=cls._client, model_name=config.model_name, config=generate_config)

    @classmethod
    def default_model_name(cls) -> str:
        return settings.VERTEX_AI_MODEL
