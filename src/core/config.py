import os
import json
import logging
from typing import Optional, Any, Dict
from pydantic_settings import BaseSettings, SettingsConfigDict
from google.cloud import secretmanager
from dotenv import load_dotenv

from src.core.llm.enums import ProviderType

# Configure Logger
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("config")

def find_env_local():
    """
    Search for .env.local in current directory or the repository root.
    """
    current = os.getcwd()
    possible_paths = [
        os.path.join(current, ".env.local"),
        os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))), ".env.local")
    ]

    for path in possible_paths:
        if os.path.exists(path):
            return path
    return None

ENV_LOCAL_PATH = find_env_local()

if ENV_LOCAL_PATH:
    logger.info(f"Initializing using explicitly found file: {ENV_LOCAL_PATH}")
    load_dotenv(ENV_LOCAL_PATH, override=True)
else:
    logger.warning(".env.local not found in standard locations.")

class Settings(BaseSettings):
    """
    Application settings and configuration.
    """
    # [Profile Configuration]
    ENV: str = "local"

    # [Server]
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000
    API_BASE_URL: str = "http://localhost:8000"

    # [Provider Selection]
    # 1차 Provider 실패(과부하/재시도 소진) 시 2차 Provider로 페일오버
    PRIMARY_PROVIDER: ProviderType = ProviderType.VERTEX_AI
    SECONDARY_PROVIDER: ProviderType = ProviderType.OPENAI

    # [GCP Configuration]
    GCP_PROJECT_ID: str = "local-development"
    GCP_REGION: str = "asia-northeast3"
    GOOGLE_APPLICATION_CREDENTIALS: Optional[str] = None

    # [Model Configuration]
    VERTEX_AI_MODEL: str = "gemini-2.5-flash"
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_ORG_ID: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4o-mini"

    # [LLM Generation Configuration]
    # 아이용 콘텐츠는 다양성이 필요하므로 0.7 (OpenAI도 동일 값 사용)
    GENERATION_TEMPERATURE: float = 0.7
    MAX_OUTPUT_TOKENS: int = 4096

    # [Retry Policy]
    # 총 시도 횟수 = GENERATION_MAX_RETRIES + 1
    GENERATION_MAX_RETRIES: int = 2
    GENERATION_BASE_DELAY_SECONDS: float = 0.5

    # [Progressive Delivery]
    QUICK_BATCH_SIZE: int = 2
    BACKGROUND_BATCH_SIZE: int = 8
    REVEAL_DELAY_SECONDS: float = 0.5
    REVEAL_PASS_SIZE: int = 8
    GENERATION_TIMEOUT_SECONDS: float = 20.0
    PAGE_SIZE: int = 10

    # [Content Store]
    # elasticsearch | memory
    CONTENT_STORE_BACKEND: str = "memory"
    ES_HOST: str = "localhost"
    ES_PORT: Optional[int] = 9200
    ES_USERNAME: Optional[str] = None
    ES_PASSWORD: Optional[str] = None
    ES_USE_SSL: bool = False
    ES_VERIFY_CERTS: bool = True
    ES_TIMEOUT: int = 30
    CONTENT_ITEM_INDEX: str = "curio-content-items-v1"
    CONTENT_ITEM_ALIAS: str = "curio-content-items"
    SPARKS_TRANSACTION_INDEX: str = "curio-sparks-transactions"

    model_config = SettingsConfigDict(
        env_file=ENV_LOCAL_PATH,
        env_file_encoding="utf-8",
        extra="ignore"
    )

def fetch_config_from_gsm(env: str, project_id: str) -> Dict[str, Any]:
    """Fetches configuration JSON from Google Secret Manager."""
    secret_id = f"{env}-curio-block-agent-config"
    logger.info(f"Loading configuration from Secret Manager: {secret_id}")

    try:
        client = secretmanager.SecretManagerServiceClient()
        name = f"projects/{project_id}/secrets/{secret_id}/versions/latest"
        response = client.access_secret_version(request={"name": name})
        return json.loads(response.payload.data.decode("UTF-8"))
    except Exception as e:
        logger.error(f"Failed to load secret '{secret_id}': {e}")
        raise RuntimeError(f"Could not load config for ENV='{env}' from GSM.") from e

def init_settings() -> Settings:
    """Initializes settings based on the execution environment."""
    config = Settings()

    if not ENV_LOCAL_PATH and config.ENV != "local":
        env_profile = os.getenv("ENV")
        project_id = os.getenv("GCP_PROJECT_ID")
        if env_profile and project_id:
            secrets = fetch_config_from_gsm(env_profile, project_id)
            return Settings(**secrets)

    logger.info(
        f"Loaded Config - Env: {config.ENV}, Providers: {config.PRIMARY_PROVIDER.value} -> {config.SECONDARY_PROVIDER.value}, "
        f"Store: {config.CONTENT_STORE_BACKEND}"
    )
    return config

# Global settings instance
settings = init_settings()
