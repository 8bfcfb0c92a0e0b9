from dataclasses import dataclass
from typing import Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class ElasticsearchConfig:
    """Elasticsearch 연결 설정"""
    host: str
    port: Optional[int] = 9200
    username: Optional[str] = None
    password: Optional[str] = None
    use_ssl: bool = False
    verify_certs: bool = True
    timeout: int = 30

    @classmethod
    def from_settings(cls, settings) -> "ElasticsearchConfig":
        return cls(
            host=settings.ES_HOST,
            port=settings.ES_PORT,
            username=settings.ES_USERNAME,
            password=settings.ES_PASSWORD,
            use_ssl=settings.ES_USE_SSL,
            verify_certs=settings.ES_VERIFY_CERTS,
            timeout=settings.ES_TIMEOUT,
        )

    def build_host_url(self) -> str:
        """호스트 URL 구성 (http:// 또는 https://가 포함된 경우 포트 생략)"""
        host = self.host.rstrip('/')
        if host.startswith('http://') or host.startswith('https://'):
            return host
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{host}:{self.port}"


class ElasticsearchManager:
    """Elasticsearch 연결 관리자 (콘텐츠 아이템/보상 트랜잭션 저장)"""

    def __init__(self):
        self._client: Optional['Elasticsearch'] = None

    def initialize(self, config: ElasticsearchConfig):
        """ES 클라이언트 초기화"""
        try:
            from elasticsearch import Elasticsearch

            # ES 8.x 서버와의 호환성을 위해 headers에 compatible-with=8 설정
            self._client = Elasticsearch(
                hosts=[config.build_host_url()],
                basic_auth=(config.username, config.password) if config.username else None,
                verify_certs=config.verify_certs,
                request_timeout=config.timeout,
                headers={"Accept": "application/vnd.elasticsearch+json; compatible-with=8"}
            )

            # 연결 테스트 (ping 대신 info() 사용 - 더 안정적)
            try:
                info = self._client.info()
                logger.info(f"ES connected: {info['cluster_name']}")
            except Exception as e:
                logger.error(f"ES connection test failed: {e}")
                raise ConnectionError(f"ES cluster connection failed: {e}")

            logger.info("Elasticsearch client initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize Elasticsearch client: {e}")
            raise

    @property
    def is_initialized(self) -> bool:
        return self._client is not None

    @property
    def client(self) -> 'Elasticsearch':
        if not self._client:
            raise RuntimeError("Elasticsearch client not initialized")
        return self._client

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None


# 싱글톤 인스턴스
es_manager = ElasticsearchManager()
