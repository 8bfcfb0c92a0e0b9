"""생성 파이프라인 공통 예외 (Provider 외)"""


class InvalidGenerationRequestError(ValueError):
    """호출자가 잘못된 생성 요청을 보냄. 파이프라인에서 유일하게 전파되는 오류."""


class PersistenceError(Exception):
    """Content Store 읽기/쓰기 실패. 로깅만 하며 생성을 되돌리지 않는다."""

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(message)


class ItemNotFoundError(PersistenceError):
    """존재하지 않는 아이템에 대한 변경 요청"""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Content item not found: {item_id}")


class GenerationTimeoutError(Exception):
    """클라이언트 전용: 생성 대기 시간 초과. 백그라운드 생성은 계속될 수 있다."""

    def __init__(self, container_id: str, timeout_seconds: float):
        self.container_id = container_id
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Generation for container {container_id} exceeded {timeout_seconds}s")
