from enum import Enum


class DeliveryPhase(str, Enum):
    """Progressive Delivery Controller 상태"""
    EMPTY = "EMPTY"                             # 컨테이너 최초 진입 전
    QUICK_PENDING = "QUICK_PENDING"             # 빠른 배치 요청 중 (placeholder 표시)
    QUICK_SHOWN = "QUICK_SHOWN"                 # 빠른 배치 표시 완료
    BACKGROUND_PENDING = "BACKGROUND_PENDING"   # 나머지 배치 백그라운드 요청 중
    REVEALING = "REVEALING"                     # 버퍼에서 한 개씩 노출 중
    STEADY = "STEADY"                           # 생성 완료, 페이지네이션만 수행
    ERROR = "ERROR"                             # 생성 대기 시간 초과

    @property
    def is_pending(self) -> bool:
        return self in (
            DeliveryPhase.QUICK_PENDING,
            DeliveryPhase.QUICK_SHOWN,
            DeliveryPhase.BACKGROUND_PENDING,
        )
