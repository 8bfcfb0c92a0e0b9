from enum import Enum


class ContentFlag(str, Enum):
    """사용자가 토글할 수 있는 아이템 플래그 (Content Store 변경 계약의 유일한 대상)"""
    LIKED = "liked"
    BOOKMARKED = "bookmarked"
