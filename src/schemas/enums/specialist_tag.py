from enum import Enum
from typing import Any


class SpecialistTag(str, Enum):
    """
    콘텐츠를 전달하는 스페셜리스트 캐릭터 (UI 테마 전용, 생성 로직에는 영향 없음)
    """
    NOVA = "nova"       # Space Expert
    SPARK = "spark"     # Creative Genius
    PRISM = "prism"     # Science Wizard
    PIXEL = "pixel"     # Tech Guru
    ATLAS = "atlas"     # History Explorer
    LOTUS = "lotus"     # Nature Guide
    WHIZZY = "whizzy"   # Learning Guide

    @classmethod
    def coerce(cls, value: Any) -> "SpecialistTag":
        """알 수 없는 스페셜리스트는 기본 가이드(WHIZZY)로 대체"""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        return cls.WHIZZY
