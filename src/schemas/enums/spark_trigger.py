from enum import Enum


class SparkTrigger(str, Enum):
    """
    보상 포인트(Sparks)를 지급하는 사용자 행동.
    (값, 지급 포인트, 기본 사유)로 정의된다.
    """
    TASK_COMPLETION = ("task_completion", 7, "Completing a task")
    QUIZ_CORRECT = ("quiz_correct", 5, "Answering quiz correctly")
    CREATIVE_UPLOAD = ("creative_upload", 10, "Uploading creative content")
    NEWS_READ = ("news_read", 3, "Reading a news card")
    NEW_CURIO = ("new_curio", 1, "Starting new Curio")
    RABBIT_HOLE = ("rabbit_hole", 2, "Following a rabbit hole")
    MOOD_CHECK = ("mood_check", 3, "Completing mood check-in")
    STREAK = ("streak", 10, "3-day streak bonus")
    CONTENT_GENERATED = ("content_generated", 1, "Discovering new content")

    def __new__(cls, value: str, amount: int, reason: str):
        obj = str.__new__(cls, value)
        obj._value_ = value
        obj.amount = amount
        obj.reason = reason
        return obj
