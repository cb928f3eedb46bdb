from enum import Enum


class NoticeVariantEnum(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"

class QuizPhaseEnum(str, Enum):
    COMING_SOON = "coming_soon"
    ANSWERING = "answering"
    ANSWERED = "answered"
    RESULTS = "results"

ANONYMOUS_DISPLAY_NAME = "Anonymous"
