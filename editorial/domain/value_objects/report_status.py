"""
Value Objects: SimilarityMethod, ReportStatus
"""

from enum import Enum


class SimilarityMethod(str, Enum):
    """Метод проверки оригинальности."""

    TFIDF = "tfidf"
    EXTERNAL_TOOL = "external-tool"


class ReportStatus(str, Enum):
    """Статус отчёта о проверке."""

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
