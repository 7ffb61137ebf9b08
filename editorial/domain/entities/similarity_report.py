"""
Доменная сущность: SimilarityReport

Результат проверки оригинальности статьи.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from editorial.domain.value_objects.report_status import ReportStatus, SimilarityMethod


@dataclass
class SimilarityReport:
    """
    Отчёт о проверке.

    summary содержит max_similarity / avg_similarity / pairs
    либо заглушку {"notice": ...}, если сводку получить не удалось.
    """

    article_id: UUID
    method: SimilarityMethod
    summary: dict = field(default_factory=dict)
    initiated_by: Optional[UUID] = None
    status: ReportStatus = ReportStatus.COMPLETED
    artifact_path: Optional[str] = None
    artifact_url: Optional[str] = None
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def max_similarity(self) -> Optional[float]:
        return self.summary.get("max_similarity")

    @property
    def is_degraded(self) -> bool:
        """Сводка заменена заглушкой."""
        return "notice" in self.summary
