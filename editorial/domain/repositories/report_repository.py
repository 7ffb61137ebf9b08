"""
Repository Interface: ISimilarityReportRepository
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from editorial.domain.entities.similarity_report import SimilarityReport
from editorial.domain.value_objects.report_status import SimilarityMethod


class ISimilarityReportRepository(ABC):
    """Интерфейс репозитория отчётов о проверке."""

    @abstractmethod
    async def add(self, report: SimilarityReport) -> SimilarityReport:
        pass

    @abstractmethod
    async def latest_for_article(
        self,
        article_id: UUID,
        method: Optional[SimilarityMethod] = None
    ) -> Optional[SimilarityReport]:
        """Последний отчёт по created_at."""
        pass

    @abstractmethod
    async def list_for_article(self, article_id: UUID) -> List[SimilarityReport]:
        pass

    @abstractmethod
    async def delete_for_article(self, article_id: UUID) -> int:
        pass
