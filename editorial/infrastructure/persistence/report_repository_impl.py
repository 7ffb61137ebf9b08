"""
SQLAlchemy Repository реализация отчётов о проверке.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from editorial.domain.entities.similarity_report import SimilarityReport
from editorial.domain.repositories.report_repository import ISimilarityReportRepository
from editorial.domain.value_objects.report_status import ReportStatus, SimilarityMethod
from editorial.infrastructure.persistence.models import SimilarityReportModel


class SimilarityReportRepositoryImpl(ISimilarityReportRepository):
    """Отчёты поверх таблицы similarity_reports."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, report: SimilarityReport) -> SimilarityReport:
        self.session.add(
            SimilarityReportModel(
                id=report.id,
                article_id=report.article_id,
                method=report.method.value,
                summary=report.summary,
                artifact_path=report.artifact_path,
                artifact_url=report.artifact_url,
                initiated_by=report.initiated_by,
                status=report.status.value,
                created_at=report.created_at,
            )
        )
        await self.session.flush()
        return report

    async def latest_for_article(
        self,
        article_id: UUID,
        method: Optional[SimilarityMethod] = None
    ) -> Optional[SimilarityReport]:
        query = select(SimilarityReportModel).where(SimilarityReportModel.article_id == article_id)
        if method:
            query = query.where(SimilarityReportModel.method == method.value)
        query = query.order_by(SimilarityReportModel.created_at.desc()).limit(1)

        result = await self.session.execute(query)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def list_for_article(self, article_id: UUID) -> List[SimilarityReport]:
        result = await self.session.execute(
            select(SimilarityReportModel)
            .where(SimilarityReportModel.article_id == article_id)
            .order_by(SimilarityReportModel.created_at.desc())
        )
        return [self._to_entity(m) for m in result.scalars().all()]

    async def delete_for_article(self, article_id: UUID) -> int:
        result = await self.session.execute(
            delete(SimilarityReportModel).where(SimilarityReportModel.article_id == article_id)
        )
        return result.rowcount

    @staticmethod
    def _to_entity(model: SimilarityReportModel) -> SimilarityReport:
        return SimilarityReport(
            id=model.id,
            article_id=model.article_id,
            method=SimilarityMethod(model.method),
            summary=dict(model.summary or {}),
            artifact_path=model.artifact_path,
            artifact_url=model.artifact_url,
            initiated_by=model.initiated_by,
            status=ReportStatus(model.status),
            created_at=model.created_at,
        )
