"""
Pydantic schemas для проверки оригинальности.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from editorial.domain.entities.similarity_report import SimilarityReport


class PlagiarismRequest(BaseModel):
    """Параметры внешнего анализа."""

    language: Optional[str] = None
    timeout_seconds: Optional[float] = Field(default=None, gt=0)


class ReportResponse(BaseModel):
    id: UUID
    article_id: UUID
    method: str
    status: str
    summary: dict
    artifact_url: Optional[str]
    initiated_by: Optional[UUID]
    created_at: datetime

    @classmethod
    def from_entity(cls, entity: SimilarityReport) -> "ReportResponse":
        return cls(
            id=entity.id,
            article_id=entity.article_id,
            method=entity.method.value,
            status=entity.status.value,
            summary=entity.summary,
            artifact_url=entity.artifact_url,
            initiated_by=entity.initiated_by,
            created_at=entity.created_at,
        )
