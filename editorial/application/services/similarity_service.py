# -*- coding: utf-8 -*-
"""
Application Service: проверка оригинальности.

- run_internal_similarity: TF-IDF сравнение вложений статьи между собой
- run_external_similarity: пакетная проверка внешним инструментом
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple
from uuid import UUID

from editorial.application.analysis.attachment_loader import AttachmentLoader, LoadedAttachment
from editorial.application.analysis.external_orchestrator import (
    ExternalAnalysisOrchestrator,
    ExternalAnalysisResult,
)
from editorial.application.analysis.similarity_engine import (
    SimilarityEngine,
    SimilarityResult,
    SourceDocument,
    clamp_top,
    validate_threshold,
)
from editorial.application.analysis.text_extraction import extract_text, html_to_text
from editorial.domain.entities.similarity_report import SimilarityReport
from editorial.domain.repositories.unit_of_work import IUnitOfWork
from editorial.domain.services.access_policy import ensure_read_access
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.report_status import SimilarityMethod
from editorial.shared.exceptions.domain_exceptions import EntityNotFoundError
from editorial.shared.exceptions.infrastructure_exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

BODY_DOC_ID = "article-body"
EXCERPT_LENGTH = 200


@dataclass
class InternalSimilarityResult:
    """Результат внутреннего сравнения."""

    article_id: UUID
    documents: List[SourceDocument] = field(default_factory=list)
    result: SimilarityResult = field(default_factory=SimilarityResult)
    threshold: float = 0.6
    top: int = 20
    report_id: Optional[UUID] = None

    def to_dict(self) -> dict:
        return {
            "article_id": str(self.article_id),
            "docs": [
                {"id": d.doc_id, "filename": d.filename, "excerpt": d.text[:EXCERPT_LENGTH]}
                for d in self.result.documents
            ],
            "pairs": [p.to_dict() for p in self.result.pairs],
            "meta": {
                "threshold": self.threshold,
                "top": self.top,
                "documents": len(self.result.documents),
                "total_pairs": self.result.total_pairs,
                "vocabulary_size": self.result.vocabulary_size,
                "report_id": str(self.report_id) if self.report_id else None,
            },
        }


def build_documents(
    loaded: Sequence[LoadedAttachment],
    body: Optional[str] = None
) -> List[SourceDocument]:
    """Извлечь текст вложений (и тела статьи, если передано)."""
    documents = [
        SourceDocument(
            doc_id=str(item.attachment.id),
            filename=item.attachment.display_name,
            text=extract_text(item.attachment.display_name, item.data),
        )
        for item in loaded
    ]
    if body:
        documents.append(SourceDocument(doc_id=BODY_DOC_ID, filename=BODY_DOC_ID, text=html_to_text(body)))
    return documents


class SimilarityService:
    """
    Application Service для проверки оригинальности.

    Аргументы:
        uow_factory: Фабрика unit of work
        loader: Загрузчик вложений
        engine: TF-IDF движок
        orchestrator: Оркестратор внешнего анализа
        default_threshold: Порог по умолчанию
        default_top: Количество пар по умолчанию
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        loader: AttachmentLoader,
        engine: SimilarityEngine,
        orchestrator: Optional[ExternalAnalysisOrchestrator] = None,
        default_threshold: float = 0.6,
        default_top: int = 20
    ):
        self.uow_factory = uow_factory
        self.loader = loader
        self.engine = engine
        self.orchestrator = orchestrator
        self.default_threshold = default_threshold
        self.default_top = default_top

    async def run_internal_similarity(
        self,
        article_id: UUID,
        actor: Actor,
        threshold: Optional[float] = None,
        top: Optional[int] = None,
        include_body: bool = False,
        persist: bool = True
    ) -> InternalSimilarityResult:
        """
        Сравнить вложения статьи между собой.

        Аргументы:
            article_id: UUID статьи
            actor: Участник (нужен доступ к материалам статьи)
            threshold: Минимальное сходство пары, [0, 1]
            top: Максимум пар (ограничивается [1, max_top])
            include_body: Добавить текст статьи как отдельный документ
            persist: Сохранить отчёт tfidf

        Возвращает:
            InternalSimilarityResult; меньше двух документов - пустой список пар
        """
        threshold = validate_threshold(threshold, self.default_threshold)
        top = clamp_top(top, self.default_top, self.engine.max_top)

        article, attachments = await self._load(article_id, actor)

        loaded = await self.loader.load_all(attachments)
        body = article.body if include_body else None
        result = await asyncio.to_thread(self._compute, loaded, body, threshold, top)

        logger.info(
            f"[Similarity] Article {article_id}: {len(result.documents)} docs, "
            f"{len(result.pairs)}/{result.total_pairs} pairs >= {threshold}"
        )

        outcome = InternalSimilarityResult(
            article_id=article_id,
            documents=result.documents,
            result=result,
            threshold=threshold,
            top=top,
        )

        if persist:
            report = SimilarityReport(
                article_id=article_id,
                method=SimilarityMethod.TFIDF,
                initiated_by=actor.user_id,
                summary={
                    "max_similarity": result.max_similarity,
                    "avg_similarity": result.avg_similarity,
                    "pairs": [p.to_dict() for p in result.pairs],
                    "threshold": threshold,
                    "documents": len(result.documents),
                },
            )
            async with self.uow_factory() as uow:
                await uow.reports.add(report)
                await uow.commit()
            outcome.report_id = report.id

        return outcome

    async def run_external_similarity(
        self,
        article_id: UUID,
        actor: Actor,
        language: Optional[str] = None,
        timeout_seconds: Optional[float] = None
    ) -> ExternalAnalysisResult:
        """Пакетная проверка внешним инструментом.

        Raises:
            ExternalServiceError: Внешний инструмент не настроен
        """
        if self.orchestrator is None:
            raise ExternalServiceError("External analysis is not configured")
        return await self.orchestrator.run(
            article_id, actor, language=language, timeout_seconds=timeout_seconds
        )

    def _compute(
        self,
        loaded: Sequence[LoadedAttachment],
        body: Optional[str],
        threshold: float,
        top: int
    ) -> SimilarityResult:
        documents = build_documents(loaded, body)
        return self.engine.compare(documents, threshold=threshold, top=top)

    async def _load(self, article_id: UUID, actor: Actor) -> Tuple:
        async with self.uow_factory() as uow:
            article = await uow.articles.get(article_id)
            if article is None:
                raise EntityNotFoundError(f"Article {article_id} not found")
            assignments = await uow.assignments.list_for_article(article_id, active_only=True)
            ensure_read_access(actor, article, assignments)
            attachments = await uow.attachments.list_for_article(article_id)
        return article, attachments
