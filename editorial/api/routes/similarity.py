"""
FastAPI Routes для проверки оригинальности.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response

from editorial.api.dependencies import (
    ClientDisconnected,
    get_actor,
    get_similarity_service,
    get_workflow_service,
    run_while_connected,
)
from editorial.api.schemas.similarity_schemas import PlagiarismRequest, ReportResponse
from editorial.application.services.similarity_service import SimilarityService
from editorial.application.services.workflow_service import WorkflowService
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.report_status import SimilarityMethod

router = APIRouter(prefix="/articles/{article_id}", tags=["similarity"])

# nginx: клиент закрыл соединение
CLIENT_CLOSED_REQUEST = 499


@router.post("/similarity")
async def run_internal_similarity(
    article_id: UUID,
    threshold: Optional[float] = Query(default=None),
    top: Optional[int] = Query(default=None),
    include_body: bool = False,
    actor: Actor = Depends(get_actor),
    service: SimilarityService = Depends(get_similarity_service)
):
    """
    TF-IDF сравнение вложений статьи.

    Возвращает docs (с фрагментами), pairs по убыванию сходства и meta.
    """
    result = await service.run_internal_similarity(
        article_id, actor, threshold=threshold, top=top, include_body=include_body
    )
    return result.to_dict()


@router.post("/plagiarism")
async def run_external_similarity(
    article_id: UUID,
    request: Request,
    payload: PlagiarismRequest = PlagiarismRequest(),
    actor: Actor = Depends(get_actor),
    service: SimilarityService = Depends(get_similarity_service)
):
    """
    Пакетная проверка внешним инструментом; ответ после завершения.

    Если клиент отключился, инструмент останавливается и временные
    файлы удаляются; отвечаем 499.
    """
    try:
        result = await run_while_connected(
            request,
            service.run_external_similarity(
                article_id, actor, language=payload.language, timeout_seconds=payload.timeout_seconds
            ),
        )
    except ClientDisconnected:
        return Response(status_code=CLIENT_CLOSED_REQUEST)
    return result.to_dict()


@router.get("/reports/latest", response_model=ReportResponse)
async def get_latest_report(
    article_id: UUID,
    method: Optional[SimilarityMethod] = None,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Последний отчёт (404 если проверок не было)."""
    report = await service.get_latest_report(actor, article_id, method)
    return ReportResponse.from_entity(report)
