"""
FastAPI Routes для статей.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from editorial.api.dependencies import get_actor, get_workflow_service
from editorial.api.schemas.article_schemas import (
    ArticleResponse,
    CreateArticleRequest,
    WorkflowEventResponse,
)
from editorial.application.commands.article_commands import CreateArticleCommand
from editorial.application.services.workflow_service import WorkflowService
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.article_status import ArticleStatus

router = APIRouter(prefix="/articles", tags=["articles"])


@router.post("/", response_model=ArticleResponse, status_code=201)
async def create_article(
    request: CreateArticleRequest,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Создать статью (статус draft)."""
    command = CreateArticleCommand(
        actor=actor,
        title=request.title,
        body=request.body,
        summary=request.summary,
        category_id=request.category_id,
        tags=list(request.tags),
        metadata=request.metadata,
    )
    article = await service.create_article(command)
    return ArticleResponse.from_entity(article)


@router.get("/", response_model=List[ArticleResponse])
async def list_articles(
    status: Optional[ArticleStatus] = None,
    author_id: Optional[UUID] = None,
    limit: int = 100,
    offset: int = 0,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Получить список статей."""
    articles = await service.list_articles(actor, status, author_id, limit, offset)
    return [ArticleResponse.from_entity(a) for a in articles]


@router.get("/{article_id}", response_model=ArticleResponse)
async def get_article(
    article_id: UUID,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Получить статью по ID."""
    article = await service.get_article(actor, article_id)
    return ArticleResponse.from_entity(article)


@router.delete("/{article_id}", status_code=204)
async def delete_article(
    article_id: UUID,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    await service.delete_article(actor, article_id)


@router.get("/{article_id}/events", response_model=List[WorkflowEventResponse])
async def list_events(
    article_id: UUID,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Журнал переходов статьи (по времени)."""
    events = await service.list_workflow_events(actor, article_id)
    return [WorkflowEventResponse.from_entity(e) for e in events]
