"""
FastAPI Routes для команд редакционного процесса.

Все команды читают текущий статус из хранилища; клиент передаёт только
намерение и комментарий.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from editorial.api.dependencies import get_actor, get_workflow_service
from editorial.api.schemas.article_schemas import ArticleResponse
from editorial.api.schemas.workflow_schemas import (
    AssignmentResponse,
    AssignmentStatusRequest,
    AssignRequest,
    FinalizeRequest,
    NoteRequest,
    PublishRequest,
    RejectRequest,
    RequestChangesRequest,
    SaveDraftRequest,
    UnassignRequest,
)
from editorial.application.services.workflow_service import WorkflowService
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.assignment_status import AssignmentKind

router = APIRouter(tags=["workflow"])


@router.post("/articles/{article_id}/submit", response_model=ArticleResponse)
async def submit_article(
    article_id: UUID,
    request: NoteRequest = NoteRequest(),
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Отправить на рассмотрение (в т.ч. повторно после правок)."""
    article = await service.submit_article(actor, article_id, request.note)
    return ArticleResponse.from_entity(article)


@router.post("/articles/{article_id}/return-to-draft", response_model=ArticleResponse)
async def return_to_draft(
    article_id: UUID,
    request: NoteRequest = NoteRequest(),
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    article = await service.return_to_draft(actor, article_id, request.note)
    return ArticleResponse.from_entity(article)


@router.post("/articles/{article_id}/assignments", response_model=AssignmentResponse, status_code=201)
async def assign(
    article_id: UUID,
    request: AssignRequest,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Назначить редактора или рецензента (предыдущее назначение отменяется)."""
    if request.kind == AssignmentKind.REVIEWER:
        assignment = await service.assign_reviewer(
            actor, article_id, request.assignee_id, request.due_date, request.note
        )
    else:
        assignment = await service.assign_editor(
            actor, article_id, request.assignee_id, request.due_date, request.note
        )
    return AssignmentResponse.from_entity(assignment)


@router.post("/articles/{article_id}/unassign", response_model=List[AssignmentResponse])
async def unassign(
    article_id: UUID,
    request: UnassignRequest = UnassignRequest(),
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    cancelled = await service.unassign(actor, article_id, request.kind, request.note)
    return [AssignmentResponse.from_entity(a) for a in cancelled]


@router.get("/articles/{article_id}/assignments", response_model=List[AssignmentResponse])
async def list_assignments(
    article_id: UUID,
    kind: Optional[AssignmentKind] = None,
    active_only: bool = False,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    assignments = await service.list_assignments(actor, article_id, kind, active_only)
    return [AssignmentResponse.from_entity(a) for a in assignments]


@router.put("/articles/{article_id}/draft", response_model=ArticleResponse)
async def save_draft(
    article_id: UUID,
    request: SaveDraftRequest,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Сохранить правку без смены статуса."""
    article = await service.save_draft(
        actor, article_id, body=request.body, seo=request.seo, editor_notes=request.editor_notes
    )
    return ArticleResponse.from_entity(article)


@router.post("/articles/{article_id}/finalize", response_model=ArticleResponse)
async def finalize_editing(
    article_id: UUID,
    request: FinalizeRequest,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    article = await service.finalize_editing(
        actor, article_id, request.mode, body=request.body, note=request.note
    )
    return ArticleResponse.from_entity(article)


@router.post("/articles/{article_id}/request-changes", response_model=ArticleResponse)
async def request_changes(
    article_id: UUID,
    request: RequestChangesRequest,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    article = await service.request_author_changes(actor, article_id, request.notes, request.severity)
    return ArticleResponse.from_entity(article)


@router.post("/articles/{article_id}/approve", response_model=ArticleResponse)
async def approve(
    article_id: UUID,
    request: NoteRequest = NoteRequest(),
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    article = await service.approve_for_publishing(actor, article_id, request.note)
    return ArticleResponse.from_entity(article)


@router.post("/articles/{article_id}/publish", response_model=ArticleResponse)
async def publish(
    article_id: UUID,
    request: PublishRequest,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    article = await service.publish_content(actor, article_id, request.price, request.is_free)
    return ArticleResponse.from_entity(article)


@router.post("/articles/{article_id}/reject", response_model=ArticleResponse)
async def reject(
    article_id: UUID,
    request: RejectRequest,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    article = await service.reject_article(actor, article_id, request.notes)
    return ArticleResponse.from_entity(article)


@router.patch("/assignments/{assignment_id}/status", response_model=AssignmentResponse)
async def update_assignment_status(
    assignment_id: UUID,
    request: AssignmentStatusRequest,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Статус назначения меняет сам исполнитель или менеджер."""
    assignment = await service.update_assignment_status(
        actor, assignment_id, request.status, request.feedback
    )
    return AssignmentResponse.from_entity(assignment)
