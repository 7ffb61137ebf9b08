"""
FastAPI Routes для вложений.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from editorial.api.dependencies import get_actor, get_workflow_service
from editorial.api.schemas.article_schemas import AttachmentResponse, RegisterAttachmentRequest
from editorial.application.commands.article_commands import RegisterAttachmentCommand
from editorial.application.services.workflow_service import WorkflowService
from editorial.domain.value_objects.actor import Actor

router = APIRouter(prefix="/articles/{article_id}/attachments", tags=["attachments"])


@router.post("/", response_model=AttachmentResponse, status_code=201)
async def register_attachment(
    article_id: UUID,
    request: RegisterAttachmentRequest,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    """Зарегистрировать уже загруженный файл."""
    command = RegisterAttachmentCommand(
        actor=actor,
        article_id=article_id,
        filename=request.filename,
        storage_path=request.storage_path,
        public_url=request.public_url,
        mime_type=request.mime_type,
        size_bytes=request.size_bytes,
    )
    attachment = await service.register_attachment(command)
    return AttachmentResponse.from_entity(attachment)


@router.get("/", response_model=List[AttachmentResponse])
async def list_attachments(
    article_id: UUID,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    attachments = await service.list_attachments(actor, article_id)
    return [AttachmentResponse.from_entity(a) for a in attachments]


@router.delete("/{attachment_id}", status_code=204)
async def remove_attachment(
    article_id: UUID,
    attachment_id: UUID,
    actor: Actor = Depends(get_actor),
    service: WorkflowService = Depends(get_workflow_service)
):
    await service.remove_attachment(actor, article_id, attachment_id)
