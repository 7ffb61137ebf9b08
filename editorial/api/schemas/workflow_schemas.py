"""
Pydantic schemas для команд редакционного процесса.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from editorial.application.commands.workflow_commands import ChangeSeverity, FinalizeMode
from editorial.domain.entities.assignment import Assignment
from editorial.domain.value_objects.assignment_status import AssignmentKind, AssignmentStatus


class NoteRequest(BaseModel):
    """Команда с необязательным комментарием."""

    note: str = ""


class AssignRequest(BaseModel):
    assignee_id: UUID
    kind: AssignmentKind = AssignmentKind.EDITOR
    due_date: Optional[datetime] = None
    note: str = ""


class UnassignRequest(BaseModel):
    kind: AssignmentKind = AssignmentKind.EDITOR
    note: str = ""


class SaveDraftRequest(BaseModel):
    body: Optional[str] = None
    seo: Optional[dict] = None
    editor_notes: Optional[str] = None


class FinalizeRequest(BaseModel):
    mode: FinalizeMode
    body: Optional[str] = None
    note: str = ""


class RequestChangesRequest(BaseModel):
    notes: str = Field(..., min_length=1)
    severity: ChangeSeverity = ChangeSeverity.MEDIUM


class RejectRequest(BaseModel):
    notes: str = Field(..., min_length=1)


class PublishRequest(BaseModel):
    price: Optional[float] = None
    is_free: bool = False


class AssignmentStatusRequest(BaseModel):
    status: AssignmentStatus
    feedback: str = ""


class AssignmentResponse(BaseModel):
    id: UUID
    article_id: UUID
    assignee_id: UUID
    assigned_by: UUID
    kind: str
    status: str
    due_date: Optional[datetime]
    assigned_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, entity: Assignment) -> "AssignmentResponse":
        return cls(
            id=entity.id,
            article_id=entity.article_id,
            assignee_id=entity.assignee_id,
            assigned_by=entity.assigned_by,
            kind=entity.kind.value,
            status=entity.status.value,
            due_date=entity.due_date,
            assigned_at=entity.assigned_at,
            updated_at=entity.updated_at,
        )
