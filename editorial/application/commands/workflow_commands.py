"""
CQRS Commands: редакционный процесс.

Каждая команда несёт участника (Actor) и ID статьи; статус, из которого
выполняется переход, всегда читается из хранилища.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.assignment_status import AssignmentKind, AssignmentStatus


class FinalizeMode(str, Enum):
    """Куда редактор передаёт статью после правки."""

    PUBLISH = "publish"    # under_review -> approved
    REVIEW = "review"      # under_review -> under_review (рецензенту)


class ChangeSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass(frozen=True)
class SubmitArticleCommand:
    """draft -> submitted или повторная отправка из changes_requested."""

    actor: Actor
    article_id: UUID
    note: str = ""


@dataclass(frozen=True)
class ReturnToDraftCommand:
    """changes_requested -> draft."""

    actor: Actor
    article_id: UUID
    note: str = ""


@dataclass(frozen=True)
class AssignCommand:
    """Назначение редактора или рецензента."""

    actor: Actor
    article_id: UUID
    assignee_id: UUID
    kind: AssignmentKind
    due_date: Optional[datetime] = None
    note: str = ""


@dataclass(frozen=True)
class UnassignCommand:
    actor: Actor
    article_id: UUID
    kind: AssignmentKind = AssignmentKind.EDITOR
    note: str = ""


@dataclass(frozen=True)
class SaveDraftCommand:
    """
    Сохранение текста без смены статуса.

    seo и editor_notes сливаются в metadata вместе с lastEditedBy / lastEditedAt.
    """

    actor: Actor
    article_id: UUID
    body: Optional[str] = None
    seo: Optional[dict] = None
    editor_notes: Optional[str] = None


@dataclass(frozen=True)
class FinalizeEditingCommand:
    actor: Actor
    article_id: UUID
    mode: FinalizeMode
    body: Optional[str] = None
    note: str = ""


@dataclass(frozen=True)
class RequestChangesCommand:
    actor: Actor
    article_id: UUID
    notes: str
    severity: ChangeSeverity = ChangeSeverity.MEDIUM


@dataclass(frozen=True)
class ApproveCommand:
    actor: Actor
    article_id: UUID
    note: str = ""


@dataclass(frozen=True)
class PublishCommand:
    """approved -> published с решением о цене."""

    actor: Actor
    article_id: UUID
    price: Optional[float] = None
    is_free: bool = False


@dataclass(frozen=True)
class RejectCommand:
    actor: Actor
    article_id: UUID
    notes: str


@dataclass(frozen=True)
class UpdateAssignmentStatusCommand:
    actor: Actor
    assignment_id: UUID
    status: AssignmentStatus
    feedback: str = ""
