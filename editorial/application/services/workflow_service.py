"""
Application Service для редакционного процесса.

Фасад над command / query handlers: одна точка входа для API и CLI.
"""

from datetime import datetime
from typing import List, Optional, Union
from uuid import UUID

from editorial.application.commands.article_commands import (
    CreateArticleCommand,
    DeleteArticleCommand,
    RegisterAttachmentCommand,
    RemoveAttachmentCommand,
)
from editorial.application.commands.workflow_commands import (
    ApproveCommand,
    AssignCommand,
    ChangeSeverity,
    FinalizeEditingCommand,
    FinalizeMode,
    PublishCommand,
    RejectCommand,
    RequestChangesCommand,
    ReturnToDraftCommand,
    SaveDraftCommand,
    SubmitArticleCommand,
    UnassignCommand,
    UpdateAssignmentStatusCommand,
)
from editorial.application.handlers.article_command_handler import ArticleCommandHandler
from editorial.application.handlers.article_query_handler import ArticleQueryHandler
from editorial.application.handlers.workflow_command_handler import WorkflowCommandHandler
from editorial.application.queries.article_queries import (
    GetArticleQuery,
    GetLatestReportQuery,
    ListArticlesQuery,
    ListAssignmentsQuery,
    ListAttachmentsQuery,
    ListWorkflowEventsQuery,
)
from editorial.domain.entities.article import Article
from editorial.domain.entities.assignment import Assignment
from editorial.domain.entities.attachment import Attachment
from editorial.domain.entities.similarity_report import SimilarityReport
from editorial.domain.entities.workflow_event import WorkflowEvent
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.domain.value_objects.assignment_status import AssignmentKind, AssignmentStatus
from editorial.domain.value_objects.report_status import SimilarityMethod


class WorkflowService:
    """
    Application Service для статей.

    Координирует работу между handlers.
    """

    def __init__(
        self,
        workflow_handler: WorkflowCommandHandler,
        article_handler: ArticleCommandHandler,
        query_handler: ArticleQueryHandler
    ):
        self.workflow_handler = workflow_handler
        self.article_handler = article_handler
        self.query_handler = query_handler

    # =========================================================================
    # Статьи и вложения
    # =========================================================================

    async def create_article(self, command: CreateArticleCommand) -> Article:
        return await self.article_handler.handle_create_article(command)

    async def delete_article(self, actor: Actor, article_id: UUID) -> bool:
        return await self.article_handler.handle_delete_article(DeleteArticleCommand(actor, article_id))

    async def register_attachment(self, command: RegisterAttachmentCommand) -> Attachment:
        return await self.article_handler.handle_register_attachment(command)

    async def remove_attachment(self, actor: Actor, article_id: UUID, attachment_id: UUID) -> bool:
        return await self.article_handler.handle_remove_attachment(
            RemoveAttachmentCommand(actor, article_id, attachment_id)
        )

    # =========================================================================
    # Команды процесса
    # =========================================================================

    async def submit_article(self, actor: Actor, article_id: UUID, note: str = "") -> Article:
        return await self.workflow_handler.handle_submit(SubmitArticleCommand(actor, article_id, note))

    async def return_to_draft(self, actor: Actor, article_id: UUID, note: str = "") -> Article:
        return await self.workflow_handler.handle_return_to_draft(ReturnToDraftCommand(actor, article_id, note))

    async def assign_editor(
        self,
        actor: Actor,
        article_id: UUID,
        editor_id: UUID,
        due_date: Optional[datetime] = None,
        note: str = ""
    ) -> Assignment:
        return await self.workflow_handler.handle_assign(
            AssignCommand(actor, article_id, editor_id, AssignmentKind.EDITOR, due_date, note)
        )

    async def assign_reviewer(
        self,
        actor: Actor,
        article_id: UUID,
        reviewer_id: UUID,
        due_date: Optional[datetime] = None,
        note: str = ""
    ) -> Assignment:
        return await self.workflow_handler.handle_assign(
            AssignCommand(actor, article_id, reviewer_id, AssignmentKind.REVIEWER, due_date, note)
        )

    async def unassign(
        self,
        actor: Actor,
        article_id: UUID,
        kind: AssignmentKind,
        note: str = ""
    ) -> List[Assignment]:
        return await self.workflow_handler.handle_unassign(UnassignCommand(actor, article_id, kind, note))

    async def unassign_editor(self, actor: Actor, article_id: UUID, note: str = "") -> List[Assignment]:
        return await self.unassign(actor, article_id, AssignmentKind.EDITOR, note)

    async def save_draft(
        self,
        actor: Actor,
        article_id: UUID,
        body: Optional[str] = None,
        seo: Optional[dict] = None,
        editor_notes: Optional[str] = None
    ) -> Article:
        return await self.workflow_handler.handle_save_draft(
            SaveDraftCommand(actor, article_id, body=body, seo=seo, editor_notes=editor_notes)
        )

    async def finalize_editing(
        self,
        actor: Actor,
        article_id: UUID,
        mode: Union[FinalizeMode, str],
        body: Optional[str] = None,
        note: str = ""
    ) -> Article:
        return await self.workflow_handler.handle_finalize_editing(
            FinalizeEditingCommand(actor, article_id, mode, body=body, note=note)
        )

    async def request_author_changes(
        self,
        actor: Actor,
        article_id: UUID,
        notes: str,
        severity: Union[ChangeSeverity, str] = ChangeSeverity.MEDIUM
    ) -> Article:
        return await self.workflow_handler.handle_request_changes(
            RequestChangesCommand(actor, article_id, notes, severity)
        )

    async def approve_for_publishing(self, actor: Actor, article_id: UUID, note: str = "") -> Article:
        return await self.workflow_handler.handle_approve(ApproveCommand(actor, article_id, note))

    async def publish_content(
        self,
        actor: Actor,
        article_id: UUID,
        price: Optional[float] = None,
        is_free: bool = False
    ) -> Article:
        return await self.workflow_handler.handle_publish(PublishCommand(actor, article_id, price, is_free))

    async def reject_article(self, actor: Actor, article_id: UUID, notes: str) -> Article:
        return await self.workflow_handler.handle_reject(RejectCommand(actor, article_id, notes))

    async def update_assignment_status(
        self,
        actor: Actor,
        assignment_id: UUID,
        status: AssignmentStatus,
        feedback: str = ""
    ) -> Assignment:
        return await self.workflow_handler.handle_update_assignment_status(
            UpdateAssignmentStatusCommand(actor, assignment_id, status, feedback)
        )

    # =========================================================================
    # Запросы
    # =========================================================================

    async def get_article(self, actor: Actor, article_id: UUID) -> Article:
        return await self.query_handler.handle_get_article(GetArticleQuery(actor, article_id))

    async def list_articles(
        self,
        actor: Actor,
        status: Optional[ArticleStatus] = None,
        author_id: Optional[UUID] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[Article]:
        return await self.query_handler.handle_list_articles(
            ListArticlesQuery(actor, status, author_id, limit, offset)
        )

    async def list_workflow_events(self, actor: Actor, article_id: UUID) -> List[WorkflowEvent]:
        return await self.query_handler.handle_list_events(ListWorkflowEventsQuery(actor, article_id))

    async def list_assignments(
        self,
        actor: Actor,
        article_id: UUID,
        kind: Optional[AssignmentKind] = None,
        active_only: bool = False
    ) -> List[Assignment]:
        return await self.query_handler.handle_list_assignments(
            ListAssignmentsQuery(actor, article_id, kind, active_only)
        )

    async def list_attachments(self, actor: Actor, article_id: UUID) -> List[Attachment]:
        return await self.query_handler.handle_list_attachments(ListAttachmentsQuery(actor, article_id))

    async def get_latest_report(
        self,
        actor: Actor,
        article_id: UUID,
        method: Optional[SimilarityMethod] = None
    ) -> SimilarityReport:
        return await self.query_handler.handle_get_latest_report(
            GetLatestReportQuery(actor, article_id, method)
        )
