"""
Кому и что отправить по доменному событию.

Получатели разрешаются через справочник пользователей; назначения
(для "approved" и финализации правки) читаются из хранилища.
"""

import logging
from typing import Callable, List, Optional
from uuid import UUID

from editorial.domain.entities.assignment import Assignment
from editorial.domain.entities.notification import Notification
from editorial.domain.entities.user import User
from editorial.domain.events.workflow_events import (
    ArticleStatusChanged,
    AssignmentCreated,
    AssignmentUpdated,
    DomainEvent,
)
from editorial.domain.ports.user_directory import IUserDirectory
from editorial.domain.repositories.unit_of_work import IUnitOfWork
from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.domain.value_objects.assignment_status import AssignmentKind, AssignmentStatus
from editorial.domain.value_objects.role import Role

logger = logging.getLogger(__name__)


class RecipientResolver:
    """
    Превращает доменное событие в список уведомлений.

    Аргументы:
        users: Справочник пользователей
        uow_factory: Фабрика unit of work (чтение назначений)
        broadcast_limit: Максимум получателей рассылки по роли
        link_template: Шаблон ссылки на статью
    """

    def __init__(
        self,
        users: IUserDirectory,
        uow_factory: Callable[[], IUnitOfWork],
        broadcast_limit: int = 50,
        link_template: str = "/articles/{article_id}"
    ):
        self.users = users
        self.uow_factory = uow_factory
        self.broadcast_limit = broadcast_limit
        self.link_template = link_template

    async def resolve(self, event: DomainEvent) -> List[Notification]:
        if isinstance(event, ArticleStatusChanged):
            return await self._for_status_change(event)
        if isinstance(event, AssignmentCreated):
            return await self._for_assignment_created(event)
        if isinstance(event, AssignmentUpdated):
            return await self._for_assignment_updated(event)
        logger.debug(f"[Notify] No recipients rule for {type(event).__name__}")
        return []

    # =========================================================================
    # Правила
    # =========================================================================

    async def _for_status_change(self, event: ArticleStatusChanged) -> List[Notification]:
        target = event.to_status
        title = event.title

        if target == ArticleStatus.SUBMITTED:
            managers = await self.users.list_by_role(Role.CONTENT_MANAGER, self.broadcast_limit)
            return self._build(
                managers, event, "article_submitted",
                "New submission", f'"{title}" was submitted for review.'
            )

        if target == ArticleStatus.UNDER_REVIEW and event.from_status == ArticleStatus.UNDER_REVIEW:
            recipient = await self._reviewer_or_manager(event.article_id)
            return self._build(
                [recipient], event, "editing_finalized",
                "Editing finalized", f'Editing of "{title}" is finished and ready for review.'
            )

        if target in (ArticleStatus.CHANGES_REQUESTED, ArticleStatus.REJECTED, ArticleStatus.DRAFT):
            messages = {
                ArticleStatus.CHANGES_REQUESTED: ("changes_requested", "Changes requested"),
                ArticleStatus.REJECTED: ("article_rejected", "Article rejected"),
                ArticleStatus.DRAFT: ("returned_to_draft", "Returned to draft"),
            }
            kind, subject = messages[target]
            message = f'"{title}": {subject.lower()}.'
            if event.note:
                message = f"{message}\n\n{event.note}"
            author = await self.users.get_user(event.author_id)
            return self._build([author], event, kind, subject, message)

        if target == ArticleStatus.APPROVED:
            author = await self.users.get_user(event.author_id)
            manager = await self._editor_assigner(event.article_id)
            notifications = self._build(
                [author], event, "article_approved",
                "Article approved", f'"{title}" was approved for publishing.'
            )
            notifications += self._build(
                [manager], event, "article_approved",
                "Ready to publish", f'"{title}" was approved by the editor and is ready to publish.'
            )
            return notifications

        if target == ArticleStatus.PUBLISHED:
            author = await self.users.get_user(event.author_id)
            readers = await self.users.list_by_role(Role.READER, self.broadcast_limit)
            notifications = self._build(
                [author], event, "article_published",
                "Article published", f'"{title}" is now published.'
            )
            notifications += self._build(
                [r for r in readers if r.id != event.author_id], event, "new_content",
                "New article", f'New article: "{title}".'
            )
            return notifications

        return []

    async def _for_assignment_created(self, event: AssignmentCreated) -> List[Notification]:
        assignee = await self.users.get_user(event.assignee_id)
        message = f'You were assigned as {event.kind.value} for "{event.title}".'
        if event.due_date:
            message = f"{message} Due: {event.due_date:%Y-%m-%d}."
        return self._build([assignee], event, f"{event.kind.value}_assigned", "New assignment", message)

    async def _for_assignment_updated(self, event: AssignmentUpdated) -> List[Notification]:
        manager = await self.users.get_user(event.assigned_by)
        message = f"The {event.kind.value} assignment is now {event.status.value.replace('_', ' ')}."
        if event.feedback:
            message = f"{message}\n\n{event.feedback}"
        return self._build([manager], event, "assignment_updated", "Assignment updated", message)

    # =========================================================================
    # Вспомогательные методы
    # =========================================================================

    async def _assignments(self, article_id: UUID) -> List[Assignment]:
        async with self.uow_factory() as uow:
            return await uow.assignments.list_for_article(article_id)

    async def _editor_assigner(self, article_id: UUID) -> Optional[User]:
        """Менеджер, назначивший последнего редактора (активного или завершившего)."""
        for assignment in await self._assignments(article_id):
            if assignment.kind == AssignmentKind.EDITOR and assignment.status != AssignmentStatus.CANCELLED:
                return await self.users.get_user(assignment.assigned_by)
        return None

    async def _reviewer_or_manager(self, article_id: UUID) -> Optional[User]:
        assignments = await self._assignments(article_id)
        for assignment in assignments:
            if assignment.kind == AssignmentKind.REVIEWER and assignment.is_active:
                return await self.users.get_user(assignment.assignee_id)
        for assignment in assignments:
            if assignment.kind == AssignmentKind.EDITOR and assignment.status != AssignmentStatus.CANCELLED:
                return await self.users.get_user(assignment.assigned_by)
        return None

    def _build(
        self,
        users: List[Optional[User]],
        event: DomainEvent,
        kind: str,
        title: str,
        message: str
    ) -> List[Notification]:
        link = self.link_template.format(article_id=event.article_id)
        seen = set()
        notifications = []
        for user in users:
            if user is None or not user.is_active or user.id in seen:
                continue
            seen.add(user.id)
            notifications.append(
                Notification(
                    user_id=user.id,
                    email=user.email,
                    type=kind,
                    title=title,
                    message=message,
                    link=link,
                )
            )
        return notifications
