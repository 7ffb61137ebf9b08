# -*- coding: utf-8 -*-
"""
Command Handler редакционного процесса.

Каждая команда - короткая транзакция над одной статьёй:
1. Чтение статьи и активных назначений
2. Проверка права на переход по сохранённому статусу
3. Условный UPDATE статуса + запись WorkflowEvent + изменения назначений
4. commit
5. Доменные события передаются диспетчеру уведомлений

Ошибка на шагах 1-4 откатывает всё целиком; ошибка на шаге 5 только логируется.
"""

import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Sequence
from uuid import UUID

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
from editorial.application.notifications.dispatcher import NotificationDispatcher
from editorial.domain.entities.article import Article
from editorial.domain.entities.assignment import Assignment
from editorial.domain.entities.workflow_event import WorkflowEvent
from editorial.domain.events.workflow_events import (
    ArticleStatusChanged,
    AssignmentCreated,
    AssignmentUpdated,
    DomainEvent,
)
from editorial.domain.ports.user_directory import IUserDirectory
from editorial.domain.repositories.unit_of_work import IUnitOfWork
from editorial.domain.services.access_policy import can_save_draft
from editorial.domain.services.transition_policy import authorize_finalize, authorize_transition
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.domain.value_objects.assignment_status import AssignmentKind, AssignmentStatus
from editorial.domain.value_objects.role import Role
from editorial.shared.exceptions.domain_exceptions import (
    AuthorizationError,
    ConflictError,
    DomainValidationError,
    EntityNotFoundError,
)

logger = logging.getLogger(__name__)

# Роль, которую должен иметь исполнитель назначения
ASSIGNEE_ROLES = {
    AssignmentKind.EDITOR: Role.EDITOR,
    AssignmentKind.REVIEWER: Role.REVIEWER,
}


class WorkflowCommandHandler:
    """
    Handler для команд редакционного процесса.

    Аргументы:
        uow_factory: Фабрика unit of work
        users: Справочник пользователей (проверка исполнителей назначений)
        dispatcher: Диспетчер уведомлений (None - уведомления отключены)
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        users: IUserDirectory,
        dispatcher: Optional[NotificationDispatcher] = None
    ):
        self.uow_factory = uow_factory
        self.users = users
        self.dispatcher = dispatcher

    # =========================================================================
    # Переходы автора
    # =========================================================================

    async def handle_submit(self, command: SubmitArticleCommand) -> Article:
        """
        draft -> submitted, либо changes_requested -> submitted (повторная отправка).

        Raises:
            EntityNotFoundError: Статья не найдена
            AuthorizationError: Участник не автор и не admin / content_manager
            ConflictError: Текущий статус не допускает отправку
        """
        return await self._simple_transition(
            command.actor, command.article_id, ArticleStatus.SUBMITTED, command.note
        )

    async def handle_return_to_draft(self, command: ReturnToDraftCommand) -> Article:
        """changes_requested -> draft."""
        return await self._simple_transition(
            command.actor, command.article_id, ArticleStatus.DRAFT, command.note
        )

    # =========================================================================
    # Назначения
    # =========================================================================

    async def handle_assign(self, command: AssignCommand) -> Assignment:
        """
        Назначить редактора / рецензента.

        Предыдущее активное назначение того же типа отменяется в той же
        транзакции; submitted -> under_review выполняется там же.

        Raises:
            AuthorizationError: Назначает не admin / content_manager
            EntityNotFoundError: Статья или исполнитель не найдены
            DomainValidationError: У исполнителя другая роль
            ConflictError: Статус не submitted / under_review
        """
        actor = command.actor
        if not actor.is_manager:
            raise AuthorizationError("Only content managers and admins can assign")

        assignee = await self.users.get_user(command.assignee_id)
        if assignee is None or not assignee.is_active:
            raise EntityNotFoundError(f"User {command.assignee_id} not found")
        required_role = ASSIGNEE_ROLES[command.kind]
        if assignee.role != required_role:
            raise DomainValidationError(
                f"User {assignee.id} has role '{assignee.role.value}', "
                f"'{required_role.value}' required"
            )

        events: List[DomainEvent] = []
        async with self.uow_factory() as uow:
            article = await self._load(uow, command.article_id)
            if article.status not in (ArticleStatus.SUBMITTED, ArticleStatus.UNDER_REVIEW):
                raise ConflictError(
                    f"Cannot assign {command.kind.value} while article is {article.status.value}"
                )

            # Сначала строка статьи: параллельные назначения выстраиваются в очередь на ней
            if article.status == ArticleStatus.SUBMITTED:
                await self._transition(
                    uow, article, actor, ArticleStatus.UNDER_REVIEW,
                    note=command.note or f"{command.kind.value} assigned",
                    assignments=(),
                )
                events.append(self._status_event(article, actor, ArticleStatus.UNDER_REVIEW, command.note))
            else:
                await uow.articles.update_fields(article.id, [article.status], {})

            cancelled = await uow.assignments.cancel_active(article.id, command.kind)
            assignment = await uow.assignments.add(
                Assignment(
                    article_id=article.id,
                    assignee_id=assignee.id,
                    assigned_by=actor.user_id,
                    kind=command.kind,
                    due_date=command.due_date,
                )
            )
            await uow.commit()

        if cancelled:
            logger.info(
                f"[Workflow] Article {article.id}: cancelled {len(cancelled)} prior "
                f"{command.kind.value} assignment(s)"
            )
        logger.info(
            f"[Workflow] Article {article.id}: {command.kind.value} {assignee.id} assigned by {actor.user_id}"
        )

        events.append(
            AssignmentCreated(
                article_id=article.id,
                actor_id=actor.user_id,
                assignment_id=assignment.id,
                assignee_id=assignee.id,
                kind=command.kind,
                title=article.title,
                due_date=command.due_date,
            )
        )
        self._publish(events)
        return assignment

    async def handle_unassign(self, command: UnassignCommand) -> List[Assignment]:
        """
        Снять активное назначение.

        Если статья на рассмотрении и активных назначений не осталось,
        она возвращается в submitted.

        Raises:
            AuthorizationError: Снимает не admin / content_manager
            EntityNotFoundError: Статья не найдена или активного назначения нет
        """
        actor = command.actor
        if not actor.is_manager:
            raise AuthorizationError("Only content managers and admins can unassign")

        events: List[DomainEvent] = []
        async with self.uow_factory() as uow:
            article = await self._load(uow, command.article_id)
            active = await uow.assignments.list_for_article(article.id, active_only=True)
            if not any(a.kind == command.kind for a in active):
                raise EntityNotFoundError(
                    f"No active {command.kind.value} assignment for article {article.id}"
                )

            remaining = [a for a in active if a.kind != command.kind]
            if article.status == ArticleStatus.UNDER_REVIEW and not remaining:
                note = command.note or f"{command.kind.value} unassigned"
                await self._transition(
                    uow, article, actor, ArticleStatus.SUBMITTED, note=note, assignments=active
                )
                events.append(self._status_event(article, actor, ArticleStatus.SUBMITTED, note))
            else:
                await uow.articles.update_fields(article.id, [article.status], {})

            cancelled = await uow.assignments.cancel_active(article.id, command.kind)
            await uow.commit()

        logger.info(
            f"[Workflow] Article {article.id}: {command.kind.value} unassigned by {actor.user_id}"
        )
        self._publish(events)
        return cancelled

    async def handle_update_assignment_status(self, command: UpdateAssignmentStatusCommand) -> Assignment:
        """
        Исполнитель двигает своё назначение вперёд: assigned -> in_progress -> completed.

        Raises:
            EntityNotFoundError: Назначение не найдено
            AuthorizationError: Не исполнитель и не admin / content_manager
            DomainValidationError: Попытка отменить назначение этой командой
            ConflictError: Назначение уже не активно или переход назад
        """
        actor = command.actor
        target = command.status
        if target == AssignmentStatus.CANCELLED:
            raise DomainValidationError("Use unassign to cancel an assignment")

        async with self.uow_factory() as uow:
            assignment = await uow.assignments.get(command.assignment_id)
            if assignment is None:
                raise EntityNotFoundError(f"Assignment {command.assignment_id} not found")
            if assignment.assignee_id != actor.user_id and not actor.is_manager:
                raise AuthorizationError("Only the assignee can update this assignment")
            if not assignment.status.can_transition_to(target):
                raise ConflictError(
                    f"Assignment is {assignment.status.value}, cannot move to {target.value}"
                )

            await uow.assignments.update_status(assignment.id, [assignment.status], target)
            await uow.commit()

        logger.info(
            f"[Workflow] Assignment {assignment.id}: {assignment.status.value} -> {target.value}"
        )
        self._publish([
            AssignmentUpdated(
                article_id=assignment.article_id,
                actor_id=actor.user_id,
                assignment_id=assignment.id,
                assigned_by=assignment.assigned_by,
                kind=assignment.kind,
                status=target,
                feedback=command.feedback,
            )
        ])
        return Assignment(
            id=assignment.id,
            article_id=assignment.article_id,
            assignee_id=assignment.assignee_id,
            assigned_by=assignment.assigned_by,
            kind=assignment.kind,
            status=target,
            due_date=assignment.due_date,
            assigned_at=assignment.assigned_at,
        )

    # =========================================================================
    # Работа редактора
    # =========================================================================

    async def handle_save_draft(self, command: SaveDraftCommand) -> Article:
        """
        Сохранить текст и метаданные без смены статуса.

        Raises:
            ConflictError: Статья в финальном статусе или статус изменился
            AuthorizationError: Участник не может править статью сейчас
        """
        actor = command.actor
        async with self.uow_factory() as uow:
            article = await self._load(uow, command.article_id)
            if article.status.is_final():
                raise ConflictError(f"Article is {article.status.value} and can no longer be edited")

            assignments = await uow.assignments.list_for_article(article.id, active_only=True)
            if not can_save_draft(actor, article, assignments):
                raise AuthorizationError(f"Cannot edit article while it is {article.status.value}")

            patch = self._edit_stamp(actor)
            if command.seo is not None:
                patch["seo"] = command.seo
            if command.editor_notes is not None:
                patch["editorNotes"] = command.editor_notes

            changes = {"metadata": article.merged_metadata(patch)}
            if command.body is not None:
                changes["body"] = command.body

            await uow.articles.update_fields(article.id, [article.status], changes)
            updated = await uow.articles.get(article.id)
            await uow.commit()

        logger.info(f"[Workflow] Article {article.id}: draft saved by {actor.user_id}")
        return updated

    async def handle_finalize_editing(self, command: FinalizeEditingCommand) -> Article:
        """
        Завершить правку.

        mode=publish: under_review -> approved
        mode=review:  under_review -> under_review (передача рецензенту)

        Назначение редактора завершается в той же транзакции.
        """
        try:
            mode = FinalizeMode(command.mode)
        except ValueError:
            raise DomainValidationError(f"Unknown finalize mode: {command.mode}")

        target = ArticleStatus.APPROVED if mode == FinalizeMode.PUBLISH else ArticleStatus.UNDER_REVIEW
        note = command.note or f"editing finalized for {mode.value}"

        async with self.uow_factory() as uow:
            article = await self._load(uow, command.article_id)
            assignments = await uow.assignments.list_for_article(article.id, active_only=True)
            authorize_finalize(article.status, command.actor, assignments)

            metadata = article.merged_metadata({**self._edit_stamp(command.actor), "finalizedAs": mode.value})
            changes = {"metadata": metadata}
            if command.body is not None:
                changes["body"] = command.body

            await self._transition(
                uow, article, command.actor, target, note=note, changes=changes, assignments=assignments
            )
            await self._complete(uow, assignments, AssignmentKind.EDITOR)
            updated = await uow.articles.get(article.id)
            await uow.commit()

        self._publish([self._status_event(article, command.actor, target, note)])
        return updated

    async def handle_request_changes(self, command: RequestChangesCommand) -> Article:
        """
        under_review -> changes_requested с замечаниями автору.

        Raises:
            DomainValidationError: Пустые замечания или неизвестная серьёзность
        """
        if not (command.notes or "").strip():
            raise DomainValidationError("Change request notes are required")
        try:
            severity = ChangeSeverity(command.severity)
        except ValueError:
            raise DomainValidationError(f"Unknown severity: {command.severity}")

        actor = command.actor
        async with self.uow_factory() as uow:
            article = await self._load(uow, command.article_id)
            metadata = article.merged_metadata({
                "lastChangeRequest": {
                    "notes": command.notes,
                    "severity": severity.value,
                    "requestedBy": str(actor.user_id),
                    "requestedAt": datetime.utcnow().isoformat(),
                }
            })
            await self._transition(
                uow, article, actor, ArticleStatus.CHANGES_REQUESTED,
                note=command.notes, changes={"metadata": metadata},
            )
            updated = await uow.articles.get(article.id)
            await uow.commit()

        self._publish([self._status_event(article, actor, ArticleStatus.CHANGES_REQUESTED, command.notes)])
        return updated

    async def handle_approve(self, command: ApproveCommand) -> Article:
        """under_review -> approved; активные назначения завершаются."""
        async with self.uow_factory() as uow:
            article = await self._load(uow, command.article_id)
            assignments = await uow.assignments.list_for_article(article.id, active_only=True)
            await self._transition(
                uow, article, command.actor, ArticleStatus.APPROVED,
                note=command.note, assignments=assignments,
            )
            await self._complete(uow, assignments)
            updated = await uow.articles.get(article.id)
            await uow.commit()

        self._publish([self._status_event(article, command.actor, ArticleStatus.APPROVED, command.note)])
        return updated

    # =========================================================================
    # Публикация и отклонение
    # =========================================================================

    async def handle_publish(self, command: PublishCommand) -> Article:
        """
        approved -> published.

        Бесплатная статья получает цену 0; платной нужна цена >= 0.

        Raises:
            DomainValidationError: Цена не указана или отрицательная
        """
        if command.is_free:
            price = 0.0
        else:
            if command.price is None:
                raise DomainValidationError("Price is required unless the article is free")
            if command.price < 0:
                raise DomainValidationError("Price cannot be negative")
            price = float(command.price)

        changes = {"price": price, "is_free": bool(command.is_free), "published_at": datetime.utcnow()}
        note = "published (free)" if command.is_free else f"published at price {price:g}"

        async with self.uow_factory() as uow:
            article = await self._load(uow, command.article_id)
            assignments = await uow.assignments.list_for_article(article.id, active_only=True)
            await self._transition(
                uow, article, command.actor, ArticleStatus.PUBLISHED,
                note=note, changes=changes, assignments=assignments,
            )
            await self._complete(uow, assignments)
            updated = await uow.articles.get(article.id)
            await uow.commit()

        self._publish([self._status_event(article, command.actor, ArticleStatus.PUBLISHED, note)])
        return updated

    async def handle_reject(self, command: RejectCommand) -> Article:
        """
        Любой не финальный статус -> rejected; все активные назначения отменяются.

        Raises:
            DomainValidationError: Не указана причина
        """
        async with self.uow_factory() as uow:
            article = await self._load(uow, command.article_id)
            assignments = await uow.assignments.list_for_article(article.id, active_only=True)
            await self._transition(
                uow, article, command.actor, ArticleStatus.REJECTED,
                note=command.notes, assignments=assignments,
            )
            await uow.assignments.cancel_active(article.id)
            updated = await uow.articles.get(article.id)
            await uow.commit()

        self._publish([self._status_event(article, command.actor, ArticleStatus.REJECTED, command.notes)])
        return updated

    # =========================================================================
    # Внутренние методы
    # =========================================================================

    async def _simple_transition(
        self,
        actor: Actor,
        article_id: UUID,
        target: ArticleStatus,
        note: str = ""
    ) -> Article:
        async with self.uow_factory() as uow:
            article = await self._load(uow, article_id)
            await self._transition(uow, article, actor, target, note=note)
            updated = await uow.articles.get(article.id)
            await uow.commit()

        self._publish([self._status_event(article, actor, target, note)])
        return updated

    @staticmethod
    async def _load(uow: IUnitOfWork, article_id: UUID) -> Article:
        article = await uow.articles.get(article_id)
        if article is None:
            raise EntityNotFoundError(f"Article {article_id} not found")
        return article

    @staticmethod
    async def _transition(
        uow: IUnitOfWork,
        article: Article,
        actor: Actor,
        target: ArticleStatus,
        note: str = "",
        changes: Optional[dict] = None,
        assignments: Optional[Sequence[Assignment]] = None
    ) -> WorkflowEvent:
        """Проверка права, условный UPDATE и запись в журнал внутри одной транзакции."""
        if assignments is None:
            assignments = await uow.assignments.list_for_article(article.id, active_only=True)

        authorize_transition(article.status, target, actor, article.author_id, assignments, note)
        await uow.articles.transition(article.id, article.status, target, changes)
        event = await uow.events.append(
            WorkflowEvent(
                article_id=article.id,
                actor_id=actor.user_id,
                from_status=article.status,
                to_status=target,
                note=note or "",
            )
        )
        logger.info(
            f"[Workflow] Article {article.id}: {article.status.value} -> {target.value} "
            f"by {actor.role.value} {actor.user_id}"
        )
        return event

    @staticmethod
    async def _complete(
        uow: IUnitOfWork,
        assignments: Iterable[Assignment],
        kind: Optional[AssignmentKind] = None
    ) -> None:
        for assignment in assignments:
            if assignment.is_active and (kind is None or assignment.kind == kind):
                await uow.assignments.update_status(
                    assignment.id, [assignment.status], AssignmentStatus.COMPLETED
                )

    @staticmethod
    def _edit_stamp(actor: Actor) -> dict:
        return {
            "lastEditedBy": str(actor.user_id),
            "lastEditedAt": datetime.utcnow().isoformat(),
        }

    @staticmethod
    def _status_event(
        article: Article,
        actor: Actor,
        target: ArticleStatus,
        note: Optional[str] = ""
    ) -> ArticleStatusChanged:
        return ArticleStatusChanged(
            article_id=article.id,
            actor_id=actor.user_id,
            author_id=article.author_id,
            title=article.title,
            from_status=article.status,
            to_status=target,
            note=note or "",
        )

    def _publish(self, events: List[DomainEvent]) -> None:
        """Передать события диспетчеру; транзакция уже зафиксирована."""
        if self.dispatcher is None or not events:
            return
        try:
            self.dispatcher.publish(events)
        except Exception as e:
            logger.error(f"[Workflow] Failed to enqueue notifications: {e}")
