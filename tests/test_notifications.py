# -*- coding: utf-8 -*-
"""
Уведомления по событиям редакционного процесса.
"""

import pytest

from editorial.application.handlers.article_command_handler import ArticleCommandHandler
from editorial.application.handlers.article_query_handler import ArticleQueryHandler
from editorial.application.handlers.workflow_command_handler import WorkflowCommandHandler
from editorial.application.notifications.dispatcher import NotificationDispatcher
from editorial.application.notifications.recipients import RecipientResolver
from editorial.application.services.workflow_service import WorkflowService
from editorial.domain.entities.user import User
from editorial.domain.ports.notification_sink import INotificationSink
from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.domain.value_objects.assignment_status import AssignmentStatus
from editorial.domain.value_objects.role import Role
from editorial.shared.exceptions.domain_exceptions import AuthorizationError
from editorial.shared.exceptions.infrastructure_exceptions import NotificationDeliveryError
from tests.helpers import article_under_review, create_article


async def delivered(dispatcher, sink, since: int = 0):
    """(получатель, тип) для уведомлений, доставленных после позиции since."""
    await dispatcher.drain()
    return [(n.user_id, n.type) for n in sink.delivered[since:]]


class TestRecipients:
    """Кто получает уведомление на каждом шаге."""

    @pytest.mark.asyncio
    async def test_submission_notifies_content_managers(self, workflow, people, dispatcher, sink):
        author = people.actor(people.author)
        article = await create_article(workflow, author)

        await workflow.submit_article(author, article.id)

        assert await delivered(dispatcher, sink) == [(people.manager.id, "article_submitted")]

    @pytest.mark.asyncio
    async def test_assignment_notifies_assignee(self, workflow, people, dispatcher, sink):
        await article_under_review(workflow, people)

        notifications = await delivered(dispatcher, sink)
        assert notifications[-1] == (people.editor.id, "editor_assigned")

    @pytest.mark.asyncio
    async def test_change_request_reaches_author_with_notes(self, workflow, people, dispatcher, sink):
        article = await article_under_review(workflow, people)
        start = len(await delivered(dispatcher, sink))

        await workflow.request_author_changes(people.actor(people.editor), article.id, "Fix the intro")

        assert await delivered(dispatcher, sink, start) == [(people.author.id, "changes_requested")]
        assert "Fix the intro" in sink.delivered[-1].message
        assert sink.delivered[-1].link == f"/articles/{article.id}"

    @pytest.mark.asyncio
    async def test_approval_notifies_author_and_assigning_manager(self, workflow, people, dispatcher, sink):
        article = await article_under_review(workflow, people)
        start = len(await delivered(dispatcher, sink))

        await workflow.approve_for_publishing(people.actor(people.editor), article.id)

        assert await delivered(dispatcher, sink, start) == [
            (people.author.id, "article_approved"),
            (people.manager.id, "article_approved"),
        ]

    @pytest.mark.asyncio
    async def test_finalize_for_review_notifies_manager_without_reviewer(self, workflow, people, dispatcher, sink):
        article = await article_under_review(workflow, people)
        start = len(await delivered(dispatcher, sink))

        await workflow.finalize_editing(people.actor(people.editor), article.id, "review")

        assert await delivered(dispatcher, sink, start) == [(people.manager.id, "editing_finalized")]

    @pytest.mark.asyncio
    async def test_finalize_for_review_notifies_active_reviewer(self, workflow, people, dispatcher, sink):
        article = await article_under_review(workflow, people)
        await workflow.assign_reviewer(people.actor(people.manager), article.id, people.reviewer.id)
        start = len(await delivered(dispatcher, sink))

        await workflow.finalize_editing(people.actor(people.editor), article.id, "review")

        assert await delivered(dispatcher, sink, start) == [(people.reviewer.id, "editing_finalized")]

    @pytest.mark.asyncio
    async def test_publication_notifies_author_and_readers(self, workflow, people, dispatcher, sink):
        manager = people.actor(people.manager)
        article = await article_under_review(workflow, people)
        await workflow.approve_for_publishing(manager, article.id)
        start = len(await delivered(dispatcher, sink))

        await workflow.publish_content(manager, article.id, is_free=True)

        assert await delivered(dispatcher, sink, start) == [
            (people.author.id, "article_published"),
            (people.reader.id, "new_content"),
        ]

    @pytest.mark.asyncio
    async def test_rejection_notifies_author(self, workflow, people, dispatcher, sink):
        article = await article_under_review(workflow, people)
        start = len(await delivered(dispatcher, sink))

        await workflow.reject_article(people.actor(people.manager), article.id, "Out of scope")

        assert await delivered(dispatcher, sink, start) == [(people.author.id, "article_rejected")]

    @pytest.mark.asyncio
    async def test_assignment_progress_notifies_assigner(self, workflow, people, dispatcher, sink):
        editor = people.actor(people.editor)
        article = await article_under_review(workflow, people)
        [assignment] = await workflow.list_assignments(editor, article.id, active_only=True)
        start = len(await delivered(dispatcher, sink))

        await workflow.update_assignment_status(editor, assignment.id, AssignmentStatus.IN_PROGRESS, "On it")

        assert await delivered(dispatcher, sink, start) == [(people.manager.id, "assignment_updated")]
        assert "On it" in sink.delivered[-1].message

    @pytest.mark.asyncio
    async def test_inactive_users_are_skipped(self, workflow, people, users, dispatcher, sink):
        users.add(User(name="Gone Manager", role=Role.CONTENT_MANAGER, is_active=False))
        author = people.actor(people.author)
        article = await create_article(workflow, author)

        await workflow.submit_article(author, article.id)

        assert await delivered(dispatcher, sink) == [(people.manager.id, "article_submitted")]

    @pytest.mark.asyncio
    async def test_failed_command_sends_nothing(self, workflow, people, dispatcher, sink):
        article = await create_article(workflow, people.actor(people.author))

        with pytest.raises(AuthorizationError):
            await workflow.submit_article(people.actor(people.other_author), article.id)

        assert await delivered(dispatcher, sink) == []


class BrokenSink(INotificationSink):
    async def deliver(self, notification):
        raise NotificationDeliveryError("mail server down")


@pytest.mark.asyncio
async def test_delivery_failure_does_not_affect_command(uow_factory, users, blob_store, people):
    dispatcher = NotificationDispatcher(RecipientResolver(users, uow_factory), BrokenSink())
    await dispatcher.start()
    service = WorkflowService(
        WorkflowCommandHandler(uow_factory, users, dispatcher),
        ArticleCommandHandler(uow_factory, blob_store),
        ArticleQueryHandler(uow_factory),
    )
    author = people.actor(people.author)
    article = await create_article(service, author)

    submitted = await service.submit_article(author, article.id)
    await dispatcher.drain()

    assert submitted.status == ArticleStatus.SUBMITTED
    assert dispatcher.failed == 1
    await dispatcher.stop()
