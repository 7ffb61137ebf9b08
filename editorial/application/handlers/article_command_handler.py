"""
Command Handler для статей и вложений.
"""

import logging
from typing import Callable, List

from editorial.application.commands.article_commands import (
    CreateArticleCommand,
    DeleteArticleCommand,
    RegisterAttachmentCommand,
    RemoveAttachmentCommand,
)
from editorial.domain.entities.article import Article
from editorial.domain.entities.attachment import Attachment
from editorial.domain.ports.blob_store import IBlobStore
from editorial.domain.repositories.unit_of_work import IUnitOfWork
from editorial.domain.services.access_policy import can_manage_attachments
from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.domain.value_objects.role import Role
from editorial.shared.exceptions.domain_exceptions import (
    AuthorizationError,
    DomainValidationError,
    DuplicateEntityError,
    EntityNotFoundError,
)
from editorial.shared.exceptions.infrastructure_exceptions import BlobStoreError

logger = logging.getLogger(__name__)

# Роли, которые могут создавать статьи
AUTHORING_ROLES = {Role.AUTHOR, Role.EDITOR, Role.CONTENT_MANAGER, Role.ADMIN}


class ArticleCommandHandler:
    """Handler для команд работы со статьями."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork], blob_store: IBlobStore):
        self.uow_factory = uow_factory
        self.blob_store = blob_store

    async def handle_create_article(self, command: CreateArticleCommand) -> Article:
        """
        Обработка команды создания статьи.

        Args:
            command: Команда создания

        Returns:
            Созданная статья (статус draft)

        Raises:
            AuthorizationError: Роль не может создавать статьи
            DomainValidationError: Рубрика не найдена / не активна, неверные поля
        """
        if command.actor.role not in AUTHORING_ROLES:
            raise AuthorizationError(f"Role '{command.actor.role.value}' cannot create articles")

        article = Article(
            author_id=command.actor.user_id,
            title=command.title,
            body=command.body,
            summary=command.summary,
            category_id=command.category_id,
            tags=list(command.tags),
            metadata=dict(command.metadata),
        )

        async with self.uow_factory() as uow:
            if command.category_id is not None:
                category = await uow.categories.get(command.category_id)
                if category is None or not category.is_active:
                    raise DomainValidationError(f"Category {command.category_id} is not active")

            await uow.articles.add(article)
            await uow.commit()

        logger.info(f"[Workflow] Article {article.id} created by {article.author_id}")
        return article

    async def handle_delete_article(self, command: DeleteArticleCommand) -> bool:
        """
        Удалить статью со всеми вложениями, журналом, назначениями и отчётами.

        Автор может удалить только черновик; администратор - в любом статусе.
        Файлы в хранилище удаляются после commit по возможности.
        """
        actor = command.actor
        async with self.uow_factory() as uow:
            article = await uow.articles.get(command.article_id)
            if article is None:
                raise EntityNotFoundError(f"Article {command.article_id} not found")

            owner_draft = article.is_owned_by(actor.user_id) and article.status == ArticleStatus.DRAFT
            if not (actor.is_admin or owner_draft):
                raise AuthorizationError("Only the author (while draft) or an admin can delete an article")

            attachments = await uow.attachments.list_for_article(article.id)
            reports = await uow.reports.list_for_article(article.id)

            for attachment in attachments:
                await uow.attachments.delete(attachment.id)
            await uow.reports.delete_for_article(article.id)
            await uow.assignments.delete_for_article(article.id)
            await uow.events.delete_for_article(article.id)
            await uow.articles.delete(article.id)
            await uow.commit()

        paths = [a.storage_path for a in attachments if a.storage_path]
        paths += [r.artifact_path for r in reports if r.artifact_path]
        await self._delete_blobs(paths)

        logger.info(f"[Workflow] Article {article.id} deleted by {actor.user_id}")
        return True

    async def handle_register_attachment(self, command: RegisterAttachmentCommand) -> Attachment:
        """
        Зарегистрировать вложение.

        Raises:
            AuthorizationError: Нет права менять вложения
            DuplicateEntityError: storage_path уже занят
            DomainValidationError: Нет ни storage_path, ни public_url
        """
        attachment = Attachment(
            article_id=command.article_id,
            filename=command.filename,
            storage_path=command.storage_path,
            public_url=command.public_url,
            mime_type=command.mime_type,
            size_bytes=command.size_bytes,
            uploaded_by=command.actor.user_id,
        )

        async with self.uow_factory() as uow:
            article = await uow.articles.get(command.article_id)
            if article is None:
                raise EntityNotFoundError(f"Article {command.article_id} not found")
            if not can_manage_attachments(command.actor, article):
                raise AuthorizationError("Cannot change attachments of this article")
            if attachment.storage_path and await uow.attachments.exists_by_storage_path(attachment.storage_path):
                raise DuplicateEntityError(f"Storage path {attachment.storage_path} is already used")

            await uow.attachments.add(attachment)
            await uow.commit()

        logger.info(f"[Workflow] Attachment {attachment.id} ({attachment.filename}) added to {article.id}")
        return attachment

    async def handle_remove_attachment(self, command: RemoveAttachmentCommand) -> bool:
        async with self.uow_factory() as uow:
            article = await uow.articles.get(command.article_id)
            attachment = await uow.attachments.get(command.attachment_id)
            if article is None or attachment is None or attachment.article_id != article.id:
                raise EntityNotFoundError(f"Attachment {command.attachment_id} not found")
            if not can_manage_attachments(command.actor, article):
                raise AuthorizationError("Cannot change attachments of this article")

            await uow.attachments.delete(attachment.id)
            await uow.commit()

        if attachment.storage_path:
            await self._delete_blobs([attachment.storage_path])
        return True

    async def _delete_blobs(self, paths: List[str]) -> None:
        """Удаление файлов не влияет на результат команды."""
        for path in paths:
            try:
                if not await self.blob_store.delete(path):
                    logger.debug(f"[BlobStore] {path} was already gone")
            except BlobStoreError as e:
                logger.warning(f"[BlobStore] Failed to delete {path}: {e}")
