"""
Domain Service: Access Policy

Кто может читать материалы статьи и править текст без смены статуса.
"""

from typing import Iterable

from editorial.domain.entities.article import Article
from editorial.domain.entities.assignment import Assignment
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.domain.value_objects.assignment_status import AssignmentKind
from editorial.shared.exceptions.domain_exceptions import AuthorizationError


def can_read_article(actor: Actor, article: Article, assignments: Iterable[Assignment] = ()) -> bool:
    """Автор, привилегированные роли или активный исполнитель назначения."""
    if article.is_owned_by(actor.user_id) or actor.role.is_privileged:
        return True
    return any(a.is_held_by(actor.user_id) for a in assignments)


def ensure_read_access(actor: Actor, article: Article, assignments: Iterable[Assignment] = ()) -> None:
    if not can_read_article(actor, article, assignments):
        raise AuthorizationError(f"No access to article {article.id}")


def can_save_draft(actor: Actor, article: Article, assignments: Iterable[Assignment] = ()) -> bool:
    """
    Правка текста без смены статуса:
    - автор, пока статус редактируемый
    - назначенный редактор, пока статья на рассмотрении
    - admin / content_manager в любом не финальном статусе
    """
    if article.status.is_final():
        return False
    if actor.is_manager:
        return True
    if article.is_owned_by(actor.user_id) and article.is_editable():
        return True
    if article.status == ArticleStatus.UNDER_REVIEW:
        return any(
            a.kind == AssignmentKind.EDITOR and a.is_held_by(actor.user_id)
            for a in assignments
        )
    return False


def can_manage_attachments(actor: Actor, article: Article) -> bool:
    """Вложения меняет автор (пока статья редактируемая) или привилегированная роль."""
    if actor.role.is_privileged:
        return True
    return article.is_owned_by(actor.user_id) and article.is_editable()
