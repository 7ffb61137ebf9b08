"""
Value Object: ArticleStatus

Статус статьи в редакционном процессе.
"""

from enum import Enum


class ArticleStatus(str, Enum):
    """Статусы жизненного цикла статьи."""

    DRAFT = "draft"                            # Черновик автора
    SUBMITTED = "submitted"                    # Отправлена на рассмотрение
    UNDER_REVIEW = "under_review"              # У редактора / рецензента
    CHANGES_REQUESTED = "changes_requested"    # Запрошены правки у автора
    APPROVED = "approved"                      # Одобрена к публикации
    PUBLISHED = "published"                    # Опубликована
    REJECTED = "rejected"                      # Отклонена

    def is_final(self) -> bool:
        """Проверка, является ли статус финальным."""
        return self in (ArticleStatus.PUBLISHED, ArticleStatus.REJECTED)

    def is_active(self) -> bool:
        """Статья ещё в работе (не финальный статус)."""
        return not self.is_final()

    def is_editable_by_author(self) -> bool:
        """Автор может править текст только в черновике или после запроса правок."""
        return self in (ArticleStatus.DRAFT, ArticleStatus.CHANGES_REQUESTED)

    def can_transition_to(self, new_status: 'ArticleStatus') -> bool:
        """
        Проверка возможности перехода в новый статус (без учёта ролей).

        Правила переходов:
        - DRAFT -> SUBMITTED
        - SUBMITTED -> UNDER_REVIEW
        - UNDER_REVIEW -> CHANGES_REQUESTED, APPROVED, UNDER_REVIEW, SUBMITTED
        - CHANGES_REQUESTED -> DRAFT, SUBMITTED
        - APPROVED -> PUBLISHED
        - любой не финальный -> REJECTED
        """
        if new_status == ArticleStatus.REJECTED:
            return self.is_active()

        transitions = {
            ArticleStatus.DRAFT: [ArticleStatus.SUBMITTED],
            ArticleStatus.SUBMITTED: [ArticleStatus.UNDER_REVIEW],
            ArticleStatus.UNDER_REVIEW: [
                ArticleStatus.CHANGES_REQUESTED,
                ArticleStatus.APPROVED,
                ArticleStatus.UNDER_REVIEW,  # Редактор передал статью рецензенту
                ArticleStatus.SUBMITTED,     # Редактор снят с назначения
            ],
            ArticleStatus.CHANGES_REQUESTED: [ArticleStatus.DRAFT, ArticleStatus.SUBMITTED],
            ArticleStatus.APPROVED: [ArticleStatus.PUBLISHED],
        }

        allowed = transitions.get(self, [])
        return new_status in allowed
