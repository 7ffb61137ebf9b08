"""
Domain Service: Transition Policy

Таблица легальных переходов статьи и проверка прав участника.
Чистые функции без обращения к хранилищу: всё, что нужно для решения,
передаётся аргументами (текущий статус, участник, владелец, назначения).
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple
from uuid import UUID

from editorial.domain.entities.assignment import Assignment
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.article_status import ArticleStatus
from editorial.domain.value_objects.assignment_status import AssignmentKind
from editorial.domain.value_objects.role import Role
from editorial.shared.exceptions.domain_exceptions import (
    AuthorizationError,
    ConflictError,
    DomainValidationError,
)


@dataclass(frozen=True)
class TransitionRule:
    """
    Правило перехода.

    Атрибуты:
        roles: Роли, которым переход разрешён без назначения
        owner_allowed: Может ли автор статьи выполнить переход
        assignment_kinds: Типы активного назначения, дающего право на переход
        requires_note: Обязателен ли комментарий
    """

    roles: FrozenSet[Role] = frozenset()
    owner_allowed: bool = False
    assignment_kinds: FrozenSet[AssignmentKind] = frozenset()
    requires_note: bool = False


_MANAGERS = frozenset({Role.ADMIN, Role.CONTENT_MANAGER})
_ANY_ASSIGNEE = frozenset({AssignmentKind.EDITOR, AssignmentKind.REVIEWER})
_ASSIGNEE_OR_MANAGER = TransitionRule(roles=_MANAGERS, assignment_kinds=_ANY_ASSIGNEE)
_EDITOR_OR_MANAGER = TransitionRule(roles=_MANAGERS, assignment_kinds=frozenset({AssignmentKind.EDITOR}))
_REJECT = TransitionRule(roles=_MANAGERS, assignment_kinds=_ANY_ASSIGNEE, requires_note=True)


TRANSITION_TABLE: Dict[Tuple[ArticleStatus, ArticleStatus], TransitionRule] = {
    (ArticleStatus.DRAFT, ArticleStatus.SUBMITTED): TransitionRule(roles=_MANAGERS, owner_allowed=True),
    (ArticleStatus.SUBMITTED, ArticleStatus.UNDER_REVIEW): TransitionRule(roles=_MANAGERS),
    (ArticleStatus.UNDER_REVIEW, ArticleStatus.CHANGES_REQUESTED): _ASSIGNEE_OR_MANAGER,
    (ArticleStatus.UNDER_REVIEW, ArticleStatus.APPROVED): _ASSIGNEE_OR_MANAGER,
    # Редактор закончил правку и передаёт статью рецензенту
    (ArticleStatus.UNDER_REVIEW, ArticleStatus.UNDER_REVIEW): _EDITOR_OR_MANAGER,
    # Редактор снят, статья возвращается в очередь
    (ArticleStatus.UNDER_REVIEW, ArticleStatus.SUBMITTED): TransitionRule(roles=_MANAGERS),
    (ArticleStatus.CHANGES_REQUESTED, ArticleStatus.DRAFT): TransitionRule(
        roles=frozenset({Role.ADMIN}), owner_allowed=True
    ),
    (ArticleStatus.CHANGES_REQUESTED, ArticleStatus.SUBMITTED): TransitionRule(
        roles=frozenset({Role.ADMIN}), owner_allowed=True
    ),
    (ArticleStatus.APPROVED, ArticleStatus.PUBLISHED): TransitionRule(roles=_MANAGERS),
}

for _status in ArticleStatus:
    if _status.is_active():
        TRANSITION_TABLE[(_status, ArticleStatus.REJECTED)] = _REJECT


def find_rule(source: ArticleStatus, target: ArticleStatus) -> Optional[TransitionRule]:
    """Правило для пары статусов или None."""
    return TRANSITION_TABLE.get((source, target))


def _holds_assignment(
    actor: Actor,
    kinds: FrozenSet[AssignmentKind],
    assignments: Iterable[Assignment]
) -> bool:
    return any(a.kind in kinds and a.is_held_by(actor.user_id) for a in assignments)


def is_transition_allowed(
    source: ArticleStatus,
    target: ArticleStatus,
    actor: Actor,
    owner_id: Optional[UUID],
    assignments: Iterable[Assignment] = ()
) -> bool:
    """
    Разрешён ли переход данному участнику.

    Аргументы:
        source: Текущий (сохранённый) статус статьи
        target: Целевой статус
        actor: Участник
        owner_id: Автор статьи
        assignments: Назначения статьи (учитываются только активные)

    Возвращает:
        True если пара есть в таблице и участник имеет право
    """
    rule = find_rule(source, target)
    if rule is None:
        return False
    return _actor_matches(rule, actor, owner_id, assignments)


def _actor_matches(
    rule: TransitionRule,
    actor: Actor,
    owner_id: Optional[UUID],
    assignments: Iterable[Assignment]
) -> bool:
    if actor.role in rule.roles:
        return True
    if rule.owner_allowed and owner_id is not None and actor.owns(owner_id):
        return True
    return _holds_assignment(actor, rule.assignment_kinds, assignments)


def authorize_transition(
    source: ArticleStatus,
    target: ArticleStatus,
    actor: Actor,
    owner_id: Optional[UUID],
    assignments: Iterable[Assignment] = (),
    note: str = ""
) -> TransitionRule:
    """
    Проверить переход и вернуть применённое правило.

    Исключения:
        ConflictError: Текущий статус не допускает такого перехода
        AuthorizationError: Участник не имеет права на переход
        DomainValidationError: Не указан обязательный комментарий
    """
    rule = find_rule(source, target)
    if rule is None:
        raise ConflictError(
            f"Transition {source.value} -> {target.value} is not allowed"
        )

    if not _actor_matches(rule, actor, owner_id, list(assignments)):
        raise AuthorizationError(
            f"Role '{actor.role.value}' cannot move article "
            f"from {source.value} to {target.value}"
        )

    if rule.requires_note and not (note or "").strip():
        raise DomainValidationError(
            f"A note is required for {source.value} -> {target.value}"
        )

    return rule


def authorize_finalize(
    source: ArticleStatus,
    actor: Actor,
    assignments: Iterable[Assignment] = ()
) -> None:
    """
    Завершить правку может только назначенный редактор или менеджер,
    в обоих режимах и независимо от правила целевого перехода.

    Исключения:
        ConflictError: Статья не на проверке
        AuthorizationError: У участника нет активного назначения редактора
    """
    if source != ArticleStatus.UNDER_REVIEW:
        raise ConflictError(f"Cannot finalize editing while article is {source.value}")
    if not _actor_matches(_EDITOR_OR_MANAGER, actor, None, list(assignments)):
        raise AuthorizationError("Only the assigned editor or a manager can finalize editing")


def allowed_targets(
    source: ArticleStatus,
    actor: Actor,
    owner_id: Optional[UUID],
    assignments: Iterable[Assignment] = ()
) -> List[ArticleStatus]:
    """Статусы, в которые участник может перевести статью прямо сейчас."""
    assignments = list(assignments)
    return [
        target
        for (src, target), rule in TRANSITION_TABLE.items()
        if src == source and _actor_matches(rule, actor, owner_id, assignments)
    ]
