# -*- coding: utf-8 -*-
"""
Тесты таблицы переходов и проверки прав.

Чистые функции: без базы и без асинхронности.
"""

from uuid import uuid4

import pytest

from editorial.domain.entities.assignment import Assignment
from editorial.domain.services.transition_policy import (
    TRANSITION_TABLE,
    allowed_targets,
    authorize_transition,
    is_transition_allowed,
)
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.article_status import ArticleStatus as S
from editorial.domain.value_objects.assignment_status import AssignmentKind, AssignmentStatus
from editorial.domain.value_objects.role import Role
from editorial.shared.exceptions.domain_exceptions import (
    AuthorizationError,
    ConflictError,
    DomainValidationError,
)


# ============================================================================
# Фабрики
# ============================================================================

def actor(role: Role) -> Actor:
    return Actor(user_id=uuid4(), role=role)


def assignment_for(user: Actor, kind=AssignmentKind.EDITOR, status=AssignmentStatus.ASSIGNED) -> Assignment:
    return Assignment(
        article_id=uuid4(), assignee_id=user.user_id, assigned_by=uuid4(), kind=kind, status=status
    )


OWNER = actor(Role.AUTHOR)
MANAGER = actor(Role.CONTENT_MANAGER)
ADMIN = actor(Role.ADMIN)


# ============================================================================
# 1. Состав таблицы
# ============================================================================

class TestTable:
    """Какие пары статусов вообще допустимы."""

    def test_terminal_statuses_have_no_exits(self):
        for (source, _target) in TRANSITION_TABLE:
            assert source not in (S.PUBLISHED, S.REJECTED)

    def test_every_active_status_can_be_rejected(self):
        for status in (S.DRAFT, S.SUBMITTED, S.UNDER_REVIEW, S.CHANGES_REQUESTED, S.APPROVED):
            assert (status, S.REJECTED) in TRANSITION_TABLE

    def test_draft_cannot_jump_to_published(self):
        assert (S.DRAFT, S.PUBLISHED) not in TRANSITION_TABLE
        assert not is_transition_allowed(S.DRAFT, S.PUBLISHED, ADMIN, OWNER.user_id)

    def test_table_matches_status_enum_rules(self):
        for (source, target) in TRANSITION_TABLE:
            assert source.can_transition_to(target), (source, target)


# ============================================================================
# 2. Права участников
# ============================================================================

class TestAuthorization:
    """Кто может выполнить переход."""

    def test_owner_submits_draft(self):
        assert is_transition_allowed(S.DRAFT, S.SUBMITTED, OWNER, OWNER.user_id)

    def test_other_author_cannot_submit(self):
        stranger = actor(Role.AUTHOR)
        with pytest.raises(AuthorizationError):
            authorize_transition(S.DRAFT, S.SUBMITTED, stranger, OWNER.user_id)

    def test_owner_cannot_approve_own_article(self):
        with pytest.raises(AuthorizationError):
            authorize_transition(S.UNDER_REVIEW, S.APPROVED, OWNER, OWNER.user_id)

    def test_assigned_editor_approves(self):
        editor = actor(Role.EDITOR)
        assert is_transition_allowed(
            S.UNDER_REVIEW, S.APPROVED, editor, OWNER.user_id, [assignment_for(editor)]
        )

    def test_unassigned_editor_cannot_approve(self):
        editor = actor(Role.EDITOR)
        someone_else = actor(Role.EDITOR)
        with pytest.raises(AuthorizationError):
            authorize_transition(
                S.UNDER_REVIEW, S.APPROVED, editor, OWNER.user_id, [assignment_for(someone_else)]
            )

    def test_completed_assignment_gives_no_rights(self):
        editor = actor(Role.EDITOR)
        done = assignment_for(editor, status=AssignmentStatus.COMPLETED)
        assert not is_transition_allowed(S.UNDER_REVIEW, S.APPROVED, editor, OWNER.user_id, [done])

    def test_reviewer_assignment_allows_change_request(self):
        reviewer = actor(Role.REVIEWER)
        review = assignment_for(reviewer, kind=AssignmentKind.REVIEWER)
        assert is_transition_allowed(S.UNDER_REVIEW, S.CHANGES_REQUESTED, reviewer, OWNER.user_id, [review])

    def test_reviewer_cannot_finalize_editing(self):
        reviewer = actor(Role.REVIEWER)
        review = assignment_for(reviewer, kind=AssignmentKind.REVIEWER)
        assert not is_transition_allowed(S.UNDER_REVIEW, S.UNDER_REVIEW, reviewer, OWNER.user_id, [review])

    def test_only_managers_publish(self):
        editor = actor(Role.EDITOR)
        assert is_transition_allowed(S.APPROVED, S.PUBLISHED, MANAGER, OWNER.user_id)
        assert not is_transition_allowed(S.APPROVED, S.PUBLISHED, editor, OWNER.user_id, [assignment_for(editor)])

    def test_content_manager_cannot_return_changes_to_draft(self):
        assert not is_transition_allowed(S.CHANGES_REQUESTED, S.DRAFT, MANAGER, OWNER.user_id)
        assert is_transition_allowed(S.CHANGES_REQUESTED, S.DRAFT, ADMIN, OWNER.user_id)


# ============================================================================
# 3. Порядок проверок
# ============================================================================

class TestEvaluationOrder:
    """Неверный статус важнее прав, права важнее комментария."""

    def test_unknown_pair_is_conflict_even_for_admin(self):
        with pytest.raises(ConflictError):
            authorize_transition(S.PUBLISHED, S.DRAFT, ADMIN, OWNER.user_id)

    def test_unknown_pair_is_conflict_before_authorization(self):
        reader = actor(Role.READER)
        with pytest.raises(ConflictError):
            authorize_transition(S.DRAFT, S.APPROVED, reader, OWNER.user_id)

    def test_reject_requires_note(self):
        with pytest.raises(DomainValidationError):
            authorize_transition(S.SUBMITTED, S.REJECTED, MANAGER, OWNER.user_id, note="  ")

    def test_reject_authorization_checked_before_note(self):
        reader = actor(Role.READER)
        with pytest.raises(AuthorizationError):
            authorize_transition(S.SUBMITTED, S.REJECTED, reader, OWNER.user_id, note="")

    def test_reject_with_note_returns_rule(self):
        rule = authorize_transition(S.SUBMITTED, S.REJECTED, MANAGER, OWNER.user_id, note="Off topic")
        assert rule.requires_note


def test_allowed_targets_for_assigned_editor():
    editor = actor(Role.EDITOR)
    targets = set(allowed_targets(S.UNDER_REVIEW, editor, OWNER.user_id, [assignment_for(editor)]))
    assert targets == {S.CHANGES_REQUESTED, S.APPROVED, S.UNDER_REVIEW, S.REJECTED}


def test_allowed_targets_for_owner_after_change_request():
    targets = set(allowed_targets(S.CHANGES_REQUESTED, OWNER, OWNER.user_id))
    assert targets == {S.DRAFT, S.SUBMITTED}


# ============================================================================
# 4. Полный перебор: статус x статус x роль x отношение к статье
# ============================================================================

# Кто вправе выполнить каждый легальный переход. Записано отдельно от
# TRANSITION_TABLE, чтобы перебор сверял таблицу с ожиданием, а не с собой.
_MANAGERS = {Role.ADMIN, Role.CONTENT_MANAGER}
_ASSIGNED = {"editor_assignment", "reviewer_assignment"}
EXPECTED_GRANTS = {
    (S.DRAFT, S.SUBMITTED): _MANAGERS | {"owner"},
    (S.SUBMITTED, S.UNDER_REVIEW): _MANAGERS,
    (S.UNDER_REVIEW, S.CHANGES_REQUESTED): _MANAGERS | _ASSIGNED,
    (S.UNDER_REVIEW, S.APPROVED): _MANAGERS | _ASSIGNED,
    (S.UNDER_REVIEW, S.UNDER_REVIEW): _MANAGERS | {"editor_assignment"},
    (S.UNDER_REVIEW, S.SUBMITTED): _MANAGERS,
    (S.CHANGES_REQUESTED, S.DRAFT): {Role.ADMIN, "owner"},
    (S.CHANGES_REQUESTED, S.SUBMITTED): {Role.ADMIN, "owner"},
    (S.APPROVED, S.PUBLISHED): _MANAGERS,
}
for _source in (S.DRAFT, S.SUBMITTED, S.UNDER_REVIEW, S.CHANGES_REQUESTED, S.APPROVED):
    EXPECTED_GRANTS[(_source, S.REJECTED)] = _MANAGERS | _ASSIGNED

RELATIONS = ("none", "owner", "editor_assignment", "reviewer_assignment")


def _setup(role: Role, relation: str):
    """Участник, владелец статьи и назначения для заданного отношения."""
    user = actor(role)
    owner_id = user.user_id if relation == "owner" else OWNER.user_id
    assignments = []
    if relation == "editor_assignment":
        assignments.append(assignment_for(user, kind=AssignmentKind.EDITOR))
    elif relation == "reviewer_assignment":
        assignments.append(assignment_for(user, kind=AssignmentKind.REVIEWER))
    return user, owner_id, assignments


@pytest.mark.parametrize("relation", RELATIONS)
@pytest.mark.parametrize("role", list(Role))
@pytest.mark.parametrize("target", list(S))
@pytest.mark.parametrize("source", list(S))
def test_every_status_pair_role_and_relation(source, target, role, relation):
    user, owner_id, assignments = _setup(role, relation)
    grants = EXPECTED_GRANTS.get((source, target))

    if grants is None:
        with pytest.raises(ConflictError):
            authorize_transition(source, target, user, owner_id, assignments, note="note")
        assert not is_transition_allowed(source, target, user, owner_id, assignments)
    elif role in grants or relation in grants:
        authorize_transition(source, target, user, owner_id, assignments, note="note")
        assert is_transition_allowed(source, target, user, owner_id, assignments)
    else:
        with pytest.raises(AuthorizationError):
            authorize_transition(source, target, user, owner_id, assignments, note="note")
        assert not is_transition_allowed(source, target, user, owner_id, assignments)


def test_expected_grants_cover_table():
    assert set(EXPECTED_GRANTS) == set(TRANSITION_TABLE)
