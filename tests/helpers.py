# -*- coding: utf-8 -*-
"""
Фабрики тестовых данных и шаги сценариев.
"""

from dataclasses import dataclass
from typing import Optional

from editorial.application.commands.article_commands import CreateArticleCommand
from editorial.application.services.workflow_service import WorkflowService
from editorial.domain.entities.user import User
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.role import Role


@dataclass
class People:
    """Набор пользователей для сценариев."""

    author: User
    other_author: User
    editor: User
    other_editor: User
    reviewer: User
    manager: User
    admin: User
    reader: User

    @staticmethod
    def actor(user: User, role: Optional[Role] = None) -> Actor:
        return Actor(user_id=user.id, role=role or user.role)


def make_people() -> People:
    return People(
        author=User(name="Alice Author", role=Role.AUTHOR, email="alice@example.com"),
        other_author=User(name="Oscar Author", role=Role.AUTHOR),
        editor=User(name="Erin Editor", role=Role.EDITOR, email="erin@example.com"),
        other_editor=User(name="Evan Editor", role=Role.EDITOR),
        reviewer=User(name="Riley Reviewer", role=Role.REVIEWER),
        manager=User(name="Morgan Manager", role=Role.CONTENT_MANAGER, email="morgan@example.com"),
        admin=User(name="Ada Admin", role=Role.ADMIN),
        reader=User(name="Rene Reader", role=Role.READER),
    )


async def create_article(workflow: WorkflowService, author: Actor, title: str = "On originality", body: str = ""):
    """Черновик от имени автора."""
    return await workflow.create_article(
        CreateArticleCommand(actor=author, title=title, body=body or "<p>First draft of the essay.</p>")
    )


async def article_under_review(workflow: WorkflowService, people: People, title: str = "On originality"):
    """Статья, отправленная автором и назначенная редактору."""
    author = people.actor(people.author)
    manager = people.actor(people.manager)
    article = await create_article(workflow, author, title)
    await workflow.submit_article(author, article.id)
    await workflow.assign_editor(manager, article.id, people.editor.id)
    return article
