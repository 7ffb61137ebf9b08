"""
Value Object: Role

Роль участника редакционного процесса.
"""

from enum import Enum


class Role(str, Enum):
    """Поддерживаемые роли."""

    AUTHOR = "author"
    EDITOR = "editor"
    REVIEWER = "reviewer"
    CONTENT_MANAGER = "content_manager"
    ADMIN = "admin"
    READER = "reader"

    @property
    def display_name(self) -> str:
        """Человекочитаемое имя."""
        names = {
            Role.AUTHOR: "Author",
            Role.EDITOR: "Editor",
            Role.REVIEWER: "Reviewer",
            Role.CONTENT_MANAGER: "Content Manager",
            Role.ADMIN: "Administrator",
            Role.READER: "Reader",
        }
        return names[self]

    @property
    def is_privileged(self) -> bool:
        """Привилегированные роли имеют доступ к чужим статьям."""
        return self in (Role.ADMIN, Role.CONTENT_MANAGER, Role.EDITOR)

    @property
    def is_manager(self) -> bool:
        """Роли, управляющие назначениями и публикацией."""
        return self in (Role.ADMIN, Role.CONTENT_MANAGER)
