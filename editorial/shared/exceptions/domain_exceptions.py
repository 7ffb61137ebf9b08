"""
Domain Exceptions

Исключения доменного слоя.
"""


class DomainException(Exception):
    """Базовое исключение домена."""
    pass


class DomainValidationError(DomainException):
    """Ошибка валидации входных данных или доменной сущности."""
    pass


class AuthorizationError(DomainException):
    """Роль или владение не позволяют выполнить команду."""
    pass


class EntityNotFoundError(DomainException):
    """Сущность не найдена."""
    pass


class ConflictError(DomainException):
    """Предусловие по статусу больше не выполняется (перечитать и повторить)."""
    pass


class DuplicateEntityError(ConflictError):
    """Дубликат сущности."""
    pass


class BusinessRuleViolation(DomainException):
    """Нарушение бизнес-правила."""
    pass
