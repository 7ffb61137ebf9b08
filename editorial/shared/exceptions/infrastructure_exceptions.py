"""
Infrastructure Exceptions

Исключения инфраструктурного слоя.
"""

from typing import Optional


class InfrastructureException(Exception):
    """Базовое исключение инфраструктуры."""
    pass


class DatabaseError(InfrastructureException):
    """Ошибка работы с БД."""
    pass


class ExternalServiceError(InfrastructureException):
    """Ошибка внешнего сервиса."""
    pass


class ExternalToolError(ExternalServiceError):
    """
    Внешний инструмент анализа завершился с ошибкой или по таймауту.

    Атрибуты:
        exit_code: Код выхода процесса (None при таймауте / ошибке запуска)
        stderr_tail: Последние строки stderr процесса
    """

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        stderr_tail: str = ""
    ):
        super().__init__(message)
        self.exit_code = exit_code
        self.stderr_tail = stderr_tail


class BlobStoreError(InfrastructureException):
    """Ошибка файлового хранилища."""
    pass


class BlobNotFoundError(BlobStoreError):
    """Объект в хранилище не найден."""
    pass


class CacheError(InfrastructureException):
    """Ошибка работы с кэшем."""
    pass


class NotificationDeliveryError(InfrastructureException):
    """Ошибка доставки уведомления."""
    pass


class DegradedResultError(InfrastructureException):
    """Результат получен частично (например, нет CSV сводки)."""
    pass
