"""
Порт: IAnalysisTool

Внешний пакетный инструмент сравнения работ, запускаемый отдельным процессом.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ToolRunResult:
    """Итог успешного запуска инструмента."""

    exit_code: int
    stderr_tail: str = ""
    duration: float = 0.0


class IAnalysisTool(ABC):
    """Интерфейс внешнего инструмента анализа."""

    @abstractmethod
    async def run(
        self,
        work_root: Path,
        submissions_dir: Path,
        language: str,
        threads: int,
        timeout: float
    ) -> ToolRunResult:
        """
        Запустить инструмент и дождаться завершения.

        Args:
            work_root: Рабочий каталог (отчёт пишется внутрь)
            submissions_dir: Каталог с работами
            language: Языковой профиль
            threads: Подсказка по числу потоков
            timeout: Общий таймаут в секундах

        Returns:
            ToolRunResult при нулевом коде выхода

        Raises:
            ExternalToolError: Ненулевой код выхода, таймаут или ошибка запуска
        """
        pass
