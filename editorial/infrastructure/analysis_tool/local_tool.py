"""
Инструмент, установленный локально (например, jplag.jar через обёртку).
"""

from pathlib import Path
from typing import List, Optional, Sequence

from editorial.infrastructure.analysis_tool.subprocess_tool import SubprocessAnalysisTool


class LocalAnalysisTool(SubprocessAnalysisTool):
    """Запуск команды из PATH; рабочий каталог процесса - корень анализа."""

    name = "jplag"

    def __init__(self, command: Sequence[str]):
        if not command:
            raise ValueError("Local analysis command is empty")
        self.command = list(command)

    def build_argv(
        self,
        work_root: Path,
        submissions_dir: Path,
        language: str,
        threads: int,
        run_id: str
    ) -> List[str]:
        return [
            *self.command,
            "--mode", "RUN",
            "--csv-export",
            "--language", language,
            "-t", str(threads),
            str(submissions_dir),
        ]

    def working_directory(self, work_root: Path) -> Optional[Path]:
        return work_root
