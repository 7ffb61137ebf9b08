"""
JPlag в Docker-контейнере.

Рабочий каталог монтируется в контейнер как /jplag; у каждого запуска
уникальное имя контейнера, чтобы при таймауте его можно было удалить.
"""

import asyncio
import logging
from pathlib import Path
from typing import List

from editorial.infrastructure.analysis_tool.subprocess_tool import SubprocessAnalysisTool

logger = logging.getLogger(__name__)

CONTAINER_ROOT = "/jplag"


class DockerAnalysisTool(SubprocessAnalysisTool):
    """
    Аргументы:
        image: Образ инструмента
        docker_binary: Путь к docker CLI
    """

    name = "jplag-docker"

    def __init__(self, image: str, docker_binary: str = "docker"):
        self.image = image
        self.docker_binary = docker_binary

    @staticmethod
    def container_name(run_id: str) -> str:
        return f"editorial-analysis-{run_id}"

    def build_argv(
        self,
        work_root: Path,
        submissions_dir: Path,
        language: str,
        threads: int,
        run_id: str
    ) -> List[str]:
        relative = submissions_dir.relative_to(work_root).as_posix()
        return [
            self.docker_binary, "run", "--rm",
            "--name", self.container_name(run_id),
            "-v", f"{work_root}:{CONTAINER_ROOT}:Z",
            self.image,
            "--mode", "RUN",
            "--csv-export",
            "--language", language,
            "-t", str(threads),
            f"{CONTAINER_ROOT}/{relative}",
        ]

    async def terminate(self, process: asyncio.subprocess.Process, run_id: str) -> None:
        """Убить клиент docker недостаточно: контейнер удаляется явно."""
        name = self.container_name(run_id)
        try:
            remover = await asyncio.create_subprocess_exec(
                self.docker_binary, "rm", "-f", name,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
            await asyncio.wait_for(remover.wait(), timeout=30)
            logger.info(f"[Analysis] Container {name} removed")
        except (OSError, asyncio.TimeoutError) as e:
            logger.error(f"[Analysis] Cannot remove container {name}: {e}")
        await super().terminate(process, run_id)
