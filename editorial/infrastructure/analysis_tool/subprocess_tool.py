"""
Базовый адаптер внешнего инструмента, запускаемого дочерним процессом.

Запускает процесс, построчно пишет stdout / stderr в лог по мере поступления,
следит за общим таймаутом и гарантирует завершение процесса при таймауте
и отмене.
"""

import asyncio
import logging
import time
from abc import abstractmethod
from collections import deque
from pathlib import Path
from typing import Deque, List, Optional
from uuid import uuid4

from editorial.domain.ports.analysis_tool import IAnalysisTool, ToolRunResult
from editorial.shared.exceptions.infrastructure_exceptions import ExternalToolError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 4096
STDERR_TAIL_LINES = 50
KILL_GRACE_SECONDS = 10.0


class SubprocessAnalysisTool(IAnalysisTool):
    """
    Общий цикл запуска: наследники описывают только командную строку
    и способ принудительной остановки.
    """

    name = "analysis-tool"

    @abstractmethod
    def build_argv(
        self,
        work_root: Path,
        submissions_dir: Path,
        language: str,
        threads: int,
        run_id: str
    ) -> List[str]:
        """Командная строка запуска (run_id уникален для каждого запуска)."""
        pass

    def working_directory(self, work_root: Path) -> Optional[Path]:
        return None

    async def terminate(self, process: asyncio.subprocess.Process, run_id: str) -> None:
        """Принудительно остановить процесс."""
        try:
            process.kill()
        except ProcessLookupError:
            pass

    async def run(
        self,
        work_root: Path,
        submissions_dir: Path,
        language: str,
        threads: int,
        timeout: float
    ) -> ToolRunResult:
        run_id = uuid4().hex[:12]
        argv = self.build_argv(work_root, submissions_dir, language, threads, run_id)
        cwd = self.working_directory(work_root)
        logger.info(f"[Analysis] Starting {self.name}: {' '.join(argv)}")

        started = time.monotonic()
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(cwd) if cwd else None,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ExternalToolError(f"Cannot start {self.name}: {e}") from e

        stderr_tail: Deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        pumps = asyncio.gather(
            self._pump(process.stdout, logging.INFO, None),
            self._pump(process.stderr, logging.WARNING, stderr_tail),
        )

        try:
            exit_code = await asyncio.wait_for(self._wait(process, pumps), timeout=timeout)
        except asyncio.TimeoutError:
            await self._stop(process, pumps, run_id)
            logger.error(f"[Analysis] {self.name} timed out after {timeout}s, process killed")
            raise ExternalToolError(
                f"{self.name} timed out after {timeout}s",
                exit_code=None,
                stderr_tail="\n".join(stderr_tail),
            )
        except asyncio.CancelledError:
            await self._stop(process, pumps, run_id)
            logger.warning(f"[Analysis] {self.name} cancelled, process killed")
            raise

        duration = time.monotonic() - started
        tail = "\n".join(stderr_tail)

        if exit_code != 0:
            logger.error(f"[Analysis] {self.name} exited with code {exit_code} after {duration:.1f}s")
            raise ExternalToolError(
                f"{self.name} exited with code {exit_code}",
                exit_code=exit_code,
                stderr_tail=tail,
            )

        logger.info(f"[Analysis] {self.name} finished in {duration:.1f}s")
        return ToolRunResult(exit_code=exit_code, stderr_tail=tail, duration=duration)

    @staticmethod
    async def _wait(process: asyncio.subprocess.Process, pumps: asyncio.Future) -> int:
        await pumps
        return await process.wait()

    async def _stop(self, process: asyncio.subprocess.Process, pumps: asyncio.Future, run_id: str) -> None:
        if process.returncode is None:
            await self.terminate(process, run_id)
        pumps.cancel()
        await asyncio.gather(pumps, return_exceptions=True)
        try:
            await asyncio.wait_for(process.wait(), timeout=KILL_GRACE_SECONDS)
        except asyncio.TimeoutError:
            logger.error(f"[Analysis] {self.name} (pid {process.pid}) did not exit after kill")

    async def _pump(
        self,
        stream: Optional[asyncio.StreamReader],
        level: int,
        tail: Optional[Deque[str]]
    ) -> None:
        """Читать поток кусками и логировать целые строки."""
        if stream is None:
            return

        buffer = b""
        while True:
            chunk = await stream.read(CHUNK_SIZE)
            if not chunk:
                break
            buffer += chunk
            *lines, buffer = buffer.split(b"\n")
            for raw in lines:
                self._emit(raw, level, tail)

        if buffer:
            self._emit(buffer, level, tail)

    def _emit(self, raw: bytes, level: int, tail: Optional[Deque[str]]) -> None:
        line = raw.decode("utf-8", errors="replace").rstrip()
        if not line:
            return
        logger.log(level, f"[{self.name}] {line}")
        if tail is not None:
            tail.append(line)
