# -*- coding: utf-8 -*-
"""
External Analysis Orchestrator.

Глубокая пакетная проверка статьи внешним инструментом (JPlag):

1. Проверка доступа и наличия материала
2. Аренда "один запуск на статью"
3. Временный каталог, вложения и текст статьи в submissions/
4. Запуск инструмента с таймаутом
5. Поиск каталога отчёта, архивирование, загрузка в хранилище
6. Сводка по CSV (или заглушка с notice)
7. Одна запись SimilarityReport только после успеха
8. Временный каталог удаляется всегда
"""

import asyncio
import logging
import re
import shutil
import tempfile
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence
from uuid import UUID, uuid4

import aiofiles

from editorial.application.analysis.attachment_loader import AttachmentLoader, LoadedAttachment
from editorial.application.analysis.csv_summary import summarize_report
from editorial.application.analysis.run_guard import AnalysisRunGuard
from editorial.application.analysis.text_extraction import html_to_text
from editorial.domain.entities.article import Article
from editorial.domain.entities.attachment import Attachment
from editorial.domain.entities.similarity_report import SimilarityReport
from editorial.domain.ports.analysis_tool import IAnalysisTool
from editorial.domain.ports.blob_store import IBlobStore
from editorial.domain.repositories.unit_of_work import IUnitOfWork
from editorial.domain.services.access_policy import ensure_read_access
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.report_status import ReportStatus, SimilarityMethod
from editorial.shared.exceptions.domain_exceptions import DomainValidationError, EntityNotFoundError

logger = logging.getLogger(__name__)

REPORT_DIR_CANDIDATES = ("out", "report", "jplag-out", "results")
ARCHIVE_NAME = "analysis-report.zip"
SUBMISSIONS_DIR = "submissions"
REPORT_CONTENT_TYPE = "application/zip"

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")


@dataclass
class ExternalAnalysisResult:
    """Ответ вызывающему."""

    report_id: UUID
    report_url: str
    summary: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "report_id": str(self.report_id),
            "report_url": self.report_url,
            "summary": self.summary,
        }


# =============================================================================
# Файловые операции (синхронные, вызываются через asyncio.to_thread)
# =============================================================================

def sanitize_filename(name: str) -> str:
    """Безопасное имя файла для каталога submissions."""
    cleaned = _UNSAFE_CHARS_RE.sub("_", Path(name or "").name).lstrip(".")
    return cleaned or "file"


def locate_report_dir(work_root: Path) -> Path:
    """Первый существующий из стандартных каталогов отчёта, иначе корень."""
    for name in REPORT_DIR_CANDIDATES:
        candidate = work_root / name
        if candidate.is_dir():
            return candidate
    return work_root


def zip_directory(source: Path, archive_path: Path) -> Path:
    """Упаковать каталог целиком, не включая сам архив."""
    archive_resolved = archive_path.resolve()
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for path in sorted(source.rglob("*")):
            if not path.is_file() or path.resolve() == archive_resolved:
                continue
            zf.write(path, arcname=path.relative_to(source).as_posix())
    return archive_path


class ExternalAnalysisOrchestrator:
    """
    Оркестратор внешнего анализа.

    Аргументы:
        uow_factory: Фабрика unit of work
        blob_store: Хранилище вложений и отчётов
        tool: Внешний инструмент
        run_guard: Аренды "один запуск на статью"
        loader: Загрузчик вложений
        default_language: Языковой профиль по умолчанию
        threads: Подсказка по числу потоков
        timeout_seconds: Таймаут по умолчанию
        report_url_ttl_seconds: Срок действия ссылки на архив
        summary_pair_limit: Сколько пар оставлять в сводке
        lease_margin_seconds: Запас TTL аренды сверх таймаута
        scratch_parent: Где создавать временные каталоги (None - системный tmp)
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        blob_store: IBlobStore,
        tool: IAnalysisTool,
        run_guard: AnalysisRunGuard,
        loader: AttachmentLoader,
        default_language: str = "python3",
        threads: int = 4,
        timeout_seconds: float = 600.0,
        report_url_ttl_seconds: int = 7 * 24 * 3600,
        summary_pair_limit: int = 20,
        lease_margin_seconds: float = 60.0,
        scratch_parent: Optional[str] = None
    ):
        self.uow_factory = uow_factory
        self.blob_store = blob_store
        self.tool = tool
        self.run_guard = run_guard
        self.loader = loader
        self.default_language = default_language
        self.threads = threads
        self.timeout_seconds = timeout_seconds
        self.report_url_ttl_seconds = report_url_ttl_seconds
        self.summary_pair_limit = summary_pair_limit
        self.lease_margin_seconds = lease_margin_seconds
        self.scratch_parent = scratch_parent

    async def run(
        self,
        article_id: UUID,
        actor: Actor,
        language: Optional[str] = None,
        timeout_seconds: Optional[float] = None
    ) -> ExternalAnalysisResult:
        """
        Выполнить внешний анализ статьи.

        Исключения:
            EntityNotFoundError: Статья не найдена
            AuthorizationError: Нет доступа к материалам статьи
            DomainValidationError: Нечего анализировать / неверный таймаут
            ConflictError: Для статьи уже идёт анализ
            ExternalToolError: Инструмент завершился с ошибкой или по таймауту
        """
        article, attachments = await self._load_article(article_id, actor)

        if not attachments and not (article.body or "").strip():
            raise DomainValidationError("No content or attachments to analyze")

        timeout = self.timeout_seconds if timeout_seconds is None else float(timeout_seconds)
        if timeout <= 0:
            raise DomainValidationError("timeout_seconds must be positive")
        language = (language or "").strip() or self.default_language

        async with self.run_guard.hold(article.id, ttl_seconds=timeout + self.lease_margin_seconds):
            work_root = Path(
                await asyncio.to_thread(
                    tempfile.mkdtemp, prefix=f"analysis-{article.id}-", dir=self.scratch_parent
                )
            )
            logger.info(f"[Analysis] Article {article.id}: scratch dir {work_root}")
            try:
                return await self._run_in(work_root, article, attachments, actor, language, timeout)
            finally:
                await asyncio.to_thread(shutil.rmtree, work_root, True)
                logger.debug(f"[Analysis] Scratch dir {work_root} removed")

    # =========================================================================
    # Шаги
    # =========================================================================

    async def _load_article(self, article_id: UUID, actor: Actor):
        async with self.uow_factory() as uow:
            article = await uow.articles.get(article_id)
            if article is None:
                raise EntityNotFoundError(f"Article {article_id} not found")
            assignments = await uow.assignments.list_for_article(article_id, active_only=True)
            ensure_read_access(actor, article, assignments)
            attachments = await uow.attachments.list_for_article(article_id)
        return article, attachments

    async def _run_in(
        self,
        work_root: Path,
        article: Article,
        attachments: Sequence[Attachment],
        actor: Actor,
        language: str,
        timeout: float
    ) -> ExternalAnalysisResult:
        submissions = work_root / SUBMISSIONS_DIR
        await asyncio.to_thread(submissions.mkdir)

        staged = await self._stage(article, attachments, submissions)
        if not staged:
            raise DomainValidationError("None of the attachments could be downloaded")

        await self.tool.run(work_root, submissions, language, self.threads, timeout)

        report_dir = await asyncio.to_thread(locate_report_dir, work_root)
        archive = await asyncio.to_thread(zip_directory, report_dir, work_root / ARCHIVE_NAME)
        summary = await asyncio.to_thread(summarize_report, report_dir, self.summary_pair_limit)

        report_id = uuid4()
        storage_path = f"similarity_reports/{article.id}/{report_id}.zip"
        async with aiofiles.open(archive, "rb") as f:
            payload = await f.read()
        await self.blob_store.write(payload, storage_path, REPORT_CONTENT_TYPE)
        report_url = await self.blob_store.signed_url(
            storage_path, self.report_url_ttl_seconds, mode="read"
        )

        report = SimilarityReport(
            id=report_id,
            article_id=article.id,
            method=SimilarityMethod.EXTERNAL_TOOL,
            summary=summary,
            initiated_by=actor.user_id,
            status=ReportStatus.COMPLETED,
            artifact_path=storage_path,
            artifact_url=report_url,
        )
        try:
            async with self.uow_factory() as uow:
                await uow.reports.add(report)
                await uow.commit()
        except Exception:
            # Запись отчёта не удалась: архив без записи никому не нужен
            await self._discard_artifact(storage_path)
            raise

        logger.info(
            f"[Analysis] Article {article.id}: report {report_id} stored "
            f"({len(payload)} bytes, summary keys={sorted(summary)})"
        )
        return ExternalAnalysisResult(report_id=report_id, report_url=report_url, summary=summary)

    async def _stage(
        self,
        article: Article,
        attachments: Sequence[Attachment],
        submissions: Path
    ) -> List[Path]:
        """Записать текст статьи и вложения в submissions/."""
        writes = []

        body = html_to_text(article.body or "").strip()
        if body:
            target = submissions / f"article_content_{article.id}.txt"
            writes.append(self._write_file(target, body.encode("utf-8")))

        loaded: List[LoadedAttachment] = await self.loader.load_all(attachments)
        for item in loaded:
            att = item.attachment
            target = submissions / f"{att.id}-{sanitize_filename(att.display_name)}"
            writes.append(self._write_file(target, item.data))

        return list(await asyncio.gather(*writes))

    @staticmethod
    async def _write_file(target: Path, data: bytes) -> Path:
        async with aiofiles.open(target, "wb") as f:
            await f.write(data)
        return target

    async def _discard_artifact(self, storage_path: str) -> None:
        try:
            await self.blob_store.delete(storage_path)
        except Exception as e:
            logger.warning(f"[Analysis] Cannot delete orphaned artifact {storage_path}: {e}")
