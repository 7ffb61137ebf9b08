"""
Сборка зависимостей приложения.

Один контейнер на процесс: API создаёт его в lifespan, CLI - на время
команды. Все адаптеры выбираются по Settings.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine

from editorial.application.analysis.attachment_loader import AttachmentLoader
from editorial.application.analysis.external_orchestrator import ExternalAnalysisOrchestrator
from editorial.application.analysis.run_guard import AnalysisRunGuard
from editorial.application.analysis.similarity_engine import SimilarityEngine
from editorial.application.handlers.article_command_handler import ArticleCommandHandler
from editorial.application.handlers.article_query_handler import ArticleQueryHandler
from editorial.application.handlers.workflow_command_handler import WorkflowCommandHandler
from editorial.application.notifications.dispatcher import NotificationDispatcher
from editorial.application.notifications.recipients import RecipientResolver
from editorial.application.services.similarity_service import SimilarityService
from editorial.application.services.workflow_service import WorkflowService
from editorial.domain.ports.analysis_tool import IAnalysisTool
from editorial.domain.ports.blob_store import IBlobStore
from editorial.domain.ports.key_value_store import IKeyValueStore
from editorial.domain.ports.notification_sink import INotificationSink
from editorial.infrastructure.analysis_tool.docker_tool import DockerAnalysisTool
from editorial.infrastructure.analysis_tool.local_tool import LocalAnalysisTool
from editorial.infrastructure.cache.memory_kv_store import InMemoryKeyValueStore
from editorial.infrastructure.cache.redis_kv_store import RedisKeyValueStore
from editorial.infrastructure.config.database import build_engine, build_session_factory, init_models
from editorial.infrastructure.config.settings import Settings, get_settings
from editorial.infrastructure.directory.sql_user_directory import SqlUserDirectory
from editorial.infrastructure.notifications.email_backend import (
    ConsoleEmailBackend,
    EmailBackend,
    SMTPEmailBackend,
)
from editorial.infrastructure.notifications.sinks import (
    CompositeNotificationSink,
    EmailNotificationSink,
    InAppNotificationSink,
)
from editorial.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from editorial.infrastructure.storage.local_blob_store import LocalBlobStore
from editorial.infrastructure.storage.minio_blob_store import MinioBlobStore

logger = logging.getLogger(__name__)


def build_blob_store(settings: Settings) -> IBlobStore:
    if settings.blob_backend.lower() == "minio":
        return MinioBlobStore(
            endpoint=settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            bucket=settings.minio_bucket,
            secure=settings.minio_secure,
        )
    return LocalBlobStore(
        root=settings.blob_root,
        base_url=settings.blob_base_url,
        signing_secret=settings.blob_signing_secret,
    )


def build_kv_store(settings: Settings) -> IKeyValueStore:
    if settings.is_redis_kv():
        return RedisKeyValueStore(settings.redis_url)
    return InMemoryKeyValueStore()


def build_email_backend(settings: Settings) -> EmailBackend:
    if settings.email_backend.lower() == "smtp":
        return SMTPEmailBackend(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )
    return ConsoleEmailBackend()


def build_analysis_tool(settings: Settings) -> IAnalysisTool:
    if settings.analysis_tool.lower() == "local":
        return LocalAnalysisTool(settings.analysis_local_command)
    return DockerAnalysisTool(
        image=settings.analysis_docker_image,
        docker_binary=settings.analysis_docker_binary,
    )


class ServiceContainer:
    """
    Контейнер сервисов.

    Аргументы:
        settings: Настройки (по умолчанию get_settings())
        engine: Готовый движок БД (для тестов)
        blob_store / kv_store / tool / sink: Подмена адаптеров
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        engine: Optional[AsyncEngine] = None,
        blob_store: Optional[IBlobStore] = None,
        kv_store: Optional[IKeyValueStore] = None,
        tool: Optional[IAnalysisTool] = None,
        sink: Optional[INotificationSink] = None
    ):
        self.settings = settings or get_settings()
        s = self.settings

        self.engine = engine or build_engine(s)
        self.session_factory = build_session_factory(self.engine)
        self.blob_store = blob_store or build_blob_store(s)
        self.kv_store = kv_store or build_kv_store(s)
        self.tool = tool or build_analysis_tool(s)
        self.users = SqlUserDirectory(self.session_factory)

        self.sink = sink or CompositeNotificationSink([
            InAppNotificationSink(self.session_factory),
            EmailNotificationSink(build_email_backend(s), s.email_from_address, s.email_from_name),
        ])
        self.dispatcher = NotificationDispatcher(
            RecipientResolver(self.users, self.uow_factory, broadcast_limit=s.notification_broadcast_limit),
            self.sink,
            max_attempts=s.notification_max_attempts,
            queue_size=s.notification_queue_size,
        )

        loader = AttachmentLoader(self.blob_store, concurrency=s.download_concurrency)
        self.orchestrator = ExternalAnalysisOrchestrator(
            uow_factory=self.uow_factory,
            blob_store=self.blob_store,
            tool=self.tool,
            run_guard=AnalysisRunGuard(self.kv_store),
            loader=loader,
            default_language=s.analysis_default_language,
            threads=s.analysis_threads,
            timeout_seconds=s.analysis_timeout_seconds,
            report_url_ttl_seconds=s.report_url_ttl_seconds(),
            summary_pair_limit=s.summary_pair_limit,
        )

        self.workflow_service = WorkflowService(
            WorkflowCommandHandler(self.uow_factory, self.users, self.dispatcher),
            ArticleCommandHandler(self.uow_factory, self.blob_store),
            ArticleQueryHandler(self.uow_factory),
        )
        self.similarity_service = SimilarityService(
            uow_factory=self.uow_factory,
            loader=loader,
            engine=SimilarityEngine(
                terms_per_document=s.similarity_terms_per_document,
                max_chars=s.similarity_max_chars,
                max_top=s.similarity_max_top,
            ),
            orchestrator=self.orchestrator,
            default_threshold=s.similarity_default_threshold,
            default_top=s.similarity_default_top,
        )

    def uow_factory(self) -> SqlAlchemyUnitOfWork:
        return SqlAlchemyUnitOfWork(self.session_factory)

    async def start(self, create_tables: bool = False) -> None:
        if create_tables:
            await init_models(self.engine)
        await self.dispatcher.start()
        logger.info("[Container] Services started")

    async def stop(self) -> None:
        await self.dispatcher.stop()
        if isinstance(self.kv_store, RedisKeyValueStore):
            await self.kv_store.close()
        await self.engine.dispose()
        logger.info("[Container] Services stopped")
