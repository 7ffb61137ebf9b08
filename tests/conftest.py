# -*- coding: utf-8 -*-
"""
Общие фикстуры тестов.

База - SQLite файл во временном каталоге: у каждой сессии своё соединение,
поэтому конкурирующие транзакции ведут себя как в PostgreSQL (второй писатель
ждёт первого и видит зафиксированный статус).
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine

from editorial.application.handlers.article_command_handler import ArticleCommandHandler
from editorial.application.handlers.article_query_handler import ArticleQueryHandler
from editorial.application.handlers.workflow_command_handler import WorkflowCommandHandler
from editorial.application.notifications.dispatcher import NotificationDispatcher
from editorial.application.notifications.recipients import RecipientResolver
from editorial.application.services.workflow_service import WorkflowService
from editorial.infrastructure.config.database import build_session_factory, init_models
from editorial.infrastructure.directory.memory_user_directory import InMemoryUserDirectory
from editorial.infrastructure.notifications.sinks import RecordingNotificationSink
from editorial.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork
from editorial.infrastructure.storage.local_blob_store import LocalBlobStore
from tests.helpers import People, make_people


# ============================================================================
# Участники
# ============================================================================

@pytest.fixture
def people() -> People:
    return make_people()


@pytest.fixture
def users(people) -> InMemoryUserDirectory:
    return InMemoryUserDirectory(vars(people).values())


# ============================================================================
# Хранилища
# ============================================================================

@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'editorial.db'}")
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def uow_factory(session_factory):
    return lambda: SqlAlchemyUnitOfWork(session_factory)


@pytest.fixture
def blob_store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(
        root=str(tmp_path / "blobs"),
        base_url="http://testserver/blobs",
        signing_secret="test-secret",
    )


# ============================================================================
# Сервисы
# ============================================================================

@pytest.fixture
def sink() -> RecordingNotificationSink:
    return RecordingNotificationSink()


@pytest_asyncio.fixture
async def dispatcher(users, uow_factory, sink):
    dispatcher = NotificationDispatcher(RecipientResolver(users, uow_factory), sink)
    await dispatcher.start()
    yield dispatcher
    await dispatcher.stop()


@pytest.fixture
def workflow(uow_factory, users, blob_store, dispatcher) -> WorkflowService:
    return WorkflowService(
        WorkflowCommandHandler(uow_factory, users, dispatcher),
        ArticleCommandHandler(uow_factory, blob_store),
        ArticleQueryHandler(uow_factory),
    )

