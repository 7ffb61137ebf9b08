"""
FastAPI Dependencies для DI.
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request

from editorial.application.services.similarity_service import SimilarityService
from editorial.application.services.workflow_service import WorkflowService
from editorial.domain.value_objects.actor import Actor
from editorial.domain.value_objects.role import Role
from editorial.infrastructure.container import ServiceContainer

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_container(request: Request) -> ServiceContainer:
    """Контейнер создаётся в lifespan приложения."""
    return request.app.state.container


async def get_actor(
    x_actor_id: Optional[str] = Header(default=None),
    x_actor_role: Optional[str] = Header(default=None)
) -> Actor:
    """
    Участник из заголовков шлюза аутентификации.

    Raises:
        HTTPException 401: Заголовки отсутствуют или некорректны
    """
    if not x_actor_id or not x_actor_role:
        raise HTTPException(status_code=401, detail="Missing actor headers")
    try:
        return Actor(user_id=UUID(x_actor_id), role=Role(x_actor_role.strip().lower()))
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid actor headers")


async def get_workflow_service(
    container: ServiceContainer = Depends(get_container)
) -> WorkflowService:
    """DI для service."""
    return container.workflow_service


async def get_similarity_service(
    container: ServiceContainer = Depends(get_container)
) -> SimilarityService:
    return container.similarity_service


# ============================================================================
# Долгие запросы
# ============================================================================

class ClientDisconnected(Exception):
    """Клиент закрыл соединение, работа запроса отменена."""
    pass


async def run_while_connected(
    request: Request,
    coro: Awaitable[T],
    poll_interval: float = 0.5
) -> T:
    """
    Выполнить корутину, пока клиент подключён.

    Starlette не отменяет обработчик при обрыве соединения, поэтому
    соединение опрашивается рядом с задачей. При отключении задача
    отменяется и дожидается своей очистки.

    Аргументы:
        request: Текущий запрос
        coro: Работа запроса
        poll_interval: Период опроса соединения (сек)

    Исключения:
        ClientDisconnected: Клиент отключился до завершения работы
    """
    task = asyncio.ensure_future(coro)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=poll_interval)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.warning(f"[API] Client disconnected from {request.url.path}, cancelling")
                task.cancel()
                await asyncio.wait({task})
                raise ClientDisconnected(request.url.path)
    finally:
        if not task.done():
            task.cancel()
            await asyncio.wait({task})
