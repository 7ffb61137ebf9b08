"""
FastAPI Application Entry Point.

Путь: editorial/main.py
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from editorial.api.routes import articles, attachments, blobs, similarity, workflow
from editorial.infrastructure.config.logging_config import setup_logging
from editorial.infrastructure.config.settings import get_settings
from editorial.infrastructure.container import ServiceContainer
from editorial.shared.exceptions.domain_exceptions import (
    AuthorizationError,
    ConflictError,
    DomainException,
    DomainValidationError,
    EntityNotFoundError,
)
from editorial.shared.exceptions.infrastructure_exceptions import (
    BlobNotFoundError,
    ExternalToolError,
    InfrastructureException,
)

logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# Порядок важен: подклассы раньше базовых классов
_STATUS_BY_EXCEPTION = (
    (DomainValidationError, 400),
    (AuthorizationError, 403),
    (EntityNotFoundError, 404),
    (ConflictError, 409),
    (DomainException, 400),
    (BlobNotFoundError, 404),
    (ExternalToolError, 502),
    (InfrastructureException, 503),
)


def status_for(exc: Exception) -> int:
    for exc_type, status in _STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status
    return 500


async def _domain_error(request: Request, exc: Exception) -> JSONResponse:
    status = status_for(exc)
    body = {"detail": str(exc), "error": type(exc).__name__}
    if isinstance(exc, ExternalToolError):
        body["exit_code"] = exc.exit_code
        body["stderr_tail"] = exc.stderr_tail
    if status >= 500:
        logger.error(f"[API] {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    else:
        logger.info(f"[API] {request.method} {request.url.path} -> {status}: {exc}")
    return JSONResponse(status_code=status, content=body)


def create_app(container: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Создать приложение.

    Аргументы:
        container: Готовый контейнер (тесты); иначе создаётся в lifespan
    """
    settings = get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "container", None) is None
        if owned:
            app.state.container = ServiceContainer(settings)
        await app.state.container.start()
        try:
            yield
        finally:
            await app.state.container.stop()
            if owned:
                app.state.container = None

    app = FastAPI(
        title="Editorial Workflow API",
        description="Редакционный процесс и проверка оригинальности",
        version=VERSION,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.container = container

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DomainException, _domain_error)
    app.add_exception_handler(InfrastructureException, _domain_error)

    # Routes
    app.include_router(articles.router, prefix="/api/v1")
    app.include_router(workflow.router, prefix="/api/v1")
    app.include_router(attachments.router, prefix="/api/v1")
    app.include_router(similarity.router, prefix="/api/v1")
    app.include_router(blobs.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": VERSION
        }

    return app
