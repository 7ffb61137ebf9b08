# -*- coding: utf-8 -*-
"""
SQLAlchemy модели инфраструктурного слоя.

Переносимые типы колонок (Uuid, JSON): PostgreSQL в эксплуатации,
SQLite в тестах и при локальном запуске.

Маппинг особенностей:
- entity.metadata ↔ model.article_metadata (избегаем конфликт с SQLAlchemy)
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CategoryModel(Base):
    """Рубрика."""

    __tablename__ = "categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)


class UserModel(Base):
    """Пользователь (справочник для уведомлений и назначений)."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    email = Column(String(320))
    role = Column(String(50), nullable=False, index=True)
    is_active = Column(Boolean, default=True, nullable=False)


class ArticleModel(Base):
    """
    SQLAlchemy модель статьи.

    Статус меняется только условным UPDATE по (id, status).
    """

    __tablename__ = "articles"

    # =========================================================================
    # Основные поля
    # =========================================================================
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    author_id = Column(Uuid, nullable=False, index=True)
    title = Column(String(500), nullable=False)
    body = Column(Text, default="")
    summary = Column(Text, default="")
    category_id = Column(Uuid, ForeignKey("categories.id"), nullable=True)
    tags = Column(JSON, default=list)

    # =========================================================================
    # Статус и публикация
    # =========================================================================
    status = Column(String(50), default="draft", nullable=False, index=True)
    price = Column(Float, nullable=True)
    is_free = Column(Boolean, default=False, nullable=False)

    # =========================================================================
    # Временные метки
    # =========================================================================
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    published_at = Column(DateTime, nullable=True)

    # =========================================================================
    # JSON метаданные
    # =========================================================================
    article_metadata = Column(JSON, default=dict)


class WorkflowEventModel(Base):
    """Журнал переходов (только добавление)."""

    __tablename__ = "workflow_events"
    __table_args__ = (
        Index("ix_workflow_events_article_order", "article_id", "created_at", "id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    article_id = Column(Uuid, ForeignKey("articles.id"), nullable=False)
    actor_id = Column(Uuid, nullable=False)
    from_status = Column(String(50), nullable=False)
    to_status = Column(String(50), nullable=False)
    note = Column(Text, default="")
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class AssignmentModel(Base):
    """Назначение редактора / рецензента."""

    __tablename__ = "assignments"
    __table_args__ = (
        Index("ix_assignments_article_kind_status", "article_id", "kind", "status"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    article_id = Column(Uuid, ForeignKey("articles.id"), nullable=False)
    assignee_id = Column(Uuid, nullable=False, index=True)
    assigned_by = Column(Uuid, nullable=False)
    kind = Column(String(20), nullable=False)
    status = Column(String(20), default="assigned", nullable=False)
    due_date = Column(DateTime, nullable=True)
    assigned_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class AttachmentModel(Base):
    """Вложение статьи."""

    __tablename__ = "attachments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    article_id = Column(Uuid, ForeignKey("articles.id"), nullable=False, index=True)
    filename = Column(String(500), nullable=False)
    storage_path = Column(String(1024), unique=True, nullable=True)
    public_url = Column(String(2048), nullable=True)
    mime_type = Column(String(255), default="application/octet-stream")
    size_bytes = Column(Integer, default=0)
    uploaded_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class SimilarityReportModel(Base):
    """Отчёт о проверке оригинальности."""

    __tablename__ = "similarity_reports"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    article_id = Column(Uuid, ForeignKey("articles.id"), nullable=False, index=True)
    method = Column(String(30), nullable=False)
    summary = Column(JSON, default=dict)
    artifact_path = Column(String(1024), nullable=True)
    artifact_url = Column(Text, nullable=True)
    initiated_by = Column(Uuid, nullable=True)
    status = Column(String(20), default="completed", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class NotificationModel(Base):
    """Уведомление внутри приложения."""

    __tablename__ = "notifications"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(500), nullable=False)
    message = Column(Text, default="")
    link = Column(String(2048), nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
