# -*- coding: utf-8 -*-
"""
HTTP API поверх настоящего контейнера сервисов (SQLite + локальное хранилище).
"""

import asyncio
from types import SimpleNamespace
from urllib.parse import urlsplit
from uuid import uuid4

import httpx
import pytest
import pytest_asyncio

from editorial.api.dependencies import ClientDisconnected, run_while_connected
from editorial.infrastructure.container import ServiceContainer
from editorial.main import create_app, status_for
from editorial.shared.exceptions.domain_exceptions import ConflictError, DomainValidationError
from editorial.shared.exceptions.infrastructure_exceptions import (
    BlobNotFoundError,
    DatabaseError,
    ExternalToolError,
)
from tests.helpers import People


@pytest_asyncio.fixture
async def container(engine, blob_store, people, sink):
    container = ServiceContainer(engine=engine, blob_store=blob_store, sink=sink)
    await container.start(create_tables=True)
    for user in vars(people).values():
        await container.users.add(user)
    yield container
    await container.dispatcher.stop()


@pytest_asyncio.fixture
async def client(container):
    app = create_app(container)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


def headers(user, role=None) -> dict:
    return {"X-Actor-Id": str(user.id), "X-Actor-Role": (role or user.role).value}


async def create(client, people: People, title: str = "API story") -> dict:
    response = await client.post(
        "/api/v1/articles/",
        json={"title": title, "body": "<p>Body text</p>"},
        headers=headers(people.author),
    )
    assert response.status_code == 201
    return response.json()


# ============================================================================
# Аутентификация и сервисные ручки
# ============================================================================

class TestBasics:
    """Заголовки участника и health."""

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.json()["status"] == "healthy"

    @pytest.mark.asyncio
    async def test_missing_actor_headers(self, client):
        response = await client.get("/api/v1/articles/")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_role_header(self, client, people):
        response = await client.get(
            "/api/v1/articles/",
            headers={"X-Actor-Id": str(people.author.id), "X-Actor-Role": "overlord"},
        )
        assert response.status_code == 401


# ============================================================================
# Процесс через HTTP
# ============================================================================

class TestWorkflowEndpoints:
    """Команды и коды ответов."""

    @pytest.mark.asyncio
    async def test_lifecycle(self, client, people):
        article = await create(client, people)
        base = f"/api/v1/articles/{article['id']}"
        assert article["status"] == "draft"

        response = await client.post(f"{base}/submit", headers=headers(people.author))
        assert response.json()["status"] == "submitted"

        response = await client.post(
            f"{base}/assignments",
            json={"assignee_id": str(people.editor.id), "kind": "editor"},
            headers=headers(people.manager),
        )
        assert response.status_code == 201
        assert response.json()["status"] == "assigned"

        response = await client.put(
            f"{base}/draft", json={"body": "<p>Edited</p>"}, headers=headers(people.editor)
        )
        assert response.json()["body"] == "<p>Edited</p>"

        response = await client.post(f"{base}/approve", json={}, headers=headers(people.editor))
        assert response.json()["status"] == "approved"

        response = await client.post(f"{base}/publish", json={"price": 2.5}, headers=headers(people.manager))
        assert response.status_code == 200
        assert response.json()["price"] == 2.5

        response = await client.get(f"{base}/events", headers=headers(people.author))
        assert [e["to_status"] for e in response.json()] == [
            "submitted", "under_review", "approved", "published",
        ]

    @pytest.mark.asyncio
    async def test_unauthorized_transition_is_403(self, client, people):
        article = await create(client, people)
        response = await client.post(
            f"/api/v1/articles/{article['id']}/submit", headers=headers(people.other_author)
        )
        assert response.status_code == 403
        assert response.json()["error"] == "AuthorizationError"

    @pytest.mark.asyncio
    async def test_illegal_transition_is_409(self, client, people):
        article = await create(client, people)
        response = await client.post(
            f"/api/v1/articles/{article['id']}/approve", headers=headers(people.admin)
        )
        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_unknown_article_is_404(self, client, people):
        response = await client.get(f"/api/v1/articles/{uuid4()}", headers=headers(people.admin))
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_publish_without_price_is_400(self, client, people):
        article = await create(client, people)
        base = f"/api/v1/articles/{article['id']}"
        await client.post(f"{base}/submit", headers=headers(people.author))
        await client.post(
            f"{base}/assignments", json={"assignee_id": str(people.editor.id)}, headers=headers(people.manager)
        )
        await client.post(f"{base}/approve", headers=headers(people.manager))

        response = await client.post(f"{base}/publish", json={}, headers=headers(people.manager))
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_change_request_rejected_by_schema(self, client, people):
        article = await create(client, people)
        response = await client.post(
            f"/api/v1/articles/{article['id']}/request-changes",
            json={"notes": ""},
            headers=headers(people.manager),
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_visible_articles(self, client, people):
        await create(client, people, "Mine")
        response = await client.get("/api/v1/articles/", headers=headers(people.other_author))
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_delete_draft(self, client, people):
        article = await create(client, people)
        response = await client.delete(f"/api/v1/articles/{article['id']}", headers=headers(people.author))
        assert response.status_code == 204


# ============================================================================
# Вложения, подписанные ссылки и проверка
# ============================================================================

class TestAttachmentsAndSimilarity:
    """Загрузка по подписанной ссылке и TF-IDF проверка."""

    @pytest.mark.asyncio
    async def test_upload_register_and_compare(self, client, people, blob_store):
        article = await create(client, people)
        base = f"/api/v1/articles/{article['id']}"
        author = headers(people.author)

        for name in ("one.txt", "two.txt"):
            path = f"articles/{article['id']}/{name}"
            upload_url = await blob_store.signed_url(path, 60, mode="write")
            parts = urlsplit(upload_url)
            response = await client.put(f"{parts.path}?{parts.query}", content=b"identical essay about rivers")
            assert response.status_code == 201

            response = await client.post(
                f"{base}/attachments/",
                json={"filename": name, "storage_path": path, "mime_type": "text/plain"},
                headers=author,
            )
            assert response.status_code == 201

        response = await client.get(f"{base}/attachments/", headers=author)
        assert [a["filename"] for a in response.json()] == ["one.txt", "two.txt"]

        response = await client.post(f"{base}/similarity?threshold=0.5", headers=author)
        assert response.status_code == 200
        payload = response.json()
        assert payload["pairs"][0]["score"] == 1.0
        assert payload["meta"]["documents"] == 2

        response = await client.get(f"{base}/reports/latest", headers=author)
        assert response.json()["method"] == "tfidf"

    @pytest.mark.asyncio
    async def test_bad_signature_is_403(self, client):
        response = await client.get("/blobs/articles/x.txt?expires=9999999999&signature=forged")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_signed_download(self, client, blob_store):
        await blob_store.write(b"report bytes", "reports/r.zip")
        parts = urlsplit(await blob_store.signed_url("reports/r.zip", 60))

        response = await client.get(f"{parts.path}?{parts.query}")

        assert response.status_code == 200
        assert response.content == b"report bytes"

    @pytest.mark.asyncio
    async def test_threshold_out_of_range_is_400(self, client, people):
        article = await create(client, people)
        response = await client.post(
            f"/api/v1/articles/{article['id']}/similarity?threshold=2", headers=headers(people.author)
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_no_report_yet_is_404(self, client, people):
        article = await create(client, people)
        response = await client.get(
            f"/api/v1/articles/{article['id']}/reports/latest", headers=headers(people.author)
        )
        assert response.status_code == 404


def test_status_mapping():
    assert status_for(DomainValidationError("x")) == 400
    assert status_for(ConflictError("x")) == 409
    assert status_for(BlobNotFoundError("x")) == 404
    assert status_for(ExternalToolError("x", exit_code=1)) == 502
    assert status_for(DatabaseError("x")) == 503
    assert status_for(RuntimeError("x")) == 500


# ============================================================================
# Отключение клиента во время долгого запроса
# ============================================================================

class FakeRequest:
    """Соединение, которое обрывается после заданного числа опросов."""

    def __init__(self, connected_polls: int):
        self.url = SimpleNamespace(path="/api/v1/articles/x/plagiarism")
        self.connected_polls = connected_polls
        self.polls = 0

    async def is_disconnected(self) -> bool:
        self.polls += 1
        return self.polls > self.connected_polls


class TestClientDisconnect:
    """Работа запроса отменяется, когда клиент уходит."""

    @pytest.mark.asyncio
    async def test_work_cancelled_on_disconnect(self):
        cleaned_up = asyncio.Event()

        async def long_job():
            try:
                await asyncio.sleep(60)
            finally:
                cleaned_up.set()

        with pytest.raises(ClientDisconnected):
            await run_while_connected(FakeRequest(connected_polls=1), long_job(), poll_interval=0.01)

        assert cleaned_up.is_set()

    @pytest.mark.asyncio
    async def test_result_returned_while_connected(self):
        async def quick_job():
            await asyncio.sleep(0.02)
            return "done"

        request = FakeRequest(connected_polls=1000)
        assert await run_while_connected(request, quick_job(), poll_interval=0.005) == "done"

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        async def failing_job():
            raise ConflictError("analysis already running")

        with pytest.raises(ConflictError):
            await run_while_connected(FakeRequest(connected_polls=1000), failing_job(), poll_interval=0.01)
