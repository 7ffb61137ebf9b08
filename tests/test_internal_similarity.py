# -*- coding: utf-8 -*-
"""
Внутренняя проверка оригинальности: вложения статьи сравниваются между собой.
"""

import pytest

from editorial.application.analysis.attachment_loader import AttachmentLoader
from editorial.application.analysis.similarity_engine import SimilarityEngine
from editorial.application.commands.article_commands import RegisterAttachmentCommand
from editorial.application.services.similarity_service import BODY_DOC_ID, SimilarityService
from editorial.domain.value_objects.report_status import SimilarityMethod
from editorial.shared.exceptions.domain_exceptions import (
    AuthorizationError,
    DomainValidationError,
    EntityNotFoundError,
)
from editorial.shared.exceptions.infrastructure_exceptions import ExternalServiceError
from tests.helpers import create_article

ESSAY = b"Photosynthesis converts sunlight into chemical energy inside chloroplasts of green plants"
RECIPE = b"Whisk eggs with flour and butter then bake the pastry until golden brown"


@pytest.fixture
def similarity(uow_factory, blob_store) -> SimilarityService:
    return SimilarityService(
        uow_factory=uow_factory,
        loader=AttachmentLoader(blob_store, concurrency=2, http_timeout=5),
        engine=SimilarityEngine(),
    )


async def attach(workflow, blob_store, actor, article_id, filename: str, data: bytes):
    """Загрузить файл в хранилище и зарегистрировать вложение."""
    path = f"articles/{article_id}/{filename}"
    await blob_store.write(data, path, "text/plain")
    return await workflow.register_attachment(
        RegisterAttachmentCommand(
            actor=actor, article_id=article_id, filename=filename,
            storage_path=path, mime_type="text/plain", size_bytes=len(data),
        )
    )


class TestInternalSimilarity:
    """TF-IDF сравнение вложений."""

    @pytest.mark.asyncio
    async def test_identical_attachments_flagged(self, workflow, similarity, blob_store, people):
        author = people.actor(people.author)
        article = await create_article(workflow, author)
        first = await attach(workflow, blob_store, author, article.id, "draft-1.txt", ESSAY)
        second = await attach(workflow, blob_store, author, article.id, "draft-2.txt", ESSAY)
        await attach(workflow, blob_store, author, article.id, "recipe.txt", RECIPE)

        outcome = await similarity.run_internal_similarity(article.id, author, threshold=0.5)

        assert len(outcome.result.pairs) == 1
        pair = outcome.result.pairs[0]
        assert {pair.a, pair.b} == {str(first.id), str(second.id)}
        assert pair.score == 1.0

        payload = outcome.to_dict()
        assert payload["meta"]["documents"] == 3
        assert payload["meta"]["total_pairs"] == 3
        assert {d["filename"] for d in payload["docs"]} == {"draft-1.txt", "draft-2.txt", "recipe.txt"}

    @pytest.mark.asyncio
    async def test_report_persisted(self, workflow, similarity, blob_store, people):
        author = people.actor(people.author)
        article = await create_article(workflow, author)
        await attach(workflow, blob_store, author, article.id, "a.txt", ESSAY)
        await attach(workflow, blob_store, author, article.id, "b.txt", ESSAY)

        outcome = await similarity.run_internal_similarity(article.id, author, threshold=0.1)

        report = await workflow.get_latest_report(author, article.id, SimilarityMethod.TFIDF)
        assert report.id == outcome.report_id
        assert report.summary["max_similarity"] == 1.0
        assert report.summary["documents"] == 2

    @pytest.mark.asyncio
    async def test_article_body_included_on_request(self, workflow, similarity, blob_store, people):
        author = people.actor(people.author)
        article = await create_article(workflow, author, body=f"<p>{ESSAY.decode()}</p>")
        await attach(workflow, blob_store, author, article.id, "copy.txt", ESSAY)

        without_body = await similarity.run_internal_similarity(article.id, author, persist=False)
        with_body = await similarity.run_internal_similarity(
            article.id, author, threshold=0.5, include_body=True, persist=False
        )

        assert without_body.result.pairs == []
        assert BODY_DOC_ID in {with_body.result.pairs[0].a, with_body.result.pairs[0].b}
        assert with_body.report_id is None

    @pytest.mark.asyncio
    async def test_unreachable_attachment_skipped(self, workflow, similarity, blob_store, people):
        author = people.actor(people.author)
        article = await create_article(workflow, author)
        await attach(workflow, blob_store, author, article.id, "a.txt", ESSAY)
        await attach(workflow, blob_store, author, article.id, "b.txt", ESSAY)
        await blob_store.delete(f"articles/{article.id}/b.txt")

        outcome = await similarity.run_internal_similarity(article.id, author, threshold=0.0)

        assert outcome.result.pairs == []
        assert outcome.to_dict()["meta"]["documents"] == 1

    @pytest.mark.asyncio
    async def test_top_clamped_to_maximum(self, workflow, similarity, people):
        author = people.actor(people.author)
        article = await create_article(workflow, author)

        outcome = await similarity.run_internal_similarity(article.id, author, top=10_000, persist=False)

        assert outcome.top == 200

    @pytest.mark.asyncio
    async def test_threshold_out_of_range(self, workflow, similarity, people):
        author = people.actor(people.author)
        article = await create_article(workflow, author)
        with pytest.raises(DomainValidationError):
            await similarity.run_internal_similarity(article.id, author, threshold=1.5)

    @pytest.mark.asyncio
    async def test_requires_read_access(self, workflow, similarity, people):
        article = await create_article(workflow, people.actor(people.author))
        with pytest.raises(AuthorizationError):
            await similarity.run_internal_similarity(article.id, people.actor(people.other_author))

    @pytest.mark.asyncio
    async def test_unknown_article(self, similarity, people):
        from uuid import uuid4

        with pytest.raises(EntityNotFoundError):
            await similarity.run_internal_similarity(uuid4(), people.actor(people.admin))


@pytest.mark.asyncio
async def test_external_analysis_not_configured(similarity, people):
    """Без оркестратора внешняя проверка недоступна (503, а не 500)."""
    from uuid import uuid4

    from editorial.main import status_for

    with pytest.raises(ExternalServiceError) as exc_info:
        await similarity.run_external_similarity(uuid4(), people.actor(people.admin))

    assert status_for(exc_info.value) == 503
