# -*- coding: utf-8 -*-
"""
Тесты TF-IDF векторизации и попарного сравнения.
"""

import math

import pytest

from editorial.application.analysis.similarity_engine import (
    SimilarityEngine,
    SourceDocument,
    clamp_top,
    cosine_similarity,
    validate_threshold,
)
from editorial.application.analysis.vectorizer import TfidfVectorizer, tokenize
from editorial.shared.exceptions.domain_exceptions import DomainValidationError


ESSAY = (
    "Photosynthesis converts light energy into chemical energy stored in glucose. "
    "Chlorophyll absorbs sunlight inside chloroplasts of plant cells."
)
ESSAY_COPY = ESSAY.upper() + "   "
UNRELATED = "Railway timetables list departures, platforms and connecting trains across Europe."


def doc(doc_id: str, text: str) -> SourceDocument:
    return SourceDocument(doc_id=doc_id, filename=f"{doc_id}.txt", text=text)


# ============================================================================
# 1. Токенизация и векторизация
# ============================================================================

class TestVectorizer:
    """Токены и веса."""

    def test_tokenize_drops_stop_words_and_single_chars(self):
        assert tokenize("The cat and a dog, x y; Cats!") == ["cat", "dog", "cats"]

    def test_idf_weights_positive_even_for_common_terms(self):
        model = TfidfVectorizer().fit_transform(["shared term", "shared word", "shared thing"])
        assert all(weight > 0 for weight in model.idf.values())
        assert all(w > 0 for vector in model.vectors for w in vector.values())

    def test_idf_formula(self):
        model = TfidfVectorizer().fit_transform(["alpha beta", "alpha gamma"])
        assert model.idf["alpha"] == pytest.approx(1 + math.log(2 / 3))
        assert model.idf["beta"] == pytest.approx(1 + math.log(2 / 2))

    def test_vocabulary_limited_per_document(self):
        texts = ["one two three four five", "six seven eight nine ten"]
        model = TfidfVectorizer(terms_per_document=2).fit_transform(texts)
        assert len(model.vocabulary) == 4
        assert all(len(v) == 2 for v in model.vectors)

    def test_vocabulary_ties_broken_by_term(self):
        model = TfidfVectorizer(terms_per_document=1).fit_transform(["zeta alpha"])
        assert model.vocabulary == ["alpha"]

    def test_invalid_terms_per_document(self):
        with pytest.raises(ValueError):
            TfidfVectorizer(terms_per_document=0)


# ============================================================================
# 2. Косинус и параметры
# ============================================================================

class TestCosine:
    def test_zero_norm(self):
        assert cosine_similarity({}, {"a": 1.0}) == 0.0

    def test_identical(self):
        assert cosine_similarity({"a": 2.0, "b": 1.0}, {"a": 2.0, "b": 1.0}) == pytest.approx(1.0)

    def test_disjoint(self):
        assert cosine_similarity({"a": 1.0}, {"b": 1.0}) == 0.0


class TestParameters:
    def test_threshold_default(self):
        assert validate_threshold(None) == 0.6

    @pytest.mark.parametrize("value", [-0.01, 1.01])
    def test_threshold_out_of_range(self, value):
        with pytest.raises(DomainValidationError):
            validate_threshold(value)

    @pytest.mark.parametrize("value,expected", [(None, 20), (0, 1), (-5, 1), (50, 50), (10_000, 200)])
    def test_top_clamped(self, value, expected):
        assert clamp_top(value) == expected


# ============================================================================
# 3. Сравнение
# ============================================================================

class TestCompare:
    """SimilarityEngine.compare."""

    def test_near_duplicate_scores_one(self):
        result = SimilarityEngine().compare([doc("a", ESSAY), doc("b", ESSAY_COPY)], threshold=0.0)
        assert len(result.pairs) == 1
        assert result.pairs[0].score == pytest.approx(1.0)

    def test_scores_within_unit_interval_and_sorted(self):
        docs = [doc("a", ESSAY), doc("b", ESSAY_COPY), doc("c", UNRELATED), doc("d", ESSAY + " " + UNRELATED)]
        result = SimilarityEngine().compare(docs, threshold=0.0, top=200)

        assert result.total_pairs == 6
        scores = [p.score for p in result.pairs]
        assert all(0.0 <= s <= 1.0 for s in scores)
        assert scores == sorted(scores, reverse=True)
        assert all(p.score == round(p.score, 4) for p in result.pairs)

    def test_threshold_filters_pairs(self):
        docs = [doc("a", ESSAY), doc("b", ESSAY_COPY), doc("c", UNRELATED)]
        result = SimilarityEngine().compare(docs, threshold=0.9)
        assert [(p.a, p.b) for p in result.pairs] == [("a", "b")]
        assert result.total_pairs == 3

    def test_top_limits_pairs(self):
        docs = [doc(str(i), ESSAY) for i in range(5)]
        result = SimilarityEngine().compare(docs, threshold=0.0, top=3)
        assert len(result.pairs) == 3
        assert result.total_pairs == 10

    def test_ties_sorted_by_ids(self):
        docs = [doc("c", ESSAY), doc("a", ESSAY), doc("b", ESSAY)]
        result = SimilarityEngine().compare(docs, threshold=0.0)
        assert [(p.a, p.b) for p in result.pairs] == [("a", "b"), ("c", "a"), ("c", "b")]

    def test_deterministic(self):
        docs = [doc("a", ESSAY), doc("b", UNRELATED), doc("c", ESSAY_COPY)]
        engine = SimilarityEngine()
        first = engine.compare(docs, threshold=0.0)
        second = engine.compare(list(docs), threshold=0.0)
        assert [p.to_dict() for p in first.pairs] == [p.to_dict() for p in second.pairs]

    def test_fewer_than_two_documents(self):
        result = SimilarityEngine().compare([doc("a", ESSAY), doc("empty", "   \n\t ")])
        assert result.pairs == []
        assert [d.doc_id for d in result.documents] == ["a"]

    def test_text_truncated_to_max_chars(self):
        engine = SimilarityEngine(max_chars=20)
        result = engine.compare([doc("a", "word " * 100), doc("b", "word " * 100)], threshold=0.0)
        assert all(len(d.text) <= 20 for d in result.documents)

    def test_invalid_threshold_rejected(self):
        with pytest.raises(DomainValidationError):
            SimilarityEngine().compare([doc("a", ESSAY), doc("b", ESSAY)], threshold=1.5)

    def test_summary_statistics(self):
        result = SimilarityEngine().compare([doc("a", ESSAY), doc("b", ESSAY_COPY)], threshold=0.0)
        assert result.max_similarity == pytest.approx(1.0)
        assert result.avg_similarity == pytest.approx(1.0)
