"""
Similarity Engine: попарное косинусное сходство документов.

Чистое детерминированное вычисление без обращения к хранилищам.
"""

import math
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, List, Optional, Sequence

from editorial.application.analysis.text_extraction import normalize_text
from editorial.application.analysis.vectorizer import TfidfVectorizer
from editorial.shared.exceptions.domain_exceptions import DomainValidationError

DEFAULT_THRESHOLD = 0.6
DEFAULT_TOP = 20
MAX_TOP = 200
SCORE_PRECISION = 4


@dataclass(frozen=True)
class SourceDocument:
    """Документ на сравнение."""

    doc_id: str
    filename: str
    text: str


@dataclass(frozen=True)
class SimilarityPair:
    """Пара документов и их сходство."""

    a: str
    b: str
    score: float

    def to_dict(self) -> dict:
        return {"a": self.a, "b": self.b, "score": self.score}


@dataclass
class SimilarityResult:
    """Итог сравнения."""

    documents: List[SourceDocument] = field(default_factory=list)
    pairs: List[SimilarityPair] = field(default_factory=list)
    total_pairs: int = 0
    vocabulary_size: int = 0

    @property
    def max_similarity(self) -> float:
        return max((p.score for p in self.pairs), default=0.0)

    @property
    def avg_similarity(self) -> float:
        if not self.pairs:
            return 0.0
        return round(sum(p.score for p in self.pairs) / len(self.pairs), SCORE_PRECISION)


def cosine_similarity(a: Dict[str, float], b: Dict[str, float]) -> float:
    """
    dot(a, b) / (|a| * |b|); 0 если одна из норм равна нулю.

    Результат ограничен отрезком [0, 1].
    """
    norm_a = math.sqrt(sum(w * w for w in a.values()))
    norm_b = math.sqrt(sum(w * w for w in b.values()))
    if norm_a == 0 or norm_b == 0:
        return 0.0

    if len(a) > len(b):
        a, b = b, a
    dot = sum(w * b.get(term, 0.0) for term, w in a.items())
    return min(1.0, max(0.0, dot / (norm_a * norm_b)))


def clamp_top(top: Optional[int], default: int = DEFAULT_TOP, maximum: int = MAX_TOP) -> int:
    if top is None:
        return default
    return max(1, min(int(top), maximum))


def validate_threshold(threshold: Optional[float], default: float = DEFAULT_THRESHOLD) -> float:
    if threshold is None:
        return default
    if not 0.0 <= threshold <= 1.0:
        raise DomainValidationError("threshold must be within [0, 1]")
    return float(threshold)


class SimilarityEngine:
    """
    Сравнение документов по TF-IDF.

    Использование:
        engine = SimilarityEngine()
        result = engine.compare(documents, threshold=0.6, top=20)
    """

    def __init__(
        self,
        terms_per_document: int = 800,
        max_chars: int = 200_000,
        max_top: int = MAX_TOP
    ):
        self.vectorizer = TfidfVectorizer(terms_per_document=terms_per_document)
        self.max_chars = max_chars
        self.max_top = max_top

    def compare(
        self,
        documents: Sequence[SourceDocument],
        threshold: Optional[float] = None,
        top: Optional[int] = None
    ) -> SimilarityResult:
        """
        Сравнить все пары документов.

        Аргументы:
            documents: Документы (пустые после нормализации отбрасываются)
            threshold: Минимальное сходство пары (по умолчанию 0.6)
            top: Максимум пар в ответе (по умолчанию 20, не больше 200)

        Возвращает:
            SimilarityResult; меньше двух непустых документов - пустой список пар
        """
        threshold = validate_threshold(threshold)
        top = clamp_top(top, maximum=self.max_top)

        usable = []
        for doc in documents:
            text = normalize_text(doc.text, self.max_chars)
            if text:
                usable.append(SourceDocument(doc_id=doc.doc_id, filename=doc.filename, text=text))

        if len(usable) < 2:
            return SimilarityResult(documents=usable)

        model = self.vectorizer.fit_transform([doc.text for doc in usable])

        pairs = []
        for i, j in combinations(range(len(usable)), 2):
            score = round(cosine_similarity(model.vectors[i], model.vectors[j]), SCORE_PRECISION)
            pairs.append(SimilarityPair(a=usable[i].doc_id, b=usable[j].doc_id, score=score))

        pairs.sort(key=lambda p: (-p.score, p.a, p.b))
        filtered = [p for p in pairs if p.score >= threshold][:top]

        return SimilarityResult(
            documents=usable,
            pairs=filtered,
            total_pairs=len(pairs),
            vocabulary_size=len(model.vocabulary),
        )
