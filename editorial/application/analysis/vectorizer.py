"""
TF-IDF векторизация.

tf(t, d)  = число вхождений t в d
idf(t)    = 1 + ln(N / (1 + df(t)))
w(t, d)   = tf * idf

Общий словарь: объединение top-K терминов каждого документа по весу.
Векторы разреженные: словарь {термин: вес} только по терминам словаря.
"""

import math
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Set

_TOKEN_RE = re.compile(r"\w+", re.UNICODE)

ENGLISH_STOP_WORDS = frozenset("""
a about above after again against all am an and any are as at be because been
before being below between both but by can could did do does doing down during
each few for from further had has have having he her here hers herself him
himself his how i if in into is it its itself just me more most my myself no
nor not now of off on once only or other our ours ourselves out over own same
she should so some such than that the their theirs them themselves then there
these they this those through to too under until up very was we were what when
where which while who whom why will with would you your yours yourself
yourselves
""".split())


def tokenize(text: str) -> List[str]:
    """Слова в нижнем регистре без стоп-слов и односимвольных токенов."""
    return [
        token
        for token in _TOKEN_RE.findall((text or "").lower())
        if len(token) > 1 and token not in ENGLISH_STOP_WORDS
    ]


@dataclass
class TfidfModel:
    """Результат векторизации корпуса."""

    vocabulary: List[str] = field(default_factory=list)
    idf: Dict[str, float] = field(default_factory=dict)
    vectors: List[Dict[str, float]] = field(default_factory=list)


class TfidfVectorizer:
    """
    Векторизатор корпуса.

    Аргументы:
        terms_per_document: Сколько лучших терминов каждого документа
            попадает в общий словарь
    """

    def __init__(self, terms_per_document: int = 800):
        if terms_per_document < 1:
            raise ValueError("terms_per_document must be positive")
        self.terms_per_document = terms_per_document

    def fit_transform(self, texts: Sequence[str]) -> TfidfModel:
        counts = [Counter(tokenize(text)) for text in texts]
        n_docs = len(counts)
        if n_docs == 0:
            return TfidfModel()

        df: Counter = Counter()
        for doc_counts in counts:
            df.update(doc_counts.keys())

        idf = {term: 1.0 + math.log(n_docs / (1 + freq)) for term, freq in df.items()}
        weights = [
            {term: tf * idf[term] for term, tf in doc_counts.items()}
            for doc_counts in counts
        ]

        vocabulary: Set[str] = set()
        for doc_weights in weights:
            ranked = sorted(doc_weights.items(), key=lambda kv: (-kv[1], kv[0]))
            vocabulary.update(term for term, _ in ranked[: self.terms_per_document])

        vectors = [
            {term: w for term, w in doc_weights.items() if term in vocabulary}
            for doc_weights in weights
        ]
        return TfidfModel(vocabulary=sorted(vocabulary), idf=idf, vectors=vectors)
