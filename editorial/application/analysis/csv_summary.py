"""
Сводка по CSV-отчёту внешнего инструмента.

Заголовок + строки; колонка сходства - первая, в названии которой есть
"similar", иначе последняя. Первые две колонки - имена работ.
"""

import csv
import io
import logging
import re
from pathlib import Path
from typing import List, Optional

from editorial.shared.exceptions.infrastructure_exceptions import DegradedResultError

logger = logging.getLogger(__name__)

REPORT_CSV_NAME = "report.csv"
_SIMILAR_RE = re.compile(r"similar", re.IGNORECASE)


def find_csv(report_dir: Path) -> Optional[Path]:
    """report.csv в каталоге отчёта, иначе первый *.csv (рекурсивно, по имени)."""
    exact = report_dir / REPORT_CSV_NAME
    if exact.is_file():
        return exact
    candidates = sorted(p for p in report_dir.rglob("*.csv") if p.is_file())
    return candidates[0] if candidates else None


def _to_float(value: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_summary(text: str, pair_limit: int = 20) -> dict:
    """
    Разобрать содержимое CSV.

    Возвращает:
        {max_similarity, avg_similarity, pairs} либо {"notice": "no-rows"}
    """
    rows: List[List[str]] = [
        [cell.strip() for cell in row]
        for row in csv.reader(io.StringIO(text.strip()))
        if any(cell.strip() for cell in row)
    ]
    if len(rows) <= 1:
        return {"notice": "no-rows"}

    header, data = rows[0], rows[1:]
    sim_idx = next((i for i, h in enumerate(header) if _SIMILAR_RE.search(h)), len(header) - 1)

    pairs = [
        {
            "a": cols[0] if len(cols) > 0 else "",
            "b": cols[1] if len(cols) > 1 else "",
            "similarity": _to_float(cols[sim_idx]) if sim_idx < len(cols) else 0.0,
        }
        for cols in data
    ]
    scores = [p["similarity"] for p in pairs]
    return {
        "max_similarity": max(scores, default=0.0),
        "avg_similarity": sum(scores) / max(1, len(scores)),
        "pairs": pairs[:pair_limit],
    }


def load_summary(report_dir: Path, pair_limit: int = 20) -> dict:
    """
    Найти и разобрать CSV.

    Raises:
        DegradedResultError: CSV не найден или не читается
    """
    path = find_csv(report_dir)
    if path is None:
        raise DegradedResultError(f"No CSV summary under {report_dir}")
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
        return parse_summary(text, pair_limit)
    except (OSError, csv.Error) as e:
        raise DegradedResultError(f"Cannot parse {path.name}: {e}") from e


def summarize_report(report_dir: Path, pair_limit: int = 20) -> dict:
    """Сводка или заглушка {"notice": "no-csv-found"}; никогда не падает."""
    try:
        return load_summary(report_dir, pair_limit)
    except DegradedResultError as e:
        logger.warning(f"[Analysis] {e}")
        return {"notice": "no-csv-found"}
