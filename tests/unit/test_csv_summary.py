"""
Тесты сводки по CSV-отчёту внешнего инструмента.
"""

import pytest

from editorial.application.analysis.csv_summary import (
    find_csv,
    load_summary,
    parse_summary,
    summarize_report,
)
from editorial.shared.exceptions.infrastructure_exceptions import DegradedResultError


def test_similarity_column_detected_by_name():
    text = "submission1,submission2,max_similarity,avg_similarity\na.py,b.py,0.91,0.80\na.py,c.py,0.25,0.20\n"
    summary = parse_summary(text)

    assert summary["max_similarity"] == pytest.approx(0.91)
    assert summary["avg_similarity"] == pytest.approx((0.91 + 0.25) / 2)
    assert summary["pairs"][0] == {"a": "a.py", "b": "b.py", "similarity": 0.91}


def test_last_column_used_when_no_similarity_header():
    summary = parse_summary("first,second,score\nx,y,0.5\n")
    assert summary["pairs"] == [{"a": "x", "b": "y", "similarity": 0.5}]


def test_non_numeric_cells_count_as_zero():
    summary = parse_summary("a,b,similarity\nx,y,n/a\n")
    assert summary["max_similarity"] == 0.0


def test_pair_limit():
    rows = "\n".join(f"s{i},t{i},0.{i}" for i in range(1, 10))
    summary = parse_summary("a,b,similarity\n" + rows, pair_limit=3)
    assert len(summary["pairs"]) == 3
    # Статистика считается по всем строкам
    assert summary["max_similarity"] == pytest.approx(0.9)


def test_header_only_gives_notice():
    assert parse_summary("a,b,similarity\n") == {"notice": "no-rows"}
    assert parse_summary("") == {"notice": "no-rows"}


def test_find_csv_prefers_report_csv(tmp_path):
    (tmp_path / "aaa.csv").write_text("x")
    (tmp_path / "report.csv").write_text("y")
    assert find_csv(tmp_path).name == "report.csv"


def test_find_csv_falls_back_to_first_by_name(tmp_path):
    nested = tmp_path / "nested"
    nested.mkdir()
    (nested / "b.csv").write_text("x")
    (tmp_path / "a.csv").write_text("y")
    assert find_csv(tmp_path).name == "a.csv"


def test_load_summary_without_csv_raises(tmp_path):
    with pytest.raises(DegradedResultError):
        load_summary(tmp_path)


def test_summarize_report_never_fails(tmp_path):
    assert summarize_report(tmp_path) == {"notice": "no-csv-found"}


def test_summarize_report_reads_results(tmp_path):
    (tmp_path / "results.csv").write_text("a,b,similarity\nx,y,0.75\n")
    assert summarize_report(tmp_path)["max_similarity"] == pytest.approx(0.75)
