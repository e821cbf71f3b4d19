from __future__ import annotations

import pytest

from wp_bulk_sync.csv_rows import load_csv, parse_csv_text
from wp_bulk_sync.errors import CsvLoadError


def test_headers_normalized_and_blank_rows_skipped():
    rows = parse_csv_text("\ufeff Title ,CONTENT,Tags\nA,\"B, with comma\",x\n,,\nC,D\n")
    assert rows == [
        {"title": "A", "content": "B, with comma", "tags": "x"},
        {"title": "C", "content": "D", "tags": ""},
    ]


def test_extra_cells_are_dropped():
    assert parse_csv_text("title\nA,spill\n") == [{"title": "A"}]


def test_quoted_newlines_survive():
    rows = parse_csv_text('title,content\nA,"line one\nline two"\n')
    assert rows[0]["content"] == "line one\nline two"


def test_long_content_cell(tmp_path):
    body = "<p>" + "x" * 200_000 + "</p>"
    p = tmp_path / "long.csv"
    p.write_text(f'title,content\nShort,a\nLong,"{body}"\nAfter,b\n', encoding="utf-8")
    rows = load_csv(p)
    assert [r["title"] for r in rows] == ["Short", "Long", "After"]
    assert rows[1]["content"] == body


def test_no_header():
    with pytest.raises(CsvLoadError, match="no header"):
        parse_csv_text("")


def test_load_csv_bom_file(tmp_path):
    p = tmp_path / "posts.csv"
    p.write_bytes("title,content\nCafé,Crème\n".encode("utf-8-sig"))
    assert load_csv(p) == [{"title": "Café", "content": "Crème"}]


def test_load_csv_relative_to_cwd(tmp_path, monkeypatch):
    (tmp_path / "rows.csv").write_text("title\nA\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    assert load_csv("rows.csv") == [{"title": "A"}]


def test_load_csv_missing(tmp_path):
    with pytest.raises(CsvLoadError, match="CSV file not found"):
        load_csv(tmp_path / "missing.csv")


def test_load_csv_not_utf8(tmp_path):
    p = tmp_path / "latin.csv"
    p.write_bytes("title\nCaf\xe9\n".encode("latin-1"))
    with pytest.raises(CsvLoadError, match="UTF-8"):
        load_csv(p)
