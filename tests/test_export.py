"""Tests for row export."""

import csv
import json
from io import StringIO

import pytest

from patentquery.output.export import export_rows, rows_to_csv
from patentquery.retrieval.models import QueryResult

ROWS = [
    {"patent_id": "1", "inventors.inventor_last_name": "Lovelace", "cpc_ids": ["A01B", "B02C"]},
    {"patent_id": "1", "inventors.inventor_last_name": None, "patent_title": "Widget"},
]


def test_csv_has_stable_columns_and_blank_missing_cells():
    output = rows_to_csv(ROWS)

    parsed = list(csv.reader(StringIO(output)))
    assert parsed[0] == ["patent_id", "inventors.inventor_last_name", "cpc_ids", "patent_title"]
    assert parsed[1] == ["1", "Lovelace", '["A01B", "B02C"]', ""]
    assert parsed[2] == ["1", "", "", "Widget"]


def test_json_export_wraps_rows_and_counts():
    result = QueryResult(records=[], count=2, total_count=1243)

    data = json.loads(export_rows(ROWS, format="json", result=result))

    assert data["export_schema_version"] == "1"
    assert data["exported_at_utc"].endswith("Z")
    assert data["data"] == ROWS
    assert data["count"] == 2
    assert data["total_patent_count"] == 1243


def test_export_writes_file(tmp_path):
    out = tmp_path / "rows.csv"

    message = export_rows(ROWS, format="csv", out=out)

    assert message == f"Exported 2 rows to {out}"
    assert out.read_text(encoding="utf-8").startswith("patent_id,")


def test_unsupported_format():
    with pytest.raises(ValueError, match="Unsupported format"):
        export_rows(ROWS, format="xml")
