"""Render flattened rows for external consumption."""

import csv
import json
from datetime import datetime, timezone
from io import StringIO
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from patentquery.retrieval.flatten import column_order
from patentquery.retrieval.models import FlatRow, QueryResult

EXPORT_SCHEMA_VERSION = "1"


def _exported_at_utc() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _csv_cell(value: Any) -> Any:
    # Lists of scalars and leftover mappings stay readable in a single cell
    if isinstance(value, (list, dict)):
        return json.dumps(value, sort_keys=True)
    if value is None:
        return ""
    return value


def rows_to_csv(rows: Sequence[FlatRow], columns: Optional[List[str]] = None) -> str:
    """CSV with a header row; columns default to the union of row keys in first-seen order."""
    columns = columns or column_order(rows)
    output_buffer = StringIO()
    writer = csv.writer(output_buffer)
    writer.writerow(columns)
    for row in rows:
        writer.writerow([_csv_cell(row.get(col)) for col in columns])
    return output_buffer.getvalue()


def rows_to_json(rows: Sequence[FlatRow], result: Optional[QueryResult] = None) -> str:
    export_data: Dict[str, Any] = {
        "export_schema_version": EXPORT_SCHEMA_VERSION,
        "exported_at_utc": _exported_at_utc(),
        "data": list(rows),
    }
    if result is not None:
        export_data["count"] = result.count
        export_data[result.total_key] = result.total_count
    return json.dumps(export_data, indent=2, sort_keys=True)


def export_rows(
    rows: Sequence[FlatRow],
    format: str = "json",
    out: Path | None = None,
    result: Optional[QueryResult] = None,
) -> str:
    """
    Export flattened rows.

    Args:
        rows: Flattened rows
        format: Export format ("json" or "csv")
        out: Output file path (if None, returns as string)
        result: Parsed result the rows came from; adds counts to JSON output

    Returns:
        Exported data as string (if out is None) or a confirmation message
    """
    if format == "json":
        output = rows_to_json(rows, result=result)
    elif format == "csv":
        output = rows_to_csv(rows)
    else:
        raise ValueError(f"Unsupported format: {format}")

    if out:
        out.write_text(output, encoding="utf-8", newline="")
        return f"Exported {len(rows)} rows to {out}"
    return output
