"""Flatten nested result collections into display rows.

A record such as::

    {"patent_id": "1", "inventors": [{...}, {...}, {...}], "applications": [{...}, {...}]}

expands into one row per element of its longest nested collection (3 here).
Every row repeats the scalar fields. Shorter collections leave their columns
as None in the trailing rows.

Rows pair sibling collections by position only. Inventor i and application i
on the same row are NOT related by anything the API reports; treat such rows
as a display convenience, not a join.
"""

from typing import Any, Dict, Iterable, List, Mapping

from patentquery.retrieval.models import FlatRow, QueryResult

DEFAULT_SEPARATOR = "."


def is_nested_collection(value: Any) -> bool:
    """True for a list that is empty or holds only mappings."""
    if not isinstance(value, list):
        return False
    return all(isinstance(item, Mapping) for item in value)


def _collection_keys(items: List[Mapping[str, Any]]) -> List[str]:
    keys: List[str] = []
    seen = set()
    for item in items:
        for key in item:
            if key not in seen:
                seen.add(key)
                keys.append(key)
    return keys


def flatten_record(record: Mapping[str, Any], separator: str = DEFAULT_SEPARATOR) -> List[FlatRow]:
    """
    Expand one record into rows.

    Args:
        record: A single result record
        separator: Joins a nested field name to its element keys

    Returns:
        List of rows; its length is the size of the largest nested collection
        (at least 1). A record without nested collections yields one row equal
        to the record.
    """
    nested = {name: value for name, value in record.items() if is_nested_collection(value)}
    if not nested:
        return [dict(record)]

    row_count = max([len(items) for items in nested.values()] + [1])
    nested_keys = {name: _collection_keys(items) for name, items in nested.items()}

    rows: List[FlatRow] = []
    for index in range(row_count):
        row: FlatRow = {}
        for name, value in record.items():
            if name not in nested:
                row[name] = value
                continue
            keys = nested_keys[name]
            if not keys:
                row[name] = None
                continue
            items = nested[name]
            element = items[index] if index < len(items) else {}
            for key in keys:
                row[f"{name}{separator}{key}"] = element.get(key)
        rows.append(row)
    return rows


def flatten_records(records: Iterable[Mapping[str, Any]], separator: str = DEFAULT_SEPARATOR) -> List[FlatRow]:
    rows: List[FlatRow] = []
    for record in records:
        rows.extend(flatten_record(record, separator=separator))
    return rows


def flatten_result(result: QueryResult, separator: str = DEFAULT_SEPARATOR) -> List[FlatRow]:
    """Flatten every record of a parsed result, preserving record order."""
    return flatten_records(result.records, separator=separator)


def column_order(rows: Iterable[Dict[str, Any]]) -> List[str]:
    """Union of row keys in first-seen order."""
    return _collection_keys(list(rows))
