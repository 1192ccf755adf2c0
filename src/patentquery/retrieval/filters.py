"""Builders for PatentsView filter predicates.

The query language is a JSON tree of ``{operator: {field: value}}`` comparisons
composed with ``_and`` / ``_or`` / ``_not``. A bare ``{field: value}`` is
equality. These helpers only build plain dicts; any hand-written predicate is
accepted by ``QuerySpec`` as well.

Example:
    >>> and_(eq("assignee_organization", "university of maryland"), gte("patent_date", "2010-01-01"))
    {'_and': [{'assignee_organization': 'university of maryland'}, {'_gte': {'patent_date': '2010-01-01'}}]}
"""

from typing import Any, Dict

Predicate = Dict[str, Any]


def _compare(operator: str, field: str, value: Any) -> Predicate:
    return {operator: {field: value}}


def eq(field: str, value: Any) -> Predicate:
    return {field: value}


def neq(field: str, value: Any) -> Predicate:
    return _compare("_neq", field, value)


def gt(field: str, value: Any) -> Predicate:
    return _compare("_gt", field, value)


def gte(field: str, value: Any) -> Predicate:
    return _compare("_gte", field, value)


def lt(field: str, value: Any) -> Predicate:
    return _compare("_lt", field, value)


def lte(field: str, value: Any) -> Predicate:
    return _compare("_lte", field, value)


def begins(field: str, value: str) -> Predicate:
    return _compare("_begins", field, value)


def contains(field: str, value: str) -> Predicate:
    return _compare("_contains", field, value)


def text_all(field: str, value: str) -> Predicate:
    """Full-text match requiring every word."""
    return _compare("_text_all", field, value)


def text_any(field: str, value: str) -> Predicate:
    """Full-text match on any word."""
    return _compare("_text_any", field, value)


def text_phrase(field: str, value: str) -> Predicate:
    """Full-text match on the exact phrase."""
    return _compare("_text_phrase", field, value)


def and_(*predicates: Predicate) -> Predicate:
    if not predicates:
        raise ValueError("_and needs at least one predicate")
    return {"_and": list(predicates)}


def or_(*predicates: Predicate) -> Predicate:
    if not predicates:
        raise ValueError("_or needs at least one predicate")
    return {"_or": list(predicates)}


def not_(predicate: Predicate) -> Predicate:
    return {"_not": predicate}
