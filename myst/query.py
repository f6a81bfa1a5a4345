"""Metadata queries and their JSON form."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from myst.filters import QueryError, QueryFilter, filter_from_json

_BUCKET_SECONDS = 1800
_U32_MASK = 0xFFFFFFFF


class QueryType(Enum):
    TAG_KEYS = "TAG_KEYS"
    METRICS = "METRICS"
    TAG_KEYS_AND_VALUES = "TAG_KEYS_AND_VALUES"
    TIMESERIES = "TIMESERIES"


@dataclass
class Query:
    from_: int
    to: int
    start: int
    end: int
    query_type: QueryType
    limit: int
    filter: QueryFilter
    group: list[str] = field(default_factory=list)


def _as_u64(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value < 2**64:
        return value
    return None


def _require_u64(document: dict, key: str, message: str) -> int:
    found = _as_u64(document.get(key))
    if found is None:
        raise QueryError(message)
    return found


def parse_query(text: str) -> Query:
    """Parse a query from its JSON text.

    Start is rounded down to a half-hour boundary; end is rounded down and
    then extended by one half hour.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise QueryError(f"Invalid query JSON: {exc}") from exc
    if not isinstance(document, dict):
        document = {}

    group = document.get("group")
    if not isinstance(group, list):
        raise QueryError("Group not found in query")
    group_by = []
    for entry in group:
        if not isinstance(entry, str):
            raise QueryError("Cannnot convert to string")
        group_by.append(entry)

    type_name = document.get("type")
    if not isinstance(type_name, str):
        raise QueryError("type not found in query")
    try:
        query_type = QueryType(type_name)
    except ValueError as exc:
        raise QueryError(f"Unknown query type: {type_name}") from exc

    from_ = to = limit = 0
    if query_type is not QueryType.TIMESERIES:
        from_ = _require_u64(document, "from", "Cannot convert from to long") & _U32_MASK
        to = _require_u64(document, "to", "Cannnot convert `to` to long") & _U32_MASK
        limit = _require_u64(document, "limit", "Cannnot convert limit to int") & _U32_MASK

    start = _require_u64(document, "start", "Cannot convert to long")
    start -= start % _BUCKET_SECONDS
    end = _require_u64(document, "end", "Cannot convert to long")
    end = end - end % _BUCKET_SECONDS + _BUCKET_SECONDS

    query = Query(
        from_=from_,
        to=to,
        start=start,
        end=end,
        query_type=query_type,
        limit=limit,
        filter=filter_from_json(document.get("query")),
        group=group_by,
    )
    if query.query_type is QueryType.TAG_KEYS_AND_VALUES and not query.group:
        raise QueryError("Group is empty for TAG KEYS AND VALUES QUERY")
    return query