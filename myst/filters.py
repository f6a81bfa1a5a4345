"""Query filters and their construction from parsed JSON."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class QueryError(Exception):
    """Raised when a query or one of its filters is malformed."""


class FilterName(Enum):
    METRIC_FILTER = "MetricFilter"
    TAG_KEY_FILTER = "TagKeyFilter"
    TAG_VALUE_FILTER = "TagValueFilter"
    CHAIN_FILTER = "ChainFilter"


class FilterType(Enum):
    REGEX = "Regex"
    LITERAL = "Literal"


class FilterOp(Enum):
    AND = "AND"
    OR = "OR"


class QueryFilter:
    """Base class of every filter node in a query."""

    __slots__ = ()


@dataclass
class ChainFilter(QueryFilter):
    filters: list[QueryFilter] = field(default_factory=list)
    op: str = FilterOp.AND.value


@dataclass
class ExplicitTagsFilter(QueryFilter):
    filter: QueryFilter
    count: int


@dataclass
class NotFilter(QueryFilter):
    filter: QueryFilter


@dataclass
class MetricFilter(QueryFilter):
    metric: str
    filter_type: FilterType


@dataclass
class TagKeyFilter(QueryFilter):
    filter: str
    filter_type: FilterType


@dataclass
class TagValueFilter(QueryFilter):
    key: str
    filter: str
    filter_type: FilterType


def _field(value: Any, key: str) -> Any:
    return value.get(key) if isinstance(value, dict) else None


def _require_str(value: Any, key: str, message: str) -> str:
    found = _field(value, key)
    if not isinstance(found, str):
        raise QueryError(message)
    return found


def filter_from_json(value: Any) -> QueryFilter:
    """Build a filter tree from a decoded JSON value."""
    kind = _require_str(value, "type", "Error converting to filter for field: type").lower()

    if kind == "chain":
        op = _field(value, "op")
        if not isinstance(op, str):
            op = FilterOp.AND.value
        children = _field(value, "filters")
        if not isinstance(children, list):
            raise QueryError("Error converting to filter for field: filters")
        return ChainFilter([filter_from_json(child) for child in children], op)

    if kind == "explicittags":
        inner = filter_from_json(_field(value, "filter"))
        return ExplicitTagsFilter(inner, count_tag_filters(inner))

    if kind == "not":
        return NotFilter(filter_from_json(_field(value, "filter")))

    if kind == "metricliteral":
        metric = _require_str(
            value, "metric", "Error converting to filter field: metric in metricliteral"
        )
        return MetricFilter(metric, FilterType.LITERAL)

    if kind in ("tagkeyliteralor", "tagkeyregex"):
        filter_type = FilterType.LITERAL if kind == "tagkeyliteralor" else FilterType.REGEX
        pattern = _require_str(
            value, "filter", f"Error converting to filter field: filter for {kind}"
        )
        return TagKeyFilter(pattern, filter_type)

    if kind in ("tagvalueliteralor", "tagvalueregex"):
        filter_type = FilterType.LITERAL if kind == "tagvalueliteralor" else FilterType.REGEX
        key = _require_str(
            value, "tagKey", f"Error converting to filter field: tagKey for {kind}"
        )
        pattern = _require_str(
            value, "filter", f"Error converting to filter field: filter for {kind}"
        )
        return TagValueFilter(key, pattern, filter_type)

    raise QueryError("Invalid Query Filter")


def count_tag_filters(filter: QueryFilter) -> int:
    """Count tag key and tag value filters, descending only through chains."""
    if isinstance(filter, (TagKeyFilter, TagValueFilter)):
        return 1
    if isinstance(filter, ChainFilter):
        return sum(count_tag_filters(child) for child in filter.filters)
    return 0