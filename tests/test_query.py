import json

import pytest

from myst.filters import ChainFilter, FilterType, MetricFilter, QueryError, TagValueFilter
from myst.query import QueryType, parse_query

SOURCE_QUERY = (
    '{"from":0,"to":1,"start":1619475054,"end":1619496654,"order":"ASCENDING",'
    '"type":"TIMESERIES","group":[],"namespace":"ssp","query":{"filters":'
    '[{"metric":"med.req.ad.Requests","type":"MetricLiteral"}],"op":"AND","type":"Chain"}}'
)


def _doc(**overrides):
    doc = {
        "from": 0,
        "to": 1,
        "limit": 10,
        "start": 1619475054,
        "end": 1619496654,
        "type": "METRICS",
        "group": ["foo"],
        "query": {"type": "MetricLiteral", "metric": "metric0"},
    }
    doc.update(overrides)
    return json.dumps(doc)


def test_source_query():
    query = parse_query(SOURCE_QUERY)
    assert query.query_type is QueryType.TIMESERIES
    assert query.group == []
    assert query.filter == ChainFilter(
        [MetricFilter("med.req.ad.Requests", FilterType.LITERAL)], "AND"
    )
    # TIMESERIES queries ignore from/to/limit
    assert (query.from_, query.to, query.limit) == (0, 0, 0)


def test_time_rounding_invariants():
    query = parse_query(SOURCE_QUERY)
    assert query.start % 1800 == 0
    assert query.start <= 1619475054 < query.start + 1800
    assert query.end % 1800 == 0
    assert query.end - 1800 <= 1619496654 < query.end


def test_aligned_times():
    query = parse_query(_doc(start=1800, end=3600))
    assert query.start == 1800
    assert query.end == 3600 + 1800


def test_metrics_query_reads_range_and_limit():
    query = parse_query(_doc())
    assert query.query_type is QueryType.METRICS
    assert (query.from_, query.to, query.limit) == (0, 1, 10)
    assert query.group == ["foo"]


def test_tag_keys_and_values_needs_group():
    with pytest.raises(QueryError, match="Group is empty for TAG KEYS AND VALUES QUERY"):
        parse_query(_doc(type="TAG_KEYS_AND_VALUES", group=[]))


def test_tag_keys_and_values_with_group():
    query = parse_query(
        _doc(
            type="TAG_KEYS_AND_VALUES",
            group=["foo"],
            query={"type": "TagValueRegex", "tagKey": "foo", "filter": "b.*"},
        )
    )
    assert query.query_type is QueryType.TAG_KEYS_AND_VALUES
    assert query.filter == TagValueFilter("foo", "b.*", FilterType.REGEX)


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"group": None}, "Group not found in query"),
        ({"group": ["foo", 1]}, "Cannnot convert to string"),
        ({"type": None}, "type not found in query"),
        ({"from": -1}, "Cannot convert from to long"),
        ({"to": "1"}, "Cannnot convert `to` to long"),
        ({"limit": 1.5}, "Cannnot convert limit to int"),
        ({"start": None}, "Cannot convert to long"),
        ({"end": True}, "Cannot convert to long"),
        ({"query": {"type": "nope"}}, "Invalid Query Filter"),
    ],
)
def test_errors(overrides, message):
    with pytest.raises(QueryError) as info:
        parse_query(_doc(**overrides))
    assert str(info.value) == message


def test_unknown_query_type():
    with pytest.raises(QueryError):
        parse_query(_doc(type="EVERYTHING"))


def test_invalid_json():
    with pytest.raises(QueryError):
        parse_query("{not json")


def test_timeseries_skips_missing_range():
    text = json.dumps(
        {"start": 0, "end": 0, "type": "TIMESERIES", "group": ["foo", "do"],
         "query": {"type": "MetricLiteral", "metric": "metric0"}}
    )
    query = parse_query(text)
    assert query.group == ["foo", "do"]
    assert query.start == 0
    assert query.end == 1800