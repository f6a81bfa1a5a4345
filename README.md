# myst

Building blocks for the metadata layer of a time series database. The package
parses JSON queries into typed filter trees, performs the set operations that
filtering needs on sets of document ids, merges per-segment groups into a
response, caches docstores and dictionaries per shard, decodes the
length-prefixed records that feed segment generation, and has small helpers
for local segment directories and log files.

It is a library only: it installs no commands.

## Installation

    pip install .

For the tests:

    pip install ".[test]"
    pytest

## Parsing queries (`myst.query`)

```python
from myst.query import QueryType, parse_query

query = parse_query(
    '{"start": 1619475054, "end": 1619496654, "type": "TIMESERIES", "group": [],'
    ' "query": {"type": "Chain", "op": "AND",'
    ' "filters": [{"type": "MetricLiteral", "metric": "med.req.ad.Requests"}]}}'
)
assert query.query_type is QueryType.TIMESERIES
assert query.start == 1619474400
assert query.end == 1619496000
```

`parse_query(text)` returns a `Query` dataclass with the fields `from_`, `to`,
`start`, `end`, `query_type`, `limit`, `filter` and `group`.

- `start` is rounded down to a 30-minute boundary; `end` is rounded down and
  then moved forward by one 30-minute block.
- `type` must be one of the `QueryType` names: `TAG_KEYS`, `METRICS`,
  `TAG_KEYS_AND_VALUES`, `TIMESERIES`.
- Queries other than `TIMESERIES` also need non-negative integer `from`, `to`
  and `limit`; these are kept as 32-bit values. For `TIMESERIES` they are 0.
- `TAG_KEYS_AND_VALUES` queries need a non-empty `group`.
- Invalid JSON, a missing or mistyped field, or a bad filter raises
  `myst.filters.QueryError`.

## Filters (`myst.filters`)

`filter_from_json(value)` turns a decoded JSON object into a filter tree made of
`ChainFilter`, `ExplicitTagsFilter`, `NotFilter`, `MetricFilter`,
`TagKeyFilter` and `TagValueFilter` (all subclasses of `QueryFilter`). The
`type` names are matched case-insensitively:

| `type`              | result                                   |
|---------------------|------------------------------------------|
| `Chain`             | `ChainFilter(filters, op)`, `op` defaults to `"AND"` |
| `ExplicitTags`      | `ExplicitTagsFilter(filter, count)`      |
| `Not`               | `NotFilter(filter)`                      |
| `MetricLiteral`     | `MetricFilter(metric, FilterType.LITERAL)` |
| `TagKeyLiteralOr`   | `TagKeyFilter(filter, FilterType.LITERAL)` |
| `TagKeyRegex`       | `TagKeyFilter(filter, FilterType.REGEX)` |
| `TagValueLiteralOr` | `TagValueFilter(tagKey, filter, FilterType.LITERAL)` |
| `TagValueRegex`     | `TagValueFilter(tagKey, filter, FilterType.REGEX)` |

`count_tag_filters(filter)` counts tag-key and tag-value filters, descending
only through chains; `ExplicitTagsFilter.count` is set from it. The enums
`FilterName`, `FilterType` and `FilterOp` name the filter kinds, match kinds
and chain operators.

## Set operations (`myst.setops`)

Document id bitmaps are plain Python sets of ints.

- `union(bitmaps)` — union of all sets, empty when none are given.
- `intersection(bitmaps, not_bitmaps=None)` — intersection of the sets, then
  every id in `not_bitmaps` removed; empty when no sets are given.
- `docstore_blocks(elements, block_size)` — ids bucketed by
  `id // block_size`, in their original order; `block_size` must be positive.
- `filter_by_time(bitmap, ts_bitmaps, start, end, epoch_duration)` — keeps the
  ids of `bitmap` found in an epoch `e` of `ts_bitmaps` with
  `start <= e + epoch_duration` and `end >= e`.

## Results (`myst.result`)

- `StringGroupedTimeseries(group, timeseries)` — group values as text and a
  set of timeseries ids.
- `merge_segment_results(segment_results)` — merges mappings of group key to
  `StringGroupedTimeseries`; the group text comes from the first segment with
  that key, the ids of all segments are united.
- `build_response(merged)` — returns a `TimeseriesResponse` whose
  `grouped_timeseries` are `GroupedTimeseries` with each group value replaced
  by its hash and ids sorted, and whose `dictionary` maps each hash back to its
  text. `streams` is 0.
- `string_hash(value)` — 64-bit xxHash (seed 0) of a string or bytes, as a
  signed integer.

## Caching (`myst.cache`)

`Cache.get_sharded_cache(shard)` returns the `ShardedCache` for a shard,
creating it on first use; `insert_sharded_cache(shard)` installs a fresh one.
A `ShardedCache` keeps least-recently-used docstores keyed by `(epoch, id)`
(200 entries by default) and dictionaries keyed by epoch (48 entries by
default), through `put`/`get` and `put_dict`/`get_dict`; `get` and `get_dict`
return `None` for a miss. All of it is thread-safe.

`recent_segment_files(data_path, now=None)` lists the entries of a directory
whose integer names are epochs newer than one day before `now`; a name that is
not an integer raises `ValueError`.

## Ingest records (`myst.record`, `myst.ingest`)

`parse_record(buf)` decodes one record body into a `Record` with `tags`,
`metric` and `xx_hash`, raising `RecordParseError` (whose `record` holds what
was decoded so far) on malformed input. `read_int`, `read_long` and `get_len`
are the big-endian and zero-terminated readers it uses.

`iter_records(data)` takes gzip-compressed bytes holding records each preceded
by a 4-byte big-endian length, and yields a `Record` for each; a record that
fails to parse is still yielded with its partial contents. `shard_index(xx_hash,
num_shards)` picks a shard as `abs(xx_hash) % num_shards`. `Cluster` gathers
records by metric with `cluster_by_metric` and hands them back grouped by
shard with `drain(num_shards)`.

## Local segment files (`myst.download`)

- `add_dir(root, child)` — joins with a `/`, adding it only when missing.
- `list_local_files(root)` — every file under `root`, recursively, leaving out
  `.lock` files; a missing path gives an empty list.
- `ensure_lock_file(path)` — creates `.lock` beside `path` if absent and
  returns its path.

## Logging (`myst.logsetup`)

`setup_logger(filename)` adds a file handler at INFO level to the root logger,
writing lines like `[2021-04-27][10:30:00:123456][name][INFO] message`, and
returns the handler.

## What this package does not do

It does not read or write segment files, so it cannot run a query against
stored data: the filter trees, set operations and result builders are the
pieces such a runner uses, but the runner itself is not here. There is no
network service for answering queries, no client for one, and no transfer of
segments or record files to or from remote object storage; `myst.ingest` and
`myst.download` work only on bytes and local paths you supply.