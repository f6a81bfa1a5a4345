import gzip
import struct

import pytest

from myst.ingest import Cluster, iter_records, shard_index
from myst.record import Record


def encode(record):
    body = b"\x00\x01\x00\x02" + struct.pack(">q", record.xx_hash) + b"\x00\x03"
    for key, value in record.tags.items():
        body += key.encode() + b"\x00" + value.encode() + b"\x00"
    body += b"\x01\x04" + record.metric.encode()
    return struct.pack(">I", len(body)) + body


def sample_records():
    tags = {"foo": "bar", "do": "re"}
    return [Record(tags=dict(tags), metric=f"metric{i}", xx_hash=i * 1000 - 3) for i in range(5)]


def test_iter_records_round_trip():
    records = sample_records()
    data = gzip.compress(b"".join(encode(r) for r in records))
    assert list(iter_records(data)) == records


def test_iter_records_empty_stream():
    assert list(iter_records(gzip.compress(b""))) == []


def test_iter_records_stops_on_truncated_header():
    records = sample_records()[:2]
    data = gzip.compress(b"".join(encode(r) for r in records) + b"\x00\x00")
    assert list(iter_records(data)) == records


def test_iter_records_not_gzip():
    assert list(iter_records(b"plain bytes, not compressed")) == []


def test_iter_records_yields_partial_on_parse_error():
    good = sample_records()[0]
    bad_body = b"\x00\x01\x00\x02" + struct.pack(">q", 9) + b"\x00\x03" + b"k\x00v\x00"
    data = gzip.compress(struct.pack(">I", len(bad_body)) + bad_body + encode(good))
    result = list(iter_records(data))
    assert len(result) == 2
    assert result[0].tags == {"k": "v"}
    assert result[0].xx_hash == 9
    assert result[0].metric == ""
    assert result[1] == good


@pytest.mark.parametrize("xx_hash", [0, 1, 7, -7, 2**63 - 1, -(2**63)])
def test_shard_index_in_range_and_symmetric(xx_hash):
    index = shard_index(xx_hash, 3)
    assert 0 <= index < 3
    assert shard_index(-xx_hash, 3) == index


def test_shard_index_value():
    assert shard_index(7, 3) == 1
    assert shard_index(-7, 3) == 1


def test_shard_index_requires_shards():
    with pytest.raises(ValueError):
        shard_index(5, 0)


def test_cluster_groups_by_metric():
    cluster = Cluster()
    first = Record(tags={}, metric="m1", xx_hash=1)
    second = Record(tags={}, metric="m2", xx_hash=2)
    third = Record(tags={}, metric="m1", xx_hash=3)
    for record in (first, second, third):
        cluster.cluster_by_metric(record)
    assert cluster.records == {"m1": [first, third], "m2": [second]}


def test_cluster_drain_routes_and_empties():
    cluster = Cluster()
    records = sample_records()
    for record in records:
        cluster.cluster_by_metric(record)
    drained = cluster.drain(4)
    assert cluster.records == {}
    flattened = [r for group in drained.values() for r in group]
    assert sorted(r.metric for r in flattened) == sorted(r.metric for r in records)
    for shard, group in drained.items():
        for record in group:
            assert shard_index(record.xx_hash, 4) == shard
    assert cluster.drain(4) == {}