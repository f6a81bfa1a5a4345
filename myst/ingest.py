"""Reading gzip-compressed record streams and routing records to shards."""

from __future__ import annotations

import gzip
import io
import logging
import zlib
from collections.abc import Iterator

from myst.record import Record, RecordParseError, parse_record, read_int

logger = logging.getLogger(__name__)

_LENGTH_PREFIX = 4


def iter_records(data: bytes) -> Iterator[Record]:
    """Yield every record in a gzip stream of length-prefixed records.

    Reading stops at the first record header that cannot be read in full.
    A record that fails to parse is still yielded with what was decoded.
    """
    count = 0
    parse_errors = 0
    total_bytes = 0
    with gzip.GzipFile(fileobj=io.BytesIO(data)) as stream:
        while True:
            try:
                header = stream.read(_LENGTH_PREFIX)
            except (OSError, EOFError, zlib.error) as exc:
                logger.info("Stopped reading %r", exc)
                break
            if len(header) < _LENGTH_PREFIX:
                logger.info("Stopped reading at end of stream")
                break
            length = read_int(header)
            total_bytes += length
            try:
                body = stream.read(length)
            except (OSError, EOFError, zlib.error):
                body = b""
            body = body.ljust(length, b"\x00")
            try:
                record = parse_record(body)
            except RecordParseError as exc:
                logger.info("Error but continuing %r", exc)
                parse_errors += 1
                record = exc.record
            count += 1
            yield record
    logger.info(
        "Read %d records %d bytes with %d errors.", count, total_bytes, parse_errors
    )


def shard_index(xx_hash: int, num_shards: int) -> int:
    """Return the shard a record with ``xx_hash`` belongs to."""
    if num_shards <= 0:
        raise ValueError("num_shards must be positive")
    return abs(xx_hash) % num_shards


class Cluster:
    """Groups records by metric before sending them to their shards."""

    def __init__(self) -> None:
        self.records: dict[str, list[Record]] = {}

    def cluster_by_metric(self, record: Record) -> None:
        self.records.setdefault(record.metric, []).append(record)

    def drain(self, num_shards: int) -> dict[int, list[Record]]:
        """Empty the cluster, returning its records grouped by shard index."""
        by_shard: dict[int, list[Record]] = {}
        records, self.records = self.records, {}
        for group in records.values():
            for record in group:
                by_shard.setdefault(shard_index(record.xx_hash, num_shards), []).append(record)
        return by_shard