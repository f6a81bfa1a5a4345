"""Decoding of the binary timeseries records produced upstream of segment generation."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

_HEADER_LEN = 4
_HASH_LEN = 8
_AFTER_HASH_LEN = 2
_TAGS_END = 1
_AFTER_TAGS_LEN = 2


class RecordParseError(ValueError):
    """Raised when a record cannot be decoded.

    ``record`` holds whatever was decoded before the failure.
    """

    def __init__(self, message: str, record: Record | None = None) -> None:
        super().__init__(message)
        self.record = record if record is not None else Record()


@dataclass
class Record:
    """One timeseries: its metric, its tags and its 64-bit hash."""

    tags: dict[str, str] = field(default_factory=dict)
    metric: str = ""
    xx_hash: int = 0


def read_int(buf: bytes) -> int:
    """Read a big-endian unsigned 32-bit integer from the start of ``buf``."""
    if len(buf) < 4:
        raise RecordParseError("Buffer too short for a 32-bit integer")
    (value,) = struct.unpack_from(">I", buf, 0)
    return value


def read_long(buf: bytes, pos: int) -> int:
    """Read a big-endian signed 64-bit integer at ``pos``."""
    if pos < 0 or pos + 8 > len(buf):
        raise RecordParseError("Buffer too short for a 64-bit integer")
    (value,) = struct.unpack_from(">q", buf, pos)
    return value


def get_len(buf: bytes, pos: int) -> int:
    """Return the length of the zero-terminated run starting at ``pos``.

    The run ends at the first zero byte or at the end of the buffer.
    """
    if pos >= len(buf):
        raise RecordParseError("Index out of bounds")
    end = bytes(buf).find(b"\x00", pos)
    if end == -1:
        end = len(buf)
    return end - pos


def _next_string(buf: bytes, pos: int, record: Record) -> str:
    try:
        length = get_len(buf, pos)
    except RecordParseError as exc:
        raise RecordParseError(str(exc), record) from exc
    try:
        return bytes(buf[pos : pos + length]).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RecordParseError("Utf8 error", record) from exc


def parse_record(buf: bytes) -> Record:
    """Decode one record body (without its length prefix)."""
    record = Record()
    pos = _HEADER_LEN
    try:
        record.xx_hash = read_long(buf, pos)
    except RecordParseError as exc:
        raise RecordParseError(str(exc), record) from exc
    pos += _HASH_LEN + _AFTER_HASH_LEN

    while True:
        key = _next_string(buf, pos, record)
        pos += len(key.encode("utf-8")) + 1
        value = _next_string(buf, pos, record)
        pos += len(value.encode("utf-8")) + 1
        record.tags[key] = value
        if pos >= len(buf):
            raise RecordParseError(
                "Index is out of bounds, potentially because no metric was written.",
                record,
            )
        if buf[pos] == _TAGS_END:
            break

    pos += _AFTER_TAGS_LEN
    record.metric = _next_string(buf, pos, record)
    return record