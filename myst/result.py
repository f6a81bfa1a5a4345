"""Query results: per-segment groups, merging and the final response."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

_MASK64 = 0xFFFFFFFFFFFFFFFF
_P1 = 11400714785074694791
_P2 = 14029467366897019727
_P3 = 1609587929392839161
_P4 = 9650029242287828579
_P5 = 2870177450012600261


def _rotl(value: int, bits: int) -> int:
    return ((value << bits) | (value >> (64 - bits))) & _MASK64


def _round(acc: int, lane: int) -> int:
    acc = (acc + lane * _P2) & _MASK64
    return (_rotl(acc, 31) * _P1) & _MASK64


def _merge_round(acc: int, value: int) -> int:
    acc ^= _round(0, value)
    return (acc * _P1 + _P4) & _MASK64


def _xxh64(data: bytes, seed: int = 0) -> int:
    length = len(data)
    pos = 0
    if length >= 32:
        v1 = (seed + _P1 + _P2) & _MASK64
        v2 = (seed + _P2) & _MASK64
        v3 = seed & _MASK64
        v4 = (seed - _P1) & _MASK64
        limit = length - 32
        while pos <= limit:
            a, b, c, d = struct.unpack_from("<4Q", data, pos)
            v1 = _round(v1, a)
            v2 = _round(v2, b)
            v3 = _round(v3, c)
            v4 = _round(v4, d)
            pos += 32
        acc = (_rotl(v1, 1) + _rotl(v2, 7) + _rotl(v3, 12) + _rotl(v4, 18)) & _MASK64
        for v in (v1, v2, v3, v4):
            acc = _merge_round(acc, v)
    else:
        acc = (seed + _P5) & _MASK64

    acc = (acc + length) & _MASK64

    while pos + 8 <= length:
        (lane,) = struct.unpack_from("<Q", data, pos)
        acc ^= _round(0, lane)
        acc = (_rotl(acc, 27) * _P1 + _P4) & _MASK64
        pos += 8
    if pos + 4 <= length:
        (lane,) = struct.unpack_from("<I", data, pos)
        acc ^= (lane * _P1) & _MASK64
        acc = (_rotl(acc, 23) * _P2 + _P3) & _MASK64
        pos += 4
    for byte in data[pos:]:
        acc ^= (byte * _P5) & _MASK64
        acc = (_rotl(acc, 11) * _P1) & _MASK64

    acc ^= acc >> 33
    acc = (acc * _P2) & _MASK64
    acc ^= acc >> 29
    acc = (acc * _P3) & _MASK64
    acc ^= acc >> 32
    return acc


def string_hash(value: str | bytes) -> int:
    """Return the 64-bit xxHash (seed 0) of ``value`` as a signed integer."""
    data = value.encode("utf-8") if isinstance(value, str) else bytes(value)
    unsigned = _xxh64(data)
    return unsigned - (1 << 64) if unsigned >= (1 << 63) else unsigned


@dataclass
class StringGroupedTimeseries:
    """Timeseries ids sharing one group, with the group's tag values as text."""

    group: list[str] = field(default_factory=list)
    timeseries: set[int] = field(default_factory=set)


@dataclass
class GroupedTimeseries:
    """A group of timeseries whose group values are given as string hashes."""

    group: list[int] = field(default_factory=list)
    timeseries: list[int] = field(default_factory=list)


@dataclass
class TimeseriesResponse:
    """Answer to a timeseries query for one shard."""

    grouped_timeseries: list[GroupedTimeseries] = field(default_factory=list)
    dictionary: dict[int, str] | None = None
    streams: int = 0


def merge_segment_results(
    segment_results: Iterable[Mapping[int, StringGroupedTimeseries]],
) -> dict[int, StringGroupedTimeseries]:
    """Merge per-segment groups by group key.

    The group strings come from the first segment that holds the key; the
    timeseries ids of every segment are united.
    """
    merged: dict[int, StringGroupedTimeseries] = {}
    for segment_result in segment_results:
        for key, grouped in segment_result.items():
            target = merged.get(key)
            if target is None:
                target = StringGroupedTimeseries(group=list(grouped.group))
                merged[key] = target
            target.timeseries.update(grouped.timeseries)
    return merged


def build_response(merged: Mapping[int, StringGroupedTimeseries]) -> TimeseriesResponse:
    """Turn merged groups into a response with hashed groups and a dictionary."""
    dictionary: dict[int, str] = {}
    grouped_timeseries = []
    for grouped in merged.values():
        hashes = []
        for tag_value in grouped.group:
            hashed = string_hash(tag_value)
            dictionary.setdefault(hashed, tag_value)
            hashes.append(hashed)
        grouped_timeseries.append(
            GroupedTimeseries(group=hashes, timeseries=sorted(grouped.timeseries))
        )
    return TimeseriesResponse(
        grouped_timeseries=grouped_timeseries, dictionary=dictionary, streams=0
    )