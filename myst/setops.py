"""Set operations on timeseries id bitmaps, held as Python sets of ints."""

from __future__ import annotations

from collections.abc import Iterable, Mapping


def union(bitmaps: Iterable[set[int]]) -> set[int]:
    """Return the union of all bitmaps; empty when none are given."""
    result: set[int] = set()
    for bitmap in bitmaps:
        result |= bitmap
    return result


def intersection(
    bitmaps: Iterable[set[int]], not_bitmaps: Iterable[set[int]] | None = None
) -> set[int]:
    """Intersect the bitmaps, then remove every id found in ``not_bitmaps``.

    With no bitmaps to intersect the result is empty.
    """
    iterator = iter(bitmaps)
    first = next(iterator, None)
    result: set[int] = set() if first is None else set(first)
    for bitmap in iterator:
        result &= bitmap
    for excluded in not_bitmaps or ():
        result -= excluded
    return result


def docstore_blocks(elements: Iterable[int], block_size: int) -> dict[int, list[int]]:
    """Bucket ids by the docstore block that holds them, keeping their order."""
    if block_size <= 0:
        raise ValueError("block_size must be positive")
    blocks: dict[int, list[int]] = {}
    for element in elements:
        blocks.setdefault(element // block_size, []).append(element)
    return blocks


def filter_by_time(
    bitmap: set[int],
    ts_bitmaps: Mapping[int, set[int]],
    start: int,
    end: int,
    epoch_duration: int,
) -> set[int]:
    """Keep the ids that appear in an epoch overlapping ``[start, end]``.

    An epoch beginning at ``e`` overlaps when ``start <= e + epoch_duration``
    and ``end >= e``.
    """
    in_range: set[int] = set()
    for epoch, ts_bitmap in ts_bitmaps.items():
        if start <= epoch + epoch_duration and end >= epoch:
            in_range |= ts_bitmap
    return bitmap & in_range