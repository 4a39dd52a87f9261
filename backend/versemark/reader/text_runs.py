"""
Offset arithmetic over an ordered sequence of text runs.

A verse is flattened into the lengths of its text nodes in document order.
Locations are offsets into the concatenation of those runs, so markup that
wraps the text never contributes characters. Nothing here touches a tree.
"""

from typing import Sequence

# (run index, offset inside that run)
RunPoint = tuple[int, int]


def to_offset(run_lengths: Sequence[int], point: RunPoint) -> int | None:
    """Absolute offset of a point, or None if the point is out of bounds."""
    index, offset = point
    if index < 0 or index >= len(run_lengths):
        return None
    if offset < 0 or offset > run_lengths[index]:
        return None
    return sum(run_lengths[:index]) + offset


def encode_offsets(
    run_lengths: Sequence[int], start: RunPoint, end: RunPoint
) -> tuple[int, int] | None:
    """Turn two run points into ``(start, end)``; None unless start < end."""
    start_offset = to_offset(run_lengths, start)
    end_offset = to_offset(run_lengths, end)
    if start_offset is None or end_offset is None:
        return None
    if start_offset >= end_offset:
        return None
    return start_offset, end_offset


def decode_offsets(
    run_lengths: Sequence[int], start: int, end: int
) -> tuple[RunPoint, RunPoint] | None:
    """
    Locate the runs holding ``start`` and ``end``.

    The start run is the first with ``start < running + length``, so a start
    sitting on a boundary lands at the beginning of the following run. The
    end run is the first with ``end <= running + length``, so an end on a
    boundary stays at the close of the preceding run.

    Returns None when the offsets are negative, inverted, or past the text.
    """
    if start < 0 or start >= end:
        return None

    start_point: RunPoint | None = None
    running = 0
    for index, length in enumerate(run_lengths):
        if start_point is None and start < running + length:
            start_point = (index, start - running)
        if start_point is not None and end <= running + length:
            return start_point, (index, end - running)
        running += length
    return None
