"""
Interval Algebra over Minute-of-Day Ranges

All intervals are half-open ``(start, end)`` pairs of minutes since midnight
within a single calendar day. Every function here is total: intervals with
``start >= end`` are treated as empty rather than rejected.

Building blocks used by the placement strategies:
- clamp:  restrict busy time to working hours
- merge:  normalise to sorted, disjoint, non-touching intervals
- invert: turn busy time into free time inside working hours
- add:    reserve a new slot and re-normalise

Complexity: O(n log n) for merge (sorting), O(n) for everything else.
"""

from typing import Iterable, List

from weekplanner.models.entities import Interval, WorkingHours


def round_up_to(minutes: int, step: int) -> int:
    """Round ``minutes`` up to the next multiple of ``step``."""
    return -(-minutes // step) * step


def is_overlap(a: Interval, b: Interval) -> bool:
    """
    Check if two half-open intervals share any minute.

    Touching intervals (``a.end == b.start``) do not overlap.

    Complexity: O(1)
    """
    return max(a[0], b[0]) < min(a[1], b[1])


def clamp_intervals(intervals: Iterable[Interval], working_hours: WorkingHours) -> List[Interval]:
    """
    Truncate every interval to working hours.

    Intervals that end up empty (``end <= start``) after truncation are
    dropped, which also discards malformed input.

    Args:
        intervals: Busy intervals in any order
        working_hours: Daily window to clamp to

    Returns:
        Clamped intervals, input order preserved
    """
    result: List[Interval] = []
    for start, end in intervals:
        ns = max(start, working_hours.start_minutes)
        ne = min(end, working_hours.end_minutes)
        if ne > ns:
            result.append((ns, ne))
    return result


def merge_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    """
    Merge overlapping and touching intervals.

    Sorts by start, then folds left: the next interval is absorbed into the
    last kept one whenever ``next.start <= last.end``.

    Args:
        intervals: Intervals in any order, possibly overlapping

    Returns:
        Sorted, pairwise disjoint, non-touching intervals

    Complexity: O(n log n)
    """
    ordered = sorted((s, e) for s, e in intervals if e > s)
    merged: List[Interval] = []
    for start, end in ordered:
        if merged and start <= merged[-1][1]:
            last_start, last_end = merged[-1]
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))
    return merged


def invert_busy_to_free(busy: Iterable[Interval], working_hours: WorkingHours) -> List[Interval]:
    """
    Compute the free time left inside working hours.

    Busy time is clamped and merged first, then a cursor walks from the start
    of working hours emitting every gap, plus a final gap if the cursor has
    not reached the end of working hours.

    Args:
        busy: Busy intervals for one day
        working_hours: Daily window

    Returns:
        Free intervals, sorted by start

    Complexity: O(n log n) dominated by merge
    """
    merged = merge_intervals(clamp_intervals(busy, working_hours))
    free: List[Interval] = []
    cursor = working_hours.start_minutes
    for start, end in merged:
        if start > cursor:
            free.append((cursor, start))
        cursor = max(cursor, end)
    if cursor < working_hours.end_minutes:
        free.append((cursor, working_hours.end_minutes))
    return free


def add_busy(busy: Iterable[Interval], interval: Interval) -> List[Interval]:
    """Reserve ``interval`` on top of ``busy``; returns a new merged list."""
    return merge_intervals([*busy, interval])


def clamp_start(intervals: Iterable[Interval], earliest: int) -> List[Interval]:
    """Raise every interval's start to ``earliest`` and drop the emptied ones."""
    result: List[Interval] = []
    for start, end in intervals:
        ns = max(start, earliest)
        if end > ns:
            result.append((ns, end))
    return result
