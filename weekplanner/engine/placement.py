"""
Greedy Task Placement

Two strategies place a single task into the free time of a week:

- Continuous: the task occupies one uninterrupted free interval.
- Split: the task is cut into granularity-aligned chunks spread over as many
  free intervals and days as needed.

Both are first-fit: candidate days in order, then free intervals by start.
There is no tightest-fit search and no load balancing across days.

Free time on the current day never starts before "now" rounded up to the
chunk grid, so nothing is placed in the past.
"""

from datetime import date
from typing import List, Optional, Sequence

from weekplanner.engine.busy_map import DayBusyMap, copy_busy_map, free_intervals
from weekplanner.engine.intervals import add_busy
from weekplanner.models.entities import ScheduledBlock, Task, TaskSource, WorkingHours


CHUNK_MINUTES = 30


def color_from_priority(priority: int) -> str:
    if priority == 4:
        return "#dc2626"  # critical
    if priority == 3:
        return "#f59e0b"  # high
    if priority == 2:
        return "#3b82f6"  # medium
    return "#16a34a"


def block_id(task_id: str, day: date, start: int) -> str:
    return f"{task_id}:{day.isoformat()}:{start}"


def make_task_block(task: Task, day: date, start: int, end: int) -> ScheduledBlock:
    return ScheduledBlock(
        id=block_id(task.id, day, start),
        source=TaskSource(task_id=task.id),
        title=task.title,
        date=day,
        start_minutes=start,
        end_minutes=end,
        color=color_from_priority(task.priority),
        fixed=False,
    )


def schedule_task_continuous(
    task: Task,
    busy_map: DayBusyMap,
    days: Sequence[date],
    working_hours: WorkingHours,
    today: date,
    now_minutes: int,
    step: int = CHUNK_MINUTES,
) -> Optional[ScheduledBlock]:
    """
    Place a task in the first free interval long enough to hold it.

    The busy map is only read; reserving the returned block is up to the
    caller.

    Args:
        task: Non-splittable task to place
        busy_map: Current per-day occupancy
        days: Candidate days, in preference order
        working_hours: Daily window
        today: Current calendar day
        now_minutes: Current minute of day
        step: Grid that "now" is rounded up to on today

    Returns:
        The placed block, or None if no day has a fitting interval

    Complexity: O(d * n log n) for d days and n busy intervals per day
    """
    for day in days:
        for start, end in free_intervals(busy_map, day, working_hours, today, now_minutes, step):
            if end - start >= task.duration_minutes:
                return make_task_block(task, day, start, start + task.duration_minutes)
    return None


def schedule_task_split(
    task: Task,
    busy_map: DayBusyMap,
    days: Sequence[date],
    working_hours: WorkingHours,
    today: date,
    now_minutes: int,
    min_chunk: int = CHUNK_MINUTES,
) -> Optional[List[ScheduledBlock]]:
    """
    Place a task as chunks that are multiples of ``min_chunk``.

    Each chunk starts at the beginning of a free interval and is as long as
    both the interval and the remaining duration allow, rounded down to the
    chunk grid. Chunks are reserved in a scratch copy of the busy map as they
    are produced, so later chunks never overlap earlier ones.

    All-or-nothing: when the chunks cover the whole duration the scratch
    reservations are committed to ``busy_map`` and the chunks are returned;
    otherwise ``busy_map`` is left untouched and None is returned.

    Args:
        task: Splittable task to place
        busy_map: Current per-day occupancy, updated only on success
        days: Candidate days, in preference order
        working_hours: Daily window
        today: Current calendar day
        now_minutes: Current minute of day
        min_chunk: Chunk granularity and minimum chunk length

    Returns:
        Chunks in placement order, or None if the task does not fit
    """
    scratch = copy_busy_map(busy_map, days)
    remaining = task.duration_minutes
    blocks: List[ScheduledBlock] = []

    for day in days:
        if remaining <= 0:
            break
        for start, end in free_intervals(scratch, day, working_hours, today, now_minutes, min_chunk):
            if remaining <= 0:
                break
            span = end - start
            take = min(span - span % min_chunk, (remaining - remaining % min_chunk) or remaining)
            if take < min_chunk:
                continue
            blocks.append(make_task_block(task, day, start, start + take))
            remaining -= take
            scratch[day] = add_busy(scratch[day], (start, start + take))

    if remaining > 0:
        return None

    busy_map.update(scratch)
    return blocks
