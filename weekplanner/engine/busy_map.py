from datetime import date
from typing import Dict, Iterable, List, Optional

from weekplanner.engine.intervals import add_busy, clamp_start, invert_busy_to_free, round_up_to
from weekplanner.models.entities import FixedEvent, Interval, ScheduledBlock, WorkingHours


DayBusyMap = Dict[date, List[Interval]]


def build_initial_busy(
    events: Iterable[FixedEvent],
    scheduled: Iterable[ScheduledBlock],
    days: Iterable[date],
) -> DayBusyMap:
    """
    Seed per-day occupancy from fixed events and already scheduled blocks.

    Only dates in ``days`` get an entry; anything dated outside the target
    week is ignored. Each day's list is kept merged.
    """
    busy_map: DayBusyMap = {day: [] for day in days}
    items = [(e.date, e.start_minutes, e.end_minutes) for e in events]
    items += [(b.date, b.start_minutes, b.end_minutes) for b in scheduled]
    for day, start, end in items:
        if day not in busy_map:
            continue
        busy_map[day] = add_busy(busy_map[day], (start, end))
    return busy_map


def earliest_start(
    day: date,
    working_hours: WorkingHours,
    today: date,
    now_minutes: int,
    step: int,
) -> int:
    """First schedulable minute on ``day``: never in the past on today."""
    if day == today:
        return max(round_up_to(now_minutes, step), working_hours.start_minutes)
    return working_hours.start_minutes


def free_intervals(
    busy_map: DayBusyMap,
    day: date,
    working_hours: WorkingHours,
    today: date,
    now_minutes: int,
    step: int,
) -> List[Interval]:
    """Free time on ``day`` as seen by the current state of ``busy_map``."""
    free = invert_busy_to_free(busy_map.get(day, []), working_hours)
    return clamp_start(free, earliest_start(day, working_hours, today, now_minutes, step))


def copy_busy_map(busy_map: DayBusyMap, days: Optional[Iterable[date]] = None) -> DayBusyMap:
    """Shallow per-day copy, optionally restricted to ``days``."""
    keys = busy_map.keys() if days is None else days
    return {day: list(busy_map.get(day, [])) for day in keys}
