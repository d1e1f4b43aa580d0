"""
Weekly Auto-Scheduling Orchestrator

Turns tasks, fixed events and already scheduled blocks into new task blocks
for one target week.

Algorithm:
1. Seed a per-day busy map from fixed events and existing blocks
2. Drop completed tasks and tasks that already have a block
3. Order by due date, then priority (desc), then duration (asc)
4. For each task, place it on its eligible days with the continuous or split
   strategy, reserving the placed time for the tasks that follow

The run is a pure function of its inputs plus one wall-clock sample taken at
the start of the call. Nothing is kept between calls.

Complexity: O(t * d * n log n) for t tasks, d <= 7 days and n busy intervals
per day.
"""

import logging
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence

from weekplanner.engine.busy_map import build_initial_busy
from weekplanner.engine.intervals import add_busy
from weekplanner.engine.placement import (
    CHUNK_MINUTES,
    schedule_task_continuous,
    schedule_task_split,
)
from weekplanner.models.entities import (
    EventSource,
    FixedEvent,
    ScheduledBlock,
    Task,
    TaskSource,
    WorkingHours,
)
from weekplanner.utils.dates import list_week_dates, now_minute_of_day


logger = logging.getLogger(__name__)


def sort_tasks(tasks: Iterable[Task], week_start: date) -> List[Task]:
    """
    Order tasks for placement.

    Keys: days until due (relative to the week start) ascending, priority
    descending, duration ascending. The sort is stable, so remaining ties keep
    input order.
    """
    return sorted(
        tasks,
        key=lambda t: ((t.due_date - week_start).days, -t.priority, t.duration_minutes),
    )


def candidate_days(task: Task, week_days: Sequence[date], today: date) -> List[date]:
    """
    Days of the week a task may be placed on.

    From today (or the week start, if later) up to and including the due date.
    Days before today are never eligible.
    """
    start = max(week_days[0], today)
    return [d for d in week_days if start <= d <= task.due_date]


def auto_schedule(
    tasks: Sequence[Task],
    fixed_events: Sequence[FixedEvent],
    existing_scheduled: Sequence[ScheduledBlock],
    week_start: date,
    working_hours: WorkingHours,
    now: Optional[datetime] = None,
    chunk_minutes: int = CHUNK_MINUTES,
) -> List[ScheduledBlock]:
    """
    Schedule every unscheduled, open task into free time of the target week.

    Tasks that cannot be placed (no eligible day, no interval large enough,
    not enough split capacity) are silently left out. A split task is either
    placed in full or not at all.

    Args:
        tasks: Candidate tasks, each with a unique id
        fixed_events: Immovable calendar entries
        existing_scheduled: Blocks already accepted by the caller
        week_start: First day of the target week
        working_hours: Daily window tasks may use
        now: Current instant; sampled once from the clock when omitted
        chunk_minutes: Split granularity and "now" rounding grid

    Returns:
        Only the newly created task blocks, in placement order
    """
    if now is None:
        now = datetime.now()
    today = now.date()
    now_minutes = now_minute_of_day(now)

    week_days = list_week_dates(week_start)
    busy_map = build_initial_busy(fixed_events, existing_scheduled, week_days)

    already_placed = {b.source.task_id for b in existing_scheduled if isinstance(b.source, TaskSource)}
    pending = sort_tasks(
        (t for t in tasks if not t.completed and t.id not in already_placed),
        week_start,
    )

    new_blocks: List[ScheduledBlock] = []
    skipped = 0
    for task in pending:
        days = candidate_days(task, week_days, today)
        if not days:
            skipped += 1
            continue

        if task.can_split:
            chunks = schedule_task_split(task, busy_map, days, working_hours, today, now_minutes, chunk_minutes)
            if chunks is None:
                skipped += 1
                continue
            new_blocks.extend(chunks)
        else:
            block = schedule_task_continuous(task, busy_map, days, working_hours, today, now_minutes, chunk_minutes)
            if block is None:
                skipped += 1
                continue
            new_blocks.append(block)
            busy_map[block.date] = add_busy(busy_map.get(block.date, []), (block.start_minutes, block.end_minutes))

    logger.debug(
        f"Auto-schedule week of {week_start.isoformat()}: {len(pending)} candidates, "
        f"{len(new_blocks)} blocks created, {skipped} tasks left unscheduled"
    )
    return new_blocks


def blocks_for_week(blocks: Iterable[ScheduledBlock], week_start: date) -> List[ScheduledBlock]:
    days = set(list_week_dates(week_start))
    return [b for b in blocks if b.date in days]


def event_to_block(event: FixedEvent) -> ScheduledBlock:
    return ScheduledBlock(
        id=f"event:{event.id}",
        source=EventSource(event_id=event.id),
        title=event.title,
        date=event.date,
        start_minutes=event.start_minutes,
        end_minutes=event.end_minutes,
        color=event.color,
        fixed=True,
        completed=event.completed,
    )


def rebuild_scheduled_from_events_and_tasks(
    fixed_events: Iterable[FixedEvent],
    scheduled: Iterable[ScheduledBlock],
) -> List[ScheduledBlock]:
    """Event projections first, then the task-sourced blocks of ``scheduled``."""
    event_blocks = [event_to_block(e) for e in fixed_events]
    task_blocks = [b for b in scheduled if isinstance(b.source, TaskSource)]
    return event_blocks + task_blocks
