"""
Planner state and the commands that change it.

The engine itself is stateless; this module is the state owner around it.
Every command takes a ``PlannerState`` and returns a new one, and every
scheduling run is an explicit command rather than a side effect of some
other change.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import List, Optional

from weekplanner.config.settings import get_settings
from weekplanner.engine.placement import color_from_priority
from weekplanner.engine.scheduler import (
    auto_schedule,
    blocks_for_week,
    rebuild_scheduled_from_events_and_tasks,
)
from weekplanner.models.entities import (
    EventSource,
    FixedEvent,
    ScheduledBlock,
    Task,
    TaskSource,
    WorkingHours,
)
from weekplanner.utils.dates import monday_of, shift_days


settings = get_settings()
logger = logging.getLogger(__name__)


def default_working_hours() -> WorkingHours:
    return WorkingHours(settings.default_work_start_minutes, settings.default_work_end_minutes)


@dataclass(frozen=True)
class PlannerState:
    week_start: date
    working_hours: WorkingHours = field(default_factory=default_working_hours)
    fixed_events: List[FixedEvent] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)
    scheduled: List[ScheduledBlock] = field(default_factory=list)  # task-sourced only


def new_state(today: date) -> PlannerState:
    return PlannerState(week_start=monday_of(today))


def add_task(state: PlannerState, task: Task) -> PlannerState:
    return replace(state, tasks=[*state.tasks, task])


def add_event(state: PlannerState, event: FixedEvent) -> PlannerState:
    return replace(state, fixed_events=[*state.fixed_events, event])


def update_task(state: PlannerState, task_id: str, task: Task) -> PlannerState:
    """
    Replace a task's fields, keeping its id.

    Changing duration, due date or splittability drops the task's blocks so
    it can be scheduled again; otherwise the blocks stay and pick up the new
    title and priority colour. Unknown ids leave the state unchanged.
    """
    current = next((t for t in state.tasks if t.id == task_id), None)
    if current is None:
        return state

    task = replace(task, id=task_id)
    moved = (
        task.duration_minutes != current.duration_minutes
        or task.due_date != current.due_date
        or task.can_split != current.can_split
    )
    if moved:
        scheduled = [b for b in state.scheduled if b.task_id != task_id]
    else:
        color = color_from_priority(task.priority)
        scheduled = [
            replace(b, title=task.title, color=color) if b.task_id == task_id else b
            for b in state.scheduled
        ]
    return replace(
        state,
        tasks=[task if t.id == task_id else t for t in state.tasks],
        scheduled=scheduled,
    )


def update_event(state: PlannerState, event_id: str, event: FixedEvent) -> PlannerState:
    """Replace an event's title, time and colour, keeping its id."""
    if not any(e.id == event_id for e in state.fixed_events):
        return state
    event = replace(event, id=event_id)
    return replace(state, fixed_events=[event if e.id == event_id else e for e in state.fixed_events])


def set_event_completed(state: PlannerState, event_id: str, completed: bool) -> PlannerState:
    return replace(
        state,
        fixed_events=[replace(e, completed=completed) if e.id == event_id else e for e in state.fixed_events],
    )


def reset_all(today: date) -> PlannerState:
    """Drop every event, task and block and return to default working hours."""
    logger.info("Planner reset")
    return new_state(today)


def delete_event(state: PlannerState, event_id: str) -> PlannerState:
    return replace(state, fixed_events=[e for e in state.fixed_events if e.id != event_id])


def delete_task(state: PlannerState, task_id: str) -> PlannerState:
    """Remove a task together with all of its blocks."""
    return replace(
        state,
        tasks=[t for t in state.tasks if t.id != task_id],
        scheduled=[b for b in state.scheduled if b.task_id != task_id],
    )


def delete_block(state: PlannerState, block_id: str) -> PlannerState:
    return replace(state, scheduled=[b for b in state.scheduled if b.id != block_id])


def complete_block(state: PlannerState, block_id: str) -> PlannerState:
    """
    Mark whatever a block stands for as completed.

    An event block (``event:<id>``) completes its fixed event; a task block
    completes its task. Unknown block ids leave the state unchanged.
    """
    block = next((b for b in visible_blocks(state, all_weeks=True) if b.id == block_id), None)
    if block is None:
        logger.debug(f"complete_block: unknown block {block_id}")
        return state

    if isinstance(block.source, EventSource):
        event_id = block.source.event_id
        return replace(
            state,
            fixed_events=[replace(e, completed=True) if e.id == event_id else e for e in state.fixed_events],
        )

    task_id = block.source.task_id
    return replace(
        state,
        tasks=[replace(t, completed=True) if t.id == task_id else t for t in state.tasks],
    )


def clear_task_schedule(state: PlannerState) -> PlannerState:
    return replace(state, scheduled=[])


def clear_open_task_blocks(state: PlannerState) -> PlannerState:
    """Drop the blocks of tasks that are not completed yet."""
    done = {t.id for t in state.tasks if t.completed}
    return replace(state, scheduled=[b for b in state.scheduled if b.task_id in done])


def auto_schedule_all(state: PlannerState, now: Optional[datetime] = None) -> PlannerState:
    """Schedule every open task not yet on the calendar, keeping existing blocks."""
    new_blocks = auto_schedule(
        state.tasks,
        state.fixed_events,
        state.scheduled,
        state.week_start,
        state.working_hours,
        now=now,
        chunk_minutes=settings.chunk_minutes,
    )
    return replace(state, scheduled=[*state.scheduled, *new_blocks])


def schedule_task(state: PlannerState, task_id: str, now: Optional[datetime] = None) -> PlannerState:
    """Schedule a single task around everything already on the calendar."""
    task = next((t for t in state.tasks if t.id == task_id), None)
    if task is None:
        return state
    new_blocks = auto_schedule(
        [task],
        state.fixed_events,
        state.scheduled,
        state.week_start,
        state.working_hours,
        now=now,
        chunk_minutes=settings.chunk_minutes,
    )
    return replace(state, scheduled=[*state.scheduled, *new_blocks])


def reschedule_week(state: PlannerState, now: Optional[datetime] = None) -> PlannerState:
    """Place every open task again from scratch; completed work stays put."""
    return auto_schedule_all(clear_open_task_blocks(state), now=now)


def shift_week(state: PlannerState, weeks: int) -> PlannerState:
    return replace(state, week_start=shift_days(state.week_start, 7 * weeks))


def go_to_today(state: PlannerState, today: date) -> PlannerState:
    return replace(state, week_start=monday_of(today))


def update_working_hours(state: PlannerState, working_hours: WorkingHours) -> PlannerState:
    return replace(state, working_hours=working_hours)


def visible_blocks(state: PlannerState, all_weeks: bool = False) -> List[ScheduledBlock]:
    """
    Events projected to fixed blocks plus task blocks, restricted to the
    current week unless ``all_weeks`` is set. Task blocks reflect the
    completion of their task.
    """
    done = {t.id for t in state.tasks if t.completed}
    blocks = [
        replace(b, completed=True) if isinstance(b.source, TaskSource) and b.source.task_id in done else b
        for b in rebuild_scheduled_from_events_and_tasks(state.fixed_events, state.scheduled)
    ]
    if all_weeks:
        return blocks
    return blocks_for_week(blocks, state.week_start)
