from dataclasses import replace
from datetime import date, datetime
from typing import List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from weekplanner.api.schemas import (
    AutoScheduleResponse,
    CompletionResponse,
    EventCompletionRequest,
    FixedEventDTO,
    NewFixedEventDTO,
    NewTaskDTO,
    ScheduledBlockDTO,
    TaskDTO,
    WeekResponse,
    WorkingHoursDTO,
)
from weekplanner.engine import planner
from weekplanner.engine.planner import PlannerState
from weekplanner.models.entities import ScheduledBlock
from weekplanner.storage.database import get_db
from weekplanner.storage.repositories import FixedEventRepository, PlannerRepository, TaskRepository
from weekplanner.utils.dates import format_week_range, monday_of

router = APIRouter(prefix="/planner")
logger = logging.getLogger(__name__)

WEEK_START_HELP = "Any day of the target week; defaults to the current week"
NOW_HELP = "Override the current instant (ISO datetime)"


def _load(db: Session, week_start: Optional[date]) -> PlannerState:
    week = monday_of(week_start or date.today())
    return PlannerRepository(db).load_state(week)


def _require_task(db: Session, task_id: str) -> None:
    if TaskRepository(db).get_by_id(task_id) is None:
        raise HTTPException(status_code=404, detail=f"Task {task_id} not found")


def _require_event(db: Session, event_id: str) -> None:
    if FixedEventRepository(db).get_by_id(event_id) is None:
        raise HTTPException(status_code=404, detail=f"Event {event_id} not found")


def _week_response(state: PlannerState) -> WeekResponse:
    return WeekResponse(
        week_start=state.week_start,
        week_label=format_week_range(state.week_start),
        working_hours=WorkingHoursDTO.from_domain(state.working_hours),
        blocks=[ScheduledBlockDTO.from_domain(b) for b in planner.visible_blocks(state)],
        tasks=[TaskDTO.from_domain(t) for t in state.tasks],
        fixed_events=[FixedEventDTO.from_domain(e) for e in state.fixed_events],
    )


def _run_response(before: PlannerState, after: PlannerState, task_ids: List[str]) -> AutoScheduleResponse:
    old_ids = {b.id for b in before.scheduled}
    new_blocks: List[ScheduledBlock] = [b for b in after.scheduled if b.id not in old_ids]
    placed = {b.task_id for b in after.scheduled}
    open_ids = {t.id for t in after.tasks if not t.completed}
    return AutoScheduleResponse(
        blocks=[ScheduledBlockDTO.from_domain(b) for b in new_blocks],
        unscheduled_task_ids=[tid for tid in task_ids if tid in open_ids and tid not in placed],
    )


@router.get("/week", response_model=WeekResponse, summary="Calendar view of one week")
def get_week(week_start: Optional[date] = Query(None, description=WEEK_START_HELP), db: Session = Depends(get_db)):
    return _week_response(_load(db, week_start))


@router.get("/working-hours", response_model=WorkingHoursDTO)
def get_working_hours(db: Session = Depends(get_db)):
    return WorkingHoursDTO.from_domain(_load(db, None).working_hours)


@router.put("/working-hours", response_model=WorkingHoursDTO)
def put_working_hours(req: WorkingHoursDTO, db: Session = Depends(get_db)):
    state = planner.update_working_hours(_load(db, None), req.to_domain())
    PlannerRepository(db).save_state(state)
    logger.info(f"Working hours set to {req.start_minutes}-{req.end_minutes}")
    return req


@router.post("/tasks", response_model=TaskDTO, status_code=201)
def create_task(req: NewTaskDTO, db: Session = Depends(get_db)):
    if TaskRepository(db).get_by_id(req.id) is not None:
        raise HTTPException(status_code=409, detail=f"Task {req.id} already exists")
    PlannerRepository(db).save_state(planner.add_task(_load(db, None), req.to_domain()))
    logger.info(f"Task created: {req.id} ({req.duration_minutes} min, due {req.due_date.isoformat()})")
    return req


@router.put("/tasks/{task_id}", response_model=TaskDTO)
def update_task(task_id: str, req: NewTaskDTO, db: Session = Depends(get_db)):
    """Edit a task in place; the id in the path wins over any id in the body."""
    _require_task(db, task_id)
    task = replace(req.to_domain(), id=task_id)
    PlannerRepository(db).save_state(planner.update_task(_load(db, None), task_id, task))
    logger.info(f"Task updated: {task_id}")
    return TaskDTO.from_domain(task)


@router.delete("/tasks/{task_id}")
def delete_task(task_id: str, db: Session = Depends(get_db)):
    _require_task(db, task_id)
    PlannerRepository(db).save_state(planner.delete_task(_load(db, None), task_id))
    return {"success": True}


@router.post("/events", response_model=FixedEventDTO, status_code=201)
def create_event(req: NewFixedEventDTO, db: Session = Depends(get_db)):
    if FixedEventRepository(db).get_by_id(req.id) is not None:
        raise HTTPException(status_code=409, detail=f"Event {req.id} already exists")
    PlannerRepository(db).save_state(planner.add_event(_load(db, None), req.to_domain()))
    logger.info(f"Event created: {req.id} on {req.date.isoformat()}")
    return req


@router.put("/events/{event_id}", response_model=FixedEventDTO)
def update_event(event_id: str, req: NewFixedEventDTO, db: Session = Depends(get_db)):
    _require_event(db, event_id)
    event = replace(req.to_domain(), id=event_id)
    PlannerRepository(db).save_state(planner.update_event(_load(db, None), event_id, event))
    logger.info(f"Event updated: {event_id}")
    return FixedEventDTO.from_domain(event)


@router.put("/events/{event_id}/completed", response_model=FixedEventDTO)
def set_event_completed(event_id: str, req: EventCompletionRequest, db: Session = Depends(get_db)):
    _require_event(db, event_id)
    state = planner.set_event_completed(_load(db, None), event_id, req.completed)
    PlannerRepository(db).save_state(state)
    return FixedEventDTO.from_domain(next(e for e in state.fixed_events if e.id == event_id))


@router.delete("/events/{event_id}")
def delete_event(event_id: str, db: Session = Depends(get_db)):
    _require_event(db, event_id)
    PlannerRepository(db).save_state(planner.delete_event(_load(db, None), event_id))
    return {"success": True}


@router.post("/tasks/{task_id}/schedule", response_model=AutoScheduleResponse)
def schedule_one_task(
    task_id: str,
    week_start: Optional[date] = Query(None, description=WEEK_START_HELP),
    now: Optional[datetime] = Query(None, description=NOW_HELP),
    db: Session = Depends(get_db),
):
    _require_task(db, task_id)
    state = _load(db, week_start)
    updated = planner.schedule_task(state, task_id, now=now)
    PlannerRepository(db).save_state(updated)
    return _run_response(state, updated, [task_id])


@router.post("/auto-schedule", response_model=AutoScheduleResponse)
def auto_schedule_week(
    week_start: Optional[date] = Query(None, description=WEEK_START_HELP),
    now: Optional[datetime] = Query(None, description=NOW_HELP),
    db: Session = Depends(get_db),
):
    """Schedule every open task that has no block yet, keeping existing blocks."""
    state = _load(db, week_start)
    updated = planner.auto_schedule_all(state, now=now)
    PlannerRepository(db).save_state(updated)
    response = _run_response(state, updated, [t.id for t in state.tasks])
    logger.info(f"Planner auto-schedule: {len(response.blocks)} new blocks")
    return response


@router.post("/reschedule", response_model=AutoScheduleResponse)
def reschedule(
    week_start: Optional[date] = Query(None, description=WEEK_START_HELP),
    now: Optional[datetime] = Query(None, description=NOW_HELP),
    db: Session = Depends(get_db),
):
    """Drop the blocks of open tasks and place them again; completed work stays."""
    state = _load(db, week_start)
    updated = planner.reschedule_week(state, now=now)
    PlannerRepository(db).save_state(updated)
    return _run_response(planner.clear_open_task_blocks(state), updated, [t.id for t in state.tasks])


@router.post("/blocks/{block_id}/complete", response_model=CompletionResponse)
def complete_block(block_id: str, db: Session = Depends(get_db)):
    state = _load(db, None)
    if not any(b.id == block_id for b in planner.visible_blocks(state, all_weeks=True)):
        raise HTTPException(status_code=404, detail=f"Block {block_id} not found")
    PlannerRepository(db).save_state(planner.complete_block(state, block_id))
    return CompletionResponse(block_id=block_id)


@router.delete("/blocks/{block_id}")
def delete_block(block_id: str, db: Session = Depends(get_db)):
    state = _load(db, None)
    if not any(b.id == block_id for b in state.scheduled):
        raise HTTPException(status_code=404, detail=f"Block {block_id} not found")
    PlannerRepository(db).save_state(planner.delete_block(state, block_id))
    return {"success": True}


@router.delete("/blocks")
def clear_blocks(db: Session = Depends(get_db)):
    state = _load(db, None)
    PlannerRepository(db).save_state(planner.clear_task_schedule(state))
    return {"success": True, "removed": len(state.scheduled)}


@router.post("/reset")
def reset(db: Session = Depends(get_db)):
    """Wipe every event, task and block and restore default working hours."""
    PlannerRepository(db).save_state(planner.reset_all(date.today()))
    return {"success": True}
