from datetime import datetime
import logging

from fastapi import APIRouter, Depends

from weekplanner.api.schemas import AutoScheduleRequest, AutoScheduleResponse, ScheduledBlockDTO
from weekplanner.config.settings import get_settings
from weekplanner.engine.scheduler import auto_schedule
from weekplanner.models.entities import TaskSource
from weekplanner.storage.cache import ScheduleCache

router = APIRouter()
cache = ScheduleCache()
settings = get_settings()
logger = logging.getLogger(__name__)


def get_cache() -> ScheduleCache:
    return cache


@router.post("/schedule/auto", response_model=AutoScheduleResponse, summary="Auto-schedule tasks into a week")
def auto_schedule_endpoint(req: AutoScheduleRequest, cache: ScheduleCache = Depends(get_cache)):
    """
    Place tasks into the free time of one week, around fixed events and
    blocks that are already scheduled.

    **Algorithm**:
    1. Validate input (DTOs with pydantic validators)
    2. Sample "now" once (or take it from the request)
    3. Check cache for an identical request
    4. Run the greedy placement engine
    5. Cache the result

    **Placement policy:**
    - Earlier due date first, then higher priority, then shorter duration
    - First fit: earliest eligible day, then earliest free interval
    - Splittable tasks are cut into 30-minute-aligned chunks, all or nothing
    - Nothing is placed before "now" on the current day

    **Error Handling:**
    - 422: Invalid input (inverted intervals, bad duration, duplicate task ids)

    **Returns:**
    - `blocks`: Newly created task blocks only
    - `unscheduled_task_ids`: Open tasks that could not be placed
    - `cached`: Whether result was retrieved from cache
    """
    logger.info(
        f"Auto-schedule request: {len(req.tasks)} tasks, {len(req.fixed_events)} events, "
        f"{len(req.existing_scheduled)} existing blocks, week={req.week_start.isoformat()}"
    )

    now = req.now or datetime.now()
    payload = req.model_dump(mode="json")
    payload["now"] = now.isoformat(timespec="minutes")
    request_hash = ScheduleCache.hash_request(payload)

    cached_result = cache.get(request_hash)
    if cached_result:
        logger.info("Cache hit")
        return {**cached_result, "cached": True}

    existing = [b.to_domain() for b in req.existing_scheduled]
    blocks = auto_schedule(
        [t.to_domain() for t in req.tasks],
        [e.to_domain() for e in req.fixed_events],
        existing,
        req.week_start,
        req.working_hours.to_domain(),
        now=now,
        chunk_minutes=settings.chunk_minutes,
    )

    already_placed = {b.source.task_id for b in existing if isinstance(b.source, TaskSource)}
    placed = {b.task_id for b in blocks}
    unscheduled = [
        t.id for t in req.tasks
        if not t.completed and t.id not in already_placed and t.id not in placed
    ]

    logger.info(f"Auto-schedule complete: {len(blocks)} blocks, {len(unscheduled)} tasks unscheduled")

    result = {
        "blocks": [ScheduledBlockDTO.from_domain(b).model_dump(mode="json") for b in blocks],
        "unscheduled_task_ids": unscheduled,
        "cached": False,
    }
    cache.set(request_hash, result)
    return result
