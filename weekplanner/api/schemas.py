from datetime import date, datetime
from typing import Annotated, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field, ValidationInfo, field_validator

from weekplanner.models.entities import (
    EventSource,
    FixedEvent,
    ScheduledBlock,
    Task,
    TaskSource,
    WorkingHours,
)

MINUTES_PER_DAY = 1440
MAX_TASK_MINUTES = 7 * MINUTES_PER_DAY


def _new_id() -> str:
    return str(uuid4())


def _check_end_after_start(v: int, info: ValidationInfo) -> int:
    start = info.data.get("start_minutes")
    if start is not None and v <= start:
        raise ValueError("end_minutes must be greater than start_minutes")
    return v


class WorkingHoursDTO(BaseModel):
    start_minutes: int = Field(..., ge=0, le=MINUTES_PER_DAY)
    end_minutes: int = Field(..., ge=0, le=MINUTES_PER_DAY)

    @field_validator("end_minutes")
    @classmethod
    def validate_order(cls, v: int, info: ValidationInfo):
        return _check_end_after_start(v, info)

    def to_domain(self) -> WorkingHours:
        return WorkingHours(self.start_minutes, self.end_minutes)

    @classmethod
    def from_domain(cls, wh: WorkingHours) -> "WorkingHoursDTO":
        return cls(start_minutes=wh.start_minutes, end_minutes=wh.end_minutes)


class TaskDTO(BaseModel):
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    duration_minutes: int
    due_date: date
    priority: int = Field(2, ge=1, le=4)
    can_split: bool = False
    color: str = "#3b82f6"
    completed: bool = False

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, v: int):
        """Ensure task duration is positive and at most one week."""
        if v < 1 or v > MAX_TASK_MINUTES:
            raise ValueError(f"duration_minutes must be between 1 and {MAX_TASK_MINUTES}")
        return v

    def to_domain(self) -> Task:
        return Task(
            id=self.id,
            title=self.title,
            duration_minutes=self.duration_minutes,
            due_date=self.due_date,
            priority=self.priority,
            can_split=self.can_split,
            color=self.color,
            completed=self.completed,
        )

    @classmethod
    def from_domain(cls, t: Task) -> "TaskDTO":
        return cls(
            id=t.id,
            title=t.title,
            duration_minutes=t.duration_minutes,
            due_date=t.due_date,
            priority=int(t.priority),
            can_split=t.can_split,
            color=t.color,
            completed=t.completed,
        )


class FixedEventDTO(BaseModel):
    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    date: date
    start_minutes: int = Field(..., ge=0, le=MINUTES_PER_DAY)
    end_minutes: int = Field(..., ge=0, le=MINUTES_PER_DAY)
    color: str = "#6b7280"
    completed: bool = False

    @field_validator("end_minutes")
    @classmethod
    def validate_order(cls, v: int, info: ValidationInfo):
        return _check_end_after_start(v, info)

    def to_domain(self) -> FixedEvent:
        return FixedEvent(
            id=self.id,
            title=self.title,
            date=self.date,
            start_minutes=self.start_minutes,
            end_minutes=self.end_minutes,
            color=self.color,
            completed=self.completed,
        )

    @classmethod
    def from_domain(cls, e: FixedEvent) -> "FixedEventDTO":
        return cls(
            id=e.id,
            title=e.title,
            date=e.date,
            start_minutes=e.start_minutes,
            end_minutes=e.end_minutes,
            color=e.color,
            completed=e.completed,
        )


class NewTaskDTO(TaskDTO):
    """Planner task body; the server assigns an id when none is sent."""

    id: str = Field(default_factory=_new_id, min_length=1)


class NewFixedEventDTO(FixedEventDTO):
    id: str = Field(default_factory=_new_id, min_length=1)


class EventCompletionRequest(BaseModel):
    completed: bool


class TaskSourceDTO(BaseModel):
    type: Literal["task"] = "task"
    task_id: str


class EventSourceDTO(BaseModel):
    type: Literal["event"] = "event"
    event_id: str


SourceDTO = Annotated[Union[TaskSourceDTO, EventSourceDTO], Field(discriminator="type")]


class ScheduledBlockDTO(BaseModel):
    id: str
    source: SourceDTO
    title: str
    date: date
    start_minutes: int = Field(..., ge=0, le=MINUTES_PER_DAY)
    end_minutes: int = Field(..., ge=0, le=MINUTES_PER_DAY)
    color: str
    fixed: bool = False
    completed: bool = False

    @field_validator("end_minutes")
    @classmethod
    def validate_order(cls, v: int, info: ValidationInfo):
        return _check_end_after_start(v, info)

    def to_domain(self) -> ScheduledBlock:
        if isinstance(self.source, EventSourceDTO):
            source = EventSource(event_id=self.source.event_id)
        else:
            source = TaskSource(task_id=self.source.task_id)
        return ScheduledBlock(
            id=self.id,
            source=source,
            title=self.title,
            date=self.date,
            start_minutes=self.start_minutes,
            end_minutes=self.end_minutes,
            color=self.color,
            fixed=isinstance(source, EventSource),
            completed=self.completed,
        )

    @classmethod
    def from_domain(cls, b: ScheduledBlock) -> "ScheduledBlockDTO":
        if isinstance(b.source, EventSource):
            source = EventSourceDTO(event_id=b.source.event_id)
        else:
            source = TaskSourceDTO(task_id=b.source.task_id)
        return cls(
            id=b.id,
            source=source,
            title=b.title,
            date=b.date,
            start_minutes=b.start_minutes,
            end_minutes=b.end_minutes,
            color=b.color,
            fixed=b.fixed,
            completed=b.completed,
        )


class AutoScheduleRequest(BaseModel):
    tasks: List[TaskDTO] = []
    fixed_events: List[FixedEventDTO] = []
    existing_scheduled: List[ScheduledBlockDTO] = []
    week_start: date
    working_hours: WorkingHoursDTO
    now: Optional[datetime] = None

    @field_validator("tasks")
    @classmethod
    def validate_unique_ids(cls, v: List[TaskDTO]):
        ids = [t.id for t in v]
        if len(ids) != len(set(ids)):
            raise ValueError("task ids must be unique")
        return v


class AutoScheduleResponse(BaseModel):
    blocks: List[ScheduledBlockDTO]
    unscheduled_task_ids: List[str]
    cached: bool = False


class WeekResponse(BaseModel):
    week_start: date
    week_label: str
    working_hours: WorkingHoursDTO
    blocks: List[ScheduledBlockDTO]
    tasks: List[TaskDTO]
    fixed_events: List[FixedEventDTO]


class CompletionResponse(BaseModel):
    block_id: str
    status: str = "completed"
