from dataclasses import dataclass
from datetime import date
from enum import Enum, IntEnum
from typing import ClassVar, Optional, Tuple, Union


Interval = Tuple[int, int]  # half-open (start, end) in minutes since midnight


class Priority(IntEnum):
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4


class SourceType(str, Enum):
    TASK = "task"
    EVENT = "event"


@dataclass(frozen=True)
class WorkingHours:
    start_minutes: int
    end_minutes: int


@dataclass(frozen=True)
class FixedEvent:
    id: str
    title: str
    date: date
    start_minutes: int
    end_minutes: int
    color: str = "#6b7280"
    completed: bool = False


@dataclass(frozen=True)
class Task:
    id: str
    title: str
    duration_minutes: int
    due_date: date
    priority: int = Priority.MEDIUM  # 1..4, higher is more urgent
    can_split: bool = False
    color: str = "#3b82f6"
    completed: bool = False


@dataclass(frozen=True)
class TaskSource:
    task_id: str
    type: ClassVar[SourceType] = SourceType.TASK


@dataclass(frozen=True)
class EventSource:
    event_id: str
    type: ClassVar[SourceType] = SourceType.EVENT


BlockSource = Union[TaskSource, EventSource]


@dataclass(frozen=True)
class ScheduledBlock:
    id: str
    source: BlockSource
    title: str
    date: date
    start_minutes: int
    end_minutes: int
    color: str
    fixed: bool = False
    completed: bool = False

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes

    @property
    def task_id(self) -> Optional[str]:
        return self.source.task_id if isinstance(self.source, TaskSource) else None

    @property
    def event_id(self) -> Optional[str]:
        return self.source.event_id if isinstance(self.source, EventSource) else None
