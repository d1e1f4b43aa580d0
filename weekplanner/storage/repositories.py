from datetime import date
from typing import List, Optional

from sqlalchemy.orm import Session

from weekplanner.config.settings import get_settings
from weekplanner.engine.planner import PlannerState
from weekplanner.models.entities import (
    EventSource,
    FixedEvent,
    ScheduledBlock,
    SourceType,
    Task,
    TaskSource,
    WorkingHours,
)
from weekplanner.storage.database import (
    FixedEventModel,
    ScheduledBlockModel,
    TaskModel,
    WorkingHoursModel,
)

settings = get_settings()


class TaskRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, task_id: str) -> Optional[Task]:
        model = self.db.query(TaskModel).filter(TaskModel.id == task_id).first()
        if not model:
            return None
        return self._model_to_task(model)

    def list_all(self) -> List[Task]:
        models = self.db.query(TaskModel).order_by(TaskModel.created_at, TaskModel.id).all()
        return [self._model_to_task(m) for m in models]

    def save(self, task: Task, commit: bool = True) -> None:
        existing = self.db.query(TaskModel).filter(TaskModel.id == task.id).first()
        if existing:
            existing.title = task.title
            existing.duration_minutes = task.duration_minutes
            existing.due_date = task.due_date
            existing.priority = int(task.priority)
            existing.can_split = task.can_split
            existing.color = task.color
            existing.completed = task.completed
        else:
            self.db.add(TaskModel(
                id=task.id,
                title=task.title,
                duration_minutes=task.duration_minutes,
                due_date=task.due_date,
                priority=int(task.priority),
                can_split=task.can_split,
                color=task.color,
                completed=task.completed,
            ))
        if commit:
            self.db.commit()

    def delete(self, task_id: str, commit: bool = True) -> None:
        self.db.query(TaskModel).filter(TaskModel.id == task_id).delete()
        if commit:
            self.db.commit()

    @staticmethod
    def _model_to_task(model: TaskModel) -> Task:
        return Task(
            id=model.id,
            title=model.title,
            duration_minutes=model.duration_minutes,
            due_date=model.due_date,
            priority=model.priority,
            can_split=model.can_split,
            color=model.color,
            completed=model.completed,
        )


class FixedEventRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, event_id: str) -> Optional[FixedEvent]:
        model = self.db.query(FixedEventModel).filter(FixedEventModel.id == event_id).first()
        if not model:
            return None
        return self._model_to_event(model)

    def list_all(self) -> List[FixedEvent]:
        models = self.db.query(FixedEventModel).order_by(FixedEventModel.created_at, FixedEventModel.id).all()
        return [self._model_to_event(m) for m in models]

    def save(self, event: FixedEvent, commit: bool = True) -> None:
        existing = self.db.query(FixedEventModel).filter(FixedEventModel.id == event.id).first()
        if existing:
            existing.title = event.title
            existing.date = event.date
            existing.start_minutes = event.start_minutes
            existing.end_minutes = event.end_minutes
            existing.color = event.color
            existing.completed = event.completed
        else:
            self.db.add(FixedEventModel(
                id=event.id,
                title=event.title,
                date=event.date,
                start_minutes=event.start_minutes,
                end_minutes=event.end_minutes,
                color=event.color,
                completed=event.completed,
            ))
        if commit:
            self.db.commit()

    def delete(self, event_id: str, commit: bool = True) -> None:
        self.db.query(FixedEventModel).filter(FixedEventModel.id == event_id).delete()
        if commit:
            self.db.commit()

    @staticmethod
    def _model_to_event(model: FixedEventModel) -> FixedEvent:
        return FixedEvent(
            id=model.id,
            title=model.title,
            date=model.date,
            start_minutes=model.start_minutes,
            end_minutes=model.end_minutes,
            color=model.color,
            completed=model.completed,
        )


class ScheduledBlockRepository:
    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[ScheduledBlock]:
        models = (
            self.db.query(ScheduledBlockModel)
            .order_by(ScheduledBlockModel.date, ScheduledBlockModel.start_minutes)
            .all()
        )
        return [self._model_to_block(m) for m in models]

    def save(self, block: ScheduledBlock, commit: bool = True) -> None:
        fields = dict(
            source_type=block.source.type.value,
            source_id=block.task_id or block.event_id,
            title=block.title,
            date=block.date,
            start_minutes=block.start_minutes,
            end_minutes=block.end_minutes,
            color=block.color,
            fixed=block.fixed,
            completed=block.completed,
        )
        existing = self.db.query(ScheduledBlockModel).filter(ScheduledBlockModel.id == block.id).first()
        if existing:
            for name, value in fields.items():
                setattr(existing, name, value)
        else:
            self.db.add(ScheduledBlockModel(id=block.id, **fields))
        if commit:
            self.db.commit()

    def delete(self, block_id: str, commit: bool = True) -> None:
        self.db.query(ScheduledBlockModel).filter(ScheduledBlockModel.id == block_id).delete()
        if commit:
            self.db.commit()

    @staticmethod
    def _model_to_block(model: ScheduledBlockModel) -> ScheduledBlock:
        if model.source_type == SourceType.EVENT.value:
            source = EventSource(event_id=model.source_id)
        else:
            source = TaskSource(task_id=model.source_id)
        return ScheduledBlock(
            id=model.id,
            source=source,
            title=model.title,
            date=model.date,
            start_minutes=model.start_minutes,
            end_minutes=model.end_minutes,
            color=model.color,
            fixed=model.fixed,
            completed=model.completed,
        )


class WorkingHoursRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self) -> WorkingHours:
        model = self.db.query(WorkingHoursModel).filter(WorkingHoursModel.id == 1).first()
        if not model:
            return WorkingHours(settings.default_work_start_minutes, settings.default_work_end_minutes)
        return WorkingHours(model.start_minutes, model.end_minutes)

    def save(self, working_hours: WorkingHours, commit: bool = True) -> None:
        existing = self.db.query(WorkingHoursModel).filter(WorkingHoursModel.id == 1).first()
        if existing:
            existing.start_minutes = working_hours.start_minutes
            existing.end_minutes = working_hours.end_minutes
        else:
            self.db.add(WorkingHoursModel(
                id=1,
                start_minutes=working_hours.start_minutes,
                end_minutes=working_hours.end_minutes,
            ))
        if commit:
            self.db.commit()


class PlannerRepository:
    """Loads and stores a whole ``PlannerState`` in one transaction."""

    def __init__(self, db: Session):
        self.db = db
        self.tasks = TaskRepository(db)
        self.events = FixedEventRepository(db)
        self.blocks = ScheduledBlockRepository(db)
        self.working_hours = WorkingHoursRepository(db)

    def load_state(self, week_start: date) -> PlannerState:
        return PlannerState(
            week_start=week_start,
            working_hours=self.working_hours.get(),
            fixed_events=self.events.list_all(),
            tasks=self.tasks.list_all(),
            scheduled=[b for b in self.blocks.list_all() if isinstance(b.source, TaskSource)],
        )

    def save_state(self, state: PlannerState) -> None:
        """Upsert everything in ``state`` and delete rows it no longer holds."""
        keep_tasks = {t.id for t in state.tasks}
        for task in self.tasks.list_all():
            if task.id not in keep_tasks:
                self.tasks.delete(task.id, commit=False)
        for task in state.tasks:
            self.tasks.save(task, commit=False)

        keep_events = {e.id for e in state.fixed_events}
        for event in self.events.list_all():
            if event.id not in keep_events:
                self.events.delete(event.id, commit=False)
        for event in state.fixed_events:
            self.events.save(event, commit=False)

        keep_blocks = {b.id for b in state.scheduled}
        for block in self.blocks.list_all():
            if block.id not in keep_blocks:
                self.blocks.delete(block.id, commit=False)
        for block in state.scheduled:
            self.blocks.save(block, commit=False)

        self.working_hours.save(state.working_hours, commit=False)
        self.db.commit()
