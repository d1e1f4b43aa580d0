from sqlalchemy import create_engine, Column, String, Integer, Boolean, Date, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker
from datetime import datetime
from weekplanner.config.settings import get_settings

settings = get_settings()

connect_args = {"check_same_thread": False} if settings.database_url.startswith("sqlite") else {}
engine = create_engine(settings.database_url, pool_pre_ping=True, echo=False, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


class TaskModel(Base):
    __tablename__ = "tasks"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False)
    priority = Column(Integer, nullable=False, default=2)
    can_split = Column(Boolean, nullable=False, default=False)
    color = Column(String, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class FixedEventModel(Base):
    __tablename__ = "fixed_events"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    date = Column(Date, nullable=False, index=True)
    start_minutes = Column(Integer, nullable=False)
    end_minutes = Column(Integer, nullable=False)
    color = Column(String, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ScheduledBlockModel(Base):
    __tablename__ = "scheduled_blocks"

    id = Column(String, primary_key=True)
    source_type = Column(String, nullable=False)  # "task" | "event"
    source_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    date = Column(Date, nullable=False, index=True)
    start_minutes = Column(Integer, nullable=False)
    end_minutes = Column(Integer, nullable=False)
    color = Column(String, nullable=False)
    fixed = Column(Boolean, nullable=False, default=False)
    completed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class WorkingHoursModel(Base):
    __tablename__ = "working_hours"

    id = Column(Integer, primary_key=True)  # single row
    start_minutes = Column(Integer, nullable=False)
    end_minutes = Column(Integer, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


def init_db():
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
