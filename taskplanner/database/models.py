"""SQLAlchemy database models for taskplanner."""

from datetime import datetime
from typing import Type, TypeVar, Union
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from taskplanner.database.database import Base
from taskplanner.models.constants import (
    CHANGE_LOG_ACTOR,
    DEFAULT_LABEL_COLOR,
    DEFAULT_LABEL_ICON,
    DEFAULT_LIST_COLOR,
    DEFAULT_LIST_ICON,
)
from taskplanner.models.task import Priority

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string)."""
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default."""
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


def _new_id() -> str:
    return str(uuid.uuid4())


task_labels = Table(
    "task_labels",
    Base.metadata,
    Column("task_id", String, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("label_id", String, ForeignKey("labels.id", ondelete="CASCADE"), primary_key=True),
)


class ListDB(Base):
    """Database model for TaskList."""

    __tablename__ = "lists"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    color = Column(String, nullable=False, default=DEFAULT_LIST_COLOR)
    icon = Column(String, nullable=False, default=DEFAULT_LIST_ICON)
    is_default = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    tasks = relationship("TaskDB", back_populates="task_list", cascade="all, delete-orphan", passive_deletes=True)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from taskplanner.models.catalog import TaskList
        return TaskList(
            id=self.id,
            name=self.name,
            color=self.color,
            icon=self.icon,
            is_default=bool(self.is_default),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class LabelDB(Base):
    """Database model for Label."""

    __tablename__ = "labels"

    id = Column(String, primary_key=True, default=_new_id)
    name = Column(String, nullable=False, index=True)
    color = Column(String, nullable=False, default=DEFAULT_LABEL_COLOR)
    icon = Column(String, nullable=False, default=DEFAULT_LABEL_ICON)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from taskplanner.models.catalog import Label
        return Label(
            id=self.id,
            name=self.name,
            color=self.color,
            icon=self.icon,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"

    id = Column(String, primary_key=True, default=_new_id)
    list_id = Column(String, ForeignKey("lists.id", ondelete="CASCADE"), nullable=False, index=True)

    # Basic fields
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    priority = Column(String, nullable=False, default=Priority.NONE.value)

    # Scheduling fields
    schedule_date = Column(DateTime, nullable=True, index=True)
    deadline = Column(DateTime, nullable=True)
    estimated_minutes = Column(Integer, nullable=True)
    actual_minutes = Column(Integer, nullable=True)

    # Completion
    completed = Column(Boolean, nullable=False, default=False)
    completed_at = Column(DateTime, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    task_list = relationship("ListDB", back_populates="tasks")
    labels = relationship("LabelDB", secondary=task_labels, order_by="LabelDB.name")
    subtasks = relationship(
        "SubtaskDB", cascade="all, delete-orphan", passive_deletes=True, order_by="SubtaskDB.position"
    )
    reminders = relationship(
        "ReminderDB", cascade="all, delete-orphan", passive_deletes=True, order_by="ReminderDB.remind_at"
    )
    change_logs = relationship(
        "ChangeLogDB", cascade="all, delete-orphan", passive_deletes=True,
        order_by=lambda: [ChangeLogDB.created_at.desc(), ChangeLogDB.seq.desc()],
    )

    def to_pydantic(self):
        """Convert database model (with its relations) to Pydantic model."""
        from taskplanner.models.task import Task
        return Task(
            id=self.id,
            list_id=self.list_id,
            title=self.title,
            description=self.description,
            schedule_date=self.schedule_date,
            deadline=self.deadline,
            estimated_minutes=self.estimated_minutes,
            actual_minutes=self.actual_minutes,
            priority=value_to_enum(self.priority, Priority, Priority.NONE),
            completed=bool(self.completed),
            completed_at=self.completed_at,
            created_at=self.created_at,
            updated_at=self.updated_at,
            labels=[label.to_pydantic() for label in self.labels],
            subtasks=[subtask.to_pydantic() for subtask in self.subtasks],
            reminders=[reminder.to_pydantic() for reminder in self.reminders],
            change_logs=[entry.to_pydantic() for entry in self.change_logs],
            task_list=self.task_list.to_pydantic() if self.task_list else None,
        )


class SubtaskDB(Base):
    """Database model for Subtask."""

    __tablename__ = "subtasks"

    id = Column(String, primary_key=True, default=_new_id)
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    completed = Column(Boolean, nullable=False, default=False)
    position = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        from taskplanner.models.task import Subtask
        return Subtask(
            id=self.id,
            task_id=self.task_id,
            title=self.title,
            completed=bool(self.completed),
            position=self.position,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


class ReminderDB(Base):
    """Database model for Reminder."""

    __tablename__ = "reminders"

    id = Column(String, primary_key=True, default=_new_id)
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    remind_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def to_pydantic(self):
        from taskplanner.models.task import Reminder
        return Reminder(
            id=self.id,
            task_id=self.task_id,
            remind_at=self.remind_at,
            created_at=self.created_at,
        )


class ChangeLogDB(Base):
    """Database model for a task change log entry."""

    __tablename__ = "change_logs"

    id = Column(String, primary_key=True, default=_new_id)
    task_id = Column(String, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    field = Column(String, nullable=True)
    previous_value = Column(String, nullable=True)
    new_value = Column(String, nullable=True)
    description = Column(String, nullable=False)
    actor = Column(String, nullable=False, default=CHANGE_LOG_ACTOR)
    # Tie-breaker for entries written within the same timestamp
    seq = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def to_pydantic(self):
        from taskplanner.models.task import ChangeLog
        return ChangeLog(
            id=self.id,
            task_id=self.task_id,
            field=self.field,
            previous_value=self.previous_value,
            new_value=self.new_value,
            description=self.description,
            actor=self.actor,
            created_at=self.created_at,
        )
