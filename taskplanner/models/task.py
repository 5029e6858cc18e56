"""Task data model for taskplanner."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from taskplanner.models.catalog import Label, TaskList


class Priority(str, Enum):
    """Task priority enumeration."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


class TaskView(str, Enum):
    """Named task views (date windows over schedule_date)."""
    TODAY = "today"
    NEXT_7_DAYS = "next7days"
    UPCOMING = "upcoming"
    ALL = "all"


class Subtask(BaseModel):
    """Checklist item belonging to a task."""

    id: str = Field(..., description="Unique subtask identifier")
    task_id: str = Field(..., description="Owning task ID")
    title: str = Field(..., description="Subtask title")
    completed: bool = Field(False, description="Whether the subtask is done")
    position: int = Field(0, ge=0, description="Sort position within the task")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class Reminder(BaseModel):
    """Point in time at which the user wants to be reminded about a task."""

    id: str = Field(..., description="Unique reminder identifier")
    task_id: str = Field(..., description="Owning task ID")
    remind_at: datetime = Field(..., description="Reminder timestamp")
    created_at: datetime = Field(..., description="Creation timestamp")


class ChangeLog(BaseModel):
    """One entry of a task's change history."""

    id: str = Field(..., description="Unique change log identifier")
    task_id: str = Field(..., description="Task the change applies to")
    field: Optional[str] = Field(None, description="Changed field (null for lifecycle events)")
    previous_value: Optional[str] = None
    new_value: Optional[str] = None
    description: str = Field(..., description="Human-readable summary")
    actor: str = Field("user", description="Who made the change")
    created_at: datetime = Field(..., description="When the change was recorded")


class Task(BaseModel):
    """Canonical Task model."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    list_id: str = Field(..., description="List the task belongs to")
    title: str = Field(..., description="Task title")
    description: Optional[str] = Field(None, description="Task notes or description")
    schedule_date: Optional[datetime] = Field(None, description="When the task is planned to be worked on")
    deadline: Optional[datetime] = Field(None, description="When the task is due")
    estimated_minutes: Optional[int] = Field(None, ge=0, description="Estimated duration in minutes")
    actual_minutes: Optional[int] = Field(None, ge=0, description="Time actually spent in minutes")
    priority: Priority = Field(Priority.NONE, description="Task priority")
    completed: bool = Field(False, description="Whether the task is done")
    completed_at: Optional[datetime] = Field(None, description="Completion timestamp")
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")

    labels: List[Label] = Field(default_factory=list)
    subtasks: List[Subtask] = Field(default_factory=list)
    reminders: List[Reminder] = Field(default_factory=list)
    change_logs: List[ChangeLog] = Field(default_factory=list)
    task_list: Optional[TaskList] = None

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class SubtaskInput(BaseModel):
    """Subtask payload used when replacing a task's subtasks."""

    id: Optional[str] = None
    title: str = Field(..., min_length=1)
    completed: bool = False
    position: Optional[int] = Field(None, ge=0)


class TaskCreate(BaseModel):
    """Request body for creating a task."""

    list_id: str = Field(..., description="Target list ID")
    title: str = Field(..., description="Task title")
    description: Optional[str] = None
    schedule_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    estimated_minutes: Optional[int] = Field(None, ge=0)
    priority: Priority = Priority.NONE
    label_ids: List[str] = Field(default_factory=list)
    subtask_titles: List[str] = Field(default_factory=list)
    reminder_dates: List[datetime] = Field(default_factory=list)

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class TaskUpdate(BaseModel):
    """Partial update for a task.

    Only fields explicitly present in the request are applied, so `None`
    clears a nullable field while an omitted field is left untouched.
    """

    list_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    schedule_date: Optional[datetime] = None
    deadline: Optional[datetime] = None
    estimated_minutes: Optional[int] = Field(None, ge=0)
    actual_minutes: Optional[int] = Field(None, ge=0)
    priority: Optional[Priority] = None
    completed: Optional[bool] = None
    label_ids: Optional[List[str]] = None
    subtasks: Optional[List[SubtaskInput]] = None
    reminder_dates: Optional[List[datetime]] = None

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
