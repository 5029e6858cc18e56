"""Data models for taskplanner."""

from taskplanner.models.catalog import Label, LabelCreate, LabelUpdate, ListCreate, ListUpdate, TaskList
from taskplanner.models.task import (
    ChangeLog,
    Priority,
    Reminder,
    Subtask,
    SubtaskInput,
    Task,
    TaskCreate,
    TaskUpdate,
    TaskView,
)

__all__ = [
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskView",
    "Priority",
    "Subtask",
    "SubtaskInput",
    "Reminder",
    "ChangeLog",
    "TaskList",
    "ListCreate",
    "ListUpdate",
    "Label",
    "LabelCreate",
    "LabelUpdate",
]
