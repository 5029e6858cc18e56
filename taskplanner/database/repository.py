"""Repository layer for task database operations."""

import logging
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy import desc
from sqlalchemy.orm import Session

from taskplanner.database.list_repository import ListNotFoundError
from taskplanner.database.models import (
    ChangeLogDB,
    LabelDB,
    ListDB,
    ReminderDB,
    SubtaskDB,
    TaskDB,
    enum_to_value,
)
from taskplanner.models.constants import CHANGE_LOG_ACTOR, UPCOMING_WINDOW_DAYS
from taskplanner.models.task import Task, TaskCreate, TaskUpdate, TaskView

logger = logging.getLogger(__name__)

# Scalar task fields tracked in the change log, in logging order.
_TRACKED_FIELDS = [
    "title",
    "description",
    "list_id",
    "priority",
    "completed",
    "estimated_minutes",
    "actual_minutes",
    "schedule_date",
    "deadline",
]

# Fields that cannot be cleared; an explicit null is ignored.
_NON_NULLABLE_FIELDS = {"title", "list_id", "priority", "completed"}


class TaskNotFoundError(ValueError):
    """Raised when a task ID does not exist."""


def _format_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(enum_to_value(value))


def _same_value(current: Any, incoming: Any) -> bool:
    if isinstance(current, datetime) and isinstance(incoming, datetime):
        # SQLite drops tzinfo on the way in, so compare wall-clock values.
        return current.replace(tzinfo=None) == incoming.replace(tzinfo=None)
    return current == incoming


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _get_db(self, task_id: str) -> Optional[TaskDB]:
        return self.db.query(TaskDB).filter(TaskDB.id == task_id).first()

    def _require_list(self, list_id: str) -> None:
        if not self.db.query(ListDB.id).filter(ListDB.id == list_id).first():
            raise ListNotFoundError(f"List {list_id} not found")

    def _load_labels(self, label_ids: List[str]) -> List[LabelDB]:
        """Load labels by ID in request order; unknown IDs are skipped."""
        if not label_ids:
            return []
        found = {
            label_db.id: label_db
            for label_db in self.db.query(LabelDB).filter(LabelDB.id.in_(label_ids)).all()
        }
        missing = [label_id for label_id in label_ids if label_id not in found]
        if missing:
            logger.warning(f"Ignoring unknown label ids: {missing}")
        seen = set()
        out: List[LabelDB] = []
        for label_id in label_ids:
            if label_id in found and label_id not in seen:
                seen.add(label_id)
                out.append(found[label_id])
        return out

    def _append_change_logs(self, task_db: TaskDB, entries: List[Dict[str, Optional[str]]]) -> None:
        now = datetime.utcnow()
        for seq, entry in enumerate(entries):
            task_db.change_logs.append(
                ChangeLogDB(
                    field=entry.get("field"),
                    previous_value=entry.get("previous_value"),
                    new_value=entry.get("new_value"),
                    description=entry["description"],
                    actor=CHANGE_LOG_ACTOR,
                    seq=seq,
                    created_at=now,
                )
            )

    def create(self, data: TaskCreate) -> Task:
        """Create a task with its labels, subtasks and reminders.

        Raises:
            ListNotFoundError: if `data.list_id` does not exist
            ValueError: if the title is blank
        """
        title = (data.title or "").strip()
        if not title:
            raise ValueError("title is required")
        self._require_list(data.list_id)

        task_db = TaskDB(
            list_id=data.list_id,
            title=title,
            description=data.description or None,
            schedule_date=data.schedule_date,
            deadline=data.deadline,
            estimated_minutes=data.estimated_minutes,
            priority=enum_to_value(data.priority),
            completed=False,
        )
        task_db.labels = self._load_labels(data.label_ids)
        task_db.subtasks = [
            SubtaskDB(title=subtask_title, completed=False, position=index)
            for index, subtask_title in enumerate(data.subtask_titles)
        ]
        task_db.reminders = [ReminderDB(remind_at=remind_at) for remind_at in data.reminder_dates]
        self._append_change_logs(task_db, [{"field": None, "description": "Task created"}])

        try:
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task_db.id}: {title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {title[:50]}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, task_id: str) -> Optional[Task]:
        """Get task by ID."""
        task_db = self._get_db(task_id)
        return task_db.to_pydantic() if task_db else None

    def get_all(
        self,
        *,
        list_id: Optional[str] = None,
        view: Optional[TaskView] = None,
        include_completed: bool = False,
        now: Optional[datetime] = None,
    ) -> List[Task]:
        """Get tasks for a list, for a named view, or all tasks.

        - list_id: tasks of that list, newest first
        - view: today / next7days / upcoming filter on schedule_date (local day
          boundaries of `now`), ordered by schedule date then newest first
        - neither: all tasks, newest first
        Completed tasks are excluded unless include_completed is set.
        """
        query = self.db.query(TaskDB)
        if not include_completed:
            query = query.filter(TaskDB.completed.is_(False))

        if list_id:
            query = query.filter(TaskDB.list_id == list_id).order_by(desc(TaskDB.created_at))
        elif view:
            start, end = self._view_window(enum_to_value(view), now or datetime.now())
            if start is not None:
                query = query.filter(TaskDB.schedule_date >= start)
            if end is not None:
                query = query.filter(TaskDB.schedule_date <= end)
            query = query.order_by(TaskDB.schedule_date, desc(TaskDB.created_at))
        else:
            query = query.order_by(desc(TaskDB.created_at))

        return [task_db.to_pydantic() for task_db in query.all()]

    @staticmethod
    def _view_window(view: str, now: datetime) -> Tuple[Optional[datetime], Optional[datetime]]:
        start_today = datetime.combine(now.date(), time.min)
        end_today = datetime.combine(now.date(), time.max)
        if view == TaskView.TODAY.value:
            return start_today, end_today
        if view == TaskView.NEXT_7_DAYS.value:
            return start_today, end_today + timedelta(days=UPCOMING_WINDOW_DAYS)
        if view == TaskView.UPCOMING.value:
            return start_today, None
        return None, None

    def update(self, task_id: str, changes: TaskUpdate) -> Task:
        """Apply a partial update, recording one change log entry per changed field.

        Only fields present in `changes.model_fields_set` are considered.
        Labels, subtasks and reminders are replaced wholesale when provided.

        Raises:
            TaskNotFoundError: if the task does not exist
            ListNotFoundError: if moving to a list that does not exist
        """
        task_db = self._get_db(task_id)
        if not task_db:
            raise TaskNotFoundError(f"Task {task_id} not found")

        provided = changes.model_fields_set
        entries: List[Dict[str, Optional[str]]] = []

        for field in _TRACKED_FIELDS:
            if field not in provided:
                continue
            incoming = getattr(changes, field)
            if incoming is None and field in _NON_NULLABLE_FIELDS:
                continue
            if field == "priority":
                incoming = enum_to_value(incoming)
            current = getattr(task_db, field)
            if _same_value(current, incoming):
                continue

            if field == "list_id":
                self._require_list(incoming)
            if field == "completed":
                task_db.completed_at = datetime.utcnow() if incoming else None
            setattr(task_db, field, incoming)
            entries.append({
                "field": field,
                "previous_value": _format_value(current),
                "new_value": _format_value(incoming),
                "description": f"{field} updated",
            })

        if "label_ids" in provided and changes.label_ids is not None:
            existing_ids = [label_db.id for label_db in task_db.labels]
            new_labels = self._load_labels(changes.label_ids)
            new_ids = [label_db.id for label_db in new_labels]
            if set(existing_ids) != set(new_ids):
                task_db.labels = new_labels
                entries.append({
                    "field": "labels",
                    "previous_value": ",".join(existing_ids),
                    "new_value": ",".join(new_ids),
                    "description": "Labels updated",
                })

        if "subtasks" in provided and changes.subtasks is not None:
            previous_titles = [subtask_db.title for subtask_db in task_db.subtasks]
            existing = {subtask_db.id: subtask_db for subtask_db in task_db.subtasks}
            replacement: List[SubtaskDB] = []
            for index, item in enumerate(changes.subtasks):
                subtask_db = existing.pop(item.id, None) if item.id else None
                if subtask_db is None:
                    subtask_db = SubtaskDB()
                subtask_db.title = item.title
                subtask_db.completed = item.completed
                subtask_db.position = item.position if item.position is not None else index
                replacement.append(subtask_db)
            task_db.subtasks = replacement
            entries.append({
                "field": "subtasks",
                "previous_value": ",".join(previous_titles),
                "new_value": ",".join(item.title for item in changes.subtasks),
                "description": "Subtasks updated",
            })

        if "reminder_dates" in provided and changes.reminder_dates is not None:
            previous = [_format_value(reminder_db.remind_at) for reminder_db in task_db.reminders]
            task_db.reminders = [ReminderDB(remind_at=remind_at) for remind_at in changes.reminder_dates]
            entries.append({
                "field": "reminders",
                "previous_value": ",".join(previous),
                "new_value": ",".join(_format_value(r) for r in changes.reminder_dates),
                "description": "Reminders updated",
            })

        if not entries:
            return task_db.to_pydantic()

        task_db.updated_at = datetime.utcnow()
        self._append_change_logs(task_db, entries)

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task_id}: {[e['field'] for e in entries]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, task_id: str) -> bool:
        """Permanently delete a task (subtasks, reminders and change logs cascade)."""
        task_db = self._get_db(task_id)
        if not task_db:
            return False

        try:
            self.db.delete(task_db)
            self.db.commit()
            logger.info(f"Deleted task {task_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise
