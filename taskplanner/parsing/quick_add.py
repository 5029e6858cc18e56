"""Quick-add flow: free text -> ParsedTaskDraft -> persisted task.

The parser only produces label *names*; this module maps them onto the
label catalog (case-insensitive, unknown names dropped) and fills in the
defaults a creation request needs.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from taskplanner.database.label_repository import LabelRepository
from taskplanner.database.list_repository import ListNotFoundError, ListRepository
from taskplanner.database.repository import TaskRepository
from taskplanner.models.catalog import Label
from taskplanner.models.task import Priority, Task, TaskCreate
from taskplanner.parsing.task_parser import ParsedTaskDraft, parse_task_text

logger = logging.getLogger(__name__)


class QuickAddError(ValueError):
    """Raised when quick-add text does not yield a usable task."""


def resolve_label_ids(names: Optional[Iterable[str]], labels: Sequence[Label]) -> List[str]:
    """Map label names to label IDs by case-insensitive name.

    Names with no matching label are dropped. Output follows the order of
    `names`, without duplicates.
    """
    by_name = {}
    for label in labels:
        by_name.setdefault(label.name.lower(), label.id)

    seen = set()
    out: List[str] = []
    for name in names or []:
        label_id = by_name.get(name.lower())
        if label_id is None:
            logger.debug(f"No label named {name!r}; dropping it")
            continue
        if label_id not in seen:
            seen.add(label_id)
            out.append(label_id)
    return out


def draft_to_task_create(draft: ParsedTaskDraft, list_id: str, labels: Sequence[Label]) -> TaskCreate:
    """Build a creation request from a draft; a missing priority becomes 'none'."""
    return TaskCreate(
        list_id=list_id,
        title=draft.title,
        schedule_date=draft.schedule_date,
        deadline=draft.deadline,
        estimated_minutes=draft.estimated_minutes,
        priority=draft.priority or Priority.NONE,
        label_ids=resolve_label_ids(draft.labels, labels),
    )


def quick_add(
    db: Session,
    text: str,
    *,
    list_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[ParsedTaskDraft, Task]:
    """Parse `text` and create the resulting task.

    The task goes to `list_id` when given, otherwise to the default list
    (created on demand).

    Raises:
        QuickAddError: if nothing is left for a title after parsing
        ListNotFoundError: if `list_id` does not exist
    """
    draft = parse_task_text(text, now=now)
    if not draft.title:
        raise QuickAddError("Could not derive a task title from the text")

    lists = ListRepository(db)
    if list_id:
        task_list = lists.get(list_id)
        if task_list is None:
            raise ListNotFoundError(f"List {list_id} not found")
    else:
        task_list = lists.ensure_default()

    label_repo = LabelRepository(db)
    matched = [label_repo.get_by_name(name) for name in draft.labels or []]
    request = draft_to_task_create(draft, task_list.id, [label for label in matched if label is not None])
    task = TaskRepository(db).create(request)
    logger.info(f"Quick-added task {task.id} to list {task_list.id}")
    return draft, task
