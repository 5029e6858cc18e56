"""Tests for the quick-add flow (parse -> label lookup -> task creation)."""

import pytest
from datetime import datetime

from taskplanner.database.list_repository import ListNotFoundError
from taskplanner.models.catalog import Label, ListCreate
from taskplanner.models.task import Priority
from taskplanner.parsing.quick_add import (
    QuickAddError,
    draft_to_task_create,
    quick_add,
    resolve_label_ids,
)
from taskplanner.parsing.task_parser import ParsedTaskDraft


def _label(label_id: str, name: str) -> Label:
    now = datetime(2025, 1, 1)
    return Label(id=label_id, name=name, created_at=now, updated_at=now)


class TestResolveLabelIds:
    """Label name to ID mapping."""

    def test_case_insensitive_match_and_unknown_names_dropped(self):
        labels = [_label("l1", "Health"), _label("l2", "work")]
        assert resolve_label_ids(["health", "WORK", "errands"], labels) == ["l1", "l2"]

    def test_order_follows_names_without_duplicates(self):
        labels = [_label("l1", "Health"), _label("l2", "work")]
        assert resolve_label_ids(["work", "health", "Work"], labels) == ["l2", "l1"]

    def test_none_names(self):
        assert resolve_label_ids(None, [_label("l1", "Health")]) == []


class TestDraftToTaskCreate:
    """Mapping a draft onto a creation request."""

    def test_missing_priority_defaults_to_none(self):
        request = draft_to_task_create(ParsedTaskDraft(title="Read"), "list-1", [])
        assert request.priority == Priority.NONE
        assert request.list_id == "list-1"
        assert request.label_ids == []

    def test_fields_are_forwarded(self):
        deadline = datetime(2025, 1, 17, 9, 30)
        draft = ParsedTaskDraft(
            title="Report",
            deadline=deadline,
            priority=Priority.HIGH,
            estimated_minutes=45,
            labels=["work"],
        )
        request = draft_to_task_create(draft, "list-1", [_label("l2", "Work")])
        assert request.title == "Report"
        assert request.deadline == deadline
        assert request.schedule_date is None
        assert request.priority == Priority.HIGH
        assert request.estimated_minutes == 45
        assert request.label_ids == ["l2"]


class TestQuickAdd:
    """End-to-end quick add against the database."""

    def test_creates_task_in_default_list(self, db_session, now, health_label):
        draft, task = quick_add(db_session, "Call dentist tomorrow at 2pm urgent #health #nope", now=now)

        assert draft.labels == ["health", "nope"]
        assert task.title == "Call dentist"
        assert task.priority == Priority.HIGH
        assert task.schedule_date == datetime(2025, 1, 16, 14, 0)
        assert task.task_list.is_default is True
        assert [label.id for label in task.labels] == [health_label.id]

    def test_explicit_list(self, db_session, now, list_repository):
        work = list_repository.create(ListCreate(name="Work"))
        _, task = quick_add(db_session, "Submit report by friday 2h", list_id=work.id, now=now)
        assert task.list_id == work.id
        assert task.deadline == datetime(2025, 1, 17, 9, 30)
        assert task.estimated_minutes == 120

    def test_unknown_list(self, db_session, now):
        with pytest.raises(ListNotFoundError):
            quick_add(db_session, "Anything", list_id="missing", now=now)

    def test_empty_title_is_rejected(self, db_session, now, task_repository):
        with pytest.raises(QuickAddError):
            quick_add(db_session, "tomorrow urgent #health", now=now)
        assert task_repository.get_all() == []

    def test_zero_minute_estimate_is_kept(self, db_session, now):
        draft, task = quick_add(db_session, "Ping team 0 min", now=now)
        assert draft.estimated_minutes == 0
        assert task.estimated_minutes == 0
        assert task.title == "Ping team"

    def test_labels_are_looked_up_by_name(self, db_session, now, health_label, work_label):
        _, task = quick_add(db_session, "Plan week #WORK #Health #work #unknown", now=now)
        assert {label.id for label in task.labels} == {health_label.id, work_label.id}
        assert len(task.labels) == 2
