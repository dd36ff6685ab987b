"""Tests for weekplanner.data.db — TaskDB and EventDB over key-value storage."""

import json
import logging
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from weekplanner.adapters.memory_storage import MemoryStorage
from weekplanner.data.db import EventDB, TaskDB
from weekplanner.data.models import TaskCategory, TaskPriority
from weekplanner.ports.storage_port import StorageError, StorageWriteError


class _BrokenStorage(MemoryStorage):
    """Reads and writes both fail."""

    def get_item(self, key):
        raise StorageError("disk unplugged")

    def set_item(self, key, value):
        raise StorageWriteError("disk unplugged")


def _add(task_db, title="Task", **kwargs):
    kwargs.setdefault("category", TaskCategory.WORK)
    kwargs.setdefault("priority", TaskPriority.MEDIUM)
    return task_db.create_scheduled_task(title=title, **kwargs)


class TestTaskDBSeeding:
    def test_first_run_seeds_sample_tasks(self, fresh_task_db, storage):
        tasks = fresh_task_db.list_tasks()
        assert len(tasks) == 6
        assert sum(t.is_backlog for t in tasks) == 3
        # Seed is persisted, so the IDs are stable across reads
        assert [t.id for t in fresh_task_db.list_tasks()] == [t.id for t in tasks]
        assert storage.get_item("week-planner-tasks") is not None

    def test_seeded_backlog_tasks_have_no_start_time(self, fresh_task_db):
        for task in fresh_task_db.get_backlog_tasks():
            assert task.start_time is None

    def test_corrupt_json_reseeds(self, storage):
        storage.set_item("week-planner-tasks", "{not json")
        tasks = TaskDB(storage).list_tasks()
        assert len(tasks) == 6
        json.loads(storage.get_item("week-planner-tasks"))

    def test_non_array_reseeds(self, storage):
        storage.set_item("week-planner-tasks", '{"tasks": []}')
        assert len(TaskDB(storage).list_tasks()) == 6

    def test_invalid_record_dropped_rest_kept(self, task_db, storage):
        good = _add(task_db, "Good")
        payload = json.loads(storage.get_item(task_db.key))
        payload.append({"id": "bad", "title": "", "category": "work"})
        storage.set_item(task_db.key, json.dumps(payload))
        tasks = task_db.list_tasks()
        assert [t.id for t in tasks] == [good.id]

    def test_invalid_record_reported_as_error(self, task_db, storage, caplog):
        payload = [{"id": "bad", "title": "", "category": "work"}]
        storage.set_item(task_db.key, json.dumps(payload))
        with caplog.at_level(logging.ERROR, logger="weekplanner.data.db"):
            assert task_db.list_tasks() == []
        assert "discarded on next save" in caplog.text

    def test_read_fault_returns_seed_without_raising(self):
        tasks = TaskDB(_BrokenStorage()).list_tasks()
        assert len(tasks) == 6

    def test_empty_array_is_not_reseeded(self, task_db):
        assert task_db.list_tasks() == []


class TestTaskDBCreate:
    def test_create_scheduled_task(self, task_db):
        start = datetime(2025, 7, 28, 9, 0)
        task = _add(task_db, "Standup", start_time=start, description="Daily")
        assert task.id
        assert task.title == "Standup"
        assert task.start_time == start
        assert task.is_backlog is False
        assert task.user_id == "local-user"
        assert task.created_at == task.updated_at

    def test_create_scheduled_task_without_start(self, task_db):
        task = _add(task_db, "Someday")
        assert task.start_time is None
        assert task.is_backlog is False

    def test_create_backlog_task(self, task_db):
        task = task_db.create_backlog_task(
            title="Plan holidays", category="personal", priority="low",
        )
        assert task.start_time is None
        assert task.is_backlog is True
        assert task_db.get_backlog_tasks() == [task]

    def test_ids_are_unique(self, task_db):
        ids = {_add(task_db, f"T{i}").id for i in range(20)}
        assert len(ids) == 20

    def test_persisted_round_trip(self, task_db, storage):
        due = datetime(2025, 7, 30, 23, 59, 59)
        task = _add(task_db, "Report", due_date=due, is_favorite=True)
        reloaded = TaskDB(storage).get_task(task.id)
        assert reloaded == task

    def test_blank_title_rejected(self, task_db):
        with pytest.raises(ValidationError):
            _add(task_db, "  ")

    def test_write_fault_raises(self):
        db = TaskDB(MemoryStorage(quota_bytes=10))
        with pytest.raises(StorageWriteError):
            _add(db, "Too big")


class TestTaskDBUpdate:
    def test_update_merges_fields(self, task_db):
        task = _add(task_db, "Old")
        updated = task_db.update_task(task.id, title="New", priority="urgent")
        assert updated.title == "New"
        assert updated.priority is TaskPriority.URGENT
        assert updated.category is TaskCategory.WORK
        assert task_db.get_task(task.id).title == "New"

    def test_update_not_found(self, task_db):
        assert task_db.update_task("missing", title="X") is None

    def test_id_and_created_at_never_change(self, task_db):
        task = _add(task_db, "Keep")
        updated = task_db.update_task(
            task.id, id="hijack", created_at=datetime(2000, 1, 1), title="Kept",
        )
        assert updated.id == task.id
        assert updated.created_at == task.created_at
        assert updated.title == "Kept"

    def test_updated_at_advances(self, task_db):
        task = _add(task_db, "Tick")
        updated = task_db.update_task(task.id, completed=True)
        assert updated.updated_at >= task.updated_at

    def test_updated_at_never_goes_backwards(self, task_db):
        task = _add(task_db, "Clock skew")
        past = task.updated_at - timedelta(hours=1)
        with patch("weekplanner.data.db.local_now", return_value=past):
            updated = task_db.update_task(task.id, title="Still later")
        assert updated.updated_at == task.updated_at

    def test_unknown_field_raises(self, task_db):
        task = _add(task_db, "Typo")
        with pytest.raises(ValueError, match="Unknown field"):
            task_db.update_task(task.id, titel="oops")

    def test_setting_backlog_clears_start_time(self, task_db):
        task = _add(task_db, "Move", start_time=datetime(2025, 7, 28, 9, 0))
        updated = task_db.update_task(task.id, is_backlog=True)
        assert updated.is_backlog is True
        assert updated.start_time is None

    def test_setting_start_time_leaves_backlog(self, task_db):
        task = task_db.create_backlog_task(title="B", category="work", priority="low")
        updated = task_db.update_task(task.id, start_time=datetime(2025, 7, 29, 10, 0))
        assert updated.is_backlog is False

    def test_backlog_and_start_time_together_raise(self, task_db):
        task = _add(task_db, "Both")
        with pytest.raises(ValueError):
            task_db.update_task(task.id, is_backlog=True, start_time=datetime(2025, 7, 29, 10, 0))

    def test_invalid_value_leaves_store_untouched(self, task_db):
        task = _add(task_db, "Valid")
        with pytest.raises(ValidationError):
            task_db.update_task(task.id, priority="whenever")
        assert task_db.get_task(task.id).priority is TaskPriority.MEDIUM


class TestTaskDBBacklogTransitions:
    def test_schedule_backlog_task(self, task_db):
        task = task_db.create_backlog_task(title="Read", category="personal", priority="low")
        start = datetime(2025, 7, 30, 18, 0)
        scheduled = task_db.schedule_backlog_task(task.id, start)
        assert scheduled.start_time == start
        assert scheduled.is_backlog is False
        assert task_db.get_backlog_tasks() == []

    def test_move_task_to_backlog(self, task_db):
        task = _add(task_db, "Gym", start_time=datetime(2025, 7, 28, 7, 0))
        moved = task_db.move_task_to_backlog(task.id)
        assert moved.start_time is None
        assert moved.is_backlog is True

    def test_transitions_on_missing_task(self, task_db):
        assert task_db.schedule_backlog_task("missing", datetime(2025, 7, 28, 9, 0)) is None
        assert task_db.move_task_to_backlog("missing") is None


class TestTaskDBCompletion:
    def test_mark_completed_and_incomplete(self, task_db):
        task = _add(task_db, "Finish")
        assert task_db.mark_completed(task.id).completed is True
        assert task_db.mark_incomplete(task.id).completed is False

    def test_mark_completed_missing(self, task_db):
        assert task_db.mark_completed("missing") is None


class TestTaskDBDelete:
    def test_delete(self, task_db):
        task = _add(task_db, "Gone")
        assert task_db.delete_task(task.id) is True
        assert task_db.get_task(task.id) is None

    def test_delete_missing_returns_false(self, task_db):
        assert task_db.delete_task("missing") is False

    def test_delete_twice(self, task_db):
        task = _add(task_db, "Once")
        task_db.delete_task(task.id)
        assert task_db.delete_task(task.id) is False


class TestTaskDBRange:
    def test_inclusive_bounds(self, task_db):
        start, end = datetime(2025, 7, 28), datetime(2025, 8, 3, 23, 59, 59)
        at_start = _add(task_db, "start", start_time=start)
        at_end = _add(task_db, "end", start_time=end)
        _add(task_db, "before", start_time=start - timedelta(minutes=15))
        _add(task_db, "after", start_time=end + timedelta(seconds=1))
        titles = {t.title for t in task_db.tasks_in_range(start, end)}
        assert titles == {at_start.title, at_end.title}

    def test_unscheduled_tasks_never_returned(self, task_db):
        _add(task_db, "loose")
        task_db.create_backlog_task(title="backlog", category="work", priority="low")
        assert task_db.tasks_in_range(datetime(1970, 1, 1), datetime(2999, 1, 1)) == []


class TestTaskDBClear:
    def test_clear_then_reseed(self, task_db):
        _add(task_db, "Mine")
        task_db.clear()
        titles = [t.title for t in task_db.list_tasks()]
        assert "Mine" not in titles
        assert len(titles) == 6


class TestEventDB:
    def test_first_run_seeds_sample_events(self, storage):
        events = EventDB(storage).list_events()
        assert len(events) == 2
        assert all(e.end_time > e.start_time for e in events)

    def test_create_event(self, event_db):
        event = event_db.create_event(
            title="Dentist",
            start_time=datetime(2025, 7, 29, 16, 0),
            end_time=datetime(2025, 7, 29, 17, 0),
            location="Clinic",
            attendees=["me@example.com"],
        )
        assert event.id
        assert event_db.get_event(event.id) == event

    def test_end_before_start_rejected(self, event_db):
        with pytest.raises(ValidationError):
            event_db.create_event(
                title="Backwards",
                start_time=datetime(2025, 7, 29, 17, 0),
                end_time=datetime(2025, 7, 29, 16, 0),
            )
        assert event_db.list_events() == []

    def test_update_event(self, event_db):
        event = event_db.create_event(
            title="Call", start_time=datetime(2025, 7, 29, 10, 0),
            end_time=datetime(2025, 7, 29, 10, 30),
        )
        updated = event_db.update_event(event.id, location="Zoom", id="nope")
        assert updated.id == event.id
        assert updated.location == "Zoom"
        assert updated.created_at == event.created_at
        assert updated.updated_at >= event.updated_at

    def test_update_cannot_break_time_order(self, event_db):
        event = event_db.create_event(
            title="Call", start_time=datetime(2025, 7, 29, 10, 0),
            end_time=datetime(2025, 7, 29, 10, 30),
        )
        with pytest.raises(ValidationError):
            event_db.update_event(event.id, end_time=datetime(2025, 7, 29, 9, 0))

    def test_update_missing(self, event_db):
        assert event_db.update_event("missing", title="X") is None

    def test_delete_event(self, event_db):
        event = event_db.create_event(
            title="Call", start_time=datetime(2025, 7, 29, 10, 0),
            end_time=datetime(2025, 7, 29, 10, 30),
        )
        assert event_db.delete_event(event.id) is True
        assert event_db.delete_event(event.id) is False

    def test_events_in_range_inclusive(self, event_db):
        start, end = datetime(2025, 7, 28), datetime(2025, 8, 3, 23, 59, 59)
        event_db.create_event(title="in", start_time=start, end_time=start + timedelta(hours=1))
        event_db.create_event(title="edge", start_time=end, end_time=end + timedelta(hours=1))
        event_db.create_event(
            title="out", start_time=start - timedelta(hours=2), end_time=start - timedelta(hours=1),
        )
        titles = {e.title for e in event_db.events_in_range(start, end)}
        assert titles == {"in", "edge"}
