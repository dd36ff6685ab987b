"""
Week Planner — Task and Event storage.

Each collection lives under one key of the key-value store as a single JSON
array: every operation loads the whole array, changes it in memory and
writes it back. Reads never fail: a missing or unreadable blob is replaced by
the sample dataset. Writes made by a mutation raise StorageWriteError when
the backend rejects them.
"""

from __future__ import annotations

import json
import logging
import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ValidationError

from weekplanner.config import settings
from weekplanner.core.datetime_utils import local_now, to_local_naive
from weekplanner.data.models import Event, Task, TaskCategory, TaskPriority
from weekplanner.data.seed import sample_events, sample_tasks
from weekplanner.ports.storage_port import (
    KeyValueStorage,
    StorageError,
    StorageWriteError,
)

logger = logging.getLogger(__name__)

_IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


def generate_id() -> str:
    return uuid.uuid4().hex


class JSONCollectionDB:
    """One collection of pydantic records serialized under a single key."""

    key_suffix = ""
    model: type[BaseModel] = BaseModel

    def __init__(
        self,
        storage: KeyValueStorage | None = None,
        namespace: str | None = None,
    ) -> None:
        if storage is None:
            from weekplanner.adapters.storage_factory import create_storage
            storage = create_storage()
        if namespace is None:
            namespace = settings.STORAGE_NAMESPACE

        self._storage = storage
        self.key = f"{namespace}-{self.key_suffix}"

    def _seed(self) -> list[Any]:
        raise NotImplementedError

    def _load(self) -> list[Any]:
        """Read and validate the collection, reseeding when unusable.

        Entries that fail validation are left out of the result. They stay in
        the stored blob only until the next mutation rewrites it, so they are
        reported at error level as records about to be lost.
        """
        try:
            raw = self._storage.get_item(self.key)
        except StorageError as exc:
            logger.error("Failed to read %s: %s", self.key, exc)
            return self._reseed()

        if raw is None:
            logger.info("No data under %s, seeding sample data", self.key)
            return self._reseed()

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Corrupt data under %s (%s), reseeding", self.key, exc)
            return self._reseed()

        if not isinstance(payload, list):
            logger.warning(
                "Expected a JSON array under %s, got %s; reseeding",
                self.key, type(payload).__name__,
            )
            return self._reseed()

        records = []
        for index, entry in enumerate(payload):
            try:
                records.append(self.model.model_validate(entry))
            except ValidationError as exc:
                logger.error(
                    "Invalid record #%d under %s will be discarded on next save: %s",
                    index, self.key, exc.errors()[0]["msg"],
                )
        return records

    def _reseed(self) -> list[Any]:
        records = self._seed()
        try:
            self._write(records)
        except StorageError as exc:
            logger.error("Failed to persist seed data under %s: %s", self.key, exc)
        return records

    def _write(self, records: list[Any]) -> None:
        payload = [
            r.model_dump(mode="json", by_alias=True, exclude_none=True)
            for r in records
        ]
        self._storage.set_item(self.key, json.dumps(payload, ensure_ascii=False))

    def _save(self, records: list[Any]) -> None:
        """Persist a mutated collection; failures surface as StorageWriteError."""
        try:
            self._write(records)
        except StorageWriteError as exc:
            logger.error("Failed to save %s: %s", self.key, exc)
            raise
        except StorageError as exc:
            logger.error("Failed to save %s: %s", self.key, exc)
            raise StorageWriteError(str(exc)) from exc

    @staticmethod
    def _index_of(records: list[Any], record_id: str) -> int | None:
        for i, record in enumerate(records):
            if record.id == record_id:
                return i
        return None

    def _clean_updates(self, updates: dict[str, Any]) -> dict[str, Any]:
        """Drop immutable fields, reject names the model doesn't have."""
        cleaned = dict(updates)
        for name in _IMMUTABLE_FIELDS & cleaned.keys():
            logger.warning("Ignoring update to immutable field %r under %s", name, self.key)
            del cleaned[name]
        unknown = sorted(set(cleaned) - set(self.model.model_fields))
        if unknown:
            raise ValueError(f"Unknown field(s) for {self.model.__name__}: {', '.join(unknown)}")
        return cleaned

    def _get(self, record_id: str) -> Any | None:
        records = self._load()
        index = self._index_of(records, record_id)
        if index is None:
            return None
        return records[index]

    def _insert(self, record: Any) -> Any:
        records = self._load()
        records.append(record)
        self._save(records)
        return record

    def _update(self, record_id: str, updates: dict[str, Any]) -> Any | None:
        records = self._load()
        index = self._index_of(records, record_id)
        if index is None:
            return None

        current = records[index]
        merged = current.model_dump() | updates
        merged["updated_at"] = max(local_now(), current.updated_at)
        updated = self.model.model_validate(merged)

        records[index] = updated
        self._save(records)
        return updated

    def _delete(self, record_id: str) -> bool:
        records = self._load()
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            return False
        self._save(remaining)
        return True

    def clear(self) -> None:
        """Remove the stored collection; the next read reseeds it."""
        try:
            self._storage.remove_item(self.key)
        except StorageError as exc:
            logger.error("Failed to clear %s: %s", self.key, exc)
            raise StorageWriteError(str(exc)) from exc
        logger.info("Cleared %s", self.key)


class TaskDB(JSONCollectionDB):
    """Key-value backed storage for tasks, scheduled and backlog."""

    key_suffix = "tasks"
    model = Task

    def _seed(self) -> list[Task]:
        return sample_tasks(local_now(), settings.DEFAULT_USER_ID, generate_id)

    def list_tasks(self) -> list[Task]:
        """Return every task, seeding the sample set on first run."""
        return self._load()

    def get_task(self, task_id: str) -> Task | None:
        return self._get(task_id)

    def get_backlog_tasks(self) -> list[Task]:
        return [t for t in self._load() if t.is_backlog]

    def create_scheduled_task(
        self,
        title: str,
        category: TaskCategory | str,
        priority: TaskPriority | str,
        description: str | None = None,
        start_time: datetime | None = None,
        due_date: datetime | None = None,
        completed: bool = False,
        is_favorite: bool = False,
        user_id: str | None = None,
    ) -> Task:
        """Insert a task meant for the calendar grid.

        start_time may still be None: the task then shows in neither the
        grid nor the backlog until it is scheduled or moved.
        """
        now = local_now()
        task = Task(
            id=generate_id(),
            title=title,
            description=description,
            start_time=start_time,
            due_date=due_date,
            category=category,
            priority=priority,
            completed=completed,
            is_backlog=False,
            is_favorite=is_favorite,
            user_id=user_id or settings.DEFAULT_USER_ID,
            created_at=now,
            updated_at=now,
        )
        self._insert(task)
        logger.info("Task added: %s '%s' at %s", task.id, task.title, task.start_time)
        return task

    def create_backlog_task(
        self,
        title: str,
        category: TaskCategory | str,
        priority: TaskPriority | str,
        description: str | None = None,
        due_date: datetime | None = None,
        completed: bool = False,
        is_favorite: bool = False,
        user_id: str | None = None,
    ) -> Task:
        """Insert an unscheduled task straight into the backlog."""
        now = local_now()
        task = Task(
            id=generate_id(),
            title=title,
            description=description,
            start_time=None,
            due_date=due_date,
            category=category,
            priority=priority,
            completed=completed,
            is_backlog=True,
            is_favorite=is_favorite,
            user_id=user_id or settings.DEFAULT_USER_ID,
            created_at=now,
            updated_at=now,
        )
        self._insert(task)
        logger.info("Backlog task added: %s '%s'", task.id, task.title)
        return task

    def update_task(self, task_id: str, **updates: Any) -> Task | None:
        """Merge updates into a task and refresh updated_at.

        id and created_at are never changed. Setting is_backlog=True clears
        start_time; setting a start_time takes the task out of the backlog.

        Raises:
            ValueError: unknown field names, or is_backlog=True together
                with a start_time.
        """
        updates = self._clean_updates(updates)

        if updates.get("is_backlog") is True:
            if updates.get("start_time") is not None:
                raise ValueError("Cannot move a task to the backlog and schedule it at once")
            updates["start_time"] = None
        elif updates.get("start_time") is not None:
            updates["is_backlog"] = False

        task = self._update(task_id, updates)
        if task is None:
            logger.info("Task %s not found for update", task_id)
            return None
        logger.info("Task %s updated: %s", task_id, ", ".join(sorted(updates)))
        return task

    def delete_task(self, task_id: str) -> bool:
        """Permanently delete a task by ID."""
        deleted = self._delete(task_id)
        if deleted:
            logger.info("Task %s deleted", task_id)
        return deleted

    def schedule_backlog_task(self, task_id: str, start_time: datetime) -> Task | None:
        """Place a backlog task on the calendar."""
        return self.update_task(task_id, start_time=start_time, is_backlog=False)

    def move_task_to_backlog(self, task_id: str) -> Task | None:
        """Take a task off the calendar and park it in the backlog."""
        return self.update_task(task_id, start_time=None, is_backlog=True)

    def mark_completed(self, task_id: str) -> Task | None:
        return self.update_task(task_id, completed=True)

    def mark_incomplete(self, task_id: str) -> Task | None:
        return self.update_task(task_id, completed=False)

    def tasks_in_range(self, start: datetime, end: datetime) -> list[Task]:
        """Tasks whose start_time falls in [start, end]; unscheduled ones never do."""
        start, end = to_local_naive(start), to_local_naive(end)
        return [
            t for t in self._load()
            if t.start_time is not None and start <= t.start_time <= end
        ]


class EventDB(JSONCollectionDB):
    """Key-value backed storage for calendar events."""

    key_suffix = "events"
    model = Event

    def _seed(self) -> list[Event]:
        return sample_events(local_now(), settings.DEFAULT_USER_ID, generate_id)

    def list_events(self) -> list[Event]:
        """Return every event, seeding the sample set on first run."""
        return self._load()

    def get_event(self, event_id: str) -> Event | None:
        return self._get(event_id)

    def create_event(
        self,
        title: str,
        start_time: datetime,
        end_time: datetime,
        description: str | None = None,
        location: str | None = None,
        attendees: list[str] | None = None,
        user_id: str | None = None,
    ) -> Event:
        """Insert a new event. end_time must be after start_time."""
        now = local_now()
        event = Event(
            id=generate_id(),
            title=title,
            description=description,
            start_time=start_time,
            end_time=end_time,
            location=location,
            attendees=attendees,
            user_id=user_id or settings.DEFAULT_USER_ID,
            created_at=now,
            updated_at=now,
        )
        self._insert(event)
        logger.info(
            "Event added: %s '%s' %s–%s",
            event.id, event.title, event.start_time, event.end_time,
        )
        return event

    def update_event(self, event_id: str, **updates: Any) -> Event | None:
        """Merge updates into an event and refresh updated_at."""
        updates = self._clean_updates(updates)
        event = self._update(event_id, updates)
        if event is None:
            logger.info("Event %s not found for update", event_id)
            return None
        logger.info("Event %s updated: %s", event_id, ", ".join(sorted(updates)))
        return event

    def delete_event(self, event_id: str) -> bool:
        """Permanently delete an event by ID."""
        deleted = self._delete(event_id)
        if deleted:
            logger.info("Event %s deleted", event_id)
        return deleted

    def events_in_range(self, start: datetime, end: datetime) -> list[Event]:
        """Events whose start_time falls in [start, end]."""
        start, end = to_local_naive(start), to_local_naive(end)
        return [e for e in self._load() if start <= e.start_time <= end]
