"""
Week Planner — UI-Agnostic Planner Service.

Service layer the screens call into: turn form strings into normalized
tasks and events, keep the frequent-task registry in step with favorite
tasks, and build the derived views (weekly agenda, backlog list, due-soon
alerts).

The stores are injected; nothing here touches storage directly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING

from pydantic import BaseModel

from weekplanner.config import settings
from weekplanner.core.datetime_utils import (
    QUARTER_HOUR,
    compute_end_time,
    end_of_week,
    format_local,
    local_now,
    parse_due_date,
    parse_local,
    parse_local_rounded,
    start_of_week,
    week_days,
)
from weekplanner.core.due_date import DueDateInfo, urgent_tasks
from weekplanner.data.models import (
    CategoryField,
    Event,
    PriorityField,
    Task,
    TaskCategory,
    TaskPriority,
)

if TYPE_CHECKING:
    from weekplanner.data.db import EventDB, TaskDB
    from weekplanner.data.frequent_tasks import FrequentTaskRegistry
    from weekplanner.ports.storage_port import KeyValueStorage

logger = logging.getLogger(__name__)

BACKLOG_SORTS = ("priority", "category", "created")


# ---------------------------------------------------------------------------
# Form contracts — what the create/edit screens hand over
# ---------------------------------------------------------------------------

class TaskForm(BaseModel):
    """Raw values from the task create/edit form.

    JSON example:
    {
        "title": "Dentist",
        "start_time": "2025-07-29T16:05",
        "due_date": "2025-07-30",
        "category": "health",
        "priority": "high",
        "is_favorite": true
    }
    """
    title: str
    description: str = ""
    start_time: str = ""     # YYYY-MM-DDTHH:MM, "" when unscheduled
    due_date: str = ""       # YYYY-MM-DD, "" for none
    category: CategoryField = TaskCategory.PERSONAL
    priority: PriorityField = TaskPriority.MEDIUM
    completed: bool = False
    is_backlog: bool = False
    is_favorite: bool = False


class EventForm(BaseModel):
    """Raw values from the event create/edit form."""
    title: str
    description: str = ""
    start_time: str          # YYYY-MM-DDTHH:MM
    end_time: str = ""       # "" → start + default duration
    location: str = ""
    attendees: list[str] = []


# ---------------------------------------------------------------------------
# View types
# ---------------------------------------------------------------------------

@dataclass
class WeekAgenda:
    """Everything on the calendar grid for one Monday-to-Sunday week."""

    start: datetime
    end: datetime
    days: list[date]
    tasks: list[Task] = field(default_factory=list)
    events: list[Event] = field(default_factory=list)

    def tasks_on(self, day: date) -> list[Task]:
        return sorted(
            (t for t in self.tasks if t.start_time is not None and t.start_time.date() == day),
            key=lambda t: t.start_time,
        )

    def events_on(self, day: date) -> list[Event]:
        return sorted(
            (e for e in self.events if e.start_time.date() == day),
            key=lambda e: e.start_time,
        )


def _clean_text(value: str) -> str | None:
    value = value.strip()
    return value or None


class PlannerService:
    """Orchestrates the task, event and frequent-task stores."""

    def __init__(
        self,
        tasks: TaskDB,
        events: EventDB,
        frequent: FrequentTaskRegistry,
    ) -> None:
        self.tasks = tasks
        self.events = events
        self.frequent = frequent

    # -- tasks ---------------------------------------------------------------

    def create_task(self, form: TaskForm) -> Task:
        """Create a scheduled or backlog task from form values, then sync favorites."""
        title = form.title.strip()
        description = _clean_text(form.description)
        due_date = parse_due_date(form.due_date)

        if form.is_backlog:
            task = self.tasks.create_backlog_task(
                title=title,
                description=description,
                due_date=due_date,
                category=form.category,
                priority=form.priority,
                completed=form.completed,
                is_favorite=form.is_favorite,
            )
        else:
            start_time = parse_local_rounded(form.start_time) if form.start_time else None
            task = self.tasks.create_scheduled_task(
                title=title,
                description=description,
                start_time=start_time,
                due_date=due_date,
                category=form.category,
                priority=form.priority,
                completed=form.completed,
                is_favorite=form.is_favorite,
            )

        self.sync_favorite(
            title, description, form.category, form.priority,
            is_favorite=form.is_favorite, remove_when_unfavorited=False,
        )
        return task

    def edit_task(self, task_id: str, form: TaskForm) -> Task | None:
        """Apply an edit form to an existing task, then sync favorites.

        Returns None (and leaves the registry alone) if the task is gone.
        """
        title = form.title.strip()
        description = _clean_text(form.description)

        if form.is_backlog or not form.start_time:
            start_time = None
        else:
            start_time = parse_local_rounded(form.start_time)

        task = self.tasks.update_task(
            task_id,
            title=title,
            description=description,
            category=form.category,
            priority=form.priority,
            completed=form.completed,
            is_backlog=form.is_backlog,
            is_favorite=form.is_favorite,
            start_time=start_time,
            due_date=parse_due_date(form.due_date),
        )
        if task is None:
            return None

        self.sync_favorite(
            title, description, form.category, form.priority,
            is_favorite=form.is_favorite, remove_when_unfavorited=True,
        )
        return task

    def sync_favorite(
        self,
        title: str,
        description: str | None,
        category: TaskCategory,
        priority: TaskPriority,
        is_favorite: bool,
        remove_when_unfavorited: bool,
    ) -> None:
        """Mirror a favorite task into the frequent-task registry by title.

        Favorite: bump the matching template, or add one. Not favorite (edit
        flow only): drop the matching template if there is one.
        """
        existing = self.frequent.find_by_title(title)

        if is_favorite:
            if existing is not None:
                self.frequent.use(existing.id)
            else:
                self.frequent.add(
                    title=title.strip(),
                    description=description,
                    category=category,
                    priority=priority,
                )
        elif remove_when_unfavorited and existing is not None:
            self.frequent.remove(existing.id)
            logger.info("Unfavorited '%s', template %s removed", title, existing.id)

    # -- events --------------------------------------------------------------

    def _event_times(self, form: EventForm) -> tuple[datetime, datetime]:
        start = parse_local_rounded(form.start_time)
        if form.end_time:
            return start, parse_local_rounded(form.end_time)

        end = parse_local(compute_end_time(
            format_local(start), settings.DEFAULT_EVENT_DURATION_MINUTES,
        ))
        # A short duration can round back onto the start
        if end <= start:
            end = start + timedelta(minutes=QUARTER_HOUR)
        return start, end

    def create_event(self, form: EventForm) -> Event:
        """Create an event; a blank end time defaults to start + duration."""
        start, end = self._event_times(form)
        return self.events.create_event(
            title=form.title.strip(),
            description=_clean_text(form.description),
            start_time=start,
            end_time=end,
            location=_clean_text(form.location),
            attendees=[a.strip() for a in form.attendees if a.strip()] or None,
        )

    def edit_event(self, event_id: str, form: EventForm) -> Event | None:
        start, end = self._event_times(form)
        return self.events.update_event(
            event_id,
            title=form.title.strip(),
            description=_clean_text(form.description),
            start_time=start,
            end_time=end,
            location=_clean_text(form.location),
            attendees=[a.strip() for a in form.attendees if a.strip()] or None,
        )

    # -- views ---------------------------------------------------------------

    def week_agenda(self, reference: datetime | date | None = None) -> WeekAgenda:
        """Tasks and events of the Monday-to-Sunday week containing reference."""
        if reference is None:
            reference = local_now()
        start, end = start_of_week(reference), end_of_week(reference)
        return WeekAgenda(
            start=start,
            end=end,
            days=week_days(start),
            tasks=self.tasks.tasks_in_range(start, end),
            events=self.events.events_in_range(start, end),
        )

    def due_soon_alerts(self, today: date | None = None) -> list[tuple[Task, DueDateInfo]]:
        """Overdue and due-soon tasks across the whole collection."""
        return urgent_tasks(self.tasks.list_tasks(), today=today)

    def backlog_view(
        self,
        search: str = "",
        category: TaskCategory | str | None = None,
        priority: TaskPriority | str | None = None,
        show_completed: bool = False,
        sort_by: str = "priority",
    ) -> list[Task]:
        """Filtered and sorted backlog.

        Args:
            search: Case-insensitive substring of title or description.
            category: Only this category (None = all).
            priority: Only this priority (None = all).
            show_completed: Include completed tasks.
            sort_by: "priority" (urgent first), "category" (by name) or
                "created" (newest first).
        """
        if sort_by not in BACKLOG_SORTS:
            raise ValueError(f"sort_by must be one of {BACKLOG_SORTS}, got {sort_by!r}")

        term = search.strip().lower()
        wanted_category = TaskCategory(category) if category is not None else None
        wanted_priority = TaskPriority(priority) if priority is not None else None

        def _keep(task: Task) -> bool:
            if term and term not in task.title.lower() and term not in (task.description or "").lower():
                return False
            if wanted_category is not None and task.category != wanted_category:
                return False
            if wanted_priority is not None and task.priority != wanted_priority:
                return False
            return show_completed or not task.completed

        backlog = [t for t in self.tasks.get_backlog_tasks() if _keep(t)]

        if sort_by == "priority":
            backlog.sort(key=lambda t: t.priority.rank, reverse=True)
        elif sort_by == "category":
            backlog.sort(key=lambda t: t.category.value)
        else:
            backlog.sort(key=lambda t: t.created_at, reverse=True)
        return backlog


def build_planner(
    storage: KeyValueStorage | None = None,
    namespace: str | None = None,
) -> PlannerService:
    """Wire the three stores to one storage adapter (configured one by default)."""
    from weekplanner.data.db import EventDB, TaskDB
    from weekplanner.data.frequent_tasks import FrequentTaskRegistry

    if storage is None:
        from weekplanner.adapters.storage_factory import create_storage
        storage = create_storage()

    return PlannerService(
        tasks=TaskDB(storage, namespace=namespace),
        events=EventDB(storage, namespace=namespace),
        frequent=FrequentTaskRegistry(storage, namespace=namespace),
    )
