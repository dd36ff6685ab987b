"""
Week Planner — Data Models.

Tasks, events and frequent-task templates persist as JSON arrays in the
key-value store. Field names are snake_case in Python and camelCase on disk
("startTime", "isBacklog", ...), which is the layout the planner has always
stored, so older exports load unchanged.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from weekplanner.core.datetime_utils import to_local_naive


class _CaseInsensitiveEnum(str, Enum):
    """String enum that accepts "WORK", "work" or "Work" alike."""

    @classmethod
    def _missing_(cls, value: object):
        if isinstance(value, str):
            needle = value.strip().lower()
            for member in cls:
                if member.value == needle:
                    return member
        return None


class TaskCategory(_CaseInsensitiveEnum):
    WORK = "work"
    PERSONAL = "personal"
    HEALTH = "health"
    EDUCATION = "education"
    SOCIAL = "social"
    OTHER = "other"


class TaskPriority(_CaseInsensitiveEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

    @property
    def rank(self) -> int:
        """1 (low) .. 4 (urgent), for ordering."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    TaskPriority.LOW: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.HIGH: 3,
    TaskPriority.URGENT: 4,
}


def _lowered(v: object) -> object:
    if isinstance(v, str):
        return v.strip().lower()
    return v


# Enum fields shared by records and forms; any casing is accepted on input.
CategoryField = Annotated[TaskCategory, BeforeValidator(_lowered)]
PriorityField = Annotated[TaskPriority, BeforeValidator(_lowered)]


class _Record(BaseModel):
    """Shared config: camelCase JSON aliases, local-naive timestamps."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @field_validator("*", mode="after")
    @classmethod
    def _localize(cls, v: object) -> object:
        if isinstance(v, datetime):
            return to_local_naive(v)
        return v

    @field_validator("title", mode="after", check_fields=False)
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be empty")
        return v


class Task(_Record):
    """A to-do item, either placed on the calendar or waiting in the backlog.

    JSON example:
    {
        "id": "lx3k9a0f2b",
        "title": "Code review",
        "startTime": "2025-07-28T09:00:00",
        "dueDate": "2025-07-30T23:59:59",
        "category": "work",
        "priority": "high",
        "completed": false,
        "isBacklog": false,
        "isFavorite": false,
        "userId": "local-user",
        "createdAt": "2025-07-27T18:02:11",
        "updatedAt": "2025-07-27T18:02:11"
    }
    """

    id: str
    title: str
    description: str | None = None
    start_time: datetime | None = None   # None → unscheduled
    due_date: datetime | None = None     # date-only, stored at 23:59:59
    category: CategoryField
    priority: PriorityField
    completed: bool = False
    is_backlog: bool = False
    is_favorite: bool = False
    user_id: str
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def _backlog_has_no_start(self) -> Task:
        if self.is_backlog and self.start_time is not None:
            raise ValueError("a backlog task cannot have a start_time")
        return self


class Event(_Record):
    """A calendar block with a fixed start and end."""

    id: str
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    location: str | None = None
    attendees: list[str] | None = None
    user_id: str
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def _ends_after_start(self) -> Event:
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class FrequentTask(_Record):
    """A reusable task template, ranked by how often it is picked."""

    id: str
    title: str
    description: str | None = None
    category: CategoryField
    priority: PriorityField
    estimated_duration: int | None = None  # minutes
    usage_count: int = 0
    last_used: datetime
    created_at: datetime
    tags: list[str] | None = None
