"""Due-date classifier — pure business logic.

Maps a task's due date to one of four urgency states, with the short
Spanish label and the style hint the UI renders next to the task.

No I/O: this module only transforms data.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Iterable

from weekplanner.core.datetime_utils import local_now

if TYPE_CHECKING:
    from weekplanner.data.models import Task

DUE_SOON_DAYS = 3

_MONTHS_ES = ("ene", "feb", "mar", "abr", "may", "jun",
              "jul", "ago", "sept", "oct", "nov", "dic")


class DueDateStatus(str, Enum):
    OVERDUE = "overdue"
    DUE_SOON = "due_soon"  # 0..3 days left
    ON_TIME = "on_time"
    NO_DUE_DATE = "no_due_date"


@dataclass(frozen=True)
class StyleHint:
    """Presentation hint: text color, background color, icon."""

    color: str = ""
    bg_color: str = ""
    icon: str = ""


STYLE_OVERDUE = StyleHint("text-red-700", "bg-red-100", "⚠️")
STYLE_DUE_TODAY = StyleHint("text-orange-700", "bg-orange-100", "🔥")
STYLE_DUE_SOON = StyleHint("text-yellow-700", "bg-yellow-100", "⏰")
STYLE_ON_TIME = StyleHint("text-blue-700", "bg-blue-100", "📅")
STYLE_NONE = StyleHint()


@dataclass(frozen=True)
class DueDateInfo:
    """Urgency of a single task relative to today."""

    status: DueDateStatus
    days_until_due: int = 0
    message: str = ""
    style: StyleHint = field(default_factory=StyleHint)


def classify(task: Task, today: date | None = None) -> DueDateInfo:
    """Classify a task's due date.

    Completed tasks and tasks without a due date are NO_DUE_DATE. Otherwise
    the whole-day difference between the due date and today decides:
    negative is OVERDUE, 0..3 is DUE_SOON, anything later is ON_TIME. The
    clock time on either side is ignored.
    """
    if task.due_date is None or task.completed:
        return DueDateInfo(status=DueDateStatus.NO_DUE_DATE, style=STYLE_NONE)

    if today is None:
        today = local_now().date()
    days = (task.due_date.date() - today).days

    if days < 0:
        overdue = abs(days)
        message = "Vencida ayer" if overdue == 1 else f"Vencida hace {overdue}d"
        return DueDateInfo(DueDateStatus.OVERDUE, days, message, STYLE_OVERDUE)

    if days == 0:
        return DueDateInfo(DueDateStatus.DUE_SOON, 0, "Vence hoy", STYLE_DUE_TODAY)

    if days <= DUE_SOON_DAYS:
        message = "Vence mañana" if days == 1 else f"Vence en {days}d"
        return DueDateInfo(DueDateStatus.DUE_SOON, days, message, STYLE_DUE_SOON)

    return DueDateInfo(DueDateStatus.ON_TIME, days, f"Vence en {days}d", STYLE_ON_TIME)


def urgent_tasks(
    tasks: Iterable[Task], today: date | None = None,
) -> list[tuple[Task, DueDateInfo]]:
    """Overdue and due-soon tasks, most urgent first."""
    if today is None:
        today = local_now().date()

    urgent = []
    for task in tasks:
        if task.completed or task.due_date is None:
            continue
        info = classify(task, today=today)
        if info.status in (DueDateStatus.OVERDUE, DueDateStatus.DUE_SOON):
            urgent.append((task, info))
    urgent.sort(key=lambda pair: pair[1].days_until_due)
    return urgent


def format_due_date(due: datetime | date) -> str:
    """Short Spanish date, e.g. "28 jul 2025"."""
    return f"{due.day} {_MONTHS_ES[due.month - 1]} {due.year}"
