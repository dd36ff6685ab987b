"""
Week Planner — Entry Point.

`python main.py` prints this week's agenda and the tasks that need attention,
read from the configured storage backend.
"""

import logging

from weekplanner.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from weekplanner.core.datetime_utils import format_local
from weekplanner.core.due_date import format_due_date
from weekplanner.core.planner import build_planner


def main() -> None:
    planner = build_planner()
    agenda = planner.week_agenda()

    print(f"Semana {agenda.start:%d/%m} – {agenda.end:%d/%m/%Y}")
    for day in agenda.days:
        tasks, events = agenda.tasks_on(day), agenda.events_on(day)
        if not tasks and not events:
            continue
        print(f"\n{day:%a %d}")
        for event in events:
            print(f"  {format_local(event.start_time)[-5:]}–{format_local(event.end_time)[-5:]}  {event.title}")
        for task in tasks:
            mark = "x" if task.completed else " "
            print(f"  {format_local(task.start_time)[-5:]}  [{mark}] {task.title}")

    alerts = planner.due_soon_alerts()
    if alerts:
        print("\nAtención:")
        for task, info in alerts:
            print(f"  {info.style.icon} {task.title} — {info.message} ({format_due_date(task.due_date)})")

    backlog = planner.backlog_view()
    print(f"\nBacklog: {len(backlog)} tareas")


if __name__ == "__main__":
    main()
