"""
Week Planner — First-run sample data.

Returned whenever a collection is missing or unreadable, so a fresh install
opens on a populated week instead of an empty grid.
"""

from __future__ import annotations

from datetime import datetime

from weekplanner.data.models import (
    Event,
    FrequentTask,
    Task,
    TaskCategory,
    TaskPriority,
)

# (title, description, start_time, category, priority, completed, is_backlog)
_SAMPLE_TASKS = [
    ("Reunión de equipo", "Reunión semanal de planificación",
     datetime(2025, 7, 28, 9, 0), TaskCategory.WORK, TaskPriority.HIGH, False, False),
    ("Ejercicio matutino", "Rutina de ejercicios en el gimnasio",
     datetime(2025, 7, 28, 7, 0), TaskCategory.HEALTH, TaskPriority.MEDIUM, True, False),
    ("Estudiar Python", "Revisar conceptos avanzados de tipado",
     datetime(2025, 7, 29, 19, 0), TaskCategory.EDUCATION, TaskPriority.MEDIUM, False, False),
    ("Leer libro de productividad", "Terminar de leer 'Atomic Habits'",
     None, TaskCategory.PERSONAL, TaskPriority.LOW, False, True),
    ("Revisar código del proyecto", "Code review pendiente del último sprint",
     None, TaskCategory.WORK, TaskPriority.HIGH, False, True),
    ("Planificar vacaciones", "Investigar destinos y hacer reservas",
     None, TaskCategory.PERSONAL, TaskPriority.MEDIUM, False, True),
]

# (title, description, start, end, location, attendees)
_SAMPLE_EVENTS = [
    ("Conferencia de Python", "Conferencia anual sobre Python y su ecosistema",
     datetime(2025, 7, 30, 9, 0), datetime(2025, 7, 30, 17, 0),
     "Centro de Convenciones", ["juan@example.com", "maria@example.com"]),
    ("Cena familiar", "Cena de cumpleaños de mamá",
     datetime(2025, 7, 31, 19, 0), datetime(2025, 7, 31, 22, 0),
     "Restaurante El Jardín", ["papa@example.com", "hermana@example.com"]),
]

# (title, description, category, priority, estimated_duration)
DEFAULT_FREQUENT_TASKS = [
    ("Ir al supermercado", "Comprar comestibles y productos básicos",
     TaskCategory.PERSONAL, TaskPriority.MEDIUM, 60),
    ("Ir al lavadero", "Llevar ropa para lavar",
     TaskCategory.PERSONAL, TaskPriority.LOW, 30),
    ("Ejercicio rutinario", "Sesión de ejercicio diario",
     TaskCategory.HEALTH, TaskPriority.MEDIUM, 45),
    ("Reunión de equipo", "Reunión semanal del equipo",
     TaskCategory.WORK, TaskPriority.HIGH, 60),
    ("Llamar a la familia", "Llamada familiar semanal",
     TaskCategory.SOCIAL, TaskPriority.MEDIUM, 30),
]


def sample_tasks(now: datetime, user_id: str, new_id) -> list[Task]:
    return [
        Task(
            id=new_id(),
            title=title,
            description=description,
            start_time=start,
            category=category,
            priority=priority,
            completed=completed,
            is_backlog=is_backlog,
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        for title, description, start, category, priority, completed, is_backlog in _SAMPLE_TASKS
    ]


def sample_events(now: datetime, user_id: str, new_id) -> list[Event]:
    return [
        Event(
            id=new_id(),
            title=title,
            description=description,
            start_time=start,
            end_time=end,
            location=location,
            attendees=list(attendees),
            user_id=user_id,
            created_at=now,
            updated_at=now,
        )
        for title, description, start, end, location, attendees in _SAMPLE_EVENTS
    ]


def default_frequent_tasks(now: datetime, new_id) -> list[FrequentTask]:
    return [
        FrequentTask(
            id=new_id(),
            title=title,
            description=description,
            category=category,
            priority=priority,
            estimated_duration=duration,
            usage_count=0,
            last_used=now,
            created_at=now,
        )
        for title, description, category, priority, duration in DEFAULT_FREQUENT_TASKS
    ]
