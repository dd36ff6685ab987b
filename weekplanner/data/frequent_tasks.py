"""
Week Planner — Frequent-task registry.

Reusable task templates ranked by how often they are picked. The registry
is independent of the task collection: templates are linked to tasks only by
title, through the favorite sync in the planner service.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from weekplanner.core.datetime_utils import local_now
from weekplanner.data.db import JSONCollectionDB, generate_id
from weekplanner.data.models import FrequentTask, TaskCategory, TaskPriority
from weekplanner.data.seed import default_frequent_tasks

logger = logging.getLogger(__name__)


class FrequentTaskRegistry(JSONCollectionDB):
    """Key-value backed storage for frequent-task templates."""

    key_suffix = "frequent-tasks"
    model = FrequentTask

    def _seed(self) -> list[FrequentTask]:
        return default_frequent_tasks(local_now(), generate_id)

    def list_all(self) -> list[FrequentTask]:
        """Return every template, seeding the five defaults on first access."""
        return self._load()

    def add(
        self,
        title: str,
        category: TaskCategory | str,
        priority: TaskPriority | str,
        description: str | None = None,
        estimated_duration: int | None = None,
        tags: list[str] | None = None,
    ) -> FrequentTask:
        """Insert a new template with a zero usage count."""
        now = local_now()
        template = FrequentTask(
            id=generate_id(),
            title=title,
            description=description,
            category=category,
            priority=priority,
            estimated_duration=estimated_duration,
            usage_count=0,
            last_used=now,
            created_at=now,
            tags=tags,
        )
        self._insert(template)
        logger.info("Frequent task added: %s '%s'", template.id, template.title)
        return template

    def use(self, template_id: str) -> FrequentTask | None:
        """Bump usage_count and last_used. Unknown IDs are a no-op."""
        templates = self._load()
        index = self._index_of(templates, template_id)
        if index is None:
            logger.debug("Frequent task %s not found, nothing to use", template_id)
            return None

        current = templates[index]
        used = current.model_copy(
            update={"usage_count": current.usage_count + 1, "last_used": local_now()}
        )
        templates[index] = used
        self._save(templates)
        logger.info("Frequent task %s used (%d times)", template_id, used.usage_count)
        return used

    def remove(self, template_id: str) -> bool:
        """Permanently delete a template by ID."""
        removed = self._delete(template_id)
        if removed:
            logger.info("Frequent task %s removed", template_id)
        return removed

    def find_by_title(self, title: str) -> FrequentTask | None:
        """Case-insensitive exact title match, ignoring outer whitespace."""
        needle = title.strip().lower()
        for template in self._load():
            if template.title.strip().lower() == needle:
                return template
        return None

    def most_used(self, limit: int = 5) -> list[FrequentTask]:
        templates = sorted(self._load(), key=lambda t: t.usage_count, reverse=True)
        return templates[:limit]

    def recently_used(self, limit: int = 5) -> list[FrequentTask]:
        templates = sorted(self._load(), key=lambda t: t.last_used, reverse=True)
        return templates[:limit]

    def search(self, query: str) -> list[FrequentTask]:
        """Substring search over title, description and tags, most used first."""
        term = query.lower()

        def _matches(t: FrequentTask) -> bool:
            if term in t.title.lower():
                return True
            if t.description and term in t.description.lower():
                return True
            return any(term in tag.lower() for tag in t.tags or [])

        matches = [t for t in self._load() if _matches(t)]
        return sorted(matches, key=lambda t: t.usage_count, reverse=True)

    def by_category(self, category: TaskCategory | str) -> list[FrequentTask]:
        try:
            wanted = TaskCategory(category)
        except ValueError:
            return []
        matches = [t for t in self._load() if t.category == wanted]
        return sorted(matches, key=lambda t: t.usage_count, reverse=True)

    def all_categories(self) -> list[str]:
        """Distinct category values in use, sorted."""
        return sorted({t.category.value for t in self._load()})

    def top_by_category(self, limit: int = 3) -> dict[str, list[FrequentTask]]:
        """The `limit` most used templates of each category in use."""
        grouped: dict[str, list[FrequentTask]] = defaultdict(list)
        for template in sorted(self._load(), key=lambda t: t.usage_count, reverse=True):
            grouped[template.category.value].append(template)
        return {cat: grouped[cat][:limit] for cat in sorted(grouped)}
