"""
Task and category stores.

Both stores own an ordered in-memory sequence and rewrite their whole
slot after every effective mutation. Invalid input (blank title/name,
unknown id) is a silent no-op: methods return None/False instead of
raising.
"""
import logging
from typing import Any, Callable, Dict, List, Optional

from .schema import (
    Category,
    Task,
    categories_from_records,
    epoch_ms,
    make_task_id,
    palette_color,
    slugify,
    tasks_from_records,
    utc_now,
)
from .slots import CATEGORIES_SLOT, TASKS_SLOT, SlotStore

logger = logging.getLogger(__name__)

# Task fields a patch may set besides the title; id and created_at are immutable
TASK_PATCH_FIELDS = ("notes", "recommended_date", "deadline", "category_id")


class TaskStore:
    """Ordered task sequence, newest first."""

    def __init__(
        self,
        slots: SlotStore,
        clock: Callable[[], str] = utc_now,
        id_factory: Callable[[], str] = make_task_id,
    ):
        self.slots = slots
        self.clock = clock
        self.id_factory = id_factory
        self._tasks: List[Task] = tasks_from_records(slots.load(TASKS_SLOT))
        logger.info(f"TaskStore ready: {len(self._tasks)} tasks")

    # ── queries ──────────────────────────────────────────────────────────────

    def all(self) -> List[Task]:
        return list(self._tasks)

    def get(self, task_id: str) -> Optional[Task]:
        for task in self._tasks:
            if task.id == task_id:
                return task
        return None

    def __len__(self) -> int:
        return len(self._tasks)

    # ── mutations ────────────────────────────────────────────────────────────

    def _persist(self) -> None:
        self.slots.save(TASKS_SLOT, [t.to_dict() for t in self._tasks])

    def _fresh_id(self) -> str:
        task_id = self.id_factory()
        while self.get(task_id) is not None:
            task_id = self.id_factory()
        return task_id

    def create(
        self,
        title: str,
        notes: str = "",
        recommended_date: str = "",
        deadline: str = "",
        category_id: str = "",
    ) -> Optional[Task]:
        """Prepend a new active task. Blank titles are rejected (returns None)."""
        trimmed = (title or "").strip()
        if not trimmed:
            return None

        task = Task(
            id=self._fresh_id(),
            title=trimmed,
            notes=(notes or "").strip(),
            recommended_date=recommended_date or "",
            deadline=deadline or "",
            category_id=category_id or "",
            completed=False,
            created_at=self.clock(),
        )
        self._tasks.insert(0, task)
        self._persist()
        logger.info(f"Task created: {task.id} {task.title!r}")
        return task

    def update(self, task_id: str, patch: Dict[str, Any]) -> Optional[Task]:
        """
        Replace mutable fields of a task.

        A patch without "title" keeps the current title; a patch whose
        title trims empty is rejected. Unknown keys are ignored.
        """
        task = self.get(task_id)
        if task is None:
            return None

        if "title" in patch:
            title = (patch.get("title") or "").strip()
            if not title:
                return None
            task.title = title
        for name in TASK_PATCH_FIELDS:
            if name in patch:
                setattr(task, name, patch[name] or "")

        self._persist()
        logger.debug(f"Task updated: {task.id}")
        return task

    def toggle_completed(self, task_id: str) -> Optional[Task]:
        task = self.get(task_id)
        if task is None:
            return None
        task.completed = not task.completed
        self._persist()
        logger.debug(f"Task {task.id} completed={task.completed}")
        return task

    def delete(self, task_id: str) -> bool:
        task = self.get(task_id)
        if task is None:
            return False
        self._tasks.remove(task)
        self._persist()
        logger.info(f"Task deleted: {task_id}")
        return True

    def clear_category_references(self, category_id: str) -> int:
        """Detach every task from a category. Returns how many were changed."""
        changed = 0
        for task in self._tasks:
            if category_id and task.category_id == category_id:
                task.category_id = ""
                changed += 1
        self._persist()
        if changed:
            logger.info(f"Detached {changed} tasks from category {category_id}")
        return changed


class CategoryStore:
    """Ordered category sequence, in creation order."""

    def __init__(
        self,
        slots: SlotStore,
        tasks: TaskStore,
        clock_ms: Callable[[], int] = epoch_ms,
    ):
        self.slots = slots
        self.tasks = tasks
        self.clock_ms = clock_ms
        self._categories: List[Category] = categories_from_records(slots.load(CATEGORIES_SLOT))
        logger.info(f"CategoryStore ready: {len(self._categories)} categories")

    # ── queries ──────────────────────────────────────────────────────────────

    def all(self) -> List[Category]:
        return list(self._categories)

    def get(self, category_id: str) -> Optional[Category]:
        for category in self._categories:
            if category.id == category_id:
                return category
        return None

    def exists(self, category_id: str) -> bool:
        return self.get(category_id) is not None

    def __len__(self) -> int:
        return len(self._categories)

    def next_color(self) -> str:
        """Palette colour the next category would default to."""
        return palette_color(len(self._categories))

    # ── mutations ────────────────────────────────────────────────────────────

    def _persist(self) -> None:
        self.slots.save(CATEGORIES_SLOT, [c.to_dict() for c in self._categories])

    def derive_id(self, name: str) -> str:
        """Slug of the name, suffixed with a counter when already taken."""
        base = slugify(name.strip()) or f"cat-{self.clock_ms()}"
        if not self.exists(base):
            return base
        n = len(self._categories)
        while self.exists(f"{base}-{n}"):
            n += 1
        return f"{base}-{n}"

    def create(self, name: str, color: Optional[str] = None) -> Optional[Category]:
        """Append a new category. Blank names are rejected (returns None)."""
        trimmed = (name or "").strip()
        if not trimmed:
            return None

        category = Category(
            id=self.derive_id(trimmed),
            name=trimmed,
            color=color or self.next_color(),
        )
        self._categories.append(category)
        self._persist()
        logger.info(f"Category created: {category.id} {category.name!r}")
        return category

    def update(self, category_id: str, patch: Dict[str, Any]) -> Optional[Category]:
        """Rename / recolour a category; the id never changes."""
        category = self.get(category_id)
        if category is None:
            return None

        if "name" in patch:
            name = (patch.get("name") or "").strip()
            if not name:
                return None
            category.name = name
        if patch.get("color"):
            category.color = patch["color"]

        self._persist()
        logger.debug(f"Category updated: {category.id}")
        return category

    def delete(self, category_id: str) -> bool:
        """Remove a category and detach (never delete) its tasks."""
        category = self.get(category_id)
        if category is None:
            return False
        self._categories.remove(category)
        self._persist()
        self.tasks.clear_category_references(category_id)
        logger.info(f"Category deleted: {category_id}")
        return True
