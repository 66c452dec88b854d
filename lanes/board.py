"""
Top-level application state.

The Board owns both stores and the interaction state, and exposes one
synchronous method per user event (form submit, menu action, edit
save/cancel...). Each call runs to completion before the next one.
"""
import logging
from datetime import date
from typing import Any, Callable, Dict, Optional

from .interaction import EntityKind, InteractionState, category_draft, task_draft
from .schema import Category, Task, epoch_ms, make_task_id, palette_color, utc_now
from .slots import SlotStore
from .store import CategoryStore, TaskStore
from .views import BoardView, build_view

logger = logging.getLogger(__name__)


class Board:
    """Single-user board: tasks, categories and transient UI state."""

    def __init__(
        self,
        slots: SlotStore,
        clock: Callable[[], str] = utc_now,
        clock_ms: Callable[[], int] = epoch_ms,
        id_factory: Callable[[], str] = make_task_id,
        today: Callable[[], date] = date.today,
    ):
        self.slots = slots
        self.today = today
        self.tasks = TaskStore(slots, clock=clock, id_factory=id_factory)
        self.categories = CategoryStore(slots, self.tasks, clock_ms=clock_ms)
        self.ui = InteractionState()
        self.ui.new_category_color = palette_color(len(self.categories) + 1)
        self.ensure_form_category()

    # ── create form ──────────────────────────────────────────────────────────

    def ensure_form_category(self) -> str:
        """Default the task form to the first lane when it has none."""
        if not self.ui.form_category_id and len(self.categories) > 0:
            self.ui.form_category_id = self.categories.all()[0].id
        return self.ui.form_category_id

    def submit_task(self, **fields: Any) -> Optional[Task]:
        """Create a task from the form. A missing category uses the form default."""
        if "category_id" not in fields:
            fields["category_id"] = self.ui.form_category_id
        return self.tasks.create(**fields)

    def add_category(self, name: str, color: Optional[str] = None) -> Optional[Category]:
        count = len(self.categories)
        category = self.categories.create(name, color or self.ui.new_category_color)
        if category is None:
            return None
        self.ui.new_category_color = palette_color(count + 1)
        self.ui.form_category_id = category.id
        return category

    # ── task actions ─────────────────────────────────────────────────────────

    def start_task_edit(self, task_id: str) -> Optional[Task]:
        task = self.tasks.get(task_id)
        if task is not None:
            self.ui.begin_edit(EntityKind.TASK, task.id, task_draft(task))
        self.ui.close_context_menu()
        return task

    def change_task_draft(self, **fields: Any) -> bool:
        return self.ui.update_draft(EntityKind.TASK, **fields) is not None

    def save_task_edit(self) -> Optional[Task]:
        """Apply the draft. A blank draft title keeps the edit open."""
        slot = self.ui.task_edit
        if slot is None or not (slot.draft.get("title") or "").strip():
            return None
        task = self.tasks.update(slot.id, slot.draft)
        self.ui.end_edit(EntityKind.TASK)
        return task

    def cancel_task_edit(self) -> None:
        self.ui.end_edit(EntityKind.TASK)

    def toggle_completed(self, task_id: str) -> Optional[Task]:
        task = self.tasks.toggle_completed(task_id)
        self.ui.close_context_menu()
        return task

    def delete_task(self, task_id: str) -> bool:
        deleted = self.tasks.delete(task_id)
        if self.ui.task_edit and self.ui.task_edit.id == task_id:
            self.ui.end_edit(EntityKind.TASK)
        self.ui.close_context_menu()
        return deleted

    # ── category actions ─────────────────────────────────────────────────────

    def start_category_edit(self, category_id: str) -> Optional[Category]:
        category = self.categories.get(category_id)
        if category is not None:
            self.ui.begin_edit(EntityKind.CATEGORY, category.id, category_draft(category))
        self.ui.close_context_menu()
        return category

    def change_category_draft(self, **fields: Any) -> bool:
        return self.ui.update_draft(EntityKind.CATEGORY, **fields) is not None

    def save_category_edit(self) -> Optional[Category]:
        slot = self.ui.category_edit
        if slot is None or not (slot.draft.get("name") or "").strip():
            return None
        category = self.categories.update(slot.id, slot.draft)
        self.ui.end_edit(EntityKind.CATEGORY)
        return category

    def cancel_category_edit(self) -> None:
        self.ui.end_edit(EntityKind.CATEGORY)

    def delete_category(self, category_id: str) -> bool:
        deleted = self.categories.delete(category_id)
        if self.ui.form_category_id == category_id:
            self.ui.form_category_id = ""
        if self.ui.category_edit and self.ui.category_edit.id == category_id:
            self.ui.end_edit(EntityKind.CATEGORY)
        self.ui.close_context_menu()
        self.ensure_form_category()
        return deleted

    # ── generic dispatch used by the HTTP layer ──────────────────────────────

    def start_edit(self, kind: str, target_id: str):
        if EntityKind.from_str(kind) is EntityKind.TASK:
            return self.start_task_edit(target_id)
        return self.start_category_edit(target_id)

    def change_draft(self, kind: str, **fields: Any) -> bool:
        if EntityKind.from_str(kind) is EntityKind.TASK:
            return self.change_task_draft(**fields)
        return self.change_category_draft(**fields)

    def save_edit(self, kind: str):
        if EntityKind.from_str(kind) is EntityKind.TASK:
            return self.save_task_edit()
        return self.save_category_edit()

    def cancel_edit(self, kind: str) -> None:
        if EntityKind.from_str(kind) is EntityKind.TASK:
            self.cancel_task_edit()
        else:
            self.cancel_category_edit()

    # ── rendering ────────────────────────────────────────────────────────────

    def view(self, today: Optional[date] = None) -> BoardView:
        return build_view(self.tasks.all(), self.categories.all(), today or self.today())

    def snapshot(self, today: Optional[date] = None) -> Dict[str, Any]:
        data = self.view(today).to_dict()
        data["categories"] = [c.to_dict() for c in self.categories.all()]
        data["ui"] = self.ui.to_dict()
        return data
