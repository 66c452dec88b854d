"""
Transient interaction state for the board UI.

Nothing here is persisted. Each entity kind (task, category) has a single
optional edit slot, so at most one task and one category can be edited
at a time.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union

from .schema import PALETTE, Category, Task


class Tab(Enum):
    """The three board views."""
    HOME = "home"          # creation form + lanes
    ALL = "all"            # flat list of active tasks
    CHECKED = "checked"    # flat list of completed tasks

    @classmethod
    def from_str(cls, value: Union[str, "Tab"]) -> "Tab":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown tab: {value!r}") from None


class EntityKind(Enum):
    TASK = "task"
    CATEGORY = "category"

    @classmethod
    def from_str(cls, value: Union[str, "EntityKind"]) -> "EntityKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown entity kind: {value!r}") from None


@dataclass
class MenuTarget:
    kind: EntityKind
    id: str

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "id": self.id}


@dataclass
class ContextMenu:
    open: bool = False
    x: int = 0
    y: int = 0
    target: Optional[MenuTarget] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "open": self.open,
            "x": self.x,
            "y": self.y,
            "target": self.target.to_dict() if self.target else None,
        }


@dataclass
class EditSlot:
    """The entity currently in inline-edit mode plus its draft values."""
    kind: EntityKind
    id: str
    draft: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "id": self.id, "draft": dict(self.draft)}


def task_draft(task: Task) -> Dict[str, Any]:
    return {
        "title": task.title,
        "notes": task.notes,
        "recommended_date": task.recommended_date,
        "deadline": task.deadline,
        "category_id": task.category_id,
    }


def category_draft(category: Category) -> Dict[str, Any]:
    return {"name": category.name, "color": category.color}


class InteractionState:
    """Tab selection, edit slots, context menu and create-form defaults."""

    def __init__(self):
        self.tab = Tab.HOME
        self.nav_open = False
        self.task_edit: Optional[EditSlot] = None
        self.category_edit: Optional[EditSlot] = None
        self.context_menu = ContextMenu()
        self.form_category_id = ""
        self.new_category_color = PALETTE[1]

    # ── navigation ───────────────────────────────────────────────────────────

    def select_tab(self, tab: Union[str, Tab]) -> Tab:
        self.tab = Tab.from_str(tab)
        self.nav_open = False
        return self.tab

    def toggle_nav(self) -> bool:
        self.nav_open = not self.nav_open
        return self.nav_open

    # ── context menu ─────────────────────────────────────────────────────────

    def open_context_menu(self, kind: Union[str, EntityKind], target_id: str, x: int = 0, y: int = 0) -> ContextMenu:
        self.context_menu = ContextMenu(
            open=True,
            x=int(x),
            y=int(y),
            target=MenuTarget(EntityKind.from_str(kind), target_id),
        )
        return self.context_menu

    def close_context_menu(self) -> None:
        self.context_menu = ContextMenu()

    def handle_click(self) -> None:
        """Any click anywhere in the document closes the menu."""
        self.close_context_menu()

    def handle_key(self, key: str) -> bool:
        """Escape closes the menu. Returns True when the key was handled."""
        if key == "Escape":
            self.close_context_menu()
            return True
        return False

    # ── edit slots ───────────────────────────────────────────────────────────

    def _slot_name(self, kind: EntityKind) -> str:
        return "task_edit" if kind is EntityKind.TASK else "category_edit"

    def begin_edit(self, kind: Union[str, EntityKind], target_id: str, draft: Dict[str, Any]) -> EditSlot:
        """Open the edit slot for this kind, replacing any edit of the same kind."""
        kind = EntityKind.from_str(kind)
        slot = EditSlot(kind=kind, id=target_id, draft=dict(draft))
        setattr(self, self._slot_name(kind), slot)
        return slot

    def editing(self, kind: Union[str, EntityKind]) -> Optional[EditSlot]:
        return getattr(self, self._slot_name(EntityKind.from_str(kind)))

    def update_draft(self, kind: Union[str, EntityKind], **fields: Any) -> Optional[EditSlot]:
        slot = self.editing(kind)
        if slot is None:
            return None
        slot.draft.update(fields)
        return slot

    def end_edit(self, kind: Union[str, EntityKind]) -> None:
        setattr(self, self._slot_name(EntityKind.from_str(kind)), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tab": self.tab.value,
            "navOpen": self.nav_open,
            "taskEdit": self.task_edit.to_dict() if self.task_edit else None,
            "categoryEdit": self.category_edit.to_dict() if self.category_edit else None,
            "contextMenu": self.context_menu.to_dict(),
            "formCategoryId": self.form_category_id,
            "newCategoryColor": self.new_category_color,
        }
