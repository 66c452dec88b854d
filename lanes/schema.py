"""
Lanes board schema.

Records are persisted as flat JSON objects using camelCase keys
(recommendedDate, categoryId, createdAt) so data exported from the
browser version of the board loads unchanged.
"""
import logging
import re
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Default lane colours, cycled by creation order
PALETTE: List[str] = ["#0f172a", "#0ea5e9", "#1e293b", "#14b8a6", "#f59e0b", "#6366f1"]

# Synthetic lane for tasks without a valid category (never persisted)
UNCATEGORIZED_ID = "uncategorized"
UNCATEGORIZED_NAME = "No category"
UNCATEGORIZED_COLOR = PALETTE[2]

# Accent for a task that belongs to no lane
NEUTRAL_ACCENT = "#cbd5e1"

_SLUG_RE = re.compile(r"[^a-z0-9]+")


# ── Identity / time providers ────────────────────────────────────────────────

def utc_now() -> str:
    """ISO-8601 UTC timestamp with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def make_task_id() -> str:
    """Random UUID4 task identifier."""
    return str(uuid.uuid4())


def slugify(name: str) -> str:
    """Lowercase the name and collapse every non-alphanumeric run into '-'."""
    return _SLUG_RE.sub("-", name.lower())


def palette_color(index: int) -> str:
    """Palette entry for the given creation index (wraps around)."""
    return PALETTE[index % len(PALETTE)]


# ── Records ──────────────────────────────────────────────────────────────────

@dataclass
class Task:
    """A single task card."""

    id: str
    title: str
    notes: str = ""
    recommended_date: str = ""     # "action date", YYYY-MM-DD or ""
    deadline: str = ""             # YYYY-MM-DD or ""
    category_id: str = ""          # "" means uncategorized; may dangle
    completed: bool = False
    created_at: str = field(default_factory=utc_now)

    @property
    def active(self) -> bool:
        return not self.completed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "notes": self.notes,
            "recommendedDate": self.recommended_date,
            "deadline": self.deadline,
            "categoryId": self.category_id,
            "completed": self.completed,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["Task"]:
        """Deserialize a stored record. Returns None when id or title is missing."""
        if not isinstance(data, dict):
            return None
        task_id = data.get("id")
        title = data.get("title")
        if not task_id or not isinstance(title, str) or not title.strip():
            return None
        return cls(
            id=str(task_id),
            title=title,
            notes=str(data.get("notes") or ""),
            recommended_date=str(data.get("recommendedDate") or ""),
            deadline=str(data.get("deadline") or ""),
            category_id=str(data.get("categoryId") or ""),
            completed=data.get("completed") is True,
            created_at=str(data.get("createdAt") or ""),
        )


@dataclass
class Category:
    """A user-defined lane."""

    id: str
    name: str
    color: str = PALETTE[0]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["Category"]:
        """Deserialize a stored record. Returns None when id or name is missing."""
        if not isinstance(data, dict):
            return None
        cat_id = data.get("id")
        name = data.get("name")
        if not cat_id or not isinstance(name, str) or not name.strip():
            return None
        return cls(id=str(cat_id), name=name, color=str(data.get("color") or PALETTE[0]))


def tasks_from_records(records: List[Dict[str, Any]]) -> List[Task]:
    """Hydrate tasks, dropping (and logging) records that cannot be used."""
    tasks: List[Task] = []
    seen = set()
    for raw in records:
        task = Task.from_dict(raw)
        if task is None:
            logger.warning(f"Dropping malformed task record: {raw!r}")
            continue
        if task.id in seen:
            logger.warning(f"Dropping duplicate task id: {task.id}")
            continue
        seen.add(task.id)
        tasks.append(task)
    return tasks


def categories_from_records(records: List[Dict[str, Any]]) -> List[Category]:
    """Hydrate categories, dropping (and logging) records that cannot be used."""
    categories: List[Category] = []
    seen = set()
    for raw in records:
        category = Category.from_dict(raw)
        if category is None:
            logger.warning(f"Dropping malformed category record: {raw!r}")
            continue
        if category.id in seen:
            logger.warning(f"Dropping duplicate category id: {category.id}")
            continue
        seen.add(category.id)
        categories.append(category)
    return categories
