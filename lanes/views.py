"""
Derived views over the task and category sequences.

Everything here is a pure function of (tasks, categories[, today]) and is
recomputed from scratch for every render.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from .schema import (
    NEUTRAL_ACCENT,
    UNCATEGORIZED_COLOR,
    UNCATEGORIZED_ID,
    UNCATEGORIZED_NAME,
    Category,
    Task,
)

# Fixed phrases for small day differences (target - today)
RELATIVE_PHRASES = {
    0: "Due today",
    1: "Due tomorrow",
    2: "Due in 2 days",
    -1: "Due yesterday",
    -2: "Due 2 days ago",
}


@dataclass
class Totals:
    all: int
    completed: int

    def to_dict(self) -> Dict[str, int]:
        return {"all": self.all, "completed": self.completed}


@dataclass
class Lane:
    """One column of the home board."""

    id: str
    name: str
    color: str
    tasks: List[Task] = field(default_factory=list)
    generated: bool = False


@dataclass
class BoardView:
    """Everything one render pass needs."""

    totals: Totals
    lanes: List[Lane]
    active: List[Task]
    completed: List[Task]
    categories: List[Category]
    today: date

    def task_dict(self, task: Task) -> Dict[str, Any]:
        data = task.to_dict()
        data["recommendedLabel"] = relative_label(task.recommended_date, self.today)
        data["deadlineLabel"] = relative_label(task.deadline, self.today)
        data["accent"] = accent_for(task, self.categories)
        return data

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totals": self.totals.to_dict(),
            "lanes": [
                {
                    "id": lane.id,
                    "name": lane.name,
                    "color": lane.color,
                    "generated": lane.generated,
                    "tasks": [self.task_dict(t) for t in lane.tasks],
                }
                for lane in self.lanes
            ],
            "active": [self.task_dict(t) for t in self.active],
            "completed": [self.task_dict(t) for t in self.completed],
            "today": self.today.isoformat(),
        }


def totals(tasks: Sequence[Task]) -> Totals:
    return Totals(all=len(tasks), completed=sum(1 for t in tasks if t.completed))


def active_tasks(tasks: Sequence[Task]) -> List[Task]:
    return [t for t in tasks if not t.completed]


def completed_tasks(tasks: Sequence[Task]) -> List[Task]:
    return [t for t in tasks if t.completed]


def group_by_category(tasks: Sequence[Task], categories: Sequence[Category]) -> List[Lane]:
    """
    Active tasks grouped per category, in category creation order.

    Active tasks with an empty or dangling category id land in a generated
    "No category" lane appended last, only when it has any tasks.
    """
    known = {c.id for c in categories}
    lanes = [
        Lane(
            id=c.id,
            name=c.name,
            color=c.color,
            tasks=[t for t in tasks if t.category_id == c.id and not t.completed],
        )
        for c in categories
    ]

    orphans = [
        t for t in tasks
        if not t.completed and (not t.category_id or t.category_id not in known)
    ]
    if orphans:
        lanes.append(Lane(
            id=UNCATEGORIZED_ID,
            name=UNCATEGORIZED_NAME,
            color=UNCATEGORIZED_COLOR,
            tasks=orphans,
            generated=True,
        ))
    return lanes


def parse_day(date_string: str) -> Optional[date]:
    """Parse YYYY-MM-DD as a calendar date; None when malformed."""
    parts = date_string.split("-")
    if len(parts) != 3:
        return None
    try:
        year, month, day = (int(p) for p in parts)
        return date(year, month, day)
    except ValueError:
        return None


def long_date(day: date) -> str:
    """e.g. 'Wed, Oct 14, 2026'."""
    return f"{day:%a}, {day:%b} {day.day}, {day.year}"


def relative_label(date_string: str, today: Optional[date] = None) -> str:
    """
    Human label for a due date relative to today.

    Empty input gives "". Malformed input is returned unchanged.
    """
    if not date_string:
        return ""
    target = parse_day(date_string)
    if target is None:
        return date_string

    today = today or date.today()
    diff = (target - today).days
    if diff in RELATIVE_PHRASES:
        return RELATIVE_PHRASES[diff]
    return f"Due {long_date(target)}"


def accent_for(task: Task, categories: Sequence[Category]) -> str:
    """Colour of the task's lane, neutral grey when it has none."""
    for c in categories:
        if c.id == task.category_id:
            return c.color
    return NEUTRAL_ACCENT


def to_rgba(hex_color: str, alpha: float = 0.1) -> str:
    """Translucent CSS colour for a '#rgb' / '#rrggbb' value."""
    if not hex_color or not hex_color.startswith("#") or len(hex_color) not in (4, 7):
        return f"rgba(15,23,42,{alpha})"
    digits = hex_color[1:]
    if len(digits) == 3:
        digits = "".join(c + c for c in digits)
    try:
        num = int(digits, 16)
    except ValueError:
        return f"rgba(15,23,42,{alpha})"
    r = (num >> 16) & 255
    g = (num >> 8) & 255
    b = num & 255
    return f"rgba({r}, {g}, {b}, {alpha})"


def build_view(
    tasks: Sequence[Task],
    categories: Sequence[Category],
    today: Optional[date] = None,
) -> BoardView:
    return BoardView(
        totals=totals(tasks),
        lanes=group_by_category(tasks, categories),
        active=active_tasks(tasks),
        completed=completed_tasks(tasks),
        categories=list(categories),
        today=today or date.today(),
    )
