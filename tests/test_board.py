"""
Tests for the Board application state.

Covers:
    - the Work / "Draft report" walkthrough
    - form category defaults and palette cycling
    - inline task / category edits
    - context-menu actions closing the menu
    - state surviving a restart (new Board over the same db)
"""

from datetime import date

from lanes.board import Board
from lanes.schema import PALETTE
from lanes.slots import CATEGORIES_SLOT, TASKS_SLOT, SlotStore

TODAY = date(2026, 10, 19)


def lane_task_ids(board, lane_id):
    for lane in board.view(TODAY).lanes:
        if lane.id == lane_id:
            return [t.id for t in lane.tasks]
    return None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# End-to-end walkthrough
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_work_category_walkthrough(board):
    work = board.add_category("Work", "#0ea5e9")
    assert work.id == "work"

    task = board.submit_task(title="Draft report", category_id="work")
    assert lane_task_ids(board, "work") == [task.id]
    assert board.view(TODAY).totals.to_dict() == {"all": 1, "completed": 0}

    board.toggle_completed(task.id)
    view = board.view(TODAY)
    assert view.totals.to_dict() == {"all": 1, "completed": 1}
    assert lane_task_ids(board, "work") == []
    assert [t.id for t in view.completed] == [task.id]

    board.delete_category("work")
    assert board.tasks.get(task.id).category_id == ""
    assert board.categories.all() == []


def test_totals_track_operations(board):
    board.add_category("Home")
    ids = [board.submit_task(title=f"Task {i}").id for i in range(4)]
    board.toggle_completed(ids[0])
    board.toggle_completed(ids[1])
    board.delete_task(ids[1])
    board.submit_task(title="   ")
    tasks = board.tasks.all()
    totals = board.view(TODAY).totals
    assert totals.all == len(tasks) == 3
    assert totals.completed == sum(1 for t in tasks if t.completed) == 1


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Create form defaults
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestFormDefaults:

    def test_new_task_uses_form_category(self, board):
        board.add_category("Work")
        task = board.submit_task(title="Goes to work")
        assert task.category_id == "work"

    def test_new_category_becomes_form_default(self, board):
        board.add_category("Work")
        board.add_category("Home")
        assert board.ui.form_category_id == "home"

    def test_explicit_category_wins(self, board):
        board.add_category("Work")
        task = board.submit_task(title="Loose", category_id="")
        assert task.category_id == ""

    def test_offered_color_cycles(self, board):
        assert board.ui.new_category_color == PALETTE[1]
        first = board.add_category("Work")
        assert first.color == PALETTE[1]
        assert board.ui.new_category_color == PALETTE[1]
        board.add_category("Home")
        assert board.ui.new_category_color == PALETTE[2]

    def test_blank_category_keeps_form(self, board):
        board.add_category("Work")
        assert board.add_category("  ") is None
        assert board.ui.form_category_id == "work"

    def test_deleting_form_category_falls_back_to_first(self, board):
        board.add_category("Work")
        board.add_category("Home")
        board.delete_category("home")
        assert board.ui.form_category_id == "work"
        board.delete_category("work")
        assert board.ui.form_category_id == ""

    def test_loaded_board_defaults_to_first_lane(self, board, slots):
        board.add_category("Work")
        board.add_category("Home")
        reopened = Board(slots)
        assert reopened.ui.form_category_id == "work"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Inline edits and menu actions
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class TestTaskEdit:

    def test_edit_round(self, board):
        task = board.submit_task(title="First draft", notes="n")
        board.ui.open_context_menu("task", task.id, 10, 10)
        board.start_task_edit(task.id)
        assert board.ui.context_menu.open is False
        assert board.ui.task_edit.draft["title"] == "First draft"

        board.change_task_draft(title="  Revised ", deadline="2026-10-21")
        saved = board.save_task_edit()
        assert saved.title == "Revised"
        assert saved.deadline == "2026-10-21"
        assert board.ui.task_edit is None

    def test_blank_draft_keeps_editing(self, board):
        task = board.submit_task(title="First draft")
        board.start_task_edit(task.id)
        board.change_task_draft(title="   ")
        assert board.save_task_edit() is None
        assert board.ui.task_edit is not None
        assert board.tasks.get(task.id).title == "First draft"

    def test_cancel(self, board):
        task = board.submit_task(title="First draft")
        board.start_task_edit(task.id)
        board.change_task_draft(title="Changed")
        board.cancel_task_edit()
        assert board.ui.task_edit is None
        assert board.tasks.get(task.id).title == "First draft"

    def test_unknown_task_only_closes_menu(self, board):
        board.ui.open_context_menu("task", "ghost")
        assert board.start_task_edit("ghost") is None
        assert board.ui.task_edit is None
        assert board.ui.context_menu.open is False

    def test_task_edit_leaves_category_edit(self, board):
        board.add_category("Work")
        task = board.submit_task(title="T")
        board.start_category_edit("work")
        board.start_task_edit(task.id)
        assert board.ui.category_edit.id == "work"

    def test_deleting_edited_task_ends_edit(self, board):
        task = board.submit_task(title="T")
        board.start_task_edit(task.id)
        board.delete_task(task.id)
        assert board.ui.task_edit is None


class TestCategoryEdit:

    def test_edit_round(self, board):
        board.add_category("Work", "#0ea5e9")
        board.start_category_edit("work")
        board.change_category_draft(name="Office", color="#f59e0b")
        saved = board.save_category_edit()
        assert (saved.id, saved.name, saved.color) == ("work", "Office", "#f59e0b")
        assert board.ui.category_edit is None

    def test_blank_name_keeps_editing(self, board):
        board.add_category("Work")
        board.start_category_edit("work")
        board.change_category_draft(name="")
        assert board.save_category_edit() is None
        assert board.categories.get("work").name == "Work"

    def test_delete_cancels_edit(self, board):
        board.add_category("Work")
        board.start_category_edit("work")
        board.delete_category("work")
        assert board.ui.category_edit is None


class TestMenuActions:

    def test_toggle_closes_menu(self, board):
        task = board.submit_task(title="T")
        board.ui.open_context_menu("task", task.id, 5, 5)
        board.toggle_completed(task.id)
        assert board.ui.context_menu.open is False

    def test_delete_closes_menu(self, board):
        task = board.submit_task(title="T")
        board.ui.open_context_menu("task", task.id, 5, 5)
        assert board.delete_task(task.id) is True
        assert board.ui.context_menu.open is False


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Persistence through the board
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def test_state_survives_restart(board, db_path):
    board.add_category("Work", "#0ea5e9")
    task = board.submit_task(title="Persisted", recommended_date="2026-10-20")
    board.toggle_completed(task.id)

    reopened = Board(SlotStore(db_path))
    restored = reopened.tasks.get(task.id)
    assert restored.to_dict() == board.tasks.get(task.id).to_dict()
    assert [c.to_dict() for c in reopened.categories.all()] == [c.to_dict() for c in board.categories.all()]


def test_corrupt_slots_start_empty(db_path):
    slots = SlotStore(db_path)
    slots.write_raw(TASKS_SLOT, "not json at all")
    slots.write_raw(CATEGORIES_SLOT, '"a string"')
    board = Board(slots)
    assert board.tasks.all() == []
    assert board.categories.all() == []


def test_snapshot_shape(board):
    board.add_category("Work")
    board.submit_task(title="T")
    data = board.snapshot(TODAY)
    assert set(data) >= {"totals", "lanes", "active", "completed", "categories", "ui"}
    assert data["ui"]["formCategoryId"] == "work"
    assert data["categories"][0]["id"] == "work"
