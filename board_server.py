#!/usr/bin/env python3
"""
Lanes Board Server
------------------
Serves the board page and a JSON API over a single in-memory Board,
persisted to a SQLite slot table after every change.

Usage:
    python board_server.py
    python board_server.py --config lanes.yaml --port 3000
    python board_server.py --db /tmp/board.db

API:
    GET    /                           → board page (HTML)
    GET    /api/board                  → JSON snapshot: totals, lanes, active, completed, ui
    POST   /api/tasks                  → create task   { title, notes, recommendedDate, deadline, categoryId }
    PUT    /api/tasks/<id>             → update task
    POST   /api/tasks/<id>/toggle      → flip completed
    DELETE /api/tasks/<id>             → delete task
    POST   /api/categories             → create category { name, color }
    PUT    /api/categories/<id>        → update category
    DELETE /api/categories/<id>        → delete category (tasks are detached)
    POST   /api/ui/tab                 → { tab: "home"|"all"|"checked" }
    POST   /api/ui/nav                 → toggle the navigation menu
    POST   /api/ui/menu                → { kind, id, x, y } open context menu
    DELETE /api/ui/menu                → close context menu
    POST   /api/ui/key                 → { key } ("Escape" closes the menu)
    POST   /api/ui/edit/<kind>/<id>    → start inline edit (kind: task|category)
    PATCH  /api/ui/edit/<kind>         → change draft fields
    POST   /api/ui/edit/<kind>/save    → save draft
    DELETE /api/ui/edit/<kind>         → cancel edit
    GET    /health
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, current_app, jsonify, render_template, request

import lanes
from lanes.board import Board
from lanes.config import Config
from lanes.interaction import EntityKind
from lanes.slots import SlotStore
from lanes.views import to_rgba

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(lanes.__file__).parent / "templates"

# JSON (camelCase) → store field names
TASK_FIELDS = {
    "title": "title",
    "notes": "notes",
    "recommendedDate": "recommended_date",
    "deadline": "deadline",
    "categoryId": "category_id",
}
CATEGORY_FIELDS = {"name": "name", "color": "color"}


def _payload() -> Dict[str, Any]:
    data = request.get_json(force=True, silent=True)
    return data if isinstance(data, dict) else {}


def _pick(data: Dict[str, Any], mapping: Dict[str, str]) -> Dict[str, Any]:
    """
    Translate known JSON keys (camelCase or snake_case) to store fields.

    null becomes "". Any other non-string value raises ValueError.
    """
    out = {}
    for key, name in mapping.items():
        if key in data:
            value = data[key]
        elif name in data:
            value = data[name]
        else:
            continue
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise ValueError(f"{key} must be a string")
        out[name] = value
    return out


def _error(message: str, code: int):
    return jsonify({"error": message}), code


def get_board() -> Board:
    return current_app.extensions["lanes_board"]


# ── Application factory ──────────────────────────────────────────────────────

def create_app(cfg: Optional[Config] = None, board: Optional[Board] = None) -> Flask:
    cfg = cfg or Config.load()
    if board is None:
        board = Board(SlotStore(cfg.db_path))

    app = Flask(__name__, template_folder=str(TEMPLATE_DIR))
    app.config["LANES"] = cfg
    app.extensions["lanes_board"] = board
    app.jinja_env.filters["rgba"] = to_rgba

    # ── Page ────────────────────────────────────────────────────────────────

    @app.route("/")
    def index():
        b = get_board()
        return render_template(
            "board.html",
            view=b.view(),
            ui=b.ui,
            categories=b.categories.all(),
        )

    @app.route("/api/board")
    def api_board():
        return jsonify(get_board().snapshot())

    # ── Tasks ───────────────────────────────────────────────────────────────

    @app.route("/api/tasks", methods=["POST"])
    def api_create_task():
        try:
            fields = _pick(_payload(), TASK_FIELDS)
        except ValueError as e:
            return _error(str(e), 400)
        fields.setdefault("title", "")
        task = get_board().submit_task(**fields)
        if task is None:
            return _error("title is required", 400)
        return jsonify({"task": task.to_dict(), "board": get_board().snapshot()}), 201

    @app.route("/api/tasks/<task_id>", methods=["PUT"])
    def api_update_task(task_id):
        b = get_board()
        if b.tasks.get(task_id) is None:
            return _error("Task not found", 404)
        try:
            patch = _pick(_payload(), TASK_FIELDS)
        except ValueError as e:
            return _error(str(e), 400)
        task = b.tasks.update(task_id, patch)
        if task is None:
            return _error("title is required", 400)
        return jsonify({"task": task.to_dict(), "board": b.snapshot()})

    @app.route("/api/tasks/<task_id>/toggle", methods=["POST"])
    def api_toggle_task(task_id):
        b = get_board()
        task = b.toggle_completed(task_id)
        if task is None:
            return _error("Task not found", 404)
        return jsonify({"task": task.to_dict(), "board": b.snapshot()})

    @app.route("/api/tasks/<task_id>", methods=["DELETE"])
    def api_delete_task(task_id):
        b = get_board()
        if not b.delete_task(task_id):
            return _error("Task not found", 404)
        return jsonify({"deleted": task_id, "board": b.snapshot()})

    # ── Categories ──────────────────────────────────────────────────────────

    @app.route("/api/categories", methods=["POST"])
    def api_create_category():
        try:
            fields = _pick(_payload(), CATEGORY_FIELDS)
        except ValueError as e:
            return _error(str(e), 400)
        b = get_board()
        category = b.add_category(fields.get("name", ""), fields.get("color") or None)
        if category is None:
            return _error("name is required", 400)
        return jsonify({"category": category.to_dict(), "board": b.snapshot()}), 201

    @app.route("/api/categories/<category_id>", methods=["PUT"])
    def api_update_category(category_id):
        b = get_board()
        if not b.categories.exists(category_id):
            return _error("Category not found", 404)
        try:
            patch = _pick(_payload(), CATEGORY_FIELDS)
        except ValueError as e:
            return _error(str(e), 400)
        category = b.categories.update(category_id, patch)
        if category is None:
            return _error("name is required", 400)
        return jsonify({"category": category.to_dict(), "board": b.snapshot()})

    @app.route("/api/categories/<category_id>", methods=["DELETE"])
    def api_delete_category(category_id):
        b = get_board()
        if not b.delete_category(category_id):
            return _error("Category not found", 404)
        return jsonify({"deleted": category_id, "board": b.snapshot()})

    # ── Interaction state ───────────────────────────────────────────────────

    @app.route("/api/ui/tab", methods=["POST"])
    def api_select_tab():
        b = get_board()
        try:
            b.ui.select_tab(_payload().get("tab", ""))
        except ValueError as e:
            return _error(str(e), 400)
        return jsonify({"ui": b.ui.to_dict()})

    @app.route("/api/ui/nav", methods=["POST"])
    def api_toggle_nav():
        b = get_board()
        b.ui.toggle_nav()
        return jsonify({"ui": b.ui.to_dict()})

    @app.route("/api/ui/menu", methods=["POST"])
    def api_open_menu():
        data = _payload()
        b = get_board()
        try:
            b.ui.open_context_menu(
                data.get("kind", ""),
                str(data.get("id", "")),
                int(data.get("x", 0)),
                int(data.get("y", 0)),
            )
        except (TypeError, ValueError) as e:
            return _error(str(e), 400)
        return jsonify({"ui": b.ui.to_dict()})

    @app.route("/api/ui/menu", methods=["DELETE"])
    def api_close_menu():
        b = get_board()
        b.ui.handle_click()
        return jsonify({"ui": b.ui.to_dict()})

    @app.route("/api/ui/key", methods=["POST"])
    def api_key():
        b = get_board()
        handled = b.ui.handle_key(str(_payload().get("key", "")))
        return jsonify({"handled": handled, "ui": b.ui.to_dict()})

    @app.route("/api/ui/edit/<kind>/<target_id>", methods=["POST"])
    def api_start_edit(kind, target_id):
        b = get_board()
        try:
            entity = b.start_edit(kind, target_id)
        except ValueError as e:
            return _error(str(e), 400)
        if entity is None:
            return _error(f"{kind} not found", 404)
        return jsonify({"ui": b.ui.to_dict()})

    @app.route("/api/ui/edit/<kind>", methods=["PATCH"])
    def api_change_draft(kind):
        b = get_board()
        try:
            mapping = TASK_FIELDS if EntityKind.from_str(kind) is EntityKind.TASK else CATEGORY_FIELDS
            fields = _pick(_payload(), mapping)
        except ValueError as e:
            return _error(str(e), 400)
        if not b.change_draft(kind, **fields):
            return _error(f"No {kind} is being edited", 409)
        return jsonify({"ui": b.ui.to_dict()})

    @app.route("/api/ui/edit/<kind>/save", methods=["POST"])
    def api_save_edit(kind):
        b = get_board()
        try:
            if b.ui.editing(kind) is None:
                return _error(f"No {kind} is being edited", 409)
            entity = b.save_edit(kind)
        except ValueError as e:
            return _error(str(e), 400)
        if entity is None:
            field = "title" if EntityKind.from_str(kind) is EntityKind.TASK else "name"
            return _error(f"{field} is required", 400)
        return jsonify({kind: entity.to_dict(), "board": b.snapshot()})

    @app.route("/api/ui/edit/<kind>", methods=["DELETE"])
    def api_cancel_edit(kind):
        b = get_board()
        try:
            b.cancel_edit(kind)
        except ValueError as e:
            return _error(str(e), 400)
        return jsonify({"ui": b.ui.to_dict()})

    # ── Health ──────────────────────────────────────────────────────────────

    @app.route("/health")
    def health():
        b = get_board()
        return jsonify({"status": "ok", "db": b.slots.db_path, "slots": b.slots.slots()})

    return app


# ── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None):
    parser = argparse.ArgumentParser(description="Lanes Board Server")
    parser.add_argument("--config", help="Path to lanes.yaml")
    parser.add_argument("--host", help="Bind address (use 0.0.0.0 to expose on network)")
    parser.add_argument("--port", type=int)
    parser.add_argument("--db", help="Path to board.db (overrides LANES_DB env var)")
    args = parser.parse_args(argv)

    if args.db:
        os.environ["LANES_DB"] = args.db

    cfg = Config.load(args.config)
    if args.host:
        cfg.host = args.host
    if args.port:
        cfg.port = args.port

    logging.basicConfig(
        level=getattr(logging, cfg.log_level.upper(), logging.INFO),
        format="%(asctime)s [lanes] %(levelname)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    app = create_app(cfg)
    logger.info(f"Lanes board on http://{cfg.host}:{cfg.port} (db: {cfg.db_path})")

    # One Board instance in memory: serve requests one at a time
    app.run(host=cfg.host, port=cfg.port, debug=False, threaded=False)


if __name__ == "__main__":
    main()
