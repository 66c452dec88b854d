"""Shared test fixtures for the lanes board."""

import sys
from datetime import date
from itertools import count
from pathlib import Path

import pytest

# Ensure the repository root is importable without an install
sys.path.insert(0, str(Path(__file__).parent.parent))

from lanes.board import Board
from lanes.slots import SlotStore
from lanes.store import CategoryStore, TaskStore

TODAY = date(2026, 10, 19)


class FakeClock:
    """Deterministic ISO timestamps, one second apart."""

    def __init__(self):
        self._n = count()

    def __call__(self) -> str:
        return f"2026-10-19T09:00:{next(self._n):02d}.000Z"


class SequentialIds:
    def __init__(self, prefix: str = "task"):
        self.prefix = prefix
        self._n = count(1)

    def __call__(self) -> str:
        return f"{self.prefix}-{next(self._n)}"


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "board.db")


@pytest.fixture
def slots(db_path):
    return SlotStore(db_path)


@pytest.fixture
def task_store(slots):
    return TaskStore(slots, clock=FakeClock(), id_factory=SequentialIds())


@pytest.fixture
def category_store(slots, task_store):
    return CategoryStore(slots, task_store, clock_ms=lambda: 1700000000000)


@pytest.fixture
def board(slots):
    return Board(
        slots,
        clock=FakeClock(),
        clock_ms=lambda: 1700000000000,
        id_factory=SequentialIds(),
        today=lambda: TODAY,
    )
