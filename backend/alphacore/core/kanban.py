"""Kanban - column ordering and board grouping for project tasks.

Invariants:
    - Columns follow TaskStatus declaration order (BACKLOG -> DONE)
    - Inside a column tasks are ordered by `order`, then created_at
    - A new card goes to the bottom of its column: highest order + 1
"""

from typing import Iterable

from alphacore.core.domain_types import TaskStatus

COLUMN_ORDER = [s.value for s in TaskStatus]
_COLUMN_INDEX = {status: i for i, status in enumerate(COLUMN_ORDER)}


def column_index(status: str) -> int:
    """Position of a status column; unknown statuses sort last."""
    return _COLUMN_INDEX.get(status, len(COLUMN_ORDER))


def board_sort_key(task) -> tuple:
    return (column_index(task.status), task.order, task.created_at)


def sort_for_board(tasks: Iterable) -> list:
    return sorted(tasks, key=board_sort_key)


def group_by_column(tasks: Iterable) -> dict[str, list]:
    """Every column present (possibly empty), each sorted by order."""
    board: dict[str, list] = {status: [] for status in COLUMN_ORDER}
    for task in sort_for_board(tasks):
        board.setdefault(task.status, []).append(task)
    return board


def next_order(highest: int | None) -> int:
    return (highest or 0) + 1
