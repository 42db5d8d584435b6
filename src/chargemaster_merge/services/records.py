from __future__ import annotations

from collections.abc import Collection, Sequence
from typing import Any

from ..models.tabular import ROW_ID, Row

"""Row mutation helpers used by editing surfaces outside the engine.

Every function returns a new list; the caller's rows are left untouched.
"""

__all__ = [
    "RecordNotFoundError",
    "DuplicateIdCollisionError",
    "next_row_id",
    "duplicate_record",
    "delete_records",
]


class RecordNotFoundError(Exception):
    pass


class DuplicateIdCollisionError(Exception):
    """Raised when a mutation would leave two rows with the same id."""


def next_row_id(rows: Sequence[Row]) -> int:
    int_ids = [r[ROW_ID] for r in rows if isinstance(r.get(ROW_ID), int)]
    return max(int_ids, default=-1) + 1


def duplicate_record(rows: Sequence[Row], row_id: Any, new_id: Any = None) -> list[Row]:
    """Append a copy of the row ``row_id`` under a fresh unique id."""
    original = next((r for r in rows if r.get(ROW_ID) == row_id), None)
    if original is None:
        raise RecordNotFoundError(f"record with id {row_id!r} not found")

    if new_id is None:
        new_id = next_row_id(rows)
    elif any(r.get(ROW_ID) == new_id for r in rows):
        raise DuplicateIdCollisionError(f"id {new_id!r} already in use")

    copy = dict(original)
    copy[ROW_ID] = new_id
    return [*rows, copy]


def delete_records(rows: Sequence[Row], ids: Collection[Any]) -> list[Row]:
    drop = set(ids)
    return [r for r in rows if r.get(ROW_ID) not in drop]
