from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

"""Row/column representation shared by the reader, the engine and the writer.

A Row is an open ``dict`` keyed by spreadsheet header with one reserved key,
``id``, which identifies the row inside its dataset and is never compared as data.
"""

__all__ = [
    "ROW_ID",
    "Row",
    "Column",
    "SheetData",
    "cell_text",
    "is_blank",
]

ROW_ID = "id"

Row = dict[str, Any]


@dataclass(frozen=True)
class Column:
    """Header metadata for one spreadsheet column.

    ``field`` is the key used in each Row; ``header_name`` is what the user saw.
    Master and client column sets are independent and usually differ.
    """
    field: str
    header_name: str
    editable: bool = False

    @staticmethod
    def named(name: str, *, editable: bool = False) -> Column:
        return Column(field=name, header_name=name, editable=editable)


@dataclass
class SheetData:
    sheet_name: str
    columns: list[Column] = field(default_factory=list)
    rows: list[Row] = field(default_factory=list)

    @property
    def fields(self) -> list[str]:
        return [c.field for c in self.columns]


def cell_text(value: Any) -> str:
    """Render a cell value as text the way the code parsers expect it.

    None/NaN become "", and integral floats (Excel stores numeric codes as
    float) lose their ``.0`` so ``99213.0`` compares equal to ``"99213"``.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def is_blank(value: Any) -> bool:
    return cell_text(value).strip() == ""
