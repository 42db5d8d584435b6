from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.tabular import ROW_ID, Column, Row, SheetData

"""Workbook reading: turns .xlsx sheets into the Row/Column model.

The first sheet row is the header. Cells are read as raw objects with no NA
string conversion, so a description such as "N/A" survives as text and
numeric codes keep their original value.
"""

__all__ = [
    "SheetNotFoundError",
    "read_workbook",
    "normalize_sheet",
    "load_sheet",
]


class SheetNotFoundError(Exception):
    """Raised when a requested sheet is not present in the workbook."""


def read_workbook(path: Path, target_sheets: Iterable[str] | None = None) -> dict[str, pd.DataFrame]:
    """Read a workbook returning raw (headerless) DataFrames keyed by sheet name.

    Sheet order follows the workbook.
    """
    wanted = set(target_sheets) if target_sheets is not None else None
    dfs: dict[str, pd.DataFrame] = {}
    with pd.ExcelFile(path) as xls:
        for name in xls.sheet_names:
            if wanted is not None and str(name) not in wanted:
                continue
            df = xls.parse(name, header=None, dtype=object, keep_default_na=False, na_values=[])
            dfs[str(name)] = df
    return dfs


def _clean_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        if value.is_integer():
            return int(value)
    if isinstance(value, str):
        return value
    if pd.isna(value):
        return ""
    return value


def normalize_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Normalize a raw DataFrame using the first row as header.

    Steps:
    1. Empty sheet -> no columns, no rows
    2. Header from row 0; blank headers become ``col{idx}``
    3. Fully blank data rows are skipped
    4. Each kept row gets ``id`` = its position among kept rows
    """
    if df.shape[0] == 0:
        return SheetData(sheet_name=sheet_name)

    columns: list[Column] = []
    for idx, raw in enumerate(df.iloc[0].tolist()):
        header = _clean_cell(raw)
        header = str(header).strip() if header != "" else ""
        if header:
            columns.append(Column(field=header, header_name=header, editable=True))
        else:
            columns.append(Column(field=f"col{idx}", header_name=f"Column {idx + 1}", editable=True))

    rows: list[Row] = []
    for values in df.iloc[1:].itertuples(index=False, name=None):
        cleaned = [_clean_cell(v) for v in values]
        if all(v == "" or (isinstance(v, str) and v.strip() == "") for v in cleaned):
            continue
        row: Row = {ROW_ID: len(rows)}
        for col, value in zip(columns, cleaned, strict=False):
            row[col.field] = value
        rows.append(row)

    return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)


def load_sheet(path: Path, sheet_name: str | None = None) -> tuple[SheetData, int]:
    """Load one sheet (first sheet when ``sheet_name`` is None).

    Returns:
        (normalized sheet, number of sheets in the workbook)
    """
    dfs = read_workbook(path)
    if not dfs:
        raise SheetNotFoundError(f"workbook '{path.name}' has no sheets")
    if sheet_name is None:
        sheet_name = next(iter(dfs))
    elif sheet_name not in dfs:
        raise SheetNotFoundError(f"sheet '{sheet_name}' not found in '{path.name}'")
    return normalize_sheet(dfs[sheet_name], sheet_name), len(dfs)
