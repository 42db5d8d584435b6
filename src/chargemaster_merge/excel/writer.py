from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

import pandas as pd

from ..models.comparison_result import ReconciliationResult
from ..models.tabular import ROW_ID, Row

"""Export of reconciliation results as a three-sheet workbook.

Sheets are always written, even when empty, in the order
Merged / Unmatched_Client / Duplicate_Client. Row ids are internal and are
stripped before writing.
"""

__all__ = [
    "SHEET_MERGED",
    "SHEET_UNMATCHED",
    "SHEET_DUPLICATES",
    "rows_to_frame",
    "write_reconciliation_workbook",
    "build_export_filename",
    "sanitize_export_filename",
]

SHEET_MERGED = "Merged"
SHEET_UNMATCHED = "Unmatched_Client"
SHEET_DUPLICATES = "Duplicate_Client"

_INVALID_FILENAME_RE = re.compile(r'[<>:"/\\|?*]')
_SHEET_NAME_STRIP_RE = re.compile(r"[^a-zA-Z0-9\s_-]")


def rows_to_frame(rows: Sequence[Row]) -> pd.DataFrame:
    cleaned = [{k: v for k, v in row.items() if k != ROW_ID} for row in rows]
    return pd.DataFrame(cleaned)


def write_reconciliation_workbook(path: Path, result: ReconciliationResult) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in (
            (SHEET_MERGED, result.merged),
            (SHEET_UNMATCHED, result.unmatched),
            (SHEET_DUPLICATES, result.duplicates),
        ):
            rows_to_frame(rows).to_excel(writer, sheet_name=sheet, index=False)
    return path


def build_export_filename(
    client_name: str, sheet_name: str | None = None, sheet_count: int = 1, now: datetime | None = None
) -> str:
    """``{client}_{YYYY-MM-DD_HHMM}.xlsx``; the sheet name is added for multi-sheet workbooks."""
    now = now or datetime.now()
    stem = re.sub(r"\.xlsx?$", "", client_name, flags=re.IGNORECASE) or "merged_data"
    timestamp = now.strftime("%Y-%m-%d_%H%M")
    if sheet_count > 1 and sheet_name:
        sheet = re.sub(r"\s+", "_", _SHEET_NAME_STRIP_RE.sub("", sheet_name))
        return sanitize_export_filename(f"{stem}_{sheet}_{timestamp}.xlsx")
    return sanitize_export_filename(f"{stem}_{timestamp}.xlsx")


def sanitize_export_filename(name: str) -> str:
    """Force an Excel extension and replace characters Windows rejects in file names."""
    filename = name.strip()
    if not filename.lower().endswith((".xlsx", ".xls")):
        filename += ".xlsx"
    return _INVALID_FILENAME_RE.sub("_", filename)
