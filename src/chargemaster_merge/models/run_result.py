from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

"""Batch run result models.

A batch run reconciles every client workbook in a directory against one master
sheet; these dataclasses aggregate the per-file outcome for the SUMMARY line.
"""

__all__ = [
    "ClientFileStat",
    "RunResult",
]


@dataclass(frozen=True)
class ClientFileStat:
    """Per-client-file outcome."""
    file_name: str
    sheet_name: str
    status: str  # success/failed
    merged_rows: int = 0
    matched_rows: int = 0
    unmatched_rows: int = 0
    duplicate_rows: int = 0
    match_rate: float = 0.0
    elapsed_seconds: float = 0.0
    output_path: Path | None = None
    error: str | None = None


@dataclass(frozen=True)
class RunResult:
    """Aggregated results across all client files of one batch run."""
    success_files: int
    failed_files: int
    total_merged: int
    total_unmatched: int
    total_duplicates: int
    elapsed_seconds: float
    file_stats: list[ClientFileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
