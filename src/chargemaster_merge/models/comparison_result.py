from __future__ import annotations

from dataclasses import dataclass, field

from .tabular import Row

"""Reconciliation output models.

ComparisonStats is derived data recomputed on every run; ReconciliationResult
bundles the three row sets the export writer turns into sheets.
"""

__all__ = [
    "ComparisonStats",
    "ReconciliationResult",
]


@dataclass(frozen=True)
class ComparisonStats:
    """Summary counters for one reconcile() call."""
    total_master_records: int  # after trauma filtering
    total_client_records: int  # after trauma filtering
    matched_records: int  # master rows whose key hit the client lookup
    unmatched_records: int  # client rows with no master counterpart
    duplicate_records: int  # client rows sharing a raw key
    match_rate: float  # matched / client * 100, 2 decimals
    processing_time_ms: int
    columns_matched: int
    total_master_columns: int
    total_client_columns: int

    def to_dict(self) -> dict[str, float | int]:
        """camelCase shape consumed by the stats panel of the front end."""
        return {
            "totalMasterRecords": self.total_master_records,
            "totalClientRecords": self.total_client_records,
            "matchedRecords": self.matched_records,
            "unmatchedRecords": self.unmatched_records,
            "duplicateRecords": self.duplicate_records,
            "matchRate": self.match_rate,
            "processingTime": self.processing_time_ms,
            "columnsMatched": self.columns_matched,
            "totalMasterColumns": self.total_master_columns,
            "totalClientColumns": self.total_client_columns,
        }


@dataclass(frozen=True)
class ReconciliationResult:
    merged: list[Row]
    unmatched: list[Row]
    duplicates: list[Row]
    stats: ComparisonStats
    column_mapping: dict[str, str] = field(default_factory=dict)
