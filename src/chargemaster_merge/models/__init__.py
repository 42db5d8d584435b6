"""Domain models for the chargemaster reconciliation tool.

Rows are plain dicts keyed by spreadsheet header; everything else here is a
frozen dataclass passed by value between the reader, the engine and the writer.
"""

from .comparison_result import ComparisonStats, ReconciliationResult
from .criteria import ModifierCriteria
from .issue_record import IssueRecord
from .run_result import ClientFileStat, RunResult
from .tabular import Column, Row, SheetData, cell_text, is_blank

__all__ = [
    # Tabular model
    "Column",
    "Row",
    "SheetData",
    "cell_text",
    "is_blank",
    # Matching policy
    "ModifierCriteria",
    # Results
    "ComparisonStats",
    "ReconciliationResult",
    "ClientFileStat",
    "RunResult",
    "IssueRecord",
]
