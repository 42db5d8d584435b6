from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""IssueRecord model for the JSON Lines issue log.

Each record describes either a row-level finding (bad code format, suspicious
modifier) or a file-level failure. ``row=-1`` marks file-level records where no
specific row applies.
"""

__all__ = [
    "IssueRecord",
]


@dataclass(frozen=True)
class IssueRecord:
    """Structured issue record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Workbook filename being reconciled
        sheet: Sheet name within the workbook
        row: 0-based data row index. Use -1 for file-level issues
        issue_type: Classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str
    file: str
    sheet: str
    row: int  # -1 = file-level
    issue_type: str
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, issue_type: str, message: str) -> IssueRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return IssueRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            issue_type=issue_type,
            message=message,
        )

    def to_json_line(self) -> str:
        # 追加キー禁止: dataclass のフィールドのみ出力
        return json.dumps(asdict(self), ensure_ascii=False)
