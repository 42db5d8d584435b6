from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.issue_record import IssueRecord

"""Issue log buffering.

Records are kept in memory during a batch run and appended to
``logs/issues-YYYYMMDD-HHMMSS.log`` (UTC) as JSON Lines on flush. The file is
only created when there is something to write.
"""

__all__ = [
    "IssueRecord",
    "IssueLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class IssueLogBuffer:
    """In-memory buffer for issue records. Flush writes JSON Lines.

    Not thread safe; batch runs are serial.
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[IssueRecord] = []
        self._logs_dir = logs_dir or LOGS_DIR
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"issues-{stamp}.log"
        return self._file_path

    def append(self, record: IssueRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
