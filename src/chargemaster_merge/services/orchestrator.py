from __future__ import annotations

import logging
import time
from zipfile import BadZipFile
from datetime import datetime
from pathlib import Path

from ..config.loader import ReconcileConfig
from ..excel.reader import SheetNotFoundError, load_sheet
from ..excel.writer import build_export_filename, write_reconciliation_workbook
from ..logging.issue_log import IssueLogBuffer
from ..models.issue_record import IssueRecord
from ..models.run_result import ClientFileStat, RunResult
from ..models.tabular import SheetData
from .progress import ProgressTracker
from .reconciliation import MissingKeyColumnError, reconcile, resolve_key_columns
from .validation import (
    validate_data_integrity,
    validate_dataset_codes,
    validate_merge_compatibility,
    validate_modifier_criteria,
)

"""Batch orchestration: one master sheet against every client workbook in a directory.

Each client file is reconciled independently; a failure in one file is
recorded and the run continues. Only problems with the master sheet or the
client directory abort the run.
"""

__all__ = [
    "ProcessingError",
    "scan_client_files",
    "reconcile_file",
    "reconcile_all",
]

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal error that prevents the batch run from starting."""


def scan_client_files(directory: Path) -> list[Path]:
    """List .xlsx files in ``directory`` (non-recursive, sorted by name).

    Excel lock files (``~$name.xlsx``) are skipped.
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")
    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")
    try:
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix == ".xlsx" and not p.name.startswith("~$")
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def _load_master(config: ReconcileConfig) -> SheetData:
    path = Path(config.master_file)
    if not path.exists():
        raise ProcessingError(f"Master file not found: {path}")
    try:
        master, _ = load_sheet(path, config.master_sheet)
    except SheetNotFoundError as e:
        raise ProcessingError(str(e)) from e
    except (OSError, ValueError, BadZipFile) as e:
        raise ProcessingError(f"Failed to read master file {path}: {e}") from e
    try:
        resolve_key_columns(master.columns, "master")
    except MissingKeyColumnError as e:
        raise ProcessingError(str(e)) from e
    return master


def _failed(client_path: Path, sheet_label: str, started: float, error: Exception) -> ClientFileStat:
    return ClientFileStat(
        file_name=client_path.name,
        sheet_name=sheet_label,
        status="failed",
        elapsed_seconds=time.perf_counter() - started,
        error=str(error),
    )


def _record_code_issues(client: SheetData, file_name: str, issues: IssueLogBuffer) -> None:
    try:
        cols = resolve_key_columns(client.columns, "client")
    except MissingKeyColumnError:
        return
    for index, result in validate_dataset_codes(client.rows, cols.code, cols.modifier):
        issue_type = "INVALID_CODE" if result.errors else "SUSPICIOUS_CODE"
        message = "; ".join(result.errors + result.warnings)
        issues.append(IssueRecord.create(file_name, client.sheet_name, index, issue_type, message))


def _record_dataset_issues(
    master: SheetData, client: SheetData, file_name: str, issues: IssueLogBuffer
) -> None:
    """Sheet-level findings (row -1): client integrity, then master/client compatibility."""
    checks = (
        ("DATA_INTEGRITY", validate_data_integrity(client.rows)),
        (
            "MERGE_COMPATIBILITY",
            validate_merge_compatibility(master.rows, client.rows, master.fields, client.fields),
        ),
    )
    for issue_type, result in checks:
        for message in result.errors + result.warnings:
            issues.append(IssueRecord.create(file_name, client.sheet_name, -1, issue_type, message))
        for warning in result.warnings:
            logger.warning(f"{file_name}: {warning}")


def reconcile_file(
    config: ReconcileConfig,
    master: SheetData,
    client_path: Path,
    issues: IssueLogBuffer,
    now: datetime | None = None,
) -> ClientFileStat:
    """Reconcile one client workbook and write its export workbook.

    Never raises for per-file problems: read, key-column, write and unexpected
    errors are appended to ``issues`` and returned as a failed stat.
    """
    started = time.perf_counter()
    sheet_label = config.client_sheet or ""
    try:
        client, sheet_count = load_sheet(client_path, config.client_sheet)
        sheet_label = client.sheet_name
        _record_dataset_issues(master, client, client_path.name, issues)
        _record_code_issues(client, client_path.name, issues)
        result = reconcile(
            master.rows, master.columns, client.rows, client.columns, config.criteria, key_cache={}
        )
    except MissingKeyColumnError as e:
        issues.append(IssueRecord.create(client_path.name, sheet_label, -1, "MISSING_KEY_COLUMN", str(e)))
        logger.error(f"{client_path.name}: {e}")
        return _failed(client_path, sheet_label, started, e)
    except (SheetNotFoundError, OSError, ValueError, BadZipFile) as e:
        issues.append(IssueRecord.create(client_path.name, sheet_label, -1, "READ_ERROR", str(e)))
        logger.error(f"{client_path.name}: {e}")
        return _failed(client_path, sheet_label, started, e)

    out_name = build_export_filename(client_path.name, client.sheet_name, sheet_count, now)
    try:
        out_path = write_reconciliation_workbook(Path(config.output_directory) / out_name, result)
    except Exception as e:
        # 出力失敗はこのファイルのみ失敗扱い、残りは継続
        issues.append(IssueRecord.create(client_path.name, sheet_label, -1, "WRITE_ERROR", str(e)))
        logger.error(f"{client_path.name}: export failed: {e}")
        return _failed(client_path, sheet_label, started, e)

    stats = result.stats
    logger.info(
        f"{client_path.name}: matched={stats.matched_records}/{stats.total_master_records} "
        f"unmatched={stats.unmatched_records} duplicates={stats.duplicate_records} "
        f"match_rate={stats.match_rate} -> {out_path}"
    )
    return ClientFileStat(
        file_name=client_path.name,
        sheet_name=client.sheet_name,
        status="success",
        merged_rows=len(result.merged),
        matched_rows=stats.matched_records,
        unmatched_rows=stats.unmatched_records,
        duplicate_rows=stats.duplicate_records,
        match_rate=stats.match_rate,
        elapsed_seconds=time.perf_counter() - started,
        output_path=out_path,
    )


def _flush_issues(issues: IssueLogBuffer) -> None:
    # issue log の書き込み失敗で実行結果は失わない
    try:
        log_path = issues.flush()
    except OSError as e:
        logger.error(f"failed to write issue log: {e}")
        return
    if log_path is not None:
        logger.info(f"issues written to {log_path}")


def reconcile_all(config: ReconcileConfig, issues: IssueLogBuffer | None = None) -> RunResult:
    """Reconcile every client workbook in the configured directory.

    Raises:
        ProcessingError: master file/sheet unusable or client directory missing
    """
    started = time.perf_counter()
    issues = issues if issues is not None else IssueLogBuffer()

    for warning in validate_modifier_criteria(config.criteria).warnings:
        logger.warning(warning)

    master = _load_master(config)
    logger.info(f"master: {config.master_file} sheet={master.sheet_name} rows={len(master.rows)}")
    client_paths = scan_client_files(Path(config.client_directory))

    file_stats: list[ClientFileStat] = []
    try:
        with ProgressTracker(len(client_paths)) as progress:
            for path in client_paths:
                progress.start_file(path)
                stat = reconcile_file(config, master, path, issues)
                file_stats.append(stat)
                progress.finish_file(success=stat.status == "success")
    finally:
        _flush_issues(issues)

    succeeded = [s for s in file_stats if s.status == "success"]
    return RunResult(
        success_files=len(succeeded),
        failed_files=len(file_stats) - len(succeeded),
        total_merged=sum(s.merged_rows for s in succeeded),
        total_unmatched=sum(s.unmatched_rows for s in succeeded),
        total_duplicates=sum(s.duplicate_rows for s in succeeded),
        elapsed_seconds=time.perf_counter() - started,
        file_stats=file_stats,
    )
