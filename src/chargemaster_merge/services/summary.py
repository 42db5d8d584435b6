from __future__ import annotations

from ..models.run_result import RunResult

"""SUMMARY line rendering for batch reconciliation runs."""


def _format_number(value: float) -> str:
    # 整数値は小数点なし、極小値は指数表記を避ける
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(value)


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a finished batch run.

    Format:
    SUMMARY files={total}/{total} success={success} failed={failed} merged={merged}
    unmatched={unmatched} duplicates={duplicates} elapsed_sec={elapsed}

    Examples:
        >>> result = RunResult(
        ...     success_files=2, failed_files=0, total_merged=40,
        ...     total_unmatched=3, total_duplicates=2, elapsed_seconds=1.5,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=2/2 success=2 failed=0 merged=40 unmatched=3 duplicates=2 elapsed_sec=1.5'
    """
    total = result.total_files
    return (
        f"SUMMARY files={total}/{total} "
        f"success={result.success_files} "
        f"failed={result.failed_files} "
        f"merged={result.total_merged} "
        f"unmatched={result.total_unmatched} "
        f"duplicates={result.total_duplicates} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)}"
    )
