from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, ReconcileConfig, load_config
from ..excel.reader import load_sheet
from ..logging.init import log_summary, set_debug, setup_logging
from ..services.column_resolver import DESCRIPTION, HCPCS, MODIFIER, QUANTITY, resolve_column
from ..services.orchestrator import ProcessingError, reconcile_all, scan_client_files
from ..services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load .env, then the YAML config (--config or CHARGEMASTER_CONFIG)
- Reconcile every client workbook against the master sheet
- Print one SUMMARY line and exit with the batch status
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CONFIG_ENV_VAR = "CHARGEMASTER_CONFIG"


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env via python-dotenv. Failures only warn."""
    try:
        if path.exists():
            load_dotenv(dotenv_path=path, override=override)
    except OSError as e:  # pragma: no cover
        print(f"WARNING: failed to load .env via python-dotenv: {e}")


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Reconcile client chargemaster sheets against a master sheet")
    p.add_argument("--config", type=Path, default=None, help="Path to YAML config")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--inspect-data", action="store_true", help="Print sheet headers, resolved key columns & first rows then exit"
    )
    return p.parse_args(argv)


def _describe_sheet(label: str, path: Path, sheet_name: str | None) -> None:
    try:
        sheet, sheet_count = load_sheet(path, sheet_name)
    except Exception as e:  # pragma: no cover
        print(f"{label}: {path.name} read_error={e}")
        return
    print(f"{label}: {path.name} sheet={sheet.sheet_name} sheets={sheet_count} cols={sheet.fields}")
    resolved = {name: resolve_column(name, sheet.columns) for name in (HCPCS, MODIFIER, DESCRIPTION, QUANTITY)}
    print(f"  resolved={resolved}")
    safe_rows = [
        {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in r.items()} for r in sheet.rows[:3]
    ]
    print("  sample_rows=", safe_rows)


def _inspect_data(cfg: ReconcileConfig) -> int:
    master = Path(cfg.master_file)
    if not master.exists():
        print(f"inspect: master file not found: {master}")
        return EXIT_FATAL
    _describe_sheet("MASTER", master, cfg.master_sheet)
    try:
        clients = scan_client_files(Path(cfg.client_directory))
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not clients:
        print("inspect: no client .xlsx files")
    for path in clients:
        _describe_sheet("CLIENT", path, cfg.client_sheet)
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみ sys.argv を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    config_path = args.config or Path(os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.debug:
        logger = set_debug(True)

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Reconciling client files from: {cfg.client_directory}")
    try:
        result = reconcile_all(cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    summary_line = render_summary_line(result)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line.removeprefix("SUMMARY "))

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
