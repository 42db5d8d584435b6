from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from ..models.comparison_result import ComparisonStats, ReconciliationResult
from ..models.criteria import ModifierCriteria
from ..models.tabular import ROW_ID, Column, Row, cell_text, is_blank
from .code_keys import build_raw_key, row_comparison_key
from .column_resolver import DESCRIPTION, HCPCS, MODIFIER, QUANTITY, build_column_mapping, resolve_column
from .formatter import format_codes_for_display, is_code_field
from .multiplier import apply_multiplier_quantity_logic, parse_multiplier_code

"""Master-driven reconciliation of a master code sheet against a client sheet.

reconcile() is a pure function of its inputs: it builds fresh lookups per call,
never mutates the caller's rows, and keeps no state between calls.

Result semantics:
- merged: one row per (trauma-filtered) master row, overlaid with client values
  when the comparison key hits the client lookup
- unmatched: client rows whose key matches no master row
- duplicates: client rows sharing a raw key with another client row
"""

__all__ = [
    "TRAUMA_CODES",
    "TRAUMA_MARKER",
    "MissingKeyColumnError",
    "ResolvedColumns",
    "resolve_key_columns",
    "filter_trauma",
    "find_duplicates",
    "reconcile",
]

logger = logging.getLogger(__name__)

TRAUMA_CODES = frozenset({"99284", "99285", "99291"})
TRAUMA_MARKER = "trauma team"


class MissingKeyColumnError(Exception):
    """Raised when a dataset has no column resolvable to an HCPCS code."""

    def __init__(self, side: str) -> None:
        self.side = side
        super().__init__(f"{side} data has no HCPCS/code column")


@dataclass(frozen=True)
class ResolvedColumns:
    code: str
    modifier: str | None
    description: str | None
    quantity: str | None


def resolve_key_columns(columns: Sequence[Column], side: str) -> ResolvedColumns:
    code = resolve_column(HCPCS, columns)
    if code is None:
        raise MissingKeyColumnError(side)
    return ResolvedColumns(
        code=code,
        modifier=resolve_column(MODIFIER, columns),
        description=resolve_column(DESCRIPTION, columns),
        quantity=resolve_column(QUANTITY, columns),
    )


def filter_trauma(rows: Sequence[Row], cols: ResolvedColumns) -> list[Row]:
    """Drop trauma-team rows (fixed code set + "trauma team" in the description)."""
    if cols.description is None:
        return list(rows)
    kept: list[Row] = []
    for row in rows:
        code = cell_text(row.get(cols.code)).strip().upper()
        desc = cell_text(row.get(cols.description)).lower()
        if code in TRAUMA_CODES and TRAUMA_MARKER in desc:
            continue
        kept.append(row)
    return kept


def find_duplicates(rows: Sequence[Row], code_field: str, modifier_field: str | None) -> list[Row]:
    """All rows (every occurrence, input order) whose raw key appears more than once."""
    keys = [build_raw_key(row, code_field, modifier_field) for row in rows]
    counts = Counter(k for k in keys if k)
    return [row for row, key in zip(rows, keys) if key and counts[key] > 1]


def _keys_for(
    rows: Sequence[Row],
    cols: ResolvedColumns,
    criteria: ModifierCriteria,
    side: str,
    key_cache: dict[tuple[str, Any], str] | None,
) -> list[str]:
    keys: list[str] = []
    for row in rows:
        row_id = row.get(ROW_ID)
        # id のない行はキャッシュしない
        if key_cache is None or row_id is None:
            keys.append(row_comparison_key(row, cols.code, cols.modifier, criteria))
            continue
        cache_key = (side, row_id)
        key = key_cache.get(cache_key)
        if key is None:
            key = row_comparison_key(row, cols.code, cols.modifier, criteria)
            key_cache[cache_key] = key
        keys.append(key)
    return keys


def _merge_row(
    master_row: Row,
    client_row: Row,
    mapping: dict[str, str],
    master_cols: ResolvedColumns,
) -> Row:
    merged = dict(master_row)
    # 主キー列 (コード/モディファイア) はマスター側の値を保持
    protected = {master_cols.code, master_cols.modifier}
    multiplier = parse_multiplier_code(master_row.get(master_cols.code)).multiplier
    for master_field, client_field in mapping.items():
        if master_field in protected:
            continue
        value = client_row.get(client_field)
        if is_blank(value):
            continue
        if master_field == master_cols.quantity:
            value = apply_multiplier_quantity_logic(master_row.get(master_cols.code), value, multiplier)
        merged[master_field] = value
    return merged


def reconcile(
    master_rows: Sequence[Row],
    master_columns: Sequence[Column],
    client_rows: Sequence[Row],
    client_columns: Sequence[Column],
    criteria: ModifierCriteria | None = None,
    *,
    key_cache: dict[tuple[str, Any], str] | None = None,
) -> ReconciliationResult:
    """Join client rows onto master rows by comparison key.

    Args:
        master_rows / master_columns: the catalog; drives the output row set
        client_rows / client_columns: the sheet being checked
        criteria: modifier equivalence policy (defaults to all flags off)
        key_cache: optional memo of (side, row id) -> comparison key, filled
            during this call only. Pass a fresh dict per call.

    Raises:
        MissingKeyColumnError: either side lacks an HCPCS/code column
    """
    start = time.perf_counter()
    criteria = criteria or ModifierCriteria()

    master_cols = resolve_key_columns(master_columns, "master")
    client_cols = resolve_key_columns(client_columns, "client")
    mapping = build_column_mapping(master_columns, client_columns)
    logger.debug(
        "resolved columns master=%s client=%s mapping=%s", master_cols, client_cols, mapping
    )

    if criteria.ignore_trauma:
        masters = filter_trauma(master_rows, master_cols)
        clients = filter_trauma(client_rows, client_cols)
        logger.debug(
            "trauma filter master %d->%d client %d->%d",
            len(master_rows), len(masters), len(client_rows), len(clients),
        )
    else:
        masters = list(master_rows)
        clients = list(client_rows)

    master_keys = _keys_for(masters, master_cols, criteria, "master", key_cache)
    client_keys = _keys_for(clients, client_cols, criteria, "client", key_cache)

    # last write wins on colliding client keys
    client_lookup: dict[str, Row] = {}
    for key, row in zip(client_keys, clients):
        client_lookup[key] = row

    merged: list[Row] = []
    matched = 0
    for key, master_row in zip(master_keys, masters):
        client_row = client_lookup.get(key)
        if client_row is None:
            merged.append(dict(master_row))
            continue
        matched += 1
        merged.append(_merge_row(master_row, client_row, mapping, master_cols))

    master_key_set = set(master_keys)
    unmatched = [dict(row) for key, row in zip(client_keys, clients) if key not in master_key_set]
    duplicates = [dict(row) for row in find_duplicates(clients, client_cols.code, client_cols.modifier)]

    code_fields = [c.field for c in master_columns if is_code_field(c.field)]
    merged = format_codes_for_display(merged, code_fields)

    total_client = len(clients)
    match_rate = round(matched / total_client * 100, 2) if total_client else 0.0
    elapsed_ms = round((time.perf_counter() - start) * 1000)
    stats = ComparisonStats(
        total_master_records=len(masters),
        total_client_records=total_client,
        matched_records=matched,
        unmatched_records=len(unmatched),
        duplicate_records=len(duplicates),
        match_rate=match_rate,
        processing_time_ms=elapsed_ms,
        columns_matched=len(mapping),
        total_master_columns=len(master_columns),
        total_client_columns=len(client_columns),
    )
    logger.debug("reconcile stats: %s", stats)
    return ReconciliationResult(
        merged=merged,
        unmatched=unmatched,
        duplicates=duplicates,
        stats=stats,
        column_mapping=mapping,
    )
