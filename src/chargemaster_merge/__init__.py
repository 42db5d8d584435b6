"""Chargemaster merge: reconcile a master billing-code sheet against client sheets.

The public engine entry points are re-exported here so callers (CLI, batch
orchestrator, notebooks) share one implementation of the matching rules.
Row edits on a merged result go through duplicate_record / delete_records.
"""

from .models import Column, ComparisonStats, ModifierCriteria, ReconciliationResult, Row
from .services.code_keys import build_comparison_key, build_raw_key, parse_code
from .services.column_resolver import build_column_mapping, resolve_column
from .services.formatter import format_codes_for_display
from .services.multiplier import apply_multiplier_quantity_logic, parse_multiplier_code
from .services.reconciliation import MissingKeyColumnError, reconcile
from .services.records import DuplicateIdCollisionError, RecordNotFoundError, delete_records, duplicate_record

__all__ = [
    "Column",
    "ComparisonStats",
    "ModifierCriteria",
    "ReconciliationResult",
    "Row",
    "MissingKeyColumnError",
    "RecordNotFoundError",
    "DuplicateIdCollisionError",
    "apply_multiplier_quantity_logic",
    "build_column_mapping",
    "build_comparison_key",
    "build_raw_key",
    "delete_records",
    "duplicate_record",
    "format_codes_for_display",
    "parse_code",
    "parse_multiplier_code",
    "reconcile",
    "resolve_column",
]

__version__ = "0.1.0"
