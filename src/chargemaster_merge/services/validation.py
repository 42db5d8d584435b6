from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from ..models.criteria import ModifierCriteria
from ..models.tabular import ROW_ID, Row, cell_text, is_blank
from .column_resolver import FUZZY_CATEGORIES

"""Input validation helpers.

These never block a reconciliation run: the engine degrades gracefully on odd
codes. Callers use the results to warn users and to feed the issue log.
"""

__all__ = [
    "ValidationResult",
    "HCPCS_PATTERN",
    "MODIFIER_PATTERN",
    "validate_hcpcs",
    "validate_modifier",
    "validate_modifier_criteria",
    "validate_data_integrity",
    "validate_merge_compatibility",
    "validate_dataset_codes",
]

HCPCS_PATTERN = re.compile(r"^[A-Z0-9]{5}(-[A-Z0-9]{1,2})?$")
MODIFIER_PATTERN = re.compile(r"^[A-Z0-9]{1,2}$")

_HCPCS_KEYWORDS = ("hcpcs", *FUZZY_CATEGORIES["hcpcs"])


@dataclass
class ValidationResult:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_findings(self) -> bool:
        return bool(self.errors or self.warnings)


def validate_hcpcs(code: object) -> ValidationResult:
    result = ValidationResult()
    cleaned = cell_text(code).strip().upper()
    if not cleaned:
        result.errors.append("HCPCS code is required")
        return result
    if len(cleaned) < 5:
        result.errors.append("HCPCS code must be at least 5 characters")
    elif len(cleaned) > 8:
        result.errors.append("HCPCS code must be no more than 8 characters")
    if not HCPCS_PATTERN.match(cleaned):
        result.warnings.append("HCPCS code format may be invalid")
    return result


def validate_modifier(modifier: object) -> ValidationResult:
    result = ValidationResult()
    cleaned = cell_text(modifier).strip().upper()
    if not cleaned:
        return result
    if len(cleaned) > 2:
        result.errors.append("Modifier must be 1-2 characters")
    if not MODIFIER_PATTERN.match(cleaned):
        result.warnings.append("Modifier format may be invalid")
    return result


def validate_modifier_criteria(criteria: ModifierCriteria) -> ValidationResult:
    result = ValidationResult()
    if not criteria.any_enabled():
        result.warnings.append("No modifier criteria selected - all modifiers will be preserved")
    return result


def validate_data_integrity(rows: Sequence[Row]) -> ValidationResult:
    result = ValidationResult()
    if not rows:
        result.errors.append("No data to validate")
        return result

    ids = [row.get(ROW_ID) for row in rows]
    if len(ids) != len(set(ids)):
        result.errors.append("Duplicate row IDs found")

    empty = sum(
        1 for row in rows if all(is_blank(v) for k, v in row.items() if k != ROW_ID)
    )
    if empty:
        result.warnings.append(f"{empty} empty rows found")
    return result


def _has_hcpcs_column(fields: Sequence[str]) -> bool:
    return any(k in f.lower() for f in fields for k in _HCPCS_KEYWORDS)


def validate_merge_compatibility(
    master_rows: Sequence[Row],
    client_rows: Sequence[Row],
    master_fields: Sequence[str],
    client_fields: Sequence[str],
) -> ValidationResult:
    result = ValidationResult()
    if not master_rows:
        result.errors.append("Master data is empty")
    if not client_rows:
        result.errors.append("Client data is empty")
    if not master_fields:
        result.errors.append("Master data has no columns")
    if not client_fields:
        result.errors.append("Client data has no columns")

    if not _has_hcpcs_column(master_fields):
        result.errors.append("Master data appears to be missing HCPCS/code column")
    if not _has_hcpcs_column(client_fields):
        result.errors.append("Client data appears to be missing HCPCS/code column")

    if len(master_fields) != len(client_fields):
        result.warnings.append(
            f"Column count mismatch: Master has {len(master_fields)}, Client has {len(client_fields)}"
        )
    return result


def validate_dataset_codes(
    rows: Sequence[Row], code_field: str, modifier_field: str | None
) -> Iterator[tuple[int, ValidationResult]]:
    """Yield (row index, findings) for rows whose code or modifier looks wrong."""
    for index, row in enumerate(rows):
        result = validate_hcpcs(row.get(code_field))
        if modifier_field:
            mod = validate_modifier(row.get(modifier_field))
            result.errors.extend(mod.errors)
            result.warnings.extend(mod.warnings)
        if result.has_findings:
            yield index, result
