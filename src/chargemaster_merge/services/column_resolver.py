from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from ..models.tabular import ROW_ID, Column

"""Column resolution across heterogeneous spreadsheet schemas.

Master and client sheets name the same concept differently ("HCPCS" vs
"Proc_Code", "Qty" vs "Units"). resolve_column() finds the column for a logical
name using strategies in strict priority order; the first strategy with a hit wins:

1. exact field name
2. case-insensitive
3. normalized (spaces, underscores and hyphens removed, lower-cased)
4. substring in either direction, in column order
5. synonym category (FUZZY_CATEGORIES)
"""

__all__ = [
    "FUZZY_CATEGORIES",
    "HCPCS",
    "MODIFIER",
    "DESCRIPTION",
    "QUANTITY",
    "resolve_column",
    "build_column_mapping",
]

logger = logging.getLogger(__name__)

HCPCS = "HCPCS"
MODIFIER = "Modifier"
DESCRIPTION = "Description"
QUANTITY = "Quantity"

FUZZY_CATEGORIES: dict[str, tuple[str, ...]] = {
    "hcpcs": ("hcpc", "code", "procedure_code", "proc_code", "cpt"),
    "modifier": ("mod", "modif", "modifier_code"),
    "description": ("desc", "procedure_desc", "proc_desc", "name", "procedure_name"),
    "quantity": ("qty", "units", "unit", "count"),
    "price": ("amount", "cost", "charge", "rate", "fee"),
    "date": ("service_date", "dos", "date_of_service"),
}

_NORMALIZE_RE = re.compile(r"[\s_-]+")


def _normalize(name: str) -> str:
    return _NORMALIZE_RE.sub("", name.lower())


def _in_category(lowered: str, category: str, variants: Iterable[str]) -> bool:
    return category in lowered or any(v in lowered for v in variants)


def resolve_column(logical_name: str, columns: Iterable[Column]) -> str | None:
    """Return the field of the column matching ``logical_name`` or None."""
    fields = [c.field for c in columns]

    if logical_name in fields:
        return logical_name

    lowered = logical_name.lower()
    for f in fields:
        if f.lower() == lowered:
            logger.debug("column match (case-insensitive): %s -> %s", logical_name, f)
            return f

    normalized = _normalize(logical_name)
    for f in fields:
        if _normalize(f) == normalized:
            logger.debug("column match (normalized): %s -> %s", logical_name, f)
            return f

    for f in fields:
        candidate = f.lower()
        if lowered in candidate or candidate in lowered:
            logger.debug("column match (substring): %s -> %s", logical_name, f)
            return f

    for category, variants in FUZZY_CATEGORIES.items():
        if not _in_category(lowered, category, variants):
            continue
        for f in fields:
            if _in_category(f.lower(), category, variants):
                logger.debug("column match (fuzzy via %s): %s -> %s", category, logical_name, f)
                return f

    return None


def build_column_mapping(master_columns: Iterable[Column], client_columns: Iterable[Column]) -> dict[str, str]:
    """Map each master field to the client field holding the same concept.

    Master fields with no client counterpart are left out. ``id`` is never mapped.
    """
    client = list(client_columns)
    mapping: dict[str, str] = {}
    for col in master_columns:
        if col.field == ROW_ID:
            continue
        matched = resolve_column(col.field, client)
        if matched is not None and matched != ROW_ID:
            mapping[col.field] = matched
    return mapping
