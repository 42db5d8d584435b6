from __future__ import annotations

import re
from typing import Any, NamedTuple

from ..models.tabular import cell_text, is_blank

"""Quantity multipliers embedded in procedure codes.

Some master catalogs encode a repeat count where a modifier would sit:
``12345x2`` means "code 12345, two units". The 6th character ``x``/``X``
followed by digits marks a multiplier, never a modifier.
"""

__all__ = [
    "MultiplierInfo",
    "parse_multiplier_code",
    "apply_multiplier_quantity_logic",
]

_MULTIPLIER_RE = re.compile(r"^.{5}[xX](\d+)$")


class MultiplierInfo(NamedTuple):
    has_multiplier: bool
    multiplier: int | None


def parse_multiplier_code(code: Any) -> MultiplierInfo:
    match = _MULTIPLIER_RE.match(cell_text(code).strip())
    if match is None:
        return MultiplierInfo(False, None)
    return MultiplierInfo(True, int(match.group(1)))


def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(cell_text(value).strip().replace(",", ""))
    except ValueError:
        return None


def apply_multiplier_quantity_logic(code: Any, client_quantity: Any, multiplier: int | None = None) -> Any:
    """Quantity to store on a merged row.

    ``multiplier`` is read from ``code`` when not given. Without a multiplier
    the client quantity passes through unchanged. With one, a numeric client
    quantity is scaled by it; a blank or non-numeric client quantity is
    replaced by the multiplier itself.
    """
    if multiplier is None:
        multiplier = parse_multiplier_code(code).multiplier
    if multiplier is None:
        return client_quantity
    if is_blank(client_quantity):
        return multiplier
    number = _to_number(client_quantity)
    if number is None:
        return multiplier
    adjusted = number * multiplier
    return int(adjusted) if adjusted.is_integer() else adjusted
