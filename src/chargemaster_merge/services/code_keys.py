from __future__ import annotations

from typing import NamedTuple

from ..models.criteria import ModifierCriteria
from ..models.tabular import Row, cell_text

"""Procedure-code key derivation.

Two different equivalence relations live here and must stay separate:

- comparison key: parsed root + modifier with the ModifierCriteria applied,
  used to join master and client rows.
- raw key: the literal code (and modifier column) text, policy independent,
  used only to flag duplicates inside the client dataset.
"""

__all__ = [
    "ParsedCode",
    "parse_code",
    "build_comparison_key",
    "build_raw_key",
    "row_comparison_key",
]


class ParsedCode(NamedTuple):
    root: str
    modifier: str


def parse_code(row: Row, code_field: str, modifier_field: str | None) -> ParsedCode:
    """Split a row's code cell into (root, modifier).

    Precedence:
      1. separate modifier column with a value -> code as-is, modifier from column
      2. 8 chars with '-' at index 5 ("XXXXX-YY")
      3. exactly 7 chars ("XXXXXYY")
      4. longer than 5 -> first 5 chars / remainder
      5. otherwise the code is the root, no modifier

    Unrecognized shapes fall through to the best-effort branches; nothing raises.
    """
    code = cell_text(row.get(code_field)).upper().strip()

    if modifier_field:
        modifier = cell_text(row.get(modifier_field)).upper().strip()
        if modifier:
            return ParsedCode(code, modifier)

    if len(code) == 8 and code[5] == "-":
        return ParsedCode(code[:5], code[6:8])
    if len(code) == 7:
        return ParsedCode(code[:5], code[5:7])
    if len(code) > 5:
        return ParsedCode(code[:5], code[5:])
    return ParsedCode(code, "")


def build_comparison_key(root: str, modifier: str, criteria: ModifierCriteria) -> str:
    """Canonical join key: ``root`` or ``root-MOD`` after collapsing modifiers."""
    modifier = modifier.strip()
    effective = modifier
    if criteria.root_00 and modifier in ("", "00"):
        effective = ""
    for code, enabled in criteria.collapsed_modifiers.items():
        if enabled and modifier == code:
            effective = ""
    return f"{root}-{effective}" if effective else root


def build_raw_key(row: Row, code_field: str, modifier_field: str | None) -> str:
    code = cell_text(row.get(code_field)).upper().strip()
    if modifier_field:
        modifier = cell_text(row.get(modifier_field)).upper().strip()
        return f"{code}-{modifier}"
    return code


def row_comparison_key(
    row: Row, code_field: str, modifier_field: str | None, criteria: ModifierCriteria
) -> str:
    root, modifier = parse_code(row, code_field, modifier_field)
    return build_comparison_key(root, modifier, criteria)
