from __future__ import annotations

from collections.abc import Iterable

from ..models.tabular import ROW_ID, Row

"""Post-merge display formatting of procedure codes ("1234567" -> "12345-67")."""

__all__ = [
    "CODE_FIELD_MARKERS",
    "is_code_field",
    "format_code",
    "format_codes_for_display",
]

CODE_FIELD_MARKERS = ("hcpcs", "cpt", "code")


def is_code_field(name: str) -> bool:
    lowered = name.lower()
    return any(marker in lowered for marker in CODE_FIELD_MARKERS)


def format_code(value: str) -> str:
    """Insert a hyphen after the 5-char root unless index 5 is '-' or a multiplier 'x'."""
    text = value.strip()
    if len(text) < 7:
        return value
    if text[5] in ("-", "x", "X"):
        return value
    return f"{text[:5]}-{text[5:]}"


def format_codes_for_display(rows: Iterable[Row], code_fields: Iterable[str] | None = None) -> list[Row]:
    """Return copies of ``rows`` with code columns hyphenated.

    ``code_fields`` restricts formatting to the named fields; by default every
    field whose name mentions hcpcs/cpt/code is formatted. Only string values
    are touched; inputs are not mutated.
    """
    only = set(code_fields) if code_fields is not None else None
    formatted: list[Row] = []
    for row in rows:
        out = dict(row)
        for key, value in row.items():
            if key == ROW_ID or not isinstance(value, str):
                continue
            if only is not None:
                if key not in only:
                    continue
            elif not is_code_field(key):
                continue
            out[key] = format_code(value)
        formatted.append(out)
    return formatted
