from __future__ import annotations

import pytest

from chargemaster_merge.models.criteria import ModifierCriteria
from chargemaster_merge.services.code_keys import (
    build_comparison_key,
    build_raw_key,
    parse_code,
    row_comparison_key,
)


@pytest.mark.parametrize(
    "code, expected",
    [
        ("12345-25", ("12345", "25")),  # XXXXX-YY
        ("1234525", ("12345", "25")),  # XXXXXYY
        ("12345", ("12345", "")),
        ("A123", ("A123", "")),
        ("123456", ("12345", "6")),  # fallback
        ("12345-XU9", ("12345", "-XU9")),  # 9 chars -> fallback keeps the dash
        (" j1100-59 ", ("J1100", "59")),
        ("", ("", "")),
    ],
)
def test_parse_code_from_code_cell(code, expected):
    assert tuple(parse_code({"id": 0, "HCPCS": code}, "HCPCS", None)) == expected


def test_parse_code_separate_modifier_column_keeps_code_as_is():
    row = {"id": 0, "HCPCS": "1234567", "Mod": " xu "}
    assert parse_code(row, "HCPCS", "Mod") == ("1234567", "XU")


def test_parse_code_blank_modifier_column_falls_back_to_code_cell():
    row = {"id": 0, "HCPCS": "99213-25", "Mod": ""}
    assert parse_code(row, "HCPCS", "Mod") == ("99213", "25")


def test_parse_code_numeric_cell():
    assert parse_code({"id": 0, "HCPCS": 99213.0}, "HCPCS", None) == ("99213", "")
    assert parse_code({"id": 0, "HCPCS": 99213}, "HCPCS", None) == ("99213", "")


def test_comparison_key_without_criteria_keeps_modifier():
    assert build_comparison_key("99213", "25", ModifierCriteria()) == "99213-25"
    assert build_comparison_key("99213", "", ModifierCriteria()) == "99213"


@pytest.mark.parametrize(
    "flag, modifier",
    [("root_25", "25"), ("root_50", "50"), ("root_59", "59"), ("root_xu", "XU"), ("root_76", "76")],
)
def test_comparison_key_collapses_enabled_modifier(flag, modifier):
    criteria = ModifierCriteria(**{flag: True})
    assert build_comparison_key("12345", modifier, criteria) == "12345"
    # other modifiers are untouched
    assert build_comparison_key("12345", "LT", criteria) == "12345-LT"


def test_comparison_key_root_00():
    criteria = ModifierCriteria(root_00=True)
    assert build_comparison_key("12345", "00", criteria) == "12345"
    assert build_comparison_key("12345", "", criteria) == "12345"
    assert build_comparison_key("12345", "25", criteria) == "12345-25"


def test_comparison_key_trims_modifier():
    assert build_comparison_key("12345", " 25 ", ModifierCriteria(root_25=True)) == "12345"


def test_modifier_equivalence_example():
    with_mod = {"id": 1, "HCPCS": "12345-25"}
    bare = {"id": 2, "HCPCS": "12345"}
    on = ModifierCriteria(root_25=True)
    off = ModifierCriteria()
    assert row_comparison_key(with_mod, "HCPCS", None, on) == row_comparison_key(bare, "HCPCS", None, on)
    assert row_comparison_key(with_mod, "HCPCS", None, off) != row_comparison_key(bare, "HCPCS", None, off)


def test_comparison_key_is_stable():
    row = {"id": 1, "HCPCS": "1234559"}
    criteria = ModifierCriteria(root_59=True)
    assert row_comparison_key(row, "HCPCS", None, criteria) == row_comparison_key(row, "HCPCS", None, criteria)


def test_raw_key_uses_literal_code():
    assert build_raw_key({"id": 0, "HCPCS": " 99213-25 "}, "HCPCS", None) == "99213-25"
    assert build_raw_key({"id": 0, "HCPCS": "a1234", "Modifier": "25"}, "HCPCS", "Modifier") == "A1234-25"
    assert build_raw_key({"id": 0, "HCPCS": "A1234", "Modifier": ""}, "HCPCS", "Modifier") == "A1234-"
