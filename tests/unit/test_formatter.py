from __future__ import annotations

from chargemaster_merge.services.formatter import format_code, format_codes_for_display


def test_inserts_hyphen_after_root():
    rows = format_codes_for_display([{"id": 1, "HCPCS": "1234567"}])
    assert rows == [{"id": 1, "HCPCS": "12345-67"}]


def test_formatting_is_idempotent():
    once = format_codes_for_display([{"id": 1, "HCPCS": "1234567"}])
    assert format_codes_for_display(once) == once


def test_multiplier_code_left_alone():
    rows = format_codes_for_display([{"id": 1, "CPT Code": "12345x2"}, {"id": 2, "CPT Code": "12345X12"}])
    assert [r["CPT Code"] for r in rows] == ["12345x2", "12345X12"]


def test_short_codes_and_non_code_fields_untouched():
    rows = format_codes_for_display([{"id": 1, "HCPCS": "99213", "Description": "Office visit"}])
    assert rows == [{"id": 1, "HCPCS": "99213", "Description": "Office visit"}]


def test_numeric_values_untouched():
    rows = format_codes_for_display([{"id": 1, "Proc_Code": 1234567}])
    assert rows[0]["Proc_Code"] == 1234567


def test_explicit_code_fields_restrict_formatting():
    rows = format_codes_for_display(
        [{"id": 1, "HCPCS": "1234567", "Alt Code": "7654321"}], code_fields=["HCPCS"]
    )
    assert rows[0] == {"id": 1, "HCPCS": "12345-67", "Alt Code": "7654321"}


def test_longer_codes_keep_remainder():
    assert format_code("12345678") == "12345-678"


def test_input_rows_not_mutated():
    source = [{"id": 1, "HCPCS": "1234567"}]
    format_codes_for_display(source)
    assert source == [{"id": 1, "HCPCS": "1234567"}]
