from __future__ import annotations

import pytest

from chargemaster_merge.models.criteria import ModifierCriteria
from chargemaster_merge.services.validation import (
    validate_data_integrity,
    validate_dataset_codes,
    validate_hcpcs,
    validate_merge_compatibility,
    validate_modifier,
    validate_modifier_criteria,
)


@pytest.mark.parametrize("code", ["99213", "99213-25", "j1100-xu", 99213])
def test_valid_hcpcs(code):
    result = validate_hcpcs(code)
    assert result.is_valid
    assert result.warnings == []


def test_hcpcs_required():
    assert validate_hcpcs("").errors == ["HCPCS code is required"]
    assert validate_hcpcs(None).errors == ["HCPCS code is required"]


def test_hcpcs_length_errors():
    assert "HCPCS code must be at least 5 characters" in validate_hcpcs("123").errors
    assert "HCPCS code must be no more than 8 characters" in validate_hcpcs("123456789").errors


def test_hcpcs_unusual_format_is_warning_only():
    result = validate_hcpcs("1234567")
    assert result.is_valid
    assert result.warnings == ["HCPCS code format may be invalid"]


def test_modifier_rules():
    assert validate_modifier("").is_valid
    assert validate_modifier("25").warnings == []
    assert not validate_modifier("255").is_valid
    assert validate_modifier("-5").warnings == ["Modifier format may be invalid"]


def test_modifier_criteria_warning_when_nothing_selected():
    assert validate_modifier_criteria(ModifierCriteria()).warnings
    assert validate_modifier_criteria(ModifierCriteria(root_25=True)).warnings == []


def test_data_integrity():
    assert validate_data_integrity([]).errors == ["No data to validate"]
    rows = [{"id": 1, "HCPCS": "99213"}, {"id": 1, "HCPCS": ""}]
    result = validate_data_integrity(rows)
    assert result.errors == ["Duplicate row IDs found"]
    assert result.warnings == ["1 empty rows found"]


def test_merge_compatibility():
    result = validate_merge_compatibility(
        [{"id": 0}], [], ["HCPCS", "Description"], ["Charge"]
    )
    assert "Client data is empty" in result.errors
    assert "Client data appears to be missing HCPCS/code column" in result.errors
    assert "Master data appears to be missing HCPCS/code column" not in result.errors
    assert result.warnings == ["Column count mismatch: Master has 2, Client has 1"]


def test_validate_dataset_codes_reports_only_rows_with_findings():
    rows = [
        {"id": 0, "HCPCS": "99213", "Mod": "25"},
        {"id": 1, "HCPCS": "12", "Mod": ""},
        {"id": 2, "HCPCS": "99213", "Mod": "ABC"},
    ]
    findings = dict(validate_dataset_codes(rows, "HCPCS", "Mod"))
    assert set(findings) == {1, 2}
    assert not findings[1].is_valid
    assert "Modifier must be 1-2 characters" in findings[2].errors
