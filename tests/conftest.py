# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pandas as pd
import pytest

from chargemaster_merge.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "data" / "clients").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _fresh_logger():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """master_file: ./data/master.xlsx
client_directory: ./data/clients
output_directory: ./output
modifier_criteria:
  root_25: true
  ignore_trauma: true
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "reconcile.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write a workbook whose first row in each sheet is the header."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def workbook_factory():
    return make_workbook
