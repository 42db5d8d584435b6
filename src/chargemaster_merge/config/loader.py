from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.criteria import ModifierCriteria

"""Reconcile configuration loader.

Responsibilities:
- Load the YAML config (default config/reconcile.yml)
- Validate it against the bundled JSON schema (config/schema.json)
- Apply defaults (first sheet when no sheet is named, ./output for exports)
"""

SCHEMA_PATH = Path(__file__).with_name("schema.json")
DEFAULT_CONFIG_PATH = Path("config/reconcile.yml")
DEFAULT_OUTPUT_DIRECTORY = "./output"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ReconcileConfig:
    master_file: str
    client_directory: str
    master_sheet: str | None = None
    client_sheet: str | None = None
    output_directory: str = DEFAULT_OUTPUT_DIRECTORY
    criteria: ModifierCriteria = field(default_factory=ModifierCriteria)


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: the schema file is missing or not valid JSON, or the
            config data violates the schema (missing keys, wrong types,
            unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> ReconcileConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    return ReconcileConfig(
        master_file=data["master_file"],
        client_directory=data["client_directory"],
        master_sheet=data.get("master_sheet"),
        client_sheet=data.get("client_sheet"),
        output_directory=data.get("output_directory", DEFAULT_OUTPUT_DIRECTORY),
        criteria=ModifierCriteria.from_mapping(data.get("modifier_criteria")),
    )
