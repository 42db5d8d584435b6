from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

"""Modifier equivalence policy supplied once per reconciliation run."""

__all__ = [
    "ModifierCriteria",
]

# camelCase keys written by the browser front end and older saved sessions
_CAMEL_ALIASES = {
    "root00": "root_00",
    "root25": "root_25",
    "root50": "root_50",
    "root59": "root_59",
    "rootXU": "root_xu",
    "root76": "root_76",
    "ignoreTrauma": "ignore_trauma",
}


@dataclass(frozen=True)
class ModifierCriteria:
    """Which modifiers collapse onto their root code when matching.

    Each ``root_NN`` flag makes a code carrying modifier NN compare equal to the
    bare root; ``root_00`` also covers codes with no modifier at all.
    ``ignore_trauma`` drops trauma-team rows before matching.
    """
    root_00: bool = False
    root_25: bool = False
    root_50: bool = False
    root_59: bool = False
    root_xu: bool = False
    root_76: bool = False
    ignore_trauma: bool = False

    @property
    def collapsed_modifiers(self) -> dict[str, bool]:
        """Specific modifier code -> flag (``root_00`` is handled separately)."""
        return {
            "25": self.root_25,
            "50": self.root_50,
            "59": self.root_59,
            "XU": self.root_xu,
            "76": self.root_76,
        }

    def any_enabled(self) -> bool:
        return any(getattr(self, f.name) for f in fields(self))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> ModifierCriteria:
        """Build criteria from a config/JSON mapping (snake_case or camelCase keys)."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, bool] = {}
        for key, value in data.items():
            name = _CAMEL_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"unknown modifier criteria flag: {key}")
            kwargs[name] = bool(value)
        return cls(**kwargs)

    def to_dict(self) -> dict[str, bool]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
