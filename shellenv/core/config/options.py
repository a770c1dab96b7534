"""
Loader options — how strictly a descriptor is validated.

Defaults are strict: duplicates and empty tool lists are fatal.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator

DEFAULT_LIST_FIELD = "buildInputs"

_YAML_SUFFIXES = (".yml", ".yaml", ".json")


class LoaderOptions(BaseModel):
    """Validation policy for ``load()``."""

    model_config = ConfigDict(frozen=True)

    on_duplicate: Literal["error", "dedupe"] = "error"
    on_empty: Literal["error", "warn"] = "error"
    list_field: str = DEFAULT_LIST_FIELD
    format: Literal["auto", "nix", "yaml"] = "auto"

    @field_validator("list_field")
    @classmethod
    def _list_field_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("list_field must not be empty")
        return value.strip()

    @property
    def strict(self) -> bool:
        return self.on_duplicate == "error"

    def format_for(self, path: Path) -> Literal["nix", "yaml"]:
        """Pick the descriptor format for a path."""
        if self.format != "auto":
            return self.format
        if path.suffix.lower() in _YAML_SUFFIXES:
            return "yaml"
        return "nix"
