"""
Environment models — the tools a development shell requires.

An ``EnvironmentDescriptor`` is built once from a descriptor file and
never changes afterwards. Materialization (resolving, fetching and
exposing each tool) happens elsewhere; these models only describe
what was asked for.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ToolRequirement(BaseModel):
    """A single named tool the shell needs.

    ``channel`` is the package collection the tool comes from
    (``pkgs`` in ``pkgs.openssl``). ``version`` is a free-form
    constraint passed through to the resolver untouched.
    """

    model_config = ConfigDict(frozen=True)

    identifier: str
    version: str | None = None
    channel: str | None = None

    @field_validator("identifier")
    @classmethod
    def _identifier_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("identifier must not be empty")
        return value

    @field_validator("version")
    @classmethod
    def _version_single_line(cls, value: str | None) -> str | None:
        if value is not None and any(ord(ch) < 0x20 or ord(ch) == 0x7f for ch in value):
            raise ValueError("version must not contain control characters")
        return value

    @property
    def qualified_name(self) -> str:
        """Identifier prefixed with its channel, e.g. ``pkgs.bash``."""
        if self.channel:
            return f"{self.channel}.{self.identifier}"
        return self.identifier

    def __str__(self) -> str:
        if self.version:
            return f"{self.qualified_name} ({self.version})"
        return self.qualified_name


class EnvironmentDescriptor(BaseModel):
    """The validated, ordered set of tool requirements for one shell.

    Order follows the source file. It carries no meaning for the
    environment itself but keeps output deterministic.
    """

    model_config = ConfigDict(frozen=True)

    requirements: tuple[ToolRequirement, ...] = ()
    source: str | None = None          # path the descriptor was read from
    source_format: Literal["nix", "yaml"] | None = None
    invocation: str = "mkShell"        # collection invocation, e.g. mkShell
    list_field: str = "buildInputs"    # field the requirements came from
    arguments: str | None = None       # Nix function header, verbatim
    scope: str | None = None           # `with <scope>;` before the invocation
    extra: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _identifiers_unique(self) -> EnvironmentDescriptor:
        seen: set[str] = set()
        for req in self.requirements:
            if req.identifier in seen:
                raise ValueError(f"duplicate requirement: {req.identifier}")
            seen.add(req.identifier)
        return self

    @property
    def identifiers(self) -> list[str]:
        """Requirement identifiers in file order."""
        return [r.identifier for r in self.requirements]

    def get(self, identifier: str) -> ToolRequirement | None:
        """Look up a requirement by identifier."""
        for req in self.requirements:
            if req.identifier == identifier:
                return req
        return None

    def __len__(self) -> int:
        return len(self.requirements)

    def __iter__(self) -> Iterator[ToolRequirement]:  # type: ignore[override]
        return iter(self.requirements)

    def __contains__(self, identifier: object) -> bool:
        return any(r.identifier == identifier for r in self.requirements)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "invocation": self.invocation,
            "list_field": self.list_field,
            "count": len(self.requirements),
            "requirements": [
                r.model_dump(exclude_none=True) for r in self.requirements
            ],
            "extra": self.extra,
        }
