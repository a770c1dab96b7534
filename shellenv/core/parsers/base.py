"""
Shared parser types.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from shellenv.core.config.errors import MalformedDescriptor

# An attribute path: `bash`, `pkgs.pkg-config`, `pkgs.llvmPackages_15.lldb`
_ATTR_PATH_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_'-]*(\.[A-Za-z_][A-Za-z0-9_'-]*)*$")


@dataclass
class RequirementEntry:
    """One list element as found in the file, before validation."""

    identifier: str
    channel: str | None = None
    version: str | None = None
    line: int | None = None


@dataclass
class ParsedDescriptor:
    """Everything a parser extracted from one descriptor file."""

    entries: list[RequirementEntry] = field(default_factory=list)
    format: str = "nix"
    invocation: str = "mkShell"
    list_field: str = "buildInputs"
    list_line: int | None = None
    arguments: str | None = None
    scope: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


def is_attribute_path(text: str) -> bool:
    return bool(_ATTR_PATH_RE.match(text))


def split_attribute_path(
    text: str,
    line: int | None = None,
    field_name: str | None = None,
) -> tuple[str | None, str]:
    """Split ``pkgs.openssl`` into ``("pkgs", "openssl")``.

    A bare name has no channel. Anything that is not a plain
    attribute path is rejected.
    """
    text = text.strip()
    if not is_attribute_path(text):
        raise MalformedDescriptor(
            f"Expected a package attribute path, got {text!r}",
            line=line,
            field=field_name,
        )
    channel, _, identifier = text.rpartition(".")
    return (channel or None), identifier
