"""
Descriptor writer — serialize an EnvironmentDescriptor back to a file format.

Reloading the output gives the same identifiers in the same order.
Versions survive the YAML form only; Nix has no syntax for them, so
they are written as trailing comments.
"""

from __future__ import annotations

import datetime
import json
import re
from typing import Any

import yaml

from shellenv.core.models.environment import EnvironmentDescriptor

DEFAULT_ARGUMENTS = "{ pkgs ? import <nixpkgs> { } }"

_NIX_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_'-]*$")


def _nix_string(value: str) -> str:
    if "\n" in value:
        body = value.replace("''", "'''").replace("${", "''${")
        indented = "\n".join(f"    {line}" if line else "" for line in body.split("\n"))
        return f"''\n{indented}\n  ''"
    escaped = json.dumps(value)[1:-1].replace("${", "\\${")
    return f'"{escaped}"'


def nix_literal(value: Any) -> str:
    """Render a plain Python value as a Nix expression."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return _nix_string(value)
    if isinstance(value, (datetime.date, datetime.datetime)):
        return _nix_string(value.isoformat())
    if isinstance(value, (list, tuple)):
        return "[ " + " ".join(nix_literal(v) for v in value) + " ]" if value else "[ ]"
    if isinstance(value, dict):
        bindings = " ".join(
            f"{_nix_key(str(k))} = {nix_literal(v)};" for k, v in value.items()
        )
        return f"{{ {bindings} }}" if bindings else "{ }"
    raise TypeError(f"Cannot render {type(value).__name__} as Nix")


def _nix_key(key: str) -> str:
    return key if _NIX_IDENT_RE.match(key) else json.dumps(key)


def dump_nix(descriptor: EnvironmentDescriptor) -> str:
    """Render the descriptor as a shell.nix expression."""
    lines = [f"{descriptor.arguments or DEFAULT_ARGUMENTS}:", ""]
    if descriptor.scope:
        lines += [f"with {descriptor.scope};", ""]

    lines.append(f"{descriptor.invocation} {{")
    if descriptor.requirements:
        lines.append(f"  {descriptor.list_field} = [")
        for req in descriptor.requirements:
            comment = f"  # {req.version}" if req.version else ""
            lines.append(f"    {req.qualified_name}{comment}")
        lines.append("  ];")
    else:
        lines.append(f"  {descriptor.list_field} = [ ];")

    for key, value in descriptor.extra.items():
        # Values read from Nix are kept as source text
        if descriptor.source_format == "nix" and isinstance(value, str):
            rendered = value
        else:
            rendered = nix_literal(value)
        lines.append(f"  {_nix_key(key)} = {rendered};")

    lines.append("}")
    return "\n".join(lines) + "\n"


def dump_yaml(descriptor: EnvironmentDescriptor) -> str:
    """Render the descriptor in the wrapped YAML form."""
    entries: list[Any] = []
    for req in descriptor.requirements:
        if req.version:
            entry: dict[str, str] = {"name": req.identifier}
            if req.channel:
                entry["channel"] = req.channel
            entry["version"] = req.version
            entries.append(entry)
        else:
            entries.append(req.qualified_name)

    body: dict[str, Any] = {descriptor.list_field: entries}
    body.update(descriptor.extra)
    return yaml.safe_dump(
        {descriptor.invocation: body},
        sort_keys=False,
        default_flow_style=False,
    )


def dump(descriptor: EnvironmentDescriptor, fmt: str) -> str:
    """Render in ``fmt`` ("nix" or "yaml")."""
    if fmt == "nix":
        return dump_nix(descriptor)
    if fmt == "yaml":
        return dump_yaml(descriptor)
    raise ValueError(f"Unknown descriptor format: {fmt}")
