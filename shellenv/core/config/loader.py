"""
Descriptor loader — reads a shell descriptor into an EnvironmentDescriptor.

This is the primary entry point. It reads the file once, hands the text
to the parser for its format, applies the duplicate / empty policy from
``LoaderOptions``, and returns an immutable descriptor. It never invokes
a package manager or a shell.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from shellenv.core.config.errors import (
    DescriptorError,
    DuplicateRequirement,
    EmptyDescriptor,
    MalformedDescriptor,
)
from shellenv.core.config.options import LoaderOptions
from shellenv.core.models.environment import EnvironmentDescriptor, ToolRequirement
from shellenv.core.parsers.base import ParsedDescriptor, RequirementEntry
from shellenv.core.parsers.nix import parse_nix
from shellenv.core.parsers.yaml_format import parse_yaml

logger = logging.getLogger(__name__)

__all__ = [
    "DescriptorError",
    "DuplicateRequirement",
    "EmptyDescriptor",
    "MalformedDescriptor",
    "build_descriptor",
    "load",
    "load_with_warnings",
    "parse_source",
]


def parse_source(source: str, fmt: str, list_field: str) -> ParsedDescriptor:
    """Run the parser for ``fmt`` ("nix" or "yaml")."""
    if fmt == "yaml":
        return parse_yaml(source, list_field)
    if fmt == "nix":
        return parse_nix(source, list_field)
    raise ValueError(f"Unknown descriptor format: {fmt}")


def _unique(
    entries: list[RequirementEntry],
    options: LoaderOptions,
    warnings: list[str],
) -> list[RequirementEntry]:
    """Drop (or reject) repeated identifiers, keeping the first occurrence."""
    first_seen: dict[str, RequirementEntry] = {}
    unique: list[RequirementEntry] = []
    for entry in entries:
        first = first_seen.get(entry.identifier)
        if first is None:
            first_seen[entry.identifier] = entry
            unique.append(entry)
            continue
        if options.strict:
            raise DuplicateRequirement(entry.identifier, first.line, entry.line)
        warnings.append(str(DuplicateRequirement(entry.identifier, first.line, entry.line)))
    return unique


def build_descriptor(
    parsed: ParsedDescriptor,
    options: LoaderOptions | None = None,
    source: str | None = None,
) -> tuple[EnvironmentDescriptor, list[str]]:
    """Validate parsed entries and build the descriptor.

    Returns:
        (descriptor, warnings). Warnings are recovered problems:
        dropped duplicates in dedupe mode, an empty list in warn mode.

    Raises:
        DuplicateRequirement: Repeated identifier in strict mode.
        EmptyDescriptor: No entries and ``on_empty="error"``.
        MalformedDescriptor: An entry fails model validation.
    """
    options = options or LoaderOptions()
    warnings: list[str] = []

    entries = _unique(parsed.entries, options, warnings)

    if not entries:
        message = f"No tools listed in '{parsed.list_field}'"
        if options.on_empty == "error":
            raise EmptyDescriptor(message)
        warnings.append(message)

    try:
        requirements = tuple(
            ToolRequirement(
                identifier=e.identifier,
                version=e.version,
                channel=e.channel,
            )
            for e in entries
        )
        descriptor = EnvironmentDescriptor(
            requirements=requirements,
            source=source,
            source_format=parsed.format,
            invocation=parsed.invocation,
            list_field=parsed.list_field,
            arguments=parsed.arguments,
            scope=parsed.scope,
            extra=parsed.extra,
        )
    except ValidationError as e:
        raise MalformedDescriptor(
            f"Invalid requirement: {e.errors()[0]['msg']}",
            line=parsed.list_line,
            field=parsed.list_field,
        ) from e

    return descriptor, warnings


def load_with_warnings(
    path: Path | str,
    options: LoaderOptions | None = None,
) -> tuple[EnvironmentDescriptor, list[str]]:
    """Load a descriptor and return it with any recovered warnings.

    Raises:
        OSError: If the file is missing or unreadable.
        DescriptorError: If the content fails validation.
    """
    path = Path(path)
    options = options or LoaderOptions()
    fmt = options.format_for(path)

    logger.debug("Loading %s descriptor from %s", fmt, path)

    with path.open("rb") as fh:
        raw = fh.read()

    try:
        source = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedDescriptor(
            "Descriptor is not valid UTF-8",
            line=raw.count(b"\n", 0, e.start) + 1,
        ) from e

    parsed = parse_source(source, fmt, options.list_field)
    descriptor, warnings = build_descriptor(parsed, options, source=str(path))

    for warning in warnings:
        logger.warning("%s: %s", path, warning)

    logger.info(
        "Loaded %d requirements from %s", len(descriptor.requirements), path
    )
    return descriptor, warnings


def load(
    path: Path | str,
    options: LoaderOptions | None = None,
) -> EnvironmentDescriptor:
    """Load and validate a shell descriptor.

    Args:
        path: Path to the descriptor (shell.nix, devshell.yml, ...).
        options: Validation policy. Defaults to strict.

    Returns:
        Immutable EnvironmentDescriptor, requirements in file order.

    Raises:
        OSError: If the file is missing or unreadable.
        MalformedDescriptor: If the file is not UTF-8, or the list
            field is absent or not a list.
        DuplicateRequirement: If an identifier repeats (strict mode).
        EmptyDescriptor: If no tools are listed (unless configured to warn).
    """
    descriptor, _ = load_with_warnings(path, options)
    return descriptor
