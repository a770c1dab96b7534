"""
YAML descriptor parser.

Accepts the flat form::

    buildInputs:
      - bash
      - pkgs.openssl

or the list wrapped under its invocation::

    mkShell:
      buildInputs:
        - bash
        - name: openssl
          version: ">=3"
          channel: pkgs
      shellHook: echo hello

JSON files are parsed the same way (JSON is valid YAML).
"""

from __future__ import annotations

import datetime
import logging
from typing import Any

import yaml

from shellenv.core.config.errors import MalformedDescriptor
from shellenv.core.parsers.base import ParsedDescriptor, RequirementEntry, split_attribute_path

logger = logging.getLogger(__name__)

DEFAULT_INVOCATION = "mkShell"

_ENTRY_KEYS = {"name", "version", "channel"}


def _node_for(node: yaml.Node | None, key: str) -> yaml.Node | None:
    """Value node for ``key`` in a mapping node."""
    if not isinstance(node, yaml.MappingNode):
        return None
    for key_node, value_node in node.value:
        if key_node.value == key:
            return value_node
    return None


def _line(node: yaml.Node | None) -> int | None:
    return node.start_mark.line + 1 if node is not None else None


def _plain(value: Any) -> Any:
    """Reduce a loaded YAML value to str, number, bool, None, list and dict.

    Timestamps become ISO strings and sets become sorted lists. Any
    other tagged scalar (binary) falls back to its string form.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, set):
        return sorted((_plain(v) for v in value), key=str)
    return str(value)


def _entry(item: Any, line: int | None, field: str) -> RequirementEntry:
    if isinstance(item, str):
        channel, identifier = split_attribute_path(item, line, field)
        return RequirementEntry(identifier=identifier, channel=channel, line=line)

    if isinstance(item, dict):
        name = item.get("name")
        if not isinstance(name, str):
            raise MalformedDescriptor(
                "List entry mapping needs a string 'name'",
                line=line,
                field=field,
            )
        unknown = set(item) - _ENTRY_KEYS
        if unknown:
            logger.debug("Ignoring entry keys %s on line %s", sorted(unknown), line)
        channel, identifier = split_attribute_path(name, line, field)
        version = item.get("version")
        return RequirementEntry(
            identifier=identifier,
            channel=item.get("channel") or channel,
            version=str(version) if version is not None else None,
            line=line,
        )

    raise MalformedDescriptor(
        f"Unsupported list entry {item!r}",
        line=line,
        field=field,
    )


def parse_yaml(source: str, list_field: str = "buildInputs") -> ParsedDescriptor:
    """Parse YAML (or JSON) source into requirement entries.

    Raises:
        MalformedDescriptor: On invalid YAML, a non-mapping document,
            or a missing / non-list field.
    """
    try:
        data = yaml.safe_load(source)
        root = yaml.compose(source, Loader=yaml.SafeLoader)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        raise MalformedDescriptor(
            f"Invalid YAML: {getattr(e, 'problem', None) or e}",
            line=mark.line + 1 if mark is not None else None,
        ) from e

    if not isinstance(data, dict):
        raise MalformedDescriptor(
            f"Expected a YAML mapping, got {type(data).__name__}",
            line=1,
        )

    result = ParsedDescriptor(
        format="yaml", list_field=list_field, invocation=DEFAULT_INVOCATION
    )
    body, body_node = data, root

    if list_field not in data:
        # Wrapped form: find the invocation key holding the list field
        for key, value in data.items():
            if isinstance(value, dict) and list_field in value:
                result.invocation = str(key)
                body, body_node = value, _node_for(root, str(key))
                for outer_key, outer_value in data.items():
                    if outer_key != key:
                        result.extra[str(outer_key)] = _plain(outer_value)
                break
        else:
            raise MalformedDescriptor(f"No '{list_field}' list", field=list_field)

    for key, value in body.items():
        if key != list_field:
            result.extra[str(key)] = _plain(value)

    items = body[list_field]
    list_node = _node_for(body_node, list_field)
    result.list_line = _line(list_node)

    if not isinstance(items, list):
        raise MalformedDescriptor(
            "Expected a list",
            line=result.list_line,
            field=list_field,
        )

    item_nodes = list_node.value if isinstance(list_node, yaml.SequenceNode) else []
    for index, item in enumerate(items):
        line = _line(item_nodes[index]) if index < len(item_nodes) else None
        result.entries.append(_entry(item, line, list_field))

    return result
