"""
Descriptor parsers — structural extraction of the tool list.

Each parser turns raw file text into a ``ParsedDescriptor``: the
requirement entries (with line numbers, before validation) plus the
surrounding declarations the loader preserves.
"""

from shellenv.core.parsers.base import ParsedDescriptor, RequirementEntry, split_attribute_path
from shellenv.core.parsers.nix import parse_nix
from shellenv.core.parsers.yaml_format import parse_yaml

__all__ = [
    "ParsedDescriptor",
    "RequirementEntry",
    "parse_nix",
    "parse_yaml",
    "split_attribute_path",
]
