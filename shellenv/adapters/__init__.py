"""
Resolvers — the narrow interface to external package managers.

    from shellenv.adapters import Resolver, ResolverRegistry, default_registry
"""

from shellenv.adapters.base import Resolver
from shellenv.adapters.mock import MockResolver
from shellenv.adapters.nix import NixResolver
from shellenv.adapters.path import PathResolver
from shellenv.adapters.registry import ResolutionReport, ResolverRegistry, default_registry

__all__ = [
    "MockResolver",
    "NixResolver",
    "PathResolver",
    "ResolutionReport",
    "Resolver",
    "ResolverRegistry",
    "default_registry",
]
