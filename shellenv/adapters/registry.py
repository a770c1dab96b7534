"""
Resolver registry — central dispatch for resolving a descriptor.

The CLI never talks to resolvers directly — always through the
registry, which also guarantees a result per requirement even when a
resolver misbehaves.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from shellenv.adapters.base import Resolver
from shellenv.core.models.artifact import ArtifactPath
from shellenv.core.models.environment import EnvironmentDescriptor, ToolRequirement

logger = logging.getLogger(__name__)


@dataclass
class ResolutionReport:
    """Artifacts for every requirement of one descriptor, in order."""

    resolver: str
    artifacts: list[ArtifactPath] = field(default_factory=list)

    @property
    def resolved(self) -> int:
        return sum(1 for a in self.artifacts if a.ok)

    @property
    def failed(self) -> int:
        return sum(1 for a in self.artifacts if a.failed)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "resolver": self.resolver,
            "total": len(self.artifacts),
            "resolved": self.resolved,
            "failed": self.failed,
            "artifacts": [a.model_dump() for a in self.artifacts],
        }


class ResolverRegistry:
    """Register resolvers by name and resolve requirements through them."""

    def __init__(self) -> None:
        self._resolvers: dict[str, Resolver] = {}

    def register(self, resolver: Resolver) -> None:
        name = resolver.name
        if name in self._resolvers:
            logger.warning("Overwriting existing resolver: %s", name)
        self._resolvers[name] = resolver
        logger.debug("Registered resolver: %s", name)

    def get(self, name: str) -> Resolver | None:
        """Look up a resolver by name."""
        return self._resolvers.get(name)

    def list_resolvers(self) -> list[str]:
        return list(self._resolvers.keys())

    def resolver_status(self) -> dict[str, dict[str, Any]]:
        """Availability of every registered resolver."""
        status = {}
        for name, resolver in self._resolvers.items():
            try:
                available = resolver.is_available()
            except Exception:
                available = False
            status[name] = {
                "name": name,
                "available": available,
                "type": resolver.__class__.__name__,
            }
        return status

    def resolve(self, requirement: ToolRequirement, resolver_name: str) -> ArtifactPath:
        """Resolve one requirement. Never raises."""
        resolver = self._resolvers.get(resolver_name)
        if resolver is None:
            return ArtifactPath.missing(
                identifier=requirement.identifier,
                resolver=resolver_name,
                error=f"No resolver registered for '{resolver_name}'",
            )

        try:
            return resolver.resolve(requirement)
        except Exception as e:
            # Resolvers should never raise
            logger.error("Resolver %s raised for %s: %s", resolver_name, requirement.identifier, e)
            return ArtifactPath.missing(
                identifier=requirement.identifier,
                resolver=resolver_name,
                error=f"Unexpected error: {e}",
            )

    def resolve_all(
        self,
        descriptor: EnvironmentDescriptor,
        resolver_name: str,
    ) -> ResolutionReport:
        """Resolve every requirement of a descriptor, in file order."""
        report = ResolutionReport(resolver=resolver_name)
        for requirement in descriptor.requirements:
            artifact = self.resolve(requirement, resolver_name)
            if artifact.failed:
                logger.info("Could not resolve %s: %s", requirement.identifier, artifact.error)
            report.artifacts.append(artifact)
        return report


def default_registry() -> ResolverRegistry:
    """Registry with the built-in resolvers."""
    from shellenv.adapters.mock import MockResolver
    from shellenv.adapters.nix import NixResolver
    from shellenv.adapters.path import PathResolver

    registry = ResolverRegistry()
    registry.register(PathResolver())
    registry.register(NixResolver())
    registry.register(MockResolver())
    return registry
